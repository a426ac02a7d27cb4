"""FastAPI endpoints for FrameLink Support.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for streamed contact answers.

Endpoints:
    - GET /health: Service health status
    - POST /api/contact: Ask a support question
    - POST /api/upload: Upload a document for retrieval
    - GET /api/upload: List uploaded documents
    - DELETE /api/upload: Remove an uploaded document
"""

from framelink.api.app import app, create_app

__all__ = ["app", "create_app"]
