"""Integration tests for the API endpoints working together as a system.

Coverage:
    - Contact Q&A over SSE and in sync mode, with fallbacks and persistence
    - Document upload, listing and deletion
    - Health check, CORS and error pages

Requests go through ASGITransport to the real application with mongomock
storage and a scripted gateway in place of OpenAI.
"""
