"""FrameLink Support - contact Q&A and document uploads backed by an OpenAI assistant.

Combines FastAPI for HTTP and streaming, the OpenAI Assistants API for answers
grounded in uploaded documents, MongoDB for records, NiceGUI for the pages,
and Pydantic for data validation.

Components:
    - api: HTTP endpoints and server-sent event responses
    - assistant: OpenAI gateway, fallback answers and the contact service
    - storage: MongoDB connection and repositories
    - uploads: file validation and cached display metadata
    - ui: Web pages for the contact form and the upload utility
    - models: Request/response schemas and stream events
"""

__version__ = "0.1.0"
