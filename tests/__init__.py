"""Test package for FrameLink Support.

Structure:
    - unit/: Individual function and class tests
    - integration/: API endpoint tests through the real FastAPI app

OpenAI is replaced by a scripted gateway and MongoDB by mongomock, so no
external service is needed. Leverages pytest with pytest-check for soft
assertions.
"""
