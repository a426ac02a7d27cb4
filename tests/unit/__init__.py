"""Unit tests for individual components in isolation.

Coverage:
    - assistant/: Gateway, configuration, fallback rules and contact service
    - uploads/: File validation and metadata
    - ui/: API client stream parsing

Uses mocks for the OpenAI SDK and httpx.MockTransport for the API client.
"""
