"""Integration tests for the contact Q&A endpoint.

Runs the real FastAPI app over ASGITransport with a mongomock database and a
scripted gateway in place of OpenAI, and checks the SSE protocol, the
synchronous JSON mode, fallbacks and persistence.
"""

import json
import re
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_check as check
from bson import ObjectId
from fastapi import FastAPI
from httpx import AsyncClient, Response
from openai import APIConnectionError, InternalServerError
from pymongo.errors import ServerSelectionTimeoutError

import framelink.api.dependencies as dependencies
from framelink.api.dependencies import get_contact_repository, get_gateway
from framelink.assistant.fallback import DEFAULT_ANSWER, PASSWORD_RESET_ANSWER, PRICING_ANSWER
from framelink.assistant.gateway import ServiceNotConfiguredError
from framelink.config import AppSettings, get_settings
from framelink.models.schemas import Citation
from framelink.storage.repositories import ContactRepository
from tests.conftest import FakeGateway, make_status_error


async def read_events(response: Response) -> list[dict[str, Any]]:
    """Collect the JSON payload of every SSE data line."""
    return [
        json.loads(line.removeprefix("data: "))
        async for line in response.aiter_lines()
        if line.startswith("data: ")
    ]


def connection_error() -> APIConnectionError:
    return APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/threads"))


class TestStreamingContact:
    """POST /api/contact in stream mode."""

    async def test_returns_event_stream(self, async_client: AsyncClient) -> None:
        """Streaming answer is served as text/event-stream."""
        async with async_client.stream(
            "POST", "/api/contact", json={"question": "How do I book?"}
        ) as response:
            assert response.status_code == 200
            assert "text/event-stream" in response.headers["content-type"]

    async def test_deltas_then_complete(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        """Every delta is relayed in order and the stream ends with complete."""
        async with async_client.stream(
            "POST", "/api/contact", json={"question": "How do I book?"}
        ) as response:
            events = await read_events(response)

        types = [event["type"] for event in events]
        assert types == ["delta"] * len(fake_gateway.deltas) + ["complete"]
        assert [e["content"] for e in events[:-1]] == fake_gateway.deltas

    async def test_persisted_answer_equals_streamed_deltas(
        self, async_client: AsyncClient, mongo_db: Any
    ) -> None:
        """The stored answer is exactly the concatenation of the delta frames."""
        async with async_client.stream(
            "POST",
            "/api/contact",
            json={"question": "What are your opening hours?", "username": "Ana"},
        ) as response:
            events = await read_events(response)

        streamed = "".join(e["content"] for e in events if e["type"] == "delta")
        records = list(mongo_db["contacts"].find())

        assert len(records) == 1
        record = records[0]
        check.equal(record["answer"], streamed)
        check.equal(record["question"], "What are your opening hours?")
        check.equal(record["username"], "Ana")
        check.is_true(re.fullmatch(r"\d{4}-\d{2}-\d{2}", record["date"]))
        check.is_in("created_at", record)

    async def test_uploaded_files_are_retrieval_context(
        self,
        async_client: AsyncClient,
        fake_gateway: FakeGateway,
        seed_file: Callable[..., str],
    ) -> None:
        """Every uploaded file id is attached to the question."""
        seed_file("file-aaa")
        seed_file("file-bbb", display_name="prices.csv")

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "What does the handbook say?"}
        ) as response:
            await read_events(response)

        question, file_ids = fake_gateway.asked[0]
        assert question == "What does the handbook say?"
        assert sorted(file_ids) == ["file-aaa", "file-bbb"]

    async def test_complete_carries_citations_with_display_names(
        self,
        async_client: AsyncClient,
        fake_gateway: FakeGateway,
        seed_file: Callable[..., str],
        mongo_db: Any,
    ) -> None:
        """Citations are enriched with the cached display name of the file."""
        seed_file("file-aaa", display_name="handbook.pdf")
        fake_gateway.citations = [
            Citation(file_id="file-aaa", text="【4:0†source】"),
            Citation(file_id="file-unknown", text="【4:1†source】"),
        ]

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "Where is the clinic?"}
        ) as response:
            events = await read_events(response)

        citations = events[-1]["citations"]
        check.equal(citations[0]["display_name"], "handbook.pdf")
        check.is_none(citations[1]["display_name"])
        stored = mongo_db["contacts"].find_one()
        check.equal(stored["citations"][0]["file_id"], "file-aaa")

    async def test_password_question_falls_back_on_upstream_failure(
        self, async_client: AsyncClient, fake_gateway: FakeGateway, mongo_db: Any
    ) -> None:
        """An upstream failure yields exactly one fallback frame with the canned answer."""
        fake_gateway.error = connection_error()

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "I forgot my Password"}
        ) as response:
            assert response.status_code == 200
            events = await read_events(response)

        assert events == [{"type": "fallback", "content": PASSWORD_RESET_ANSWER}]
        assert mongo_db["contacts"].find_one()["answer"] == PASSWORD_RESET_ANSWER

    async def test_failure_mid_stream_ends_with_fallback(
        self, async_client: AsyncClient, fake_gateway: FakeGateway, mongo_db: Any
    ) -> None:
        """Deltas already sent are followed by the fallback, never by complete."""
        fake_gateway.error = make_status_error(InternalServerError, 500)
        fake_gateway.fail_after = 1

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "What is your pricing?"}
        ) as response:
            events = await read_events(response)

        assert [e["type"] for e in events] == ["delta", "fallback"]
        assert events[-1]["content"] == PRICING_ANSWER
        assert mongo_db["contacts"].find_one()["answer"] == PRICING_ANSWER

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("No final run object found"),
            httpx.ReadError("connection reset by peer"),
        ],
    )
    async def test_stream_breaking_mid_answer_falls_back(
        self,
        async_client: AsyncClient,
        fake_gateway: FakeGateway,
        mongo_db: Any,
        error: Exception,
    ) -> None:
        """Stream-state and transport failures after a delta still end in one fallback."""
        fake_gateway.error = error
        fake_gateway.fail_after = 1

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "I forgot my password"}
        ) as response:
            events = await read_events(response)

        assert events == [
            {"type": "delta", "content": fake_gateway.deltas[0]},
            {"type": "fallback", "content": PASSWORD_RESET_ANSWER},
        ]
        records = list(mongo_db["contacts"].find())
        assert len(records) == 1
        assert records[0]["answer"] == PASSWORD_RESET_ANSWER

    async def test_failed_event_is_not_sent(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        """The internal failure reason never reaches the client."""
        fake_gateway.error = connection_error()

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "Hello?"}
        ) as response:
            events = await read_events(response)

        assert all(e["type"] != "failed" for e in events)
        assert events[-1]["content"] == DEFAULT_ANSWER

    async def test_persistence_failure_does_not_break_stream(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        """A database error after the run is logged; the client still gets complete."""
        collection = MagicMock()
        collection.insert_one.side_effect = ServerSelectionTimeoutError("no primary")
        app.dependency_overrides[get_contact_repository] = lambda: ContactRepository(collection)

        async with async_client.stream(
            "POST", "/api/contact", json={"question": "How do I book?"}
        ) as response:
            events = await read_events(response)

        assert events[-1]["type"] == "complete"


class TestContactValidation:
    """Request validation and configuration errors."""

    @pytest.mark.parametrize(
        "body",
        [{"question": ""}, {"question": "   "}, {}, {"username": "Ana"}, {"question": None}],
    )
    async def test_blank_question_returns_400(
        self, async_client: AsyncClient, mongo_db: Any, body: dict[str, Any]
    ) -> None:
        response = await async_client.post("/api/contact", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Question is required"
        assert mongo_db["contacts"].count_documents({}) == 0

    async def test_blank_question_checked_before_configuration(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        """A blank question is a 400 even when the assistant is not configured."""
        app.dependency_overrides.pop(get_gateway)

        response = await async_client.post("/api/contact", json={"question": ""})

        assert response.status_code == 400

    async def test_missing_api_key_returns_503(
        self, app: FastAPI, async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def not_configured() -> None:
            raise ServiceNotConfiguredError("OpenAI API key not configured")

        app.dependency_overrides.pop(get_gateway)
        monkeypatch.setattr(dependencies, "get_assistant_gateway", not_configured)

        response = await async_client.post("/api/contact", json={"question": "Hi"})

        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]

    async def test_invalid_json_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/contact",
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/contact")

        assert response.status_code == 405


class TestSyncContact:
    """POST /api/contact in sync mode."""

    @pytest.fixture(autouse=True)
    def sync_mode(self, app: FastAPI, settings: AppSettings) -> None:
        sync_settings = settings.model_copy(update={"contact_response_mode": "sync"})
        app.dependency_overrides[get_settings] = lambda: sync_settings

    async def test_returns_answer_json(
        self, async_client: AsyncClient, fake_gateway: FakeGateway, mongo_db: Any
    ) -> None:
        response = await async_client.post(
            "/api/contact", json={"question": "How do I book?", "username": "Rui"}
        )

        assert response.status_code == 201
        data = response.json()
        check.equal(data["answer"], "".join(fake_gateway.deltas))
        check.equal(data["citations"], [])
        check.is_in("answered", data["message"])

        record = mongo_db["contacts"].find_one({"_id": ObjectId(data["id"])})
        check.is_not_none(record)
        check.equal(record["username"], "Rui")

    async def test_upstream_failure_returns_fallback(
        self, async_client: AsyncClient, fake_gateway: FakeGateway, mongo_db: Any
    ) -> None:
        fake_gateway.error = connection_error()

        response = await async_client.post(
            "/api/contact", json={"question": "Reset my password please"}
        )

        assert response.status_code == 201
        assert response.json()["answer"] == PASSWORD_RESET_ANSWER
        assert mongo_db["contacts"].find_one()["answer"] == PASSWORD_RESET_ANSWER

    async def test_database_failure_returns_500(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        collection = MagicMock()
        collection.insert_one.side_effect = ServerSelectionTimeoutError("no primary")
        app.dependency_overrides[get_contact_repository] = lambda: ContactRepository(collection)

        response = await async_client.post("/api/contact", json={"question": "Hi"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
