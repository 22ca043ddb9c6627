from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.db import get_async_session
from app.main import app
from app.models import Base
from app.services import sms as sms_service


class FakeGateway:
    """Stands in for the TextBee API; records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.body: dict | list | None = None
        self.error: Exception | None = None
        self.failing_numbers: set[str] = set()

    @property
    def sent(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        payload = json.loads(request.content)
        if set(payload["recipients"]) & self.failing_numbers:
            return httpx.Response(400, json={"message": "Recipient rejected"})
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body)

        return httpx.Response(
            self.status_code,
            json={
                "data": {
                    "_id": f"sms-{len(self.requests)}",
                    "status": "pending",
                    "recipients": payload["recipients"],
                    "message": payload["message"],
                    "createdAt": "2026-10-19T00:00:00.000Z",
                }
            },
        )


@pytest.fixture(autouse=True)
def textbee_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEXTBEE_API_KEY", "test-api-key")
    monkeypatch.setenv("TEXTBEE_DEVICE_ID", "device-123")
    monkeypatch.setenv("TEXTBEE_BASE_URL", "https://gateway.test/api/v1")
    monkeypatch.setenv("APP_ENV", "development")


@pytest.fixture()
def gateway(monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    fake = FakeGateway()

    def _client() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))

    monkeypatch.setattr(sms_service, "_gateway_client", _client)
    return fake


@pytest.fixture()
async def async_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    async with sessionmaker() as session:
        yield session

    await engine.dispose()


@pytest.fixture()
async def async_client(
    async_session: AsyncSession,
) -> AsyncGenerator[AsyncClient, None]:
    async def _override_dependency() -> AsyncGenerator[AsyncSession, None]:
        # Requests open their own transaction; close whatever the test left open.
        await async_session.commit()
        yield async_session

    app.dependency_overrides[get_async_session] = _override_dependency
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
