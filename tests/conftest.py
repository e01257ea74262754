# tests/conftest.py
import os
import logging
from typing import List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure test-friendly env: no Firebase, no Sentry
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("FIREBASE_STORAGE_BUCKET", "")
os.environ.setdefault("ERROR_MONITORING_ENABLED", "false")
os.environ.setdefault("GEMINI_API_KEY", "test-key")

# IMPORTANT: import the app after envs are set
from chatbot.main import create_app
from chatbot.services.rate_limit import RateLimiter
from chatbot.services.records import InMemoryRecordStore
from chatbot.services.storage import MediaUploader
from chatbot.services.validation import ValidationPolicy


class FakeGenerate:
    """Stands in for the model provider and records every call."""

    def __init__(self, reply: Optional[str] = "hi there", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def __call__(self, parts, *, model, options=None):
        self.calls.append({"parts": parts, "model": model, "options": options})
        if self.error is not None:
            raise self.error
        return self.reply


class FakeBlobStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.puts: List[dict] = []

    def put(self, key: str, data: bytes, content_type: str) -> str:
        self.puts.append({"key": key, "data": data, "content_type": content_type})
        if self.fail:
            raise RuntimeError("bucket unavailable")
        return f"https://storage.example.com/bucket/{key}"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_generate():
    return FakeGenerate()


@pytest.fixture
def records():
    return InMemoryRecordStore()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(limit=10, window_seconds=60, clock=clock)


@pytest.fixture
def policy():
    return ValidationPolicy(require_message=False, max_length=500)


@pytest_asyncio.fixture
async def app(fake_generate, records, blob_store, rate_limiter, policy):
    return create_app(
        generate=fake_generate,
        records=records,
        uploader=MediaUploader(blob_store, prefix="chat-images", timeout=5),
        rate_limiter=rate_limiter,
        policy=policy,
    )


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog
