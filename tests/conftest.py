import os

# Must be set before config is imported: it builds the OpenAI client at import time
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("FIRECRAWL_API_KEY", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import config
from fakes import FakeFirestore

USER_ID = "user-1"


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeFirestore()
    monkeypatch.setattr(config, "get_db", lambda: db)
    return db


@pytest_asyncio.fixture
async def client(fake_db):
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def user_headers():
    return {"X-User-Id": USER_ID}
