from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import settings

# Override settings for tests
settings.app_env = "development"
settings.brand_name = "Stake"
settings.default_client_name = "Stake"

from app.analysis.lexicon import Lexicon  # noqa: E402
from app.collectors.llm_base import BaseLlmCollector, LlmResponse  # noqa: E402
from app.core.dependencies import get_answer_provider  # noqa: E402
from app.db.postgres import get_db  # noqa: E402
from app.main import app  # noqa: E402


class FixedRandom:
    """Deterministic stand-in for random.Random."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class FakeProvider(BaseLlmCollector):
    """Answer provider returning a canned response and recording calls."""

    provider = "fake"

    def __init__(self, text: str = "", model: str = "gpt-4", usage: dict | None = None, error: Exception | None = None):
        super().__init__(api_key="test")
        self.text = text
        self.model = model
        self.usage = usage or {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30}
        self.error = error
        self.calls: list[tuple] = []

    async def query_llm(self, keyword, query, context=None):
        self.calls.append((keyword, query, context))
        if self.error is not None:
            raise self.error
        return LlmResponse(text=self.text, model=self.model, usage=self.usage)


@pytest.fixture
def lexicon() -> Lexicon:
    return Lexicon.for_brand("Stake")


@pytest.fixture
def mock_db() -> MagicMock:
    """AsyncSession double: get/flush/commit are awaitable, add assigns an id."""
    db = MagicMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    def _add(obj):
        if getattr(obj, "id", None) is None:
            obj.id = 101

    db.add = MagicMock(side_effect=_add)
    return db


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(text="Stake is a great platform.")


@pytest.fixture
async def client(mock_db, fake_provider) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_answer_provider] = lambda: fake_provider
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def fixed_random():
    """Factory for deterministic random sources."""
    return FixedRandom
