import random

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.state import ChatState
from app.models.base import Base
from app.models import snapshot  # noqa: F401
from app.services.chat_service import ChatSessionStore
from app.services.identity_service import IdentityRegistry
from app.services.persistence_service import PersistenceManager
from app.services.search_service import PrivacySearch

DATABASE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
def chat_state():
    return ChatState()

@pytest.fixture
def identity(chat_state):
    return IdentityRegistry(chat_state, rng=random.Random(1234))

@pytest.fixture
def privacy_search(chat_state):
    return PrivacySearch(chat_state, feed_limit=30)

@pytest.fixture
def chat_store(chat_state, identity):
    return ChatSessionStore(chat_state, identity)

@pytest.fixture
def alice(identity):
    return identity.register("@alice", "Alice")

@pytest.fixture
def bob(identity):
    return identity.register("@bob", "Bob")

@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()

@pytest.fixture
def persistence(session_factory, chat_state):
    return PersistenceManager(session_factory, state=chat_state, interval=0.01)

@pytest.fixture
async def async_test_client(chat_state):
    from app.main import app
    from app.dependencies.service_dependencies import get_chat_state

    app.dependency_overrides[get_chat_state] = lambda: chat_state
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
