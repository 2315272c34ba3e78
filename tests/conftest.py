"""
Pytest configuration and fixtures.
"""

import os
from typing import AsyncGenerator, Callable, Dict, List, Optional

# Settings are read at import time; these must be set before the app is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.core.database import Base, get_db
from backend.app.core.security import create_access_token
from backend.app.services.llm_adapter import LLMAdapter, LLMAdapterConfig, get_llm_adapter

# Import all models to register them with Base.metadata
from backend.app.models.customer_orm import CustomerORM
from backend.app.models.product_orm import ProductORM
from backend.app.models.campaign_orm import CampaignORM
from backend.app.models.user_orm import UserProfileORM

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

TENANT_A = "tenant-a"


class FakeLLMAdapter(LLMAdapter):
    """
    Scripted adapter. ``completion_reply`` may be a string or a callable
    taking the prompt; prompts containing any ``fail_on`` marker raise.
    """

    def __init__(self):
        super().__init__(LLMAdapterConfig(provider="fake", completion_model="fake-instruct", chat_model="fake-chat"))
        self.completion_reply = "72% The customer enjoys this kind of product."
        self.chat_reply = "Hello from the model"
        self.stream_chunks: List[str] = ["Hi, ", "what does it cost?"]
        self.stream_error: Optional[Exception] = None
        self.fail_on: List[str] = []
        self.prompts: List[str] = []
        self.chats: List[List[Dict[str, str]]] = []
        self.max_tokens: List[Optional[int]] = []

    async def complete(self, prompt, *, max_tokens=None, temperature=None):
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if any(marker in prompt for marker in self.fail_on):
            raise RuntimeError("provider unavailable")
        reply = self.completion_reply(prompt) if callable(self.completion_reply) else self.completion_reply
        return self._response(reply, self.config.completion_model, prompt)

    async def chat(self, messages, *, max_tokens=None, temperature=None):
        self.chats.append(messages)
        self.max_tokens.append(max_tokens)
        if self.fail_on and any(m in msg["content"] for msg in messages for m in self.fail_on):
            raise RuntimeError("provider unavailable")
        return self._response(self.chat_reply, self.config.chat_model, str(messages))

    async def stream_chat(self, messages):
        self.chats.append(messages)
        if self.stream_error is not None:
            raise self.stream_error
        for chunk in self.stream_chunks:
            yield chunk


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Creates a fresh database session for a test.
    Tables are created before and dropped after every test.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fake_llm() -> FakeLLMAdapter:
    return FakeLLMAdapter()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, fake_llm: FakeLLMAdapter) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with the database and LLM dependencies overridden.
    Authentication is real: requests carry tokens from ``auth_headers``.
    """
    async def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_adapter] = lambda: fake_llm

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def make_token(tenant_id: str = TENANT_A, role: str = "owner", scopes: Optional[List[str]] = None) -> str:
    claims = {"sub": f"{tenant_id}-user", "tenant_id": tenant_id, "role": role}
    if scopes is not None:
        claims["scopes"] = scopes
    return create_access_token(claims)


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Factory: auth_headers(tenant_id="tenant-a", role="owner", scopes=None)."""
    def _headers(tenant_id: str = TENANT_A, role: str = "owner", scopes: Optional[List[str]] = None):
        return {"Authorization": f"Bearer {make_token(tenant_id, role, scopes)}"}
    return _headers


@pytest.fixture
def seed_customers(db_session: AsyncSession):
    """Factory inserting customers for a tenant; returns the ORM rows in insertion order."""
    async def _seed(tenant_id: str = TENANT_A, customers: Optional[List[Dict]] = None) -> List[CustomerORM]:
        customers = customers or [
            {"name": "Alice", "email": "alice@example.com", "likes": "hiking, coffee", "dislikes": "crowds"},
            {"name": "Bob", "phone": "+15550100", "likes": "gaming", "preferences": "whatsapp"},
        ]
        rows = []
        for data in customers:
            row = CustomerORM(tenant_id=tenant_id, **data)
            db_session.add(row)
            await db_session.flush()
            rows.append(row)
        return rows
    return _seed


@pytest.fixture
def seed_product(db_session: AsyncSession):
    async def _seed(tenant_id: str = TENANT_A, **fields) -> ProductORM:
        data = {"name": "Trail Shoes", "category": "Outdoor", "description": "Light trail runners", "keywords": "hiking"}
        data.update(fields)
        product = ProductORM(tenant_id=tenant_id, **data)
        db_session.add(product)
        await db_session.flush()
        return product
    return _seed


@pytest.fixture
def seed_profile(db_session: AsyncSession):
    async def _seed(tenant_id: str = TENANT_A, name: str = "Sam Seller") -> UserProfileORM:
        profile = UserProfileORM(
            tenant_id=tenant_id,
            name=name,
            profession={"profession": "outdoor retailer"},
            style={"tone": "casual", "verbosity": "concise"},
            chat_history={"messages": [{"role": "user", "content": "hey there!"}]},
        )
        db_session.add(profile)
        await db_session.flush()
        return profile
    return _seed
