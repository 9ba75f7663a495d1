"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite chunk store, store seeding helper, chunk factory,
fake clock for cache expiry
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, numpy
System role: Test infrastructure and fixture management
"""

import json
from typing import Sequence

import numpy as np
import pytest


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of the test (StaticPool)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from crm_rag.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Provide async session factory bound to the test engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


class StoreSeeder:
    """Writes documents, chunks and settings into the test database."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    async def add_document(
        self,
        organization_id: str,
        name: str,
        customer_id: str | None = None,
        document_id: str | None = None,
    ) -> str:
        from crm_rag.boundary.db.CRUD.document_crud import document_crud

        fields = {"organization_id": organization_id, "name": name, "customer_id": customer_id}
        if document_id is not None:
            fields["id"] = document_id
        async with self._session_factory() as session:
            document = await document_crud.create(session, **fields)
            await session.commit()
            return document.id

    async def add_chunk(
        self,
        organization_id: str,
        document_id: str,
        content: str,
        embedding: Sequence[float] | None,
        chunk_index: int = 0,
        dimensions: int | None = None,
        raw_embedding: str | None = None,
        chunk_id: str | None = None,
    ) -> str:
        """
        Insert a chunk row.

        raw_embedding is stored verbatim when given; otherwise embedding is
        serialized as a JSON array and its length recorded as the declared
        dimensionality unless dimensions overrides it.
        """
        from crm_rag.boundary.db.CRUD.chunk_crud import document_chunk_crud

        if raw_embedding is not None:
            stored = raw_embedding
        elif embedding is not None:
            stored = json.dumps([float(v) for v in embedding])
        else:
            stored = None

        if dimensions is None and embedding is not None:
            dimensions = len(embedding)

        fields = {
            "organization_id": organization_id,
            "document_id": document_id,
            "content": content,
            "chunk_index": chunk_index,
            "embedding": stored,
            "embedding_model": "text-embedding-3-small" if stored is not None else None,
            "embedding_dimensions": dimensions,
        }
        if chunk_id is not None:
            fields["id"] = chunk_id
        async with self._session_factory() as session:
            chunk = await document_chunk_crud.create(session, **fields)
            await session.commit()
            return chunk.id

    async def set_settings(self, organization_id: str, **values: str | None) -> None:
        from crm_rag.boundary.db.CRUD.system_setting_crud import system_setting_crud

        async with self._session_factory() as session:
            for key, value in values.items():
                await system_setting_crud.create(
                    session, organization_id=organization_id, key=key, value=value
                )
            await session.commit()


@pytest.fixture
def store(session_factory) -> StoreSeeder:
    """Provide helper for seeding the test database."""
    return StoreSeeder(session_factory)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide fake clock for cache TTL and eviction tests."""
    return FakeClock()


@pytest.fixture
def make_chunk():
    """
    Provide factory for in-memory Chunk instances.

    Returns:
        Callable building a Chunk with a read-only float64 embedding
    """
    from crm_rag.models.chunk import Chunk

    counter = {"n": 0}

    def _make(
        embedding: Sequence[float],
        document_id: str = "doc-1",
        content: str | None = None,
        chunk_index: int | None = None,
        chunk_id: str | None = None,
    ) -> Chunk:
        counter["n"] += 1
        vector = np.asarray(embedding, dtype=np.float64)
        vector.flags.writeable = False
        return Chunk(
            chunk_id=chunk_id or f"chunk-{counter['n']}",
            document_id=document_id,
            content=content if content is not None else f"content {counter['n']}",
            chunk_index=chunk_index if chunk_index is not None else counter["n"],
            embedding=vector,
            embedding_model="text-embedding-3-small",
        )

    return _make
