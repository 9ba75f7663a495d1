"""
Per-tenant embedding cache.

Holds the fully loaded, unfiltered chunk set of at most max_entries tenants.
Entries expire lazily after ttl_seconds (checked on read, never swept), are
replaced wholesale on reload, and are dropped on explicit invalidation.

When the cache is full, inserting a new tenant evicts the entry with the
oldest loaded_at. Eviction follows load time, not access time; with a small
capacity a linear scan over the entries is enough. Switching to access-time
(LRU) eviction would change which tenant is evicted and needs a different
structure.

Concurrent misses for the same tenant share one in-flight load. A load that
was in flight when the tenant was invalidated is returned to its waiters but
not written back, so the next query after an invalidation always reloads.

Dependencies: asyncio, threading (stdlib)
System role: EmbeddingCache
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from crm_rag.models.chunk import Chunk

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
MAX_CACHED_ORGS = 3

ChunkSetLoader = Callable[[], Awaitable[tuple[Chunk, ...]]]


@dataclass(frozen=True)
class CacheEntry:
    """Cached chunk set of one tenant."""

    chunks: tuple[Chunk, ...]
    loaded_at: float


class EmbeddingCache:
    """
    Bounded, time-limited cache of full-tenant chunk sets.

    Construct one instance per process and share it between requests; tests
    build their own instance with a fake clock.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = MAX_CACHED_ORGS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize an empty cache.

        Args:
            ttl_seconds: Maximum age of a usable entry
            max_entries: Maximum number of tenants cached at once
            clock: Monotonic time source in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._generations: dict[str, int] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        """Capacity in tenants."""
        return self._max_entries

    @property
    def organization_ids(self) -> list[str]:
        """Tenants currently holding an entry, expired or not."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, organization_id: str) -> tuple[Chunk, ...] | None:
        """
        Return the cached chunk set if present and younger than the TTL.

        Args:
            organization_id: Tenant to look up

        Returns:
            tuple[Chunk, ...] | None: Cached chunks, or None on miss/expiry
        """
        with self._lock:
            entry = self._entries.get(organization_id)

        if entry is None:
            return None
        if self._clock() - entry.loaded_at >= self._ttl:
            logger.debug(
                f"{__name__}:get - Entry expired",
                extra={"organization_id": organization_id},
            )
            return None
        return entry.chunks

    def put(self, organization_id: str, chunks: tuple[Chunk, ...]) -> None:
        """
        Insert or replace a tenant's chunk set, evicting the oldest load if full.

        Args:
            organization_id: Tenant the chunks belong to
            chunks: Full, unfiltered chunk set of the tenant
        """
        with self._lock:
            self._store(organization_id, tuple(chunks))

    def invalidate(self, organization_id: str) -> None:
        """
        Drop a tenant's entry regardless of age.

        Called when the tenant's chunks are re-embedded or its embedding
        provider/model changes. Also detaches any in-flight load so later
        callers start a fresh one.

        Args:
            organization_id: Tenant to invalidate
        """
        with self._lock:
            removed = self._entries.pop(organization_id, None) is not None
            self._generations[organization_id] = self._generations.get(organization_id, 0) + 1
            self._inflight.pop(organization_id, None)

        logger.info(
            f"{__name__}:invalidate - Invalidated embedding cache (entry_removed={removed})",
            extra={"organization_id": organization_id},
        )

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            for organization_id in self._entries:
                self._generations[organization_id] = self._generations.get(organization_id, 0) + 1
            self._entries.clear()
            self._inflight.clear()

    async def get_or_load(
        self,
        organization_id: str,
        loader: ChunkSetLoader,
    ) -> tuple[Chunk, ...]:
        """
        Return the cached chunk set, loading and caching it on a miss.

        Only one load per tenant runs at a time within an event loop; other
        callers await the same load. A caller that is cancelled (for example
        by its own deadline) does not cancel the shared load.

        Args:
            organization_id: Tenant to look up
            loader: Coroutine factory performing the full-tenant load

        Returns:
            tuple[Chunk, ...]: The tenant's chunk set
        """
        cached = self.get(organization_id)
        if cached is not None:
            logger.debug(
                f"{__name__}:get_or_load - Cache hit ({len(cached)} chunks)",
                extra={"organization_id": organization_id},
            )
            return cached

        loop = asyncio.get_running_loop()
        with self._lock:
            task = self._inflight.get(organization_id)
            if task is None or task.get_loop() is not loop:
                generation = self._generations.get(organization_id, 0)
                task = loop.create_task(self._populate(organization_id, loader, generation))
                task.add_done_callback(_consume_task_result)
                self._inflight[organization_id] = task
                logger.info(
                    f"{__name__}:get_or_load - Cache miss, loading tenant chunks",
                    extra={"organization_id": organization_id},
                )

        return await asyncio.shield(task)

    async def _populate(
        self,
        organization_id: str,
        loader: ChunkSetLoader,
        generation: int,
    ) -> tuple[Chunk, ...]:
        """Run a load and store it unless the tenant was invalidated meanwhile."""
        current = asyncio.current_task()
        try:
            chunks = tuple(await loader())
            with self._lock:
                if self._generations.get(organization_id, 0) == generation:
                    self._store(organization_id, chunks)
                else:
                    logger.info(
                        f"{__name__}:_populate - Discarding load superseded by invalidation",
                        extra={"organization_id": organization_id},
                    )
            return chunks
        finally:
            with self._lock:
                if self._inflight.get(organization_id) is current:
                    del self._inflight[organization_id]

    def _store(self, organization_id: str, chunks: tuple[Chunk, ...]) -> None:
        """Insert under the lock, evicting the oldest entry when at capacity."""
        if organization_id not in self._entries and len(self._entries) >= self._max_entries:
            oldest = min(self._entries, key=lambda key: self._entries[key].loaded_at)
            del self._entries[oldest]
            logger.info(
                f"{__name__}:put - Evicted oldest cached tenant",
                extra={"organization_id": oldest},
            )

        self._entries[organization_id] = CacheEntry(chunks=chunks, loaded_at=self._clock())


def _consume_task_result(task: asyncio.Task) -> None:
    """Mark a finished load's exception as retrieved when every waiter gave up."""
    if not task.cancelled():
        task.exception()
