"""
Chunk value types.

A Chunk is an immutable snapshot of one embedded document fragment as loaded
from the chunk store. Its vector is a read-only float64 array so cached
chunk sets can be shared between concurrent queries.

Dependencies: numpy
System role: In-memory representation of candidate chunks
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Chunk:
    """A loaded, embedded document chunk."""

    chunk_id: str
    document_id: str
    content: str
    chunk_index: int
    embedding: np.ndarray
    embedding_model: str | None = None

    @property
    def dimensions(self) -> int:
        """Length of the embedding vector."""
        return int(self.embedding.shape[0])


@dataclass(frozen=True)
class ChunkLoadResult:
    """
    Outcome of a ChunkLoader call.

    cacheable is True only for an unfiltered, whole-tenant load. A filtered
    slice must never be stored under the tenant-wide cache key.
    """

    chunks: tuple[Chunk, ...]
    cacheable: bool
