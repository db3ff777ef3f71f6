"""Embedding service — splits normalized text into windows and embeds them.

This is an application service that coordinates:
1. Splitting text into overlapping chunks (TextChunker)
2. Generating embeddings via the EmbeddingProvider, batched
3. Verifying that every chunk received exactly one vector, in order
"""

import logging
import time

from onboard.application.interfaces.embedding_provider import EmbeddingProvider
from onboard.application.services.text_chunker import TextChunker
from onboard.domain.exceptions import EmbeddingAlignmentError

logger = logging.getLogger(__name__)

# ── Chunking constants ──────────────────────────────────────────────
_DEFAULT_CHUNK_SIZE = 1000
_DEFAULT_CHUNK_OVERLAP = 150  # file ingestion; URL ingestion passes 200
_MAX_BATCH_SIZE = 100  # Max texts per embedding API call


class EmbeddingService:
    """Application service for turning text into (chunk_text, embedding) pairs."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        *,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = _DEFAULT_CHUNK_OVERLAP,
        batch_size: int = _MAX_BATCH_SIZE,
    ):
        self._embedding_provider = embedding_provider
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._batch_size = max(batch_size, 1)

    async def chunk_and_embed(
        self,
        text: str,
        *,
        chunk_overlap: int | None = None,
    ) -> list[tuple[str, list[float]]]:
        """Split ``text`` and embed every chunk.

        Args:
            text: Normalized document text.
            chunk_overlap: Per-call-site overlap override (URL documents use
                a wider overlap than uploaded files).

        Returns:
            ``(chunk_text, vector)`` pairs in document order.

        Raises:
            EmbeddingAlignmentError: the provider returned a different
                number of vectors than chunks sent.
        """
        chunker = TextChunker(
            chunk_size=self._chunk_size,
            chunk_overlap=self._chunk_overlap if chunk_overlap is None else chunk_overlap,
        )
        chunks = chunker.split(text)
        if not chunks:
            logger.info("No embeddable text")
            return []

        start = time.monotonic()
        vectors = await self._embed_all(chunks)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Embedded %d chunks (size=%d, overlap=%d) in %dms",
            len(chunks),
            chunker.chunk_size,
            chunker.chunk_overlap,
            duration_ms,
        )
        return list(zip(chunks, vectors, strict=True))

    async def embed_queries(self, queries: list[str]) -> list[list[float]]:
        """Embed several query variants in one request, preserving order."""
        if not queries:
            return []
        return await self._embed_all(queries)

    async def _embed_all(self, texts: list[str]) -> list[list[float]]:
        all_vectors: list[list[float]] = []
        for batch_start in range(0, len(texts), self._batch_size):
            batch = texts[batch_start : batch_start + self._batch_size]
            batch_vectors = await self._embedding_provider.generate_embeddings(batch)
            if len(batch_vectors) != len(batch):
                raise EmbeddingAlignmentError(
                    expected=len(batch),
                    received=len(batch_vectors),
                    detail=f"batch starting at {batch_start}",
                )
            all_vectors.extend(batch_vectors)

        dimensions = self._embedding_provider.dimensions
        for i, vector in enumerate(all_vectors):
            if dimensions and len(vector) != dimensions:
                raise EmbeddingAlignmentError(
                    expected=len(texts),
                    received=len(all_vectors),
                    detail=f"vector {i} has {len(vector)} dimensions, expected {dimensions}",
                )
        return all_vectors
