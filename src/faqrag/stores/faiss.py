import json
import logging
from pathlib import Path
from typing import Any, Optional

import faiss
import numpy as np

from faqrag.adapters import BaseEmbedder
from faqrag.errors import IndexIOError, NotFoundError
from faqrag.models import Chunk, RetrievedChunk
from .base import BaseVectorStore

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.faiss"
DOCSTORE_FILENAME = "docstore.json"
ARGS_FILENAME = "args.json"

DEFAULT_BATCH_SIZE = 512


class FAISSVectorStore(BaseVectorStore):
    """FAISS-based vector store persisted as a directory.

    Vectors live only in the FAISS index; the chunk payload is kept in
    insertion order so that FAISS row ``i`` maps to ``chunks[i]``. Ranking
    is whatever the index's L2 search returns.
    """

    def __init__(
        self,
        dimension: int,
        embedder: Optional[BaseEmbedder] = None,
        index: Optional[faiss.Index] = None,
        chunks: Optional[list[Chunk]] = None,
    ):
        super().__init__(dimension)
        self.embedder = embedder
        self._index: faiss.Index = index if index is not None else faiss.IndexFlatL2(dimension)
        self._chunks: list[Chunk] = list(chunks or [])

    @classmethod
    def build(
        cls,
        chunks: list[Chunk],
        embedder: BaseEmbedder,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> "FAISSVectorStore":
        """Embed every chunk and return an in-memory store holding them."""
        if not chunks:
            raise ValueError("Cannot build a vector index from zero chunks")

        embeddings: list[list[float]] = []
        for i in range(0, len(chunks), batch_size):
            batch = chunks[i : i + batch_size]
            embeddings.extend(embedder.embed_batch([c.content for c in batch]))
            logger.info(f"Embedded {len(embeddings)}/{len(chunks)} chunks")

        store = cls(dimension=len(embeddings[0]), embedder=embedder)
        store.add(embeddings, chunks)
        return store

    @classmethod
    def load(
        cls, index_dir: Path | str, embedder: Optional[BaseEmbedder] = None
    ) -> "FAISSVectorStore":
        """Load a store saved with :meth:`save`.

        Raises:
            NotFoundError: If no index exists at ``index_dir``.
            IndexIOError: If the index files are unreadable or disagree.
        """
        index_dir = Path(index_dir)
        index_path = index_dir / INDEX_FILENAME
        docstore_path = index_dir / DOCSTORE_FILENAME
        if not index_path.exists() or not docstore_path.exists():
            raise NotFoundError(
                f"Vector store not found at {index_dir}. "
                "Run 'faqrag build-index' first."
            )

        try:
            index = faiss.read_index(str(index_path))
            with open(docstore_path, "r", encoding="utf-8") as f:
                chunks = [Chunk.model_validate(item) for item in json.load(f)]
        except (OSError, RuntimeError, ValueError, TypeError) as e:
            raise IndexIOError(f"Cannot read vector store at {index_dir}: {e}") from e

        if index.ntotal != len(chunks):
            raise IndexIOError(
                f"Corrupt vector store at {index_dir}: {index.ntotal} vectors "
                f"but {len(chunks)} chunks"
            )

        logger.info(f"Vector store loaded from {index_dir} ({len(chunks)} chunks)")
        return cls(dimension=index.d, embedder=embedder, index=index, chunks=chunks)

    def save(self, index_dir: Path | str) -> None:
        """Write the index, chunk payload and build args to ``index_dir``.

        Raises:
            IndexIOError: If the directory or its files cannot be written.
        """
        index_dir = Path(index_dir)
        try:
            index_dir.mkdir(parents=True, exist_ok=True)
            faiss.write_index(self._index, str(index_dir / INDEX_FILENAME))
            with open(index_dir / DOCSTORE_FILENAME, "w", encoding="utf-8") as f:
                json.dump(
                    [c.model_dump(by_alias=True, exclude_none=True) for c in self._chunks],
                    f,
                    indent=2,
                )
            with open(index_dir / ARGS_FILENAME, "w", encoding="utf-8") as f:
                json.dump(self._args(), f, indent=2)
        except (OSError, RuntimeError) as e:
            raise IndexIOError(f"Cannot write vector store to {index_dir}: {e}") from e

    def _args(self) -> dict[str, Any]:
        return {"space": "l2", "dimension": self.dimension, "count": self.count}

    def add(self, embeddings: list[list[float]], chunks: list[Chunk]) -> None:
        if len(embeddings) != len(chunks):
            raise ValueError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks"
            )
        vectors = np.array(embeddings, dtype=np.float32)
        self._index.add(vectors)
        self._chunks.extend(chunks)

    def search(
        self,
        query_embedding: list[float],
        k: int = 4,
    ) -> tuple[list[float], list[RetrievedChunk]]:
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        if self.count == 0:
            return [], []

        query = np.array([query_embedding], dtype=np.float32)
        distances, indices = self._index.search(query, min(k, self.count))

        found_distances = []
        results = []
        for dist, idx in zip(distances[0], indices[0]):
            if 0 <= idx < len(self._chunks):
                chunk = self._chunks[idx]
                found_distances.append(float(dist))
                results.append(
                    RetrievedChunk(content=chunk.content, metadata=chunk.metadata)
                )

        return found_distances, results

    def query(self, question: str, k: int = 4) -> list[RetrievedChunk]:
        if self.embedder is None:
            raise ValueError("An embedder is required to query by text")
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")

        query_embedding = self.embedder.embed(question)
        _, results = self.search(query_embedding, k=k)
        return results

    @property
    def chunks(self) -> list[Chunk]:
        return list(self._chunks)

    @property
    def count(self) -> int:
        return self._index.ntotal
