from abc import ABC, abstractmethod
from pathlib import Path

from faqrag.models import Chunk, RetrievedChunk


class BaseVectorStore(ABC):
    """Abstract base class for vector stores."""

    def __init__(self, dimension: int):
        self.dimension = dimension

    @abstractmethod
    def add(self, embeddings: list[list[float]], chunks: list[Chunk]) -> None:
        """Add chunk vectors and their payload to the store."""
        pass

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        k: int = 4,
    ) -> tuple[list[float], list[RetrievedChunk]]:
        """Return distances and chunks nearest to the query vector."""
        pass

    @abstractmethod
    def query(self, question: str, k: int = 4) -> list[RetrievedChunk]:
        """Embed the question and return the k nearest chunks."""
        pass

    @abstractmethod
    def save(self, index_dir: Path | str) -> None:
        """Persist the store to a directory."""
        pass

    @property
    @abstractmethod
    def count(self) -> int:
        """Return the number of vectors in the store."""
        pass
