from abc import ABC, abstractmethod

from llama_index.core.schema import Document as LlamaDocument

from faqrag.models import Chunk


class BaseTextSplitter(ABC):
    """Abstract base class for text splitters."""

    @abstractmethod
    def split_documents(self, documents: list[LlamaDocument]) -> list[Chunk]:
        """Split documents into chunks tagged with positional metadata."""
        pass

    @abstractmethod
    def split_text(self, text: str, source: str = "unknown") -> list[Chunk]:
        """Split raw text into chunks."""
        pass
