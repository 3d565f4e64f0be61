from abc import ABC, abstractmethod

from llama_index.core.schema import Document as LlamaDocument


class BaseDocumentLoader(ABC):
    """Abstract base class for document loaders."""

    @abstractmethod
    def load(self) -> list[LlamaDocument]:
        """Load the configured document."""
        pass
