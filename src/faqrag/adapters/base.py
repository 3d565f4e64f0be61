from abc import ABC, abstractmethod
from typing import Any


class BaseEmbedder(ABC):
    """Abstract base class for embedding providers."""

    def __init__(self, model: str, **kwargs: Any):
        self.model = model
        self.kwargs = kwargs

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        pass

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        pass


class BaseLLM(ABC):
    """Abstract base class for completion providers."""

    def __init__(self, model: str, **kwargs: Any):
        self.model = model
        self.kwargs = kwargs

    @abstractmethod
    def generate(self, prompt: str, **kwargs: Any) -> str:
        """Send a single user prompt and return the generated text."""
        pass
