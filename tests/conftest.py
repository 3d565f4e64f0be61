import os
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from faqrag.adapters.base import BaseEmbedder, BaseLLM
from faqrag.config import Settings
from faqrag.models import Chunk, ChunkMetadata, RetrievedChunk
from faqrag.stores import BaseVectorStore

FAQ_TOPICS = [
    "sick leave",
    "annual leave",
    "expense reimbursement",
    "professional development",
    "performance reviews",
    "personal information updates",
]

ENV_KEYS = [
    "DOCUMENT_PATH",
    "VECTOR_STORE_PATH",
    "EMBEDDING_MODEL",
    "LLM_MODEL",
    "CHUNK_SIZE",
    "CHUNK_OVERLAP",
    "RETRIEVAL_K",
    "OPENAI_API_KEY",
    "OPENROUTER_API_KEY",
    "QUERY_LOG_PATH",
    "EMBEDDING_BATCH_SIZE",
    "MAX_CONTEXT_TOKENS",
    "LOG_LEVEL",
    "FAQRAG_CONFIG",
]


def make_faq_text(entries: int = 30) -> str:
    paragraphs = []
    for i in range(entries):
        topic = FAQ_TOPICS[i % len(FAQ_TOPICS)]
        paragraphs.append(
            f"Q{i}: What is the policy on {topic}?\n"
            f"A{i}: Employees should follow the {topic} process described in "
            f"section {i}. Contact HR for details about {topic}."
        )
    return "\n\n".join(paragraphs)


def make_chunk(content: str, index: int, source: str = "faq.txt") -> Chunk:
    return Chunk(content=content, metadata=ChunkMetadata(chunk_index=index, source=source))


class MockEmbedder(BaseEmbedder):
    """Mock embedder for testing.

    Texts listed in ``vectors`` get that vector; anything else gets a
    constant vector.
    """

    def __init__(
        self,
        dimension: int = 8,
        vectors: Optional[dict[str, list[float]]] = None,
        **kwargs: Any,
    ):
        super().__init__("mock-embedder", **kwargs)
        self.dimension = dimension
        self.vectors = vectors or {}
        self.calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        return self.vectors.get(text, [0.1] * self.dimension)

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return self._vector(text)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        return [self._vector(t) for t in texts]


class MockLLM(BaseLLM):
    """Mock LLM for testing.

    ``reply`` is either a fixed string or a callable receiving the prompt.
    """

    def __init__(
        self,
        reply: str | Callable[[str], str] = "Mock response",
        model: str = "mock-llm",
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self.reply = reply
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def generate(self, prompt: str, **kwargs: Any) -> str:
        self.calls.append((prompt, kwargs))
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


class EchoLLM(MockLLM):
    """Returns the rendered prompt unchanged."""

    def __init__(self, **kwargs: Any):
        super().__init__(reply=lambda prompt: prompt, **kwargs)


class FakeVectorStore(BaseVectorStore):
    """Returns a fixed list of chunks, truncated to k."""

    def __init__(self, contents: list[str]):
        super().__init__(dimension=1)
        self._chunks = [make_chunk(c, i) for i, c in enumerate(contents)]
        self.queries: list[tuple[str, int]] = []

    def add(self, embeddings: list[list[float]], chunks: list[Chunk]) -> None:
        self._chunks.extend(chunks)

    def search(self, query_embedding: list[float], k: int = 4):
        results = [
            RetrievedChunk(content=c.content, metadata=c.metadata) for c in self._chunks[:k]
        ]
        return [0.0] * len(results), results

    def query(self, question: str, k: int = 4) -> list[RetrievedChunk]:
        self.queries.append((question, k))
        return self.search([], k)[1]

    def save(self, index_dir: Path | str) -> None:
        pass

    @property
    def count(self) -> int:
        return len(self._chunks)


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder(dimension=8)


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def faq_text() -> str:
    return make_faq_text()


@pytest.fixture
def faq_document(tmp_path: Path, faq_text: str) -> Path:
    document_path = tmp_path / "data" / "faq_document.txt"
    document_path.parent.mkdir(parents=True)
    document_path.write_text(faq_text, encoding="utf-8")
    return document_path


@pytest.fixture
def settings(tmp_path: Path, faq_document: Path) -> Settings:
    return Settings(
        document_path=faq_document,
        vector_store_path=tmp_path / "data" / "vector-store",
        embedding_model="mock-embedder",
        llm_model="mock-llm",
        chunk_size=200,
        chunk_overlap=40,
        retrieval_k=3,
        openai_api_key="test-key",
        query_log_path=tmp_path / "outputs" / "sample_queries.json",
    )


@pytest.fixture
def restore_environ():
    """Restore os.environ after tests that let python-dotenv write to it."""
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def faq_env(clean_env: pytest.MonkeyPatch, tmp_path: Path, faq_document: Path) -> dict[str, str]:
    env = {
        "DOCUMENT_PATH": str(faq_document),
        "VECTOR_STORE_PATH": str(tmp_path / "data" / "vector-store"),
        "EMBEDDING_MODEL": "text-embedding-3-small",
        "LLM_MODEL": "gpt-4o-mini",
        "CHUNK_SIZE": "200",
        "CHUNK_OVERLAP": "40",
        "RETRIEVAL_K": "3",
        "OPENAI_API_KEY": "test-key",
        "QUERY_LOG_PATH": str(tmp_path / "outputs" / "sample_queries.json"),
    }
    for key, value in env.items():
        clean_env.setenv(key, value)
    return env
