import logging
from typing import Optional

import tiktoken

from faqrag.adapters import BaseEmbedder, BaseLLM
from faqrag.config import Settings
from faqrag.models import QueryResponse, RetrievedChunk
from faqrag.prompts import (
    ANSWER_TEMPERATURE,
    ANSWER_TEMPLATE_FIELDS,
    DEFAULT_CONTEXT_TEMPLATE,
    validate_template,
)
from faqrag.stores import BaseVectorStore, VectorStore
from .base import create_embedder_from_settings, create_llm_from_settings

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 4
CONTEXT_SEPARATOR = "\n\n"
ENCODING_CACHE: dict[str, tiktoken.Encoding] = {}


def get_tokenizer(model: str) -> tiktoken.Encoding:
    if model not in ENCODING_CACHE:
        try:
            ENCODING_CACHE[model] = tiktoken.encoding_for_model(model)
        except KeyError:
            ENCODING_CACHE[model] = tiktoken.get_encoding("cl100k_base")
    return ENCODING_CACHE[model]


def count_tokens(text: str, model: str = "gpt-4") -> int:
    encoder = get_tokenizer(model)
    return len(encoder.encode(text))


class RetrievalPipeline:
    """Retrieves chunks for a question and generates a grounded answer.

    The index's nearest-neighbour order is used as-is: no re-ranking,
    filtering or de-duplication.
    """

    def __init__(
        self,
        llm: BaseLLM,
        vector_store: BaseVectorStore,
        top_k: int = DEFAULT_TOP_K,
        context_template: str = DEFAULT_CONTEXT_TEMPLATE,
        temperature: float = ANSWER_TEMPERATURE,
        max_context_tokens: Optional[int] = None,
    ):
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")
        self.llm = llm
        self.vector_store = vector_store
        self.top_k = top_k
        self.context_template = validate_template(context_template, ANSWER_TEMPLATE_FIELDS)
        self.temperature = temperature
        self.max_context_tokens = max_context_tokens

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        embedder: BaseEmbedder | None = None,
        llm: BaseLLM | None = None,
    ) -> "RetrievalPipeline":
        """Create pipeline from settings, loading the persisted index.

        Raises:
            NotFoundError: If the index has not been built yet.
        """
        embedder = embedder or create_embedder_from_settings(settings)
        vector_store = VectorStore.load(settings.vector_store_path, embedder)

        return cls(
            llm=llm or create_llm_from_settings(settings),
            vector_store=vector_store,
            top_k=settings.retrieval_k,
            context_template=settings.context_template or DEFAULT_CONTEXT_TEMPLATE,
            max_context_tokens=settings.max_context_tokens,
        )

    def retrieve(self, question: str, top_k: Optional[int] = None) -> list[RetrievedChunk]:
        """Retrieve the chunks nearest to a question, nearest first."""
        k = top_k or self.top_k
        logger.info(f"Embedding query: {question[:50]}...")

        results = self.vector_store.query(question, k=k)

        logger.info(f"Found {len(results)} results")
        return results

    def fit_to_budget(
        self, question: str, chunks: list[RetrievedChunk]
    ) -> list[RetrievedChunk]:
        """Return the leading chunks whose contents fit ``max_context_tokens``.

        Without a budget every chunk is kept.
        """
        if self.max_context_tokens is None:
            return chunks

        model = getattr(self.llm, "model", "gpt-4")
        template_overhead = count_tokens(
            self.context_template.format(context="", question=question), model
        )
        available_tokens = self.max_context_tokens - template_overhead
        if available_tokens <= 0:
            logger.warning(
                f"Prompt template alone uses {template_overhead} tokens "
                f"(limit: {self.max_context_tokens}); no chunks fit in the context"
            )

        kept: list[RetrievedChunk] = []
        current_tokens = 0
        for chunk in chunks:
            chunk_tokens = count_tokens(chunk.content, model)
            if current_tokens + chunk_tokens > available_tokens:
                break
            kept.append(chunk)
            current_tokens += chunk_tokens

        if len(kept) < len(chunks):
            dropped = [c.metadata.chunk_index for c in chunks[len(kept):]]
            logger.warning(
                f"Context truncated to {len(kept)}/{len(chunks)} chunks "
                f"(limit: {self.max_context_tokens} tokens); dropped chunks {dropped}"
            )
        return kept

    def build_prompt(self, question: str, chunks: list[RetrievedChunk]) -> str:
        """Render the answer prompt with chunks in retrieval order."""
        return self.context_template.format(
            context=CONTEXT_SEPARATOR.join(chunk.content for chunk in chunks),
            question=question,
        )

    def generate(self, question: str, chunks: list[RetrievedChunk]) -> str:
        """Generate an answer grounded in the given chunks.

        Chunks beyond the token budget are left out of the prompt. Provider
        errors propagate unchanged.
        """
        prompt = self.build_prompt(question, self.fit_to_budget(question, chunks))

        logger.info("Generating response...")
        return self.llm.generate(prompt, temperature=self.temperature)

    def query(self, question: str) -> QueryResponse:
        """Execute a full RAG query: retrieve and generate.

        ``chunks_related`` holds only the chunks that reached the prompt.
        """
        chunks = self.fit_to_budget(question, self.retrieve(question))
        answer = self.generate(question, chunks)

        return QueryResponse(
            user_question=question,
            system_answer=answer,
            chunks_related=chunks,
        )
