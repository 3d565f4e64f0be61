import logging

from langchain_text_splitters import RecursiveCharacterTextSplitter
from llama_index.core.schema import Document as LlamaDocument

from faqrag.models import Chunk, ChunkMetadata
from .base import BaseTextSplitter

logger = logging.getLogger(__name__)

# Coarsest to finest: paragraph, line, sentence, word, character.
DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

# Fewer chunks than this suggests the document is too thin to answer from.
MIN_EXPECTED_CHUNKS = 20


class RecursiveTextSplitter(BaseTextSplitter):
    """Character-based splitter that prefers natural boundaries.

    Wraps langchain's RecursiveCharacterTextSplitter: text is split on the
    coarsest separator that yields pieces no longer than ``chunk_size``,
    falling back to finer separators, and neighbouring chunks share up to
    ``chunk_overlap`` characters. Each chunk is tagged with its emission
    index, the source identifier and the line span it covers.
    """

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 100,
        separators: list[str] | None = None,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must satisfy 0 <= overlap < chunk_size, "
                f"got overlap={chunk_overlap}, chunk_size={chunk_size}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = separators or list(DEFAULT_SEPARATORS)
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=self.separators,
            add_start_index=True,
        )

    def split_documents(self, documents: list[LlamaDocument]) -> list[Chunk]:
        """Split documents into chunks with a contiguous chunk index.

        Args:
            documents: LlamaIndex documents, typically from a loader.

        Returns:
            Chunks in emission order across all documents.
        """
        chunks: list[Chunk] = []
        for document in documents:
            metadata = document.metadata or {}
            source = metadata.get("source") or metadata.get("file_path", "unknown")
            chunks.extend(
                self._split(document.text, str(source), start_index=len(chunks))
            )

        if documents and len(chunks) < MIN_EXPECTED_CHUNKS:
            logger.warning(
                f"Only {len(chunks)} chunks created; at least "
                f"{MIN_EXPECTED_CHUNKS} are expected for useful retrieval"
            )
        return chunks

    def split_text(self, text: str, source: str = "unknown") -> list[Chunk]:
        return self._split(text, source)

    def _split(self, text: str, source: str, start_index: int = 0) -> list[Chunk]:
        pieces = self.splitter.create_documents([text])
        if not pieces:
            # Blank input still yields one chunk so every document is represented.
            return [
                Chunk(
                    content=text,
                    metadata=ChunkMetadata(
                        chunk_index=start_index,
                        source=source,
                        start_line=1,
                        end_line=text.count("\n") + 1,
                    ),
                )
            ]

        chunks = []
        for offset, piece in enumerate(pieces):
            start_line, end_line = _line_span(
                text, piece.page_content, piece.metadata.get("start_index", -1)
            )
            chunks.append(
                Chunk(
                    content=piece.page_content,
                    metadata=ChunkMetadata(
                        chunk_index=start_index + offset,
                        source=source,
                        start_line=start_line,
                        end_line=end_line,
                    ),
                )
            )
        return chunks


def _line_span(text: str, content: str, position: int) -> tuple[int | None, int | None]:
    """Return the 1-based (first, last) lines covered by ``content``."""
    if position < 0:
        return None, None
    start_line = text.count("\n", 0, position) + 1
    return start_line, start_line + content.count("\n")
