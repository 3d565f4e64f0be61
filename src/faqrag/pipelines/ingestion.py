import json
import logging
from pathlib import Path
from typing import Any

from faqrag.adapters import BaseEmbedder
from faqrag.config import Settings, load_settings
from faqrag.errors import IndexIOError
from faqrag.loaders import BaseDocumentLoader, DocumentLoader
from faqrag.models import Chunk, ChunkInfo, ChunkPreview
from faqrag.splitters import BaseTextSplitter, TextSplitter
from faqrag.stores import VectorStore
from .base import create_embedder_from_settings

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class IngestionPipeline:
    """Pipeline that chunks the FAQ document, embeds it and persists the index.

    Supports dependency injection so tests can swap the embedder.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        splitter: BaseTextSplitter,
        loader: BaseDocumentLoader,
        vector_store_path: Path,
        chunk_info_path: Path | None = None,
        document_path: str = "",
        batch_size: int = 512,
    ):
        self.embedder = embedder
        self.splitter = splitter
        self.loader = loader
        self.vector_store_path = Path(vector_store_path)
        self.chunk_info_path = chunk_info_path
        self.document_path = document_path
        self.batch_size = batch_size

    @classmethod
    def from_settings(
        cls, settings: Settings, embedder: BaseEmbedder | None = None
    ) -> "IngestionPipeline":
        """Create pipeline from validated settings."""
        return cls(
            embedder=embedder or create_embedder_from_settings(settings),
            splitter=TextSplitter(
                chunk_size=settings.chunk_size,
                chunk_overlap=settings.chunk_overlap,
            ),
            loader=DocumentLoader(settings.document_path),
            vector_store_path=settings.vector_store_path,
            chunk_info_path=settings.chunk_info_path,
            document_path=str(settings.document_path),
            batch_size=settings.embedding_batch_size,
        )

    def build_chunk_info(self, chunks: list[Chunk]) -> ChunkInfo:
        return ChunkInfo(
            total_chunks=len(chunks),
            chunk_size=getattr(self.splitter, "chunk_size", 0),
            chunk_overlap=getattr(self.splitter, "chunk_overlap", 0),
            embedding_model=self.embedder.model,
            document_path=self.document_path,
            chunks=[
                ChunkPreview(
                    index=i,
                    preview=chunk.content[:PREVIEW_LENGTH] + "...",
                    length=len(chunk.content),
                )
                for i, chunk in enumerate(chunks)
            ],
        )

    def _save_chunk_info(self, chunks: list[Chunk]) -> Path | None:
        if not self.chunk_info_path:
            return None

        chunk_info = self.build_chunk_info(chunks)
        try:
            self.chunk_info_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.chunk_info_path, "w", encoding="utf-8") as f:
                json.dump(chunk_info.model_dump(by_alias=True), f, indent=2)
        except OSError as e:
            raise IndexIOError(
                f"Cannot write chunk info to {self.chunk_info_path}: {e}"
            ) from e
        return self.chunk_info_path

    def run(self) -> dict[str, Any]:
        """Load, split, embed and persist the document.

        Returns:
            Summary of the build.
        """
        logger.info(f"Loading document from {self.document_path or 'loader'}")
        documents = self.loader.load()

        logger.info(
            "Splitting document into chunks with size "
            f"{getattr(self.splitter, 'chunk_size', '?')} and overlap "
            f"{getattr(self.splitter, 'chunk_overlap', '?')}"
        )
        chunks = self.splitter.split_documents(documents)
        logger.info(f"Created {len(chunks)} chunks")

        logger.info("Creating FAISS vector store...")
        vector_store = VectorStore.build(chunks, self.embedder, batch_size=self.batch_size)

        logger.info(f"Saving vector store to {self.vector_store_path}")
        vector_store.save(self.vector_store_path)

        chunk_info_path = self._save_chunk_info(chunks)
        if chunk_info_path:
            logger.info(f"Chunk information saved to {chunk_info_path}")

        return {
            "documents": len(documents),
            "chunks": len(chunks),
            "embeddings": vector_store.count,
            "embedding_model": self.embedder.model,
            "vector_store": str(self.vector_store_path),
            "chunk_info": str(chunk_info_path) if chunk_info_path else None,
        }


def run_ingestion(
    settings: Settings | None = None,
    config_path: Path | None = None,
) -> dict[str, Any]:
    """Run the ingestion pipeline.

    Args:
        settings: Validated settings; loaded from the environment if omitted.
        config_path: Optional TOML config used when loading settings.

    Returns:
        Dictionary with ingestion results.
    """
    if settings is None:
        settings = load_settings(config_path, require_query=False)
    pipeline = IngestionPipeline.from_settings(settings)
    return pipeline.run()
