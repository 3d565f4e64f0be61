"""Data models for faqrag chunks."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChunkMetadata(BaseModel):
    """Positional metadata attached to every chunk.

    Attributes:
        chunk_index: Zero-based position in splitter emission order.
        source: Identifier of the source document (its path).
        start_line: 1-based first line of the chunk in the document.
        end_line: 1-based last line of the chunk in the document.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    chunk_index: int = Field(alias="chunkIndex")
    source: str
    start_line: Optional[int] = Field(default=None, alias="startLine")
    end_line: Optional[int] = Field(default=None, alias="endLine")


class Chunk(BaseModel):
    """A bounded substring of the source document plus its metadata.

    Attributes:
        content: The chunk text content.
        metadata: Position of the chunk within the source document.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    metadata: ChunkMetadata


class RetrievedChunk(Chunk):
    """A chunk returned by a vector index query.

    Attributes:
        similarity_score: Only set when the index reports one; the FAISS
            store does not, so it stays None.
    """

    similarity_score: Optional[float] = None
