"""Data models for query responses, evaluations and the query log."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .chunk import RetrievedChunk


class QueryResponse(BaseModel):
    """Answer to one question together with the chunks it was grounded on."""

    model_config = ConfigDict(frozen=True)

    user_question: str
    system_answer: str
    chunks_related: list[RetrievedChunk] = Field(default_factory=list)


class EvaluationBreakdown(BaseModel):
    # Fields the judge omitted stay None; no schema checks beyond JSON parsing.
    chunk_relevance: Optional[float] = None
    answer_accuracy: Optional[float] = None
    completeness: Optional[float] = None


class EvaluationResult(BaseModel):
    """Score (0-10) assigned to a QueryResponse by the evaluator."""

    score: Optional[float] = None
    reason: Optional[str] = None
    breakdown: EvaluationBreakdown = Field(default_factory=EvaluationBreakdown)


class LoggedQueryOutput(QueryResponse):
    """One entry of the persisted query log."""

    timestamp: str
    evaluation: Optional[EvaluationResult] = None


class ChunkPreview(BaseModel):
    index: int
    preview: str
    length: int


class ChunkInfo(BaseModel):
    """Summary written next to the vector index after a build."""

    model_config = ConfigDict(populate_by_name=True)

    total_chunks: int = Field(alias="totalChunks")
    chunk_size: int = Field(alias="chunkSize")
    chunk_overlap: int = Field(alias="chunkOverlap")
    embedding_model: str = Field(alias="embeddingModel")
    document_path: str = Field(alias="documentPath")
    chunks: list[ChunkPreview] = Field(default_factory=list)
