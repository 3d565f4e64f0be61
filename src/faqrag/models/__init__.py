from .chunk import Chunk, ChunkMetadata, RetrievedChunk
from .query import (
    ChunkInfo,
    ChunkPreview,
    EvaluationBreakdown,
    EvaluationResult,
    LoggedQueryOutput,
    QueryResponse,
)

__all__ = [
    "Chunk",
    "ChunkInfo",
    "ChunkMetadata",
    "ChunkPreview",
    "EvaluationBreakdown",
    "EvaluationResult",
    "LoggedQueryOutput",
    "QueryResponse",
    "RetrievedChunk",
]
