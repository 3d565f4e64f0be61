from .base import create_embedder_from_settings, create_llm_from_settings
from .ingestion import IngestionPipeline, run_ingestion
from .query import (
    SAMPLE_QUESTIONS,
    QueryOutcome,
    mean_score,
    run_query,
    run_sample_questions,
)
from .retrieval import DEFAULT_TOP_K, RetrievalPipeline

__all__ = [
    "IngestionPipeline",
    "run_ingestion",
    "RetrievalPipeline",
    "QueryOutcome",
    "run_query",
    "run_sample_questions",
    "mean_score",
    "create_embedder_from_settings",
    "create_llm_from_settings",
    "SAMPLE_QUESTIONS",
    "DEFAULT_TOP_K",
]
