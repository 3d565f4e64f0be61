import logging
from dataclasses import dataclass
from typing import Optional

from faqrag.config import Settings
from faqrag.errors import EvaluationParseError, ProviderError
from faqrag.evaluation import LLMJudgeEvaluator, get_evaluator
from faqrag.models import EvaluationResult, QueryResponse
from faqrag.query_log import QueryLog
from .retrieval import RetrievalPipeline

logger = logging.getLogger(__name__)

SAMPLE_QUESTIONS = [
    "What is the company's sick leave policy?",
    "How do I submit an expense reimbursement request?",
    "What professional development benefits does the company offer?",
    "How do I apply for leave?",
    "What is the process for performance reviews?",
    "How can I update my personal information in the HR system?",
]


@dataclass
class QueryOutcome:
    """Answer to one question plus its evaluation, if one was produced."""

    response: QueryResponse
    evaluation: Optional[EvaluationResult] = None
    logged: bool = False


def evaluate_safely(
    evaluator: LLMJudgeEvaluator, response: QueryResponse
) -> Optional[EvaluationResult]:
    """Run the evaluator, returning None when the provider or parser fails."""
    try:
        return evaluator.evaluate(response)
    except (ProviderError, EvaluationParseError) as e:
        logger.warning(f"Evaluation skipped: {e}")
        return None


def run_query(
    question: str,
    settings: Settings,
    evaluate: bool = True,
    pipeline: Optional[RetrievalPipeline] = None,
    evaluator: Optional[LLMJudgeEvaluator] = None,
    query_log: Optional[QueryLog] = None,
) -> QueryOutcome:
    """Answer a question end to end: retrieve, generate, evaluate, log.

    Args:
        question: The user's question, used verbatim.
        settings: Validated settings.
        evaluate: Whether to grade the answer.
        pipeline: Retrieval pipeline; loads the index from disk when omitted.
        evaluator: Evaluator; built from settings when omitted.
        query_log: Query log; defaults to ``settings.query_log_path``.

    Returns:
        The response, its evaluation and whether it was logged.

    Raises:
        NotFoundError: If the index has not been built.
        ProviderError: If retrieval or answer generation fails.
    """
    pipeline = pipeline or RetrievalPipeline.from_settings(settings)
    response = pipeline.query(question)

    evaluation = None
    if evaluate:
        evaluator = evaluator or get_evaluator(settings, llm=pipeline.llm)
        evaluation = evaluate_safely(evaluator, response)

    query_log = query_log or QueryLog(settings.query_log_path)
    record = query_log.append(response, evaluation)

    return QueryOutcome(
        response=response, evaluation=evaluation, logged=record is not None
    )


def run_sample_questions(
    settings: Settings,
    questions: Optional[list[str]] = None,
    evaluate: bool = True,
    pipeline: Optional[RetrievalPipeline] = None,
) -> list[QueryOutcome]:
    """Run each sample question through :func:`run_query` in order.

    The index is loaded once and shared across questions.
    """
    questions = SAMPLE_QUESTIONS if questions is None else questions
    pipeline = pipeline or RetrievalPipeline.from_settings(settings)
    evaluator = get_evaluator(settings, llm=pipeline.llm) if evaluate else None
    query_log = QueryLog(settings.query_log_path)

    outcomes = []
    for i, question in enumerate(questions, start=1):
        logger.info(f"Sample question {i}/{len(questions)}: {question}")
        outcomes.append(
            run_query(
                question,
                settings,
                evaluate=evaluate,
                pipeline=pipeline,
                evaluator=evaluator,
                query_log=query_log,
            )
        )
    return outcomes


def mean_score(outcomes: list[QueryOutcome]) -> Optional[float]:
    """Average overall score across outcomes that have one."""
    scores = [
        o.evaluation.score
        for o in outcomes
        if o.evaluation is not None and o.evaluation.score is not None
    ]
    if not scores:
        return None
    return sum(scores) / len(scores)
