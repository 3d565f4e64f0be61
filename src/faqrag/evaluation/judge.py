import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from faqrag.adapters import BaseLLM, create_llm
from faqrag.config import Settings
from faqrag.errors import EvaluationParseError
from faqrag.models import EvaluationBreakdown, EvaluationResult, QueryResponse, RetrievedChunk
from faqrag.prompts import (
    DEFAULT_EVALUATION_TEMPLATE,
    EVALUATION_TEMPERATURE,
    EVALUATION_TEMPLATE_FIELDS,
    validate_template,
)

logger = logging.getLogger(__name__)

# Greedy: from the first "{" to the last "}" in the response.
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def format_chunks(chunks: list[RetrievedChunk]) -> str:
    """Number chunks from 1 as ``[Chunk i]`` blocks for the judge prompt."""
    return "\n".join(
        f"[Chunk {i}]\n{chunk.content}\n" for i, chunk in enumerate(chunks, start=1)
    )


def parse_evaluation(text: str) -> EvaluationResult:
    """Extract the judge's JSON verdict from free-form model output.

    Best effort: the first ``{`` through the last ``}`` is parsed as JSON.
    Missing fields are left as None.

    Raises:
        EvaluationParseError: If no JSON object can be found or parsed, or a
            present field has the wrong type (e.g. a non-numeric score).
    """
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        raise EvaluationParseError("Failed to extract JSON from evaluation response")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise EvaluationParseError(f"Evaluation response is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise EvaluationParseError("Evaluation response JSON is not an object")

    try:
        return EvaluationResult(
            score=parsed.get("overall_score"),
            reason=parsed.get("reason"),
            breakdown=EvaluationBreakdown(
                chunk_relevance=parsed.get("chunk_relevance"),
                answer_accuracy=parsed.get("answer_accuracy"),
                completeness=parsed.get("completeness"),
            ),
        )
    except ValidationError as e:
        raise EvaluationParseError(f"Evaluation response has invalid field values: {e}") from e


class LLMJudgeEvaluator:
    """Scores a QueryResponse by asking the completion provider to grade it."""

    def __init__(
        self,
        llm: BaseLLM,
        template: str = DEFAULT_EVALUATION_TEMPLATE,
        temperature: float = EVALUATION_TEMPERATURE,
    ):
        self.llm = llm
        self.template = validate_template(template, EVALUATION_TEMPLATE_FIELDS)
        self.temperature = temperature

    def build_prompt(self, response: QueryResponse) -> str:
        return self.template.format(
            question=response.user_question,
            answer=response.system_answer,
            chunks=format_chunks(response.chunks_related),
        )

    def evaluate(self, response: QueryResponse) -> EvaluationResult:
        """Grade an answer against the chunks it was generated from.

        Raises:
            ProviderError: If the completion call fails.
            EvaluationParseError: If the verdict cannot be parsed.
        """
        prompt = self.build_prompt(response)
        logger.info("Evaluating response...")
        evaluation_text = self.llm.generate(prompt, temperature=self.temperature)
        return parse_evaluation(evaluation_text)


def get_evaluator(
    settings: Settings, llm: Optional[BaseLLM] = None
) -> LLMJudgeEvaluator:
    """Create an evaluator from settings, reusing ``llm`` when given."""
    if llm is None:
        llm = create_llm(
            settings.provider,
            model=settings.llm_model,
            api_key=settings.api_key,
            temperature=EVALUATION_TEMPERATURE,
        )
    return LLMJudgeEvaluator(
        llm=llm,
        template=settings.evaluation_template or DEFAULT_EVALUATION_TEMPLATE,
    )
