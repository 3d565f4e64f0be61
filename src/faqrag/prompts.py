"""Prompt templates for answering and for grading answers."""

from string import Formatter

DEFAULT_CONTEXT_TEMPLATE = """You are a helpful support assistant answering questions about the company FAQ.
Answer the question using only the context below. If the context does not
contain the answer, say that you don't know instead of guessing.

Context:
{context}

Question: {question}

Answer:"""

# Literal braces in the JSON example are doubled for str.format.
DEFAULT_EVALUATION_TEMPLATE = """You are evaluating the answer produced by a retrieval-augmented FAQ assistant.

Question:
{question}

Answer:
{answer}

Retrieved chunks:
{chunks}

Score each criterion from 0 to 10:
- chunk_relevance: how relevant the retrieved chunks are to the question
- answer_accuracy: how well the answer is supported by the chunks
- completeness: how fully the answer addresses the question

Respond with a single JSON object and nothing else:
{{"overall_score": <number>, "chunk_relevance": <number>, "answer_accuracy": <number>, "completeness": <number>, "reason": "<one or two sentences>"}}"""

ANSWER_TEMPLATE_FIELDS = ("context", "question")
EVALUATION_TEMPLATE_FIELDS = ("question", "answer", "chunks")

ANSWER_TEMPERATURE = 0.3
EVALUATION_TEMPERATURE = 0.2


def validate_template(template: str, fields: tuple[str, ...]) -> str:
    """Return the template if it references every placeholder in ``fields``."""
    names = {name for _, name, _, _ in Formatter().parse(template) if name}
    missing = [f for f in fields if f not in names]
    if missing:
        raise ValueError(f"Prompt template is missing placeholders: {missing}")
    return template
