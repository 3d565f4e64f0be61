from .judge import LLMJudgeEvaluator, format_chunks, get_evaluator, parse_evaluation

__all__ = ["LLMJudgeEvaluator", "format_chunks", "get_evaluator", "parse_evaluation"]
