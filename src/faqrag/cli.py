import argparse
import json
import logging
import sys
from pathlib import Path

from faqrag.config import DEFAULT_LOG_LEVEL, load_settings
from faqrag.errors import FAQRagError
from faqrag.pipelines import mean_score, run_ingestion, run_query, run_sample_questions

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _cmd_build_index(args: argparse.Namespace) -> int:
    settings = load_settings(args.config, require_query=False)
    configure_logging(settings.log_level)

    results = run_ingestion(settings)
    print("\n=== Indexing Complete ===")
    print(f"Total chunks: {results['chunks']}")
    print(f"Embedding model: {results['embedding_model']}")
    print(f"Vector store: {results['vector_store']}")
    if results["chunk_info"]:
        print(f"Chunk info: {results['chunk_info']}")
    return 0


def _cmd_query(args: argparse.Namespace) -> int:
    question = " ".join(args.question).strip()
    if not question:
        print("Please pass a question.", file=sys.stderr)
        print('Usage: faqrag query "<question text>"', file=sys.stderr)
        return 1

    settings = load_settings(args.config)
    configure_logging(settings.log_level)

    outcome = run_query(question, settings, evaluate=not args.no_evaluate)
    response = outcome.response
    print(f"\nAnswer: {response.system_answer}")
    print(f"\nRelated chunks: {len(response.chunks_related)}")
    if outcome.evaluation is not None:
        print(f"Evaluation score: {outcome.evaluation.score}")
    print("\nJSON:")
    print(json.dumps(response.model_dump(by_alias=True, exclude_none=True), indent=2))
    return 0


def _cmd_sample_questions(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    configure_logging(settings.log_level)

    outcomes = run_sample_questions(settings, evaluate=not args.no_evaluate)
    print(f"\n=== Answered {len(outcomes)} sample questions ===")
    for outcome in outcomes:
        score = outcome.evaluation.score if outcome.evaluation else None
        print(f"- {outcome.response.user_question} (score: {score})")

    average = mean_score(outcomes)
    if average is not None:
        print(f"Mean evaluation score: {average:.2f}")
    print(f"Query log: {settings.query_log_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faqrag",
        description="Answer questions about an FAQ document with retrieval-augmented generation",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML configuration file (default: config.toml if present, else environment only)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build-index", help="Chunk, embed and persist the document")
    build.set_defaults(func=_cmd_build_index)

    query = subparsers.add_parser("query", help="Answer a single question")
    query.add_argument("question", nargs="*", help="Question text")
    query.add_argument(
        "--no-evaluate", action="store_true", help="Skip grading the answer"
    )
    query.set_defaults(func=_cmd_query)

    samples = subparsers.add_parser(
        "sample-questions", help="Answer the built-in list of example questions"
    )
    samples.add_argument(
        "--no-evaluate", action="store_true", help="Skip grading the answers"
    )
    samples.set_defaults(func=_cmd_sample_questions)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except FAQRagError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
