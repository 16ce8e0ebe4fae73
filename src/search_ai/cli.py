"""
Command Line Entry Point

    search-ai "what changed in the 2024 EU AI act" --k 8 --metrics

Reads the OpenAI key and pipeline overrides from the environment (and a
``.env`` file), runs one search, and prints the summary.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

# Must load .env from the working directory before importing settings
load_dotenv(find_dotenv(usecwd=True))

from .config import settings  # noqa: E402
from .core.errors import SearchAIError  # noqa: E402
from .indexer import SearchResponse  # noqa: E402
from .pipeline import SearchContext, run_search  # noqa: E402

logger = logging.getLogger("searchai.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="search-ai",
        description="Search the web for a question and summarize what the top pages say.",
    )
    parser.add_argument("query", nargs="+", help="Question to research.")
    parser.add_argument("--k", type=int, default=None, help="Number of ranked chunks used as context.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    parser.add_argument("--metrics", action="store_true", help="Print phase timings and fetch counters.")
    return parser


def _print_metrics(response: SearchResponse) -> None:
    metrics = response.metrics
    print("\nMetrics:")
    for phase in ("fetch_ms", "ingest_ms", "embed_ms", "rank_ms", "generate_ms", "total_ms"):
        print(f"  {phase:<12} {getattr(metrics, phase):10.1f}")
    print(f"  content_length {metrics.content_length}")
    print(f"  chunk_count    {metrics.chunk_count}")
    print(f"  stored_vectors {metrics.stored_vectors}")
    if metrics.fetch is not None:
        for name, value in metrics.fetch.model_dump().items():
            print(f"  fetch.{name:<18} {value}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    context = SearchContext(
        query=" ".join(args.query),
        api_key=settings.openai_api_key,
        k=args.k,
        config=settings.pipeline,
    )

    try:
        response = asyncio.run(run_search(context))
    except SearchAIError as exc:
        logger.debug("Search failed", exc_info=exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Summary:")
    print(response.summary)
    if args.metrics:
        _print_metrics(response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
