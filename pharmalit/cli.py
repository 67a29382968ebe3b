"""
Command-line entry point for ranking a batch of research papers.

Reads a JSON list of paper records (or an object with a ``papers`` list),
analyzes them and prints the ranked search result as JSON.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .analyzer import PaperAnalyzer
from .config import AnalysisConfig

logger = logging.getLogger(__name__)


def _load_papers(path: str) -> list[dict[str, Any]]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("papers", [])
    if not isinstance(raw, list):
        raise ValueError("Expected a JSON list of papers or an object with a 'papers' list")
    return raw


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="pharmalit", description="Rank research papers for pharmaceutical relevance")
    subparsers = parser.add_subparsers(dest="command", required=True)

    rank = subparsers.add_parser("rank", help="Analyze and rank papers from a JSON file")
    rank.add_argument("path", help="JSON file with paper records")
    rank.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    rank.add_argument("--limit", type=int, default=None, help="Only print the top N papers")
    rank.add_argument("--explain", action="store_true", help="Attach a score breakdown to each paper")
    rank.add_argument("--log-level", dest="log_level", default=None, help="Override PHARMALIT_LOG_LEVEL")
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        config = AnalysisConfig.from_env()
    except ValueError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 1

    level_name = (args.log_level or config.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        papers = _load_papers(args.path)
    except (OSError, ValueError) as exc:
        logger.error("Could not read papers from %s: %s", args.path, exc)
        return 1

    analyzer = PaperAnalyzer(config)
    result = analyzer.search_result(papers)
    if args.limit is not None:
        result.papers = result.papers[: max(args.limit, 0)]

    payload = result.to_dict()
    if args.explain:
        for entry, analyzed in zip(payload["papers"], result.papers):
            entry["explanation"] = analyzer.explain(analyzed)

    print(json.dumps(payload, indent=2 if args.pretty else None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
