#!/usr/bin/env python3
"""
Run one provider comparison and print each stage to the terminal.
Shows the loaded rate tables, every provider quote, the chosen provider and
the validation outcome.

Usage (from repo root):
  python scripts/run_compare_demo.py --country GB --salary 65000 --currency GBP --role "Software Engineer"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.quotes.comparison import build_comparison_response
from src.quotes.engine import EORQuoteEngine
from src.quotes.errors import EORError
from src.utils.config_loader import load_eor_config


def setup_logging():
    """Log to terminal at INFO so every stage is visible."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, data: dict | list | str):
    """Print a stage header and data to the terminal."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)
    print()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare mock EOR provider quotes")
    parser.add_argument("--country", default="US", help="ISO alpha-2 country code")
    parser.add_argument("--salary", type=float, default=120000)
    parser.add_argument("--currency", default="USD")
    parser.add_argument("--role", default="Software Engineer")
    parser.add_argument("--config", type=Path, default=None, help="Path to eor_config.yml")
    return parser.parse_args(argv)


async def main(argv=None):
    args = parse_args(argv)
    setup_logging()

    engine = EORQuoteEngine(load_eor_config(args.config))
    engine.reload_rate_tables()
    print_stage("RATE TABLES", engine.rate_tables.status())

    try:
        record = await engine.compare_providers(args.country, args.salary, args.currency, args.role)
    except EORError as exc:
        print_stage("COMPARISON FAILED", {"error": type(exc).__name__, "message": exc.message, **exc.payload})
        return 1
    response = build_comparison_response(record, engine.comparison.rules())

    print_stage("PROVIDER QUOTES", response["providers"])
    print_stage(
        "CHOSEN PROVIDER",
        {
            "provider": response["chosen_provider"],
            "costs": record.chosen_costs.to_dict(),
            "rules": response["rules"],
        },
    )
    print_stage("VALIDATION", response["validation"])
    print_stage(
        "QUOTE RECORD",
        {"id": record.id, "status": record.status.value, "requires_manual_review": record.requires_manual_review},
    )
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
