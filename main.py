"""
Main entrypoint: score one transaction from a JSON file and print the assessment.

Input file: {"transaction": {...}, "history": {...}, "now_ms": <optional int>, "user_id": <optional>}
Keys accept snake_case or camelCase (amountUsd, recipientRiskScore, accountAge, ...).

Env: OLLAMA_ENDPOINT, HUGGING_FACE_API_KEY, TXRISK_* timeouts, *_ADDRESSES_PATH (see backend_txrisk.config.env).

Usage:
  python main.py path/to/event.json
  python main.py - < event.json
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from backend_txrisk.txrisk_logging import configure_structlog, get_logger

logger = get_logger("main")


def _read_payload(source: str) -> dict[str, Any]:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, encoding="utf-8") as f:
        return json.load(f)


def main(argv: list[str] | None = None) -> int:
    """Parse args, score the event, print assessment JSON. Returns exit code."""
    parser = argparse.ArgumentParser(description="Score a transaction with the TxRisk engine.")
    parser.add_argument("event", help="JSON file with transaction + history, or - for stdin")
    parser.add_argument("--deadline", type=float, default=None, help="Time budget in seconds")
    parser.add_argument("--pretty", action="store_true", help="Indent output JSON")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-format", choices=("json", "console"), default=None, help="Override LOG_FORMAT")
    args = parser.parse_args(argv)
    if args.log_level or args.log_format:
        configure_structlog(args.log_level, args.log_format)

    from backend_txrisk.analysis_engine.models import TransactionRecord, UserHistory
    from backend_txrisk.analytics import RiskEngine

    try:
        payload = _read_payload(args.event)
        tx = TransactionRecord.from_dict(payload.get("transaction") or {})
        history = UserHistory.from_dict(payload.get("history") or {})
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.error("main_invalid_input", source=args.event, error=str(e))
        return 2

    engine = RiskEngine.from_settings()
    assessment = engine.assess_transaction(
        tx,
        history,
        now_ms=payload.get("now_ms"),
        deadline=args.deadline,
        user_id=payload.get("user_id"),
    )
    if args.pretty:
        print(json.dumps(assessment.to_dict(), indent=2, sort_keys=True))
    else:
        print(assessment.to_json())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
