"""
File-backed relationship graph for network risk checks.

Known mixer addresses, exchanges with suspicious patterns and per-address
risk scores are loaded from JSON files (paths from settings). Optional
counterparty edges let a risky neighbour taint an address. Missing or
unreadable files read as empty: every lookup then reports "not detected".
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from backend_txrisk.txrisk_logging import get_logger

logger = get_logger(__name__)


def _load_json(path: Path | None) -> Any:
    if path is None:
        return None
    if not path.is_file():
        logger.debug("relationship_graph_file_missing", path=str(path))
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("relationship_graph_load_failed", path=str(path), error=str(e))
        return None


def load_address_set(path: Path | None) -> set[str]:
    """JSON array of addresses -> set. Returns empty set on failure."""
    data = _load_json(path)
    if not isinstance(data, list):
        return set()
    return {str(a).strip() for a in data if a}


def load_risk_scores(path: Path | None) -> dict[str, float]:
    """JSON object {address: risk in [0, 1]} -> dict. Bad entries are skipped."""
    data = _load_json(path)
    if not isinstance(data, dict):
        return {}
    out: dict[str, float] = {}
    for addr, raw in data.items():
        try:
            out[str(addr).strip()] = max(0.0, min(1.0, float(raw)))
        except (TypeError, ValueError):
            continue
    return out


class StaticRelationshipGraph:
    """RelationshipGraphService over in-memory address sets."""

    def __init__(
        self,
        *,
        mixers: Iterable[str] = (),
        suspicious_exchanges: Iterable[str] = (),
        risk_scores: Mapping[str, float] | None = None,
        counterparties: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._mixers = frozenset(mixers)
        self._suspicious_exchanges = frozenset(suspicious_exchanges)
        self._risk_scores = dict(risk_scores or {})
        self._counterparties = {k: frozenset(v) for k, v in (counterparties or {}).items()}

    @classmethod
    def from_files(
        cls,
        mixers_path: Path | None = None,
        exchanges_path: Path | None = None,
        risk_scores_path: Path | None = None,
    ) -> "StaticRelationshipGraph":
        graph = cls(
            mixers=load_address_set(mixers_path),
            suspicious_exchanges=load_address_set(exchanges_path),
            risk_scores=load_risk_scores(risk_scores_path),
        )
        logger.info(
            "relationship_graph_loaded",
            mixers=len(graph._mixers),
            suspicious_exchanges=len(graph._suspicious_exchanges),
            scored_addresses=len(graph._risk_scores),
        )
        return graph

    def _neighbourhood(self, address: str) -> frozenset[str]:
        return frozenset({address}) | self._counterparties.get(address, frozenset())

    def _connection_risk(self, address: str) -> dict[str, Any]:
        risky = {
            a: self._risk_scores[a]
            for a in self._neighbourhood(address)
            if a in self._risk_scores
        }
        score = max(risky.values()) if risky else 0.0
        return {"risk_score": score, "risky_connections": sorted(risky)}

    async def recipient_connections(self, address: str) -> dict[str, Any]:
        return self._connection_risk(address)

    async def sender_connections(self, address: str) -> dict[str, Any]:
        return self._connection_risk(address)

    async def mixer_interaction(self, address: str) -> dict[str, Any]:
        hits = sorted(self._neighbourhood(address) & self._mixers)
        return {"detected": bool(hits), "mixers": hits}

    async def exchange_interaction(self, address: str) -> dict[str, Any]:
        hits = sorted(self._neighbourhood(address) & self._suspicious_exchanges)
        return {"suspicious": bool(hits), "exchanges": hits}
