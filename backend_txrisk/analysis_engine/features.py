"""
Transaction feature extraction.

Converts one TransactionRecord plus the user's history snapshot into a
FeatureVector: amount, timing, velocity, recipient, pattern, profile and
network features. Pure and total: malformed input is normalized (negative
or non-finite amounts read as 0), never raised. No scoring logic.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from backend_txrisk.analysis_engine.models import TransactionRecord, UserHistory

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

# Cold-start policy: a user with no history reads as neither diverse nor concentrated.
COLD_START_RECIPIENT_DIVERSITY = 0.5

ROUND_AMOUNT_UNITS = (1000, 500, 100)

# A pattern repeats when the same (recipient, amount) pair was seen this many times before.
REPEATING_PATTERN_MIN_OCCURRENCES = 2


@dataclass(frozen=True)
class FeatureVector:
    """
    Features of one transaction in the context of the user's history.

    Produced fresh per assessment, shared read-only by all analyzers and
    never persisted.
    """

    # Amount
    amount: float
    amount_log: float
    amount_z_score: float
    # Timing
    hour_of_day: int
    day_of_week: int
    """0 = Sunday ... 6 = Saturday."""
    time_since_last_tx_ms: int
    # Velocity
    tx_count_last_24h: int
    tx_count_last_1h: int
    volume_last_24h: float
    # Recipient
    recipient_diversity: float
    is_new_recipient: bool
    recipient_risk_score: float
    # Pattern
    round_amount: bool
    sequential_pattern: bool
    repeating_pattern: bool
    # Profile
    account_age_days: int
    total_transactions: int
    average_amount: float
    kyc_level: int
    # Network passthrough
    gas_price: float
    network_congestion: float
    cross_chain: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _safe_amount(value: float) -> float:
    """Non-finite or negative amounts read as 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def _finite(values: tuple[float, ...]) -> list[float]:
    out: list[float] = []
    for v in values:
        try:
            f = float(v)
        except (TypeError, ValueError):
            continue
        if math.isfinite(f):
            out.append(f)
    return out


def calculate_z_score(value: float, samples: list[float]) -> float:
    """Z-score against the population std-dev; 0 for < 2 samples or zero spread."""
    if len(samples) < 2:
        return 0.0
    mean = sum(samples) / len(samples)
    variance = sum((s - mean) ** 2 for s in samples) / len(samples)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def calculate_average(samples: list[float]) -> float:
    return sum(samples) / len(samples) if samples else 0.0


def count_recent_transactions(history: UserHistory, now_ms: int, window_ms: int) -> int:
    """Count history entries with timestamp in [now - window, now)."""
    start = now_ms - window_ms
    return sum(1 for t in history.transactions if start <= t.timestamp_ms < now_ms)


def sum_recent_volume(history: UserHistory, now_ms: int, window_ms: int) -> float:
    """Sum of amounts with timestamp in [now - window, now)."""
    start = now_ms - window_ms
    return sum(
        _safe_amount(t.amount_usd)
        for t in history.transactions
        if start <= t.timestamp_ms < now_ms
    )


def calculate_recipient_diversity(history: UserHistory) -> float:
    """Distinct recipients / transaction count, clamped to [0, 1]; cold start reads 0.5."""
    total = len(history.transactions)
    if total == 0:
        return COLD_START_RECIPIENT_DIVERSITY
    distinct = len(history.recipients) or len({t.recipient for t in history.transactions})
    return max(0.0, min(1.0, distinct / total))


def is_round_amount(amount: float) -> bool:
    """True for a positive exact multiple of 100, 500 or 1000 USD."""
    if amount <= 0:
        return False
    return any(amount % unit == 0 for unit in ROUND_AMOUNT_UNITS)


def detect_sequential_pattern(amounts: list[float], amount: float) -> bool:
    """
    True when the last two prior amounts and the current one step by the
    same non-zero difference (e.g. 100, 200, 300).
    """
    if len(amounts) < 2:
        return False
    a, b = amounts[-2], amounts[-1]
    step = b - a
    if step == 0:
        return False
    return math.isclose(amount - b, step, rel_tol=1e-9, abs_tol=1e-6)


def detect_repeating_pattern(history: UserHistory, tx: TransactionRecord, amount: float) -> bool:
    """True when the same recipient already received this exact amount repeatedly."""
    seen = sum(
        1
        for t in history.transactions
        if t.recipient == tx.recipient and math.isclose(_safe_amount(t.amount_usd), amount, abs_tol=1e-6)
    )
    return seen >= REPEATING_PATTERN_MIN_OCCURRENCES


def _last_transaction_ms(history: UserHistory) -> int | None:
    if history.last_transaction_ms is not None:
        return history.last_transaction_ms
    if history.transactions:
        return max(t.timestamp_ms for t in history.transactions)
    return None


def extract_features(tx: TransactionRecord, history: UserHistory, now_ms: int) -> FeatureVector:
    """
    Build the feature vector for one transaction.

    Args:
        tx: Transaction being scored.
        history: Read-only snapshot of the user's prior activity.
        now_ms: Scoring time (epoch milliseconds, UTC); all windows are [now - w, now).

    Returns:
        FeatureVector; never raises for malformed numeric input.
    """
    amount = _safe_amount(tx.amount_usd)
    samples = _finite(history.amounts)

    moment = datetime.fromtimestamp(now_ms / 1000.0, tz=timezone.utc)
    # isoweekday: Monday=1 .. Sunday=7 -> Sunday=0 .. Saturday=6
    day_of_week = moment.isoweekday() % 7

    last_ms = _last_transaction_ms(history)
    since_last = max(0, now_ms - last_ms) if last_ms is not None else 0

    recipient_risk = _safe_amount(tx.recipient_risk_score)

    return FeatureVector(
        amount=amount,
        amount_log=math.log(amount + 1),
        amount_z_score=calculate_z_score(amount, samples),
        hour_of_day=moment.hour,
        day_of_week=day_of_week,
        time_since_last_tx_ms=int(since_last),
        tx_count_last_24h=count_recent_transactions(history, now_ms, MS_PER_DAY),
        tx_count_last_1h=count_recent_transactions(history, now_ms, MS_PER_HOUR),
        volume_last_24h=sum_recent_volume(history, now_ms, MS_PER_DAY),
        recipient_diversity=calculate_recipient_diversity(history),
        is_new_recipient=tx.recipient not in history.recipients,
        recipient_risk_score=min(1.0, recipient_risk),
        round_amount=is_round_amount(amount),
        sequential_pattern=detect_sequential_pattern(samples, amount),
        repeating_pattern=detect_repeating_pattern(history, tx, amount),
        account_age_days=max(0, int(history.account_age_days)),
        total_transactions=len(history.transactions),
        average_amount=calculate_average(samples),
        kyc_level=max(0, int(tx.kyc_level)),
        gas_price=_safe_amount(tx.gas_price),
        network_congestion=_safe_amount(tx.network_congestion),
        cross_chain=bool(tx.cross_chain),
    )
