"""Estimation calculator: projects readings forward and classifies urgency.

Everything here is a pure function of an item record and a moment in time.
Bad input never raises; it degrades to a conservative default instead.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from .estimation import EstimationResult
from .item import Item
from .period import ConsumptionPeriod
from .status import Status
from .timestamps import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

# days_left reported when nothing is being consumed
NEVER_DAYS = 999

CRITICAL_DAYS = 7
WARNING_DAYS = 30


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _round(value: float) -> int:
    """Round to nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def _aware(now: Optional[datetime]) -> datetime:
    if now is None:
        return utcnow()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _elapsed_seconds(item: Item, now: datetime) -> Optional[float]:
    """Seconds since the reading was recorded, floored at zero. None if unknown."""
    updated = parse_timestamp(item.updated_at)
    if updated is None:
        return None
    return max(0.0, (now - updated).total_seconds())


def daily_rate(rate: float, period: ConsumptionPeriod) -> float:
    """Convert a per-period consumption rate to units per day."""
    return rate / period.days


def hourly_rate(rate: float, period: ConsumptionPeriod) -> float:
    """Convert a per-period consumption rate to units per hour."""
    return rate / period.hours


def classify_status(days_left: float) -> Status:
    """Map days until maintenance to an urgency status."""
    if days_left <= CRITICAL_DAYS:
        return Status.CRITICAL
    if days_left <= WARNING_DAYS:
        return Status.WARNING
    return Status.NORMAL


def project_current_reading(item: Optional[Item], now: Optional[datetime] = None) -> float:
    """
    Extrapolate the item's reading to `now` at its hourly consumption rate.

    Only whole elapsed hours count, and a future `updated_at` counts as zero
    elapsed time. The adjustment offset is added on top. Without a usable
    timestamp or rate the recorded reading is returned as-is.
    """
    if item is None or not _is_number(item.current_reading):
        return 0
    reading = item.current_reading
    now = _aware(now)

    elapsed = _elapsed_seconds(item, now)
    if elapsed is None:
        return reading

    period = ConsumptionPeriod.parse(item.consumption_period)
    if period is None or not _is_number(item.consumption_rate):
        logger.warning(
            "Cannot project reading for item %s: bad rate %r per %r",
            item.id, item.consumption_rate, item.consumption_period,
        )
        return reading

    hours = elapsed // 3600
    offset = item.adjustment_offset if _is_number(item.adjustment_offset) else 0
    projected = reading + hourly_rate(item.consumption_rate, period) * hours + offset
    if not math.isfinite(projected):
        logger.warning("Cannot project reading for item %s: projection overflows", item.id)
        return reading
    return _round(projected)


def _due_date(now: datetime, days_left: int) -> datetime:
    """now + days_left, clamped to the latest representable moment."""
    try:
        return now + timedelta(days=days_left)
    except OverflowError:
        return datetime.max.replace(tzinfo=timezone.utc)


def _fallback_estimation(item: Optional[Item], now: datetime) -> EstimationResult:
    """Zeroed result for items that can't be estimated. Means unknown, not urgent."""
    reading = 0
    threshold = 0
    if item is not None:
        if _is_number(item.current_reading):
            reading = item.current_reading
        if _is_number(item.maintenance_threshold):
            threshold = item.maintenance_threshold
    return EstimationResult(
        days_left=0,
        weeks_left=0,
        estimated_date=now,
        estimated_current_reading=reading,
        next_maintenance_reading=reading + threshold,
        remaining_units=threshold,
        status=Status.NORMAL,
    )


def _invalid_reason(item: Optional[Item]) -> Optional[str]:
    if item is None:
        return "no item"
    for field in ("current_reading", "consumption_rate", "maintenance_threshold"):
        if not _is_number(getattr(item, field)):
            return f"{field} is not a number ({getattr(item, field)!r})"
    if ConsumptionPeriod.parse(item.consumption_period) is None:
        return f"unknown consumption period {item.consumption_period!r}"
    return None


def calculate_estimation(item: Optional[Item], now: Optional[datetime] = None) -> EstimationResult:
    """
    Estimate when an item next needs maintenance.

    Logic:
    - Convert the consumption rate to a daily rate
    - Project the reading forward by whole elapsed days (never backward)
    - Next maintenance is due at the recorded reading + threshold
    - days_left = remaining units / daily rate, rounded up, never negative
    - A zero rate means maintenance is never reached: NEVER_DAYS

    Invalid or missing fields produce a zeroed NORMAL result instead of
    raising. Callers should read that as "unknown".
    """
    now = _aware(now)
    reason = _invalid_reason(item)
    if reason is not None:
        logger.warning("Cannot estimate item %s: %s", getattr(item, "id", None), reason)
        return _fallback_estimation(item, now)

    period = ConsumptionPeriod.parse(item.consumption_period)
    rate = item.consumption_rate
    per_day = daily_rate(rate, period)

    elapsed = _elapsed_seconds(item, now) or 0.0
    days_since_update = elapsed // 86400

    projected = item.current_reading + per_day * days_since_update
    if not math.isfinite(projected):
        logger.warning("Cannot estimate item %s: projected reading overflows", item.id)
        return _fallback_estimation(item, now)

    estimated_current = _round(projected)
    next_reading = item.current_reading + item.maintenance_threshold
    remaining = next_reading - estimated_current

    if per_day > 0:
        # Multiply before dividing so whole-number inputs stay exact.
        days = remaining * period.days / rate
        if math.isfinite(days):
            days_left = max(0, math.ceil(days))
        else:
            # Rate too small to represent the quotient
            days_left = NEVER_DAYS if days > 0 else 0
    else:
        days_left = NEVER_DAYS

    return EstimationResult(
        days_left=days_left,
        weeks_left=days_left / 7,
        estimated_date=_due_date(now, days_left),
        estimated_current_reading=estimated_current,
        next_maintenance_reading=next_reading,
        remaining_units=remaining,
        status=classify_status(days_left),
    )


def remaining_units(item: Item, now: Optional[datetime] = None) -> float:
    """Units left before the next maintenance, using the hourly projection."""
    projected = project_current_reading(item, now)
    threshold = item.maintenance_threshold if _is_number(item.maintenance_threshold) else 0
    base = item.current_reading if _is_number(item.current_reading) else 0
    return base + threshold - projected


def progress_percent(item: Item, now: Optional[datetime] = None) -> float:
    """Share of the maintenance interval already consumed, capped at 100."""
    threshold = item.maintenance_threshold
    if not _is_number(threshold) or threshold <= 0:
        return 100.0
    base = item.current_reading if _is_number(item.current_reading) else 0
    consumed = project_current_reading(item, now) - base
    return min(100.0, consumed / threshold * 100)
