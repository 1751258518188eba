from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

CENTS = Decimal("0.01")
BUDGET_STATUS_BAND = Decimal("10")


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_variance(estimated, actual) -> Decimal:
    return _quantize(_as_decimal(actual) - _as_decimal(estimated))


def calculate_forecast_remaining(estimated, actual) -> Decimal:
    return _quantize(max(_as_decimal(estimated) - _as_decimal(actual), Decimal("0")))


def calculate_contingency(estimated, percentage) -> Decimal:
    return _quantize(_as_decimal(estimated) * _as_decimal(percentage) / Decimal("100"))


def calculate_budget_status(estimated, actual) -> str:
    estimated_value = _as_decimal(estimated)
    if estimated_value == 0:
        return "on_track"
    variance_pct = calculate_variance(estimated, actual) / estimated_value * Decimal("100")
    if variance_pct > BUDGET_STATUS_BAND:
        return "over_budget"
    if variance_pct < -BUDGET_STATUS_BAND:
        return "under_budget"
    return "on_track"


def calculate_project_progress(budget_items: Iterable) -> float:
    """Percentage of the estimated budget already spent, capped at 100."""
    total_estimated = Decimal("0")
    total_actual = Decimal("0")
    for item in budget_items or []:
        total_estimated += _as_decimal(item.estimated_cost)
        total_actual += _as_decimal(item.actual_cost)
    if total_estimated == 0:
        return 0.0
    progress = min(total_actual / total_estimated * Decimal("100"), Decimal("100"))
    return float(_quantize(progress))
