from decimal import Decimal
from types import SimpleNamespace

import pytest

from projectdesk.services.calculations import (
    calculate_budget_status,
    calculate_contingency,
    calculate_forecast_remaining,
    calculate_project_progress,
    calculate_variance,
)


def test_variance_is_actual_minus_estimated():
    assert calculate_variance("100", "130") == Decimal("30.00")
    assert calculate_variance(Decimal("100"), Decimal("70")) == Decimal("-30.00")
    assert calculate_variance(None, None) == Decimal("0.00")


def test_forecast_remaining_never_negative():
    assert calculate_forecast_remaining("100", "40") == Decimal("60.00")
    assert calculate_forecast_remaining("100", "140") == Decimal("0.00")


def test_contingency_amount():
    assert calculate_contingency("2500", "10") == Decimal("250.00")
    assert calculate_contingency("99.99", "0") == Decimal("0.00")


@pytest.mark.parametrize(
    "estimated,actual,expected",
    [
        ("1000", "1000", "on_track"),
        ("1000", "1100", "on_track"),
        ("1000", "1101", "over_budget"),
        ("1000", "899", "under_budget"),
        ("0", "500", "on_track"),
    ],
)
def test_budget_status_bands(estimated, actual, expected):
    assert calculate_budget_status(estimated, actual) == expected


def test_progress_is_capped():
    items = [
        SimpleNamespace(estimated_cost=Decimal("100"), actual_cost=Decimal("50")),
        SimpleNamespace(estimated_cost=Decimal("100"), actual_cost=Decimal("25")),
    ]
    assert calculate_project_progress(items) == 37.5

    overspent = [SimpleNamespace(estimated_cost=Decimal("10"), actual_cost=Decimal("30"))]
    assert calculate_project_progress(overspent) == 100.0
    assert calculate_project_progress([]) == 0.0
