"""Weighted-average costing and usage-based depreciation."""

from dataclasses import dataclass


def weighted_average_cost(
    stock_before: float,
    unit_cost_before: float,
    qty: float,
    unit_cost: float,
) -> float:
    """
    Blend the cost of incoming stock into the current unit cost.

    Returns the current cost unchanged when the incoming cost is not positive
    or when the resulting stock would be zero.
    """
    if unit_cost <= 0:
        return unit_cost_before
    total = stock_before + qty
    if total == 0:
        return unit_cost_before
    return (stock_before * unit_cost_before + qty * unit_cost) / total


def per_hour_depreciation(
    acquisition_cost: float,
    residual_value: float | None,
    useful_life_hours: float | None,
) -> float:
    depreciable = acquisition_cost - (residual_value or 0.0)
    return depreciable / max(useful_life_hours or 0.0, 1.0)


def book_value(acquisition_cost: float, accumulated_depreciation: float) -> float:
    """Acquisition cost less accumulated depreciation, never negative."""
    return max(0.0, acquisition_cost - accumulated_depreciation)


def remaining_life_percent(
    useful_life_hours: float | None, hours_used: float
) -> float:
    if not useful_life_hours or useful_life_hours <= 0:
        return 0.0
    return max(0.0, (useful_life_hours - hours_used) / useful_life_hours * 100.0)


@dataclass(frozen=True)
class DepreciationStep:
    """Outcome of depreciating an asset by a number of hours."""

    generated: float
    hours_used: float
    accumulated: float
    book_value: float
    life_exhausted: bool


def apply_depreciation(
    acquisition_cost: float,
    residual_value: float | None,
    useful_life_hours: float | None,
    hours_used: float,
    accumulated_depreciation: float,
    hours: float,
) -> DepreciationStep:
    generated = (
        per_hour_depreciation(acquisition_cost, residual_value, useful_life_hours)
        * hours
    )
    new_hours = hours_used + hours
    accumulated = accumulated_depreciation + generated
    exhausted = bool(useful_life_hours) and new_hours >= useful_life_hours
    return DepreciationStep(
        generated=generated,
        hours_used=new_hours,
        accumulated=accumulated,
        book_value=book_value(acquisition_cost, accumulated),
        life_exhausted=exhausted,
    )
