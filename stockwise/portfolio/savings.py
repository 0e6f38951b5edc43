"""Savings goal projection and progress summaries."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from stockwise.portfolio.errors import DegradedRecordWarning, InvalidInputError, ParseError
from stockwise.portfolio.models import (
    AlternativePlan,
    AlternativePlans,
    SavingsGoal,
    SavingsOverview,
    SavingsPlan,
    SchedulePoint,
)
from stockwise.portfolio.normalizer import DegradedCallback, emit_degraded_warning

AFFORDABILITY_THRESHOLD_PERCENT = 50.0
EXTENSION_MONTHS = 12
RETURN_BUMP_PERCENT = 2.0
MAX_ANNUAL_RETURN_PERCENT = 1000.0
# ln of the largest compounding factor (1 + r)^n accepted; float64 overflows past ~709.78.
MAX_GROWTH_EXPONENT = 700.0


def _finite(field: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidInputError(field=field, message=f"{field} must be a number.")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidInputError(field=field, message=f"{field} must be a finite number.")
    return number


def _validate_inputs(
    monthly_income: Any,
    goal_amount: Any,
    months: Any,
    annual_return_percent: Any,
) -> tuple[float, float, int, float]:
    income = _finite("monthly_income", monthly_income)
    if income <= 0:
        raise InvalidInputError(field="monthly_income", message="monthly_income must be greater than 0.")
    goal = _finite("goal_amount", goal_amount)
    if goal <= 0:
        raise InvalidInputError(field="goal_amount", message="goal_amount must be greater than 0.")
    period_count = _finite("months", months)
    if period_count <= 0 or not period_count.is_integer():
        raise InvalidInputError(field="months", message="months must be a positive whole number.")
    rate = _finite("annual_return_percent", annual_return_percent)
    if rate < 0:
        raise InvalidInputError(
            field="annual_return_percent",
            message="annual_return_percent cannot be negative.",
        )
    if rate > MAX_ANNUAL_RETURN_PERCENT:
        raise InvalidInputError(
            field="annual_return_percent",
            message=f"annual_return_percent cannot exceed {MAX_ANNUAL_RETURN_PERCENT:g}.",
        )
    return income, goal, int(period_count), rate


def monthly_rate(annual_return_percent: float) -> float:
    return annual_return_percent / 100.0 / 12.0


def _check_growth(months: int, annual_return_percent: float) -> None:
    if months * math.log1p(monthly_rate(annual_return_percent)) > MAX_GROWTH_EXPONENT:
        raise InvalidInputError(
            field="months",
            message="months is too long for the given return rate; the projected balance overflows.",
        )


def _growth(rate: float, periods: Any) -> Any:
    # (1 + r)^n - 1 without cancellation at small rates.
    return np.expm1(periods * np.log1p(rate))


def required_monthly_contribution(goal_amount: float, months: int, annual_return_percent: float) -> float:
    """Payment that grows to `goal_amount` after `months` end-of-period contributions."""
    rate = monthly_rate(annual_return_percent)
    if rate == 0:
        return goal_amount / months
    return goal_amount * float(rate / _growth(rate, months))


def build_schedule(payment: float, months: int, annual_return_percent: float) -> tuple[SchedulePoint, ...]:
    # Ordinary annuity: the running balance compounds, then the period's contribution lands.
    rate = monthly_rate(annual_return_percent)
    periods = np.arange(1, months + 1, dtype=float)
    if rate == 0:
        balances = payment * periods
    else:
        balances = payment / rate * _growth(rate, periods)
    return tuple(
        SchedulePoint(period=int(period), contribution=payment, projected_balance=float(balance))
        for period, balance in zip(periods, balances)
    )


def _alternative(monthly_income: float, goal_amount: float, months: int, annual_return_percent: float) -> AlternativePlan:
    payment = required_monthly_contribution(goal_amount, months, annual_return_percent)
    return AlternativePlan(
        months=months,
        annual_return_percent=annual_return_percent,
        monthly_required=payment,
        percent_of_income=payment / monthly_income * 100.0,
    )


def project_savings(
    monthly_income: float,
    goal_amount: float,
    months: int,
    annual_return_percent: float,
    affordability_threshold: float = AFFORDABILITY_THRESHOLD_PERCENT,
    extension_months: int = EXTENSION_MONTHS,
    return_bump_percent: float = RETURN_BUMP_PERCENT,
) -> SavingsPlan:
    """Project the monthly saving needed to reach a goal.

    When the required amount exceeds `affordability_threshold` percent of income,
    two alternatives are attached: a longer timeline at the same rate and a higher
    return over the same timeline.
    """
    income, goal, period_count, rate = _validate_inputs(monthly_income, goal_amount, months, annual_return_percent)
    # Covers the alternatives too: they only ever extend the horizon or raise the rate.
    _check_growth(period_count + max(extension_months, 0), rate + max(return_bump_percent, 0.0))
    payment = required_monthly_contribution(goal, period_count, rate)
    percent_of_income = payment / income * 100.0
    if not math.isfinite(percent_of_income):
        raise InvalidInputError(field="monthly_income", message="monthly_income is too small to compare against.")
    total_contributions = payment * period_count

    alternatives = None
    if percent_of_income > affordability_threshold:
        alternatives = AlternativePlans(
            longer_timeline=_alternative(income, goal, period_count + extension_months, rate),
            higher_return=_alternative(income, goal, period_count, rate + return_bump_percent),
        )

    return SavingsPlan(
        monthly_required=payment,
        percent_of_income=percent_of_income,
        total_contributions=total_contributions,
        projected_returns=goal - total_contributions,
        schedule=build_schedule(payment, period_count, rate),
        alternative_plans=alternatives,
    )


def _amount(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _savings_goal(index: int, row: Any, on_degraded: DegradedCallback) -> SavingsGoal:
    if not isinstance(row, Mapping):
        on_degraded(
            DegradedRecordWarning(
                index=index,
                field="record",
                message=f"Expected a mapping, received {type(row).__name__}.",
            )
        )
        return SavingsGoal(category="", amount=0.0, goal=0.0)
    return SavingsGoal(
        category=str(row.get("category") or ""),
        amount=_amount(row.get("amount")),
        goal=_amount(row.get("goal")),
    )


def summarize_savings_goals(
    rows: Sequence[Mapping[str, Any]],
    on_degraded: DegradedCallback | None = None,
) -> SavingsOverview:
    """Total saved against total goal. Non-mapping rows count as empty goals and are reported."""
    if rows is None or isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise ParseError(field="savings", message="Savings goals must be a list of records.")
    callback = on_degraded or emit_degraded_warning
    goals = tuple(_savings_goal(idx, row, callback) for idx, row in enumerate(rows))
    total_saved = sum(goal.amount for goal in goals)
    total_goal = sum(goal.goal for goal in goals)
    progress = total_saved / total_goal * 100.0 if total_goal > 0 else 0.0
    return SavingsOverview(
        total_saved=total_saved,
        total_goal=total_goal,
        progress_percent=progress,
        goals=goals,
    )
