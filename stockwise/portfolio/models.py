"""Typed portfolio models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Action = Literal["BUY", "HOLD", "SELL", "EXIT", "TRIM", "TRACK", "HIGH_RISK"]


@dataclass(frozen=True)
class Holding:
    symbol: str
    quantity: float
    buy_price: float
    current_price: float
    value: float
    profit_loss: float
    profit_loss_percent: float | None = None


@dataclass(frozen=True)
class PositionMetrics:
    symbol: str
    value: float
    cost: float
    profit_loss: float
    allocation_percent: float


@dataclass(frozen=True)
class PortfolioSnapshot:
    total_value: float
    total_cost: float
    total_profit_loss: float
    total_profit_loss_percent: float
    positions: tuple[PositionMetrics, ...] = ()

    def allocation(self, index: int) -> float:
        return self.positions[index].allocation_percent


@dataclass(frozen=True)
class Recommendation:
    symbol: str
    percent: float | None
    allocation: float
    action: Action
    messages: tuple[str, ...]

    @property
    def message(self) -> str:
        return " ".join(self.messages)


@dataclass(frozen=True)
class SchedulePoint:
    period: int
    contribution: float
    projected_balance: float


@dataclass(frozen=True)
class AlternativePlan:
    months: int
    annual_return_percent: float
    monthly_required: float
    percent_of_income: float


@dataclass(frozen=True)
class AlternativePlans:
    longer_timeline: AlternativePlan
    higher_return: AlternativePlan


@dataclass(frozen=True)
class SavingsPlan:
    monthly_required: float
    percent_of_income: float
    total_contributions: float
    projected_returns: float
    schedule: tuple[SchedulePoint, ...]
    alternative_plans: AlternativePlans | None = None


@dataclass(frozen=True)
class SavingsGoal:
    category: str
    amount: float
    goal: float


@dataclass(frozen=True)
class SavingsOverview:
    total_saved: float
    total_goal: float
    progress_percent: float
    goals: tuple[SavingsGoal, ...] = ()


@dataclass
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"
