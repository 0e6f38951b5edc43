"""Core portfolio totals and allocation analytics."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from stockwise.portfolio.models import Holding, PortfolioSnapshot, PositionMetrics

FRAME_COLUMNS = [
    "Symbol",
    "Quantity",
    "Buy_Price",
    "Current_Price",
    "Market_Value",
    "Cost_Basis",
    "PnL",
    "Allocation_Percent",
]


def holdings_frame(holdings: Sequence[Holding]) -> pd.DataFrame:
    if not holdings:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    data = pd.DataFrame(
        {
            "Symbol": [h.symbol for h in holdings],
            "Quantity": [h.quantity for h in holdings],
            "Buy_Price": [h.buy_price for h in holdings],
            "Current_Price": [h.current_price for h in holdings],
            "Market_Value": [h.value for h in holdings],
            "PnL": [h.profit_loss for h in holdings],
        }
    )
    for column in ("Quantity", "Buy_Price", "Current_Price", "Market_Value", "PnL"):
        data[column] = data[column].astype(float)
    data["Cost_Basis"] = data["Quantity"] * data["Buy_Price"]
    total_value = calculate_total_portfolio_value(data)
    data["Allocation_Percent"] = data["Market_Value"] / total_value * 100.0 if total_value else 0.0
    return data[FRAME_COLUMNS]


def calculate_total_portfolio_value(frame: pd.DataFrame) -> float:
    return float(frame["Market_Value"].sum())


def calculate_total_cost(frame: pd.DataFrame) -> float:
    return float(frame["Cost_Basis"].sum())


def calculate_total_return_percent(total_profit_loss: float, total_cost: float) -> float:
    if total_cost == 0:
        return 0.0
    return total_profit_loss / total_cost * 100.0


def aggregate_portfolio(holdings: Sequence[Holding]) -> PortfolioSnapshot:
    """Reduce normalized holdings to portfolio totals and per-position allocation.

    Every division is guarded: an empty or zero-valued portfolio yields zero
    allocations and a zero return percentage.
    """
    frame = holdings_frame(holdings)
    if frame.empty:
        return PortfolioSnapshot(
            total_value=0.0,
            total_cost=0.0,
            total_profit_loss=0.0,
            total_profit_loss_percent=0.0,
        )
    total_value = calculate_total_portfolio_value(frame)
    total_cost = calculate_total_cost(frame)
    total_pnl = total_value - total_cost
    positions = tuple(
        PositionMetrics(
            symbol=str(row.Symbol),
            value=float(row.Market_Value),
            cost=float(row.Cost_Basis),
            profit_loss=float(row.PnL),
            allocation_percent=float(row.Allocation_Percent),
        )
        for row in frame.itertuples(index=False)
    )
    return PortfolioSnapshot(
        total_value=total_value,
        total_cost=total_cost,
        total_profit_loss=total_pnl,
        total_profit_loss_percent=calculate_total_return_percent(total_pnl, total_cost),
        positions=positions,
    )


def allocation_percentages(holdings: Sequence[Holding]) -> list[float]:
    return [position.allocation_percent for position in aggregate_portfolio(holdings).positions]
