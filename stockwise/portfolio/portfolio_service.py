"""Portfolio dashboard orchestration service."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from stockwise.portfolio.analytics_core import aggregate_portfolio
from stockwise.portfolio.errors import DegradedRecordWarning, InvalidInputError, ParseError
from stockwise.portfolio.models import Holding, Recommendation, SavingsOverview, ValidationIssue
from stockwise.portfolio.normalizer import apply_prices, normalize_holdings
from stockwise.portfolio.recommendations import (
    DASHBOARD_LIMIT,
    RECOMMENDATIONS_LIMIT,
    classify_portfolio,
    rank_recommendations,
)
from stockwise.portfolio.savings import AFFORDABILITY_THRESHOLD_PERCENT, project_savings, summarize_savings_goals
from stockwise.portfolio.store import PortfolioStore

LOGGER = logging.getLogger(__name__)
FINANCIAL_DISCLAIMER = "Informational use only. This is not financial advice."


def validation_error_payload(issues: list[ValidationIssue]) -> dict[str, Any]:
    return {
        "ok": False,
        "error": {
            "type": "validation_error",
            "errors": [
                {"field": issue.field, "message": issue.message, "row": issue.row, "code": issue.code}
                for issue in issues
            ],
        },
    }


def _recommendation_payload(recommendation: Recommendation) -> dict[str, Any]:
    payload = asdict(recommendation)
    payload["message"] = recommendation.message
    return payload


class PortfolioService:
    def __init__(
        self,
        store: PortfolioStore,
        recommendations_limit: int = RECOMMENDATIONS_LIMIT,
        dashboard_limit: int = DASHBOARD_LIMIT,
        affordability_threshold: float = AFFORDABILITY_THRESHOLD_PERCENT,
    ) -> None:
        self.store = store
        self.recommendations_limit = recommendations_limit
        self.dashboard_limit = dashboard_limit
        self.affordability_threshold = affordability_threshold

    def _normalize(self, records: Any) -> tuple[list[Holding], list[DegradedRecordWarning]]:
        degraded: list[DegradedRecordWarning] = []
        holdings = normalize_holdings(records, on_degraded=degraded.append)
        if degraded:
            LOGGER.warning("degraded holding records: count=%s rows=%s", len(degraded), len(holdings))
        return holdings, degraded

    def _stored_holdings(self) -> list[Holding]:
        holdings, _ = self._normalize(self.store.load_holdings())
        return holdings

    def save_holdings(self, records: Any) -> dict[str, Any]:
        try:
            holdings, degraded = self._normalize(records)
        except ParseError as error:
            LOGGER.info("holdings batch rejected: %s", error.message)
            return validation_error_payload([ValidationIssue(field=error.field, message=error.message, code="parse_error")])
        self.store.save_holdings(list(records))
        return {
            "ok": True,
            "message": "Portfolio holdings saved.",
            "rows": len(holdings),
            "warnings": [
                {"row": issue.index, "field": issue.field, "message": issue.message} for issue in degraded
            ],
        }

    def refresh_prices(self, prices: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(prices, dict):
            return validation_error_payload(
                [ValidationIssue(field="prices", message="Prices must map symbols to prices.", code="parse_error")]
            )
        updated = 0

        def reprice(records: list[Any]) -> list[Any]:
            nonlocal updated
            holdings, _ = self._normalize(records)
            repriced = apply_prices(holdings, prices)
            updated = sum(1 for before, after in zip(holdings, repriced) if before is not after)
            return [asdict(holding) for holding in repriced]

        stored = self.store.update_holdings(reprice)
        return {"ok": True, "updated": updated, "rows": len(stored)}

    def dashboard(self) -> dict[str, Any]:
        holdings = self._stored_holdings()
        snapshot = aggregate_portfolio(holdings)
        top = rank_recommendations(classify_portfolio(holdings, snapshot), self.dashboard_limit)
        return {
            "ok": True,
            "total_value": snapshot.total_value,
            "total_cost": snapshot.total_cost,
            "total_profit_loss": snapshot.total_profit_loss,
            "total_profit_loss_percent": snapshot.total_profit_loss_percent,
            "holdings": [asdict(holding) for holding in holdings],
            "positions": [asdict(position) for position in snapshot.positions],
            "recommendations": [_recommendation_payload(rec) for rec in top],
            "disclaimer": FINANCIAL_DISCLAIMER,
        }

    def recommendations(self, limit: int | None = None) -> dict[str, Any]:
        ranked = rank_recommendations(
            classify_portfolio(self._stored_holdings()),
            self.recommendations_limit if limit is None else limit,
        )
        return {
            "ok": True,
            "recommendations": [_recommendation_payload(rec) for rec in ranked],
            "disclaimer": FINANCIAL_DISCLAIMER,
        }

    def savings_plan(
        self,
        monthly_income: float,
        goal_amount: float,
        months: int,
        annual_return_percent: float,
    ) -> dict[str, Any]:
        try:
            plan = project_savings(
                monthly_income,
                goal_amount,
                months,
                annual_return_percent,
                affordability_threshold=self.affordability_threshold,
            )
        except InvalidInputError as error:
            return validation_error_payload([ValidationIssue(field=error.field, message=error.message)])
        return {"ok": True, **asdict(plan)}

    def _summarize_goals(self, rows: Any) -> tuple[SavingsOverview, list[DegradedRecordWarning]]:
        degraded: list[DegradedRecordWarning] = []
        overview = summarize_savings_goals(rows, on_degraded=degraded.append)
        if degraded:
            LOGGER.warning("degraded savings rows: count=%s rows=%s", len(degraded), len(overview.goals))
        return overview, degraded

    def save_savings_goals(self, rows: Any) -> dict[str, Any]:
        try:
            overview, degraded = self._summarize_goals(rows)
        except ParseError as error:
            return validation_error_payload([ValidationIssue(field=error.field, message=error.message, code="parse_error")])
        self.store.save_savings_goals(list(rows))
        return {
            "ok": True,
            "rows": len(overview.goals),
            "warnings": [
                {"row": issue.index, "field": issue.field, "message": issue.message} for issue in degraded
            ],
        }

    def savings_overview(self) -> dict[str, Any]:
        overview, _ = self._summarize_goals(self.store.load_savings_goals())
        return {"ok": True, **asdict(overview)}
