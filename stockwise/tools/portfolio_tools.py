"""Portfolio-domain MCP tools."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from stockwise.portfolio.errors import ParseError
from stockwise.portfolio.models import ValidationIssue
from stockwise.portfolio.normalizer import parse_holdings_json
from stockwise.portfolio.portfolio_service import validation_error_payload
from stockwise.runtime.monitoring import timed_tool_call

if TYPE_CHECKING:
    from stockwise.tools.registry import ToolServices


def _parse_error_payload(field: str, message: str) -> dict[str, Any]:
    return validation_error_payload([ValidationIssue(field=field, message=message, code="parse_error")])


def _load_json(field: str, text: str, expected: type) -> Any:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as error:
        raise ParseError(field=field, message=f"{field} is not valid JSON: {error}") from error
    if not isinstance(payload, expected):
        raise ParseError(field=field, message=f"{field} must be a JSON {expected.__name__}.")
    return payload


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="Store portfolio holdings from a JSON array of holding records.")
    def save_portfolio_holdings(holdings_json: str) -> str:
        def _call() -> dict[str, Any]:
            try:
                records = parse_holdings_json(holdings_json)
            except ParseError as error:
                return _parse_error_payload(error.field, error.message)
            return services.portfolio.save_holdings(records)

        return timed_tool_call("save_portfolio_holdings", _call)

    @mcp.tool(description="Return portfolio totals, per-holding allocation and the top recommendations.")
    def portfolio_dashboard() -> str:
        return timed_tool_call("portfolio_dashboard", services.portfolio.dashboard)

    @mcp.tool(description="Return ranked buy/hold/sell recommendations for stored holdings.")
    def portfolio_recommendations(limit: int = 10) -> str:
        return timed_tool_call("portfolio_recommendations", lambda: services.portfolio.recommendations(limit))

    @mcp.tool(description="Update current prices from a JSON object mapping symbol to price.")
    def refresh_portfolio_prices(prices_json: str) -> str:
        def _call() -> dict[str, Any]:
            try:
                prices = _load_json("prices", prices_json, dict)
            except ParseError as error:
                return _parse_error_payload(error.field, error.message)
            return services.portfolio.refresh_prices(prices)

        return timed_tool_call("refresh_portfolio_prices", _call)

    @mcp.tool(description="Project the monthly saving required to reach a goal, with fallback plans.")
    def savings_projection(
        monthly_income: float,
        goal_amount: float,
        months: int,
        annual_return_percent: float = 0.0,
    ) -> str:
        return timed_tool_call(
            "savings_projection",
            lambda: services.portfolio.savings_plan(monthly_income, goal_amount, months, annual_return_percent),
        )

    @mcp.tool(description="Store savings goals from a JSON array of {category, amount, goal} records.")
    def save_savings_goals(goals_json: str) -> str:
        def _call() -> dict[str, Any]:
            try:
                rows = _load_json("savings", goals_json, list)
            except ParseError as error:
                return _parse_error_payload(error.field, error.message)
            return services.portfolio.save_savings_goals(rows)

        return timed_tool_call("save_savings_goals", _call)

    @mcp.tool(description="Return total saved, total goal and progress across savings goals.")
    def savings_overview() -> str:
        return timed_tool_call("savings_overview", services.portfolio.savings_overview)
