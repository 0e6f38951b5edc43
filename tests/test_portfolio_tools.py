import asyncio
import json
from types import SimpleNamespace

import pytest
from mcp.server.fastmcp import FastMCP

from stockwise.portfolio.errors import ParseError
from stockwise.runtime.monitoring import timed_tool_call
from stockwise.tools.portfolio_tools import _load_json, register_portfolio_tools

EXPECTED_TOOLS = {
    "save_portfolio_holdings",
    "portfolio_dashboard",
    "portfolio_recommendations",
    "refresh_portfolio_prices",
    "savings_projection",
    "save_savings_goals",
    "savings_overview",
}


class _MockPortfolioService:
    def save_holdings(self, records):
        return {"ok": True, "rows": len(records)}

    def dashboard(self):
        return {"ok": True, "report": "dashboard"}

    def recommendations(self, limit=None):
        return {"ok": True, "limit": limit}

    def refresh_prices(self, prices):
        return {"ok": True, "updated": len(prices)}

    def savings_plan(self, monthly_income, goal_amount, months, annual_return_percent):
        return {"ok": True, "months": months}

    def save_savings_goals(self, rows):
        return {"ok": True, "rows": len(rows)}

    def savings_overview(self):
        return {"ok": True, "total_saved": 0.0}


def test_register_portfolio_tools() -> None:
    mcp = FastMCP(name="test-portfolio-tools")
    services = SimpleNamespace(portfolio=_MockPortfolioService())
    register_portfolio_tools(mcp, services)
    tools = asyncio.run(mcp.list_tools())
    assert EXPECTED_TOOLS <= {tool.name for tool in tools}


def test_timed_tool_call_returns_json_and_logs(capsys) -> None:
    output = timed_tool_call("portfolio_dashboard", lambda: {"ok": True, "total_value": 10.5})
    assert json.loads(output) == {"ok": True, "total_value": 10.5}
    event = json.loads(capsys.readouterr().err.strip())
    assert event["tool"] == "portfolio_dashboard"
    assert event["success"] is True


def test_load_json_argument_validation() -> None:
    assert _load_json("prices", '{"AAPL": 185.5}', dict) == {"AAPL": 185.5}
    with pytest.raises(ParseError):
        _load_json("prices", "[1, 2]", dict)
    with pytest.raises(ParseError):
        _load_json("savings", "not-json", list)
