"""Domain tool registry entrypoint."""

from __future__ import annotations

from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from stockwise.config.settings import Settings
from stockwise.portfolio.portfolio_service import PortfolioService
from stockwise.portfolio.store import InMemoryPortfolioStore, PortfolioStore
from stockwise.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    portfolio: PortfolioService


def build_tool_services(settings: Settings, store: PortfolioStore | None = None) -> ToolServices:
    return ToolServices(
        portfolio=PortfolioService(
            store or InMemoryPortfolioStore(),
            recommendations_limit=settings.recommendations_limit,
            dashboard_limit=settings.dashboard_recommendations_limit,
            affordability_threshold=settings.savings_affordability_threshold,
        )
    )


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
