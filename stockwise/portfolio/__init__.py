"""Portfolio analysis domain package."""

from stockwise.portfolio.analytics_core import aggregate_portfolio
from stockwise.portfolio.errors import DegradedRecordWarning, InvalidInputError, ParseError
from stockwise.portfolio.models import Holding, PortfolioSnapshot, Recommendation, SavingsPlan
from stockwise.portfolio.normalizer import normalize_holdings
from stockwise.portfolio.portfolio_service import PortfolioService
from stockwise.portfolio.recommendations import classify
from stockwise.portfolio.savings import project_savings

__all__ = [
    "DegradedRecordWarning",
    "Holding",
    "InvalidInputError",
    "ParseError",
    "PortfolioService",
    "PortfolioSnapshot",
    "Recommendation",
    "SavingsPlan",
    "aggregate_portfolio",
    "classify",
    "normalize_holdings",
    "project_savings",
]
