"""Rule-based buy/hold/sell classification of portfolio holdings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from stockwise.portfolio.analytics_core import aggregate_portfolio
from stockwise.portfolio.models import Action, Holding, PortfolioSnapshot, Recommendation

RECOMMENDATIONS_LIMIT = 10
DASHBOARD_LIMIT = 3
DEFAULT_ACTION: Action = "HOLD"
FALLBACK_MESSAGE = (
    "Review this stock periodically and align your decision with your risk profile, "
    "time horizon, and conviction."
)


@dataclass(frozen=True)
class RuleInput:
    holding: Holding
    allocation: float

    @property
    def percent(self) -> float | None:
        return self.holding.profit_loss_percent


@dataclass(frozen=True)
class ActionOverride:
    """Proposed action change.

    `keep` lists actions that win against this override. A non-empty `only_from`
    restricts the override to those current actions.
    """

    action: Action
    keep: frozenset[str] = field(default_factory=frozenset)
    only_from: frozenset[str] = field(default_factory=frozenset)

    def apply(self, current: Action) -> Action:
        if current in self.keep:
            return current
        if self.only_from and current not in self.only_from:
            return current
        return self.action


@dataclass(frozen=True)
class RuleOutcome:
    message: str
    override: ActionOverride | None = None


class Rule(Protocol):
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None: ...


class HighConcentrationRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.allocation < 40:
            return None
        return RuleOutcome(
            message=(
                f"This stock is ~{subject.allocation:.1f}% of your total portfolio, which is a very high "
                "concentration. Avoid adding more and consider trimming gradually to reduce risk."
            ),
            override=ActionOverride("TRIM"),
        )


class ElevatedConcentrationRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if not 20 <= subject.allocation < 40:
            return None
        return RuleOutcome(
            message=(
                f"This holding is ~{subject.allocation:.1f}% of your portfolio. Keep a close eye on it "
                "and avoid oversizing further."
            )
        )


class TinyPositionRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if not 0 < subject.allocation <= 2:
            return None
        return RuleOutcome(
            message=(
                f"This is a tiny position (~{subject.allocation:.1f}% of portfolio). You can treat it as a "
                "tracking position and only increase size if you develop high conviction."
            ),
            override=ActionOverride("TRACK"),
        )


@dataclass(frozen=True)
class LowPriceRule:
    price_ceiling: float = 50.0
    risky_allocation: float = 10.0

    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.holding.current_price >= self.price_ceiling:
            return None
        if subject.allocation >= self.risky_allocation:
            return RuleOutcome(
                message=(
                    "This is a low-price stock with a meaningful weight in your portfolio. Be very careful "
                    "with position size and avoid putting more capital here."
                ),
                override=ActionOverride("HIGH_RISK"),
            )
        return RuleOutcome(
            message=(
                "The stock price is in the low range (small-cap / penny zone). Focus on risk management "
                "and avoid making it a huge chunk of your portfolio."
            )
        )


class ProfitTakingRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is None or subject.percent < 12:
            return None
        return RuleOutcome(
            message=(
                "You are sitting on strong gains. Consider booking partial profits instead of waiting "
                "for the absolute top."
            ),
            override=ActionOverride("SELL", keep=frozenset({"HIGH_RISK"})),
        )


class ReasonableProfitRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is None or not 4 <= subject.percent < 12:
            return None
        return RuleOutcome(
            message=(
                "Your position is in reasonable profit. Holding is fine; just monitor news and "
                "quarterly results."
            ),
            override=ActionOverride("HOLD", only_from=frozenset({"TRACK"})),
        )


class DeepDrawdownRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is None or subject.percent > -12:
            return None
        return RuleOutcome(
            message=(
                "The drawdown is deep. Re-check your original reason for buying this stock. If the thesis "
                "is broken, exiting may be safer than averaging down blindly."
            ),
            override=ActionOverride("EXIT"),
        )


class BelowBuyPriceRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is None or not -12 < subject.percent <= -4:
            return None
        return RuleOutcome(
            message=(
                "The stock is below your buy price. If fundamentals are still strong, you may consider "
                "averaging carefully with a clear stop-loss in mind."
            ),
            override=ActionOverride("BUY", keep=frozenset({"TRIM", "HIGH_RISK"})),
        )


class NearBuyPriceRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is None or not -4 < subject.percent < 4:
            return None
        return RuleOutcome(
            message=(
                "The price is close to your buy level. There is no urgent action required purely "
                "based on P/L."
            )
        )


class MissingProfitLossRule:
    def evaluate(self, subject: RuleInput) -> RuleOutcome | None:
        if subject.percent is not None:
            return None
        return RuleOutcome(
            message=(
                "P/L data is not available yet (no current price update). Treat this as a neutral "
                "position and focus mainly on your allocation and risk."
            )
        )


DEFAULT_RULES: tuple[Rule, ...] = (
    HighConcentrationRule(),
    ElevatedConcentrationRule(),
    TinyPositionRule(),
    LowPriceRule(),
    ProfitTakingRule(),
    ReasonableProfitRule(),
    DeepDrawdownRule(),
    BelowBuyPriceRule(),
    NearBuyPriceRule(),
    MissingProfitLossRule(),
)


def reduce_outcomes(outcomes: Iterable[RuleOutcome | None]) -> tuple[Action, tuple[str, ...]]:
    action: Action = DEFAULT_ACTION
    messages: list[str] = []
    for outcome in outcomes:
        if outcome is None:
            continue
        if outcome.override is not None:
            action = outcome.override.apply(action)
        messages.append(outcome.message)
    if not messages:
        messages.append(FALLBACK_MESSAGE)
    return action, tuple(messages)


def classify(holding: Holding, allocation_percent: float, rules: Sequence[Rule] = DEFAULT_RULES) -> Recommendation:
    """Run the rule cascade for one holding.

    Rules are evaluated in order against the same immutable input; later overrides
    may replace earlier actions unless the current action is sticky for them, and
    every matched rule contributes its message.
    """
    subject = RuleInput(holding=holding, allocation=allocation_percent)
    action, messages = reduce_outcomes(rule.evaluate(subject) for rule in rules)
    return Recommendation(
        symbol=holding.symbol,
        percent=holding.profit_loss_percent,
        allocation=allocation_percent,
        action=action,
        messages=messages,
    )


def ranking_key(recommendation: Recommendation) -> float:
    # Return % and allocation % are compared directly, as the dashboard does.
    return max(abs(recommendation.percent or 0.0), recommendation.allocation)


def rank_recommendations(recommendations: Iterable[Recommendation], limit: int | None = None) -> list[Recommendation]:
    ranked = sorted(recommendations, key=ranking_key, reverse=True)
    return ranked if limit is None else ranked[: max(0, limit)]


def classify_portfolio(holdings: Sequence[Holding], snapshot: PortfolioSnapshot | None = None) -> list[Recommendation]:
    snapshot = snapshot or aggregate_portfolio(holdings)
    return [
        classify(holding, position.allocation_percent)
        for holding, position in zip(holdings, snapshot.positions)
    ]


def recommend_portfolio(holdings: Sequence[Holding], limit: int | None = RECOMMENDATIONS_LIMIT) -> list[Recommendation]:
    return rank_recommendations(classify_portfolio(holdings), limit)
