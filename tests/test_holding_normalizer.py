from dataclasses import asdict

import pytest

from stockwise.portfolio.errors import DegradedRecordWarning, ParseError
from stockwise.portfolio.models import Holding
from stockwise.portfolio.normalizer import (
    apply_prices,
    build_holding,
    normalize_holdings,
    parse_holdings_json,
)


def test_normalize_reads_aliases_and_derives_fields() -> None:
    [holding] = normalize_holdings([{"symbol": " aapl ", "quantity": "10", "price": 100, "currentPrice": 110}])
    assert holding.symbol == "aapl"
    assert holding.quantity == 10.0
    assert holding.buy_price == 100.0
    assert holding.current_price == 110.0
    assert holding.value == pytest.approx(1100.0)
    assert holding.profit_loss == pytest.approx(100.0)
    assert holding.profit_loss_percent == pytest.approx(10.0)


def test_price_alias_takes_precedence_over_buy_price() -> None:
    [holding] = normalize_holdings([{"symbol": "MSFT", "quantity": 1, "price": 5, "buyPrice": 7}])
    assert holding.buy_price == 5.0


def test_snake_case_columns_are_accepted() -> None:
    [holding] = normalize_holdings([{"ticker": "tsla", "qty": 2, "buy_price": 200, "current_price": 250}])
    assert holding.symbol == "TSLA"
    assert holding.value == pytest.approx(500.0)
    assert holding.profit_loss == pytest.approx(100.0)


def test_missing_current_price_falls_back_to_buy_price() -> None:
    [holding] = normalize_holdings([{"symbol": "INFY", "quantity": 4, "buyPrice": 1500}])
    assert holding.current_price == 1500.0
    assert holding.value == pytest.approx(6000.0)
    assert holding.profit_loss == 0.0
    assert holding.profit_loss_percent == 0.0


def test_zero_buy_price_leaves_percent_absent() -> None:
    [holding] = normalize_holdings([{"symbol": "GIFT", "quantity": 3, "currentPrice": 10}])
    assert holding.buy_price == 0.0
    assert holding.profit_loss_percent is None
    assert holding.profit_loss == pytest.approx(30.0)


def test_percent_override_is_ignored_without_buy_price() -> None:
    [holding] = normalize_holdings([{"symbol": "GIFT", "quantity": 3, "profitLossPercent": 12.5}])
    assert holding.profit_loss_percent is None


def test_explicit_overrides_are_honored() -> None:
    [holding] = normalize_holdings(
        [
            {
                "symbol": "HDFC",
                "quantity": 10,
                "buyPrice": 100,
                "currentPrice": 90,
                "value": 950,
                "profitLoss": -42,
                "profitLossPercent": -8.5,
            }
        ]
    )
    assert holding.value == 950.0
    assert holding.profit_loss == -42.0
    assert holding.profit_loss_percent == -8.5


def test_missing_fields_coerce_to_zero_without_warnings() -> None:
    issues: list[DegradedRecordWarning] = []
    [holding] = normalize_holdings([{}], on_degraded=issues.append)
    assert holding == Holding(
        symbol="",
        quantity=0.0,
        buy_price=0.0,
        current_price=0.0,
        value=0.0,
        profit_loss=0.0,
        profit_loss_percent=None,
    )
    assert issues == []


def test_malformed_numbers_degrade_with_warning() -> None:
    with pytest.warns(DegradedRecordWarning):
        [holding] = normalize_holdings([{"symbol": "ITC", "quantity": "lots", "buyPrice": 10}])
    assert holding.quantity == 0.0
    assert holding.value == 0.0
    assert holding.profit_loss == 0.0


def test_bad_record_does_not_abort_batch() -> None:
    issues: list[DegradedRecordWarning] = []
    holdings = normalize_holdings(
        ["oops", {"symbol": "TCS", "quantity": 1, "buyPrice": 3500, "currentPrice": 3800}],
        on_degraded=issues.append,
    )
    assert len(holdings) == 2
    assert holdings[0].symbol == ""
    assert holdings[0].value == 0.0
    assert holdings[1].value == pytest.approx(3800.0)
    assert [(issue.index, issue.field) for issue in issues] == [(0, "record")]


def test_negative_and_non_finite_values_are_reported() -> None:
    issues: list[DegradedRecordWarning] = []
    [holding] = normalize_holdings(
        [{"symbol": "X", "quantity": -5, "buyPrice": 10, "value": float("nan"), "profitLoss": True}],
        on_degraded=issues.append,
    )
    assert holding.quantity == 0.0
    assert holding.value == 0.0
    assert holding.profit_loss == 0.0
    assert {issue.field for issue in issues} == {"quantity", "value", "profit_loss"}


@pytest.mark.parametrize("payload", [None, "AAPL", 42, {"symbol": "AAPL"}])
def test_non_sequence_batch_raises_parse_error(payload) -> None:
    with pytest.raises(ParseError) as exc:
        normalize_holdings(payload)
    assert exc.value.field == "holdings"


def test_normalizing_canonical_holdings_is_idempotent() -> None:
    first = normalize_holdings(
        [
            {"symbol": "AAPL", "quantity": 10, "buyPrice": 150, "currentPrice": 185.5},
            {"symbol": "NEW", "quantity": 2, "currentPrice": 20},
        ]
    )
    assert normalize_holdings(first) == first
    assert normalize_holdings([asdict(h) for h in first]) == first


def test_parse_holdings_json() -> None:
    assert parse_holdings_json('[{"symbol": "AAPL"}]') == [{"symbol": "AAPL"}]
    with pytest.raises(ParseError):
        parse_holdings_json("{not json")
    with pytest.raises(ParseError):
        parse_holdings_json('{"symbol": "AAPL"}')


def test_apply_prices_reprices_known_symbols_only() -> None:
    aapl = build_holding("AAPL", quantity=10, buy_price=100)
    msft = build_holding("MSFT", quantity=5, buy_price=200)
    repriced = apply_prices([aapl, msft], {" AAPL ": 120, "MSFT": "bad", "NVDA": 520})
    assert repriced[0].current_price == 120.0
    assert repriced[0].value == pytest.approx(1200.0)
    assert repriced[0].profit_loss == pytest.approx(200.0)
    assert repriced[0].profit_loss_percent == pytest.approx(20.0)
    assert repriced[1] is msft


def test_symbols_keep_their_case() -> None:
    [upper, lower] = normalize_holdings(
        [{"ticker": "BRK.B", "quantity": 1, "buyPrice": 400}, {"symbol": "brk.b", "quantity": 1, "buyPrice": 400}]
    )
    assert (upper.symbol, lower.symbol) == ("BRK.B", "brk.b")
    repriced = apply_prices([upper, lower], {"BRK.B": 420})
    assert repriced[0].current_price == 420.0
    assert repriced[1] is lower
