"""Raw holding normalization into canonical records."""

from __future__ import annotations

import json
import math
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any, Callable

import numpy as np

from stockwise.portfolio.errors import DegradedRecordWarning, ParseError
from stockwise.portfolio.models import Holding

SYMBOL_KEYS = ("symbol", "ticker")
QUANTITY_KEYS = ("quantity", "qty")
BUY_PRICE_KEYS = ("price", "buyPrice", "buy_price")
CURRENT_PRICE_KEYS = ("currentPrice", "current_price")
VALUE_KEYS = ("value",)
PROFIT_LOSS_KEYS = ("profitLoss", "profit_loss")
PROFIT_LOSS_PERCENT_KEYS = ("profitLossPercent", "profit_loss_percent")

DegradedCallback = Callable[[DegradedRecordWarning], None]


class _Missing:
    pass


_MISSING = _Missing()


def emit_degraded_warning(issue: DegradedRecordWarning) -> None:
    warnings.warn(issue, stacklevel=2)


def _pick(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    # JS-style `a ?? b`: the first alias that is present and not None wins.
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return _MISSING


def _to_number(value: Any) -> float | None:
    """Permissive numeric cast. Returns None when the value cannot be read as a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class _RecordReader:
    def __init__(self, index: int, record: Mapping[str, Any], on_degraded: DegradedCallback) -> None:
        self.index = index
        self.record = record
        self.on_degraded = on_degraded

    def degrade(self, field: str, message: str) -> None:
        self.on_degraded(DegradedRecordWarning(index=self.index, field=field, message=message))

    def optional(self, field: str, keys: tuple[str, ...]) -> float | None:
        raw = _pick(self.record, keys)
        if raw is _MISSING:
            return None
        number = _to_number(raw)
        if number is None:
            self.degrade(field, f"{field} is not a finite number: {raw!r}")
        return number

    def amount(self, field: str, keys: tuple[str, ...]) -> float | None:
        number = self.optional(field, keys)
        if number is not None and number < 0:
            self.degrade(field, f"{field} cannot be negative: {number}")
            return 0.0
        return number

    def symbol(self) -> str:
        raw = _pick(self.record, SYMBOL_KEYS)
        if raw is _MISSING:
            return ""
        return str(raw).strip()


def _percent_change(buy_price: float, current_price: float) -> float | None:
    if buy_price == 0:
        return None
    pct = (current_price - buy_price) / buy_price * 100.0
    return pct if math.isfinite(pct) else None


def build_holding(
    symbol: str,
    quantity: float,
    buy_price: float,
    current_price: float | None = None,
    value: float | None = None,
    profit_loss: float | None = None,
    profit_loss_percent: float | None = None,
) -> Holding:
    """Derive value and P/L fields for a position, honoring explicit overrides."""
    price = buy_price if current_price is None else current_price
    market_value = value if value is not None else quantity * price
    if not math.isfinite(market_value):
        market_value = 0.0
    pnl = profit_loss if profit_loss is not None else market_value - quantity * buy_price
    if not math.isfinite(pnl):
        pnl = 0.0
    if buy_price == 0:
        pct = None
    elif profit_loss_percent is not None and math.isfinite(profit_loss_percent):
        pct = profit_loss_percent
    else:
        pct = _percent_change(buy_price, price)
    return Holding(
        symbol=symbol,
        quantity=quantity,
        buy_price=buy_price,
        current_price=price,
        value=market_value,
        profit_loss=pnl,
        profit_loss_percent=pct,
    )


def normalize_record(index: int, record: Any, on_degraded: DegradedCallback | None = None) -> Holding:
    callback = on_degraded or emit_degraded_warning
    if isinstance(record, Holding):
        record = asdict(record)
    if not isinstance(record, Mapping):
        callback(
            DegradedRecordWarning(
                index=index,
                field="record",
                message=f"Expected a mapping, received {type(record).__name__}.",
            )
        )
        return build_holding(symbol="", quantity=0.0, buy_price=0.0)

    reader = _RecordReader(index, record, callback)
    quantity = reader.amount("quantity", QUANTITY_KEYS) or 0.0
    buy_price = reader.amount("buy_price", BUY_PRICE_KEYS) or 0.0
    current_price = reader.amount("current_price", CURRENT_PRICE_KEYS)
    return build_holding(
        symbol=reader.symbol(),
        quantity=quantity,
        buy_price=buy_price,
        current_price=current_price,
        value=reader.optional("value", VALUE_KEYS),
        profit_loss=reader.optional("profit_loss", PROFIT_LOSS_KEYS),
        profit_loss_percent=reader.optional("profit_loss_percent", PROFIT_LOSS_PERCENT_KEYS),
    )


def normalize_holdings(raw_records: Any, on_degraded: DegradedCallback | None = None) -> list[Holding]:
    """Convert loosely-typed holding records into canonical `Holding` values.

    Individually malformed records never abort the batch: they are normalized with
    zeroed fields and reported through `on_degraded` (or `warnings.warn` when no
    callback is given). A batch that is not a sequence raises `ParseError`.
    """
    if raw_records is None or isinstance(raw_records, (str, bytes, Mapping)) or not isinstance(raw_records, Sequence):
        raise ParseError(
            field="holdings",
            message=f"Holdings must be a list of records, received {type(raw_records).__name__}.",
        )
    return [normalize_record(idx, record, on_degraded) for idx, record in enumerate(raw_records)]


def parse_holdings_json(text: str | bytes) -> list[Any]:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as error:
        raise ParseError(field="holdings", message=f"Holdings payload is not valid JSON: {error}") from error
    if not isinstance(payload, list):
        raise ParseError(field="holdings", message="Holdings payload must be a JSON array of records.")
    return payload


def apply_prices(holdings: Sequence[Holding], prices: Mapping[str, Any]) -> list[Holding]:
    """Re-price holdings from a supplied symbol->price map; unknown symbols are left untouched."""
    lookup: dict[str, float] = {}
    for symbol, raw_price in prices.items():
        price = _to_number(raw_price)
        if price is not None and price >= 0:
            lookup[str(symbol).strip()] = price

    out: list[Holding] = []
    for holding in holdings:
        price = lookup.get(holding.symbol)
        if price is None:
            out.append(holding)
            continue
        out.append(
            build_holding(
                symbol=holding.symbol,
                quantity=holding.quantity,
                buy_price=holding.buy_price,
                current_price=price,
            )
        )
    return out
