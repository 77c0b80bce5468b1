"""FIFO profit engine - per-wallet, per-outcome lot matching.

Each outcome index keeps its own queue of BUY lots. A SELL consumes lots from the
head of the queue and realizes ``(sell_price - lot_price) * matched`` for every
matched slice. Sell volume with no lot left to match drives the open position
negative and realizes nothing; a later BUY simply opens a new lot and nets the
position arithmetically.

Trades are processed in ascending on-chain timestamp (missing timestamp = 0).
Python's sort is stable, so trades sharing a timestamp keep their input order.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from orderflow.analysis.wallets import list_wallets
from orderflow.models import (
    OpenLot,
    OutcomeProfit,
    RankedWalletProfit,
    Side,
    TradeEvent,
    WalletProfit,
    normalize_wallet,
)


@dataclass
class Lot:
    """Remaining size of one BUY and its unit price."""

    size: float
    price: float


class OutcomeLedger:
    """FIFO state for one outcome of one wallet. Built fresh for every computation."""

    __slots__ = (
        "outcome_index",
        "outcome",
        "lots",
        "open_position",
        "realized_profit",
        "_buy_volume",
        "_buy_value",
        "_sell_volume",
        "_sell_value",
    )

    def __init__(self, outcome_index: int, outcome: str | None = None) -> None:
        self.outcome_index = outcome_index
        self.outcome = outcome
        self.lots: deque[Lot] = deque()
        self.open_position = 0.0
        self.realized_profit = 0.0
        self._buy_volume = 0.0
        self._buy_value = 0.0
        self._sell_volume = 0.0
        self._sell_value = 0.0

    def apply(self, trade: TradeEvent) -> None:
        size = trade.size or 0.0
        price = trade.price or 0.0
        if trade.side == Side.BUY:
            self.buy(size, price)
        else:
            self.sell(size, price)

    def buy(self, size: float, price: float) -> None:
        self.lots.append(Lot(size=size, price=price))
        self.open_position += size
        self._buy_volume += size
        self._buy_value += size * price

    def sell(self, size: float, price: float) -> None:
        self._sell_volume += size
        self._sell_value += size * price
        remaining = size
        while remaining > 0 and self.lots:
            lot = self.lots[0]
            matched = min(remaining, lot.size)
            self.realized_profit += (price - lot.price) * matched
            lot.size -= matched
            remaining -= matched
            self.open_position -= matched
            if lot.size <= 0:
                self.lots.popleft()
        if remaining > 0:
            # Unmatched sell: no cost basis, position goes short
            self.open_position -= remaining

    @property
    def total_cost(self) -> float:
        return self._buy_value

    @property
    def total_revenue(self) -> float:
        return self._sell_value

    @property
    def average_buy_price(self) -> float:
        return self._buy_value / self._buy_volume if self._buy_volume > 0 else 0.0

    @property
    def average_sell_price(self) -> float:
        return self._sell_value / self._sell_volume if self._sell_volume > 0 else 0.0

    @property
    def average_open_lot_price(self) -> float:
        size = sum(lot.size for lot in self.lots)
        if size <= 0:
            return 0.0
        return sum(lot.size * lot.price for lot in self.lots) / size

    def unrealized_profit(self, current_price: float | None) -> float:
        if current_price is None or self.open_position <= 0:
            return 0.0
        return (current_price - self.average_open_lot_price) * self.open_position

    def to_report(self, current_price: float | None = None) -> OutcomeProfit:
        return OutcomeProfit(
            outcome_index=self.outcome_index,
            outcome=self.outcome,
            realized_profit=self.realized_profit,
            unrealized_profit=self.unrealized_profit(current_price),
            open_position=self.open_position,
            average_buy_price=self.average_buy_price,
            average_sell_price=self.average_sell_price,
            total_cost=self.total_cost,
            total_revenue=self.total_revenue,
            open_lots=[OpenLot(size=lot.size, price=lot.price) for lot in self.lots],
            average_open_lot_price=self.average_open_lot_price,
        )


def parse_current_prices(values: Iterable[str]) -> dict[int, float]:
    """Parse ``"<outcome_index>:<price>"`` strings into a current-price map."""
    prices: dict[int, float] = {}
    for value in values:
        idx, sep, price = value.partition(":")
        if not sep:
            raise ValueError(f"expected OUTCOME_INDEX:PRICE, got {value!r}")
        try:
            prices[int(idx)] = float(price)
        except ValueError:
            raise ValueError(f"expected OUTCOME_INDEX:PRICE, got {value!r}") from None
    return prices


def build_ledgers(trades: Iterable[TradeEvent], wallet: str) -> dict[int, OutcomeLedger]:
    """Replay a wallet's trades through per-outcome ledgers, ordered by outcome index."""
    key = normalize_wallet(wallet)
    wallet_trades = sorted(
        (t for t in trades if key and t.wallet_key == key),
        key=lambda t: t.order_key,
    )
    ledgers: dict[int, OutcomeLedger] = {}
    for trade in wallet_trades:
        if trade.outcome_index is None:
            continue
        ledger = ledgers.get(trade.outcome_index)
        if ledger is None:
            ledger = OutcomeLedger(trade.outcome_index, trade.outcome)
            ledgers[trade.outcome_index] = ledger
        ledger.apply(trade)
    return {idx: ledgers[idx] for idx in sorted(ledgers)}


def compute_wallet_profit(
    trades: Iterable[TradeEvent],
    wallet: str,
    current_prices: Mapping[int, float] | None = None,
) -> WalletProfit:
    """Realized and unrealized profit for one wallet using FIFO lot matching.

    current_prices maps outcome index -> current price. Outcomes missing from it
    (or all outcomes, when it is None) report zero unrealized profit.
    """
    current_prices = current_prices or {}
    outcomes = [
        ledger.to_report(current_prices.get(idx))
        for idx, ledger in build_ledgers(trades, wallet).items()
    ]
    realized = sum(o.realized_profit for o in outcomes)
    unrealized = sum(o.unrealized_profit for o in outcomes)
    return WalletProfit(
        wallet=normalize_wallet(wallet),
        total_cost=sum(o.total_cost for o in outcomes),
        total_revenue=sum(o.total_revenue for o in outcomes),
        realized_profit=realized,
        unrealized_profit=unrealized,
        total_profit=realized + unrealized,
        open_position=sum(o.open_position for o in outcomes),
        profit_by_outcome=outcomes,
    )


def _group_by_wallet(trades: Iterable[TradeEvent]) -> dict[str, list[TradeEvent]]:
    grouped: dict[str, list[TradeEvent]] = {}
    for trade in trades:
        if trade.wallet_key:
            grouped.setdefault(trade.wallet_key, []).append(trade)
    return grouped


def rank_wallets_by_profit(
    trades: Sequence[TradeEvent],
    limit: int = 10,
    current_prices: Mapping[int, float] | None = None,
) -> list[RankedWalletProfit]:
    """Top wallets by realized profit, rank starting at 1. Ties keep wallet-key order."""
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    grouped = _group_by_wallet(trades)
    profits = [
        compute_wallet_profit(grouped[wallet], wallet, current_prices)
        for wallet in list_wallets(trades)
    ]
    profits.sort(key=lambda p: p.realized_profit, reverse=True)
    return [
        RankedWalletProfit(rank=i, **p.model_dump())
        for i, p in enumerate(profits[:limit], start=1)
    ]
