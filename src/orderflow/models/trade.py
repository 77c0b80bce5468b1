"""TradeEvent - canonical matched trade from the orders_matched feed."""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


def normalize_wallet(address: str | None) -> str:
    """Canonical wallet key: stripped and lowercased. Empty string when missing."""
    return (address or "").strip().lower()


class TradeEvent(BaseModel):
    """One matched trade. Immutable; accepts the feed's camelCase keys as aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    received_at: str = Field("", validation_alias=AliasChoices("received_at", "receivedAt"))
    session_id: str | None = Field(
        None, validation_alias=AliasChoices("session_id", "eventSlug", "eventSessionId")
    )
    wallet: str | None = None
    side: Side
    size: float | None = Field(None, ge=0)
    price: float | None = None
    outcome: str | None = None  # display label, e.g. "Up" / "Down"
    outcome_index: int | None = Field(
        None, validation_alias=AliasChoices("outcome_index", "outcomeIndex")
    )
    onchain_ts: int | None = Field(
        None, validation_alias=AliasChoices("onchain_ts", "onChainTimestamp")
    )  # seconds
    transaction_hash: str | None = Field(
        None, validation_alias=AliasChoices("transaction_hash", "transactionHash")
    )
    condition_id: str | None = Field(
        None, validation_alias=AliasChoices("condition_id", "conditionId")
    )

    @property
    def wallet_key(self) -> str:
        return normalize_wallet(self.wallet)

    @property
    def order_key(self) -> int:
        """FIFO ordering key. Missing timestamps sort first."""
        return self.onchain_ts or 0

    @property
    def quantity(self) -> float:
        return self.size or 0.0

    @property
    def notional(self) -> float:
        return (self.size or 0.0) * (self.price or 0.0)
