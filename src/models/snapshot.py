"""
Market-by-price snapshot models.

A BookSnapshot is built fresh for every processed event and never mutated.
Visible levels are held as fixed-length tuples where an empty slot is
``None``, so an absent level can never be confused with a level priced at
zero.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .event import Action, Side

MBP_RTYPE = 10
DEFAULT_BOOK_LEVELS = 10


class LevelView(BaseModel):
    """Aggregated view of one visible price level."""

    model_config = ConfigDict(frozen=True)

    price: Decimal
    size: int
    count: int


class BookSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: Optional[int] = None  # Assigned only when the snapshot is emitted
    ts_recv: str
    ts_event: str
    rtype: int = MBP_RTYPE
    publisher_id: int
    instrument_id: int
    action: Action
    side: Side
    depth: int = 0
    price: Optional[Decimal] = None
    size: int
    channel_id: int
    flags: int
    ts_in_delta: int
    sequence: int
    symbol: str
    order_id: str
    bids: tuple[Optional[LevelView], ...]
    asks: tuple[Optional[LevelView], ...]

    @property
    def best_bid(self) -> Optional[LevelView]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[LevelView]:
        return self.asks[0] if self.asks else None

    def level_fields(self) -> tuple:
        """Flatten the visible levels into (price, size, count) per slot and side.

        Absent slots flatten to ``(None, 0, 0)`` so that a missing level and a
        zero-priced level never compare equal.
        """
        fields = []
        for bid, ask in zip(self.bids, self.asks):
            for level in (bid, ask):
                if level is None:
                    fields.extend((None, 0, 0))
                else:
                    fields.extend((level.price, level.size, level.count))
        return tuple(fields)

    def same_levels(self, other: "BookSnapshot") -> bool:
        return self.level_fields() == other.level_fields()

    def with_index(self, index: int) -> "BookSnapshot":
        """Return an emitted copy of this snapshot carrying its emission index."""
        return self.model_copy(update={"index": index})
