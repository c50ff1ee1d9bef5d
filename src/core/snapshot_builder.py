"""
Builds market-by-price snapshots from the current book state.

A snapshot exposes the best ``levels`` price levels per side together with
the triggering event's metadata and a ``depth`` pointing at the level the
event touched.
"""

from typing import Optional

from models.event import Action, BookEvent
from models.policy import CancelDepthPolicy
from models.snapshot import BookSnapshot, DEFAULT_BOOK_LEVELS, LevelView

from .book_side import BookSide
from .engine import AppliedEvent, ReconstructionEngine


class SnapshotBuilder:
    """
    Reads engine state after an event has been applied and produces an
    immutable BookSnapshot.

    Depth resolution by action:
    - Add: rank of the event's price on the event's side, after insertion.
    - Cancel: with AFTER_REMOVAL the cancelled order is looked up in the
      index, where it no longer exists, so depth is always 0. This matches
      the established MBP output. BEFORE_REMOVAL reports the rank the
      order's level had before it was cancelled.
    - Trade, Fill, Reset: always 0.
    """

    def __init__(
        self,
        engine: ReconstructionEngine,
        levels: int = DEFAULT_BOOK_LEVELS,
        cancel_depth_policy: CancelDepthPolicy = CancelDepthPolicy.AFTER_REMOVAL,
    ):
        if levels < 1:
            raise ValueError(f"levels must be at least 1, got {levels}")
        self.engine = engine
        self.levels = levels
        self.cancel_depth_policy = CancelDepthPolicy(cancel_depth_policy)

    def build(
        self, event: BookEvent, applied: Optional[AppliedEvent] = None
    ) -> BookSnapshot:
        action = Action.TRADE if event.action == Action.FILL else event.action
        return BookSnapshot(
            ts_recv=event.ts_recv,
            ts_event=event.ts_event,
            publisher_id=event.publisher_id,
            instrument_id=event.instrument_id,
            action=action,
            side=event.side,
            depth=self.depth_for(event, applied),
            price=event.price,
            size=event.size,
            channel_id=event.channel_id,
            flags=event.flags,
            ts_in_delta=event.ts_in_delta,
            sequence=event.sequence,
            symbol=event.symbol,
            order_id=event.order_id,
            bids=self._aggregate(self.engine.bids),
            asks=self._aggregate(self.engine.asks),
        )

    def depth_for(self, event: BookEvent, applied: Optional[AppliedEvent]) -> int:
        if event.action == Action.ADD:
            if not event.is_book_side:
                return 0
            return self.engine.side_book(event.side).rank_of(event.price) or 0

        if event.action == Action.CANCEL:
            if self.cancel_depth_policy == CancelDepthPolicy.BEFORE_REMOVAL:
                if applied is None or applied.removed_rank is None:
                    return 0
                return applied.removed_rank
            # The cancel has already been applied, so this lookup misses.
            order = self.engine.orders.get(event.order_id)
            if order is None:
                return 0
            return self.engine.level_rank(order) or 0

        return 0

    def _aggregate(self, book: BookSide) -> tuple[Optional[LevelView], ...]:
        slots: list[Optional[LevelView]] = [
            LevelView(price=level.price, size=level.total_size, count=level.order_count)
            for level in book.top(self.levels)
        ]
        slots.extend([None] * (self.levels - len(slots)))
        return tuple(slots)
