"""
Order book reconstruction engine.

Owns the order index and both book sides and applies market-by-order events
to them one at a time. Every abnormal input (unknown order id, an Add without
a book side, a Trade/Fill with no side) is a deliberate no-op: the upstream
feed may legitimately reference orders that are already resolved. Each no-op
is reported back to the caller through ``AppliedEvent.noop`` so it can be
counted.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

import structlog

from models.event import Action, BookEvent, Side
from models.order import Order
from models.policy import ReaddPolicy

from .book_side import BookSide
from .errors import BookInvariantError
from .order_store import OrderStore


class NoopReason(str, Enum):
    ADD_INVALID_SIDE = "add_invalid_side"
    ADD_MISSING_PRICE = "add_missing_price"
    ADD_DUPLICATE_REJECTED = "add_duplicate_rejected"
    CANCEL_UNKNOWN_ORDER = "cancel_unknown_order"
    TRADE_NO_SIDE = "trade_no_side"
    TRADE_UNKNOWN_ORDER = "trade_unknown_order"


@dataclass
class AppliedEvent:
    """Outcome of applying one event to the book."""
    event: BookEvent
    noop: Optional[NoopReason] = None
    removed_order: Optional[Order] = None  # Order taken off the book by a cancel
    removed_rank: Optional[int] = None  # Rank of its level just before removal


class ReconstructionEngine:
    """
    Mutable book state for a single instrument.

    Not thread-safe: events must be applied strictly in arrival order by a
    single caller.
    """

    def __init__(
        self,
        readd_policy: ReaddPolicy = ReaddPolicy.OVERWRITE,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.readd_policy = ReaddPolicy(readd_policy)
        self.orders = OrderStore()
        self.bids = BookSide(Side.BID)
        self.asks = BookSide(Side.ASK)
        self.logger = logger or structlog.get_logger(__name__)

    def side_book(self, side: Side) -> Optional[BookSide]:
        if side == Side.BID:
            return self.bids
        if side == Side.ASK:
            return self.asks
        return None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def apply(self, event: BookEvent) -> AppliedEvent:
        """Apply one event and report what happened."""
        if event.action == Action.ADD:
            noop = self.add(event.order_id, event.price, event.size, event.side)
            return AppliedEvent(event=event, noop=noop)

        if event.action == Action.CANCEL:
            order = self.orders.get(event.order_id)
            rank = self.level_rank(order) if order is not None else None
            noop = self.cancel(event.order_id)
            return AppliedEvent(
                event=event, noop=noop, removed_order=order, removed_rank=rank
            )

        if event.action in (Action.TRADE, Action.FILL):
            noop = self.trade_or_fill(event.order_id, event.size, event.side)
            return AppliedEvent(event=event, noop=noop)

        # Action.RESET
        self.reset()
        return AppliedEvent(event=event)

    def level_rank(self, order: Order) -> Optional[int]:
        """Rank of the level an order rests at, counted from the best price."""
        book = self.side_book(order.side)
        return book.rank_of(order.price) if book is not None else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self, order_id: str, price: Optional[Decimal], size: int, side: Side
    ) -> Optional[NoopReason]:
        """Insert a new resident order.

        Returns the no-op reason when the add is ignored, None otherwise.
        """
        book = self.side_book(side)
        if book is None:
            self.logger.debug("add_invalid_side", order_id=order_id, side=side.value)
            return NoopReason.ADD_INVALID_SIDE
        if price is None:
            self.logger.debug("add_missing_price", order_id=order_id)
            return NoopReason.ADD_MISSING_PRICE

        existing = self.orders.get(order_id)
        if existing is not None:
            if self.readd_policy == ReaddPolicy.REJECT:
                self.logger.warning(
                    "order_readd_rejected",
                    order_id=order_id,
                    resident_price=str(existing.price),
                    resident_size=existing.size,
                )
                return NoopReason.ADD_DUPLICATE_REJECTED
            if self.readd_policy == ReaddPolicy.MIGRATE:
                self._remove(existing)
            else:
                # The old record stays in its level; only the index moves on.
                self.logger.debug(
                    "order_readd_overwritten",
                    order_id=order_id,
                    resident_price=str(existing.price),
                )

        order = Order(order_id=order_id, price=price, size=size, side=side)
        level = book.get(price)
        if level is not None and order_id in level.orders:
            # Same id already rests at this price: the level keeps its record.
            self.orders.put(order)
            return None
        book.insert(order)
        self.orders.put(order)
        return None

    def cancel(self, order_id: str) -> Optional[NoopReason]:
        order = self.orders.get(order_id)
        if order is None:
            self.logger.debug("cancel_unknown_order", order_id=order_id)
            return NoopReason.CANCEL_UNKNOWN_ORDER
        self._remove(order)
        return None

    def trade_or_fill(
        self, order_id: str, traded_size: int, side: Side
    ) -> Optional[NoopReason]:
        """Reduce a resident order by an executed quantity.

        A side of NONE leaves the book untouched whatever the order id.
        """
        if side == Side.NONE:
            self.logger.debug("trade_no_side", order_id=order_id)
            return NoopReason.TRADE_NO_SIDE

        order = self.orders.get(order_id)
        if order is None:
            self.logger.debug("trade_unknown_order", order_id=order_id)
            return NoopReason.TRADE_UNKNOWN_ORDER

        order.size -= min(traded_size, order.size)
        if order.size <= 0:
            self._remove(order)
        return None

    def reset(self) -> None:
        self.orders.clear()
        self.bids.clear()
        self.asks.clear()

    def _remove(self, order: Order) -> None:
        book = self.side_book(order.side)
        if book is not None:
            book.remove(order)
        self.orders.pop(order.order_id)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.orders and not self.bids and not self.asks

    def check_invariants(self) -> None:
        """Verify index/level consistency.

        Every indexed order must be resident at the level matching its price
        and side, every resident record must be the indexed one, and no level
        may be empty. Stale records left behind by an overwriting re-add fail
        this check. Raises BookInvariantError.
        """
        for book in (self.bids, self.asks):
            for level in book:
                if level.is_empty():
                    raise BookInvariantError(
                        f"empty {book.side.value} level at {level.price}"
                    )
                for order_id, order in level.orders.items():
                    if self.orders.get(order_id) is not order or order.side != book.side:
                        raise BookInvariantError(
                            f"stale order {order_id} at {book.side.value} {level.price}"
                        )

        for order in self.orders:
            book = self.side_book(order.side)
            if book is None:
                raise BookInvariantError(
                    f"order {order.order_id} has no book side ({order.side.value})"
                )
            level = book.get(order.price)
            if level is None or level.orders.get(order.order_id) is not order:
                raise BookInvariantError(
                    f"order {order.order_id} not resident at {order.side.value} {order.price}"
                )

