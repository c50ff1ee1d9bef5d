"""
Price-ordered aggregation of resident orders for one side of the book.

Bids are kept best-first by descending price, asks by ascending price. Each
price maps to a PriceLevel holding the orders resident at exactly that price;
a level is dropped the moment its last order leaves.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, Optional

from sortedcontainers import SortedDict

from models.event import Side
from models.order import Order


@dataclass
class PriceLevel:
    """Orders resident at one price, keyed by order id."""
    price: Decimal
    orders: dict[str, Order] = field(default_factory=dict)

    @property
    def total_size(self) -> int:
        return sum(order.size for order in self.orders.values())

    @property
    def order_count(self) -> int:
        return len(self.orders)

    def is_empty(self) -> bool:
        return not self.orders


class BookSide:
    """
    One side of the book as a sorted mapping of price -> PriceLevel.

    Iteration always runs from the best price outward, so the first level
    is the best bid (highest) or the best ask (lowest).
    """

    def __init__(self, side: Side):
        if side not in (Side.BID, Side.ASK):
            raise ValueError(f"BookSide requires BID or ASK, got {side!r}")
        self.side = side
        if side == Side.BID:
            self._levels: SortedDict = SortedDict(lambda price: -price)
        else:
            self._levels = SortedDict()

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[PriceLevel]:
        return iter(self._levels.values())

    def __contains__(self, price: Decimal) -> bool:
        return price in self._levels

    def get(self, price: Decimal) -> Optional[PriceLevel]:
        return self._levels.get(price)

    def insert(self, order: Order) -> None:
        """Place an order at its price level, creating the level if needed.

        An order id already resident at that level is replaced by the new
        record.
        """
        level = self._levels.get(order.price)
        if level is None:
            level = PriceLevel(price=order.price)
            self._levels[order.price] = level
        level.orders[order.order_id] = order

    def remove(self, order: Order) -> bool:
        """Detach an order from its level, pruning the level if it empties.

        Returns False when no such order is resident at that price.
        """
        level = self._levels.get(order.price)
        if level is None or order.order_id not in level.orders:
            return False
        del level.orders[order.order_id]
        if level.is_empty():
            del self._levels[order.price]
        return True

    def rank_of(self, price: Optional[Decimal]) -> Optional[int]:
        """Zero-based position of the level at ``price`` counted from the best.

        Linear scan from the best level; None when no level sits at that price.
        """
        if price is None:
            return None
        for rank, level_price in enumerate(self._levels.keys()):
            if level_price == price:
                return rank
        return None

    def top(self, n: int) -> list[PriceLevel]:
        """The best ``n`` levels, best first."""
        return list(self._levels.values()[:n])

    def clear(self) -> None:
        self._levels.clear()
