from typing import Iterator, Optional

from models.order import Order


class OrderStore:
    """Index of resident orders keyed by order id."""

    def __init__(self):
        self._orders: dict[str, Order] = {}

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._orders

    def __iter__(self) -> Iterator[Order]:
        return iter(self._orders.values())

    def get(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def put(self, order: Order) -> Optional[Order]:
        """Index an order, returning the record it replaced if any."""
        previous = self._orders.get(order.order_id)
        self._orders[order.order_id] = order
        return previous

    def pop(self, order_id: str) -> Optional[Order]:
        return self._orders.pop(order_id, None)

    def clear(self) -> None:
        self._orders.clear()
