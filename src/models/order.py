from dataclasses import dataclass
from decimal import Decimal

from .event import Side


@dataclass
class Order:
    """A resident order. Size shrinks in place as trades execute against it."""
    order_id: str
    price: Decimal
    size: int
    side: Side
