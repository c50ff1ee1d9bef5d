from .event import Action, BookEvent, Side
from .order import Order
from .policy import CancelDepthPolicy, ReaddPolicy
from .snapshot import BookSnapshot, LevelView, MBP_RTYPE, DEFAULT_BOOK_LEVELS

__all__ = [
    "Action",
    "BookEvent",
    "Side",
    "Order",
    "CancelDepthPolicy",
    "ReaddPolicy",
    "BookSnapshot",
    "LevelView",
    "MBP_RTYPE",
    "DEFAULT_BOOK_LEVELS",
]
