from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Action(str, Enum):
    ADD = "A"
    CANCEL = "C"
    TRADE = "T"
    FILL = "F"
    RESET = "R"  # Clear the whole book


class Side(str, Enum):
    BID = "B"
    ASK = "A"
    NONE = "N"


class BookEvent(BaseModel):
    """A single market-by-order record for one instrument."""

    model_config = ConfigDict(frozen=True)

    ts_recv: str
    ts_event: str
    rtype: int = 160
    publisher_id: int = 0
    instrument_id: int = 0
    action: Action
    side: Side = Side.NONE
    price: Optional[Decimal] = None  # None when the source field is empty
    size: int = 0
    channel_id: int = 0
    order_id: str = ""
    flags: int = 0
    ts_in_delta: int = 0
    sequence: int = 0
    symbol: str = ""

    @property
    def is_book_side(self) -> bool:
        return self.side in (Side.BID, Side.ASK)
