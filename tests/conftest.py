"""
Shared fixtures for the reconstruction test suite.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure src/ is on the Python path so that absolute imports like
# ``from models.event import ...`` resolve correctly.
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.event import Action, BookEvent, Side
from core.engine import ReconstructionEngine
from core.reconstructor import BookReconstructor


# ---------------------------------------------------------------------------
# Event factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_event():
    """Return a factory building BookEvents with realistic passthrough fields."""
    sequence = {"next": 1000}

    def _make(
        action: Action,
        order_id: str = "",
        side: Side = Side.NONE,
        price=None,
        size: int = 0,
        **overrides,
    ) -> BookEvent:
        sequence["next"] += 1
        fields = dict(
            ts_recv="2025-07-17T08:05:03.360842448Z",
            ts_event="2025-07-17T08:05:03.360677248Z",
            rtype=160,
            publisher_id=2,
            instrument_id=1108,
            action=action,
            side=side,
            price=Decimal(price) if isinstance(price, str) else price,
            size=size,
            channel_id=0,
            order_id=order_id,
            flags=130,
            ts_in_delta=165200,
            sequence=sequence["next"],
            symbol="ARL",
        )
        fields.update(overrides)
        return BookEvent(**fields)

    return _make


@pytest.fixture
def engine() -> ReconstructionEngine:
    return ReconstructionEngine()


@pytest.fixture
def reconstructor() -> BookReconstructor:
    return BookReconstructor()


# ---------------------------------------------------------------------------
# Sample MBO file
# ---------------------------------------------------------------------------

MBO_HEADER = (
    "ts_recv,ts_event,rtype,publisher_id,instrument_id,action,side,price,size,"
    "channel_id,order_id,flags,ts_in_delta,sequence,symbol"
)


@pytest.fixture
def mbo_csv(tmp_path) -> Path:
    """A short MBO file: reset, two adds, a partial trade, a cancel."""
    rows = [
        MBO_HEADER,
        "2025-07-17T07:05:09.035793433Z,2025-07-17T07:05:09.035627674Z,160,2,1108,R,N,,0,0,0,8,0,0,ARL",
        "2025-07-17T08:05:03.360842448Z,2025-07-17T08:05:03.360677248Z,160,2,1108,A,B,5.51,100,0,817593,130,165200,851012,ARL",
        "2025-07-17T08:05:03.360848793Z,2025-07-17T08:05:03.360683462Z,160,2,1108,A,A,21.33,100,0,817594,130,165331,851013,ARL",
        "2025-07-17T08:05:03.361000000Z,2025-07-17T08:05:03.360900000Z,160,2,1108,T,A,21.33,40,0,817594,0,165000,851014,ARL",
        "2025-07-17T08:05:03.362000000Z,2025-07-17T08:05:03.361900000Z,160,2,1108,C,B,5.51,100,0,817593,130,165100,851015,ARL",
    ]
    path = tmp_path / "mbo.csv"
    path.write_text("\n".join(rows) + "\n")
    return path
