"""
Market-by-price CSV encoder.

Writes one row per emitted snapshot, led by the emission index. Prices are
printed with two decimals, rounded half to even. An absent level prints an
empty price with zero size and count, while a real level priced at zero prints
``0.00``, so the two remain distinguishable when the file is read back.
"""

import csv
from decimal import ROUND_HALF_EVEN, Decimal
from pathlib import Path
from typing import Optional, Union

import structlog

from core.interfaces import ISnapshotSink
from models.snapshot import BookSnapshot, DEFAULT_BOOK_LEVELS, LevelView

HEADER_FIELDS = (
    "ts_recv",
    "ts_event",
    "rtype",
    "publisher_id",
    "instrument_id",
    "action",
    "side",
    "depth",
    "price",
    "size",
    "flags",
    "ts_in_delta",
    "sequence",
)

TRAILER_FIELDS = ("symbol", "order_id")


def mbp_header(levels: int = DEFAULT_BOOK_LEVELS) -> list[str]:
    header = [""]
    header.extend(HEADER_FIELDS)
    for i in range(levels):
        header.extend(
            f"{prefix}_{i:02d}"
            for prefix in ("bid_px", "bid_sz", "bid_ct", "ask_px", "ask_sz", "ask_ct")
        )
    header.extend(TRAILER_FIELDS)
    return header


_CENT = Decimal("0.01")


def format_price(price: Optional[Decimal]) -> str:
    """Two-decimal display form, rounding half to even.

    Only the printed text is rounded. Snapshots keep full precision, so two
    levels that differ below a cent still count as a book change.
    """
    if price is None:
        return ""
    return str(price.quantize(_CENT, rounding=ROUND_HALF_EVEN))


def _level_fields(level: Optional[LevelView]) -> list:
    if level is None:
        return ["", 0, 0]
    return [format_price(level.price), level.size, level.count]


def encode_snapshot(snapshot: BookSnapshot) -> list:
    """Flatten an emitted snapshot into CSV fields, in header order."""
    if snapshot.index is None:
        raise ValueError("only emitted snapshots (with an index) can be encoded")

    row = [
        snapshot.index,
        snapshot.ts_recv,
        snapshot.ts_event,
        snapshot.rtype,
        snapshot.publisher_id,
        snapshot.instrument_id,
        snapshot.action.value,
        snapshot.side.value,
        snapshot.depth,
        format_price(snapshot.price),
        snapshot.size,
        snapshot.flags,
        snapshot.ts_in_delta,
        snapshot.sequence,
    ]
    for bid, ask in zip(snapshot.bids, snapshot.asks):
        row.extend(_level_fields(bid))
        row.extend(_level_fields(ask))
    row.extend([snapshot.symbol, snapshot.order_id])
    return row


class MbpCsvWriter(ISnapshotSink):
    """Writes emitted snapshots to an MBP CSV file, header first."""

    def __init__(
        self,
        path: Union[str, Path],
        levels: int = DEFAULT_BOOK_LEVELS,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.path = Path(path)
        self.levels = levels
        self.logger = logger or structlog.get_logger(__name__)
        self.rows_written = 0
        self._file = open(self.path, "w", newline="")
        self._writer = csv.writer(self._file, lineterminator="\n")
        self._writer.writerow(mbp_header(levels))

    def write(self, snapshot: BookSnapshot) -> None:
        if len(snapshot.bids) != self.levels or len(snapshot.asks) != self.levels:
            raise ValueError(
                f"snapshot has {len(snapshot.bids)}/{len(snapshot.asks)} levels, "
                f"writer expects {self.levels}"
            )
        self._writer.writerow(encode_snapshot(snapshot))
        self.rows_written += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            self.logger.info(
                "mbp_output_closed", path=str(self.path), rows_written=self.rows_written
            )

    def __enter__(self) -> "MbpCsvWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
