"""
Tests for the MBP CSV encoder.

Covers the header layout, field order, price formatting, and the
absent-level vs zero-price distinction.
"""

import csv
from decimal import Decimal

import pytest

from models.event import Action, Side
from models.snapshot import BookSnapshot, LevelView
from services.mbp_writer import MbpCsvWriter, encode_snapshot, format_price, mbp_header


def _snapshot(bids=None, asks=None, index=0, price=Decimal("5.51")) -> BookSnapshot:
    bids = list(bids or [])
    asks = list(asks or [])
    return BookSnapshot(
        index=index,
        ts_recv="2025-07-17T08:05:03.360842448Z",
        ts_event="2025-07-17T08:05:03.360677248Z",
        publisher_id=2,
        instrument_id=1108,
        action=Action.ADD,
        side=Side.BID,
        depth=3,
        price=price,
        size=100,
        channel_id=0,
        flags=130,
        ts_in_delta=165200,
        sequence=851012,
        symbol="ARL",
        order_id="817593",
        bids=tuple(bids + [None] * (10 - len(bids))),
        asks=tuple(asks + [None] * (10 - len(asks))),
    )


class TestHeader:

    def test_header_layout(self):
        header = mbp_header()

        assert header[:14] == [
            "",
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
        ]
        assert header[14:20] == [
            "bid_px_00",
            "bid_sz_00",
            "bid_ct_00",
            "ask_px_00",
            "ask_sz_00",
            "ask_ct_00",
        ]
        assert header[-8:-2] == [
            "bid_px_09",
            "bid_sz_09",
            "bid_ct_09",
            "ask_px_09",
            "ask_sz_09",
            "ask_ct_09",
        ]
        assert header[-2:] == ["symbol", "order_id"]
        assert len(header) == 14 + 60 + 2


class TestEncode:

    def test_row_matches_header_width(self):
        assert len(encode_snapshot(_snapshot())) == len(mbp_header())

    def test_metadata_fields(self):
        row = encode_snapshot(_snapshot(index=7))

        assert row[:14] == [
            7,
            "2025-07-17T08:05:03.360842448Z",
            "2025-07-17T08:05:03.360677248Z",
            10,
            2,
            1108,
            "A",
            "B",
            3,
            "5.51",
            100,
            130,
            165200,
            851012,
        ]
        assert row[-2:] == ["ARL", "817593"]

    def test_levels_interleave_bid_and_ask(self):
        row = encode_snapshot(
            _snapshot(
                bids=[LevelView(price=Decimal("5.51"), size=100, count=1)],
                asks=[LevelView(price=Decimal("21.33"), size=60, count=2)],
            )
        )

        assert row[14:20] == ["5.51", 100, 1, "21.33", 60, 2]
        assert row[20:26] == ["", 0, 0, "", 0, 0]

    def test_zero_price_level_differs_from_absent(self):
        row = encode_snapshot(
            _snapshot(bids=[LevelView(price=Decimal("0"), size=5, count=1)])
        )

        assert row[14] == "0.00"
        assert row[17] == ""

    def test_missing_event_price_is_blank(self):
        assert encode_snapshot(_snapshot(price=None))[9] == ""

    def test_unemitted_snapshot_rejected(self):
        with pytest.raises(ValueError):
            encode_snapshot(_snapshot(index=None))

    @pytest.mark.parametrize(
        "price,expected",
        [
            (Decimal("100"), "100.00"),
            (Decimal("100.5"), "100.50"),
            (Decimal("21.33"), "21.33"),
            (Decimal("100.005"), "100.00"),
            (Decimal("100.015"), "100.02"),
            (Decimal("5.5149"), "5.51"),
            (None, ""),
        ],
    )
    def test_format_price(self, price, expected):
        assert format_price(price) == expected


class TestMbpCsvWriter:

    def test_writes_header_and_rows(self, tmp_path):
        path = tmp_path / "mbp.csv"
        with MbpCsvWriter(path) as writer:
            writer.write(_snapshot(index=0))
            writer.write(_snapshot(index=1))

        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        assert rows[0] == mbp_header()
        assert [r[0] for r in rows[1:]] == ["0", "1"]
        assert writer.rows_written == 2

    def test_rejects_mismatched_level_count(self, tmp_path):
        snapshot = _snapshot().model_copy(update={"bids": (None,) * 5})
        with MbpCsvWriter(tmp_path / "mbp.csv") as writer:
            with pytest.raises(ValueError):
                writer.write(snapshot)

    def test_close_is_idempotent(self, tmp_path):
        writer = MbpCsvWriter(tmp_path / "mbp.csv")
        writer.close()
        writer.close()
