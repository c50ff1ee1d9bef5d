"""
Market-by-order CSV decoder.

Reads rows laid out as

    ts_recv,ts_event,rtype,publisher_id,instrument_id,action,side,price,size,
    channel_id,order_id,flags,ts_in_delta,sequence,symbol

and yields typed BookEvents one at a time, so arbitrarily large files are
streamed rather than loaded.
"""

import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog
from pydantic import ValidationError

from core.errors import MalformedEventError
from core.interfaces import IEventSource
from models.event import Action, BookEvent, Side

MBO_COLUMNS = (
    "ts_recv",
    "ts_event",
    "rtype",
    "publisher_id",
    "instrument_id",
    "action",
    "side",
    "price",
    "size",
    "channel_id",
    "order_id",
    "flags",
    "ts_in_delta",
    "sequence",
    "symbol",
)

_INT_COLUMNS = (
    "rtype",
    "publisher_id",
    "instrument_id",
    "size",
    "channel_id",
    "flags",
    "ts_in_delta",
    "sequence",
)

_ACTIONS = {action.value: action for action in Action}
_SIDES = {side.value: side for side in Side}


def decode_row(row: list[str], line_number: int) -> Optional[BookEvent]:
    """
    Decode one CSV row into a BookEvent.

    Args:
        row: Raw CSV fields
        line_number: 1-based line number, used in error messages

    Returns:
        The decoded event, or None when the action code is not one the book
        understands.

    Raises:
        MalformedEventError: If the row has the wrong shape or bad numbers
    """
    if len(row) != len(MBO_COLUMNS):
        raise MalformedEventError(
            line_number, f"expected {len(MBO_COLUMNS)} fields, got {len(row)}"
        )
    fields = dict(zip(MBO_COLUMNS, row))

    action = _ACTIONS.get(fields["action"][:1])
    if action is None:
        return None

    values: dict = {}
    for column in _INT_COLUMNS:
        try:
            values[column] = int(fields[column])
        except ValueError:
            raise MalformedEventError(
                line_number, f"{column} is not an integer: {fields[column]!r}"
            ) from None

    price_token = fields["price"].strip()
    try:
        price = Decimal(price_token) if price_token else None
    except InvalidOperation:
        raise MalformedEventError(line_number, f"price is not a number: {price_token!r}") from None
    if price is not None and not price.is_finite():
        raise MalformedEventError(line_number, f"price is not finite: {price_token!r}")

    # Unrecognized side codes carry no book side.
    side = _SIDES.get(fields["side"][:1], Side.NONE)

    try:
        return BookEvent(
            ts_recv=fields["ts_recv"],
            ts_event=fields["ts_event"],
            action=action,
            side=side,
            price=price,
            order_id=fields["order_id"],
            symbol=fields["symbol"],
            **values,
        )
    except ValidationError as e:
        raise MalformedEventError(line_number, str(e)) from e


class MboCsvReader(IEventSource):
    """Streams BookEvents from an MBO CSV file with a header row."""

    def __init__(
        self,
        path: Union[str, Path],
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.path = Path(path)
        self.logger = logger or structlog.get_logger(__name__)
        self.rows_read = 0
        self.rows_skipped = 0

    def events(self) -> Iterator[BookEvent]:
        """
        Yield events in file order.

        Raises:
            OSError: If the file cannot be opened
            MalformedEventError: On the first row that cannot be decoded,
                including bytes that are not valid UTF-8
        """
        with open(self.path, newline="", encoding="utf-8") as csvfile:
            reader = csv.reader(csvfile)
            try:
                yield from self._decode_rows(reader)
            except UnicodeDecodeError as e:
                raise MalformedEventError(
                    reader.line_num + 1, f"invalid UTF-8: {e.reason}"
                ) from e

    def _decode_rows(self, reader) -> Iterator[BookEvent]:
        header = next(reader, None)
        if header is None:
            self.logger.warning("mbo_input_empty", path=str(self.path))
            return

        for row in reader:
            line_number = reader.line_num
            if not row or not any(field.strip() for field in row):
                continue
            self.rows_read += 1
            event = decode_row(row, line_number)
            if event is None:
                self.rows_skipped += 1
                self.logger.warning(
                    "mbo_row_skipped",
                    line=line_number,
                    reason="unknown action",
                    action=row[5] if len(row) > 5 else None,
                )
                continue
            yield event
