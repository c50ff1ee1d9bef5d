from .mbo_reader import MboCsvReader, decode_row
from .mbp_writer import MbpCsvWriter, encode_snapshot, mbp_header

__all__ = [
    "MboCsvReader",
    "decode_row",
    "MbpCsvWriter",
    "encode_snapshot",
    "mbp_header",
]
