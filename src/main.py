"""
Reconstruct an MBP-10 book from an MBO CSV file.

Usage:
    mbp-reconstruct mbo.csv
    mbp-reconstruct mbo.csv -o mbp.csv --log-level DEBUG
    mbp-reconstruct mbo.csv --readd-policy migrate --cancel-depth before_removal
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from config import Config
from core.errors import MalformedEventError
from core.reconstructor import BookReconstructor, ReconstructionStats
from models.policy import CancelDepthPolicy, ReaddPolicy
from services.mbo_reader import MboCsvReader
from services.mbp_writer import MbpCsvWriter
from utils.logger import LoggerFactory


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rebuild a top-of-book MBP-10 CSV from market-by-order events.",
    )
    parser.add_argument("input", help="MBO CSV file (with header row).")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="MBP CSV to write. Defaults to OUTPUT_PATH from the environment (mbp_output.csv).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Overrides LOG_LEVEL.",
    )
    parser.add_argument(
        "--readd-policy",
        default=None,
        choices=[policy.value for policy in ReaddPolicy],
        help="What an Add does when its order id is already resident.",
    )
    parser.add_argument(
        "--cancel-depth",
        default=None,
        choices=[policy.value for policy in CancelDepthPolicy],
        help="How depth is reported on Cancel rows.",
    )
    return parser.parse_args(argv)


def run(input_path: Path, output_path: Path, config: Config, logger) -> ReconstructionStats:
    """
    Stream events from ``input_path`` through a reconstructor into ``output_path``.

    Raises:
        FileNotFoundError: If the input file does not exist
        MalformedEventError: If an input row cannot be decoded
    """
    if not input_path.is_file():
        raise FileNotFoundError(f"Could not open input file {input_path}")

    reader = MboCsvReader(input_path, logger=logger)
    reconstructor = BookReconstructor.from_config(config, logger=logger)

    with MbpCsvWriter(output_path, levels=config.book_levels, logger=logger) as writer:
        for snapshot in reconstructor.run(reader.events()):
            writer.write(snapshot)

    return reconstructor.stats


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    config = Config()

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.output:
        overrides["output_path"] = args.output
    if args.readd_policy:
        overrides["readd_policy"] = ReaddPolicy(args.readd_policy)
    if args.cancel_depth:
        overrides["cancel_depth_policy"] = CancelDepthPolicy(args.cancel_depth)
    if overrides:
        config = config.model_copy(update=overrides)

    logger_factory = LoggerFactory(config.log_level, config.log_json)
    logger = logger_factory.create("main")

    input_path = Path(args.input)
    output_path = Path(config.output_path)
    logger.info(
        "reconstruction_starting",
        input_path=str(input_path),
        output_path=str(output_path),
        readd_policy=config.readd_policy.value,
        cancel_depth_policy=config.cancel_depth_policy.value,
    )

    try:
        stats = run(input_path, output_path, config, logger)
    except MalformedEventError as e:
        logger.error("malformed_input_row", line=e.line_number, reason=e.reason)
        return 1
    except OSError as e:
        logger.error("io_error", error=str(e))
        return 1

    logger.info(
        "reconstruction_output_saved",
        output_path=str(output_path),
        snapshots_emitted=stats.snapshots_emitted,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
