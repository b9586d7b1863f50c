#!/usr/bin/env python3
"""Batch job that collects blocked source IPs from firewall dumps into a CSV ledger."""
import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from config import load_config, Config
from deduplicator import Deduplicator
from ledger import append_entries, compact_ledger, RETENTION_DAYS
from parser import extract_events
from selector import select_files


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


class LedgerJob:
    """One pass of select -> extract -> append -> compact over a log directory.

    The ledger is not locked; runs against the same ledger must not overlap.
    """

    def __init__(self, config: Config, log_dir: str, days_back: int):
        """
        Initialize the job.

        Args:
            config: Config object with all configuration
            log_dir: Directory holding the rotated firewall log files
            days_back: Age window in days for both files and records
        """
        self.config = config
        self.log_dir = log_dir
        self.days_back = days_back
        self.deduplicator = Deduplicator()
        self.stats = {}
        self._reset()

    def _reset(self):
        """Clear the event set and statistics left by a previous run."""
        self.deduplicator.reset()

        # Statistics
        self.stats = {
            'files': 0,
            'extracted': 0,
            'duplicates': 0,
            'appended': 0,
            'kept': 0,
            'expired': 0,
            'malformed': 0,
        }

    def _process_file(self, path: str, now: datetime):
        """Extract one file's events and merge them into the run's set."""
        logger.info(f"Processing file: {path}")
        events = extract_events(
            path,
            self.days_back,
            now=now,
            encoding=self.config.source.encoding,
        )
        self.stats['files'] += 1
        self.stats['extracted'] += len(events)
        self.stats['duplicates'] += self.deduplicator.add_all(events)

    def _print_stats(self):
        """Print statistics."""
        logger.info(f"Stats - Files: {self.stats['files']}, "
                    f"Extracted: {self.stats['extracted']}, "
                    f"Duplicates: {self.stats['duplicates']}, "
                    f"Appended: {self.stats['appended']}, "
                    f"Kept: {self.stats['kept']}, "
                    f"Expired: {self.stats['expired']}, "
                    f"Malformed: {self.stats['malformed']}")

    def run(self, now: Optional[datetime] = None) -> dict:
        """
        Run the job to completion.

        Args:
            now: Reference time (naive local) shared by every stage;
                defaults to the current time

        Returns:
            The statistics dict

        Raises:
            OSError: If the log directory, a log file or the ledger cannot be accessed
        """
        if now is None:
            now = datetime.now()
        self._reset()
        ledger_path = self.config.ledger.path

        files = select_files(
            self.log_dir,
            self.days_back,
            prefix=self.config.source.file_prefix,
            now=now,
        )
        if not files:
            logger.info(f"No log files in {self.log_dir} newer than {self.days_back} day(s)")

        for path in files:
            self._process_file(path, now)

        self.stats['appended'] = append_entries(self.deduplicator.entries(), ledger_path)

        result = compact_ledger(ledger_path, RETENTION_DAYS, now=now)
        self.stats['kept'] = result.kept
        self.stats['expired'] = result.expired
        self.stats['malformed'] = result.malformed

        self._print_stats()
        return self.stats


def non_negative_int(value: str) -> int:
    """argparse type for the days-back argument."""
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of days: {value!r}")
    if days < 0:
        raise argparse.ArgumentTypeError(f"number of days must be >= 0, got {days}")
    return days


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Collect blocked source IPs from firewall log dumps into a CSV ledger"
    )
    parser.add_argument("log_dir", help="Directory containing the firewall log files")
    parser.add_argument("days_back", type=non_negative_int,
                        help="Only consider files and records from the last N days")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--output", default=None, help="Ledger path (overrides config)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stdout)
        logger.error(f"Configuration error: {e}")
        return 1

    if args.output:
        config.ledger.path = args.output

    # Configure logging (console)
    logging.basicConfig(
        level=getattr(logging, config.log.level),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )

    job = LedgerJob(config, args.log_dir, args.days_back)
    try:
        job.run()
    except OSError as e:
        logger.error(f"Run aborted: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
