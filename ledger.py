"""Persistent CSV ledger of blocked-source events."""
import csv
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from deduplicator import Deduplicator
from parser import LogEvent, parse_timestamp, read_rows


logger = logging.getLogger(__name__)

# Days of history kept in the ledger after compaction
RETENTION_DAYS = 15

LEDGER_COLUMNS = 5


@dataclass
class CompactionResult:
    """Counters from a single compaction pass."""
    read: int = 0
    kept: int = 0
    expired: int = 0
    duplicates: int = 0
    malformed: int = 0


def _writer(f):
    return csv.writer(f, lineterminator="\n")


def append_entries(events: Iterable[LogEvent], path: str) -> int:
    """
    Append events to the ledger, creating the file if it does not exist.

    Rows are written in the iteration order of events. Nothing written
    before a failure is rolled back.

    Args:
        events: Events to store
        path: Ledger file path

    Returns:
        Number of rows written

    Raises:
        OSError: If the ledger cannot be opened or written
    """
    written = 0
    with open(path, 'a', newline='', encoding='utf-8') as f:
        writer = _writer(f)
        for event in events:
            writer.writerow(event.fields())
            written += 1
    logger.debug(f"Appended {written} row(s) to {path}")
    return written


def _event_from_row(row: List[str]) -> Optional[LogEvent]:
    if len(row) < LEDGER_COLUMNS:
        logger.warning(f"Skipping ledger row with {len(row)} column(s): {row!r}")
        return None

    timestamp = parse_timestamp(row[0])
    if timestamp is None:
        logger.warning(f"Skipping ledger row with invalid date: {row[0]}")
        return None

    # Rows written without quoting split a comma-bearing description
    # into extra columns; the priority is always last.
    description = ",".join(row[3:-1])
    return LogEvent(
        timestamp=timestamp,
        timestamp_text=row[0],
        source_ip=row[1],
        destination_ip=row[2],
        description=description,
        priority=row[-1],
    )


def read_ledger(path: str) -> List[LogEvent]:
    """
    Read every valid row of the ledger.

    Malformed rows are logged and skipped.

    Raises:
        OSError: If the ledger cannot be opened
    """
    events = []
    for row in read_rows(path):
        event = _event_from_row(row)
        if event is not None:
            events.append(event)
    return events


def _rewrite(events: List[LogEvent], path: str):
    """Replace the ledger contents through a temp file and an atomic rename."""
    tmp = path + '.tmp'
    try:
        with open(tmp, 'w', newline='', encoding='utf-8') as f:
            writer = _writer(f)
            for event in events:
                writer.writerow(event.fields())
        os.replace(tmp, path)
    except OSError:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def compact_ledger(
    path: str,
    retention_days: int = RETENTION_DAYS,
    now: Optional[datetime] = None,
) -> CompactionResult:
    """
    Drop expired and duplicate rows and sort the ledger newest-first.

    Args:
        path: Ledger file path
        retention_days: Rows at or before now - retention_days are dropped
        now: Reference time (naive local); defaults to the current time

    Returns:
        CompactionResult with per-pass counters

    Raises:
        OSError: If the ledger cannot be read or rewritten
    """
    if now is None:
        now = datetime.now()
    cutoff = now - timedelta(days=retention_days)

    result = CompactionResult()
    deduplicator = Deduplicator()

    def count_skipped(reason: str):
        result.read += 1
        result.malformed += 1

    for row in read_rows(path, on_skip=count_skipped):
        result.read += 1
        event = _event_from_row(row)
        if event is None:
            result.malformed += 1
            continue
        if event.timestamp <= cutoff:
            result.expired += 1
            continue
        if deduplicator.is_duplicate(event):
            result.duplicates += 1

    # sort() is stable: equal timestamps keep their ledger order
    kept = deduplicator.entries()
    kept.sort(key=lambda event: event.timestamp, reverse=True)

    _rewrite(kept, path)
    result.kept = len(kept)

    logger.debug(
        f"Compacted {path}: read={result.read} kept={result.kept} "
        f"expired={result.expired} duplicates={result.duplicates} malformed={result.malformed}"
    )
    return result
