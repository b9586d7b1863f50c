"""Record parser for delimited firewall log dumps."""
import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from deduplicator import Deduplicator


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"

# Stands in for bytes the file encoding cannot decode
UNDECODABLE = "\ufffd"

# Matches one leading "[...]>" tag and the whitespace after it
DESCRIPTION_TAG_PATTERN = re.compile(r'^\[.*?>\s*')


@dataclass(frozen=True)
class LogEvent:
    """A blocked-source event as stored in the ledger."""
    timestamp: datetime = field(compare=False)
    timestamp_text: str
    source_ip: str
    destination_ip: str
    description: str
    priority: str

    def fields(self) -> Tuple[str, str, str, str, str]:
        """Ledger column values in storage order."""
        return (
            self.timestamp_text,
            self.source_ip,
            self.destination_ip,
            self.description,
            self.priority,
        )

    @property
    def canonical(self) -> str:
        return ",".join(self.fields())


def parse_timestamp(text: str) -> Optional[datetime]:
    """Parse a log timestamp, returning None when it does not match the format."""
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def clean_event_description(event_description: str) -> str:
    """Strip a single leading "[...]>" tag (and following whitespace) from a description."""
    return DESCRIPTION_TAG_PATTERN.sub('', event_description, count=1)


class LogParser:
    """Parser for the fixed-layout firewall dump format."""

    # Column positions in the producer's export
    PRIORITY = 1
    DESCRIPTION = 3
    DATE_TIME = 4
    SOURCE_IP = 6
    BLOCKED = 11
    DESTINATION_IP = 12
    MIN_COLUMNS = 13

    BLOCKED_VALUE = "1"

    @staticmethod
    def parse_row(row: Sequence[str], cutoff: datetime) -> Optional[LogEvent]:
        """
        Turn one trimmed record into a LogEvent.

        Args:
            row: Whitespace-trimmed fields of one record
            cutoff: Records at or before this time are dropped

        Returns:
            LogEvent if the record is a blocked event newer than cutoff, None otherwise
        """
        if len(row) < LogParser.MIN_COLUMNS:
            logger.warning(f"Skipping record with {len(row)} column(s), expected {LogParser.MIN_COLUMNS}")
            return None

        date_time_text = row[LogParser.DATE_TIME]
        date_time = parse_timestamp(date_time_text)
        if date_time is None:
            logger.warning(f"Skipping record with invalid date: {date_time_text}")
            return None

        if date_time <= cutoff or row[LogParser.BLOCKED] != LogParser.BLOCKED_VALUE:
            return None

        return LogEvent(
            timestamp=date_time,
            timestamp_text=date_time_text,
            source_ip=row[LogParser.SOURCE_IP],
            destination_ip=row[LogParser.DESTINATION_IP],
            description=clean_event_description(row[LogParser.DESCRIPTION]),
            priority=row[LogParser.PRIORITY],
        )


def read_rows(
    path: str,
    encoding: str = "utf-8",
    on_skip: Optional[Callable[[str], None]] = None,
):
    """
    Yield whitespace-trimmed records from a headerless CSV file.

    Records the csv module cannot read, and records holding bytes that do
    not decode under encoding, are logged and skipped; on_skip (if given)
    is called with the reason for each. Failing to open the file raises
    OSError.
    """
    with open(path, 'r', newline='', encoding=encoding, errors='replace') as f:
        reader = csv.reader(f)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                reason = f"Failed to read record in {path} at line {reader.line_num}: {e}"
            else:
                if not row:
                    continue
                if not any(UNDECODABLE in value for value in row):
                    yield [value.strip() for value in row]
                    continue
                reason = f"Skipping record with undecodable bytes in {path} at line {reader.line_num}"
            logger.warning(reason)
            if on_skip is not None:
                on_skip(reason)


def extract_events(
    path: str,
    days_back: int,
    now: Optional[datetime] = None,
    encoding: str = "utf-8",
) -> List[LogEvent]:
    """
    Extract unique blocked-source events from one log file.

    Args:
        path: Log file to read
        days_back: Only events strictly newer than now - days_back are kept
        now: Reference time (naive local); defaults to the current time
        encoding: Text encoding of the log file

    Returns:
        Unique events in the order they were first seen

    Raises:
        OSError: If the file cannot be opened or read
    """
    if now is None:
        now = datetime.now()
    cutoff = now - timedelta(days=days_back)

    deduplicator = Deduplicator()
    for row in read_rows(path, encoding=encoding):
        event = LogParser.parse_row(row, cutoff)
        if event is not None:
            deduplicator.is_duplicate(event)

    return deduplicator.entries()
