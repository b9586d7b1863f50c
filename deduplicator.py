"""Deduplication logic for blocked-source events."""
from typing import TYPE_CHECKING, Dict, Iterable, List, Tuple

if TYPE_CHECKING:
    from parser import LogEvent


class Deduplicator:
    """In-memory duplicate detection that remembers first-seen order."""

    def __init__(self):
        """Initialize the deduplicator with an empty map of seen event keys."""
        self._seen: Dict[Tuple[str, ...], "LogEvent"] = {}

    def _generate_key(self, event: "LogEvent") -> Tuple[str, ...]:
        """
        Generate a unique key for duplicate detection.

        Key fields: every stored column, compared as text, so two events
        that differ only in formatting are distinct.

        Args:
            event: LogEvent object

        Returns:
            Tuple key for duplicate detection
        """
        return event.fields()

    def is_duplicate(self, event: "LogEvent") -> bool:
        """
        Check if an event is a duplicate, remembering it when it is new.

        Args:
            event: LogEvent object to check

        Returns:
            True if duplicate, False if unique
        """
        key = self._generate_key(event)
        if key in self._seen:
            return True

        # Mark as seen
        self._seen[key] = event
        return False

    def add_all(self, events: Iterable["LogEvent"]) -> int:
        """
        Merge a batch of events.

        Returns:
            Number of events that were duplicates
        """
        return sum(1 for event in events if self.is_duplicate(event))

    def entries(self) -> List["LogEvent"]:
        """Unique events in first-seen order."""
        return list(self._seen.values())

    def reset(self):
        """Reset the deduplicator (clear all seen keys)."""
        self._seen.clear()

    def get_seen_count(self) -> int:
        """
        Get the number of unique events seen.

        Returns:
            Number of unique events
        """
        return len(self._seen)
