"""
Tests for event deduplication.
"""

from datetime import timedelta

from deduplicator import Deduplicator
from parser import LogParser
from sample_logs import NOW, make_row

CUTOFF = NOW - timedelta(days=30)


def event(**kwargs):
    return LogParser.parse_row(make_row(**kwargs), CUTOFF)


class TestDeduplicator:
    """Test set semantics and ordering."""

    def test_first_seen_is_unique(self):
        dedup = Deduplicator()
        assert dedup.is_duplicate(event()) is False
        assert dedup.is_duplicate(event()) is True
        assert dedup.get_seen_count() == 1

    def test_k_distinct_of_n(self):
        dedup = Deduplicator()
        batch = [event(priority=str(i % 3)) for i in range(10)]

        duplicates = dedup.add_all(batch)

        assert dedup.get_seen_count() == 3
        assert duplicates == 7

    def test_preserves_first_seen_order(self):
        dedup = Deduplicator()
        ips = ["10.0.0.3", "10.0.0.1", "10.0.0.2", "10.0.0.1"]
        dedup.add_all(event(source_ip=ip) for ip in ips)

        assert [e.source_ip for e in dedup.entries()] == ["10.0.0.3", "10.0.0.1", "10.0.0.2"]

    def test_reset(self):
        dedup = Deduplicator()
        dedup.add_all([event(), event(priority="5")])
        dedup.reset()

        assert dedup.get_seen_count() == 0
        assert dedup.entries() == []
