"""
Unit tests for date grouping of sessions.
"""
from datetime import datetime, timedelta, timezone

import pytest

from src.models import Session
from src.services.persistence.grouping import date_category, group_sessions_by_date

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


class TestDateCategory:
    """Tests for date_category."""

    @pytest.mark.parametrize("days,label", [
        (0, "Today"),
        (1, "Yesterday"),
        (3, "This Week"),
        (6, "This Week"),
        (7, "This Month"),
        (29, "This Month"),
        (30, "Earlier This Year"),
        (364, "Earlier This Year"),
        (365, "Older"),
    ])
    def test_buckets(self, days, label):
        assert date_category(NOW - timedelta(days=days), now=NOW) == label

    def test_naive_timestamps_treated_as_utc(self):
        assert date_category(datetime(2026, 10, 19, 1, 0), now=NOW) == "Today"


class TestGroupSessionsByDate:
    """Tests for group_sessions_by_date."""

    def test_groups_in_bucket_order(self):
        sessions = [
            Session(id="a", owner="o", created_at=NOW),
            Session(id="b", owner="o", created_at=NOW - timedelta(days=40)),
            Session(id="c", owner="o", created_at=NOW - timedelta(hours=2)),
            Session(id="d", owner="o", created_at=NOW - timedelta(days=1)),
        ]

        groups = group_sessions_by_date(sessions, now=NOW)

        assert [g["category"] for g in groups] == ["Today", "Yesterday", "Earlier This Year"]
        assert [s.id for s in groups[0]["sessions"]] == ["a", "c"]

    def test_empty(self):
        assert group_sessions_by_date([], now=NOW) == []
