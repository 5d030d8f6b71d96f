"""Grouping of saved sessions into date buckets for the session list."""
from datetime import datetime, timezone
from typing import Optional

from src.models import Session

# (label, upper bound in days, exclusive); checked in order
DATE_BUCKETS = (
    ("Today", 1),
    ("Yesterday", 2),
    ("This Week", 7),
    ("This Month", 30),
    ("Earlier This Year", 365),
)
OLDER = "Older"


def date_category(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Bucket label by whole calendar days between ``created_at`` and ``now``."""
    now = now or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    days = (now.astimezone(created_at.tzinfo).date() - created_at.date()).days
    for label, limit in DATE_BUCKETS:
        if days < limit:
            return label
    return OLDER


def group_sessions_by_date(
    sessions: list[Session],
    now: Optional[datetime] = None,
) -> list[dict]:
    """
    Group sessions under date labels, newest bucket first.

    Sessions keep their incoming order inside each bucket.
    """
    order = [label for label, _ in DATE_BUCKETS] + [OLDER]
    grouped: dict[str, list[Session]] = {}
    for session in sessions:
        grouped.setdefault(date_category(session.created_at, now), []).append(session)
    return [
        {"category": label, "sessions": grouped[label]}
        for label in order
        if label in grouped
    ]
