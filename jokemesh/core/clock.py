"""Wall-clock helpers shared by the services."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def format_rfc3339(moment: datetime) -> str:
    """Format a datetime as RFC 3339 with second precision, e.g. 2024-05-01T12:00:00Z."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
