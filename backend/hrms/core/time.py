from datetime import datetime, timezone


def utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns (no timezone) used by the models.
    return datetime.now(timezone.utc).replace(tzinfo=None)
