from datetime import datetime, timezone


class Clock:
    """Source of "now" for the lifecycle services (naive UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


system_clock = Clock()
