from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock UTC time; cache writes and expiry checks read it."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
