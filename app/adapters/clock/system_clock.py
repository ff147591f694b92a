"""Wall-clock adapter — implements Clock."""

from datetime import datetime

from app.application.ports.clock import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        # Naive local time, matching the timestamp columns.
        return datetime.now()
