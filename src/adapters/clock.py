from datetime import UTC, date, datetime


class SystemClock:
    """Wall clock; every component works in UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def today_utc(self) -> date:
        return self.now_utc().date()
