from __future__ import annotations

import dataclasses
import datetime as dt


@dataclasses.dataclass(frozen=True)
class Period:
    label: str
    start: dt.date  # inclusive
    end: dt.date  # exclusive

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    @property
    def since(self) -> str:
        return f"{self.start_iso}T00:00:00"

    @property
    def until(self) -> str:
        # git's --until is inclusive
        last = dt.datetime.combine(self.end, dt.time()) - dt.timedelta(seconds=1)
        return last.isoformat()


def _month_period(year: int, month: int) -> Period:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = dt.date(year, month, 1)
    end = dt.date(year + 1, 1, 1) if month == 12 else dt.date(year, month + 1, 1)
    return Period(label=f"{year:04d}-{month:02d}", start=start, end=end)


def parse_period(spec: str) -> Period:
    s = (spec or "").strip()
    if len(s) == 4 and s.isdigit():
        year = int(s)
        return Period(label=s, start=dt.date(year, 1, 1), end=dt.date(year + 1, 1, 1))
    if len(s) == 6 and s[:4].isdigit() and s[4:].upper() in ("H1", "H2"):
        year = int(s[:4])
        half = s[4:].upper()
        if half == "H1":
            return Period(label=f"{year}H1", start=dt.date(year, 1, 1), end=dt.date(year, 7, 1))
        return Period(label=f"{year}H2", start=dt.date(year, 7, 1), end=dt.date(year + 1, 1, 1))
    if len(s) == 7 and s[4] == "-" and s[:4].isdigit() and s[5:].isdigit():
        return _month_period(int(s[:4]), int(s[5:]))
    raise ValueError(f"Invalid period: {spec!r} (expected YYYY, YYYYH1, YYYYH2, or YYYY-MM)")
