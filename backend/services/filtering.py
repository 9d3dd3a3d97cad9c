"""
Search and date-range filtering over unbilled order rows.

Filtering runs in-process over the full list fetched from the billing API.
Both filters are pure, so applying the same filter twice gives the same rows.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from config import settings
from schemas import UnbilledOrderRow


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("start date must not be after end date")

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment.date() <= self.end

    @classmethod
    def today(cls) -> "DateRange":
        current = datetime.now(ZoneInfo(settings.display_timezone)).date()
        return cls(start=current, end=current)


def matches_search(row: UnbilledOrderRow, query: str) -> bool:
    needle = (query or "").lower()
    if not needle:
        return True
    haystacks = (row.name, row.doctor_name, row.serialNo)
    return any(needle in (value or "").lower() for value in haystacks)


def filter_orders(
    rows: Iterable[UnbilledOrderRow],
    search: str = "",
    date_range: Optional[DateRange] = None,
) -> List[UnbilledOrderRow]:
    result = []
    for row in rows:
        if not matches_search(row, search):
            continue
        if date_range is not None and not date_range.contains(row.createdAt):
            continue
        result.append(row)
    return result
