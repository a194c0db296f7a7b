"""
Reference month for summaries and navigation.

Everything here works on (year, month) integers. Nothing is derived from
a timestamp, so no time zone can move a date into a neighbouring month.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class MonthRef(BaseModel):
    """A calendar month, e.g. MonthRef(year=2024, month=3)."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def from_date(cls, value: dt.date) -> 'MonthRef':
        return cls(year=value.year, month=value.month)

    @classmethod
    def current(cls, today: Optional[dt.date] = None) -> 'MonthRef':
        return cls.from_date(today or dt.date.today())

    @classmethod
    def parse(cls, value: str) -> 'MonthRef':
        """Parse "YYYY-MM"."""
        try:
            year_str, month_str = value.strip().split("-")
            return cls(year=int(year_str), month=int(month_str))
        except ValueError as e:
            raise ValueError(f"Expected a month as YYYY-MM, got '{value}'") from e

    def shift(self, offset: int) -> 'MonthRef':
        """Move forwards (positive) or backwards (negative) by whole months."""
        total = self.year * 12 + (self.month - 1) + offset
        return MonthRef(year=total // 12, month=total % 12 + 1)

    def contains(self, value: dt.date) -> bool:
        return value.year == self.year and value.month == self.month

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
