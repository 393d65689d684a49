"""In-memory record store — ordered list, one record per date after writes."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from app.fitness.models import FitnessData


def normalize_month(month: str) -> str:
    """'3' -> '03'; non-numeric input is returned unchanged (and matches nothing)."""
    try:
        return f"{int(month):02d}"
    except ValueError:
        return month


def parse_record_date(value: str) -> date | None:
    """Strict ``YYYY-MM-DD`` only; compact and week-date ISO forms are rejected."""
    if not isinstance(value, str) or len(value) != 10 or value[4] != "-" or value[7] != "-":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class RecordStore:
    def __init__(self, records: Iterable[FitnessData] | None = None):
        self._records: list[FitnessData] = []
        if records:
            self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def all(self) -> list[FitnessData]:
        return list(self._records)

    def get(self, record_date: str) -> FitnessData | None:
        for record in self._records:
            if record.date == record_date:
                return record
        return None

    def upsert(self, record: FitnessData) -> bool:
        """Replace the record with the same date, else append. True if replaced."""
        for i, existing in enumerate(self._records):
            if existing.date == record.date:
                self._records[i] = record
                return True
        self._records.append(record)
        return False

    def by_year(self, year: str) -> list[FitnessData]:
        return [r for r in self._records if r.date.startswith(year)]

    def by_month(self, year: str, month: str) -> list[FitnessData]:
        month = normalize_month(month)
        result: list[FitnessData] = []
        for record in self._records:
            d = parse_record_date(record.date)
            if d is None:
                continue
            if str(d.year) == year and f"{d.month:02d}" == month:
                result.append(record)
        return result

    def replace_all(self, records: Iterable[FitnessData]) -> None:
        # Later duplicates win but keep the position of the first occurrence.
        self._records = []
        for record in records:
            self.upsert(record)
