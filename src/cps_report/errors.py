"""Exceptions raised by the report pipeline."""

from __future__ import annotations

from typing import Iterable

import pandas as pd


class CPSReportError(Exception):
    """Base class for pipeline errors."""


class SchemaMismatch(CPSReportError, KeyError):
    """The input table lacks one or more required columns."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing expected columns: {self.missing}")

    def __str__(self) -> str:
        return self.args[0]


class MalformedRecord(CPSReportError, ValueError):
    """A required field of a single record could not be parsed."""

    def __init__(self, column: str, index: object, value: object):
        self.column = column
        self.index = index
        self.value = value
        super().__init__(
            f"Record {index!r}: cannot parse {column!r} value {value!r} as a number"
        )


class OutOfRange(CPSReportError, ValueError):
    """A year falls outside the deflator table's coverage."""

    def __init__(self, years: Iterable[object], year_min: int, year_max: int):
        years = list(years)
        # Missing years are counted, not listed
        self.n_missing = sum(1 for y in years if pd.isna(y))
        self.years = sorted({int(y) for y in years if not pd.isna(y)})
        parts = [f"year(s) {self.years}"] if self.years else []
        if self.n_missing:
            parts.append(f"{self.n_missing} record(s) without a year")
        super().__init__(
            f"No deflator for {' and '.join(parts)}; "
            f"table covers {year_min}–{year_max}"
        )


class IncompleteColumn(CPSReportError, ValueError):
    """Missing values reached a statistic that does not skip them."""

    def __init__(self, statistic: str, column: str, count: int):
        self.statistic = statistic
        self.column = column
        self.count = count
        super().__init__(
            f"Statistic {statistic!r}: {count} eligible row(s) have missing {column!r}"
        )
