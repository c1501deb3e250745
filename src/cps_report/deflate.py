"""Deflation stage: nominal hourly wages to constant dollars."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import pandas as pd

from .config import DEFLATORS, DOLLAR_BASIS_FACTOR
from .errors import OutOfRange
from .recode import ensure_columns


def deflator_for(year: int, table: Mapping[int, float] = DEFLATORS) -> float:
    """Return the deflator for ``year``; raise :class:`OutOfRange` if absent."""
    try:
        return table[int(year)]
    except (KeyError, TypeError, ValueError):
        raise OutOfRange([year], min(table), max(table)) from None


def deflate(
    df: pd.DataFrame,
    columns: Sequence[str],
    *,
    year_col: str = "year",
    table: Mapping[int, float] = DEFLATORS,
    suffix: str = "_real",
) -> pd.DataFrame:
    """Attach constant-dollar copies of the given nominal wage columns.

    Each ``<column><suffix>`` equals ``nominal * deflator[year] * 1.471``.
    Missing nominal values stay missing.  Every year on the frame must be
    covered by ``table``; the lookup never extrapolates.
    """
    ensure_columns(df, [year_col, *columns])
    factors = df[year_col].map(dict(table))
    uncovered = df.loc[factors.isna(), year_col]
    if not uncovered.empty:
        raise OutOfRange(uncovered, min(table), max(table))

    factors = factors.astype("float64") * DOLLAR_BASIS_FACTOR
    out = df.copy()
    for col in columns:
        out[f"{col}{suffix}"] = pd.to_numeric(out[col], errors="coerce") * factors
    return out


def deflator_frame(table: Optional[Mapping[int, float]] = None) -> pd.DataFrame:
    """The deflator table as a two-column frame (``year``, ``deflator``)."""
    table = DEFLATORS if table is None else table
    return pd.DataFrame({"year": list(table), "deflator": list(table.values())})
