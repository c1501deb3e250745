"""Wide-to-long reshaping for multi-series line charts."""

from __future__ import annotations

from typing import Mapping, Sequence, Union

import pandas as pd

from .recode import ensure_columns


def to_long(
    df: pd.DataFrame,
    columns: Union[Mapping[str, str], Sequence[str]],
    *,
    id_col: str = "year",
    category: str = "series",
    value: str = "value",
) -> pd.DataFrame:
    """Melt ``columns`` into ``(id_col, category, value)`` rows.

    Parameters
    ----------
    df : pd.DataFrame
        Wide table with one row per ``id_col``.
    columns : Mapping[str, str] or Sequence[str]
        Columns to melt, in the order the series should appear.  A mapping
        renames each column to its category label; a plain sequence uses the
        column names themselves.
    id_col, category, value : str, optional
        Output column names.

    Returns
    -------
    pd.DataFrame
        ``len(df) * len(columns)`` rows, grouped by series in the supplied
        order.  ``category`` is an ordered ``Categorical`` whose categories
        follow that order, not the alphabet.
    """
    labels = dict(columns) if isinstance(columns, Mapping) else {c: c for c in columns}
    if len(set(labels.values())) != len(labels):
        raise ValueError(f"Category labels must be unique: {list(labels.values())}")
    ensure_columns(df, [id_col, *labels])

    long = df.melt(
        id_vars=[id_col],
        value_vars=list(labels),
        var_name=category,
        value_name=value,
    )
    long[category] = pd.Categorical(
        long[category].map(labels),
        categories=list(labels.values()),
        ordered=True,
    )
    return long.sort_values([category, id_col], ignore_index=True)
