"""Weighted aggregation stage.

A :class:`Statistic` pairs a value column with an optional subgroup
predicate.  :func:`aggregate` evaluates any number of statistics in one
grouped pass, each with its own eligibility mask, so "LFP for women" and
"LFP for 45-64 year olds" can sit side by side in the same yearly row.

Weighted means follow ``sum(v * w) / sum(w)`` over rows where the value is
present and the predicate holds.  A group with no eligible weight yields NaN
rather than zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .config import AGE_GROUPS, SKILL_AGE_RANGE, SKILL_TIERS, WEIGHT_COL
from .errors import IncompleteColumn
from .recode import ensure_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Statistic:
    """A named weighted mean of ``column`` over the rows matching ``where``.

    ``where`` maps column names to the value they must equal (or, for a
    list/tuple/set, the values they must be one of).  With ``skipna=False``
    a missing value in an eligible row is an error instead of being skipped.
    """

    name: str
    column: str
    where: Optional[Mapping[str, object]] = None
    skipna: bool = True

    def columns(self) -> List[str]:
        return [self.column, *(self.where or {})]

    def mask(self, df: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=df.index, dtype=bool)
        for col, expected in (self.where or {}).items():
            if isinstance(expected, (list, tuple, set, frozenset)):
                mask &= df[col].isin(list(expected))
            else:
                mask &= df[col] == expected
        return mask


def weighted_mean(values: Iterable[float], weights: Iterable[float]) -> float:
    """Weighted mean skipping missing values; NaN when no weight is eligible."""
    v = pd.Series(list(values), dtype="float64")
    w = pd.Series(list(weights), dtype="float64")
    if len(v) != len(w):
        raise ValueError(f"Got {len(v)} values but {len(w)} weights.")
    mask = v.notna() & w.notna()
    denom = w[mask].sum()
    if denom == 0:
        return float("nan")
    return float((v[mask] * w[mask]).sum() / denom)


def _complete_groups(
    grouped: pd.DataFrame,
    by: List[str],
    order: Mapping[str, Sequence[object]],
) -> pd.DataFrame:
    """Add an all-NaN row for every key combination absent from ``grouped``.

    Ordered columns span their supplied categories; the others span the
    values observed in ``grouped``.
    """
    levels = []
    for col in by:
        observed = list(dict.fromkeys(grouped[col].dropna()))
        if col in order:
            supplied = list(order[col])
            observed = supplied + [v for v in observed if v not in supplied]
        levels.append(observed)

    if len(by) == 1:
        full = pd.Index(levels[0], name=by[0])
    else:
        full = pd.MultiIndex.from_product(levels, names=by)
    return grouped.set_index(by).reindex(full).reset_index()


def aggregate(
    df: pd.DataFrame,
    stats: Sequence[Statistic],
    *,
    by: Sequence[str] = ("year",),
    order: Optional[Mapping[str, Sequence[object]]] = None,
    weight: str = WEIGHT_COL,
) -> pd.DataFrame:
    """Compute weighted means for every statistic within each group.

    Parameters
    ----------
    df : pd.DataFrame
        Recoded records.
    stats : Sequence[Statistic]
        Statistics to compute; each becomes one output column.
    by : Sequence[str], optional
        Grouping columns.  Defaults to ``("year",)``.
    order : Mapping[str, Sequence], optional
        Explicit category order for grouping columns other than year.  The
        column is returned as an ordered ``Categorical``; values not listed
        are appended after the supplied ones.  Every combination of the
        grouping keys gets a row, NaN where the group has no records.
    weight : str, optional
        Sampling weight column.

    Returns
    -------
    pd.DataFrame
        One row per group (or per key combination when ``order`` is given),
        sorted by ``by`` (categorical keys in their supplied order), with one
        column per statistic.
    """
    by = list(by)
    needed = [*by, weight]
    for stat in stats:
        needed.extend(col for col in stat.columns() if col not in needed)
    ensure_columns(df, needed)

    tmp = df[by].copy()
    agg_map: Dict[str, str] = {}
    for stat in stats:
        values = df[stat.column]
        mask = stat.mask(df) & df[weight].notna()
        if not stat.skipna:
            n_missing = int((mask & values.isna()).sum())
            if n_missing:
                raise IncompleteColumn(stat.name, stat.column, n_missing)
        # Only weight rows where both value and weight are present
        mask &= values.notna()
        wx_col, w_col = f"{stat.name}_wx", f"{stat.name}_w"
        w = df[weight].where(mask, 0).astype("float64")
        tmp[wx_col] = values.where(mask, 0).astype("float64") * w
        tmp[w_col] = w
        agg_map[wx_col] = "sum"
        agg_map[w_col] = "sum"

    grouped = tmp.groupby(by, as_index=False).agg(agg_map)

    for stat in stats:
        wx_col, w_col = f"{stat.name}_wx", f"{stat.name}_w"
        denom = grouped[w_col].where(grouped[w_col] > 0)
        grouped[stat.name] = grouped[wx_col] / denom
        n_empty = int(denom.isna().sum())
        if n_empty:
            logger.debug("%s: %d group(s) without eligible weight", stat.name, n_empty)
        grouped.drop(columns=[wx_col, w_col], inplace=True)

    if order:
        grouped = _complete_groups(grouped, by, order)

    for col, categories in (order or {}).items():
        if col not in by:
            continue
        supplied = list(categories)
        extra = sorted(set(grouped[col].dropna()) - set(supplied), key=str)
        grouped[col] = pd.Categorical(
            grouped[col], categories=supplied + extra, ordered=True
        )

    grouped = grouped.sort_values(by, ignore_index=True)
    return grouped[[*by, *[stat.name for stat in stats]]]


# ---------------------------------------------------------------------------
# Report tables
# ---------------------------------------------------------------------------


def yearly_statistics() -> List[Statistic]:
    """Statistics making up one YearlyAggregate row."""
    lfp = [
        Statistic("LFP_all", "in_labor_force", skipna=False),
        Statistic("LFP_m", "in_labor_force", {"sex": "male"}, skipna=False),
        Statistic("LFP_f", "in_labor_force", {"sex": "female"}, skipna=False),
    ]
    lfp += [
        Statistic(f"LFP_{group}", "in_labor_force", {"age_group": group}, skipna=False)
        for group in AGE_GROUPS
    ]
    return [
        *lfp,
        Statistic("unemp", "unemployed"),
        Statistic("skilled_share", "is_skilled"),
        Statistic("wage_all", "wage"),
        Statistic("wage_m", "wage", {"sex": "male"}),
        Statistic("wage_f", "wage", {"sex": "female"}),
    ]


def yearly_summary(records: pd.DataFrame) -> pd.DataFrame:
    """One row per year: LFP, unemployment, skilled share and nominal wages."""
    # Unknown education is neither skilled nor unskilled: keep it out of the share
    known = records["skill"].isin(SKILL_TIERS)
    is_skilled = (records["skill"] == "skilled").astype("float64").where(known)
    summary = aggregate(records.assign(is_skilled=is_skilled), yearly_statistics())
    summary["wage_ratio_fm"] = summary["wage_f"] / summary["wage_m"]
    return summary


def skill_population(records: pd.DataFrame) -> pd.DataFrame:
    """Men aged 25-64 with a known education tier."""
    lo, hi = SKILL_AGE_RANGE
    mask = (
        (records["sex"] == "male")
        & records["age"].between(lo, hi)
        & records["skill"].isin(SKILL_TIERS)
    )
    return records.loc[mask]


def skill_summary(records: pd.DataFrame) -> pd.DataFrame:
    """One row per year and skill tier for the prime-age male population."""
    stats = [
        Statistic("wage", "wage"),
        Statistic("LFP", "in_labor_force", skipna=False),
    ]
    return aggregate(
        skill_population(records),
        stats,
        by=("year", "skill"),
        order={"skill": SKILL_TIERS},
    )
