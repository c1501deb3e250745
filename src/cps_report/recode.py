"""Recoding stage: turn raw CPS rows into analysis-ready records.

Every derived field comes from a lookup table in :mod:`cps_report.config`
rather than ad hoc label comparisons, so the mapping rules can be inspected
and tested on their own.  The stage never modifies its input frame.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Literal, Tuple

import pandas as pd

from .config import (
    AGE_GROUP_ALIASES,
    AGE_GROUPS,
    EDUCATION_TIERS,
    EMPLOYED_LABEL,
    IN_LABOR_FORCE_LABEL,
    MIN_AGE,
    REQUIRED_COLUMNS,
    SEX_LABELS,
    UNEMPLOYED_LABEL,
    UNKNOWN_TIER,
    WEIGHT_COL,
)
from .errors import MalformedRecord, SchemaMismatch

logger = logging.getLogger(__name__)

# Fields every record must carry as a number
NUMERIC_REQUIRED: Tuple[str, ...] = ("age", "year", WEIGHT_COL)

_UNEMPLOYED_CODES = {EMPLOYED_LABEL.lower(): 0.0, UNEMPLOYED_LABEL.lower(): 1.0}
_TRAILING_ZERO = re.compile(r"\.0+$")
_DASHES = re.compile("[\u2010-\u2015\u2212]")
_AGE_GROUP_KEYS = {
    **{group.lower(): group for group in AGE_GROUPS},
    **AGE_GROUP_ALIASES,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def ensure_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    """Raise :class:`SchemaMismatch` if the DataFrame lacks a required column."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaMismatch(missing)


def _code_key(value: object) -> object:
    if pd.isna(value):
        return None
    return _TRAILING_ZERO.sub("", str(value).strip().lower())


def normalise_codes(series: pd.Series) -> pd.Series:
    """Lower-cased, stripped lookup keys; ``2.0`` and ``"2"`` both become ``"2"``.

    Missing values stay missing (``None``) so they fall through every lookup.
    """
    return series.map(_code_key)


def parse_numeric(
    series: pd.Series,
    *,
    column: str,
    errors: Literal["coerce", "raise"] = "coerce",
) -> pd.Series:
    """Coerce a column to numbers; unparsable values become NaN or raise."""
    parsed = pd.to_numeric(series, errors="coerce")
    if errors == "raise":
        bad = parsed.isna()
        if bad.any():
            idx = bad.idxmax()
            raise MalformedRecord(column, idx, series.loc[idx])
    return parsed


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


def unemployment_flag(status: pd.Series) -> pd.Series:
    """Employed -> 0, Unemployed -> 1, anything else -> NaN (never 0)."""
    return normalise_codes(status).map(_UNEMPLOYED_CODES).astype("float64")


def labor_force_flag(lfp: pd.Series) -> pd.Series:
    """1 for "In labor force" and for missing status (armed forces), else 0."""
    keys = normalise_codes(lfp)
    in_lf = keys.isna() | (keys == IN_LABOR_FORCE_LABEL.lower())
    return in_lf.astype("int64")


def education_tier(educ: pd.Series) -> pd.Series:
    """Map survey education codes/labels onto skill tiers."""
    tiers = normalise_codes(educ).map(dict(EDUCATION_TIERS))
    return tiers.fillna(UNKNOWN_TIER).astype(object)


def sex_label(sex: pd.Series) -> pd.Series:
    return normalise_codes(sex).map(dict(SEX_LABELS))


def _age_group_key(value: object) -> object:
    if pd.isna(value):
        return None
    text = _DASHES.sub("-", str(value)).replace(" ", "").lower()
    return _AGE_GROUP_KEYS.get(text, str(value).strip())


def age_group_label(age_group: pd.Series) -> pd.Series:
    """Canonical age-group labels; en-dashes, ≥65 and similar spellings are folded.

    Labels that still match no entry of ``AGE_GROUPS`` are kept as they are
    and reported once as a warning.
    """
    labels = age_group.map(_age_group_key)
    unknown = sorted(set(labels.dropna()) - set(AGE_GROUPS))
    if unknown:
        logger.warning("Unrecognised age_group label(s): %s", unknown)
    return labels


# ---------------------------------------------------------------------------
# Stage entry point
# ---------------------------------------------------------------------------


def recode(
    raw: pd.DataFrame,
    *,
    errors: Literal["coerce", "raise"] = "coerce",
) -> Tuple[pd.DataFrame, int]:
    """Filter the eligible population and derive the analysis fields.

    Parameters
    ----------
    raw : pd.DataFrame
        Rows with the columns listed in ``config.REQUIRED_COLUMNS``.
    errors : {"coerce", "raise"}, optional
        What to do with a record whose age, year or weight is not a number.
        ``"coerce"`` (default) drops it and counts it; ``"raise"`` raises
        :class:`MalformedRecord` for the first such record.

    Returns
    -------
    Tuple[pd.DataFrame, int]
        The recoded records (ages above ``MIN_AGE`` only) and the number
        of malformed records that were excluded.
    """
    ensure_columns(raw, REQUIRED_COLUMNS)

    parsed = {
        col: parse_numeric(raw[col], column=col, errors=errors)
        for col in NUMERIC_REQUIRED
    }
    malformed = pd.Series(False, index=raw.index, dtype=bool)
    for values in parsed.values():
        malformed |= values.isna()
    n_malformed = int(malformed.sum())

    eligible = ~malformed & (parsed["age"] > MIN_AGE)
    out = raw.loc[eligible, REQUIRED_COLUMNS].copy()
    out["age"] = parsed["age"][eligible]
    out["year"] = parsed["year"][eligible].astype("int64")
    out[WEIGHT_COL] = parsed[WEIGHT_COL][eligible].astype("float64")

    out["sex"] = sex_label(out["sex"])
    out["age_group"] = age_group_label(out["age_group"])
    out["wage"] = pd.to_numeric(out["wage"], errors="coerce")
    out["unemployed"] = unemployment_flag(out["empstatid"])
    out["in_labor_force"] = labor_force_flag(out["lfp"])
    out["skill"] = education_tier(out["educ"])
    out = out.reset_index(drop=True)

    n_young = int((~malformed).sum()) - len(out)
    if n_malformed:
        logger.warning(
            "Excluded %d malformed record(s) with a non-numeric %s",
            n_malformed,
            "/".join(NUMERIC_REQUIRED),
        )
    logger.info(
        "Recoded %d of %d records (%d aged %d or under dropped)",
        len(out),
        len(raw),
        n_young,
        MIN_AGE,
    )
    return out, n_malformed
