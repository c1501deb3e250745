"""Core pipeline logic: CPS microdata to yearly wage and LFP tables.

This module orchestrates the loading, recoding and aggregation of a CPS
extract (one row per respondent-year) into the tables behind the report:

* A yearly summary with labor-force participation by sex and age group,
  the unemployment rate, the skilled share and mean hourly wages, both
  nominal and in constant dollars.
* A year by skill-tier table for prime-age men.
* Long-format views of both, ready for multi-series line charts.

The primary entry point is :func:`run_pipeline`.  :func:`build_tables` runs
the same steps on records that are already in memory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Literal, Optional

import pandas as pd

from .aggregate import skill_summary, yearly_summary
from .config import AGE_GROUPS, DATA_SOURCE, DEFAULT_SEP, REQUIRED_COLUMNS
from .deflate import deflate
from .recode import ensure_columns, recode
from .reshape import to_long

# Module‑level logger
logger = logging.getLogger(__name__)

SUMMARY_WAGE_COLS = ["wage_all", "wage_m", "wage_f"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def filter_years(
    df: pd.DataFrame,
    year_min: Optional[int],
    year_max: Optional[int],
    *,
    year_col: str,
) -> pd.DataFrame:
    """Return a DataFrame filtered to the inclusive year range.

    Parameters
    ----------
    df : pd.DataFrame
        Input data containing a column with year values.
    year_min : Optional[int]
        Lower bound (inclusive) on the year filter; ``None`` leaves the lower
        bound unbounded.
    year_max : Optional[int]
        Upper bound (inclusive) on the year filter; ``None`` leaves the upper
        bound unbounded.
    year_col : str
        Name of the column in ``df`` holding year values.

    Returns
    -------
    pd.DataFrame
        A new DataFrame containing only rows where ``year_col`` lies
        between ``year_min`` and ``year_max``.  Missing year values are
        excluded.
    """
    if year_min is None and year_max is None:
        return df.copy()
    mask = pd.Series(True, index=df.index, dtype=bool)
    if year_min is not None:
        mask &= df[year_col] >= year_min
    if year_max is not None:
        mask &= df[year_col] <= year_max
    mask = mask.fillna(False)
    return df.loc[mask].copy()


# ---------------------------------------------------------------------------
# Data loaders
# ---------------------------------------------------------------------------


def load_cps_raw(
    source: str | Path = DATA_SOURCE, sep: str = DEFAULT_SEP
) -> pd.DataFrame:
    """Load the CPS extract.

    Parameters
    ----------
    source : str or Path
        Path or URL to the CSV extract.
    sep : str, optional
        Column delimiter; defaults to `","`.

    Returns
    -------
    pd.DataFrame
        The raw rows, with every required column present.

    Raises
    ------
    SchemaMismatch
        If a required column is missing; nothing is aggregated in that case.
    """
    raw = pd.read_csv(source, sep=sep, low_memory=False)
    raw.columns = [str(col).strip().lower() for col in raw.columns]
    ensure_columns(raw, REQUIRED_COLUMNS)
    logger.info("Loaded %d rows from %s", len(raw), source)
    return raw


# ---------------------------------------------------------------------------
# Table builders
# ---------------------------------------------------------------------------


def build_tables(records: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Aggregate, deflate and reshape recoded records.

    Returns a dictionary with keys:

    * ``summary``: one row per year (nominal and ``*_real`` wage columns).
    * ``age_lfp``: long table ``year, age_group, LFP``.
    * ``sex_lfp``: long table ``year, sex, LFP``.
    * ``sex_wage``: long table ``year, sex, wage_real``.
    * ``skill``: one row per year and skill tier.
    * ``skill_wage`` / ``skill_lfp``: long views of ``skill``.
    """
    summary = deflate(yearly_summary(records), SUMMARY_WAGE_COLS)
    skill = deflate(skill_summary(records), ["wage"])

    age_lfp = to_long(
        summary,
        {f"LFP_{group}": group for group in AGE_GROUPS},
        category="age_group",
        value="LFP",
    )
    sex_lfp = to_long(
        summary,
        {"LFP_all": "all", "LFP_m": "male", "LFP_f": "female"},
        category="sex",
        value="LFP",
    )
    sex_wage = to_long(
        summary,
        {"wage_all_real": "all", "wage_m_real": "male", "wage_f_real": "female"},
        category="sex",
        value="wage_real",
    )

    return {
        "summary": summary,
        "age_lfp": age_lfp,
        "sex_lfp": sex_lfp,
        "sex_wage": sex_wage,
        "skill": skill,
        "skill_wage": skill[["year", "skill", "wage_real"]].copy(),
        "skill_lfp": skill[["year", "skill", "LFP"]].copy(),
    }


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def run_pipeline(
    *,
    source: str | Path = DATA_SOURCE,
    sep: str = DEFAULT_SEP,
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
    errors: Literal["coerce", "raise"] = "coerce",
) -> Dict[str, object]:
    """Run the full data pipeline and return the report tables.

    Parameters
    ----------
    source : str or Path, optional
        Location of the CPS extract.  Defaults to ``config.DATA_SOURCE``.
    sep : str, optional
        Column delimiter for the extract.  Defaults to ",".
    year_min, year_max : Optional[int], optional
        Inclusive bounds on the survey years to analyse.
    errors : {"coerce", "raise"}, optional
        Malformed-record policy passed to :func:`recode.recode`.

    Returns
    -------
    Dict[str, object]
        The tables from :func:`build_tables` plus ``n_records``,
        ``n_malformed``, ``year_min`` and ``year_max``.
    """
    # 1. Load and recode
    raw = load_cps_raw(source, sep=sep)
    records, n_malformed = recode(raw, errors=errors)

    # 2. Restrict to the requested window
    records = filter_years(records, year_min, year_max, year_col="year")
    if records.empty:
        raise ValueError(
            f"No eligible records remain for years {year_min}–{year_max}."
        )

    # 3. Aggregate, deflate, reshape
    payload: Dict[str, object] = dict(build_tables(records))
    payload.update(
        {
            "n_records": len(records),
            "n_malformed": n_malformed,
            "year_min": int(records["year"].min()),
            "year_max": int(records["year"].max()),
        }
    )
    logger.info(
        "Pipeline complete: %d records, years %d–%d",
        payload["n_records"],
        payload["year_min"],
        payload["year_max"],
    )
    return payload
