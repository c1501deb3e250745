"""Report assembly: prose findings, tables and charts.

The pipeline payload is turned into a handful of CSV tables plus one
self-contained ``report.html``.  Files are written atomically (temporary
file then rename) so an interrupted run never leaves a half-written table
next to complete ones.
"""

import html
import logging
import math
from pathlib import Path
from typing import Dict, List, Mapping

import pandas as pd

from .config import DEFLATOR_VERSION, GLOBAL_YEAR_MAX, MIN_AGE
from .deflate import deflator_frame
from .plotting import create_trend_plot

logger = logging.getLogger(__name__)

# Payload tables written as CSV, in report order
TABLES: List[str] = [
    "summary",
    "age_lfp",
    "sex_lfp",
    "sex_wage",
    "skill",
    "skill_wage",
    "skill_lfp",
]


# ---------------------------------------------------------------------------
# Prose
# ---------------------------------------------------------------------------


def _pct(value: float) -> str:
    return f"{value:.1%}"


def _dollars(value: float) -> str:
    return f"${value:,.2f}"


def _trend(label: str, first: float, last: float, y0: int, y1: int, fmt) -> str:
    if y0 == y1:
        return f"{label} was {fmt(last)} in {y1}."
    verb = "rose" if last > first else "fell" if last < first else "held steady"
    if verb == "held steady":
        return f"{label} held steady at {fmt(last)} between {y0} and {y1}."
    return f"{label} {verb} from {fmt(first)} in {y0} to {fmt(last)} in {y1}."


def describe_trends(summary: pd.DataFrame, skill: pd.DataFrame) -> List[str]:
    """Short sentences comparing the first and last year of each headline series.

    Series that are missing in either end year are left out.
    """
    if summary.empty:
        return []
    first, last = summary.iloc[0], summary.iloc[-1]
    y0, y1 = int(first["year"]), int(last["year"])

    headline = [
        ("Men's labor-force participation", "LFP_m", _pct),
        ("Women's labor-force participation", "LFP_f", _pct),
        ("The unemployment rate", "unemp", _pct),
        (f"Men's mean hourly wage ({GLOBAL_YEAR_MAX} dollars)", "wage_m_real", _dollars),
        (
            f"Women's mean hourly wage ({GLOBAL_YEAR_MAX} dollars)",
            "wage_f_real",
            _dollars,
        ),
        ("Women's wages as a share of men's", "wage_ratio_fm", _pct),
        ("The share of adults with a bachelor's degree or more", "skilled_share", _pct),
    ]
    sentences = []
    for label, col, fmt in headline:
        a, b = first[col], last[col]
        if pd.isna(a) or pd.isna(b):
            continue
        sentences.append(_trend(label, float(a), float(b), y0, y1, fmt))

    latest = skill[skill["year"] == skill["year"].max()] if not skill.empty else skill
    wages = {str(row.skill): row.wage_real for row in latest.itertuples()}
    skilled, unskilled = wages.get("skilled"), wages.get("unskilled")
    if skilled and unskilled and not (math.isnan(skilled) or math.isnan(unskilled)):
        sentences.append(
            f"In {int(latest['year'].iloc[0])}, prime-age men with a bachelor's "
            f"degree earned {skilled / unskilled:.2f} times the hourly wage of "
            "men with a high-school education or less."
        )
    return sentences


# ---------------------------------------------------------------------------
# Figures
# ---------------------------------------------------------------------------


def build_figures(payload: Mapping[str, object]) -> Dict[str, object]:
    """Plotly figures for every long table in the payload."""
    return {
        "lfp_by_sex": create_trend_plot(
            payload["sex_lfp"],
            "Labor-force participation by sex",
            "Participation rate",
            category_col="sex",
            value_col="LFP",
            value_format=".1%",
            tick_format=".0%",
        ),
        "lfp_by_age": create_trend_plot(
            payload["age_lfp"],
            "Labor-force participation by age group",
            "Participation rate",
            category_col="age_group",
            value_col="LFP",
            value_format=".1%",
            tick_format=".0%",
        ),
        "wage_by_sex": create_trend_plot(
            payload["sex_wage"],
            f"Mean hourly wage by sex ({GLOBAL_YEAR_MAX} dollars)",
            "Hourly wage",
            category_col="sex",
            value_col="wage_real",
            value_format="$.2f",
        ),
        "wage_by_skill": create_trend_plot(
            payload["skill_wage"],
            f"Mean hourly wage of men 25-64 by skill ({GLOBAL_YEAR_MAX} dollars)",
            "Hourly wage",
            category_col="skill",
            value_col="wage_real",
            value_format="$.2f",
        ),
        "lfp_by_skill": create_trend_plot(
            payload["skill_lfp"],
            "Labor-force participation of men 25-64 by skill",
            "Participation rate",
            category_col="skill",
            value_col="LFP",
            value_format=".1%",
            tick_format=".0%",
        ),
    }


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _atomic_write(path: Path, text: str) -> None:
    """Write text to ``path`` via a temporary sibling file and a rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(path)


def _atomic_to_csv(df: pd.DataFrame, path: Path) -> None:
    _atomic_write(path, df.to_csv(index=False))


def render_html(payload: Mapping[str, object]) -> str:
    """The full report as a standalone HTML document."""
    summary: pd.DataFrame = payload["summary"]
    findings = describe_trends(summary, payload["skill"])

    parts = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="utf-8">',
        "<title>Wages and labor-force participation, "
        f"{payload['year_min']}–{payload['year_max']}</title></head><body>",
        "<h1>Wages and labor-force participation in the CPS, "
        f"{payload['year_min']}–{payload['year_max']}</h1>",
        f"<p>{payload['n_records']:,} weighted person-year records aged {MIN_AGE + 1} "
        f"and over; {payload['n_malformed']:,} malformed record(s) excluded. "
        f"Wages deflated with table {html.escape(DEFLATOR_VERSION)}.</p>",
        "<h2>Findings</h2>",
        "<ul>",
        *[f"<li>{html.escape(sentence)}</li>" for sentence in findings],
        "</ul>",
    ]
    for i, fig in enumerate(build_figures(payload).values()):
        parts.append(
            fig.to_html(full_html=False, include_plotlyjs="cdn" if i == 0 else False)
        )
    parts += [
        "<h2>Yearly summary</h2>",
        summary.to_html(index=False, float_format=lambda v: f"{v:.3f}", na_rep=""),
        "</body></html>",
    ]
    return "\n".join(parts)


def write_report(payload: Mapping[str, object], out_dir: Path) -> Path:
    """Write CSV tables and ``report.html`` under ``out_dir``; return the HTML path."""
    out_dir = Path(out_dir)
    for name in TABLES:
        _atomic_to_csv(payload[name], out_dir / f"{name}.csv")
    _atomic_to_csv(deflator_frame(), out_dir / "deflators.csv")

    report_path = out_dir / "report.html"
    _atomic_write(report_path, render_html(payload))
    logger.info("Report written to %s (%d tables)", out_dir, len(TABLES) + 1)
    return report_path
