import pandas as pd
import plotly.graph_objects as go

from .config import AGE_GROUP_LABELS, SKILL_LABELS


# ============================================================
# Configuration / constants
# ============================================================

DEFAULT_LINE_COLORS: dict[str, str] = {
    "all": "#1f77b4",
    "male": "#d62728",
    "female": "#2ca02c",
    "skilled": "#1f77b4",
    "semiskilled": "#ff7f0e",
    "unskilled": "#9467bd",
    "<25": "#1f77b4",
    "25-44": "#d62728",
    "45-64": "#2ca02c",
    "65+": "#9467bd",
}

CATEGORY_LABELS: dict[str, str] = {
    "all": "All",
    "male": "Men",
    "female": "Women",
    **AGE_GROUP_LABELS,
    **SKILL_LABELS,
}

HOVER_TEMPLATE = (
    "%{customdata}<br>"
    "Year: %{x}<br>"
    "Value: %{y:VALUE_FORMAT}<extra></extra>"
)


# ============================================================
# Helper functions
# ============================================================


def _build_palette(line_colors: dict[str, str] | None) -> dict[str, str]:
    """
    Merge user-supplied colors with defaults (user overrides default).
    """
    return {**DEFAULT_LINE_COLORS, **(line_colors or {})}


def _ordered_categories(series: pd.Series) -> list:
    """
    Categories in legend order: categorical order if present, else first seen.
    """
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(series.dropna())
        return [c for c in series.cat.categories if c in present]
    return list(dict.fromkeys(series.dropna()))


# ============================================================
# Main plotting function
# ============================================================


def create_trend_plot(
    df: pd.DataFrame,
    title: str,
    y_axis_label: str,
    *,
    category_col: str,
    value_col: str,
    year_col: str = "year",
    value_format: str = ".2f",
    tick_format: str | None = None,
    line_colors: dict[str, str] | None = None,
) -> go.Figure:
    """
    Generate a line chart with one trace per category of a long table.

    Parameters
    ----------
    df : pd.DataFrame
        Long table with columns year_col, category_col and value_col.
    title : str
        Figure title.
    y_axis_label : str
        Y-axis title.
    category_col : str
        Column whose values become separate lines.  An ordered categorical
        keeps its order in the legend.
    value_col : str
        Column plotted on the Y-axis.
    year_col : str, default "year"
        Column plotted on the X-axis.
    value_format : str, default ".2f"
        d3 format used in the hover text.
    tick_format : str | None, default None
        Optional d3 format for Y-axis ticks (e.g. ".0%").
    line_colors : dict[str, str] | None, default None
        Optional mapping of category -> hex color. Overrides defaults.

    Returns
    -------
    go.Figure
        A Plotly Figure.
    """
    df_clean = df.dropna(subset=[category_col, value_col])
    categories = _ordered_categories(df_clean[category_col])
    if not categories:
        # No valid data to plot
        return go.Figure()

    palette = _build_palette(line_colors)
    hover_template = HOVER_TEMPLATE.replace("VALUE_FORMAT", value_format)

    fig = go.Figure()
    for category in categories:
        sub = df_clean[df_clean[category_col] == category].sort_values(year_col)
        label = CATEGORY_LABELS.get(str(category), str(category))
        color = palette.get(str(category))
        fig.add_trace(
            go.Scatter(
                x=sub[year_col],
                y=sub[value_col],
                mode="lines+markers",
                line=dict(width=3, color=color),
                marker=dict(size=6, color=color),
                name=label,
                hovertemplate=hover_template,
                customdata=[label] * len(sub),
            )
        )

    fig.update_xaxes(title_text="Year", tickmode="linear", dtick=5)
    fig.update_yaxes(title_text=y_axis_label, tickformat=tick_format)
    fig.update_layout(
        title=dict(text=f"<b>{title}</b>", x=0.5, xanchor="center"),
        height=550,
        width=1000,
        legend=dict(
            orientation="h",
            x=0.5,
            y=1.02,
            xanchor="center",
            yanchor="bottom",
            bordercolor="#c7c7c7",
            borderwidth=2,
            bgcolor="#f9f9f9",
            font=dict(size=12),
        ),
        margin=dict(t=120, l=50, r=80, b=40),
        plot_bgcolor="#f5f7fb",
        xaxis_showgrid=True,
    )
    return fig
