"""
UI components for the campaign performance dashboard.

Each widget takes already-aggregated, flat data plus formatting callbacks.
Figure and table construction lives in ``build_*`` functions so it can be
exercised without a running Streamlit session.
"""

import logging
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from models.data_models import RegionMetric, SeriesPoint
from .formatting import format_number, format_roas

logger = logging.getLogger(__name__)

ValueFormatter = Callable[[float], str]

DEFAULT_BAR_COLOR = "#3B82F6"
DEFAULT_LINE_COLOR = "#3B82F6"
DEFAULT_FILL_COLOR = "rgba(59, 130, 246, 0.1)"
EMPTY_CHART_MESSAGE = "No data available"
DEFAULT_ERROR_TITLE = "Error loading data"

# Fixed lookup used by the bubble map; regions not listed here are not drawn
CITY_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Abu Dhabi": (24.4539, 54.3773),
    "Dubai": (25.2048, 55.2708),
    "Sharjah": (25.3463, 55.4209),
    "Riyadh": (24.7136, 46.6753),
    "Doha": (25.2854, 51.531),
    "Kuwait City": (29.3759, 47.9774),
    "Manama": (26.2285, 50.586),
}
MAP_CENTER = (25.0, 50.0)


def _as_mapping(row: Any) -> Dict[str, Any]:
    if is_dataclass(row) and not isinstance(row, type):
        return asdict(row)
    return dict(row)


def _point_fields(point: Any) -> Tuple[str, float, Optional[str]]:
    if isinstance(point, SeriesPoint):
        return point.label, point.value, point.color
    return point["label"], point["value"], point.get("color")


# ---------------------------------------------------------------------------
# Metric cards and banners
# ---------------------------------------------------------------------------

def render_metric_card(title: str, value: str, icon: str = ""):
    """Display a single headline number."""
    label = f"{icon} {title}" if icon else title
    st.metric(label=label, value=value)


def render_metric_row(cards: Sequence[Tuple[str, str, str]]):
    """Display a row of (title, value, icon) cards in equal columns."""
    if not cards:
        return
    columns = st.columns(len(cards))
    for column, (title, value, icon) in zip(columns, cards):
        with column:
            render_metric_card(title, value, icon)


def render_page_header(title: str, error_message: Optional[str] = None,
                       error_title: str = DEFAULT_ERROR_TITLE):
    """Show the page title, or the load error in its place."""
    if error_message:
        st.error(f"{error_title}: {error_message}")
    else:
        st.title(title)


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------

def build_bar_figure(points: Sequence[Any], title: str,
                     format_value: ValueFormatter = format_number,
                     height: int = 300) -> Optional[go.Figure]:
    """
    Build a bar chart from ``{label, value, color?}`` points.

    Returns:
        Plotly figure, or None when there are no points
    """
    if not points:
        return None

    labels, values, colors = [], [], []
    for point in points:
        label, value, color = _point_fields(point)
        labels.append(label)
        values.append(value)
        colors.append(color or DEFAULT_BAR_COLOR)

    fig = go.Figure(
        go.Bar(
            x=labels,
            y=values,
            marker_color=colors,
            text=[format_value(v) for v in values],
            textposition="auto",
            hovertemplate="<b>%{x}</b><br>%{text}<extra></extra>",
        )
    )
    fig.update_layout(title=title, height=height, showlegend=False, margin=dict(t=50, b=40, l=40, r=20))
    return fig


def build_line_figure(points: Sequence[Any], title: str,
                      format_value: ValueFormatter = format_number,
                      height: int = 300, line_color: str = DEFAULT_LINE_COLOR,
                      fill_color: str = DEFAULT_FILL_COLOR,
                      show_values: bool = False) -> Optional[go.Figure]:
    """
    Build a filled line chart from ``{label, value}`` points in display order.

    Returns:
        Plotly figure, or None when there are no points
    """
    if not points:
        return None

    labels, values = [], []
    for point in points:
        label, value, _ = _point_fields(point)
        labels.append(label)
        values.append(value)

    formatted = [format_value(v) for v in values]
    fig = go.Figure(
        go.Scatter(
            x=labels,
            y=values,
            mode="lines+markers+text" if show_values else "lines+markers",
            text=formatted,
            textposition="top center",
            line=dict(color=line_color),
            fill="tozeroy",
            fillcolor=fill_color,
            hovertemplate="<b>%{x}</b><br>%{text}<extra></extra>",
        )
    )
    fig.update_layout(title=title, height=height, showlegend=False, margin=dict(t=50, b=40, l=40, r=20))
    return fig


def render_bar_chart(points: Sequence[Any], title: str,
                     format_value: ValueFormatter = format_number, height: int = 300):
    fig = build_bar_figure(points, title, format_value, height)
    if fig is None:
        st.subheader(title)
        st.info(EMPTY_CHART_MESSAGE)
        return
    st.plotly_chart(fig, use_container_width=True)


def render_line_chart(points: Sequence[Any], title: str,
                      format_value: ValueFormatter = format_number, height: int = 300,
                      line_color: str = DEFAULT_LINE_COLOR, fill_color: str = DEFAULT_FILL_COLOR,
                      show_values: bool = False):
    fig = build_line_figure(points, title, format_value, height, line_color, fill_color, show_values)
    if fig is None:
        st.subheader(title)
        st.info(EMPTY_CHART_MESSAGE)
        return
    st.plotly_chart(fig, use_container_width=True)


# ---------------------------------------------------------------------------
# Sortable table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnSpec:
    """Column descriptor for the sortable table."""
    key: str
    header: str
    width: str = ""
    align: str = "left"
    sortable: bool = True
    sort_type: str = "number"
    render: Optional[Callable[[Any, Mapping[str, Any]], str]] = None


@dataclass(frozen=True)
class SortSpec:
    key: str
    direction: str = "desc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


def _sort_value(value: Any, sort_type: str) -> Any:
    if sort_type == "string":
        return str(value or "").lower()
    return value if value is not None else 0


def sort_rows(columns: Sequence[ColumnSpec], rows: Sequence[Any],
              sort: Optional[SortSpec]) -> List[Dict[str, Any]]:
    """Sort rows by a column using that column's sort type. Sorting is stable."""
    records = [_as_mapping(row) for row in rows]
    if sort is None:
        return records

    column = next((c for c in columns if c.key == sort.key), None)
    if column is None or not column.sortable:
        logger.warning(f"Ignoring sort on unknown or unsortable column: {sort.key}")
        return records

    return sorted(
        records,
        key=lambda record: _sort_value(record.get(column.key), column.sort_type),
        reverse=sort.descending,
    )


def build_table_frame(columns: Sequence[ColumnSpec], rows: Sequence[Any],
                      sort: Optional[SortSpec] = None) -> pd.DataFrame:
    """
    Sort rows on their raw values, then render each cell for display.

    Returns:
        DataFrame with one column per ColumnSpec, labelled by header
    """
    records = sort_rows(columns, rows, sort)
    display = {
        column.header: [
            column.render(record.get(column.key), record) if column.render else record.get(column.key)
            for record in records
        ]
        for column in columns
    }
    return pd.DataFrame(display, columns=[column.header for column in columns])


def _column_width(width: str) -> str:
    try:
        percent = float(width.rstrip("%"))
    except ValueError:
        return "medium"
    if percent <= 10:
        return "small"
    if percent <= 15:
        return "medium"
    return "large"


def render_sortable_table(title: str, columns: Sequence[ColumnSpec], rows: Sequence[Any],
                          default_sort: Optional[SortSpec] = None,
                          empty_message: str = "No data available", key: str = "table"):
    """
    Render a table with a sort-column selector seeded from default_sort.
    """
    st.subheader(title)
    if not rows:
        st.info(empty_message)
        return

    sortable = [c for c in columns if c.sortable]
    sort = default_sort
    if sortable:
        headers = [c.header for c in sortable]
        default_index = next(
            (i for i, c in enumerate(sortable) if default_sort and c.key == default_sort.key), 0
        )
        col1, col2 = st.columns([3, 1])
        with col1:
            header = st.selectbox("Sort by", headers, index=default_index, key=f"{key}_sort_by")
        with col2:
            descending = st.toggle(
                "Descending",
                value=default_sort.descending if default_sort else True,
                key=f"{key}_sort_desc",
            )
        chosen = sortable[headers.index(header)]
        sort = SortSpec(key=chosen.key, direction="desc" if descending else "asc")

    frame = build_table_frame(columns, rows, sort)
    right_aligned = [c.header for c in columns if c.align == "right"]
    table: Any = frame
    if right_aligned:
        table = frame.style.set_properties(subset=right_aligned, **{"text-align": "right"})
    st.dataframe(
        table,
        hide_index=True,
        use_container_width=True,
        column_config={c.header: st.column_config.Column(width=_column_width(c.width)) for c in columns},
    )


# ---------------------------------------------------------------------------
# Bubble map
# ---------------------------------------------------------------------------

def enrich_with_coordinates(rows: Sequence[Any]) -> List[Dict[str, Any]]:
    """Attach lat/lng from CITY_COORDINATES; rows for unknown regions are dropped."""
    enriched = []
    for row in rows:
        record = _as_mapping(row)
        coordinates = CITY_COORDINATES.get(record.get("region"))
        if coordinates is None:
            continue
        record["lat"], record["lng"] = coordinates
        enriched.append(record)
    return enriched


def bubble_value(record: Mapping[str, Any], metric: str) -> float:
    # Falls back to the precomputed value when the metric field is zero or missing
    return record.get(metric) or record.get("value") or 0


def _normalize(value: float, min_value: float, max_value: float) -> float:
    if max_value == min_value:
        return 0.0
    return (value - min_value) / (max_value - min_value)


def bubble_radius(value: float, min_value: float, max_value: float) -> float:
    if max_value == min_value:
        return 10.0
    return 6 + _normalize(value, min_value, max_value) * 25


def bubble_color(value: float, min_value: float, max_value: float) -> str:
    normalized = _normalize(value, min_value, max_value)
    if normalized > 0.7:
        return "#ef4444"
    if normalized > 0.4:
        return "#f59e0b"
    return "#10b981"


def build_bubble_map_figure(rows: Sequence[Any], metric: Any, title: str,
                            format_value: ValueFormatter = format_number,
                            height: int = 500) -> Optional[go.Figure]:
    """
    Build a geographic bubble map of regions sized and coloured by metric.

    Returns:
        Plotly figure, or None when no region has known coordinates
    """
    metric_key = RegionMetric.parse(metric).value
    points = enrich_with_coordinates(rows)
    if not points:
        return None

    values = [bubble_value(p, metric_key) for p in points]
    min_value, max_value = min(values), max(values)

    hover = []
    for point, value in zip(points, values):
        text = f"<b>{point['region']}</b><br>{point.get('country', '')}<br>{metric_key}: {format_value(value)}"
        if point.get("roas"):
            text += f"<br>ROAS: {format_roas(point['roas'])}"
        hover.append(text)

    fig = go.Figure(
        go.Scattergeo(
            lat=[p["lat"] for p in points],
            lon=[p["lng"] for p in points],
            text=hover,
            hoverinfo="text",
            mode="markers",
            marker=dict(
                # plotly sizes are diameters
                size=[bubble_radius(v, min_value, max_value) * 2 for v in values],
                color=[bubble_color(v, min_value, max_value) for v in values],
                opacity=0.6,
                line=dict(width=1),
            ),
        )
    )
    fig.update_geos(
        center=dict(lat=MAP_CENTER[0], lon=MAP_CENTER[1]),
        projection_scale=4,
        showcountries=True,
        showland=True,
        landcolor="#f3f4f6",
    )
    fig.update_layout(title=title, height=height, margin=dict(t=50, b=10, l=10, r=10))
    return fig


def render_bubble_map(rows: Sequence[Any], metric: Any, title: str,
                      format_value: ValueFormatter = format_number, height: int = 500):
    st.subheader(title)
    fig = build_bubble_map_figure(rows, metric, title, format_value, height)
    if fig is None:
        st.info(EMPTY_CHART_MESSAGE)
        return
    st.plotly_chart(fig, use_container_width=True)


# ---------------------------------------------------------------------------
# Share bars
# ---------------------------------------------------------------------------

def render_share_bars(title: str, shares: Sequence[Tuple[str, float, str]]):
    """Render (label, percent, caption) rows as progress bars."""
    st.subheader(title)
    for label, percent, caption in shares:
        st.write(f"**{label}**: {caption}")
        st.progress(min(max(percent / 100, 0.0), 1.0))
