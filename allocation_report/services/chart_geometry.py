"""Chart geometry for the PDF report.

Everything here works on plain numeric series and returns frozen
descriptors (SVG path data, rectangles, ticks and labels). Nothing knows
about rows, sheets or the output document.

Angles are in degrees, measured counter-clockwise from the positive x axis
with the y axis pointing down, so 180 is the left edge of the gauge, 90
the top and 0 the right edge.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from allocation_report.models.allocation import ProjectBarDatum

GAUGE_WIDTH = 300.0
GAUGE_HEIGHT = 270.0
GAUGE_CENTER_X = 150.0
GAUGE_CENTER_Y = 140.0
GAUGE_RADIUS = 110.0
# Overflow beyond 100% is drawn up to this many points, then saturates.
OVERFLOW_CAP_PCT = 50.0
OVERFLOW_MAX_SWEEP_DEG = 90.0

AXIS_STEP = 100.0
AXIS_TICK_COUNT = 5
NO_DATA_TEXT = "No data available"


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class GaugeGeometry:
    pct: float
    base_pct: float
    overflow_pct: float
    width: float
    height: float
    center: Point
    radius: float
    track_path: str
    value_path: str
    overflow_path: str
    overflow_sweep_deg: float


@dataclass(frozen=True, slots=True)
class BarRect:
    series: str
    x: float
    y: float
    width: float
    height: float
    value: float
    label: str | None = None
    label_x: float = 0.0
    label_y: float = 0.0


@dataclass(frozen=True, slots=True)
class AxisTick:
    value: float
    y: float
    label: str


@dataclass(frozen=True, slots=True)
class CategoryLabel:
    text: str
    x: float
    y: float
    rotation: float = 0.0


@dataclass(frozen=True, slots=True)
class BarChartLayout:
    width: float
    height: float
    margin_left: float
    margin_right: float
    margin_top: float
    margin_bottom: float

    @property
    def plot_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def plot_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def baseline(self) -> float:
        return self.margin_top + self.plot_height


@dataclass(frozen=True, slots=True)
class BarChartGeometry:
    layout: BarChartLayout
    y_max: float
    ticks: tuple[AxisTick, ...] = ()
    bars: tuple[BarRect, ...] = ()
    category_labels: tuple[CategoryLabel, ...] = ()
    placeholder: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.placeholder is not None


GROUPED_LAYOUT = BarChartLayout(
    width=720.0, height=280.0, margin_left=56.0, margin_right=16.0, margin_top=24.0, margin_bottom=44.0
)
STACKED_LAYOUT = BarChartLayout(
    width=720.0, height=340.0, margin_left=56.0, margin_right=16.0, margin_top=24.0, margin_bottom=104.0
)


def _fmt(value: float) -> str:
    text = f"{value:.2f}"
    return "0.00" if text == "-0.00" else text


def format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.1f}"


def polar_to_cartesian(cx: float, cy: float, radius: float, angle_deg: float) -> Point:
    radians = math.radians(angle_deg)
    return Point(x=cx + radius * math.cos(radians), y=cy - radius * math.sin(radians))


def describe_arc(cx: float, cy: float, radius: float, start_deg: float, end_deg: float) -> str:
    """SVG path data for the arc from ``start_deg`` to ``end_deg``."""

    start = polar_to_cartesian(cx, cy, radius, start_deg)
    end = polar_to_cartesian(cx, cy, radius, end_deg)
    large_arc = 1 if abs(start_deg - end_deg) > 180 else 0
    sweep = 1 if start_deg > end_deg else 0
    return (
        f"M {_fmt(start.x)} {_fmt(start.y)} "
        f"A {_fmt(radius)} {_fmt(radius)} 0 {large_arc} {sweep} {_fmt(end.x)} {_fmt(end.y)}"
    )


def describe_wedge(cx: float, cy: float, radius: float, start_deg: float, end_deg: float) -> str:
    return f"M {_fmt(cx)} {_fmt(cy)} L {describe_arc(cx, cy, radius, start_deg, end_deg)[2:]} Z"


def build_gauge(actual: float, planned: float) -> GaugeGeometry:
    pct = actual / planned * 100 if planned > 0 else 0.0
    base_pct = min(max(pct, 0.0), 100.0)
    overflow_pct = max(0.0, pct - 100.0)
    cx, cy, radius = GAUGE_CENTER_X, GAUGE_CENTER_Y, GAUGE_RADIUS

    value_path = ""
    if base_pct > 0:
        value_path = describe_arc(cx, cy, radius, 180.0, 180.0 - base_pct / 100 * 180.0)

    overflow_sweep = min(overflow_pct, OVERFLOW_CAP_PCT) / OVERFLOW_CAP_PCT * OVERFLOW_MAX_SWEEP_DEG
    overflow_path = ""
    if overflow_sweep > 0:
        # Continues clockwise past the right edge, below the horizon.
        overflow_path = describe_wedge(cx, cy, radius, 0.0, -overflow_sweep)

    return GaugeGeometry(
        pct=pct,
        base_pct=base_pct,
        overflow_pct=overflow_pct,
        width=GAUGE_WIDTH,
        height=GAUGE_HEIGHT,
        center=Point(cx, cy),
        radius=radius,
        track_path=describe_arc(cx, cy, radius, 180.0, 0.0),
        value_path=value_path,
        overflow_path=overflow_path,
        overflow_sweep_deg=overflow_sweep,
    )


def axis_max(values: Sequence[float]) -> float:
    """Largest finite value rounded up to a multiple of 100, never below 100."""

    peak = max((value for value in values if math.isfinite(value)), default=0.0)
    rounded = math.ceil(peak / AXIS_STEP) * AXIS_STEP
    return max(rounded, AXIS_STEP)


def _ticks(layout: BarChartLayout, y_max: float) -> tuple[AxisTick, ...]:
    step = y_max / AXIS_TICK_COUNT
    return tuple(
        AxisTick(
            value=step * index,
            y=layout.baseline - (step * index) / y_max * layout.plot_height,
            label=format_value(step * index),
        )
        for index in range(AXIS_TICK_COUNT + 1)
    )


def _bar_height(value: float, y_max: float, layout: BarChartLayout) -> float:
    return max(value, 0.0) / y_max * layout.plot_height


def _placeholder(layout: BarChartLayout) -> BarChartGeometry:
    return BarChartGeometry(layout=layout, y_max=AXIS_STEP, placeholder=NO_DATA_TEXT)


def build_grouped_bar_chart(
    labels: Sequence[str],
    allocated: Sequence[float],
    actual: Sequence[float],
    layout: BarChartLayout = GROUPED_LAYOUT,
) -> BarChartGeometry:
    """Allocated vs actual bars side by side for each category."""

    if len(allocated) != len(labels) or len(actual) != len(labels):
        raise ValueError("labels, allocated and actual must have the same length.")
    if not labels:
        return _placeholder(layout)

    y_max = axis_max([*allocated, *actual])
    category_width = layout.plot_width / len(labels)
    group_width = category_width * 0.7
    bar_width = group_width * 0.45
    gap = group_width * 0.1

    bars: list[BarRect] = []
    category_labels: list[CategoryLabel] = []
    for index, label in enumerate(labels):
        group_x = layout.margin_left + index * category_width + (category_width - group_width) / 2
        for offset, series, value in (
            (0.0, "allocated", allocated[index]),
            (bar_width + gap, "actual", actual[index]),
        ):
            height = _bar_height(value, y_max, layout)
            top = layout.baseline - height
            bars.append(
                BarRect(
                    series=series,
                    x=group_x + offset,
                    y=top,
                    width=bar_width,
                    height=height,
                    value=value,
                    label=format_value(value) if value > 0 else None,
                    label_x=group_x + offset + bar_width / 2,
                    label_y=top - 4,
                )
            )
        category_labels.append(
            CategoryLabel(
                text=label,
                x=layout.margin_left + (index + 0.5) * category_width,
                y=layout.baseline + 16,
            )
        )

    return BarChartGeometry(
        layout=layout,
        y_max=y_max,
        ticks=_ticks(layout, y_max),
        bars=tuple(bars),
        category_labels=tuple(category_labels),
    )


def build_stacked_bar_chart(
    projects: Sequence[ProjectBarDatum],
    layout: BarChartLayout = STACKED_LAYOUT,
) -> BarChartGeometry:
    """Per-project bars: remaining (full total) behind, used in front."""

    if not projects:
        return _placeholder(layout)

    y_max = axis_max([project.used + project.unused for project in projects])
    category_width = layout.plot_width / len(projects)
    bar_width = min(category_width * 0.6, 60.0)

    bars: list[BarRect] = []
    category_labels: list[CategoryLabel] = []
    for index, project in enumerate(projects):
        x = layout.margin_left + index * category_width + (category_width - bar_width) / 2
        total = project.used + project.unused
        total_height = _bar_height(total, y_max, layout)
        used_height = _bar_height(project.used, y_max, layout)
        bars.append(
            BarRect(
                series="remaining",
                x=x,
                y=layout.baseline - total_height,
                width=bar_width,
                height=total_height,
                value=total,
                label=f"{project.utilization:.1f}%",
                label_x=x + bar_width / 2,
                label_y=layout.baseline - total_height - 4,
            )
        )
        bars.append(
            BarRect(
                series="used",
                x=x,
                y=layout.baseline - used_height,
                width=bar_width,
                height=used_height,
                value=project.used,
            )
        )
        category_labels.append(
            CategoryLabel(
                text=project.label,
                x=x + bar_width / 2,
                y=layout.baseline + 12,
                rotation=-45.0,
            )
        )

    return BarChartGeometry(
        layout=layout,
        y_max=y_max,
        ticks=_ticks(layout, y_max),
        bars=tuple(bars),
        category_labels=tuple(category_labels),
    )
