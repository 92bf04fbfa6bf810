from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence, Union

import altair as alt
import pandas as pd

from ciplot.stats.ci import Distribution, summarize_ci
from ciplot.utils.logging import get_logger
from ciplot.viz.styles import Geom, apply_default_style, parse_geoms

logger = get_logger(__name__)

# Conversion from ggplot-like size units to Vega-Lite pixels.
POINT_SCALE = 3.0
LINE_SCALE = 1.5

STYLE_KEYS = {"size", "alpha", "color", "shape", "width", "fatten"}

AnyChart = Union[alt.Chart, alt.LayerChart]


class Position(str, Enum):
    identity = "identity"
    dodge = "dodge"


def as_position(position: Union[str, Position]) -> Position:
    try:
        return Position(position)
    except ValueError:
        raise ValueError(f"Unknown position '{position}'. Use identity or dodge") from None


def point_area(size: float) -> float:
    """Vega-Lite point size is an area in px^2."""
    return (float(size) * POINT_SCALE) ** 2


def stroke_width(size: float) -> float:
    return float(size) * LINE_SCALE


def _field_type(series: pd.Series) -> str:
    if pd.api.types.is_datetime64_any_dtype(series):
        return "temporal"
    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series):
        return "quantitative"
    return "nominal"


def dodge_numeric(summary: pd.DataFrame, x: str, group: str, width: float) -> pd.DataFrame:
    """Spread groups sharing an x value across ``width``, centered on x."""

    # same order as the color scale
    levels = sorted(summary[group].unique())
    k = len(levels)
    if k < 2:
        return summary

    step = width / k
    offsets = {lvl: (i - (k - 1) / 2) * step for i, lvl in enumerate(levels)}
    out = summary.copy()
    out[x] = out[x] + out[group].map(offsets).astype(float)
    return out


def _mark_kwargs(style: Dict[str, Any]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    if "color" in style:
        kwargs["color"] = style["color"]
    if "alpha" in style:
        kwargs["opacity"] = style["alpha"]
    return kwargs


def _point_kwargs(style: Dict[str, Any], size: float) -> Dict[str, Any]:
    kwargs = _mark_kwargs(style)
    kwargs.update(filled=True, size=point_area(size))
    if "shape" in style:
        kwargs["shape"] = style["shape"]
    return kwargs


def _build_layer(geom: Geom, base: alt.Chart, style: Dict[str, Any], y_title: str) -> AnyChart:
    y_center = alt.Y(field="y", type="quantitative", title=y_title, scale=alt.Scale(zero=False))
    y_low = alt.Y(field="ymin", type="quantitative", title=y_title, scale=alt.Scale(zero=False))
    y_high = alt.Y2(field="ymax")

    if geom == Geom.point:
        return base.mark_point(**_point_kwargs(style, style["size"])).encode(y=y_center)

    if geom == Geom.line:
        kwargs = _mark_kwargs(style)
        kwargs["strokeWidth"] = stroke_width(style["size"])
        return base.mark_line(**kwargs).encode(y=y_center)

    if geom == Geom.errorbar:
        kwargs = _mark_kwargs(style)
        kwargs["thickness"] = stroke_width(style["size"])
        width = float(style.get("width") or 0)
        kwargs["ticks"] = width > 0
        if width > 0:
            kwargs["size"] = width
        return base.mark_errorbar(**kwargs).encode(y=y_low, y2=y_high)

    if geom == Geom.ribbon:
        return base.mark_area(**_mark_kwargs(style)).encode(y=y_low, y2=y_high)

    if geom == Geom.pointrange:
        rule_kwargs = _mark_kwargs(style)
        rule_kwargs["strokeWidth"] = stroke_width(style["size"])
        rule = base.mark_rule(**rule_kwargs).encode(y=y_low, y2=y_high)
        point = base.mark_point(**_point_kwargs(style, style["size"] * style["fatten"])).encode(y=y_center)
        return alt.layer(rule, point)

    raise ValueError(f"Unknown geom: {geom}")


def stat_ci(
    data: pd.DataFrame,
    x: str,
    y: str,
    *,
    group: Optional[str] = None,
    conf_level: float = 0.95,
    distribution: Union[str, Distribution] = Distribution.normal,
    geom: Optional[Union[str, Sequence[str]]] = None,
    position: Union[str, Position] = Position.identity,
    dodge_width: float = 0.5,
    na_rm: bool = False,
    show_legend: bool = True,
    **style: Any,
) -> Dict[str, AnyChart]:
    """Build mean +/- confidence interval layers, one per geom.

    Parameters
    ----------
    data:
        Raw observations, one row per measurement.
    x, y:
        Column names. ``y`` is summarized within each x (and group).
    group:
        Optional grouping column, mapped to color. A fixed ``color`` style
        still splits the data by group, without coloring it.
    conf_level:
        Confidence level in (0.5, 1).
    distribution:
        normal, lognormal or binomial. See :mod:`ciplot.stats.ci`.
    geom:
        One geom name or a list of them. Defaults to point, line and errorbar.
    position:
        identity, or dodge to offset groups that share an x.
    dodge_width:
        Total width (in x units) that dodged groups are spread across.
    na_rm:
        If False, dropped missing values are reported as a warning.
    show_legend:
        If False, the color legend is hidden.
    **style:
        Fixed aesthetics applied to every layer (size, alpha, color, shape,
        width, fatten). These override the per-geom defaults.

    Returns
    -------
    Dict mapping ``"geom_<name>"`` to an Altair chart, in the requested order.
    """

    geoms = parse_geoms(geom)
    position = as_position(position)

    unknown = sorted(set(style) - STYLE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown style parameters: %s", unknown)
    # None means unset, same as in apply_default_style
    style = {k: v for k, v in style.items() if k in STYLE_KEYS and v is not None}

    summary = summarize_ci(
        data,
        x,
        y,
        by=group,
        conf_level=conf_level,
        distribution=distribution,
        na_rm=na_rm,
    )

    x_type = _field_type(data[x])
    x_scale = alt.Scale(zero=False) if x_type == "quantitative" else alt.Undefined
    encoding: Dict[str, Any] = {"x": alt.X(field=x, type=x_type, title=x, scale=x_scale)}

    if group is not None:
        if "color" in style:
            encoding["detail"] = alt.Detail(field=group, type="nominal")
        else:
            legend = alt.Undefined if show_legend else None
            encoding["color"] = alt.Color(field=group, type="nominal", title=group, legend=legend)

        if position == Position.dodge:
            if x_type == "quantitative":
                summary = dodge_numeric(summary, x, group, dodge_width)
            elif x_type == "temporal":
                logger.warning("Dodge is not supported for temporal x '%s'; using identity", x)
            else:
                encoding["xOffset"] = alt.XOffset(field=group, type="nominal")

    tooltip = [alt.Tooltip(field=x, type=x_type)]
    if group is not None:
        tooltip.append(alt.Tooltip(field=group, type="nominal"))
    tooltip += [alt.Tooltip(field=c, type="quantitative") for c in ("y", "ymin", "ymax", "n")]
    encoding["tooltip"] = tooltip

    base = alt.Chart(summary).encode(**encoding)

    layers: Dict[str, AnyChart] = {}
    for g in geoms:
        merged = apply_default_style(g, style)
        layers[f"geom_{g.value}"] = _build_layer(g, base, merged, y)
    logger.debug("Built %d layer(s) for %s ~ %s", len(layers), y, x)
    return layers


def ci_chart(
    data: pd.DataFrame,
    x: str,
    y: str,
    *,
    title: Optional[str] = None,
    chart_width: Optional[int] = None,
    chart_height: Optional[int] = None,
    **kwargs: Any,
) -> alt.LayerChart:
    """Layer the output of :func:`stat_ci` into a single chart.

    ``chart_width``/``chart_height`` size the chart in pixels; ``width`` is
    left to :func:`stat_ci` as the errorbar cap width.
    """

    layers = stat_ci(data, x, y, **kwargs)
    chart = alt.layer(*layers.values())

    props: Dict[str, Any] = {}
    if title is not None:
        props["title"] = title
    if chart_width is not None:
        props["width"] = chart_width
    if chart_height is not None:
        props["height"] = chart_height
    if props:
        chart = chart.properties(**props)
    return chart
