"""Mean +/- confidence interval layers for Altair charts."""
from __future__ import annotations

from ciplot.stats.ci import ConfidenceInterval, Distribution, conf_int, summarize_ci
from ciplot.viz.export import save_chart
from ciplot.viz.layers import Position, ci_chart, stat_ci
from ciplot.viz.styles import DEFAULT_GEOM_STYLES, Geom, apply_default_style

__version__ = "0.1.0"

__all__ = [
    "ConfidenceInterval",
    "DEFAULT_GEOM_STYLES",
    "Distribution",
    "Geom",
    "Position",
    "apply_default_style",
    "ci_chart",
    "conf_int",
    "save_chart",
    "stat_ci",
    "summarize_ci",
]
