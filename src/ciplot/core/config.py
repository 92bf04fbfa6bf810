from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ciplot.stats.ci import Distribution, validate_conf_level
from ciplot.viz.layers import STYLE_KEYS, Position
from ciplot.viz.styles import DEFAULT_GEOMS, Geom


class ChartConfig(BaseModel):
    """Everything needed to summarize one y column and draw it."""

    x: str
    y: str
    group: Optional[str] = None

    conf_level: float = 0.95
    distribution: Distribution = Distribution.normal

    geoms: List[Geom] = Field(default_factory=lambda: list(DEFAULT_GEOMS))
    position: Position = Position.identity
    dodge_width: float = 0.5

    na_rm: bool = False
    show_legend: bool = True

    # Fixed aesthetics applied to every layer, e.g. {"size": 3, "color": "red"}
    style: Dict[str, Any] = Field(default_factory=dict)

    title: Optional[str] = None
    chart_width: Optional[int] = None
    chart_height: Optional[int] = None

    @field_validator("conf_level")
    @classmethod
    def _check_conf_level(cls, v: float) -> float:
        return validate_conf_level(v)

    @field_validator("style")
    @classmethod
    def _check_style(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        unknown = sorted(set(v) - STYLE_KEYS)
        if unknown:
            raise ValueError(f"Unknown style keys: {unknown}. Allowed: {sorted(STYLE_KEYS)}")
        return v

    @model_validator(mode="after")
    def _validate(self) -> "ChartConfig":
        if not self.geoms:
            raise ValueError("At least one geom is required.")
        if self.position == Position.dodge and self.group is None:
            raise ValueError("position=dodge requires a group column to dodge by.")
        if self.dodge_width <= 0:
            raise ValueError("dodge_width must be positive.")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ChartConfig":
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    def required_columns(self) -> List[str]:
        cols = [self.x, self.y]
        if self.group is not None and self.group not in cols:
            cols.append(self.group)
        return cols

    def layer_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for :func:`ciplot.viz.layers.ci_chart`."""
        kwargs: Dict[str, Any] = dict(
            group=self.group,
            conf_level=self.conf_level,
            distribution=self.distribution,
            geom=[g.value for g in self.geoms],
            position=self.position,
            dodge_width=self.dodge_width,
            na_rm=self.na_rm,
            show_legend=self.show_legend,
            title=self.title,
            chart_width=self.chart_width,
            chart_height=self.chart_height,
        )
        kwargs.update(self.style)
        return kwargs
