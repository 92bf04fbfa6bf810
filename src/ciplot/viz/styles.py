from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


class Geom(str, Enum):
    point = "point"
    line = "line"
    errorbar = "errorbar"
    ribbon = "ribbon"
    pointrange = "pointrange"


DEFAULT_GEOMS: List[Geom] = [Geom.point, Geom.line, Geom.errorbar]

# Sizes are in ggplot-like units; viz.layers converts them to pixels.
DEFAULT_GEOM_STYLES: Dict[Geom, Dict[str, Any]] = {
    Geom.point: {"size": 2},
    Geom.line: {"size": 1},
    Geom.errorbar: {"size": 1, "width": 0},
    Geom.ribbon: {"alpha": 0.25},
    Geom.pointrange: {"size": 1, "fatten": 2},
}


def as_geom(name: Union[str, Geom]) -> Geom:
    try:
        return Geom(name)
    except ValueError:
        allowed = ", ".join(g.value for g in Geom)
        raise ValueError(f"Unknown geom '{name}'. Allowed: {allowed}") from None


def parse_geoms(geom: Optional[Union[str, Geom, Sequence[Union[str, Geom]]]]) -> List[Geom]:
    """Normalize a single geom name or a sequence of names to a list of Geom."""

    if geom is None:
        return list(DEFAULT_GEOMS)
    if isinstance(geom, (str, Geom)):
        return [as_geom(geom)]

    geoms = [as_geom(g) for g in geom]
    if not geoms:
        raise ValueError("At least one geom is required")
    return geoms


def apply_default_style(geom: Union[str, Geom], params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Merge the geom's default style under user-supplied ``params``.

    User values always win; a default only fills a key that is missing or None.
    Returns a new dict.
    """

    merged = {k: v for k, v in (params or {}).items() if v is not None}
    for key, value in DEFAULT_GEOM_STYLES[as_geom(geom)].items():
        merged.setdefault(key, value)
    return merged
