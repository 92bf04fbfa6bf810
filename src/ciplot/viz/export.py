from __future__ import annotations

from pathlib import Path
from typing import Union

import altair as alt

from ciplot.utils.logging import get_logger

logger = get_logger(__name__)

# .png/.svg are rendered offline by vl-convert-python.
SUPPORTED_SUFFIXES = {".html", ".json", ".png", ".svg"}


def save_chart(
    chart: Union[alt.Chart, alt.LayerChart],
    out_path: str | Path,
    *,
    scale_factor: float = 2.0,
) -> Path:
    """Save a chart to disk.

    Parameters
    ----------
    chart:
        Any Altair top-level chart.
    out_path:
        Output path; the suffix picks the format (.html, .json, .png, .svg).
    scale_factor:
        Resolution multiplier for .png output.
    """

    out_path = Path(out_path)
    suffix = out_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported chart format: {out_path.suffix}. Use one of {sorted(SUPPORTED_SUFFIXES)}"
        )

    out_path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".png":
        chart.save(str(out_path), scale_factor=scale_factor)
    else:
        chart.save(str(out_path))
    logger.info("Saved chart to %s", out_path)
    return out_path
