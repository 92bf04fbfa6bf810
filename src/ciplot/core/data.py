from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from ciplot.core.config import ChartConfig
from ciplot.stats.ci import Distribution


def load_dataset(path: str | Path) -> pd.DataFrame:
    path = Path(path)
    if path.suffix.lower() in {".csv"}:
        return pd.read_csv(path)
    if path.suffix.lower() in {".parquet"}:
        return pd.read_parquet(path)
    raise ValueError(f"Unsupported dataset format: {path.suffix}. Use .csv or .parquet")


def validate_dataset(df: pd.DataFrame, cfg: ChartConfig) -> None:
    """Check that the columns the chart needs exist and that y fits the distribution.

    Missing cells are allowed (they are dropped when summarizing); values that
    are present but not numeric are not.
    """

    missing: List[str] = [c for c in cfg.required_columns() if c not in df.columns]
    if missing:
        raise ValueError(f"Dataset is missing required columns: {missing}")

    raw = df[cfg.y]
    coerced = pd.to_numeric(raw, errors="coerce")
    bad = coerced.isna() & raw.notna()
    if bad.any():
        bad_rows = coerced[bad].index[:10].tolist()
        raise ValueError(f"Column '{cfg.y}' must be numeric. Example bad rows: {bad_rows}")

    values = coerced.dropna()
    if cfg.distribution == Distribution.binomial:
        not_binary = values[~np.isin(values.to_numpy(), (0.0, 1.0))]
        if not not_binary.empty:
            raise ValueError(
                f"Binomial column '{cfg.y}' must contain only 0 and 1. "
                f"Example bad rows: {not_binary.index[:10].tolist()}"
            )
    elif cfg.distribution == Distribution.lognormal:
        non_positive = values[values <= 0]
        if not non_positive.empty:
            raise ValueError(
                f"Lognormal column '{cfg.y}' must be strictly positive. "
                f"Example bad rows: {non_positive.index[:10].tolist()}"
            )
