"""Confidence intervals for per-group summaries.

Three distributional assumptions are supported:

- normal: sample mean +/- Student t critical value * standard error
- lognormal: the normal interval computed on log(y), exponentiated back
  (the central value is therefore the geometric mean)
- binomial: proportion of 1's with the exact Clopper-Pearson interval
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.proportion import proportion_confint

from ciplot.utils.logging import get_logger

logger = get_logger(__name__)

SUMMARY_COLUMNS = ["y", "ymin", "ymax", "n"]


class Distribution(str, Enum):
    normal = "normal"
    lognormal = "lognormal"
    binomial = "binomial"


@dataclass(frozen=True)
class ConfidenceInterval:
    y: float
    ymin: float
    ymax: float
    n: int


def validate_conf_level(conf_level: float) -> float:
    if not (0.5 < conf_level < 1):
        raise ValueError("conf_level should be greater than 0.5 and less than 1")
    return float(conf_level)


def percentile_for(conf_level: float) -> float:
    """Upper percentile of a two-sided interval, e.g. 0.95 -> 0.975."""
    return conf_level + (1 - conf_level) / 2


def as_distribution(distribution: Union[str, Distribution]) -> Distribution:
    try:
        return Distribution(distribution)
    except ValueError:
        raise ValueError("distribution must be either normal, lognormal, or binomial") from None


def _clean(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float).ravel()
    return arr[~np.isnan(arr)]


def _t_interval(y: np.ndarray, conf_level: float) -> Tuple[float, float, float]:
    n = y.size
    if n == 0:
        return float("nan"), float("nan"), float("nan")
    mean = float(np.mean(y))
    if n < 2:
        return mean, float("nan"), float("nan")

    se = float(np.sqrt(np.var(y, ddof=1) / n))
    half = float(stats.t.ppf(percentile_for(conf_level), n - 1)) * se
    return mean, mean - half, mean + half


def normal_ci(values: Sequence[float], conf_level: float = 0.95) -> ConfidenceInterval:
    y = _clean(values)
    mean, lo, hi = _t_interval(y, conf_level)
    return ConfidenceInterval(y=mean, ymin=lo, ymax=hi, n=int(y.size))


def lognormal_ci(values: Sequence[float], conf_level: float = 0.95) -> ConfidenceInterval:
    y = _clean(values)
    if np.any(y <= 0):
        raise ValueError("lognormal data must be strictly positive")

    mean, lo, hi = _t_interval(np.log(y), conf_level)
    return ConfidenceInterval(
        y=float(np.exp(mean)),
        ymin=float(np.exp(lo)),
        ymax=float(np.exp(hi)),
        n=int(y.size),
    )


def binomial_ci(values: Sequence[float], conf_level: float = 0.95) -> ConfidenceInterval:
    y = _clean(values)
    if not np.all(np.isin(y, (0.0, 1.0))):
        raise ValueError("binomial data must be numeric and contain only 1's and 0's")

    n = int(y.size)
    if n == 0:
        return ConfidenceInterval(y=float("nan"), ymin=float("nan"), ymax=float("nan"), n=0)

    successes = int(y.sum())
    lo, hi = proportion_confint(successes, n, alpha=1 - conf_level, method="beta")
    return ConfidenceInterval(y=successes / n, ymin=float(lo), ymax=float(hi), n=n)


_CI_FUNCS = {
    Distribution.normal: normal_ci,
    Distribution.lognormal: lognormal_ci,
    Distribution.binomial: binomial_ci,
}


def conf_int(
    values: Sequence[float],
    conf_level: float = 0.95,
    distribution: Union[str, Distribution] = Distribution.normal,
) -> ConfidenceInterval:
    """Central value and confidence interval of ``values``.

    Missing values (NaN) are dropped before computing. Raises ValueError for a
    confidence level outside (0.5, 1) or an unknown distribution.
    """

    conf_level = validate_conf_level(conf_level)
    dist = as_distribution(distribution)
    return _CI_FUNCS[dist](values, conf_level)


def summarize_ci(
    df: pd.DataFrame,
    x: str,
    y: str,
    *,
    by: Optional[Union[str, Sequence[str]]] = None,
    conf_level: float = 0.95,
    distribution: Union[str, Distribution] = Distribution.normal,
    na_rm: bool = False,
) -> pd.DataFrame:
    """Compute one confidence interval per (x, *by) group.

    Returns a DataFrame with the grouping columns followed by
    ``y``, ``ymin``, ``ymax`` and ``n``, sorted by the grouping keys.

    Rows with a missing (or non-numeric) ``y`` or missing group key are
    dropped. Unless ``na_rm`` is True, the number of dropped rows is logged
    as a warning.
    """

    conf_level = validate_conf_level(conf_level)
    dist = as_distribution(distribution)

    if by is None:
        by_cols: List[str] = []
    elif isinstance(by, str):
        by_cols = [by]
    else:
        by_cols = list(by)
    keys = [x] + [c for c in by_cols if c != x]

    missing = [c for c in keys + [y] if c not in df.columns]
    if missing:
        raise ValueError(f"Data is missing required columns: {missing}")
    clashing = [c for c in keys if c in SUMMARY_COLUMNS]
    if clashing:
        raise ValueError(f"Grouping columns clash with summary column names: {clashing}")

    work = df[keys].copy()
    work["__value"] = pd.to_numeric(df[y], errors="coerce")

    keep = work.notna().all(axis=1)
    n_removed = int((~keep).sum())
    if n_removed and not na_rm:
        logger.warning("Removed %d rows containing missing values (%s).", n_removed, y)
    work = work.loc[keep]

    rows = []
    for key, grp in work.groupby(keys, sort=True):
        key = key if isinstance(key, tuple) else (key,)
        ci = _CI_FUNCS[dist](grp["__value"].to_numpy(), conf_level)
        rows.append((*key, ci.y, ci.ymin, ci.ymax, ci.n))

    out = pd.DataFrame(rows, columns=keys + SUMMARY_COLUMNS)
    logger.debug("Summarized %s by %s: %d groups (%s, conf_level=%g)", y, keys, len(out), dist.value, conf_level)
    return out
