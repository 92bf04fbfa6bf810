import logging
import math

import numpy as np
import pandas as pd
import pytest

from ciplot.stats.ci import (
    Distribution,
    binomial_ci,
    conf_int,
    lognormal_ci,
    normal_ci,
    percentile_for,
    summarize_ci,
    validate_conf_level,
)


def test_percentile_for_two_sided():
    assert percentile_for(0.95) == pytest.approx(0.975)
    assert percentile_for(0.9) == pytest.approx(0.95)


@pytest.mark.parametrize("level", [0.5, 1.0, 0.3, 1.2, 95])
def test_conf_level_out_of_range_raises(level):
    with pytest.raises(ValueError, match="greater than 0.5 and less than 1"):
        validate_conf_level(level)


def test_conf_level_in_range_accepted():
    assert validate_conf_level(0.51) == 0.51
    assert validate_conf_level(0.99) == 0.99


def test_normal_ci_textbook_values():
    # mean 3, s = sqrt(2.5), t(0.975, df=4) = 2.776445
    ci = normal_ci([1, 2, 3, 4, 5], 0.95)
    half = 2.776445 * math.sqrt(2.5 / 5)
    assert ci.y == pytest.approx(3.0)
    assert ci.ymin == pytest.approx(3.0 - half, abs=1e-5)
    assert ci.ymax == pytest.approx(3.0 + half, abs=1e-5)
    assert ci.n == 5


def test_normal_ci_drops_missing_values():
    ci = conf_int([1, 2, 3, 4, 5, np.nan, None], 0.95, "normal")
    ref = normal_ci([1, 2, 3, 4, 5], 0.95)
    assert ci == ref
    assert ci.n == 5


def test_higher_conf_level_gives_wider_interval():
    y = [2.0, 4.0, 4.5, 5.0, 7.5, 3.2]
    narrow = conf_int(y, 0.8)
    wide = conf_int(y, 0.99)
    assert wide.ymin < narrow.ymin < narrow.y < narrow.ymax < wide.ymax


def test_single_observation_has_undefined_bounds():
    ci = normal_ci([4.2])
    assert ci.y == pytest.approx(4.2)
    assert math.isnan(ci.ymin) and math.isnan(ci.ymax)
    assert ci.n == 1


def test_empty_group_is_all_nan():
    ci = normal_ci([np.nan, np.nan])
    assert math.isnan(ci.y) and math.isnan(ci.ymin) and math.isnan(ci.ymax)
    assert ci.n == 0


def test_lognormal_is_normal_in_log_space():
    logs = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    ci = lognormal_ci(np.exp(logs), 0.95)
    ref = normal_ci(logs, 0.95)

    assert ci.y == pytest.approx(np.exp(3.0))
    assert ci.ymin == pytest.approx(np.exp(ref.ymin))
    assert ci.ymax == pytest.approx(np.exp(ref.ymax))
    # asymmetric around the geometric mean in linear space
    assert (ci.ymax - ci.y) > (ci.y - ci.ymin)


def test_lognormal_rejects_non_positive_values():
    with pytest.raises(ValueError, match="strictly positive"):
        conf_int([1.0, 0.0, 2.0], distribution="lognormal")


def test_binomial_clopper_pearson_values():
    ci = binomial_ci([1, 1, 1, 0, 0, 0, 0, 0, 0, 0], 0.95)
    assert ci.y == pytest.approx(0.3)
    assert ci.ymin == pytest.approx(0.06673951, abs=1e-6)
    assert ci.ymax == pytest.approx(0.65245285, abs=1e-6)
    assert ci.n == 10


def test_binomial_uses_requested_conf_level():
    y = [1, 0, 1, 1, 0, 1, 0, 1]
    ci80 = conf_int(y, 0.8, Distribution.binomial)
    ci95 = conf_int(y, 0.95, Distribution.binomial)
    assert ci95.ymin < ci80.ymin
    assert ci95.ymax > ci80.ymax


def test_binomial_all_zeros_bounded_at_zero():
    ci = binomial_ci([0, 0, 0, 0])
    assert ci.y == 0.0
    assert ci.ymin == pytest.approx(0.0)
    assert 0.0 < ci.ymax < 1.0


def test_binomial_all_ones_bounded_at_one():
    ci = binomial_ci([1, 1, 1, 1])
    assert ci.y == 1.0
    assert ci.ymax == pytest.approx(1.0)
    assert 0.0 < ci.ymin < 1.0


@pytest.mark.parametrize(
    "values",
    [[1], [0], [0, 1], [1, 1, 0], [0, 0, 0, 0, 0, 0, 0, 1], [1] * 50 + [0]],
)
@pytest.mark.parametrize("level", [0.8, 0.95, 0.999])
def test_binomial_bounds_stay_in_unit_interval(values, level):
    ci = binomial_ci(values, level)
    assert 0.0 <= ci.ymin <= ci.y <= ci.ymax <= 1.0


def test_lognormal_single_observation_has_undefined_bounds():
    ci = lognormal_ci([5.0, np.nan])
    assert ci.y == pytest.approx(5.0)
    assert math.isnan(ci.ymin) and math.isnan(ci.ymax)
    assert ci.n == 1


@pytest.mark.parametrize("func", [lognormal_ci, binomial_ci])
def test_empty_group_is_all_nan_for_other_distributions(func):
    ci = func([np.nan, np.nan])
    assert math.isnan(ci.y) and math.isnan(ci.ymin) and math.isnan(ci.ymax)
    assert ci.n == 0


def test_binomial_rejects_non_binary_values():
    with pytest.raises(ValueError, match="only 1's and 0's"):
        conf_int([0, 1, 2], distribution="binomial")


def test_unknown_distribution_raises():
    with pytest.raises(ValueError, match="normal, lognormal, or binomial"):
        conf_int([1, 2, 3], distribution="poisson")


@pytest.fixture
def grouped_df():
    return pd.DataFrame({
        "time": [1, 1, 1, 1, 2, 2, 2, 2, 1, 1, 1, 2, 2, 2],
        "arm": ["b", "b", "b", "b", "b", "b", "b", "b", "a", "a", "a", "a", "a", "a"],
        "value": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 2.0, 2.5, 3.0, np.nan, 4.0, 5.0],
    })


def test_summarize_ci_one_row_per_group(grouped_df):
    out = summarize_ci(grouped_df, "time", "value", by="arm", na_rm=True)

    assert list(out.columns) == ["time", "arm", "y", "ymin", "ymax", "n"]
    assert list(zip(out["time"], out["arm"])) == [(1, "a"), (1, "b"), (2, "a"), (2, "b")]
    assert out["n"].tolist() == [3, 4, 2, 4]

    ref = normal_ci([1.0, 2.0, 3.0, 4.0])
    row = out[(out["time"] == 1) & (out["arm"] == "b")].iloc[0]
    assert row["y"] == pytest.approx(ref.y)
    assert row["ymin"] == pytest.approx(ref.ymin)
    assert row["ymax"] == pytest.approx(ref.ymax)


def test_summarize_ci_without_groups(grouped_df):
    out = summarize_ci(grouped_df, "time", "value", na_rm=True)
    assert list(out.columns) == ["time", "y", "ymin", "ymax", "n"]
    assert out["n"].tolist() == [7, 6]


def test_summarize_ci_missing_column_raises(grouped_df):
    with pytest.raises(ValueError, match="missing required columns"):
        summarize_ci(grouped_df, "time", "conc")


def test_summarize_ci_logs_removed_rows(grouped_df, caplog):
    with caplog.at_level(logging.WARNING, logger="ciplot"):
        summarize_ci(grouped_df, "time", "value", by="arm")
    assert "Removed 1 rows containing missing values" in caplog.text


def test_summarize_ci_na_rm_is_silent(grouped_df, caplog):
    with caplog.at_level(logging.WARNING, logger="ciplot"):
        summarize_ci(grouped_df, "time", "value", by="arm", na_rm=True)
    assert "Removed" not in caplog.text


def test_summarize_ci_validates_before_grouping(grouped_df):
    with pytest.raises(ValueError, match="greater than 0.5"):
        summarize_ci(grouped_df, "time", "value", conf_level=0.4)
