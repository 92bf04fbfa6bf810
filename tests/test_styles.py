import pytest

from ciplot.viz.styles import DEFAULT_GEOM_STYLES, Geom, apply_default_style, parse_geoms


def test_default_styles_per_geom():
    assert apply_default_style("point") == {"size": 2}
    assert apply_default_style("line") == {"size": 1}
    assert apply_default_style("errorbar") == {"size": 1, "width": 0}
    assert apply_default_style("ribbon") == {"alpha": 0.25}
    assert apply_default_style("pointrange") == {"size": 1, "fatten": 2}


def test_user_values_win_over_defaults():
    merged = apply_default_style(Geom.errorbar, {"size": 3, "color": "red"})
    assert merged == {"size": 3, "color": "red", "width": 0}


def test_none_is_treated_as_unset():
    merged = apply_default_style("ribbon", {"alpha": None, "color": "grey"})
    assert merged == {"alpha": 0.25, "color": "grey"}


def test_inputs_are_not_mutated():
    params = {"size": 5}
    apply_default_style("point", params)
    assert params == {"size": 5}
    assert DEFAULT_GEOM_STYLES[Geom.point] == {"size": 2}


def test_parse_geoms_accepts_name_or_list():
    assert parse_geoms("ribbon") == [Geom.ribbon]
    assert parse_geoms(["ribbon", "point", "line"]) == [Geom.ribbon, Geom.point, Geom.line]
    assert parse_geoms(None) == [Geom.point, Geom.line, Geom.errorbar]


def test_parse_geoms_rejects_unknown_and_empty():
    with pytest.raises(ValueError, match="Unknown geom 'bar'"):
        parse_geoms(["point", "bar"])
    with pytest.raises(ValueError, match="At least one geom"):
        parse_geoms([])
