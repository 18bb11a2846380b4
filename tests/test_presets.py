import pytest

from src.errors import InvalidParameter, UnknownPreset
from src.presets.presets import all_presets, bind_parameters, find_preset, parse_param_args, run


def commits_node(shape):
    (node,) = shape.root.children
    assert node.edge == "commits"
    return node


def test_all_presets_returns_five():
    assert [p.name for p in all_presets()] == [
        "recent-commits", "branches", "tags", "commits-by-author", "search-commits",
    ]


def test_find_preset_not_found():
    with pytest.raises(UnknownPreset, match="Unknown preset"):
        find_preset("nonexistent")


def test_recent_commits_has_limit_param_with_default():
    preset = find_preset("recent-commits")
    assert preset.contract() == {"limit": {"type": "int", "required": False, "default": "10"}}


def test_commits_by_author_has_required_param():
    preset = find_preset("commits-by-author")
    assert preset.contract() == {"author": {"type": "str", "required": True, "default": None}}


def test_branches_has_no_params():
    assert find_preset("branches").contract() == {}


def test_recent_commits_binds_default_limit():
    shape = run("recent-commits", {})
    assert commits_node(shape).parameters == {"limit": 10}
    assert shape.columns() == ["hash", "message", "author", "date"]


def test_recent_commits_binds_given_limit():
    assert commits_node(run("recent-commits", {"limit": "3"})).parameters == {"limit": 3}


@pytest.mark.parametrize("value", ["abc", "1.5", "", "0", "-1"])
def test_bad_limit_rejected(value):
    with pytest.raises(InvalidParameter):
        run("recent-commits", {"limit": value})


def test_missing_required_parameter():
    with pytest.raises(InvalidParameter, match="Missing required parameter"):
        run("commits-by-author", {})


def test_author_binds_to_commits_filter():
    shape = run("commits-by-author", {"author": "Alice"})
    assert commits_node(shape).parameters == {"author": "Alice"}


def test_search_pattern_must_compile():
    with pytest.raises(InvalidParameter, match="regex"):
        run("search-commits", {"pattern": "fix(bug"})
    assert commits_node(run("search-commits", {"pattern": "fix.*bug"})).parameters == {"pattern": "fix.*bug"}


def test_unknown_parameter_rejected():
    with pytest.raises(InvalidParameter, match="Unknown parameter"):
        bind_parameters(find_preset("branches"), {"limit": "3"})


def test_parse_param_args():
    assert parse_param_args(["author=Test User", "x=a=b"]) == {"author": "Test User", "x": "a=b"}
    with pytest.raises(InvalidParameter, match="Invalid parameter format"):
        parse_param_args(["author"])
