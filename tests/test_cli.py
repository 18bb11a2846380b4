import json

import pytest
from click.testing import CliRunner

from src.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


def git_seek(runner, factory, *args):
    # Wide terminal so rich never wraps table cells
    return runner.invoke(cli, ["--repo", str(factory.root), *args], env={"COLUMNS": "200"})


def test_preset_list(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "list")
    assert result.exit_code == 0
    for name in ["recent-commits", "branches", "tags", "commits-by-author", "search-commits"]:
        assert name in result.output


def test_preset_recent_commits(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "recent-commits")
    assert result.exit_code == 0
    assert "Initial commit" in result.output


def test_preset_recent_commits_with_limit(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "recent-commits", "--param", "limit=1", "--format", "json")
    assert result.exit_code == 0
    rows = json.loads(result.output)
    assert [r["message"] for r in rows] == ["Third commit"]


def test_preset_bad_limit(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "recent-commits", "--param", "limit=abc")
    assert result.exit_code == 1
    assert "must be of type int" in result.output


def test_preset_commits_by_author(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "commits-by-author", "--param", "author=Test User")
    assert result.exit_code == 0
    assert "Initial commit" in result.output


def test_preset_commits_by_author_missing_param(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "commits-by-author")
    assert result.exit_code == 1
    assert "Missing required parameter" in result.output


def test_preset_search_commits(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "search-commits", "--param", "pattern=Initial", "--format", "json")
    assert result.exit_code == 0
    assert [r["message"] for r in json.loads(result.output)] == ["Initial commit"]


def test_preset_unknown(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "nonexistent")
    assert result.exit_code == 1
    assert "Unknown preset" in result.output


def test_preset_invalid_param_format(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "recent-commits", "--param", "limit")
    assert result.exit_code == 1
    assert "Invalid parameter format" in result.output


def test_preset_branches_table(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "branches", "--format", "table")
    assert result.exit_code == 0
    assert "main" in result.output
    assert "Third commit" in result.output


def test_preset_tags_empty(runner, linear_repo):
    factory, _ = linear_repo
    result = git_seek(runner, factory, "preset", "run", "tags", "--format", "json")
    assert result.exit_code == 0
    assert json.loads(result.output) == []


def test_not_a_repository(runner, tmp_path):
    result = runner.invoke(cli, ["--repo", str(tmp_path), "preset", "run", "branches"])
    assert result.exit_code == 1
    assert "Not a git repository" in result.output
