import re

import pytest

import src.git_objects.store as store_module
from src.dag.walker import HistoryWalker, commit_filter, head_commit_oid
from src.errors import ReferenceResolutionFailed
from src.git_objects.parser import read_object
from src.git_objects.store import ObjectStore


def walk_oids(factory, **kwargs):
    walker = HistoryWalker(ObjectStore(factory.git_dir))
    return [c.oid for c in walker.walk_head(**kwargs)]


def test_walk_linear_history(linear_repo):
    factory, (c1, c2, c3) = linear_repo
    assert walk_oids(factory) == [c3, c2, c1]


def test_walk_limit_is_prefix(linear_repo):
    factory, (c1, c2, c3) = linear_repo
    assert walk_oids(factory, limit=2) == [c3, c2]
    assert walk_oids(factory, limit=1) == [c3]
    assert walk_oids(factory, limit=10) == [c3, c2, c1]


def test_limit_stops_reading_history(repo_factory, monkeypatch):
    oids = repo_factory.chain([f"commit {i}" for i in range(6)])
    reads = []

    def counting_read_object(oid, git_dir):
        reads.append(oid)
        return read_object(oid, git_dir)

    monkeypatch.setattr(store_module, "read_object", counting_read_object)

    assert walk_oids(repo_factory, limit=2) == [oids[5], oids[4]]
    assert reads == [oids[5], oids[4]]


def test_partial_consumption_reads_only_what_was_pulled(repo_factory, monkeypatch):
    oids = repo_factory.chain([f"commit {i}" for i in range(6)])
    reads = []
    monkeypatch.setattr(
        store_module, "read_object", lambda oid, git_dir: reads.append(oid) or read_object(oid, git_dir)
    )

    walker = HistoryWalker(ObjectStore(repo_factory.git_dir))
    stream = walker.walk_head()
    assert reads == []
    assert next(stream).oid == oids[5]
    assert reads == [oids[5]]


def test_merge_emits_shared_ancestor_once(repo_factory):
    # C1 <- C2 (feature), C1 <- C3 (main fix), C4 merges both
    c1 = repo_factory.commit("Initial", timestamp=100)
    c2 = repo_factory.commit("Feature", parents=[c1], timestamp=200, branch="feature")
    c3 = repo_factory.commit("Main fix", parents=[c1], timestamp=300)
    c4 = repo_factory.commit("Merge", parents=[c2, c3], timestamp=400)

    oids = walk_oids(repo_factory)
    assert oids == [c4, c3, c2, c1]
    assert len(set(oids)) == len(oids)


def test_equal_timestamps_break_ties_by_hash(repo_factory):
    root = repo_factory.commit("root", timestamp=100)
    a = repo_factory.commit("side a", parents=[root], timestamp=200, branch=None)
    b = repo_factory.commit("side b", parents=[root], timestamp=200, branch=None)
    merge = repo_factory.commit("merge", parents=[a, b], timestamp=300)

    assert walk_oids(repo_factory) == [merge, *sorted([a, b]), root]


def test_parent_waits_for_child_with_same_timestamp(repo_factory):
    # P <- B share a timestamp, P <- A, M merges A and B
    for attempt in range(64):
        parent = repo_factory.commit(f"base {attempt}", timestamp=100, branch=None)
        child = repo_factory.commit(f"side {attempt}", parents=[parent], timestamp=100, branch=None)
        # Only the case where the parent's hash sorts first could go wrong
        if parent < child:
            break
    a = repo_factory.commit("main work", parents=[parent], timestamp=200, branch=None)
    merge = repo_factory.commit("merge", parents=[a, child], timestamp=300)

    assert walk_oids(repo_factory) == [merge, a, child, parent]


def test_parent_waits_for_child_under_clock_skew(repo_factory):
    parent = repo_factory.commit("base", timestamp=250, branch=None)
    a = repo_factory.commit("main work", parents=[parent], timestamp=200, branch=None)
    b = repo_factory.commit("skewed side", parents=[parent], timestamp=100, branch=None)
    merge = repo_factory.commit("merge", parents=[a, b], timestamp=300)

    oids = walk_oids(repo_factory)
    assert oids == [merge, a, b, parent]
    assert walk_oids(repo_factory, limit=3) == [merge, a, b]


def test_timestamps_are_non_increasing(repo_factory):
    c1 = repo_factory.commit("one", timestamp=10)
    c2 = repo_factory.commit("two", parents=[c1], timestamp=50, branch="topic")
    c3 = repo_factory.commit("three", parents=[c1], timestamp=30)
    repo_factory.commit("merge", parents=[c3, c2], timestamp=60)

    walker = HistoryWalker(ObjectStore(repo_factory.git_dir))
    stamps = [c.timestamp for c in walker.walk_head()]
    assert stamps == sorted(stamps, reverse=True)


def test_author_filter_counts_only_matches(repo_factory):
    c1 = repo_factory.commit("a1", author="Alice")
    c2 = repo_factory.commit("b1", parents=[c1], author="Bob")
    c3 = repo_factory.commit("a2", parents=[c2], author="Alice")
    repo_factory.commit("b2", parents=[c3], author="Bob")

    predicate = commit_filter(author="Alice")
    assert walk_oids(repo_factory, predicate=predicate) == [c3, c1]
    assert walk_oids(repo_factory, predicate=predicate, limit=1) == [c3]
    # Same filter twice gives the same answer
    assert walk_oids(repo_factory, predicate=predicate) == [c3, c1]


def test_author_filter_is_exact(repo_factory):
    repo_factory.chain(["x"], author="Alice Smith")
    assert walk_oids(repo_factory, predicate=commit_filter(author="Alice")) == []


def test_message_pattern_filter(repo_factory):
    c1, c2, c3 = repo_factory.chain(["fix login bug", "add feature", "fix rendering bug"])
    predicate = commit_filter(pattern=re.compile("fix.*bug"))
    assert walk_oids(repo_factory, predicate=predicate) == [c3, c1]


def test_no_filter_means_no_predicate():
    assert commit_filter() is None


def test_empty_repository_walk(repo_factory):
    assert walk_oids(repo_factory) == []
    assert head_commit_oid(repo_factory.git_dir) is None


def test_detached_head_is_an_error(linear_repo):
    factory, (_, c2, _) = linear_repo
    factory.set_head(c2)
    with pytest.raises(ReferenceResolutionFailed, match="detached"):
        walk_oids(factory)


def test_missing_head_is_an_error(linear_repo):
    factory, _ = linear_repo
    (factory.git_dir / "HEAD").unlink()
    with pytest.raises(ReferenceResolutionFailed):
        walk_oids(factory)


def test_walk_from_explicit_starting_points(repo_factory):
    c1 = repo_factory.commit("root", timestamp=1)
    c2 = repo_factory.commit("left", parents=[c1], timestamp=2, branch="left")
    c3 = repo_factory.commit("right", parents=[c1], timestamp=3, branch="right")

    walker = HistoryWalker(ObjectStore(repo_factory.git_dir))
    assert [c.oid for c in walker.walk([c2, c3])] == [c3, c2, c1]
