import logging
from typing import Iterator

from src.errors import ReferenceResolutionFailed
from src.adapter.params import CommitsParameters
from src.adapter.vertex import BranchVertex, TagVertex, Vertex, commit_vertex
from src.dag.refs import get_branches, get_tags, resolve_ref
from src.dag.walker import HistoryWalker, commit_filter
from src.git_objects.models import TagObject
from src.git_objects.repository import Repository

logger = logging.getLogger(__name__)


def commits(repo: Repository, params: CommitsParameters) -> Iterator[Vertex]:
    logger.debug("Walking history of %s with %r", repo.git_dir, params)
    walker = HistoryWalker(repo.store)
    predicate = commit_filter(author=params.author, pattern=params.pattern)
    for commit in walker.walk_head(limit=params.limit, predicate=predicate):
        yield commit_vertex(commit)


def branches(repo: Repository) -> Iterator[Vertex]:
    for name in get_branches(repo.git_dir):
        yield BranchVertex(name=name)


def tags(repo: Repository) -> Iterator[Vertex]:
    for name, target_oid in get_tags(repo.git_dir).items():
        obj = repo.store.read(target_oid)
        if isinstance(obj, TagObject):
            yield TagVertex(name=name, target_oid=target_oid, message=obj.message, tagger=obj.tagger)
        else:
            # Lightweight tag, the ref names the commit directly
            yield TagVertex(name=name, target_oid=target_oid)


def branch_commit(repo: Repository, branch: BranchVertex) -> Iterator[Vertex]:
    ref_name = f"refs/heads/{branch.name}"
    oid = resolve_ref(repo.git_dir, ref_name)
    if oid is None:
        raise ReferenceResolutionFailed(f"Branch {branch.name} no longer exists")
    yield commit_vertex(repo.store.peel_to_commit(oid, ref_name))


def tag_commit(repo: Repository, tag: TagVertex) -> Iterator[Vertex]:
    commit = repo.store.peel_to_commit(tag.target_oid, f"refs/tags/{tag.name}")
    yield commit_vertex(commit)
