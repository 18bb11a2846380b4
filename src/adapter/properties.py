from typing import Any, Callable, Dict, Iterable, Iterator, Tuple

from src.errors import ObjectReadFailed, UnknownType
from src.adapter.vertex import BranchVertex, CommitVertex, RepositoryVertex, TagVertex, Vertex, typename_of

Accessor = Callable[[Any], Any]


def _message(text: str):
    # Empty messages are reported as absent
    return text or None


def _date(vertex: CommitVertex) -> str:
    committer = vertex.commit.committer
    try:
        return committer.to_datetime().isoformat()
    except (ValueError, OverflowError, OSError) as e:
        raise ObjectReadFailed(
            f"Commit {vertex.hash} has an unrepresentable committer date "
            f"({committer.timestamp}, offset {committer.offset_minutes} minutes): {e}"
        ) from e


REPOSITORY_PROPERTIES: Dict[str, Accessor] = {
    "name": lambda v: v.repo.name,
}

COMMIT_PROPERTIES: Dict[str, Accessor] = {
    "hash": lambda v: v.hash,
    "message": lambda v: _message(v.commit.message),
    "author": lambda v: v.commit.author.name,
    "author_email": lambda v: v.commit.author.email,
    "committer": lambda v: v.commit.committer.name,
    "committer_email": lambda v: v.commit.committer.email,
    "date": _date,
}

BRANCH_PROPERTIES: Dict[str, Accessor] = {
    "name": lambda v: v.name,
}

TAG_PROPERTIES: Dict[str, Accessor] = {
    "name": lambda v: v.name,
    "message": lambda v: _message(v.message or ""),
    "tagger_name": lambda v: v.tagger.name if v.tagger else None,
    "tagger_email": lambda v: v.tagger.email if v.tagger else None,
}

PROPERTY_TABLE = {
    RepositoryVertex: REPOSITORY_PROPERTIES,
    CommitVertex: COMMIT_PROPERTIES,
    BranchVertex: BRANCH_PROPERTIES,
    TagVertex: TAG_PROPERTIES,
}


def property_accessor(vertex_cls, property_name: str) -> Accessor:
    """Looks up the accessor; names are validated against the schema first."""
    return PROPERTY_TABLE[vertex_cls][property_name]


def resolve_properties_with(
    vertices: Iterable[Vertex], vertex_cls, accessor: Accessor
) -> Iterator[Tuple[Vertex, Any]]:
    for vertex in vertices:
        if not isinstance(vertex, vertex_cls):
            raise UnknownType(f"Expected a {vertex_cls.typename} vertex, got {typename_of(vertex)}")
        yield vertex, accessor(vertex)
