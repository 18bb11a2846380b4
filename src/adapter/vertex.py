from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from src.git_objects.models import CommitObject, Signature
from src.git_objects.repository import Repository


@dataclass(frozen=True)
class RepositoryVertex:
    typename: ClassVar[str] = "Repository"
    repo: Repository = field(compare=False)


@dataclass(frozen=True)
class CommitVertex:
    typename: ClassVar[str] = "Commit"
    hash: str
    commit: CommitObject = field(compare=False, repr=False)


@dataclass(frozen=True)
class BranchVertex:
    typename: ClassVar[str] = "Branch"
    name: str


@dataclass(frozen=True)
class TagVertex:
    typename: ClassVar[str] = "Tag"
    name: str
    # The ref's direct target: a tag object for annotated tags, else a commit
    target_oid: str
    message: Optional[str] = None
    tagger: Optional[Signature] = None


Vertex = Union[RepositoryVertex, CommitVertex, BranchVertex, TagVertex]

VERTEX_TYPES = {cls.typename: cls for cls in (RepositoryVertex, CommitVertex, BranchVertex, TagVertex)}


def commit_vertex(commit: CommitObject) -> CommitVertex:
    return CommitVertex(hash=commit.oid, commit=commit)


def typename_of(vertex) -> str:
    return getattr(type(vertex), "typename", type(vertex).__name__)
