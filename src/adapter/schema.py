"""Types, properties and edges the resolvers answer for.

    type Repository { name, commits(limit, author, pattern): [Commit],
                      branches: [Branch], tags: [Tag] }
    type Commit     { hash, message, author, author_email,
                      committer, committer_email, date }
    type Branch     { name, commit: Commit }
    type Tag        { name, message, tagger_name, tagger_email, commit: Commit }

The only root field is ``repository``.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from src.errors import UnknownField, UnknownType


@dataclass(frozen=True)
class EdgeDef:
    target: str
    parameters: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class TypeDef:
    name: str
    properties: FrozenSet[str]
    edges: Dict[str, EdgeDef] = field(default_factory=dict)


ROOT_FIELDS: Dict[str, str] = {"repository": "Repository"}

TYPES: Dict[str, TypeDef] = {
    "Repository": TypeDef(
        name="Repository",
        properties=frozenset({"name"}),
        edges={
            "commits": EdgeDef("Commit", frozenset({"limit", "author", "pattern"})),
            "branches": EdgeDef("Branch"),
            "tags": EdgeDef("Tag"),
        },
    ),
    "Commit": TypeDef(
        name="Commit",
        properties=frozenset({
            "hash", "message", "author", "author_email",
            "committer", "committer_email", "date",
        }),
    ),
    "Branch": TypeDef(
        name="Branch",
        properties=frozenset({"name"}),
        edges={"commit": EdgeDef("Commit")},
    ),
    "Tag": TypeDef(
        name="Tag",
        properties=frozenset({"name", "message", "tagger_name", "tagger_email"}),
        edges={"commit": EdgeDef("Commit")},
    ),
}


def get_type(type_name: str) -> TypeDef:
    try:
        return TYPES[type_name]
    except KeyError:
        raise UnknownType(f"Unknown type '{type_name}'") from None


def check_property(type_name: str, property_name: str) -> None:
    if property_name not in get_type(type_name).properties:
        raise UnknownField(f"Type '{type_name}' has no property '{property_name}'")


def get_edge(type_name: str, edge_name: str) -> EdgeDef:
    edges = get_type(type_name).edges
    if edge_name not in edges:
        raise UnknownField(f"Type '{type_name}' has no edge '{edge_name}'")
    return edges[edge_name]


def root_type(field_name: str) -> str:
    try:
        return ROOT_FIELDS[field_name]
    except KeyError:
        raise UnknownField(f"Unknown root field '{field_name}'") from None
