import logging
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from src.errors import UnknownType
from src.adapter import edges, schema
from src.adapter.params import parse_edge_parameters
from src.adapter.properties import property_accessor, resolve_properties_with
from src.adapter.vertex import (
    VERTEX_TYPES,
    BranchVertex,
    RepositoryVertex,
    TagVertex,
    Vertex,
    typename_of,
)
from src.git_objects.repository import Repository

logger = logging.getLogger(__name__)


class GitAdapter:
    """Answers resolution requests against a single repository.

    Every method validates the requested type, field and parameters when it
    is called and then returns a lazy iterator; nothing touches the object
    store until the caller pulls from it.
    """

    def __init__(self, repo: Repository):
        self.repo = repo

    def resolve_starting_vertices(self, field_name: str) -> Iterator[Vertex]:
        schema.root_type(field_name)
        return iter([RepositoryVertex(repo=self.repo)])

    def resolve_property(
        self,
        vertices: Iterable[Vertex],
        type_name: str,
        property_name: str,
    ) -> Iterator[Tuple[Vertex, Any]]:
        schema.check_property(type_name, property_name)
        vertex_cls = VERTEX_TYPES[type_name]
        return resolve_properties_with(vertices, vertex_cls, property_accessor(vertex_cls, property_name))

    def resolve_neighbors(
        self,
        vertices: Iterable[Vertex],
        type_name: str,
        edge_name: str,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> Iterator[Tuple[Vertex, Iterator[Vertex]]]:
        schema.get_edge(type_name, edge_name)
        params = parse_edge_parameters(type_name, edge_name, parameters)
        logger.debug("Resolving %s.%s", type_name, edge_name)
        return self._neighbors(vertices, type_name, edge_name, params)

    def _neighbors(self, vertices, type_name, edge_name, params):
        vertex_cls = VERTEX_TYPES[type_name]
        for vertex in vertices:
            if not isinstance(vertex, vertex_cls):
                raise UnknownType(f"Expected a {type_name} vertex, got {typename_of(vertex)}")

            if isinstance(vertex, RepositoryVertex):
                if edge_name == "commits":
                    yield vertex, edges.commits(vertex.repo, params)
                elif edge_name == "branches":
                    yield vertex, edges.branches(vertex.repo)
                else:
                    yield vertex, edges.tags(vertex.repo)
            elif isinstance(vertex, BranchVertex):
                yield vertex, edges.branch_commit(self.repo, vertex)
            elif isinstance(vertex, TagVertex):
                yield vertex, edges.tag_commit(self.repo, vertex)
            else:
                raise AssertionError(f"{type_name}.{edge_name} passed schema validation but has no resolver")

    def resolve_coercion(self, vertices: Iterable[Vertex], coerce_to_type: str) -> Iterator[Tuple[Vertex, bool]]:
        schema.get_type(coerce_to_type)
        return ((vertex, typename_of(vertex) == coerce_to_type) for vertex in vertices)
