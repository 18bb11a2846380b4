import logging
from typing import Any, Dict, Iterator, List

from src.adapter import schema
from src.adapter.adapter import GitAdapter
from src.adapter.params import parse_edge_parameters
from src.adapter.vertex import Vertex
from src.query.shape import QueryShape, ShapeNode

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _check_node(type_name: str, node: ShapeNode) -> None:
    for prop in node.outputs:
        schema.check_property(type_name, prop)
    for child in node.children:
        target = schema.get_edge(type_name, child.edge).target
        parse_edge_parameters(type_name, child.edge, child.parameters)
        _check_node(target, child)


def check_shape(shape: QueryShape) -> str:
    """Validates fields and edge parameters against the schema without
    touching a repository. Returns the root type name."""
    type_name = schema.root_type(shape.root.edge)
    _check_node(type_name, shape.root)
    return type_name


class ShapeExecutor:
    """Evaluates a QueryShape by chaining adapter calls, one row per result.

    Rows are produced lazily; a child edge with no neighbors drops the row,
    and sibling edges combine as a cross product.
    """

    def __init__(self, adapter: GitAdapter):
        self.adapter = adapter

    def execute(self, shape: QueryShape) -> Iterator[Row]:
        """Validates the whole shape, then returns the lazy row stream."""
        type_name = check_shape(shape)
        logger.debug("Executing query shape with outputs %s", shape.columns())
        return self._execute(type_name, shape.root)

    def _execute(self, type_name: str, root: ShapeNode) -> Iterator[Row]:
        for vertex in self.adapter.resolve_starting_vertices(root.edge):
            yield from self._rows(type_name, vertex, root)

    def _rows(self, type_name: str, vertex: Vertex, node: ShapeNode) -> Iterator[Row]:
        row: Row = {}
        for prop in node.outputs:
            for _, value in self.adapter.resolve_property([vertex], type_name, prop):
                row[prop] = value
        yield from self._product(row, type_name, vertex, node.children)

    def _product(self, row: Row, type_name: str, vertex: Vertex, children: List[ShapeNode]) -> Iterator[Row]:
        if not children:
            yield row
            return

        first, rest = children[0], children[1:]
        target = schema.get_edge(type_name, first.edge).target
        for _, neighbors in self.adapter.resolve_neighbors([vertex], type_name, first.edge, first.parameters):
            for neighbor in neighbors:
                for sub_row in self._rows(target, neighbor, first):
                    yield from self._product({**row, **sub_row}, type_name, vertex, rest)
