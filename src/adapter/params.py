from typing import Annotated, Any, Mapping, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from src.errors import InvalidParameter


class CommitsParameters(BaseModel):
    """Typed parameters of the ``Repository.commits`` edge."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    limit: Optional[Annotated[StrictInt, Field(gt=0)]] = None
    author: Optional[StrictStr] = None
    pattern: Optional[Pattern[str]] = None

    @classmethod
    def parse(cls, parameters: Optional[Mapping[str, Any]]) -> "CommitsParameters":
        try:
            return cls.model_validate(dict(parameters or {}))
        except ValidationError as e:
            raise InvalidParameter(_describe(e)) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item["loc"]) or "parameters"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def check_no_parameters(edge_name: str, parameters: Optional[Mapping[str, Any]]) -> None:
    if parameters:
        names = ", ".join(sorted(parameters))
        raise InvalidParameter(f"Edge '{edge_name}' takes no parameters, got: {names}")


def parse_edge_parameters(type_name: str, edge_name: str, parameters: Optional[Mapping[str, Any]]):
    """Typed parameters for an edge, or None for edges that take none."""
    if (type_name, edge_name) == ("Repository", "commits"):
        return CommitsParameters.parse(parameters)
    check_no_parameters(edge_name, parameters)
    return None
