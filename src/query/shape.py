from typing import Any, Dict, List

from pydantic import BaseModel, Field, model_validator


class ShapeNode(BaseModel):
    edge: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    outputs: List[str] = Field(default_factory=list)
    children: List["ShapeNode"] = Field(default_factory=list)

    def output_names(self) -> List[str]:
        names = list(self.outputs)
        for child in self.children:
            names.extend(child.output_names())
        return names


class QueryShape(BaseModel):
    """A pre-planned query: which edges to follow and which properties to output."""

    root: ShapeNode

    @model_validator(mode="after")
    def check_shape(self) -> "QueryShape":
        if self.root.edge != "repository":
            raise ValueError(f"Query must start at 'repository', not '{self.root.edge}'")
        names = self.root.output_names()
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate output names: {', '.join(duplicates)}")
        return self

    def columns(self) -> List[str]:
        return self.root.output_names()
