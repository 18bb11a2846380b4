import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple

from pydantic import TypeAdapter, ValidationError

from src.errors import InvalidParameter, UnknownPreset
from src.query.executor import check_shape
from src.query.shape import QueryShape

logger = logging.getLogger(__name__)

# Declared parameter type -> validator for the raw CLI/HTTP string
PARAM_TYPES: Dict[str, TypeAdapter] = {
    "int": TypeAdapter(int),
    "str": TypeAdapter(str),
    "regex": TypeAdapter(Pattern[str]),
}


@dataclass(frozen=True)
class PresetParam:
    name: str
    description: str
    type: str = "str"
    required: bool = False
    default: Optional[str] = None

    def contract(self) -> Dict[str, Any]:
        return {"type": self.type, "required": self.required, "default": self.default}

    def parse(self, raw: str) -> Any:
        try:
            value = PARAM_TYPES[self.type].validate_python(raw)
        except ValidationError as e:
            raise InvalidParameter(
                f"Parameter '{self.name}' must be of type {self.type}, got '{raw}'"
            ) from e
        # Patterns stay as text in the shape; the commits edge compiles them again
        return raw if self.type == "regex" else value


@dataclass(frozen=True)
class Preset:
    """A named query shape. ``"$name"`` values in edge parameters are bound
    from the preset's parameters when it is run."""

    name: str
    description: str
    shape: Dict[str, Any]
    params: Tuple[PresetParam, ...] = field(default_factory=tuple)

    def contract(self) -> Dict[str, Dict[str, Any]]:
        return {p.name: p.contract() for p in self.params}


PRESETS: Tuple[Preset, ...] = (
    Preset(
        name="recent-commits",
        description="Show recent commits",
        shape={
            "edge": "repository",
            "children": [{
                "edge": "commits",
                "parameters": {"limit": "$limit"},
                "outputs": ["hash", "message", "author", "date"],
            }],
        },
        params=(
            PresetParam("limit", "Maximum number of commits to show", type="int", default="10"),
        ),
    ),
    Preset(
        name="branches",
        description="List all branches with their latest commit",
        shape={
            "edge": "repository",
            "children": [{
                "edge": "branches",
                "outputs": ["name"],
                "children": [{"edge": "commit", "outputs": ["hash", "message"]}],
            }],
        },
    ),
    Preset(
        name="tags",
        description="List all tags with their commit",
        shape={
            "edge": "repository",
            "children": [{
                "edge": "tags",
                "outputs": ["name", "message"],
                "children": [{"edge": "commit", "outputs": ["hash"]}],
            }],
        },
    ),
    Preset(
        name="commits-by-author",
        description="Show commits by a specific author",
        shape={
            "edge": "repository",
            "children": [{
                "edge": "commits",
                "parameters": {"author": "$author"},
                "outputs": ["author", "hash", "message", "date"],
            }],
        },
        params=(
            PresetParam("author", "Author name to filter by", required=True),
        ),
    ),
    Preset(
        name="search-commits",
        description="Search commit messages by regex pattern",
        shape={
            "edge": "repository",
            "children": [{
                "edge": "commits",
                "parameters": {"pattern": "$pattern"},
                "outputs": ["message", "hash", "author", "date"],
            }],
        },
        params=(
            PresetParam("pattern", "Regex pattern to search for in commit messages", type="regex", required=True),
        ),
    ),
)


def all_presets() -> Tuple[Preset, ...]:
    return PRESETS


def find_preset(name: str) -> Preset:
    for preset in PRESETS:
        if preset.name == name:
            return preset
    raise UnknownPreset(f"Unknown preset: '{name}'. Run 'git-seek preset list' to see available presets.")


def parse_param_args(args: List[str]) -> Dict[str, str]:
    """Splits ``name=value`` strings as given on the command line."""
    params = {}
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep or not name:
            raise InvalidParameter(f"Invalid parameter format '{arg}'. Expected '--param name=value'.")
        params[name] = value
    return params


def bind_parameters(preset: Preset, raw_params: Mapping[str, str]) -> Dict[str, Any]:
    known = {p.name for p in preset.params}
    unknown = sorted(set(raw_params) - known)
    if unknown:
        raise InvalidParameter(f"Unknown parameter(s) for preset '{preset.name}': {', '.join(unknown)}")

    bound = {}
    for param in preset.params:
        if param.name in raw_params:
            raw = raw_params[param.name]
        elif param.default is not None:
            raw = param.default
        elif param.required:
            raise InvalidParameter(
                f"Missing required parameter '--param {param.name}=<value>' for preset '{preset.name}'"
            )
        else:
            continue
        bound[param.name] = param.parse(raw)
    return bound


def _substitute(node: Dict[str, Any], bound: Mapping[str, Any]) -> Dict[str, Any]:
    parameters = {}
    for key, value in node.get("parameters", {}).items():
        if isinstance(value, str) and value.startswith("$"):
            if value[1:] not in bound:
                # Optional parameter left unset
                continue
            value = bound[value[1:]]
        parameters[key] = value

    return {
        **node,
        "parameters": parameters,
        "children": [_substitute(child, bound) for child in node.get("children", [])],
    }


def run(preset_name: str, raw_params: Mapping[str, str]) -> QueryShape:
    """Binds parameters and returns the query shape to execute.

    All validation happens here, before the repository is opened.
    """
    preset = find_preset(preset_name)
    bound = bind_parameters(preset, raw_params)
    shape = QueryShape(root=_substitute(preset.shape, bound))
    check_shape(shape)
    logger.info("Running preset %s with %s", preset.name, bound)
    return shape
