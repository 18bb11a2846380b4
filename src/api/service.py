import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from src.adapter.adapter import GitAdapter
from src.api.schemas import (
    BranchResponse,
    CommitResponse,
    PresetParamResponse,
    PresetResponse,
    QueryResultResponse,
    TagResponse,
)
from src.git_objects.repository import open_repository
from src.presets import presets
from src.query.executor import ShapeExecutor, check_shape
from src.query.shape import QueryShape

logger = logging.getLogger(__name__)

COMMIT_FIELDS = ["hash", "message", "author", "author_email", "committer", "committer_email", "date"]


class QueryService:
    """Runs query shapes against the repository at ``git_dir``.

    The repository is opened afresh for every query so each one sees a
    consistent snapshot and its own object cache.
    """

    def __init__(self, git_dir: Path = Path(".")):
        self.git_dir = git_dir

    def execute(self, shape: QueryShape) -> List[Dict[str, Any]]:
        repo = open_repository(self.git_dir)
        executor = ShapeExecutor(GitAdapter(repo))
        return list(executor.execute(shape))

    def list_presets(self) -> List[PresetResponse]:
        return [
            PresetResponse(
                name=preset.name,
                description=preset.description,
                params=[
                    PresetParamResponse(
                        name=p.name,
                        description=p.description,
                        type=p.type,
                        required=p.required,
                        default=p.default,
                    )
                    for p in preset.params
                ],
            )
            for preset in presets.all_presets()
        ]

    def run_preset(self, name: str, params: Mapping[str, str]) -> QueryResultResponse:
        shape = presets.run(name, params)
        rows = self.execute(shape)
        logger.info("Preset %s returned %d rows", name, len(rows))
        return QueryResultResponse(columns=shape.columns(), rows=rows)

    def get_commits(
        self,
        limit: Optional[int] = None,
        author: Optional[str] = None,
        pattern: Optional[str] = None,
    ) -> List[CommitResponse]:
        parameters = {"limit": limit, "author": author, "pattern": pattern}
        shape = QueryShape(root={
            "edge": "repository",
            "children": [{
                "edge": "commits",
                "parameters": {k: v for k, v in parameters.items() if v is not None},
                "outputs": COMMIT_FIELDS,
            }],
        })
        # Reject bad parameters before touching the repository
        check_shape(shape)
        return [CommitResponse(**row) for row in self.execute(shape)]

    def get_branches(self) -> List[BranchResponse]:
        shape = QueryShape(root={
            "edge": "repository",
            "children": [{
                "edge": "branches",
                "outputs": ["name"],
                "children": [{"edge": "commit", "outputs": ["hash"]}],
            }],
        })
        return [BranchResponse(**row) for row in self.execute(shape)]

    def get_tags(self) -> List[TagResponse]:
        shape = QueryShape(root={
            "edge": "repository",
            "children": [{
                "edge": "tags",
                "outputs": ["name", "message", "tagger_name", "tagger_email"],
                "children": [{"edge": "commit", "outputs": ["hash"]}],
            }],
        })
        return [TagResponse(**row) for row in self.execute(shape)]
