from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List, Optional

from src.api.service import QueryService
from src.api.schemas import (
    BranchResponse,
    CommitResponse,
    PresetResponse,
    QueryResultResponse,
    RunPresetRequest,
    TagResponse,
)
from src.config import Settings, configure_logging
from src.errors import (
    GitSeekError,
    InvalidParameter,
    RepositoryUnavailable,
    UnknownField,
    UnknownPreset,
    UnknownType,
)

import logging

settings = Settings.from_env()

# Configure Logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="git-seek API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Service
# By default look in CWD. Can be overridden by env var GIT_DIR.
service = QueryService(settings.git_dir)


def _status_for(exc: GitSeekError) -> int:
    if isinstance(exc, (InvalidParameter, UnknownField, UnknownType)):
        return 422
    if isinstance(exc, UnknownPreset):
        return 404
    if isinstance(exc, RepositoryUnavailable):
        return 503
    return 500


@app.exception_handler(GitSeekError)
async def git_seek_error_handler(request: Request, exc: GitSeekError):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("%s failed: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.get("/api/presets", response_model=List[PresetResponse])
def list_presets():
    """List the available presets and their parameters."""
    return service.list_presets()


@app.post("/api/presets/{name}/run", response_model=QueryResultResponse)
def run_preset(name: str, req: RunPresetRequest):
    """Run a preset with raw string parameters."""
    return service.run_preset(name, req.params)


@app.get("/api/commits", response_model=List[CommitResponse])
def get_commits(limit: Optional[int] = None, author: Optional[str] = None, pattern: Optional[str] = None):
    """Commits reachable from HEAD, newest first."""
    return service.get_commits(limit=limit, author=author, pattern=pattern)


@app.get("/api/branches", response_model=List[BranchResponse])
def get_branches():
    return service.get_branches()


@app.get("/api/tags", response_model=List[TagResponse])
def get_tags():
    return service.get_tags()


@app.get("/health")
def health_check():
    return {"status": "ok", "repo": str(service.git_dir)}
