from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class PresetParamResponse(BaseModel):
    name: str
    description: str
    type: str
    required: bool
    default: Optional[str] = None


class PresetResponse(BaseModel):
    name: str
    description: str
    params: List[PresetParamResponse]


class RunPresetRequest(BaseModel):
    # Raw string values, exactly as the CLI receives them
    params: Dict[str, str] = Field(default_factory=dict)


class QueryResultResponse(BaseModel):
    columns: List[str]
    rows: List[Dict[str, Any]]


class CommitResponse(BaseModel):
    hash: str
    message: Optional[str] = None
    author: str
    author_email: str
    committer: str
    committer_email: str
    date: str


class BranchResponse(BaseModel):
    name: str
    hash: str


class TagResponse(BaseModel):
    name: str
    message: Optional[str] = None
    tagger_name: Optional[str] = None
    tagger_email: Optional[str] = None
    hash: str
