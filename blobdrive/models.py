from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    ok: bool


class ReadyResponse(BaseModel):
    ready: bool
    reason: str | None = None


class ContainerListResponse(BaseModel):
    count: int
    containers: list[str] = Field(default_factory=list)


class ObjectInfo(BaseModel):
    container: str
    key: str
    size: int | None = None
    etag: str | None = None
    content_type: str | None = None
    last_modified: datetime | None = None


class TreeNode(BaseModel):
    name: str
    path: str = Field(..., description="Full key path from the container root")
    is_directory: bool
    is_object: bool
    object: ObjectInfo | None = None
    children: list[TreeNode] = Field(default_factory=list)


class TreeStats(BaseModel):
    object_count: int
    directory_count: int
    root_counts: dict[str, int] = Field(default_factory=dict)


class TreeResponse(BaseModel):
    container: str
    roots: list[TreeNode] = Field(default_factory=list)
    stats: TreeStats


class ChildrenResponse(BaseModel):
    container: str
    path: str
    children: list[TreeNode] = Field(default_factory=list)


class UploadResult(BaseModel):
    ok: bool
    directory: str
    object: ObjectInfo


class DeleteResult(BaseModel):
    ok: bool
    container: str
    key: str


TreeNode.model_rebuild()
