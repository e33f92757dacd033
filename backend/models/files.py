"""Project file operation models"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from .edit import EditBlock


class FileOperationType(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    RENAME = "rename"


class FileOperationRequest(BaseModel):
    """A single file operation against a project workspace"""

    type: FileOperationType
    project_id: str
    file_path: str
    content: str | None = None  # create
    edits: list[EditBlock] | None = None  # edit
    new_path: str | None = None  # rename


class FileOperationOutput(BaseModel):
    file_path: str
    content: str | None = None
    old_path: str | None = None
    new_path: str | None = None


class FileOperationResult(BaseModel):
    success: bool
    operation: FileOperationRequest
    result: FileOperationOutput
    errors: list[str] = []
    warnings: list[str] = []


class ProjectFile(BaseModel):
    """A file stored in a project workspace"""

    path: str  # relative to the project directory, "/" separated
    name: str
    content: str
    type: str
    size: int
    is_directory: bool = False
    updated_at: datetime
