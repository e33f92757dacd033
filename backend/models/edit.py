"""Search/replace edit data models"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .diff import DiffResult, DiffView


class EditBlock(BaseModel):
    """A single search/replace pair proposed by the model"""

    search: str
    replace: str
    description: str = ""


class AppliedEdit(BaseModel):
    """Outcome of a block that was applied"""

    block_index: int  # 0-indexed position in the input list
    search: str
    replace: str
    description: str = ""
    status: Literal["applied"] = "applied"
    line_numbers: list[int] = []  # 1-indexed lines spanned by the match


class FailedEdit(BaseModel):
    """Outcome of a block whose search text could not be used"""

    block_index: int
    search: str
    replace: str
    description: str = ""
    status: Literal["failed"] = "failed"
    reason: str
    suggestion: str | None = None


class ConflictType(str, Enum):
    """Conflict categories"""

    OVERLAP = "overlap"
    DEPENDENCY = "dependency"
    SYNTAX = "syntax"


class EditConflict(BaseModel):
    """Advisory conflict raised for a block before it is applied"""

    block_index: int
    type: ConflictType
    description: str
    resolution: str | None = None


class EditSummary(BaseModel):
    total_blocks: int
    applied_count: int
    failed_count: int
    conflict_count: int
    modified_lines: int


class ApplyResult(BaseModel):
    """Result of applying a list of blocks to one buffer"""

    model_config = ConfigDict(frozen=True)

    success: bool
    modified_content: str
    applied_edits: list[AppliedEdit] = []
    failed_edits: list[FailedEdit] = []
    conflicts: list[EditConflict] = []
    summary: EditSummary


class ValidationResult(BaseModel):
    """Pre-flight checks on a list of blocks"""

    is_valid: bool
    errors: list[str] = []
    warnings: list[str] = []


class ParseResult(BaseModel):
    """Blocks plus the problems found while scanning (strict mode)"""

    blocks: list[EditBlock] = []
    errors: list[str] = []


# ========== API request/response models ==========


class ParseRequest(BaseModel):
    response_text: str
    strict: bool | None = None  # falls back to editor.strictParse


class ValidateRequest(BaseModel):
    blocks: list[EditBlock]


class ApplyRequest(BaseModel):
    original_content: str
    blocks: list[EditBlock]
    file_path: str = "file"


class ApplyResponse(BaseModel):
    result: ApplyResult
    diff: DiffResult


class DiffViewRequest(BaseModel):
    original_content: str
    modified_content: str
    blocks: list[EditBlock]


class GenerateEditRequest(BaseModel):
    """Ask the model for search/replace blocks against one file"""

    instruction: str
    file_path: str
    content: str
    context: str | None = None  # Optional extra context (related files, errors)


class GenerateEditResponse(BaseModel):
    raw_response: str
    blocks: list[EditBlock]
    validation: ValidationResult
    result: ApplyResult
    diff_view: DiffView


class EditStreamEvent(BaseModel):
    """SSE stream event for /generate/stream"""

    type: str  # "content", "blocks", "result", "done", "error"
    chunk: str | None = None
    blocks: list[EditBlock] | None = None
    validation: ValidationResult | None = None
    result: ApplyResult | None = None
    done: bool = False
    error: str | None = None
