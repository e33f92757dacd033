"""Models module - Pydantic data models"""

from .diff import DiffHunk, DiffLine, DiffLineType, DiffResult, DiffView, DiffViewSummary
from .edit import (
    AppliedEdit,
    ApplyRequest,
    ApplyResponse,
    ApplyResult,
    ConflictType,
    DiffViewRequest,
    EditBlock,
    EditConflict,
    EditStreamEvent,
    EditSummary,
    FailedEdit,
    GenerateEditRequest,
    GenerateEditResponse,
    ParseRequest,
    ParseResult,
    ValidateRequest,
    ValidationResult,
)
from .files import (
    FileOperationOutput,
    FileOperationRequest,
    FileOperationResult,
    FileOperationType,
    ProjectFile,
)

__all__ = [
    # Edit models
    "EditBlock",
    "AppliedEdit",
    "FailedEdit",
    "ConflictType",
    "EditConflict",
    "EditSummary",
    "ApplyResult",
    "ValidationResult",
    "ParseResult",
    "ParseRequest",
    "ValidateRequest",
    "ApplyRequest",
    "ApplyResponse",
    "DiffViewRequest",
    "GenerateEditRequest",
    "GenerateEditResponse",
    "EditStreamEvent",
    # Diff models
    "DiffLineType",
    "DiffLine",
    "DiffViewSummary",
    "DiffView",
    "DiffHunk",
    "DiffResult",
    # File models
    "FileOperationType",
    "FileOperationRequest",
    "FileOperationOutput",
    "FileOperationResult",
    "ProjectFile",
]
