"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class DiffLineType(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class DiffLine(BaseModel):
    """A single classified line of a diff view"""

    type: DiffLineType
    original_line: str
    modified_line: str
    line_number: int  # 1-indexed, original side for removed/unchanged, modified side for added


class DiffViewSummary(BaseModel):
    total_lines: int
    unchanged_lines: int
    removed_lines: int
    added_lines: int
    matches_modified: bool  # False when the reconstruction misses part of the change


class DiffView(BaseModel):
    """Line-level reconstruction of a search/replace edit for review"""

    lines: list[DiffLine]
    summary: DiffViewSummary


class DiffHunk(BaseModel):
    """A single change hunk in a diff"""

    start_line: int  # 1-indexed
    end_line: int
    original_content: str
    new_content: str
    change_type: str  # "add", "modify", "delete"


class DiffResult(BaseModel):
    """Unified diff of an edited file"""

    file_path: str
    hunks: list[DiffHunk]
    unified_diff: str
    preview_content: str  # Full file with changes applied
