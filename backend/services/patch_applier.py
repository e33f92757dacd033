"""
Patch Applier - Apply SEARCH/REPLACE blocks to a text buffer
"""

from __future__ import annotations

import logging
from typing import Union

from models.edit import (
    AppliedEdit,
    ApplyResult,
    EditBlock,
    EditConflict,
    EditSummary,
    FailedEdit,
)

from .conflict_rules import DEFAULT_CONFLICT_RULES, ConflictContext, ConflictRule, detect_conflict

logger = logging.getLogger(__name__)

BlockOutcome = Union[AppliedEdit, FailedEdit, EditConflict]

NOT_FOUND_REASON = "Search text not found in content"
NOT_FOUND_SUGGESTION = "Check for whitespace differences or line ending variations"
EMPTY_SEARCH_REASON = "Search text is empty"
EMPTY_SEARCH_SUGGESTION = "Include the exact lines to replace in the SEARCH section"


class PatchApplier:
    """Apply blocks in order, each one against the buffer left by the previous one"""

    def __init__(self, conflict_rules: list[ConflictRule] | tuple[ConflictRule, ...] | None = None):
        self.conflict_rules = tuple(DEFAULT_CONFLICT_RULES if conflict_rules is None else conflict_rules)

    def apply(self, original_content: str, blocks: list[EditBlock]) -> ApplyResult:
        """Fold the blocks over the original content and collect per-block outcomes"""
        if original_content is None:
            raise TypeError("original_content must be a string")
        if blocks is None:
            raise TypeError("blocks must be a list of EditBlock")

        content = original_content
        applied: list[AppliedEdit] = []
        failed: list[FailedEdit] = []
        conflicts: list[EditConflict] = []

        for index, block in enumerate(blocks):
            content, outcome = self.apply_block(content, block, index)
            if isinstance(outcome, AppliedEdit):
                applied.append(outcome)
            elif isinstance(outcome, FailedEdit):
                failed.append(outcome)
            else:
                conflicts.append(outcome)

        summary = EditSummary(
            total_blocks=len(blocks),
            applied_count=len(applied),
            failed_count=len(failed),
            conflict_count=len(conflicts),
            modified_lines=count_modified_lines(original_content, content),
        )
        logger.info(
            "Applied %d/%d edit block(s) (%d failed, %d conflicts)",
            summary.applied_count,
            summary.total_blocks,
            summary.failed_count,
            summary.conflict_count,
        )

        return ApplyResult(
            success=not failed and not conflicts,
            modified_content=content,
            applied_edits=applied,
            failed_edits=failed,
            conflicts=conflicts,
            summary=summary,
        )

    def apply_block(self, content: str, block: EditBlock, index: int) -> tuple[str, BlockOutcome]:
        """Apply one block; returns the new buffer and the outcome record"""
        if not block.search:
            logger.debug("Block %d has empty search text", index + 1)
            return content, self._failed(block, index, EMPTY_SEARCH_REASON, EMPTY_SEARCH_SUGGESTION)

        match_index = content.find(block.search)
        if match_index == -1:
            logger.debug("Block %d search text not found", index + 1)
            return content, self._failed(block, index, NOT_FOUND_REASON, NOT_FOUND_SUGGESTION)

        context = ConflictContext(block_index=index, content=content, match_index=match_index)
        conflict = detect_conflict(block, context, self.conflict_rules)
        if conflict is not None:
            logger.debug("Block %d skipped: %s", index + 1, conflict.description)
            return content, conflict

        # First occurrence only
        new_content = content[:match_index] + block.replace + content[match_index + len(block.search):]
        start_line = content.count("\n", 0, match_index) + 1
        end_line = start_line + block.search.count("\n")

        return new_content, AppliedEdit(
            block_index=index,
            search=block.search,
            replace=block.replace,
            description=block.description,
            line_numbers=list(range(start_line, end_line + 1)),
        )

    def _failed(self, block: EditBlock, index: int, reason: str, suggestion: str) -> FailedEdit:
        return FailedEdit(
            block_index=index,
            search=block.search,
            replace=block.replace,
            description=block.description,
            reason=reason,
            suggestion=suggestion,
        )


def count_modified_lines(original: str, modified: str) -> int:
    """Count line positions that differ, including lines past the shorter side"""
    original_lines = original.split("\n")
    modified_lines = modified.split("\n")

    modified_count = abs(len(original_lines) - len(modified_lines))
    for before, after in zip(original_lines, modified_lines):
        if before != after:
            modified_count += 1
    return modified_count
