"""
Conflict Rules - Heuristic checks run against a block before it is applied

A rule receives the block and a ConflictContext and returns an EditConflict,
or None when it has nothing to report. Rules are pattern matching only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from models.edit import ConflictType, EditBlock, EditConflict


@dataclass(frozen=True)
class ConflictContext:
    """What a rule may look at besides the block itself"""

    block_index: int
    content: str  # working buffer before this block is applied
    match_index: int  # offset of the first occurrence of the search text


ConflictRule = Callable[[EditBlock, ConflictContext], Optional[EditConflict]]


def import_collision_rule(block: EditBlock, context: ConflictContext) -> EditConflict | None:
    """Flag replace text that brings in an import the search text did not have"""
    if "import" in block.replace and "import" not in block.search:
        return EditConflict(
            block_index=context.block_index,
            type=ConflictType.DEPENDENCY,
            description="New import statement may conflict with existing imports",
            resolution="Review import statements for conflicts",
        )
    return None


DEFAULT_CONFLICT_RULES: tuple[ConflictRule, ...] = (import_collision_rule,)


def detect_conflict(
    block: EditBlock,
    context: ConflictContext,
    rules: tuple[ConflictRule, ...] | list[ConflictRule] = DEFAULT_CONFLICT_RULES,
) -> EditConflict | None:
    """Run rules in order and return the first conflict raised"""
    for rule in rules:
        conflict = rule(block, context)
        if conflict is not None:
            return conflict
    return None
