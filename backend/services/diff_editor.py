"""
Diff Editor - Parse, validate, apply and review SEARCH/REPLACE edits

Everything here works on in-memory strings and returns new objects, so a
single instance can be shared between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from models.diff import DiffResult, DiffView
from models.edit import ApplyResult, EditBlock, ParseResult, ValidationResult

from .block_parser import BlockParser
from .conflict_rules import ConflictRule
from .diff_generator import DiffGenerator
from .edit_validator import DEFAULT_MIN_SEARCH_LENGTH, validate_edit_blocks
from .patch_applier import PatchApplier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditOutcome:
    """Everything produced by DiffEditor.edit for one model response"""

    blocks: list[EditBlock]
    validation: ValidationResult
    result: ApplyResult
    diff_view: DiffView


class DiffEditor:
    """Facade over the block parser, patch applier, validator and diff generator"""

    def __init__(
        self,
        conflict_rules: list[ConflictRule] | None = None,
        min_search_length: int = DEFAULT_MIN_SEARCH_LENGTH,
    ):
        self.parser = BlockParser()
        self.applier = PatchApplier(conflict_rules)
        self.diff_generator = DiffGenerator()
        self.min_search_length = min_search_length

    def parse(self, response_text: str) -> list[EditBlock]:
        return self.parser.parse(response_text)

    def parse_strict(self, response_text: str) -> ParseResult:
        return self.parser.parse_strict(response_text)

    def validate(self, blocks: list[EditBlock]) -> ValidationResult:
        return validate_edit_blocks(blocks, self.min_search_length)

    def apply(self, original_content: str, blocks: list[EditBlock]) -> ApplyResult:
        return self.applier.apply(original_content, blocks)

    def build_diff_view(self, original_content: str, modified_content: str, blocks: list[EditBlock]) -> DiffView:
        return self.diff_generator.build_diff_view(original_content, modified_content, blocks)

    def generate_diff(self, original_content: str, modified_content: str, file_path: str) -> DiffResult:
        return self.diff_generator.generate_diff(original_content, modified_content, file_path)

    def edit(self, original_content: str, response_text: str) -> EditOutcome:
        """Run a model response through parse, validate, apply and diff view"""
        blocks = self.parse(response_text)
        validation = self.validate(blocks)
        if not validation.is_valid:
            logger.warning("Edit blocks failed validation: %s", "; ".join(validation.errors))

        result = self.apply(original_content, blocks)
        diff_view = self.build_diff_view(original_content, result.modified_content, blocks)
        return EditOutcome(blocks=blocks, validation=validation, result=result, diff_view=diff_view)


# ═══════════════════════════════════════════════════════════════════════════
# Module-level helper functions
# ═══════════════════════════════════════════════════════════════════════════

_default_editor = DiffEditor()


def parse_blocks(response_text: str) -> list[EditBlock]:
    """Parse SEARCH/REPLACE blocks with the default editor."""
    return _default_editor.parse(response_text)


def apply_edits(original_content: str, blocks: list[EditBlock]) -> ApplyResult:
    """Apply blocks with the default conflict rules."""
    return _default_editor.apply(original_content, blocks)


def validate_edits(blocks: list[EditBlock]) -> ValidationResult:
    return _default_editor.validate(blocks)


def build_diff_view(original_content: str, modified_content: str, blocks: list[EditBlock]) -> DiffView:
    return _default_editor.build_diff_view(original_content, modified_content, blocks)
