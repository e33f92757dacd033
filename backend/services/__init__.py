"""Services module - Business logic layer"""

from .block_parser import BlockParser
from .config_manager import ConfigManager
from .conflict_rules import DEFAULT_CONFLICT_RULES, ConflictContext, import_collision_rule
from .diff_editor import DiffEditor, apply_edits, build_diff_view, parse_blocks, validate_edits
from .diff_generator import DiffGenerator
from .edit_validator import validate_edit_blocks
from .file_operations import ProjectFileStore
from .llm_service import LLMService, call_llm
from .patch_applier import PatchApplier

__all__ = [
    "BlockParser",
    "PatchApplier",
    "ConflictContext",
    "DEFAULT_CONFLICT_RULES",
    "import_collision_rule",
    "validate_edit_blocks",
    "DiffGenerator",
    "DiffEditor",
    "parse_blocks",
    "apply_edits",
    "validate_edits",
    "build_diff_view",
    "ProjectFileStore",
    "ConfigManager",
    "LLMService",
    "call_llm",
]
