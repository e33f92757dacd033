"""
Edit Validator - Pre-flight checks on SEARCH/REPLACE blocks
"""

from __future__ import annotations

from models.edit import EditBlock, ValidationResult

DEFAULT_MIN_SEARCH_LENGTH = 10


def validate_edit_blocks(
    blocks: list[EditBlock],
    min_search_length: int = DEFAULT_MIN_SEARCH_LENGTH,
) -> ValidationResult:
    """Return errors that make a block unusable and warnings worth a second look"""
    if blocks is None:
        raise TypeError("blocks must be a list of EditBlock")

    errors: list[str] = []
    warnings: list[str] = []

    for number, block in enumerate(blocks, start=1):
        search = block.search.strip()

        if not search:
            errors.append(f"Block {number}: Search text cannot be empty")
        elif len(search) < min_search_length:
            warnings.append(f"Block {number}: Search text is very short, may match multiple locations")

        if "{" in block.search and "{" not in block.replace:
            warnings.append(f"Block {number}: Search contains braces but replace doesn't - check for syntax issues")

        if "import" in block.replace:
            if "import" in block.search:
                warnings.append(f"Block {number}: Modifying imports - ensure all references are updated")
            else:
                warnings.append(
                    f"Block {number}: Replace adds an import statement that may conflict with existing imports"
                )

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
