from __future__ import annotations

from models.edit import EditBlock
from services.edit_validator import validate_edit_blocks


def test_empty_search_is_an_error():
    result = validate_edit_blocks([EditBlock(search="", replace="x", description="d")])

    assert not result.is_valid
    assert result.errors == ["Block 1: Search text cannot be empty"]


def test_whitespace_only_search_is_an_error():
    result = validate_edit_blocks([EditBlock(search="  \n ", replace="x")])

    assert not result.is_valid


def test_short_search_is_a_warning():
    result = validate_edit_blocks([EditBlock(search="x = 1", replace="x = 2")])

    assert result.is_valid
    assert result.warnings == ["Block 1: Search text is very short, may match multiple locations"]


def test_min_search_length_is_configurable():
    block = EditBlock(search="x = 1", replace="x = 2")

    assert validate_edit_blocks([block], min_search_length=3).warnings == []


def test_new_import_in_replace_warns_without_rejecting():
    block = EditBlock(
        search="const value = compute()",
        replace="import { compute } from './compute'\nconst value = compute()",
    )

    result = validate_edit_blocks([block])

    assert result.is_valid
    assert len(result.warnings) == 1
    assert "import" in result.warnings[0]


def test_modifying_imports_warns():
    block = EditBlock(search="import a from 'a'", replace="import b from 'b'")

    result = validate_edit_blocks([block])

    assert result.is_valid
    assert "Modifying imports" in result.warnings[0]


def test_unbalanced_braces_warn():
    block = EditBlock(search="function go() {\n  run()", replace="const go = run")

    result = validate_edit_blocks([block])

    assert any("braces" in warning for warning in result.warnings)


def test_block_numbers_are_one_based():
    blocks = [
        EditBlock(search="a long enough search", replace="x"),
        EditBlock(search="", replace="y"),
    ]

    result = validate_edit_blocks(blocks)

    assert result.errors == ["Block 2: Search text cannot be empty"]


def test_no_blocks_is_valid():
    result = validate_edit_blocks([])

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []
