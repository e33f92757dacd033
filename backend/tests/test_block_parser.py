from __future__ import annotations

from services.block_parser import BlockParser


def block(search: str, replace: str) -> str:
    return f"<<<<<<< SEARCH\n{search}\n=======\n{replace}\n>>>>>>> REPLACE"


def test_parse_single_block():
    blocks = BlockParser().parse("<<<<<<< SEARCH\nfoo\n=======\nbar\n>>>>>>> REPLACE")

    assert len(blocks) == 1
    assert blocks[0].search == "foo"
    assert blocks[0].replace == "bar"
    assert blocks[0].description == "Edit block 1"


def test_parse_returns_blocks_in_source_order():
    response = "\n".join(
        [
            "Here are the changes:",
            block("one", "1"),
            "and then",
            block("two", "2"),
            block("three", "3"),
        ]
    )

    blocks = BlockParser().parse(response)

    assert [b.search for b in blocks] == ["one", "two", "three"]
    assert [b.description for b in blocks] == ["Edit block 1", "Edit block 2", "Edit block 3"]


def test_parse_keeps_multiline_text_and_trims_trailing_whitespace():
    response = "<<<<<<< SEARCH\ndef f():\n    return 1\n\n\n=======\ndef f():\n    return 2   \n>>>>>>> REPLACE"

    blocks = BlockParser().parse(response)

    assert blocks[0].search == "def f():\n    return 1"
    assert blocks[0].replace == "def f():\n    return 2"


def test_parse_matches_markers_after_trimming():
    response = "   <<<<<<< SEARCH  \nfoo\n  =======\nbar\n\t>>>>>>> REPLACE\r"

    assert len(BlockParser().parse(response)) == 1


def test_parse_drops_unterminated_trailing_block():
    response = block("foo", "bar") + "\n<<<<<<< SEARCH\nbaz\n=======\nqux\n"

    blocks = BlockParser().parse(response)

    assert [b.search for b in blocks] == ["foo"]


def test_parse_drops_blocks_with_empty_sides():
    response = "\n".join([block("", "bar"), block("foo", ""), "<<<<<<< SEARCH\nno divider\n>>>>>>> REPLACE"])

    assert BlockParser().parse(response) == []


def test_parse_restart_discards_open_block():
    response = "<<<<<<< SEARCH\nlost\n" + block("kept", "new")

    blocks = BlockParser().parse(response)

    assert len(blocks) == 1
    assert blocks[0].search == "kept"


def test_parse_text_without_blocks():
    assert BlockParser().parse("Nothing to change here.") == []
    assert BlockParser().parse("") == []


def test_parse_strict_reports_dropped_fragments():
    response = "\n".join(
        [
            "=======",
            block("foo", "bar"),
            block("", "x"),
            "<<<<<<< SEARCH",
            "never closed",
        ]
    )

    result = BlockParser().parse_strict(response)

    assert [b.search for b in result.blocks] == ["foo"]
    assert len(result.errors) == 3
    assert result.errors[0].startswith("Line 1:")
    assert any("empty search text" in error for error in result.errors)
    assert any("missing the closing" in error for error in result.errors)


def test_parse_strict_is_clean_for_well_formed_input():
    result = BlockParser().parse_strict(block("foo", "bar"))

    assert len(result.blocks) == 1
    assert result.errors == []
