"""
Block Parser - Extract SEARCH/REPLACE blocks from a model response
"""

from __future__ import annotations

import logging

from models.edit import EditBlock, ParseResult

logger = logging.getLogger(__name__)

SEARCH_START = "<<<<<<< SEARCH"
DIVIDER = "======="
REPLACE_END = ">>>>>>> REPLACE"


class _OpenBlock:
    """Lines collected for a block that has not been closed yet"""

    def __init__(self, start_line: int):
        self.start_line = start_line
        self.search_lines: list[str] = []
        self.replace_lines: list[str] = []
        self.divider_line: int | None = None


class BlockParser:
    """Line-oriented two-mode scanner for sentinel-delimited edit blocks"""

    def parse(self, response_text: str) -> list[EditBlock]:
        """Parse blocks, silently dropping malformed or unterminated ones"""
        return self._scan(response_text).blocks

    def parse_strict(self, response_text: str) -> ParseResult:
        """Parse blocks and report every malformed fragment that was dropped"""
        return self._scan(response_text)

    def _scan(self, response_text: str) -> ParseResult:
        if response_text is None:
            raise TypeError("response_text must be a string")

        blocks: list[EditBlock] = []
        errors: list[str] = []
        current: _OpenBlock | None = None

        for line_number, line in enumerate(response_text.split("\n"), start=1):
            marker = line.strip()

            if marker == SEARCH_START:
                if current is not None:
                    errors.append(
                        f"Line {current.start_line}: Block restarted at line {line_number} before it was terminated"
                    )
                current = _OpenBlock(line_number)
            elif current is None:
                if marker in (DIVIDER, REPLACE_END):
                    errors.append(f"Line {line_number}: '{marker}' found outside of a block")
            elif marker == DIVIDER:
                if current.divider_line is not None:
                    errors.append(f"Line {line_number}: Repeated divider inside block started at line {current.start_line}")
                else:
                    current.divider_line = line_number
            elif marker == REPLACE_END:
                block = self._close(current, len(blocks) + 1, errors)
                if block is not None:
                    blocks.append(block)
                current = None
            elif current.divider_line is None:
                current.search_lines.append(line)
            else:
                current.replace_lines.append(line)

        if current is not None:
            errors.append(f"Line {current.start_line}: Block is missing the closing '{REPLACE_END}' marker")

        logger.debug("Parsed %d edit block(s), %d malformed fragment(s)", len(blocks), len(errors))
        return ParseResult(blocks=blocks, errors=errors)

    def _close(self, current: _OpenBlock, position: int, errors: list[str]) -> EditBlock | None:
        if current.divider_line is None:
            errors.append(f"Line {current.start_line}: Block is missing the '{DIVIDER}' divider")
            return None

        search = "\n".join(current.search_lines).rstrip()
        replace = "\n".join(current.replace_lines).rstrip()
        if not search:
            errors.append(f"Line {current.start_line}: Block has empty search text")
            return None
        if not replace:
            errors.append(f"Line {current.start_line}: Block has empty replace text")
            return None

        return EditBlock(search=search, replace=replace, description=f"Edit block {position}")
