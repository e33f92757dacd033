"""
Diff Generator Service - Review diffs for search/replace edits
"""

from __future__ import annotations

from difflib import SequenceMatcher, unified_diff

from models.diff import DiffHunk, DiffLine, DiffLineType, DiffResult, DiffView, DiffViewSummary
from models.edit import EditBlock


class DiffGenerator:
    """Build line-classified diff views and unified diffs"""

    def build_diff_view(
        self,
        original_content: str,
        modified_content: str,
        blocks: list[EditBlock],
    ) -> DiffView:
        """Rebuild removed/added/unchanged lines from the blocks, single pass.

        Each block is located at its first contiguous match at or after the
        current cursor in the original lines. Blocks that cannot be located are
        left out of the view, so the view can under-represent the real change;
        summary.matches_modified reports when that happened.
        """
        original_lines = original_content.split("\n")
        lines: list[DiffLine] = []
        original_index = 0
        modified_index = 0

        for block in blocks:
            if not block.search:
                continue
            search_lines = block.search.split("\n")
            replace_lines = block.replace.split("\n")

            block_start = self._find_block(original_lines, search_lines, original_index)
            if block_start == -1:
                continue

            while original_index < block_start:
                lines.append(self._unchanged(original_lines[original_index], original_index))
                original_index += 1
                modified_index += 1

            for search_line in search_lines:
                lines.append(
                    DiffLine(
                        type=DiffLineType.REMOVED,
                        original_line=search_line,
                        modified_line="",
                        line_number=original_index + 1,
                    )
                )
                original_index += 1

            for replace_line in replace_lines:
                lines.append(
                    DiffLine(
                        type=DiffLineType.ADDED,
                        original_line="",
                        modified_line=replace_line,
                        line_number=modified_index + 1,
                    )
                )
                modified_index += 1

        while original_index < len(original_lines):
            lines.append(self._unchanged(original_lines[original_index], original_index))
            original_index += 1

        rebuilt = [line.modified_line for line in lines if line.type != DiffLineType.REMOVED]

        return DiffView(
            lines=lines,
            summary=DiffViewSummary(
                total_lines=len(lines),
                unchanged_lines=sum(1 for line in lines if line.type == DiffLineType.UNCHANGED),
                removed_lines=sum(1 for line in lines if line.type == DiffLineType.REMOVED),
                added_lines=sum(1 for line in lines if line.type == DiffLineType.ADDED),
                matches_modified=rebuilt == modified_content.split("\n"),
            ),
        )

    def _unchanged(self, text: str, index: int) -> DiffLine:
        return DiffLine(
            type=DiffLineType.UNCHANGED,
            original_line=text,
            modified_line=text,
            line_number=index + 1,
        )

    def _find_block(self, content_lines: list[str], search_lines: list[str], start_index: int) -> int:
        """Index of the first contiguous match at or after start_index, or -1"""
        width = len(search_lines)
        for i in range(start_index, len(content_lines) - width + 1):
            if content_lines[i : i + width] == search_lines:
                return i
        return -1

    def generate_diff(
        self,
        original_content: str,
        new_content: str,
        file_path: str,
    ) -> DiffResult:
        """Generate a unified diff and change hunks from original and new content"""
        original_lines = original_content.splitlines(keepends=True)
        new_lines = new_content.splitlines(keepends=True)

        # Last lines need newlines for a well-formed unified diff
        if original_lines and not original_lines[-1].endswith("\n"):
            original_lines[-1] += "\n"
        if new_lines and not new_lines[-1].endswith("\n"):
            new_lines[-1] += "\n"

        unified = unified_diff(
            original_lines,
            new_lines,
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        )

        return DiffResult(
            file_path=file_path,
            hunks=self._extract_hunks(original_lines, new_lines),
            unified_diff="".join(unified),
            preview_content=new_content,
        )

    def _extract_hunks(self, original: list[str], modified: list[str]) -> list[DiffHunk]:
        matcher = SequenceMatcher(None, original, modified)
        hunks = []

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue
            change_type = {"insert": "add", "delete": "delete"}.get(tag, "modify")
            hunks.append(
                DiffHunk(
                    start_line=i1 + 1,
                    end_line=i2,
                    original_content="".join(original[i1:i2]),
                    new_content="".join(modified[j1:j2]),
                    change_type=change_type,
                )
            )

        return hunks
