"""
File Operations - Create, edit, delete and rename files in a project workspace

Each project lives in its own directory under the workspace root. Edits go
through the diff editor and are only written when every block applies cleanly.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from models.files import (
    FileOperationOutput,
    FileOperationRequest,
    FileOperationResult,
    FileOperationType,
    ProjectFile,
)

from .diff_editor import DiffEditor

logger = logging.getLogger(__name__)

FILE_TYPES = {
    "tsx": "typescript",
    "ts": "typescript",
    "jsx": "javascript",
    "js": "javascript",
    "py": "python",
    "css": "css",
    "scss": "scss",
    "sass": "scss",
    "json": "json",
    "md": "markdown",
    "html": "html",
    "svg": "svg",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "gif": "image",
}


def get_file_type(file_path: str) -> str:
    """Map a file extension to the file type reported to clients"""
    suffix = PurePosixPath(file_path).suffix.lower().lstrip(".")
    return FILE_TYPES.get(suffix, "text")


class PathOutsideProjectError(ValueError):
    """Raised when a requested path resolves outside its project directory"""


class UnreadableFileError(ValueError):
    """Raised when a file cannot be decoded as UTF-8 text"""


class ProjectFileStore:
    """Disk-backed project files with search/replace editing"""

    def __init__(self, root: str | Path, editor: DiffEditor | None = None):
        self.root = Path(root).expanduser().resolve()
        self.editor = editor or DiffEditor()

    # ========== Path Helpers ==========

    def _project_dir(self, project_id: str) -> Path:
        project_dir = (self.root / project_id).resolve()
        if project_dir.parent != self.root:
            raise PathOutsideProjectError(f"Invalid project id: {project_id}")
        return project_dir

    def _resolve(self, project_id: str, file_path: str) -> Path:
        project_dir = self._project_dir(project_id)
        relative = file_path.lstrip("/")
        if not relative:
            raise PathOutsideProjectError("File path is empty")
        target = (project_dir / relative).resolve()
        try:
            target.relative_to(project_dir)
        except ValueError:
            raise PathOutsideProjectError(f"Path resolves outside the project: {file_path}")
        return target

    def _atomic_write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.tmp_{os.getpid()}_{int(time.time() * 1000)}")
        try:
            with open(tmp, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp, path)
        except (OSError, UnicodeError):
            tmp.unlink(missing_ok=True)
            raise

    def _failure(
        self,
        request: FileOperationRequest,
        *errors: str,
        warnings: list[str] | None = None,
    ) -> FileOperationResult:
        return FileOperationResult(
            success=False,
            operation=request,
            result=FileOperationOutput(file_path=request.file_path),
            errors=list(errors),
            warnings=warnings or [],
        )

    # ========== Operations ==========

    def create_file(self, request: FileOperationRequest) -> FileOperationResult:
        """Create a new file; refuses to overwrite"""
        if not request.content:
            return self._failure(request, "File content is required for creation")

        target = self._resolve(request.project_id, request.file_path)
        if target.exists():
            return self._failure(request, f"File already exists at path: {request.file_path}")

        self._atomic_write(target, request.content)
        logger.info("Created %s in project %s", request.file_path, request.project_id)
        return FileOperationResult(
            success=True,
            operation=request,
            result=FileOperationOutput(file_path=request.file_path, content=request.content),
        )

    def edit_file(self, request: FileOperationRequest) -> FileOperationResult:
        """Apply search/replace edits; nothing is written unless all blocks apply"""
        if not request.edits:
            return self._failure(request, "Diff edits are required for file editing")

        target = self._resolve(request.project_id, request.file_path)
        if not target.is_file():
            return self._failure(request, f"File not found at path: {request.file_path}")

        current = target.read_text(encoding="utf-8")
        result = self.editor.apply(current, request.edits)

        if not result.success:
            logger.warning(
                "Edit of %s rejected (%d failed, %d conflicts)",
                request.file_path,
                result.summary.failed_count,
                result.summary.conflict_count,
            )
            return self._failure(
                request,
                f"Failed to apply {len(result.failed_edits)} edits",
                *(f"Block {edit.block_index + 1}: {edit.reason}" for edit in result.failed_edits),
                warnings=[f"Conflict: {conflict.description}" for conflict in result.conflicts],
            )

        self._atomic_write(target, result.modified_content)
        logger.info(
            "Edited %s in project %s (%d block(s))",
            request.file_path,
            request.project_id,
            result.summary.applied_count,
        )
        return FileOperationResult(
            success=True,
            operation=request,
            result=FileOperationOutput(file_path=request.file_path, content=result.modified_content),
        )

    def delete_file(self, request: FileOperationRequest) -> FileOperationResult:
        target = self._resolve(request.project_id, request.file_path)
        if not target.is_file():
            return self._failure(request, f"File not found at path: {request.file_path}")

        target.unlink()
        logger.info("Deleted %s from project %s", request.file_path, request.project_id)
        return FileOperationResult(
            success=True,
            operation=request,
            result=FileOperationOutput(file_path=request.file_path, old_path=request.file_path),
        )

    def rename_file(self, request: FileOperationRequest) -> FileOperationResult:
        if not request.new_path:
            return self._failure(request, "New path is required for file renaming")

        source = self._resolve(request.project_id, request.file_path)
        if not source.is_file():
            return self._failure(request, f"Source file not found at path: {request.file_path}")

        destination = self._resolve(request.project_id, request.new_path)
        if destination.exists():
            return self._failure(request, f"Destination file already exists at path: {request.new_path}")

        destination.parent.mkdir(parents=True, exist_ok=True)
        os.replace(source, destination)
        logger.info("Renamed %s to %s in project %s", request.file_path, request.new_path, request.project_id)
        return FileOperationResult(
            success=True,
            operation=request,
            result=FileOperationOutput(
                file_path=request.file_path,
                old_path=request.file_path,
                new_path=request.new_path,
            ),
        )

    def execute(self, request: FileOperationRequest) -> FileOperationResult:
        """Dispatch a request on its operation type"""
        handlers = {
            FileOperationType.CREATE: self.create_file,
            FileOperationType.EDIT: self.edit_file,
            FileOperationType.DELETE: self.delete_file,
            FileOperationType.RENAME: self.rename_file,
        }
        try:
            return handlers[request.type](request)
        except PathOutsideProjectError as e:
            return self._failure(request, str(e))
        except (OSError, UnicodeError) as e:
            logger.error("File operation %s on %s failed: %s", request.type.value, request.file_path, e)
            return self._failure(request, f"Unexpected error: {e}")

    def execute_many(self, requests: list[FileOperationRequest]) -> list[FileOperationResult]:
        """Run requests in order, stopping after a failed create"""
        results = []
        for request in requests:
            result = self.execute(request)
            results.append(result)
            if not result.success and request.type == FileOperationType.CREATE:
                break
        return results

    # ========== Queries ==========

    def list_files(self, project_id: str) -> list[ProjectFile]:
        """All files of a project, ordered by path"""
        project_dir = self._project_dir(project_id)
        if not project_dir.is_dir():
            return []

        files = []
        for path in sorted(project_dir.rglob("*")):
            if not path.is_file():
                continue
            try:
                path.resolve().relative_to(project_dir)
            except ValueError:
                # symlink pointing outside the project
                continue
            relative = path.relative_to(project_dir).as_posix()
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                content = ""
            stat = path.stat()
            files.append(
                ProjectFile(
                    path=relative,
                    name=path.name,
                    content=content,
                    type=get_file_type(relative),
                    size=stat.st_size,
                    updated_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return files

    def get_project_structure(self, project_id: str) -> list[ProjectFile]:
        """Files ordered by directory depth, then path"""
        return sorted(self.list_files(project_id), key=lambda f: (len(f.path.split("/")), f.path))

    def get_file_content(self, project_id: str, file_path: str) -> str | None:
        target = self._resolve(project_id, file_path)
        if not target.is_file():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise UnreadableFileError(f"File is not UTF-8 text: {file_path}")

    def file_exists(self, project_id: str, file_path: str) -> bool:
        return self._resolve(project_id, file_path).is_file()
