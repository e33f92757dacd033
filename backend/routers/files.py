"""Project file API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from models.files import FileOperationRequest, FileOperationResult, ProjectFile
from services.config_manager import ConfigManager
from services.file_operations import PathOutsideProjectError, ProjectFileStore, UnreadableFileError

from .edit import get_diff_editor

router = APIRouter()


def get_file_store() -> ProjectFileStore:
    """File store rooted at workspace.root"""
    config = ConfigManager.get_instance().get_config()
    return ProjectFileStore(config["workspace"]["root"], editor=get_diff_editor())


@router.get("/{project_id}", response_model=list[ProjectFile])
def get_project_structure(project_id: str, store: ProjectFileStore = Depends(get_file_store)) -> list[ProjectFile]:
    """List project files, shallowest first"""
    try:
        return store.get_project_structure(project_id)
    except PathOutsideProjectError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{project_id}/content")
def get_file_content(
    project_id: str,
    path: str,
    store: ProjectFileStore = Depends(get_file_store),
) -> dict[str, str]:
    """Get the content of a single file"""
    try:
        content = store.get_file_content(project_id, path)
    except PathOutsideProjectError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnreadableFileError as e:
        raise HTTPException(status_code=415, detail=str(e))

    if content is None:
        raise HTTPException(status_code=404, detail=f"File not found at path: {path}")
    return {"path": path, "content": content}


@router.post("/operation", response_model=FileOperationResult)
def execute_operation(
    request: FileOperationRequest,
    store: ProjectFileStore = Depends(get_file_store),
) -> FileOperationResult:
    """Run one create/edit/delete/rename operation"""
    return store.execute(request)


@router.post("/operations", response_model=list[FileOperationResult])
def execute_operations(
    requests: list[FileOperationRequest],
    store: ProjectFileStore = Depends(get_file_store),
) -> list[FileOperationResult]:
    """Run operations in order; a failed create stops the batch"""
    return store.execute_many(requests)
