"""Search/replace edit API endpoints"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from models.diff import DiffView
from models.edit import (
    ApplyRequest,
    ApplyResponse,
    DiffViewRequest,
    EditStreamEvent,
    GenerateEditRequest,
    GenerateEditResponse,
    ParseRequest,
    ParseResult,
    ValidateRequest,
    ValidationResult,
)
from services.block_parser import DIVIDER, REPLACE_END, SEARCH_START
from services.config_manager import ConfigManager
from services.diff_editor import DiffEditor
from services.llm_service import LLMService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_diff_editor() -> DiffEditor:
    """Diff editor configured from the editor section of the config"""
    editor_config = ConfigManager.get_instance().get_config().get("editor", {})
    return DiffEditor(min_search_length=int(editor_config.get("minSearchLength", 10)))


def build_edit_prompt(request: GenerateEditRequest) -> str:
    """Build prompt asking for SEARCH/REPLACE blocks against one file"""
    return f"""You are an AI coding assistant. Edit the file below to satisfy the request.

REQUEST:
{request.instruction}

CURRENT FILE ({request.file_path}):
```
{request.content}
```

Answer with one or more edit blocks in exactly this format:

{SEARCH_START}
exact lines copied from the current file
{DIVIDER}
the lines that replace them
{REPLACE_END}

Rules:
- The SEARCH section must match the current file exactly, including whitespace
- Only the first occurrence of each SEARCH section is replaced
- Blocks are applied in order; later blocks see the result of earlier ones
- Keep SEARCH sections short but unique
- Put new imports in their own block that extends the existing import lines"""


@router.post("/parse", response_model=ParseResult)
async def parse_blocks(request: ParseRequest, editor: DiffEditor = Depends(get_diff_editor)) -> ParseResult:
    """Extract edit blocks from a model response"""
    strict = request.strict
    if strict is None:
        strict = bool(ConfigManager.get_instance().get_config().get("editor", {}).get("strictParse", False))

    if strict:
        return editor.parse_strict(request.response_text)
    return ParseResult(blocks=editor.parse(request.response_text))


@router.post("/validate", response_model=ValidationResult)
async def validate_blocks(request: ValidateRequest, editor: DiffEditor = Depends(get_diff_editor)) -> ValidationResult:
    """Pre-flight check edit blocks"""
    return editor.validate(request.blocks)


@router.post("/apply", response_model=ApplyResponse)
async def apply_blocks(request: ApplyRequest, editor: DiffEditor = Depends(get_diff_editor)) -> ApplyResponse:
    """Apply edit blocks to the given content and return the unified diff"""
    result = editor.apply(request.original_content, request.blocks)
    diff = editor.generate_diff(request.original_content, result.modified_content, request.file_path)
    return ApplyResponse(result=result, diff=diff)


@router.post("/diff-view", response_model=DiffView)
async def diff_view(request: DiffViewRequest, editor: DiffEditor = Depends(get_diff_editor)) -> DiffView:
    """Line-level review view of an edit"""
    return editor.build_diff_view(request.original_content, request.modified_content, request.blocks)


@router.post("/generate", response_model=GenerateEditResponse)
async def generate_edit(
    request: GenerateEditRequest,
    editor: DiffEditor = Depends(get_diff_editor),
) -> GenerateEditResponse:
    """Ask the configured LLM for edit blocks and apply them"""
    config = ConfigManager.get_instance().get_config()
    llm_service = LLMService(config)

    response = await llm_service.generate_response(build_edit_prompt(request), request.context)
    outcome = editor.edit(request.content, response)

    return GenerateEditResponse(
        raw_response=response,
        blocks=outcome.blocks,
        validation=outcome.validation,
        result=outcome.result,
        diff_view=outcome.diff_view,
    )


@router.post("/generate/stream")
async def generate_edit_stream(request: GenerateEditRequest, editor: DiffEditor = Depends(get_diff_editor)):
    """Stream the model response (SSE), then the parsed blocks and apply result"""
    config = ConfigManager.get_instance().get_config()
    llm_service = LLMService(config)

    async def event_generator():
        full_content = ""

        try:
            async for chunk in llm_service.generate_response_stream(build_edit_prompt(request), request.context):
                full_content += chunk
                event = EditStreamEvent(type="content", chunk=chunk)
                yield {"event": "message", "data": event.model_dump_json()}

            outcome = editor.edit(request.content, full_content)

            event = EditStreamEvent(type="blocks", blocks=outcome.blocks, validation=outcome.validation)
            yield {"event": "message", "data": event.model_dump_json()}

            event = EditStreamEvent(type="result", result=outcome.result)
            yield {"event": "message", "data": event.model_dump_json()}

            event = EditStreamEvent(type="done", done=True)
            yield {"event": "message", "data": event.model_dump_json()}

        except Exception as e:
            logger.exception("Edit stream failed for %s", request.file_path)
            event = EditStreamEvent(type="error", error=str(e))
            yield {"event": "message", "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())
