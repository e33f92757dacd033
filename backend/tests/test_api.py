from __future__ import annotations

import inspect
import json
from pathlib import Path

import pytest

from services.llm_service import LLMService

RESPONSE = "<<<<<<< SEARCH\nfoo\n=======\nbar\n>>>>>>> REPLACE"


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    # older sse-starlette releases keep an exit event bound to the first event loop
    from sse_starlette import sse

    app_status = getattr(sse, "AppStatus", None)
    if app_status is not None and hasattr(app_status, "should_exit_event"):
        app_status.should_exit_event = None


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "service": "diff-editor-backend"}


def test_parse(client):
    response = client.post("/api/edit/parse", json={"response_text": RESPONSE + "\n<<<<<<< SEARCH\nleft open"})

    assert response.status_code == 200
    data = response.json()
    assert data["blocks"] == [{"search": "foo", "replace": "bar", "description": "Edit block 1"}]
    assert data["errors"] == []


def test_parse_strict(client):
    response = client.post(
        "/api/edit/parse",
        json={"response_text": RESPONSE + "\n<<<<<<< SEARCH\nleft open", "strict": True},
    )

    data = response.json()
    assert len(data["blocks"]) == 1
    assert len(data["errors"]) == 1


def test_parse_strict_from_config(client, isolated_config):
    isolated_config.save_config({"editor": {"minSearchLength": 10, "strictParse": True}})

    data = client.post("/api/edit/parse", json={"response_text": "=======\n"}).json()

    assert data["errors"] == ["Line 1: '=======' found outside of a block"]


def test_validate(client):
    response = client.post("/api/edit/validate", json={"blocks": [{"search": "", "replace": "x", "description": "d"}]})

    data = response.json()
    assert data["is_valid"] is False
    assert "Block 1" in data["errors"][0]


def test_apply(client):
    response = client.post(
        "/api/edit/apply",
        json={
            "original_content": "foo baz\n",
            "blocks": [{"search": "foo", "replace": "bar"}],
            "file_path": "notes.txt",
        },
    )

    data = response.json()
    assert data["result"]["success"] is True
    assert data["result"]["modified_content"] == "bar baz\n"
    assert data["result"]["summary"]["applied_count"] == 1
    assert "+bar baz" in data["diff"]["unified_diff"]


def test_apply_reports_failures(client):
    response = client.post(
        "/api/edit/apply",
        json={"original_content": "abc", "blocks": [{"search": "xyz", "replace": "1"}]},
    )

    result = response.json()["result"]
    assert result["success"] is False
    assert result["failed_edits"][0]["status"] == "failed"
    assert result["modified_content"] == "abc"


def test_apply_requires_blocks(client):
    assert client.post("/api/edit/apply", json={"original_content": "abc"}).status_code == 422


def test_diff_view(client):
    response = client.post(
        "/api/edit/diff-view",
        json={
            "original_content": "a\nb",
            "modified_content": "a\nB",
            "blocks": [{"search": "b", "replace": "B"}],
        },
    )

    data = response.json()
    assert [line["type"] for line in data["lines"]] == ["unchanged", "removed", "added"]
    assert data["summary"]["matches_modified"] is True


def test_generate(client, monkeypatch):
    prompts = []

    async def fake_generate(self, prompt, context=None):
        prompts.append(prompt)
        return "Done.\n" + RESPONSE

    monkeypatch.setattr(LLMService, "generate_response", fake_generate)

    response = client.post(
        "/api/edit/generate",
        json={"instruction": "rename foo", "file_path": "a.txt", "content": "foo baz"},
    )

    data = response.json()
    assert response.status_code == 200
    assert data["result"]["modified_content"] == "bar baz"
    assert data["blocks"][0]["search"] == "foo"
    assert data["validation"]["warnings"]
    assert "<<<<<<< SEARCH" in prompts[0]
    assert "foo baz" in prompts[0]


def test_generate_stream(client, monkeypatch):
    async def fake_stream(self, prompt, context=None):
        for chunk in ("<<<<<<< SEARCH\nfoo\n", "=======\nbar\n", ">>>>>>> REPLACE"):
            yield chunk

    monkeypatch.setattr(LLMService, "generate_response_stream", fake_stream)

    response = client.post(
        "/api/edit/generate/stream",
        json={"instruction": "rename foo", "file_path": "a.txt", "content": "foo baz"},
    )

    events = [json.loads(line[len("data: "):]) for line in response.text.splitlines() if line.startswith("data: ")]
    types = [event["type"] for event in events]
    assert types == ["content", "content", "content", "blocks", "result", "done"]
    assert events[4]["result"]["modified_content"] == "bar baz"


def test_generate_stream_error_event(client, monkeypatch):
    async def failing_stream(self, prompt, context=None):
        raise ValueError("Gemini API key not configured")
        yield  # pragma: no cover

    monkeypatch.setattr(LLMService, "generate_response_stream", failing_stream)

    response = client.post(
        "/api/edit/generate/stream",
        json={"instruction": "x", "file_path": "a.txt", "content": "y"},
    )

    events = [json.loads(line[len("data: "):]) for line in response.text.splitlines() if line.startswith("data: ")]
    assert events == [
        {
            "type": "error",
            "chunk": None,
            "blocks": None,
            "validation": None,
            "result": None,
            "done": False,
            "error": "Gemini API key not configured",
        }
    ]


def test_file_operations_round_trip(client):
    create = {"type": "create", "project_id": "demo", "file_path": "src/app.js", "content": "let a = 1\n"}
    edit = {
        "type": "edit",
        "project_id": "demo",
        "file_path": "src/app.js",
        "edits": [{"search": "let a = 1", "replace": "let a = 2"}],
    }

    results = client.post("/api/files/operations", json=[create, edit]).json()

    assert [r["success"] for r in results] == [True, True]
    content = client.get("/api/files/demo/content", params={"path": "src/app.js"}).json()
    assert content == {"path": "src/app.js", "content": "let a = 2\n"}
    structure = client.get("/api/files/demo").json()
    assert [f["path"] for f in structure] == ["src/app.js"]
    assert structure[0]["type"] == "javascript"


def test_file_operation_failure_is_data(client):
    result = client.post(
        "/api/files/operation",
        json={"type": "delete", "project_id": "demo", "file_path": "missing.txt"},
    ).json()

    assert result["success"] is False
    assert result["errors"] == ["File not found at path: missing.txt"]


def test_file_content_not_found(client):
    assert client.get("/api/files/demo/content", params={"path": "nope"}).status_code == 404
    assert client.get("/api/files/demo/content", params={"path": "../../x"}).status_code == 400


def test_config_masks_keys_and_updates(client):
    client.put("/api/config", json={"openai": {"apiKey": "sk-1234567890abcd"}, "editor": {"minSearchLength": 3}})

    data = client.get("/api/config").json()

    assert data["openai"]["apiKey"] == "sk-1*********abcd"
    assert data["openai"]["model"] == "gpt-4"
    assert data["editor"] == {"minSearchLength": 3, "strictParse": False}

    warnings = client.post("/api/edit/validate", json={"blocks": [{"search": "abcd", "replace": "x"}]}).json()
    assert warnings["warnings"] == []


def test_config_validate_reports_missing_key(client):
    data = client.post("/api/config/validate").json()

    assert data["valid"] is False
    assert "Gemini API key not configured" in data["message"]


def test_file_content_of_binary_file_is_unsupported(client, isolated_config):
    root = isolated_config.get_config()["workspace"]["root"]
    target = Path(root) / "demo" / "bin.dat"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe\x00")

    response = client.get("/api/files/demo/content", params={"path": "bin.dat"})

    assert response.status_code == 415


def test_file_endpoints_run_in_threadpool():
    from routers import files

    endpoints = [files.get_project_structure, files.get_file_content, files.execute_operation, files.execute_operations]
    assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)
