from __future__ import annotations

import anyio
import httpx
import pytest

from blob_editor.dev import mock_github_server
from blob_editor.editor.errors import NoChangeError
from blob_editor.editor.models import EditRequest
from blob_editor.editor.workflow import edit_blob
from blob_editor.github.client import GitHubClient


def _edit(request: EditRequest) -> str:
    async def no_sleep(seconds: float) -> None:
        return None

    async def main() -> str:
        transport = httpx.ASGITransport(app=mock_github_server.app)
        async with httpx.AsyncClient(transport=transport) as http_client:
            client = GitHubClient(api_base_url="http://mock-github", token="t", http_client=http_client)
            return await edit_blob(client, request, no_sleep)

    return anyio.run(main)


def _fix_typo(old: str) -> str:
    return old.replace("wrold", "world")


def test_fork_flow_against_mock_server(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MOCK_GITHUB_PUSH", "0")
    url = _edit(EditRequest(owner="octo", repo="demo", file_path="README.md", replace=_fix_typo))

    assert url.startswith("https://github.test/octo/demo/pull/")
    pull = mock_github_server._pulls[-1]
    assert str(pull["head"]).startswith("mock-bot:update-README.md-")
    head_branch = str(pull["head"]).split(":", 1)[1]
    assert mock_github_server._repos[("mock-bot", "demo")][head_branch]["README.md"] == "# Demo\n\nHello world\n"
    # base 仓库未被直接修改
    assert mock_github_server._repos[("octo", "demo")]["main"]["README.md"] == "# Demo\n\nHello wrold\n"


def test_directory_against_mock_server(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MOCK_GITHUB_PUSH", "1")
    with pytest.raises(Exception) as exc_info:
        _edit(EditRequest(owner="octo", repo="demo", file_path="docs", replace=_fix_typo))
    assert "got a directory" in str(exc_info.value)


def test_no_change_against_mock_server(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MOCK_GITHUB_PUSH", "1")
    with pytest.raises(NoChangeError):
        _edit(EditRequest(owner="octo", repo="demo", file_path="docs/guide.md", replace=lambda old: old))
