"""
本地 Mock GitHub API server（只覆盖编辑单个文件用到的 7 个接口）。

用途：
- 在没有真实 GitHub 的情况下，本地跑通：
  repo/branch -> (fork) -> (create ref) -> get contents -> put contents -> (create PR)

启动：
  python -m blob_editor.dev.mock_github_server
然后把 `GITHUB_API_BASE_URL` 指向 http://127.0.0.1:9003

可通过 `MOCK_GITHUB_PUSH=0` / `MOCK_GITHUB_PROTECTED=1` 切换三种流程分支。
"""

from __future__ import annotations

import base64
import hashlib
import os
import time

import uvicorn
from fastapi import FastAPI
from fastapi import HTTPException
from pydantic import BaseModel

FORK_OWNER = "mock-bot"


class CreateRefRequest(BaseModel):
    ref: str
    sha: str


class PutContentsRequest(BaseModel):
    message: str
    content: str
    sha: str
    branch: str


class CreatePullRequest(BaseModel):
    base: str
    head: str
    title: str
    body: str = ""


def _blob_sha(text: str) -> str:
    data = text.encode("utf-8")
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


# (owner, repo) -> {branch -> {path -> text}}
_repos: dict[tuple[str, str], dict[str, dict[str, str]]] = {
    ("octo", "demo"): {"main": {"README.md": "# Demo\n\nHello wrold\n", "docs/guide.md": "guide\n"}},
}
_heads: dict[tuple[str, str, str], str] = {("octo", "demo", "main"): "0" * 40}
_pulls: list[dict[str, object]] = []

app = FastAPI(title="Mock GitHub API", version="0.1.0")


def _get_branches(owner: str, repo: str) -> dict[str, dict[str, str]]:
    branches = _repos.get((owner, repo))
    if branches is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return branches


def _find_branch_by_sha(sha: str) -> dict[str, str]:
    for (owner, repo, branch), head in _heads.items():
        if head == sha:
            return _repos[(owner, repo)][branch]
    raise HTTPException(status_code=422, detail="Object does not exist")


@app.get("/repos/{owner}/{repo}")
async def get_repository(owner: str, repo: str) -> dict[str, object]:
    _get_branches(owner, repo)
    return {
        "name": repo,
        "owner": {"login": owner},
        "default_branch": "main",
        "permissions": {"push": owner == FORK_OWNER or os.environ.get("MOCK_GITHUB_PUSH", "1") == "1"},
    }


@app.get("/repos/{owner}/{repo}/branches/{branch}")
async def get_branch(owner: str, repo: str, branch: str) -> dict[str, object]:
    if branch not in _get_branches(owner, repo):
        raise HTTPException(status_code=404, detail="Branch not found")
    return {
        "name": branch,
        "commit": {"sha": _heads[(owner, repo, branch)]},
        "protected": os.environ.get("MOCK_GITHUB_PROTECTED", "0") == "1",
    }


@app.post("/repos/{owner}/{repo}/forks", status_code=202)
async def create_fork(owner: str, repo: str) -> dict[str, object]:
    branches = _get_branches(owner, repo)
    if (FORK_OWNER, repo) not in _repos:
        _repos[(FORK_OWNER, repo)] = {name: dict(files) for name, files in branches.items()}
        for name in branches:
            _heads[(FORK_OWNER, repo, name)] = _heads[(owner, repo, name)]
    return {"name": repo, "owner": {"login": FORK_OWNER}, "default_branch": "main"}


@app.post("/repos/{owner}/{repo}/git/refs", status_code=201)
async def create_ref(owner: str, repo: str, req: CreateRefRequest) -> dict[str, object]:
    branches = _get_branches(owner, repo)
    branch = req.ref.removeprefix("refs/heads/")
    if branch in branches:
        raise HTTPException(status_code=422, detail="Reference already exists")
    branches[branch] = dict(_find_branch_by_sha(req.sha))
    _heads[(owner, repo, branch)] = req.sha
    return {"ref": req.ref, "object": {"sha": req.sha}}


@app.get("/repos/{owner}/{repo}/contents/{path:path}", response_model=None)
async def get_contents(owner: str, repo: str, path: str, ref: str) -> dict[str, object] | list[dict[str, object]]:
    files = _get_branches(owner, repo).get(ref)
    if files is None:
        raise HTTPException(status_code=404, detail="No commit found for the ref")
    if path in files:
        text = files[path]
        return {
            "type": "file",
            "path": path,
            "sha": _blob_sha(text),
            "encoding": "base64",
            "content": base64.encodebytes(text.encode("utf-8")).decode("ascii"),
        }
    prefix = path.rstrip("/") + "/"
    entries = [p for p in files if p.startswith(prefix)]
    if not entries:
        raise HTTPException(status_code=404, detail="Not Found")
    return [{"type": "file", "name": p.rsplit("/", 1)[-1], "path": p, "sha": _blob_sha(files[p])} for p in entries]


@app.put("/repos/{owner}/{repo}/contents/{path:path}")
async def put_contents(owner: str, repo: str, path: str, req: PutContentsRequest) -> dict[str, object]:
    files = _get_branches(owner, repo).get(req.branch)
    if files is None:
        raise HTTPException(status_code=404, detail="Branch not found")
    if path not in files or _blob_sha(files[path]) != req.sha:
        raise HTTPException(status_code=409, detail=f"{path} does not match {req.sha}")
    files[path] = base64.b64decode(req.content).decode("utf-8")
    commit_sha = hashlib.sha1(f"{owner}/{repo}/{req.branch}/{time.time()}".encode("utf-8")).hexdigest()
    _heads[(owner, repo, req.branch)] = commit_sha
    return {"commit": {"sha": commit_sha, "html_url": f"https://github.test/{owner}/{repo}/commit/{commit_sha}"}}


@app.post("/repos/{owner}/{repo}/pulls", status_code=201)
async def create_pull_request(owner: str, repo: str, req: CreatePullRequest) -> dict[str, object]:
    _get_branches(owner, repo)
    number = len(_pulls) + 1
    _pulls.append({"number": number, "repo": f"{owner}/{repo}", **req.model_dump()})
    return {"number": number, "html_url": f"https://github.test/{owner}/{repo}/pull/{number}"}


@app.get("/__debug__/pulls")
async def debug_pulls() -> dict[str, object]:
    return {"count": len(_pulls), "pulls": _pulls}


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9003)


if __name__ == "__main__":
    main()
