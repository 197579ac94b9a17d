"""
GitHub API 客户端（外部系统连接器）。

约定：
- 这里只做 HTTP 调用 + 错误处理 + schema 校验，不做业务决策
- 出错直接抛错（不要吞），便于定位与告警；重试策略由调用方决定
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from blob_editor.editor.models import RepositoryRef
from blob_editor.github.schemas import GitHubBranch
from blob_editor.github.schemas import GitHubDirectoryEntry
from blob_editor.github.schemas import GitHubFileCommit
from blob_editor.github.schemas import GitHubFileContent
from blob_editor.github.schemas import GitHubGitRef
from blob_editor.github.schemas import GitHubPullRequest
from blob_editor.github.schemas import GitHubRepository

logger = logging.getLogger(__name__)


class GitHubApiError(RuntimeError):
    """GitHub 返回 4xx/5xx 时抛出，保留上游状态码与响应体。"""

    def __init__(self, status_code: int, method: str, url: str, body: str) -> None:
        super().__init__(f"GitHub API error {status_code} on {method} {url}: {body}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body


class GitHubClient:
    """编辑单个文件所需的 GitHub API client（repos / git refs / contents / pulls）。"""

    def __init__(self, api_base_url: str, token: str, http_client: httpx.AsyncClient) -> None:
        """
        - api_base_url: 例如 `https://api.github.com`，GHES 为 `https://<host>/api/v3`
        - token: PAT 或 GitHub Actions 的 GITHUB_TOKEN
        - http_client: 复用的 httpx.AsyncClient（超时在 client 级别配置）
        """
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _repo_url(self, repo: RepositoryRef) -> str:
        return f"{self._api_base_url}/repos/{quote(repo.owner, safe='')}/{quote(repo.repo, safe='')}"

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._http_client.request(method, url, headers=self._headers(), params=params, json=json)
        if response.status_code >= 400:
            logger.error(f"GitHub API error: {method} {url} -> {response.status_code}")
            raise GitHubApiError(status_code=response.status_code, method=method, url=url, body=response.text)
        return response.json()

    async def get_repository(self, repo: RepositoryRef) -> GitHubRepository:
        """仓库元数据：default_branch + 当前凭据的 permissions。"""
        data = await self._request("GET", self._repo_url(repo))
        return GitHubRepository.model_validate(data)

    async def get_branch(self, repo: RepositoryRef, branch: str) -> GitHubBranch:
        """分支元数据：是否 protected + 当前 head commit。"""
        url = f"{self._repo_url(repo)}/branches/{quote(branch, safe='')}"
        data = await self._request("GET", url)
        return GitHubBranch.model_validate(data)

    async def create_fork(self, repo: RepositoryRef) -> RepositoryRef:
        """
        Fork 仓库到当前凭据所属账号。

        GitHub 侧是幂等的：已 fork 过会直接返回已有的 fork（202）。
        注意 fork 是异步创建的，返回后 ref 命名空间可能还不可写。
        """
        data = await self._request("POST", f"{self._repo_url(repo)}/forks", json={})
        fork = GitHubRepository.model_validate(data)
        return RepositoryRef(owner=fork.owner.login, repo=fork.name)

    async def create_ref(self, repo: RepositoryRef, ref_name: str, sha: str) -> GitHubGitRef:
        """创建 git ref，ref_name 需为完整形式（`refs/heads/<branch>`）。"""
        data = await self._request("POST", f"{self._repo_url(repo)}/git/refs", json={"ref": ref_name, "sha": sha})
        return GitHubGitRef.model_validate(data)

    async def get_file_content(
        self,
        repo: RepositoryRef,
        path: str,
        git_ref: str,
    ) -> GitHubFileContent | list[GitHubDirectoryEntry]:
        """
        读取 path 在 git_ref 上的内容。

        返回：
        - 单个 object -> `GitHubFileContent`（文件/symlink/submodule）
        - list -> 目录列表
        """
        url = f"{self._repo_url(repo)}/contents/{quote(path.lstrip('/'), safe='/')}"
        data = await self._request("GET", url, params={"ref": git_ref})
        if isinstance(data, list):
            return [GitHubDirectoryEntry.model_validate(x) for x in data]
        return GitHubFileContent.model_validate(data)

    async def create_or_update_file(
        self,
        repo: RepositoryRef,
        path: str,
        message: str,
        content_base64: str,
        blob_sha: str,
        branch: str,
    ) -> GitHubFileCommit:
        """
        提交文件新内容。

        blob_sha 用于乐观并发：文件在此期间被改过，GitHub 返回 409，这里直接抛 `GitHubApiError`。
        """
        url = f"{self._repo_url(repo)}/contents/{quote(path.lstrip('/'), safe='/')}"
        payload = {"message": message, "content": content_base64, "sha": blob_sha, "branch": branch}
        data = await self._request("PUT", url, json=payload)
        return GitHubFileCommit.model_validate(data)

    async def create_pull_request(
        self,
        repo: RepositoryRef,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> GitHubPullRequest:
        """在 repo 上创建 PR，head 形如 `<owner>:<branch>`（跨 fork 时必需）。"""
        payload = {"base": base, "head": head, "title": title, "body": body}
        data = await self._request("POST", f"{self._repo_url(repo)}/pulls", json=payload)
        return GitHubPullRequest.model_validate(data)
