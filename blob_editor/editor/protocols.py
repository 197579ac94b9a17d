from __future__ import annotations

"""
Blob editor 依赖的 GitHub 能力集合（Protocol）。

`GitHubClient` 满足它；测试里用内存 fake 替换，不需要真实网络。
"""

from typing import Protocol

from blob_editor.editor.models import RepositoryRef
from blob_editor.github.schemas import GitHubBranch
from blob_editor.github.schemas import GitHubDirectoryEntry
from blob_editor.github.schemas import GitHubFileCommit
from blob_editor.github.schemas import GitHubFileContent
from blob_editor.github.schemas import GitHubGitRef
from blob_editor.github.schemas import GitHubPullRequest
from blob_editor.github.schemas import GitHubRepository


class GitHubApi(Protocol):
    async def get_repository(self, repo: RepositoryRef) -> GitHubRepository: ...

    async def get_branch(self, repo: RepositoryRef, branch: str) -> GitHubBranch: ...

    async def create_fork(self, repo: RepositoryRef) -> RepositoryRef: ...

    async def create_ref(self, repo: RepositoryRef, ref_name: str, sha: str) -> GitHubGitRef: ...

    async def get_file_content(
        self, repo: RepositoryRef, path: str, git_ref: str
    ) -> GitHubFileContent | list[GitHubDirectoryEntry]: ...

    async def create_or_update_file(
        self,
        repo: RepositoryRef,
        path: str,
        message: str,
        content_base64: str,
        blob_sha: str,
        branch: str,
    ) -> GitHubFileCommit: ...

    async def create_pull_request(
        self, repo: RepositoryRef, base: str, head: str, title: str, body: str
    ) -> GitHubPullRequest: ...
