from __future__ import annotations

import base64
from dataclasses import dataclass, field

import pytest

from blob_editor.editor.models import RepositoryRef
from blob_editor.github.client import GitHubApiError
from blob_editor.github.schemas import GitHubBranch
from blob_editor.github.schemas import GitHubCommit
from blob_editor.github.schemas import GitHubCommitRef
from blob_editor.github.schemas import GitHubDirectoryEntry
from blob_editor.github.schemas import GitHubFileCommit
from blob_editor.github.schemas import GitHubFileContent
from blob_editor.github.schemas import GitHubGitRef
from blob_editor.github.schemas import GitHubOwner
from blob_editor.github.schemas import GitHubPermissions
from blob_editor.github.schemas import GitHubPullRequest
from blob_editor.github.schemas import GitHubRepository

WRITE_CALLS = ("create_fork", "create_ref", "create_or_update_file", "create_pull_request")


@dataclass
class FakeGitHubApi:
    """内存版 GitHub API：记录每次调用，行为由字段控制。"""

    push: bool = True
    protected: bool = False
    default_branch: str = "main"
    head_sha: str = "basesha"
    fork_owner: str = "bot"
    files: dict[str, str] = field(default_factory=lambda: {"docs/README.md": "Hello wrold\n"})
    directories: set[str] = field(default_factory=lambda: {"docs"})
    file_type: str = "file"
    omit_content: bool = False
    raw_content: str | None = None
    malformed_repository: bool = False
    create_ref_failures: int = 0
    commit_error: Exception | None = None
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)

    @property
    def write_calls(self) -> list[tuple[str, tuple[object, ...]]]:
        return [c for c in self.calls if c[0] in WRITE_CALLS]

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        return [args for n, args in self.calls if n == name]

    async def get_repository(self, repo: RepositoryRef) -> GitHubRepository:
        self.calls.append(("get_repository", (repo,)))
        if self.malformed_repository:
            # 与 GitHubClient 对缺字段响应的行为一致：model_validate 抛 ValidationError
            return GitHubRepository.model_validate({"name": repo.repo})
        return GitHubRepository(
            name=repo.repo,
            owner=GitHubOwner(login=repo.owner),
            default_branch=self.default_branch,
            permissions=GitHubPermissions(push=self.push),
        )

    async def get_branch(self, repo: RepositoryRef, branch: str) -> GitHubBranch:
        self.calls.append(("get_branch", (repo, branch)))
        return GitHubBranch(name=branch, commit=GitHubCommitRef(sha=self.head_sha), protected=self.protected)

    async def create_fork(self, repo: RepositoryRef) -> RepositoryRef:
        self.calls.append(("create_fork", (repo,)))
        return RepositoryRef(owner=self.fork_owner, repo=repo.repo)

    async def create_ref(self, repo: RepositoryRef, ref_name: str, sha: str) -> GitHubGitRef:
        self.calls.append(("create_ref", (repo, ref_name, sha)))
        if self.create_ref_failures > 0:
            self.create_ref_failures -= 1
            raise GitHubApiError(status_code=404, method="POST", url="/git/refs", body="Not Found")
        return GitHubGitRef(ref=ref_name, object=GitHubCommitRef(sha=sha))

    async def get_file_content(
        self, repo: RepositoryRef, path: str, git_ref: str
    ) -> GitHubFileContent | list[GitHubDirectoryEntry]:
        self.calls.append(("get_file_content", (repo, path, git_ref)))
        if path in self.directories:
            return [
                GitHubDirectoryEntry(type="file", name=p.rsplit("/", 1)[-1], path=p, sha="blobsha")
                for p in self.files
                if p.startswith(path + "/")
            ]
        content = None
        if self.raw_content is not None:
            content = self.raw_content
        elif not self.omit_content:
            # GitHub 的 base64 带换行
            content = base64.encodebytes(self.files[path].encode("utf-8")).decode("ascii")
        return GitHubFileContent(type=self.file_type, path=path, sha="blobsha", content=content, encoding="base64")

    async def create_or_update_file(
        self,
        repo: RepositoryRef,
        path: str,
        message: str,
        content_base64: str,
        blob_sha: str,
        branch: str,
    ) -> GitHubFileCommit:
        self.calls.append(("create_or_update_file", (repo, path, message, content_base64, blob_sha, branch)))
        if self.commit_error is not None:
            raise self.commit_error
        return GitHubFileCommit(
            commit=GitHubCommit(sha="newsha", html_url=f"https://github.com/{repo.owner}/{repo.repo}/commit/newsha")
        )

    async def create_pull_request(
        self, repo: RepositoryRef, base: str, head: str, title: str, body: str
    ) -> GitHubPullRequest:
        self.calls.append(("create_pull_request", (repo, base, head, title, body)))
        return GitHubPullRequest(number=7, html_url=f"https://github.com/{repo.owner}/{repo.repo}/pull/7")


@pytest.fixture
def fake_api() -> FakeGitHubApi:
    return FakeGitHubApi()
