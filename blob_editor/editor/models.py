"""
Blob editor 领域模型。

全部是单次调用内的瞬时状态，不做持久化。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RepositoryRef:
    """仓库标识。一次运行里有 base（上游）和 head（实际写入）两个，不需要 fork 时二者相同。"""

    owner: str
    repo: str


@dataclass(frozen=True)
class EditRequest:
    """
    调用方提交的编辑请求（运行期间不可变）。

    - branch: 为空时使用仓库默认分支
    - replace: 旧内容 -> 新内容；返回值与输入相同视为“没有修改”
    - commit_message: 为空时使用 `Update <file_path>`
    """

    owner: str
    repo: str
    file_path: str
    replace: Callable[[str], str]
    branch: str | None = None
    commit_message: str | None = None

    @property
    def base_repo(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, repo=self.repo)


@dataclass(frozen=True)
class BranchState:
    name: str
    protected: bool
    head_commit_sha: str


@dataclass(frozen=True)
class FileState:
    path: str
    base64_content: str
    blob_sha: str


class WorkflowDecision(Enum):
    """
    由 push 权限和分支保护一次性算出的流程分支。

    只有 3 种可达组合：需要 fork 一定需要 PR（fork 必须通过 PR 回到 base）。
    """

    DIRECT_COMMIT = "direct_commit"
    SAME_REPO_PR = "same_repo_pr"
    FORK_AND_PR = "fork_and_pr"

    @property
    def needs_fork(self) -> bool:
        return self is WorkflowDecision.FORK_AND_PR

    @property
    def needs_pr(self) -> bool:
        return self is not WorkflowDecision.DIRECT_COMMIT
