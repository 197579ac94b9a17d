"""
GitHub REST API response schemas（Pydantic）。

说明：
- 字段只覆盖编辑单个文件流程需要的子集
- 未声明的字段由 Pydantic 默认忽略
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GitHubOwner(BaseModel):
    login: str


class GitHubPermissions(BaseModel):
    push: bool = False


class GitHubRepository(BaseModel):
    """GET /repos/{owner}/{repo}（以及 POST .../forks 的返回）。"""

    name: str
    owner: GitHubOwner
    default_branch: str
    # 匿名/无权限访问时 GitHub 不返回 permissions 字段，按“无 push 权限”处理
    permissions: GitHubPermissions = Field(default_factory=GitHubPermissions)


class GitHubCommitRef(BaseModel):
    sha: str


class GitHubBranch(BaseModel):
    name: str
    commit: GitHubCommitRef
    protected: bool = False


class GitHubGitRef(BaseModel):
    ref: str
    object: GitHubCommitRef


class GitHubFileContent(BaseModel):
    """
    GET /contents/{path} 的单文件结果。

    type 也可能是 symlink / submodule（同样是 object 而不是 list），由 editor 判断。
    content 可能缺失（例如超过 1MB 的文件），此时为 None。
    """

    type: str
    path: str
    sha: str
    content: str | None = None
    encoding: str | None = None


class GitHubDirectoryEntry(BaseModel):
    """GET /contents/{path} 指向目录时，返回的是这种 item 的列表。"""

    type: str
    name: str
    path: str
    sha: str


class GitHubCommit(BaseModel):
    sha: str
    html_url: str


class GitHubFileCommit(BaseModel):
    """PUT /contents/{path} 的返回。"""

    commit: GitHubCommit


class GitHubPullRequest(BaseModel):
    number: int
    html_url: str
