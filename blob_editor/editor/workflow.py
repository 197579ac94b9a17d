"""
Blob Editor（核心流程编排）。

一次调用 = 修改 GitHub 仓库中的单个文件，返回 commit URL 或 PR URL：

repo/branch 元数据 -> 决定 fork/PR -> (fork) -> (建分支) -> 读文件 -> replace -> commit -> (开 PR)

流程分支只在开头算一次（`WorkflowDecision`），后面按它分派。
GitHub API 的错误一律原样上抛；唯一的例外是刚 fork 完之后的建分支，会按固定间隔重试。
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Awaitable, Callable

import anyio

from blob_editor.editor.errors import NoChangeError
from blob_editor.editor.errors import NotAFileError
from blob_editor.editor.models import BranchState
from blob_editor.editor.models import EditRequest
from blob_editor.editor.models import FileState
from blob_editor.editor.models import RepositoryRef
from blob_editor.editor.models import WorkflowDecision
from blob_editor.editor.protocols import GitHubApi
from blob_editor.infra.retry import retry_with_fixed_delay

logger = logging.getLogger(__name__)

# 新建的 fork 需要一段时间 ref 命名空间才可写
FORK_REF_RETRY_ATTEMPTS = 6
FORK_REF_RETRY_DELAY_SECONDS = 5.0


def decide_workflow(push_permission: bool, branch_protected: bool) -> WorkflowDecision:
    """没有 push 权限 -> fork + PR；有权限但分支受保护 -> 同仓库 PR；否则直接提交。"""
    if not push_permission:
        return WorkflowDecision.FORK_AND_PR
    if branch_protected:
        return WorkflowDecision.SAME_REPO_PR
    return WorkflowDecision.DIRECT_COMMIT


def build_head_branch_name(file_path: str, timestamp: int) -> str:
    """`update-<basename>-<unix 秒>`，避免并发运行之间撞名。"""
    basename = file_path.rstrip("/").rsplit("/", 1)[-1]
    return f"update-{basename}-{timestamp}"


def default_commit_message(file_path: str) -> str:
    return f"Update {file_path}"


def split_commit_message(message: str) -> tuple[str, str]:
    """按第一个空行拆成 PR 的 (title, body)；单段消息 body 为空。"""
    title, _, body = message.partition("\n\n")
    return title, body


def decode_content(file_state: FileState) -> str:
    # GitHub 返回的 base64 每 60 字符换行，需要忽略空白
    raw = base64.b64decode("".join(file_state.base64_content.split()))
    return raw.decode("utf-8")


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


async def _resolve_file_state(api: GitHubApi, repo: RepositoryRef, path: str, git_ref: str) -> FileState:
    result = await api.get_file_content(repo, path, git_ref)
    if isinstance(result, list):
        raise NotAFileError(path)
    if result.type != "file":
        raise NotAFileError(path, kind=result.type)
    # content 缺失按空文件处理
    return FileState(path=result.path, base64_content=result.content or "", blob_sha=result.sha)


async def edit_blob(
    api: GitHubApi,
    request: EditRequest,
    sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    clock: Callable[[], float] = time.time,
) -> str:
    """
    修改单个文件并返回结果 URL。

    - DIRECT_COMMIT：直接提交到 base 分支，返回 commit URL
    - SAME_REPO_PR / FORK_AND_PR：在 head 仓库建新分支提交，再开 PR 回 base 分支，返回 PR URL

    失败：
    - `NotAFileError`：path 是目录
    - `NoChangeError`：replace 没有产生变化（在提交之前检查）
    - 其余 GitHub API 错误原样上抛
    """
    base_repo = request.base_repo

    # Step 1-2: 仓库与分支元数据
    repository = await api.get_repository(base_repo)
    base_branch_name = request.branch or repository.default_branch
    branch = await api.get_branch(base_repo, base_branch_name)
    base_branch = BranchState(
        name=base_branch_name,
        protected=branch.protected,
        head_commit_sha=branch.commit.sha,
    )

    # Step 3-4: 一次性决定流程分支
    decision = decide_workflow(
        push_permission=repository.permissions.push,
        branch_protected=base_branch.protected,
    )
    logger.info(
        f"Editing {base_repo.owner}/{base_repo.repo}:{base_branch.name}/{request.file_path} "
        f"(workflow={decision.value})"
    )

    head_repo = base_repo
    if decision.needs_fork:
        head_repo = await api.create_fork(base_repo)
        logger.info(f"Using fork {head_repo.owner}/{head_repo.repo}")

    head_branch = base_branch.name
    if decision.needs_pr:
        head_branch = build_head_branch_name(request.file_path, int(round(clock())))

        # Step 5: 在 head 仓库建分支，指向 base 分支当前 head
        async def create_head_ref() -> None:
            await api.create_ref(head_repo, f"refs/heads/{head_branch}", base_branch.head_commit_sha)

        await retry_with_fixed_delay(
            create_head_ref,
            retries=FORK_REF_RETRY_ATTEMPTS if decision.needs_fork else 0,
            delay_seconds=FORK_REF_RETRY_DELAY_SECONDS,
            sleep=sleep,
        )
        logger.info(f"Created branch {head_repo.owner}:{head_branch} at {base_branch.head_commit_sha}")

    # Step 6-8: 读文件 -> 解码 -> replace
    file_state = await _resolve_file_state(api, head_repo, request.file_path, head_branch)
    old_content = decode_content(file_state)
    new_content = request.replace(old_content)
    if new_content == old_content:
        raise NoChangeError(request.file_path)

    # Step 9: 提交（带原 blob sha 做乐观并发，冲突直接上抛）
    commit_message = request.commit_message or default_commit_message(request.file_path)
    commit = await api.create_or_update_file(
        head_repo,
        request.file_path,
        commit_message,
        encode_content(new_content),
        file_state.blob_sha,
        head_branch,
    )
    logger.info(f"Committed {commit.commit.sha} to {head_repo.owner}/{head_repo.repo}:{head_branch}")

    if not decision.needs_pr:
        return commit.commit.html_url

    # Step 10: PR 从 head_repo:head_branch 回到 base_repo:base_branch
    title, body = split_commit_message(commit_message)
    pull_request = await api.create_pull_request(
        base_repo,
        base_branch.name,
        f"{head_repo.owner}:{head_branch}",
        title,
        body,
    )
    logger.info(f"Opened pull request #{pull_request.number}: {pull_request.html_url}")
    return pull_request.html_url
