"""
Blob editor HTTP 接入层。

职责：
- 解析请求体 -> Pydantic schema
- 把 replace 描述转成函数
- 调用 `edit_blob`，把错误映射成 HTTP 状态码（调用方错误 4xx，上游问题 502）
"""

from __future__ import annotations

import binascii
import logging

from fastapi import APIRouter
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

from blob_editor.editor.errors import BlobEditError
from blob_editor.editor.models import EditRequest
from blob_editor.editor.protocols import GitHubApi
from blob_editor.editor.replacers import InvalidReplacementError
from blob_editor.editor.replacers import ReplaceSpec
from blob_editor.editor.replacers import build_replacer
from blob_editor.editor.workflow import edit_blob
from blob_editor.github.client import GitHubApiError

logger = logging.getLogger(__name__)


class EditBlobBody(BaseModel):
    owner: str
    repo: str
    file_path: str
    replace: ReplaceSpec
    branch: str | None = None
    commit_message: str | None = None


class EditBlobResponse(BaseModel):
    url: str


def build_edit_blob_router(github_api: GitHubApi) -> APIRouter:
    router = APIRouter()

    @router.post("/edit-blob")
    async def edit_blob_endpoint(body: EditBlobBody) -> EditBlobResponse:
        try:
            replacer = build_replacer(body.replace)
        except InvalidReplacementError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        try:
            url = await edit_blob(
                github_api,
                EditRequest(
                    owner=body.owner,
                    repo=body.repo,
                    file_path=body.file_path,
                    replace=replacer,
                    branch=body.branch,
                    commit_message=body.commit_message,
                ),
            )
        except BlobEditError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except InvalidReplacementError as exc:
            # 分组引用非法要到真正替换时才暴露
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except GitHubApiError as exc:
            logger.error(f"edit-blob failed for {body.owner}/{body.repo}: {exc}")
            raise HTTPException(
                status_code=502,
                detail={"upstream_status": exc.status_code, "message": exc.body},
            ) from exc
        except (ValidationError, binascii.Error, UnicodeDecodeError) as exc:
            # GitHub 返回的结构或文件内容无法解析，属于上游问题
            logger.error(f"edit-blob got unusable upstream data for {body.owner}/{body.repo}: {exc}")
            raise HTTPException(status_code=502, detail={"upstream_status": None, "message": str(exc)}) from exc
        return EditBlobResponse(url=url)

    return router
