"""
FastAPI 服务入口。

这里做三件事：
- 加载配置（严格校验环境变量）
- 组装外部依赖（HTTP Client / GitHub Client）
- 装配路由（health + edit-blob）

注意：
- 业务流程不写在这里（由 `editor/workflow.py` 负责）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import httpx
import uvicorn
from fastapi import FastAPI

from blob_editor.api.routes import build_edit_blob_router
from blob_editor.config import load_config_from_env
from blob_editor.github.client import GitHubClient


def build_app(environ: Mapping[str, str] | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """创建并返回 FastAPI app（便于测试/复用）。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    config = load_config_from_env(os.environ if environ is None else environ)
    logging.basicConfig(level=config.log_level)

    # 2) 可复用的 HTTP client：所有 GitHub API 调用共用
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.http_timeout_seconds))

    # 3) GitHub client：对应 editor 依赖的能力集合
    github_client = GitHubClient(
        api_base_url=str(config.github.api_base_url),
        token=config.github.token,
        http_client=http_client,
    )

    app = FastAPI(title="GitHub Blob Editor", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"status": "ok"}

    app.include_router(build_edit_blob_router(github_api=github_client))
    return app


def main() -> None:
    """本地启动：`python -m blob_editor.main`（生产建议 `uvicorn blob_editor.main:build_app --factory`）。"""
    uvicorn.run(build_app, factory=True, host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))


if __name__ == "__main__":
    main()
