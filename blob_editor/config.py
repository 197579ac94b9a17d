"""
应用配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/数值等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import BaseModel, Field, HttpUrl, ValidationError, field_validator

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


class GitHubConfig(BaseModel):
    """GitHub API 访问配置。"""

    api_base_url: HttpUrl
    token: str


class AppConfig(BaseModel):
    """应用运行所需的配置集合。"""

    github: GitHubConfig
    http_timeout_seconds: float = Field(gt=0)
    log_level: str

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：`GITHUB_TOKEN` 缺失/为空，或任意值非法，都抛 `ValueError`
    """

    token = environ.get("GITHUB_TOKEN", "")
    if not token:
        raise ValueError("Missing required env vars: GITHUB_TOKEN")

    # 交给 Pydantic 做类型校验（例如 URL 合法性、超时必须 > 0）
    try:
        return AppConfig(
            github=GitHubConfig(
                api_base_url=environ.get("GITHUB_API_BASE_URL") or DEFAULT_GITHUB_API_BASE_URL,
                token=token,
            ),
            http_timeout_seconds=environ.get("HTTP_TIMEOUT_SECONDS") or DEFAULT_HTTP_TIMEOUT_SECONDS,
            log_level=environ.get("LOG_LEVEL") or "INFO",
        )
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
