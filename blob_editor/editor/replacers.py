"""
可序列化的 replace 策略。

HTTP 接口没法传函数，所以用 Pydantic 描述“怎么改”，再转成 `(old) -> new` 的函数交给 editor。
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

Replacer = Callable[[str], str]


class InvalidReplacementError(ValueError):
    """replace 规则本身写错了（正则或分组引用非法），属于调用方错误。"""

    pass


class LiteralReplaceSpec(BaseModel):
    kind: Literal["literal"]
    find: str = Field(min_length=1)
    replace: str
    count: int = Field(default=0, ge=0)


class RegexReplaceSpec(BaseModel):
    kind: Literal["regex"]
    pattern: str = Field(min_length=1)
    replacement: str
    count: int = Field(default=0, ge=0)
    ignore_case: bool = False
    multiline: bool = False


ReplaceSpec = Annotated[Union[LiteralReplaceSpec, RegexReplaceSpec], Field(discriminator="kind")]


def literal_replacer(find: str, replace: str, count: int = 0) -> Replacer:
    """纯文本替换；count=0 表示全部替换。"""
    if not find:
        raise InvalidReplacementError("find must be non-empty")

    def apply(old: str) -> str:
        return old.replace(find, replace, count if count > 0 else -1)

    return apply


def regex_replacer(pattern: str, replacement: str, count: int = 0, flags: int = 0) -> Replacer:
    """正则替换（`re.sub` 语义）；pattern 或分组引用非法时抛 `InvalidReplacementError`。"""
    try:
        compiled = re.compile(pattern, flags)
    except re.error as exc:
        raise InvalidReplacementError(f"Invalid regex pattern {pattern!r}: {exc}") from exc

    def apply(old: str) -> str:
        # 非法的分组引用（例如 \2 但只有一个分组）要到 sub 时才会报错
        try:
            return compiled.sub(replacement, old, count=count)
        except re.error as exc:
            raise InvalidReplacementError(f"Invalid regex replacement {replacement!r}: {exc}") from exc

    return apply


def build_replacer(spec: LiteralReplaceSpec | RegexReplaceSpec) -> Replacer:
    if isinstance(spec, LiteralReplaceSpec):
        return literal_replacer(find=spec.find, replace=spec.replace, count=spec.count)
    flags = 0
    if spec.ignore_case:
        flags |= re.IGNORECASE
    if spec.multiline:
        flags |= re.MULTILINE
    return regex_replacer(pattern=spec.pattern, replacement=spec.replacement, count=spec.count, flags=flags)
