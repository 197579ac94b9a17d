from __future__ import annotations

"""
Blob editor 的逻辑错误类型。

两者都不是瞬时故障：直接失败，永不重试。
"""


class BlobEditError(RuntimeError):
    """编辑流程中的逻辑错误基类。"""

    pass


class NotAFileError(BlobEditError):
    """目标 path 指向目录（或 symlink/submodule），不是普通文件。"""

    def __init__(self, path: str, kind: str = "dir") -> None:
        super().__init__(f"expected '{path}' is a file, got a {'directory' if kind == 'dir' else kind}")
        self.path = path
        self.kind = kind


class NoChangeError(BlobEditError):
    """replace 之后内容没有变化，通常说明调用方的匹配规则写错了。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"no replacements occurred in '{path}'")
        self.path = path
