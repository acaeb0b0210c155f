"""统一异常体系

所有业务异常继承 MkbuildError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出友好提示并以非零状态退出。
"""

from __future__ import annotations


class MkbuildError(Exception):
    """mkbuild 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(MkbuildError):
    """配置文件或清单文件缺失、无法解析"""

    code = "CONFIG_ERROR"


class ValidationError(MkbuildError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class DependencyError(MkbuildError):
    """清单引用了注册表中不存在的依赖"""

    code = "DEPENDENCY_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class EmitterClosedError(MkbuildError):
    """CMake 输出器已关闭后仍被写入"""

    code = "EMITTER_CLOSED"


class ExecutionError(MkbuildError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"
