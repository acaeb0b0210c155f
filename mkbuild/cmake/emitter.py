"""CMakeLists.txt 文本输出器

所有生成的 CMake 文本都经由 CMakeEmitter 写入:
- 只追加，不回写
- 每行自动加上当前缩进，缩进只能通过 with_indent() 成对进出
- close() 把缓冲区一次性原子写入目标文件，之后实例不可再用

每次生成创建一个实例，显式传给各个输出函数，不使用全局单例。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mkbuild.core.exceptions import EmitterClosedError
from mkbuild.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

INDENT = "  "

CMAKE_MINIMUM_VERSION = "3.12.0"

# CMakeEmitter.open() 写入的固定前导，project() 在其中由工程名替换
_PREAMBLE_INCLUDES = (
    "CheckIncludeFileCXX",
    "CheckLibraryExists",
    "CheckCXXCompilerFlag",
    "CheckFunctionExists",
    "CheckCXXSymbolExists",
)
_PREAMBLE_SETTINGS = (
    "set(THREADS_PREFER_PTHREAD_FLAG ON)",
    "find_package(Threads REQUIRED)",
    "set(CMAKE_POSITION_INDEPENDENT_CODE ON)",
    "set(CMAKE_CXX_STANDARD 11)",
    "set(CMAKE_CXX_STANDARD_REQUIRED ON)",
    "set(CMAKE_CXX_EXTENSIONS OFF)",
    "set(CMAKE_C_STANDARD 11)",
    "set(CMAKE_C_STANDARD_REQUIRED ON)",
    "set(CMAKE_C_EXTENSIONS OFF)",
    "list(APPEND CMAKE_REQUIRED_LIBRARIES Threads::Threads)",
)


class CMakeEmitter:
    """带缩进作用域的只追加文本缓冲区"""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._indent = ""
        self._closed = False

    @classmethod
    def open(cls, name: str) -> CMakeEmitter:
        """创建输出器并写入工程前导（版本要求、工具链设置、平台库）"""
        emitter = cls()
        emitter.write_line("# Autogenerated file; DO NOT EDIT!")
        emitter.write_line(f"cmake_minimum_required(VERSION {CMAKE_MINIMUM_VERSION})")
        emitter.write_line(f'project("{name}")')
        emitter.write_empty_line()
        for module in _PREAMBLE_INCLUDES:
            emitter.write_line(f"include({module})")
        for line in _PREAMBLE_SETTINGS:
            emitter.write_line(line)
        emitter.write_line('if("${WIN32}")')
        with emitter.with_indent():
            emitter.write_line("list(APPEND CMAKE_REQUIRED_LIBRARIES ws2_32 crypt32)")
            emitter.write_line('if("${MINGW}")')
            with emitter.with_indent():
                emitter.write_line(
                    "list(APPEND CMAKE_REQUIRED_LIBRARIES -static-libgcc -static-libstdc++)"
                )
            emitter.write_line("endif()")
        emitter.write_line("endif()")
        emitter.write_line("enable_testing()")
        return emitter

    # ---- 写入 ----

    def write_line(self, text: str = "") -> None:
        """追加一行；空字符串只追加换行，不带缩进"""
        self._check_open()
        self._lines.append(f"{self._indent}{text}" if text else "")

    def write_empty_line(self) -> None:
        self.write_line("")

    def write_section_comment(self, title: str) -> None:
        """追加统一格式的分节注释"""
        self.write_empty_line()
        self.write_line("#")
        self.write_line(f"# {title}")
        self.write_line("#")
        self.write_empty_line()

    @contextmanager
    def with_indent(self, extra: str = INDENT) -> Iterator[None]:
        """在作用域内追加缩进，退出时（包括异常）恢复原缩进"""
        self._check_open()
        previous = self._indent
        self._indent = previous + extra
        try:
            yield
        finally:
            self._indent = previous

    # ---- 查询 ----

    @property
    def indent(self) -> str:
        return self._indent

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def getvalue(self) -> str:
        """返回目前累积的全部文本"""
        return "".join(f"{line}\n" for line in self._lines)

    # ---- 落盘 ----

    def close(self, path: str | Path) -> Path:
        """把缓冲区一次性写入 path（覆盖已有内容），之后实例不可再用

        写入失败时 OSError 直接向上抛出，调用方不应信任任何部分产物。
        """
        self._check_open()
        target = Path(path)
        atomic_write(target, self.getvalue())
        self._closed = True
        logger.info(
            "已写入 %s (%d 行)", target, len(self._lines),
            extra={"artifact": str(target), "lines": len(self._lines)},
        )
        return target

    def _check_open(self) -> None:
        if self._closed:
            raise EmitterClosedError("CMake 输出器已关闭，不能继续写入")
