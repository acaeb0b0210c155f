"""平台条件分支输出

Conditional 是 if()/elseif()/else()/endif() 的作用域构建器:

    with Conditional(emitter) as cond:
        with cond.when('"${WIN32}"'):
            emitter.write_line(...)
        with cond.otherwise():
            emitter.write_line(...)

离开外层 with 时总会写出 endif()，分支体自动缩进一级，
因此 if/endif 始终成对出现。if_windows() 等便捷函数基于它实现。
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import TracebackType

from mkbuild.cmake.emitter import CMakeEmitter

Body = Callable[[], None]

WIN32 = '"${WIN32}"'
APPLE = '"${APPLE}"'
POINTER_WIDTH_32 = '"${CMAKE_SIZEOF_VOID_P}" EQUAL 4'
POINTER_WIDTH_64 = '"${CMAKE_SIZEOF_VOID_P}" EQUAL 8'
COMPILER_GNU_LIKE = (
    '("${CMAKE_CXX_COMPILER_ID}" STREQUAL "GNU") OR '
    '("${CMAKE_CXX_COMPILER_ID}" MATCHES "Clang")'
)
COMPILER_MSVC = '"${CMAKE_CXX_COMPILER_ID}" STREQUAL "MSVC"'


class Conditional:
    """if/elseif/else/endif 作用域构建器"""

    def __init__(self, emitter: CMakeEmitter) -> None:
        self._emitter = emitter
        self._opened = False
        self._in_branch = False
        self._has_else = False

    def __enter__(self) -> Conditional:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._opened:
            self._emitter.write_line("endif()")
        elif exc_type is None:
            raise RuntimeError("Conditional 至少需要一个 when() 分支")

    @contextmanager
    def when(self, condition: str) -> Iterator[None]:
        """第一个分支写 if()，之后的分支写 elseif()"""
        if self._has_else:
            raise RuntimeError("otherwise() 之后不能再添加分支")
        keyword = "elseif" if self._opened else "if"
        with self._branch(f"{keyword}({condition})"):
            yield

    @contextmanager
    def otherwise(self) -> Iterator[None]:
        """else() 分支，必须是最后一个"""
        if not self._opened:
            raise RuntimeError("otherwise() 之前必须先有 when() 分支")
        if self._has_else:
            raise RuntimeError("同一个 Conditional 只能有一个 otherwise()")
        self._has_else = True
        with self._branch("else()"):
            yield

    @contextmanager
    def _branch(self, header: str) -> Iterator[None]:
        if self._in_branch:
            raise RuntimeError("分支不能嵌套在同一个 Conditional 的另一个分支内")
        self._emitter.write_line(header)
        self._opened = True
        self._in_branch = True
        try:
            with self._emitter.with_indent():
                yield
        finally:
            self._in_branch = False


def if_windows(emitter: CMakeEmitter, then_body: Body, else_body: Body | None = None) -> None:
    """Windows / 非 Windows 分支；else_body 为 None 时省略 else()"""
    _if_else(emitter, WIN32, then_body, else_body)


def if_apple(emitter: CMakeEmitter, then_body: Body, else_body: Body | None = None) -> None:
    """Apple / 非 Apple 分支；else_body 为 None 时省略 else()"""
    _if_else(emitter, APPLE, then_body, else_body)


def if_pointer_width(emitter: CMakeEmitter, body32: Body, body64: Body) -> None:
    """32 位 / 64 位分支，其他指针宽度让生成的构建直接失败"""
    with Conditional(emitter) as cond:
        with cond.when(POINTER_WIDTH_32):
            body32()
        with cond.when(POINTER_WIDTH_64):
            body64()
        with cond.otherwise():
            emitter.write_line('message(FATAL_ERROR "Neither 32 nor 64 bit")')


def if_compiler_family(emitter: CMakeEmitter, gnu_like: Body, msvc: Body) -> None:
    """GCC/Clang 与 MSVC 分支，其他编译器让生成的构建直接失败"""
    with Conditional(emitter) as cond:
        with cond.when(COMPILER_GNU_LIKE):
            gnu_like()
        with cond.when(COMPILER_MSVC):
            msvc()
        with cond.otherwise():
            emitter.write_line(
                'message(FATAL_ERROR "Compiler not supported: ${CMAKE_CXX_COMPILER_ID}")'
            )


def _if_else(
    emitter: CMakeEmitter, condition: str, then_body: Body, else_body: Body | None,
) -> None:
    with Conditional(emitter) as cond:
        with cond.when(condition):
            then_body()
        if else_body is not None:
            with cond.otherwise():
                else_body()
