"""编译器加固参数与目标编译前的准备

加固参数参考 OWASP C-Based Toolchain Hardening Cheat Sheet，
固定且不可配置，每次生成只输出一次，位于所有目标声明之前。
"""

from __future__ import annotations

from collections.abc import Iterable

from mkbuild.cmake import commands
from mkbuild.cmake.conditionals import if_apple, if_compiler_family
from mkbuild.cmake.emitter import CMakeEmitter
from mkbuild.core.models import FunctionCheck, SymbolCheck

_GNU_COMMON_FLAGS = (
    "-Werror",
    "-Wall",
    "-Wextra",
    "-Wconversion",
    "-Wcast-align",
    "-Wformat=2",
    "-Wformat-security",
    "-fno-common",
)
_GNU_LATE_COMMON_FLAGS = (
    "-Wmissing-declarations",
    "-Wstrict-overflow",
)
# GCC 只在编译 C 代码时支持这两个选项，Clang 两种语言都支持
_PROTOTYPE_FLAGS = (
    "-Wmissing-prototypes",
    "-Wstrict-prototypes",
)
_CXX_FLAGS = (
    "-Woverloaded-virtual",
    "-Wreorder",
    "-Wsign-promo",
    "-Wnon-virtual-dtor",
)
_LINKER_FLAGS = (
    "-Wl,-z,noexecstack",
    "-Wl,-z,now",
    "-Wl,-z,relro",
    "-Wl,-z,nodlopen",
    "-Wl,-z,nodump",
)


def _append(emitter: CMakeEmitter, variable: str, flags: Iterable[str]) -> None:
    for flag in flags:
        emitter.write_line(f'set({variable} "${{{variable}}} {flag}")')


def emit_restrictive_compiler_flags(emitter: CMakeEmitter) -> None:
    """输出按编译器家族分支的加固参数块"""
    emitter.write_section_comment("Set restrictive compiler flags")

    def gnu_like() -> None:
        _append(emitter, "MK_COMMON_FLAGS", _GNU_COMMON_FLAGS)
        emitter.write_line('if("${CMAKE_CXX_COMPILER_ID}" MATCHES "Clang")')
        with emitter.with_indent():
            _append(emitter, "MK_COMMON_FLAGS", _PROTOTYPE_FLAGS)
        emitter.write_line("else()")
        with emitter.with_indent():
            _append(emitter, "MK_C_FLAGS", _PROTOTYPE_FLAGS)
        emitter.write_line("endif()")
        _append(emitter, "MK_COMMON_FLAGS", _GNU_LATE_COMMON_FLAGS)
        emitter.write_line('if("${CMAKE_CXX_COMPILER_ID}" STREQUAL "GNU")')
        with emitter.with_indent():
            _append(emitter, "MK_COMMON_FLAGS", ("-Wtrampolines",))
        emitter.write_line("endif()")
        _append(emitter, "MK_CXX_FLAGS", _CXX_FLAGS)
        _append(emitter, "MK_COMMON_FLAGS", ("-fstack-protector-all",))
        if_apple(emitter, lambda: None, lambda: _append(emitter, "MK_LD_FLAGS", _LINKER_FLAGS))
        emitter.write_line("add_definitions(-D_FORTIFY_SOURCE=2)")

    def msvc() -> None:
        _append(emitter, "MK_COMMON_FLAGS", ("/WX", "/W4"))
        _append(emitter, "MK_LD_FLAGS", ("/WX",))

    if_compiler_family(emitter, gnu_like, msvc)
    emitter.write_line('set(CMAKE_C_FLAGS "${CMAKE_C_FLAGS} ${MK_COMMON_FLAGS} ${MK_C_FLAGS}")')
    emitter.write_line(
        'set(CMAKE_CXX_FLAGS "${CMAKE_CXX_FLAGS} ${MK_COMMON_FLAGS} ${MK_CXX_FLAGS}")'
    )
    emitter.write_line(
        'set(CMAKE_EXE_LINKER_FLAGS "${CMAKE_EXE_LINKER_FLAGS} ${MK_LD_FLAGS}")'
    )
    emitter.write_line(
        'set(CMAKE_SHARED_LINKER_FLAGS "${CMAKE_SHARED_LINKER_FLAGS} ${MK_LD_FLAGS}")'
    )
    emitter.write_line('if("${WIN32}")')
    with emitter.with_indent():
        # NI_NUMERICSERV 和 WSAPoll 需要 Vista 及以上
        emitter.write_line("add_definitions(-D_WIN32_WINNT=0x0600)")
    emitter.write_line("endif()")


def emit_platform_checks(
    emitter: CMakeEmitter,
    function_checks: Iterable[FunctionCheck],
    symbol_checks: Iterable[SymbolCheck],
) -> None:
    """输出清单中声明的可选函数/符号检查；两者都为空时不输出任何内容"""
    function_checks = list(function_checks)
    symbol_checks = list(symbol_checks)
    if not function_checks and not symbol_checks:
        return
    emitter.write_section_comment("Platform checks")
    for fc in function_checks:
        commands.check_function_exists(emitter, fc.name, fc.define)
    for sc in symbol_checks:
        commands.check_symbol_exists(emitter, sc.name, sc.header, sc.define)


def emit_prepare_for_targets(emitter: CMakeEmitter) -> None:
    """把累积的定义/头文件目录/链接库应用到之后声明的全部目标"""
    emitter.write_section_comment("Prepare for compiling targets")
    emitter.write_line("add_definitions(${CMAKE_REQUIRED_DEFINITIONS})")
    emitter.write_line("include_directories(${CMAKE_REQUIRED_INCLUDES})")
    emitter.write_line("link_libraries(${CMAKE_REQUIRED_LIBRARIES})")
