"""构建目标与测试的输出

目标和测试都按名称排序后输出，保证同一份清单多次生成的结果逐字节一致，
与 YAML 中映射的书写顺序无关。
"""

from __future__ import annotations

import posixpath
import re

from mkbuild.cmake.emitter import CMakeEmitter
from mkbuild.core.models import (
    BuildInfo,
    LibraryBuildInfo,
    ScriptBuildInfo,
    TargetsInfo,
    TestInfo,
)


# 需要加引号才能作为单个 CMake 参数的字符
_NEEDS_QUOTING = re.compile(r"[\s;()\"#\\]")


def quote_argument(arg: str) -> str:
    """把单个参数转成 CMake 参数形式，空串和含特殊字符的参数加双引号"""
    if arg and not _NEEDS_QUOTING.search(arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _write_call(emitter: CMakeEmitter, command: str, head: str, args: list[str]) -> None:
    """多行形式的 CMake 调用，每个参数独占一行"""
    emitter.write_line(f"{command}(")
    with emitter.with_indent():
        emitter.write_line(head)
        for arg in args:
            emitter.write_line(quote_argument(arg))
    emitter.write_line(")")


def _link(emitter: CMakeEmitter, name: str, link: list[str]) -> None:
    if link:
        _write_call(emitter, "target_link_libraries", name, link)


def emit_library(emitter: CMakeEmitter, name: str, info: LibraryBuildInfo) -> None:
    emitter.write_section_comment(f"library: {name}")
    _write_call(emitter, "add_library", name, info.compile)
    _link(emitter, name, info.link)
    if not info.install:
        return
    emitter.write_line(f"install(TARGETS {name} DESTINATION lib)")
    # 头文件按所在目录分组安装，保留 include/<dir>/ 层级
    by_dir: dict[str, list[str]] = {}
    for header in info.headers:
        by_dir.setdefault(posixpath.dirname(header), []).append(header)
    for dirname in sorted(by_dir):
        destination = posixpath.join("include", dirname) if dirname else "include"
        emitter.write_line(
            f"install(FILES {' '.join(by_dir[dirname])} DESTINATION {destination})"
        )


def emit_executable(emitter: CMakeEmitter, name: str, info: BuildInfo) -> None:
    emitter.write_section_comment(f"executable: {name}")
    _write_call(emitter, "add_executable", name, info.compile)
    _link(emitter, name, info.link)
    if info.install:
        emitter.write_line(f"install(TARGETS {name} DESTINATION bin)")


def emit_script(emitter: CMakeEmitter, name: str, info: ScriptBuildInfo) -> None:
    emitter.write_section_comment(f"script: {name}")
    if info.install:
        emitter.write_line(f"install(PROGRAMS {name} DESTINATION bin)")


def emit_targets(emitter: CMakeEmitter, targets: TargetsInfo) -> None:
    """依次输出库、可执行文件、脚本，每组内按名称排序"""
    for name in sorted(targets.libraries):
        emit_library(emitter, name, targets.libraries[name])
    for name in sorted(targets.executables):
        emit_executable(emitter, name, targets.executables[name])
    for name in sorted(targets.scripts):
        emit_script(emitter, name, targets.scripts[name])


def emit_tests(emitter: CMakeEmitter, tests: dict[str, TestInfo]) -> None:
    for name in sorted(tests):
        emitter.write_section_comment(f"test: {name}")
        _write_call(emitter, "add_test", f"NAME {name} COMMAND", tests[name].command)
