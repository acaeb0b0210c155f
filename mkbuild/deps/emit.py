"""依赖规则解释器

把 DependencyRule 记录翻译为 CMake 文本。每条规则输出且只输出一个
以依赖标识为标题的分节注释，之后按规则类别输出下载/检查/注册语句。
"""

from __future__ import annotations

import logging

from mkbuild.cmake import commands
from mkbuild.cmake.conditionals import Conditional, if_apple, if_pointer_width, if_windows
from mkbuild.cmake.emitter import CMakeEmitter
from mkbuild.deps.models import (
    DependencyRule,
    PrebuiltPackage,
    RuleKind,
    SystemLibrary,
)

logger = logging.getLogger(__name__)


def apply_rule(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    """输出 rule 对应的全部 CMake 语句"""
    if rule.deprecation:
        logger.warning("依赖 %s 已弃用: %s", rule.identifier, rule.deprecation)
    emitter.write_section_comment(rule.identifier)
    handler = _HANDLERS[rule.kind]
    handler(emitter, rule)


# =========================================================================
# 各类别的输出
# =========================================================================

def _single_header(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    download = _payload(rule, "download")
    header = download.filename
    commands.mkdir_all(emitter, commands.INCLUDE_DIR)
    commands.download(
        emitter, f"{commands.INCLUDE_DIR}/{header}", download.sha256, download.url,
    )
    commands.add_include_dir(emitter, commands.INCLUDE_DIR)
    commands.require_header_exists(emitter, header)


def _single_asset(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    download = _payload(rule, "download")
    commands.mkdir_all(emitter, commands.DATA_DIR)
    commands.download(
        emitter, f"{commands.DATA_DIR}/{download.filename}", download.sha256, download.url,
    )


def _archive_bundle(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    download = _payload(rule, "download")
    _download_and_extract(emitter, download.filename, download.sha256, download.url)


def _system_library(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    _emit_system(emitter, _payload(rule, "system"))


def _platform_prebuilt(emitter: CMakeEmitter, rule: DependencyRule) -> None:
    prebuilt = _payload(rule, "prebuilt")
    system = _payload(rule, "system")
    if_windows(
        emitter,
        lambda: _emit_prebuilt(emitter, prebuilt),
        lambda: _emit_system(emitter, system),
    )


# ---- 共用片段 ----

def _download_and_extract(emitter: CMakeEmitter, filename: str, sha256: str, url: str) -> None:
    archive = f"{commands.DOWNLOAD_DIR}/{filename}"
    commands.mkdir_all(emitter, commands.DOWNLOAD_DIR)
    commands.download(emitter, archive, sha256, url)
    commands.extract_archive(emitter, archive, commands.DOWNLOAD_DIR)


def _emit_homebrew(emitter: CMakeEmitter, prefix: str) -> None:
    with Conditional(emitter) as cond:
        with cond.when(f'EXISTS "{prefix}"'):
            emitter.write_line(f'set(CMAKE_CXX_FLAGS "${{CMAKE_CXX_FLAGS}} -I{prefix}/include")')
            for kind in ("EXE", "SHARED", "STATIC"):
                variable = f"CMAKE_{kind}_LINKER_FLAGS"
                emitter.write_line(f'set({variable} "${{{variable}}} -L{prefix}/lib")')


def _emit_system(emitter: CMakeEmitter, system: SystemLibrary) -> None:
    if system.homebrew_prefix:
        prefix = system.homebrew_prefix
        if_apple(emitter, lambda: _emit_homebrew(emitter, prefix))
    for header in system.headers:
        commands.require_header_exists(emitter, header)
    for lib in system.libraries:
        commands.require_library_exists(emitter, lib.name, lib.symbol)
        commands.add_library(emitter, lib.name)


def _emit_prebuilt(emitter: CMakeEmitter, prebuilt: PrebuiltPackage) -> None:
    _download_and_extract(emitter, prebuilt.filename, prebuilt.sha256, prebuilt.url)
    if_pointer_width(
        emitter,
        lambda: emitter.write_line('set(MK_ARCH "x86")'),
        lambda: emitter.write_line('set(MK_ARCH "x64")'),
    )
    root = f"{commands.DOWNLOAD_DIR}/{prebuilt.prefix}/${{MK_ARCH}}"
    commands.add_include_dir(emitter, f"{root}/include")
    commands.require_header_exists(emitter, prebuilt.header)
    for lib in prebuilt.libraries:
        path = f"{root}/lib/{lib.name}"
        commands.require_library_exists(
            emitter, path, lib.symbol,
            variable=commands.guard_variable(lib.name, prefix="MK_HAVE_LIB_"),
        )
        commands.add_library(emitter, path)
    for definition in prebuilt.definitions:
        commands.add_definition(emitter, definition)


def _payload(rule: DependencyRule, attr: str):
    value = getattr(rule, attr)
    if value is None:
        raise ValueError(f"依赖 {rule.identifier} 的规则缺少 {attr}")
    return value


_HANDLERS = {
    RuleKind.SINGLE_HEADER: _single_header,
    RuleKind.SINGLE_ASSET: _single_asset,
    RuleKind.SYSTEM_LIBRARY: _system_library,
    RuleKind.PLATFORM_PREBUILT: _platform_prebuilt,
    RuleKind.ARCHIVE_BUNDLE: _archive_bundle,
}
