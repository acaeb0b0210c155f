"""CMake 输出原语

依赖规则和目标输出都由这些原语拼装而成。全局构建状态统一累积在
CMAKE_REQUIRED_DEFINITIONS / CMAKE_REQUIRED_INCLUDES / CMAKE_REQUIRED_LIBRARIES
三个列表中，CHECK_* 系列检查会自动使用它们，最终在
flags.emit_prepare_for_targets() 中应用到所有目标。
"""

from __future__ import annotations

import re

from mkbuild.cmake.emitter import CMakeEmitter

# 下载产物在构建目录中的位置
MKBUILD_DIR = "${CMAKE_BINARY_DIR}/.mkbuild"
INCLUDE_DIR = f"{MKBUILD_DIR}/include"
DATA_DIR = f"{MKBUILD_DIR}/data"
DOWNLOAD_DIR = f"{MKBUILD_DIR}/download"

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9]")


def guard_variable(name: str, prefix: str = "MK_HAVE_") -> str:
    """由头文件/库/函数名生成检查结果的缓存变量名

    >>> guard_variable("curl/curl.h")
    'MK_HAVE_CURL_CURL_H'
    """
    return prefix + _NON_IDENTIFIER.sub("_", name).upper()


# =========================================================================
# 文件操作（在 CMake 配置阶段执行）
# =========================================================================

def _check_command_error(emitter: CMakeEmitter) -> None:
    emitter.write_line('if("${FAILURE}")')
    with emitter.with_indent():
        emitter.write_line('message(FATAL_ERROR "${FAILURE}")')
    emitter.write_line("endif()")


def mkdir_all(emitter: CMakeEmitter, dirname: str) -> None:
    emitter.write_line(f'message(STATUS "MkdirAll: {dirname}")')
    emitter.write_line("execute_process(COMMAND")
    emitter.write_line(f'  ${{CMAKE_COMMAND}} -E make_directory "{dirname}"')
    emitter.write_line("  RESULT_VARIABLE FAILURE)")
    _check_command_error(emitter)
    emitter.write_empty_line()


def download(emitter: CMakeEmitter, filename: str, sha256: str, url: str) -> None:
    """下载 url 到 filename，由 CMake 校验 SHA256 并强制 TLS 证书校验"""
    emitter.write_line(f'message(STATUS "Download: {url}")')
    emitter.write_line(f"file(DOWNLOAD {url}")
    emitter.write_line(f'  "{filename}"')
    emitter.write_line(f"  EXPECTED_HASH SHA256={sha256}")
    emitter.write_line("  TLS_VERIFY ON)")
    emitter.write_empty_line()


def extract_archive(emitter: CMakeEmitter, filename: str, destdir: str) -> None:
    """在 destdir 中解压 filename（tar.gz / zip 均由 cmake -E tar 处理）"""
    emitter.write_line(f'message(STATUS "Extract: {filename}")')
    emitter.write_line("execute_process(COMMAND")
    emitter.write_line(f'  ${{CMAKE_COMMAND}} -E tar xf "{filename}"')
    emitter.write_line(f'  WORKING_DIRECTORY "{destdir}"')
    emitter.write_line("  RESULT_VARIABLE FAILURE)")
    _check_command_error(emitter)
    emitter.write_empty_line()


# =========================================================================
# 全局构建状态
# =========================================================================

def add_definition(emitter: CMakeEmitter, definition: str) -> None:
    emitter.write_line(f"list(APPEND CMAKE_REQUIRED_DEFINITIONS {definition})")


def add_include_dir(emitter: CMakeEmitter, path: str) -> None:
    emitter.write_line(f'list(APPEND CMAKE_REQUIRED_INCLUDES "{path}")')


def add_library(emitter: CMakeEmitter, library: str) -> None:
    emitter.write_line(f'list(APPEND CMAKE_REQUIRED_LIBRARIES "{library}")')


# =========================================================================
# 平台检查
# =========================================================================

def _require(emitter: CMakeEmitter, item: str, variable: str) -> None:
    emitter.write_line(f'if(NOT ("${{{variable}}}"))')
    with emitter.with_indent():
        emitter.write_line(f'message(FATAL_ERROR "cannot find: {item}")')
    emitter.write_line("endif()")


def require_header_exists(emitter: CMakeEmitter, header: str) -> None:
    variable = guard_variable(header)
    emitter.write_line(f'CHECK_INCLUDE_FILE_CXX("{header}" {variable})')
    _require(emitter, header, variable)


def require_library_exists(
    emitter: CMakeEmitter, library: str, symbol: str, *, variable: str = "",
) -> None:
    """通过链接探测 symbol 确认 library 可用，缺失时让生成的构建直接失败"""
    variable = variable or guard_variable(library, prefix="MK_HAVE_LIB_")
    emitter.write_line(f'CHECK_LIBRARY_EXISTS("{library}" "{symbol}" "" {variable})')
    _require(emitter, library, variable)


def check_function_exists(emitter: CMakeEmitter, function: str, define: str) -> None:
    """可选检查: 函数存在时追加 define"""
    variable = guard_variable(function)
    emitter.write_line(f'CHECK_FUNCTION_EXISTS("{function}" {variable})')
    _add_definition_if(emitter, variable, define)


def check_symbol_exists(emitter: CMakeEmitter, symbol: str, header: str, define: str) -> None:
    """可选检查: header 中声明了 symbol 时追加 define"""
    variable = guard_variable(symbol)
    emitter.write_line(f'CHECK_CXX_SYMBOL_EXISTS("{symbol}" "{header}" {variable})')
    _add_definition_if(emitter, variable, define)


def _add_definition_if(emitter: CMakeEmitter, variable: str, define: str) -> None:
    emitter.write_line(f'if("${{{variable}}}")')
    if not define.startswith("-D"):
        define = f"-D{define}"
    with emitter.with_indent():
        add_definition(emitter, define)
    emitter.write_line("endif()")
