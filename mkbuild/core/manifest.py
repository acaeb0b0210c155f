"""MKBuild.yaml 清单读取与校验

职责:
- 从 YAML 文件加载清单
- 按 schema 版本一次性校验全部字段，收集所有问题后统一报错
- 为可选字段填充文档化的默认值，下游生成逻辑不再处理缺失字段

清单示例:

    name: demo
    dependencies:
      - github.com/adishavit/argh
    targets:
      executables:
        demo:
          compile: [main.cc]
    tests:
      smoke:
        command: ./demo --help
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any

import yaml

from mkbuild.core.exceptions import ConfigError, ValidationError
from mkbuild.core.models import (
    MANIFEST_VERSION,
    BuildInfo,
    FunctionCheck,
    LibraryBuildInfo,
    PackageInfo,
    ScriptBuildInfo,
    SymbolCheck,
    TargetsInfo,
    TestInfo,
)
from mkbuild.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = frozenset((
    "version", "name", "dependencies", "targets", "tests",
    "function_checks", "symbol_checks", "docker", "docker_tc_disabled",
))
_TARGET_GROUPS = ("libraries", "executables", "scripts")


def read_manifest(path: str | Path) -> PackageInfo:
    """读取并校验清单文件

    异常:
        ConfigError: 文件不存在或 YAML 无法解析
        ValidationError: 内容不符合 schema，details 中列出每一处问题
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"清单文件不存在: {p}")
    try:
        data = load_yaml(p)
    except yaml.YAMLError as e:
        raise ConfigError(f"无法解析清单文件 {p}: {e}") from e
    except (OSError, ValueError) as e:
        raise ConfigError(f"无法读取清单文件 {p}: {e}") from e
    package = parse_manifest(data, source=str(p))
    logger.info(
        "已加载清单 %s: %s (%d 个依赖, %d 个目标, %d 个测试)",
        p, package.name, len(package.dependencies),
        len(package.targets.names()), len(package.tests),
    )
    return package


def parse_manifest(data: dict[str, Any], source: str = "<manifest>") -> PackageInfo:
    """把已解析的 YAML 字典转换为 PackageInfo"""
    errors: list[str] = []

    unknown = sorted(set(data) - _TOP_LEVEL_KEYS, key=str)
    if unknown:
        logger.warning("%s 含未识别的字段，已忽略: %s", source, ", ".join(map(str, unknown)))

    version = data.get("version", MANIFEST_VERSION)
    if version != MANIFEST_VERSION:
        errors.append(f"version: 不支持的清单版本 {version!r}（仅支持 {MANIFEST_VERSION}）")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("name: 必须为非空字符串")
        name = ""

    dependencies = _string_list(data.get("dependencies"), "dependencies", errors)
    seen: set[str] = set()
    for dep in dependencies:
        if dep in seen:
            errors.append(f"dependencies: 重复的依赖 {dep!r}")
        seen.add(dep)

    targets = _parse_targets(data.get("targets"), errors)
    tests = _parse_tests(data.get("tests"), errors)
    function_checks = _parse_function_checks(data.get("function_checks"), errors)
    symbol_checks = _parse_symbol_checks(data.get("symbol_checks"), errors)

    docker = data.get("docker", "")
    if docker is None:
        docker = ""
    if not isinstance(docker, str):
        errors.append("docker: 必须为字符串")
        docker = ""

    tc_disabled = _bool(data.get("docker_tc_disabled"), "docker_tc_disabled", errors)

    if errors:
        raise ValidationError(f"清单校验失败: {source}", details=errors)

    return PackageInfo(
        name=name,
        version=version,
        dependencies=dependencies,
        targets=targets,
        tests=tests,
        function_checks=function_checks,
        symbol_checks=symbol_checks,
        docker=docker,
        docker_tc_disabled=tc_disabled,
    )


# =========================================================================
# 字段级校验
# =========================================================================

def _string_list(value: Any, where: str, errors: list[str]) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(f"{where}: 必须为字符串列表")
        return []
    result: list[str] = []
    for i, entry in enumerate(value):
        if not isinstance(entry, str) or not entry.strip():
            errors.append(f"{where}[{i}]: 必须为非空字符串")
            continue
        result.append(entry)
    return result


def _bool(value: Any, where: str, errors: list[str]) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        errors.append(f"{where}: 必须为布尔值")
        return False
    return value


def _mapping(value: Any, where: str, errors: list[str]) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors.append(f"{where}: 必须为映射")
        return {}
    return value


def _parse_targets(value: Any, errors: list[str]) -> TargetsInfo:
    raw = _mapping(value, "targets", errors)
    for key in sorted(set(raw) - set(_TARGET_GROUPS), key=str):
        errors.append(f"targets.{key}: 未知的目标类型（可选: {', '.join(_TARGET_GROUPS)}）")

    targets = TargetsInfo()
    for name, info in _mapping(raw.get("libraries"), "targets.libraries", errors).items():
        where = f"targets.libraries.{name}"
        entry = _mapping(info, where, errors)
        build = _build_info(entry, where, errors, allowed={"compile", "link", "install", "headers"})
        targets.libraries[str(name)] = LibraryBuildInfo(
            compile=build.compile,
            link=build.link,
            install=build.install,
            headers=_string_list(entry.get("headers"), f"{where}.headers", errors),
        )
    for name, info in _mapping(raw.get("executables"), "targets.executables", errors).items():
        where = f"targets.executables.{name}"
        entry = _mapping(info, where, errors)
        targets.executables[str(name)] = _build_info(
            entry, where, errors, allowed={"compile", "link", "install"},
        )
    for name, info in _mapping(raw.get("scripts"), "targets.scripts", errors).items():
        where = f"targets.scripts.{name}"
        entry = _mapping(info, where, errors)
        for key in sorted(set(entry) - {"install"}, key=str):
            errors.append(f"{where}.{key}: 未知字段")
        targets.scripts[str(name)] = ScriptBuildInfo(
            install=_bool(entry.get("install"), f"{where}.install", errors),
        )
    return targets


def _build_info(
    entry: dict[str, Any], where: str, errors: list[str], *, allowed: set[str],
) -> BuildInfo:
    for key in sorted(set(entry) - allowed, key=str):
        errors.append(f"{where}.{key}: 未知字段")
    compile_sources = _string_list(entry.get("compile"), f"{where}.compile", errors)
    if not compile_sources:
        errors.append(f"{where}.compile: 至少需要一个源文件")
    return BuildInfo(
        compile=compile_sources,
        link=_string_list(entry.get("link"), f"{where}.link", errors),
        install=_bool(entry.get("install"), f"{where}.install", errors),
    )


def _parse_tests(value: Any, errors: list[str]) -> dict[str, TestInfo]:
    tests: dict[str, TestInfo] = {}
    for name, info in _mapping(value, "tests", errors).items():
        where = f"tests.{name}"
        # 简写形式: `name: [prog, --flag]`
        command: Any = info
        if isinstance(info, dict):
            for key in sorted(set(info) - {"command"}, key=str):
                errors.append(f"{where}.{key}: 未知字段")
            command = info.get("command")
            where = f"{where}.command"
        argv = _command(command, where, errors)
        if argv is not None:
            tests[str(name)] = TestInfo(command=argv)
    return tests


def _command(value: Any, where: str, errors: list[str]) -> list[str] | None:
    if isinstance(value, str):
        try:
            argv = shlex.split(value)
        except ValueError as e:
            errors.append(f"{where}: 无法拆分命令行: {e}")
            return None
    elif isinstance(value, list):
        argv = _string_list(value, where, errors)
    else:
        errors.append(f"{where}: 必须为字符串或字符串列表")
        return None
    if not argv:
        errors.append(f"{where}: 命令不能为空")
        return None
    return argv


def _required_str(entry: dict[str, Any], key: str, where: str, errors: list[str]) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"{where}.{key}: 必须为非空字符串")
        return ""
    return value


def _parse_function_checks(value: Any, errors: list[str]) -> list[FunctionCheck]:
    checks: list[FunctionCheck] = []
    if value is None:
        return checks
    if not isinstance(value, list):
        errors.append("function_checks: 必须为列表")
        return checks
    for i, entry in enumerate(value):
        where = f"function_checks[{i}]"
        if not isinstance(entry, dict):
            errors.append(f"{where}: 必须为映射")
            continue
        checks.append(FunctionCheck(
            name=_required_str(entry, "name", where, errors),
            define=_required_str(entry, "define", where, errors),
        ))
    return checks


def _parse_symbol_checks(value: Any, errors: list[str]) -> list[SymbolCheck]:
    checks: list[SymbolCheck] = []
    if value is None:
        return checks
    if not isinstance(value, list):
        errors.append("symbol_checks: 必须为列表")
        return checks
    for i, entry in enumerate(value):
        where = f"symbol_checks[{i}]"
        if not isinstance(entry, dict):
            errors.append(f"{where}: 必须为映射")
            continue
        checks.append(SymbolCheck(
            name=_required_str(entry, "name", where, errors),
            header=_required_str(entry, "header", where, errors),
            define=_required_str(entry, "define", where, errors),
        ))
    return checks
