"""生成服务 — 清单 → CMakeLists.txt

生成流程严格按以下顺序进行，任何一步失败都会中止整次生成:

  打开输出器（前导） → 依赖规则（清单顺序） → 平台检查 → 编译器加固参数
  → 目标编译准备 → 构建目标 → 测试 → 落盘

输出全部在内存中累积，只有完整生成后才原子写入目标文件，
因此失败的生成不会破坏上一次的产物。
"""

from __future__ import annotations

import logging
from pathlib import Path

from mkbuild.cmake import flags, targets
from mkbuild.cmake.emitter import CMakeEmitter
from mkbuild.core.config import Config
from mkbuild.core.exceptions import DependencyError
from mkbuild.core.manifest import read_manifest
from mkbuild.core.models import PackageInfo
from mkbuild.deps.emit import apply_rule
from mkbuild.deps.registry import DependencyRegistry

logger = logging.getLogger(__name__)


class GenerateService:
    """CMakeLists.txt 生成"""

    def __init__(
        self,
        config: Config | None = None,
        registry: DependencyRegistry | None = None,
    ) -> None:
        if config is None:
            from mkbuild.core.config import get_config
            config = get_config()
        self.config = config
        self.registry = registry or DependencyRegistry()

    def render(self, package: PackageInfo) -> CMakeEmitter:
        """在内存中生成完整文本，返回尚未落盘的输出器

        异常:
            DependencyError: fatal 策略下清单引用了未知依赖
        """
        self._check_dependencies(package.dependencies)

        emitter = CMakeEmitter.open(package.name)
        for identifier in package.dependencies:
            rule = self.registry.get(identifier)
            if rule is None:
                logger.warning("未知依赖，已跳过: %s", identifier, extra={"dependency": identifier})
                continue
            logger.info(
                "依赖 %s (%s)", identifier, rule.kind.value,
                extra={"dependency": identifier, "kind": rule.kind.value},
            )
            apply_rule(emitter, rule)

        flags.emit_platform_checks(emitter, package.function_checks, package.symbol_checks)
        flags.emit_restrictive_compiler_flags(emitter)
        flags.emit_prepare_for_targets(emitter)
        targets.emit_targets(emitter, package.targets)
        targets.emit_tests(emitter, package.tests)
        return emitter

    def generate(self, package: PackageInfo, output: str | Path | None = None) -> Path:
        """生成并写入 CMakeLists.txt，返回写入的路径"""
        emitter = self.render(package)
        return emitter.close(Path(output or self.config.output))

    def generate_from_manifest(
        self,
        manifest_path: str | Path | None = None,
        output: str | Path | None = None,
    ) -> Path:
        package = read_manifest(manifest_path or self.config.manifest)
        return self.generate(package, output)

    def _check_dependencies(self, identifiers: list[str]) -> None:
        if self.config.unknown_dependency_policy != "fatal":
            return
        unknown = self.registry.find_unknown(identifiers)
        if unknown:
            raise DependencyError(
                f"未知依赖: {', '.join(unknown)}", details=unknown,
            )
