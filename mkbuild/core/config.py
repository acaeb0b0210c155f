"""集中配置管理

替代各模块散落的默认常量，提供统一的配置入口。
支持从 YAML 文件加载 + 编程式覆盖（CLI 选项）。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields

import yaml

from mkbuild.core.exceptions import ConfigError
from mkbuild.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".mkbuild.yml"

UNKNOWN_DEPENDENCY_POLICIES = ("fatal", "warn")


@dataclass
class Config:
    """mkbuild 全局配置"""

    # 文件
    manifest: str = "MKBuild.yaml"
    output: str = "CMakeLists.txt"
    work_dir: str = ".mkbuild"

    # 未知依赖的处理策略: fatal 直接中止，warn 记录告警后跳过
    unknown_dependency_policy: str = "fatal"

    # 容器
    docker_image: str = "bassosimone/mk-debian"
    docker_mount: str = "/mk"
    # 容器内安装 mkbuild 的 pip 参数，留空则安装同版本的已发布包
    docker_mkbuild_requirement: str = ""

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.unknown_dependency_policy not in UNKNOWN_DEPENDENCY_POLICIES:
            raise ConfigError(
                f"unknown_dependency_policy 取值无效: "
                f"{self.unknown_dependency_policy!r}，"
                f"可选: {', '.join(UNKNOWN_DEPENDENCY_POLICIES)}"
            )

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        if extra:
            logger.warning("配置文件 %s 含未识别的键: %s", path, ", ".join(sorted(map(str, extra))))
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
