"""容器运行服务 — 在 Docker 中按构建类型编译并运行测试

流程:
  1. 渲染 runner.sh 到 <work_dir>/script/runner.sh（0755，原子写入）
  2. 把当前目录挂载进容器并执行该脚本
  3. 容器输出直接透传到终端，非零退出码视为失败
"""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path

import jinja2

from mkbuild import __version__
from mkbuild.core.config import Config
from mkbuild.core.exceptions import ConfigError, ExecutionError, ValidationError
from mkbuild.core.models import PackageInfo
from mkbuild.utils.shell import CommandExecutor, LocalExecutor
from mkbuild.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

RUNNER_TEMPLATE = "runner.sh.j2"

# 构建类型 → 容器内导出的环境变量
BUILD_TYPES: dict[str, dict[str, str]] = {
    "asan": {
        "CFLAGS": "-fsanitize=address -O1 -fno-omit-frame-pointer",
        "CXXFLAGS": "-fsanitize=address -O1 -fno-omit-frame-pointer",
        "LDFLAGS": "-fsanitize=address -fno-omit-frame-pointer",
        "CMAKE_BUILD_TYPE": "Debug",
    },
    "clang": {
        "CMAKE_BUILD_TYPE": "Release",
        "CXXFLAGS": "-stdlib=libc++",
        "CC": "clang",
        "CXX": "clang++",
    },
    "coverage": {
        "CFLAGS": "-O0 -g -fprofile-arcs -ftest-coverage",
        "CXXFLAGS": "-O0 -g -fprofile-arcs -ftest-coverage",
        "LDFLAGS": "-lgcov",
        "CMAKE_BUILD_TYPE": "Debug",
    },
    "tsan": {
        "CFLAGS": "-fsanitize=thread -O1",
        "CXXFLAGS": "-fsanitize=thread -O1",
        "LDFLAGS": "-fsanitize=thread",
        "CMAKE_BUILD_TYPE": "Debug",
    },
    "ubsan": {
        "CFLAGS": "-fsanitize=undefined -fno-sanitize-recover",
        "CXXFLAGS": "-fsanitize=undefined -fno-sanitize-recover",
        "LDFLAGS": "-fsanitize=undefined",
        "CMAKE_BUILD_TYPE": "Debug",
    },
    "vanilla": {
        "CMAKE_BUILD_TYPE": "Release",
    },
}


def _template_env() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.PackageLoader("mkbuild", "templates"),
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["shquote"] = shlex.quote
    return env


def render_runner_script(
    build_type: str,
    *,
    tc_disabled: bool = False,
    env: dict[str, str] | None = None,
    mount: str = "/mk",
    requirement: str = "",
) -> str:
    """渲染容器内执行的 runner.sh

    build_type 原样写入脚本，未知的构建类型由脚本自身报错退出。
    env 默认取当前进程环境，只读取 CODECOV_TOKEN 和 TRAVIS_BRANCH。
    requirement 是容器内 pip install 的参数，默认 mkbuild==<当前版本>，
    未发布的版本可以改为 git URL 或挂载目录下的源码路径。
    """
    if env is None:
        env = dict(os.environ)
    template = _template_env().get_template(RUNNER_TEMPLATE)
    return template.render(
        version=__version__,
        build_type=build_type,
        codecov_token=env.get("CODECOV_TOKEN", ""),
        travis_branch=env.get("TRAVIS_BRANCH", ""),
        requirement=requirement or f"mkbuild=={__version__}",
        mount=mount,
        tc_disabled=tc_disabled,
        build_types=BUILD_TYPES,
    )


class DockerService:
    """在容器中运行指定构建类型的编译和测试"""

    def __init__(
        self,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        if config is None:
            from mkbuild.core.config import get_config
            config = get_config()
        self.config = config
        self.executor = executor or LocalExecutor()

    @property
    def script_path(self) -> Path:
        return Path(self.config.work_dir) / "script" / "runner.sh"

    def image_for(self, package: PackageInfo) -> str:
        return package.docker or self.config.docker_image

    def write_runner(
        self, build_type: str, package: PackageInfo, env: dict[str, str] | None = None,
    ) -> Path:
        content = render_runner_script(
            build_type,
            tc_disabled=package.docker_tc_disabled,
            env=env,
            mount=self.config.docker_mount,
            requirement=self.config.docker_mkbuild_requirement,
        )
        path = self.script_path
        atomic_write(path, content, mode=0o755)
        logger.info("已写入容器脚本 %s (%s)", path, build_type)
        return path

    def command(self, package: PackageInfo, cwd: str | Path | None = None) -> list[str]:
        """docker run 命令行

        脚本必须位于挂载目录之内，否则容器里看不到它。

        异常:
            ConfigError: work_dir 不在挂载目录之下
        """
        host_dir = (Path(cwd) if cwd is not None else Path.cwd()).resolve()
        script = self.script_path
        if not script.is_absolute():
            script = host_dir / script
        try:
            relative = script.resolve().relative_to(host_dir)
        except ValueError as e:
            raise ConfigError(
                f"work_dir 必须位于挂载目录 {host_dir} 之内: {self.config.work_dir}"
            ) from e
        mount = self.config.docker_mount.rstrip("/")
        return [
            "docker", "run", "--cap-add=NET_ADMIN",
            "-v", f"{host_dir}:{self.config.docker_mount}",
            "-t", self.image_for(package),
            f"{mount}/{relative.as_posix()}",
        ]

    def run(
        self, build_type: str, package: PackageInfo, env: dict[str, str] | None = None,
    ) -> None:
        """写入脚本并在容器中执行

        异常:
            ValidationError: 未知的构建类型
            ConfigError: work_dir 不在挂载目录之下
            ExecutionError: docker 以非零状态退出
        """
        if build_type not in BUILD_TYPES:
            raise ValidationError(
                f"未知的构建类型: {build_type}",
                details=[f"可选: {', '.join(BUILD_TYPES)}"],
            )
        cmd = self.command(package)
        self.write_runner(build_type, package, env)
        logger.info(
            "在容器 %s 中运行 %s 构建", self.image_for(package), build_type,
            extra={"image": self.image_for(package), "build_type": build_type},
        )
        result = self.executor.execute(cmd, capture_output=False)
        if not result.success:
            raise ExecutionError(
                f"docker run 失败 (退出码 {result.returncode})，请查看上面的输出"
            )
