"""mkbuild 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from mkbuild import __version__
from mkbuild.core.config import DEFAULT_CONFIG_FILE, init_config
from mkbuild.core.exceptions import MkbuildError
from mkbuild.utils.logger import setup_logging_from_env


@contextmanager
def handle_errors() -> Iterator[None]:
    """把业务异常转换为 click 的错误输出（退出码 1）"""
    try:
        yield
    except MkbuildError as e:
        details = getattr(e, "details", None) or []
        message = "\n".join([f"[{e.code}] {e}", *(f"  - {d}" for d in details)])
        raise click.ClickException(message) from e


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE,
    show_default=True, help="配置文件路径（不存在则使用默认配置）",
)
def main(config_path: str) -> None:
    """mkbuild - 由 MKBuild.yaml 生成 CMakeLists.txt"""
    setup_logging_from_env()
    with handle_errors():
        init_config(config_path)


# 注册各领域子命令
from mkbuild.cli.cmd_generate import register as _reg_generate  # noqa: E402
from mkbuild.cli.cmd_docker import register as _reg_docker  # noqa: E402
from mkbuild.cli.cmd_deps import register as _reg_deps  # noqa: E402

_reg_generate(main)
_reg_docker(main)
_reg_deps(main)
