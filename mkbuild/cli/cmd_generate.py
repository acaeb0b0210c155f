"""CLI — 生成 CMakeLists.txt"""

from __future__ import annotations

import dataclasses

import click

from mkbuild.core.config import UNKNOWN_DEPENDENCY_POLICIES, get_config


def register(group: click.Group) -> None:
    group.add_command(generate)
    group.add_command(generate, name="autogen")


@click.command()
@click.option("--manifest", "-m", default=None, help="清单文件路径（默认取配置 manifest）")
@click.option("--output", "-o", default=None, help="输出文件路径（默认取配置 output）")
@click.option(
    "--unknown-deps", type=click.Choice(UNKNOWN_DEPENDENCY_POLICIES), default=None,
    help="未知依赖的处理策略，覆盖配置文件",
)
def generate(manifest: str | None, output: str | None, unknown_deps: str | None) -> None:
    """根据清单生成 CMakeLists.txt"""
    from mkbuild.cli import handle_errors
    from mkbuild.services.generate_service import GenerateService

    config = get_config()
    if unknown_deps:
        config = dataclasses.replace(config, unknown_dependency_policy=unknown_deps)
    with handle_errors():
        path = GenerateService(config=config).generate_from_manifest(manifest, output)
    click.echo(f"已生成: {path}")
