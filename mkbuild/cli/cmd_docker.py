"""CLI — 在容器中编译并运行测试"""

from __future__ import annotations

import click

from mkbuild.services.docker_service import BUILD_TYPES


def register(group: click.Group) -> None:
    group.add_command(docker)


@click.command()
@click.argument("build_type", type=click.Choice(list(BUILD_TYPES)))
@click.option("--manifest", "-m", default=None, help="清单文件路径（默认取配置 manifest）")
def docker(build_type: str, manifest: str | None) -> None:
    """在 Docker 容器中按 BUILD_TYPE 编译并运行测试"""
    from mkbuild.cli import handle_errors
    from mkbuild.core.config import get_config
    from mkbuild.core.manifest import read_manifest
    from mkbuild.services.docker_service import DockerService

    config = get_config()
    with handle_errors():
        package = read_manifest(manifest or config.manifest)
        DockerService(config=config).run(build_type, package)
