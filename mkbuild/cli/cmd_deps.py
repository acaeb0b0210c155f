"""CLI — 查看内置依赖规则"""

from __future__ import annotations

import click


def register(group: click.Group) -> None:
    group.add_command(list_deps)


@click.command(name="deps")
def list_deps() -> None:
    """列出所有已知的依赖标识"""
    from mkbuild.deps.registry import DependencyRegistry

    for rule in DependencyRegistry().rules():
        note = "  (已弃用)" if rule.deprecation else ""
        click.echo(f"  {rule.identifier:45s} [{rule.kind.value}]{note}")
