"""Indented rendering of tree listings."""

import click
from ledgerbook.domain.entities import TreeNode


def echo_tree(nodes: list[TreeNode], level: int = 0, show_ids: bool = False) -> None:
    for node in nodes:
        suffix = f"  [{node.id}]" if show_ids else ""
        click.echo(f"{'  ' * level}{node.name}{suffix}")
        echo_tree(node.children, level + 1, show_ids)
