"""Console rendering of change trees."""

import os

from rich.text import Text
from rich.tree import Tree

from .models import ChangeFileRecord, ChangeFolderNode, ChangeStatus

STATUS_STYLES = {
    ChangeStatus.ADDED: "green",
    ChangeStatus.MODIFIED: "yellow",
    ChangeStatus.DELETED: "red",
}


def change_label(change: ChangeFileRecord, separator: str = os.sep) -> Text:
    """Label for a change leaf: ``filename (Status)``."""
    label = Text(change.filename(separator))
    label.append(f" ({change.status.label})", style=STATUS_STYLES[change.status])
    return label


def render_tree(root: ChangeFolderNode, root_label: str = ".") -> Tree:
    """Build a Rich tree: folders first, then the folder's own changes."""
    tree = Tree(Text(root.name or root_label, style="bold"), guide_style="dim")
    _add_node(tree, root)
    return tree


def _add_node(branch: Tree, node: ChangeFolderNode) -> None:
    for child in node.children.values():
        child_branch = branch.add(Text(child.name, style="bold blue"))
        _add_node(child_branch, child)

    for change in node.direct_changes:
        branch.add(change_label(change, node.separator))


def render_text(root: ChangeFolderNode, indent: str = "\t") -> str:
    """Plain-text outline, one ``>name`` line per folder and change."""
    lines: list[str] = []

    def visit(node: ChangeFolderNode, depth: int) -> None:
        lines.append(f"{indent * (depth + 1)}>{node.name}")
        for child in node.children.values():
            visit(child, depth + 1)
        for change in node.direct_changes:
            name = node.change_name(change)
            lines.append(f"{indent * (depth + 2)}>{name} ({change.status.label})")

    visit(root, 0)
    return "\n".join(lines)
