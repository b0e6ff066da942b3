"""Helpers shared by the COA, category and business-unit trees.

Trees are stored as flat rows with a ``parent_id``; these functions work on
the flat lists returned by the database layer.
"""

from typing import Callable, Iterable, Optional, Protocol, TypeVar

from ledgerbook.domain.entities import TreeNode
from ledgerbook.domain.errors import ValidationError

PATH_SEPARATOR = " > "


class _Node(Protocol):
    id: str
    name: str
    parent_id: Optional[str]


N = TypeVar("N", bound=_Node)


def build_tree(nodes: Iterable[N], label: Callable[[N], str] = lambda n: n.name) -> list[TreeNode]:
    """Nest flat nodes under their parents, keeping input order.

    Nodes whose parent is not in ``nodes`` become roots.
    """
    nodes = list(nodes)
    by_id = {n.id: TreeNode(id=n.id, name=label(n), parent_id=n.parent_id) for n in nodes}
    roots = []
    for n in nodes:
        parent = by_id.get(n.parent_id) if n.parent_id is not None else None
        if parent is None:
            roots.append(by_id[n.id])
        else:
            parent.children.append(by_id[n.id])
    return roots


def format_path(
    nodes: Iterable[N], node_id: str, label: Callable[[N], str] = lambda n: n.name
) -> str:
    """Full path of a node (e.g., "Operating > Utilities"), or "" if unknown."""
    by_id = {n.id: n for n in nodes}
    parts = []
    seen = set()
    current = by_id.get(node_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        parts.append(label(current))
        current = by_id.get(current.parent_id) if current.parent_id is not None else None
    return PATH_SEPARATOR.join(reversed(parts))


def find_by_path(nodes: Iterable[N], path: str) -> Optional[N]:
    """Resolve a path like "Parent > Child" by exact names, starting at a root."""
    parts = [part.strip() for part in path.split(">")]
    if not parts or any(not part for part in parts):
        return None
    nodes = list(nodes)
    parent_id = None
    found = None
    for part in parts:
        found = next((n for n in nodes if n.parent_id == parent_id and n.name == part), None)
        if found is None:
            return None
        parent_id = found.id
    return found


def direct_children(nodes: Iterable[N], node_id: str) -> list[N]:
    return [n for n in nodes if n.parent_id == node_id]


def check_new_parent(nodes: Iterable[N], node_id: str, parent_id: str) -> None:
    """Reject moving a node under itself or one of its descendants."""
    by_id = {n.id: n for n in nodes}
    current = parent_id
    seen = set()
    while current is not None and current not in seen:
        if current == node_id:
            raise ValidationError("A node cannot be moved under itself or its descendants")
        seen.add(current)
        parent = by_id.get(current)
        current = parent.parent_id if parent is not None else None


def required_name(value: Optional[str], field: str = "Name") -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()
