"""Expand/collapse state for a built family tree, and the rows it makes visible."""

from dataclasses import dataclass

from kinship.domain import FamilyTreeNode


@dataclass(frozen=True)
class NodeSummary:
    """One visible row: name, relationship to parent, child count."""

    profile_id: str
    name: str
    relationship: str | None
    child_count: int
    depth: int
    expanded: bool


class TreeExpansion:
    """Set of expanded node ids. Pure UI state; changing it never re-fetches."""

    def __init__(self, expanded: set[str] | None = None) -> None:
        self._expanded: set[str] = set(expanded or ())

    @classmethod
    def for_tree(cls, tree: FamilyTreeNode) -> "TreeExpansion":
        """Initial state after a build: only the root is expanded."""
        return cls({tree.id})

    @property
    def expanded_ids(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def expand(self, node_id: str) -> None:
        self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._expanded.discard(node_id)

    def toggle(self, node_id: str) -> bool:
        """Flip the node's state. Returns True if it is now expanded."""
        if node_id in self._expanded:
            self._expanded.remove(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def expand_all(self, tree: FamilyTreeNode) -> None:
        self._expanded.update(node.id for node in tree.walk() if node.has_children)

    def collapse_all(self) -> None:
        self._expanded.clear()


def visible_rows(tree: FamilyTreeNode, expansion: TreeExpansion) -> list[NodeSummary]:
    """Pre-order rows; children of a node are listed only while it is expanded.

    State is keyed by profile id, so a profile shown in two branches expands
    or collapses in both.
    """
    rows: list[NodeSummary] = []
    stack = [tree]
    while stack:
        node = stack.pop()
        expanded = expansion.is_expanded(node.id)
        rel = node.relationship_to_parent
        rows.append(
            NodeSummary(
                profile_id=node.id,
                name=node.profile.display_name,
                relationship=rel.display_name if rel is not None else None,
                child_count=len(node.children),
                depth=node.depth,
                expanded=expanded,
            )
        )
        if expanded:
            stack.extend(reversed(node.children))
    return rows
