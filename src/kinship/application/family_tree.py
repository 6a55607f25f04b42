"""Bounded, cycle-safe family tree construction over a connection store."""

import asyncio
import logging
from dataclasses import dataclass, field

from kinship.application.ports import ConnectionStore
from kinship.domain import (
    ConnectionType,
    ConnectionWithProfile,
    FamilyTreeNode,
    Profile,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3


def _check_limit(name: str, value: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}.")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}.")
    return value


@dataclass
class _Slot:
    """A node under construction. children holds indexes into the slot list."""

    profile: Profile
    relationship: ConnectionType | None
    depth: int
    ancestors: frozenset[str]
    children: list[int] = field(default_factory=list)


class FamilyTreeBuilder:
    """
    Builds a FamilyTreeNode tree rooted at a profile from its connection graph.

    Expansion runs over a worklist, one frontier (depth level) at a time.
    Each pending node carries its own ancestor chain (the ids on the path
    from the root to it) as a frozenset; an edge back into that chain is
    skipped. Chains are never shared between siblings, so a profile reached
    through two different branches appears in both. Nodes at max_depth are
    kept as leaves and never fetched.

    concurrency > 1 issues up to that many store reads at once within a
    frontier. The tree is the same as the sequential one because results
    are consumed in frontier order.

    max_nodes, when set, caps the total node count: edges that would exceed
    it are dropped, in build order, and a warning is logged.
    """

    def __init__(
        self,
        store: ConnectionStore,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_nodes: int | None = None,
        concurrency: int = 1,
    ) -> None:
        self._store = store
        self._max_depth = _check_limit("max_depth", max_depth, 0)
        self._max_nodes = (
            None if max_nodes is None else _check_limit("max_nodes", max_nodes, 1)
        )
        self._concurrency = _check_limit("concurrency", concurrency, 1)

    @property
    def max_depth(self) -> int:
        return self._max_depth

    async def build_tree(
        self, root: Profile, max_depth: int | None = None
    ) -> FamilyTreeNode:
        """Build the tree for root. Any StoreError aborts the whole build."""
        limit = (
            self._max_depth
            if max_depth is None
            else _check_limit("max_depth", max_depth, 0)
        )
        slots = [_Slot(root, None, 0, frozenset({root.id}))]
        frontier = [0] if limit > 0 else []
        dropped = 0

        while frontier:
            edges_per_slot = await self._fetch(
                [slots[index].profile.id for index in frontier]
            )
            next_frontier: list[int] = []
            for index, edges in zip(frontier, edges_per_slot):
                parent = slots[index]
                for edge in edges:
                    target = edge.connected_profile
                    if target.id in parent.ancestors:
                        continue
                    if self._max_nodes is not None and len(slots) >= self._max_nodes:
                        dropped += 1
                        continue
                    child = _Slot(
                        profile=target,
                        relationship=edge.relationship_type,
                        depth=parent.depth + 1,
                        ancestors=parent.ancestors | {target.id},
                    )
                    parent.children.append(len(slots))
                    slots.append(child)
                    if child.depth < limit:
                        next_frontier.append(len(slots) - 1)
            frontier = next_frontier

        if dropped:
            logger.warning(
                "Family tree for %s hit the %d node budget; %d connections not shown",
                root.id,
                self._max_nodes,
                dropped,
            )
        logger.info(
            "Built family tree for %s: %d nodes, max depth %d",
            root.id,
            len(slots),
            limit,
        )
        return _assemble(slots)

    async def _fetch(self, profile_ids: list[str]) -> list[list[ConnectionWithProfile]]:
        logger.debug("Expanding %d profiles: %s", len(profile_ids), profile_ids)
        if self._concurrency == 1 or len(profile_ids) == 1:
            return [await self._store.connections_for(pid) for pid in profile_ids]

        semaphore = asyncio.Semaphore(self._concurrency)

        async def fetch_one(profile_id: str) -> list[ConnectionWithProfile]:
            async with semaphore:
                return await self._store.connections_for(profile_id)

        tasks = [asyncio.create_task(fetch_one(pid)) for pid in profile_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


def _assemble(slots: list[_Slot]) -> FamilyTreeNode:
    # A child's index is always greater than its parent's.
    built: list[FamilyTreeNode | None] = [None] * len(slots)
    for index in range(len(slots) - 1, -1, -1):
        slot = slots[index]
        built[index] = FamilyTreeNode(
            profile=slot.profile,
            relationship_to_parent=slot.relationship,
            children=tuple(built[child] for child in slot.children),
            depth=slot.depth,
        )
    return built[0]
