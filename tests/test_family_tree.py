"""Unit tests for FamilyTreeBuilder. Scripted in-process stores only, no DB."""

import asyncio
import logging

import pytest

from kinship.application import FamilyTreeBuilder, StoreError
from kinship.domain import (
    ConnectionType,
    ConnectionWithProfile,
    FamilyTreeNode,
    Profile,
    ProfileConnection,
)

FAMILY = ConnectionType.SON
SOCIAL = ConnectionType.FRIEND


def _profile(pid: str) -> Profile:
    return Profile(id=pid, full_name=pid.capitalize())


class ScriptedStore:
    """Edges keyed by profile id; records every read; can fail for chosen ids."""

    def __init__(self, fail_on: set[str] | None = None, delay: float = 0.0) -> None:
        self.profiles: dict[str, Profile] = {}
        self.edges: dict[str, list[tuple[ConnectionType, str]]] = {}
        self.calls: list[str] = []
        self.fail_on = fail_on or set()
        self.delay = delay

    def profile(self, pid: str) -> Profile:
        if pid not in self.profiles:
            self.profiles[pid] = _profile(pid)
        return self.profiles[pid]

    def connect(self, src: str, dst: str, rel: ConnectionType = FAMILY) -> None:
        self.profile(src)
        self.profile(dst)
        self.edges.setdefault(src, []).append((rel, dst))

    async def connections_for(self, profile_id: str) -> list[ConnectionWithProfile]:
        self.calls.append(profile_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if profile_id in self.fail_on:
            raise StoreError(f"read failed for {profile_id}")
        return [
            ConnectionWithProfile(
                connection=ProfileConnection(
                    id=f"{profile_id}->{dst}",
                    from_profile_id=profile_id,
                    to_profile_id=dst,
                    relationship_type=rel,
                ),
                connected_profile=self.profiles[dst],
            )
            for rel, dst in self.edges.get(profile_id, [])
        ]


def _shape(node: FamilyTreeNode) -> tuple:
    """(id, relationship, depth, children) without the Profile payload."""
    rel = node.relationship_to_parent.value if node.relationship_to_parent else None
    return (node.id, rel, node.depth, tuple(_shape(c) for c in node.children))


def _paths(node: FamilyTreeNode, prefix: tuple = ()):
    path = prefix + (node.id,)
    yield path
    for child in node.children:
        yield from _paths(child, path)


def _complete_graph(ids: list[str]) -> ScriptedStore:
    store = ScriptedStore()
    for a in ids:
        for b in ids:
            if a != b:
                store.connect(a, b)
    return store


@pytest.mark.asyncio
async def test_linear_chain_drops_edge_back_to_root() -> None:
    store = ScriptedStore()
    store.connect("root", "a")
    store.connect("a", "b")
    store.connect("b", "root")

    tree = await FamilyTreeBuilder(store, max_depth=3).build_tree(store.profile("root"))

    assert _shape(tree) == (
        "root",
        None,
        0,
        (("a", "son", 1, (("b", "son", 2, ()),)),),
    )
    assert not tree.children[0].children[0].has_children


@pytest.mark.asyncio
async def test_depth_cap_leaves_last_level_unexpanded_and_unfetched() -> None:
    store = ScriptedStore()
    for src, dst in [("root", "a"), ("a", "b"), ("b", "c"), ("c", "d")]:
        store.connect(src, dst)

    tree = await FamilyTreeBuilder(store, max_depth=2).build_tree(store.profile("root"))

    assert [n.id for n in tree.walk()] == ["root", "a", "b"]
    b = tree.children[0].children[0]
    assert b.depth == 2
    assert b.children == ()
    assert "b" not in store.calls


@pytest.mark.asyncio
async def test_shared_descendant_appears_under_both_branches() -> None:
    store = ScriptedStore()
    store.connect("root", "a")
    store.connect("root", "b")
    store.connect("a", "p", SOCIAL)
    store.connect("b", "p", SOCIAL)

    tree = await FamilyTreeBuilder(store, max_depth=3).build_tree(store.profile("root"))

    a, b = tree.children
    assert [c.id for c in a.children] == ["p"]
    assert [c.id for c in b.children] == ["p"]
    for p in (a.children[0], b.children[0]):
        assert p.relationship_to_parent is ConnectionType.FRIEND
        assert p.depth == 2


@pytest.mark.asyncio
async def test_store_failure_aborts_whole_build() -> None:
    store = ScriptedStore(fail_on={"a"})
    store.connect("root", "a")
    store.connect("a", "b")

    with pytest.raises(StoreError, match="read failed for a"):
        await FamilyTreeBuilder(store, max_depth=3).build_tree(store.profile("root"))
    assert store.calls == ["root", "a"]


@pytest.mark.asyncio
async def test_zero_max_depth_returns_lone_root_without_reading() -> None:
    store = _complete_graph(["root", "a", "b"])

    tree = await FamilyTreeBuilder(store, max_depth=0).build_tree(store.profile("root"))

    assert tree.id == "root"
    assert tree.children == ()
    assert tree.relationship_to_parent is None
    assert store.calls == []


@pytest.mark.asyncio
async def test_root_without_connections_is_single_node() -> None:
    store = ScriptedStore()
    tree = await FamilyTreeBuilder(store).build_tree(store.profile("alone"))
    assert tree.size == 1
    assert store.calls == ["alone"]


@pytest.mark.asyncio
async def test_no_repeated_id_on_any_path_and_depth_bounded() -> None:
    store = _complete_graph(["root", "a", "b", "c"])

    tree = await FamilyTreeBuilder(store, max_depth=3).build_tree(store.profile("root"))

    for path in _paths(tree):
        assert len(path) == len(set(path))
    for node in tree.walk():
        assert node.depth <= 3
        for child in node.children:
            assert child.depth == node.depth + 1
        if node.depth == 3:
            assert not node.has_children
    # 1 root + 3 + 3*2 + 3*2*1
    assert tree.size == 16
    assert tree.height == 3


@pytest.mark.asyncio
async def test_children_keep_store_order() -> None:
    store = ScriptedStore()
    for pid in ["zed", "amy", "mia", "bob"]:
        store.connect("root", pid)
    store.connect("mia", "root")
    store.connect("mia", "amy")
    store.connect("mia", "zed")

    tree = await FamilyTreeBuilder(store).build_tree(store.profile("root"))

    assert [c.id for c in tree.children] == ["zed", "amy", "mia", "bob"]
    mia = tree.children[2]
    assert [c.id for c in mia.children] == ["amy", "zed"]


@pytest.mark.asyncio
async def test_two_builds_are_identical() -> None:
    store = _complete_graph(["root", "a", "b", "c"])
    builder = FamilyTreeBuilder(store, max_depth=3)

    first = await builder.build_tree(store.profile("root"))
    second = await builder.build_tree(store.profile("root"))

    assert first == second
    assert _shape(first) == _shape(second)


@pytest.mark.asyncio
async def test_concurrent_expansion_matches_sequential() -> None:
    store = _complete_graph(["root", "a", "b", "c", "d"])

    sequential = await FamilyTreeBuilder(store, max_depth=3).build_tree(
        store.profile("root")
    )
    concurrent = await FamilyTreeBuilder(store, max_depth=3, concurrency=4).build_tree(
        store.profile("root")
    )

    assert _shape(concurrent) == _shape(sequential)


@pytest.mark.asyncio
async def test_concurrent_failure_propagates_store_error_unchanged() -> None:
    store = ScriptedStore(fail_on={"b"}, delay=0.01)
    for pid in ["a", "b", "c"]:
        store.connect("root", pid)
        store.connect(pid, "x")

    with pytest.raises(StoreError, match="read failed for b"):
        await FamilyTreeBuilder(store, concurrency=3).build_tree(store.profile("root"))


class SlowSiblingStore(ScriptedStore):
    """Reads for ids in slow_ids hang until cancelled; cancellations are recorded."""

    def __init__(self, slow_ids: set[str], fail_on: set[str]) -> None:
        super().__init__(fail_on=fail_on)
        self.slow_ids = slow_ids
        self.cancelled: list[str] = []
        self.finished: list[str] = []

    async def connections_for(self, profile_id: str) -> list[ConnectionWithProfile]:
        if profile_id in self.slow_ids:
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                self.cancelled.append(profile_id)
                raise
            self.finished.append(profile_id)
        return await super().connections_for(profile_id)


@pytest.mark.asyncio
async def test_concurrent_failure_cancels_in_flight_sibling_reads() -> None:
    store = SlowSiblingStore(slow_ids={"a", "c"}, fail_on={"b"})
    for pid in ["a", "b", "c"]:
        store.connect("root", pid)

    with pytest.raises(StoreError, match="read failed for b"):
        await asyncio.wait_for(
            FamilyTreeBuilder(store, concurrency=3).build_tree(store.profile("root")),
            timeout=5,
        )

    assert sorted(store.cancelled) == ["a", "c"]
    assert store.finished == []


@pytest.mark.asyncio
async def test_per_call_max_depth_overrides_default() -> None:
    store = _complete_graph(["root", "a", "b"])
    builder = FamilyTreeBuilder(store, max_depth=3)

    tree = await builder.build_tree(store.profile("root"), max_depth=1)

    assert [c.id for c in tree.children] == ["a", "b"]
    assert all(not c.has_children for c in tree.children)


@pytest.mark.asyncio
async def test_node_budget_truncates_and_warns(caplog) -> None:
    store = _complete_graph(["root", "a", "b", "c"])
    builder = FamilyTreeBuilder(store, max_depth=3, max_nodes=5)

    with caplog.at_level(logging.WARNING, logger="kinship.application.family_tree"):
        tree = await builder.build_tree(store.profile("root"))

    assert tree.size == 5
    assert [c.id for c in tree.children] == ["a", "b", "c"]
    assert "node budget" in caplog.text


def test_invalid_limits_rejected() -> None:
    store = ScriptedStore()
    with pytest.raises(ValueError):
        FamilyTreeBuilder(store, max_depth=-1)
    with pytest.raises(TypeError):
        FamilyTreeBuilder(store, max_depth=True)
    with pytest.raises(ValueError):
        FamilyTreeBuilder(store, concurrency=0)
    with pytest.raises(ValueError):
        FamilyTreeBuilder(store, max_nodes=0)


@pytest.mark.asyncio
async def test_negative_per_call_depth_rejected() -> None:
    store = ScriptedStore()
    with pytest.raises(ValueError):
        await FamilyTreeBuilder(store).build_tree(store.profile("root"), max_depth=-2)
