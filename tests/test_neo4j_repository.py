"""Integration tests for Neo4jProfileRepository. Require Docker
(testcontainers)."""

from dataclasses import replace

import pytest
import pytest_asyncio
from neo4j import AsyncGraphDatabase

from kinship.application import FamilyTreeBuilder, StoreError
from kinship.domain import (
    ConnectionType,
    DetailCategory,
    Profile,
    ProfileConnection,
    ProfileDetail,
)
from kinship.infrastructure import Neo4jProfileRepository, ensure_profile_constraint


@pytest.fixture(scope="session")
def neo4j_server():
    from testcontainers.neo4j import Neo4jContainer

    with Neo4jContainer() as neo4j:
        yield neo4j.get_connection_url(), (neo4j.username, neo4j.password)


@pytest_asyncio.fixture
async def clean_neo4j(neo4j_server):
    """Fresh driver per test over an empty graph."""
    url, auth = neo4j_server
    driver = AsyncGraphDatabase.driver(url, auth=auth)
    async with driver.session() as session:
        await session.run("MATCH (n) DETACH DELETE n")
    await ensure_profile_constraint(driver)
    try:
        yield driver
    finally:
        await driver.close()


@pytest.mark.asyncio
async def test_add_get_list_profiles(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    first = Profile(full_name="Alice", preferred_name="Al", phone_number="+1 202-555-1234")
    second = Profile(full_name="Bob", include_in_family_tree=False)
    await repo.add_profile(first)
    await repo.add_profile(second)

    found = await repo.get_profile(first.id)
    assert found is not None
    assert found.display_name == "Al"
    assert found.phone_number == "+12025551234"
    assert found.created_at == first.created_at

    listed = await repo.list_profiles()
    assert [p.full_name for p in listed] == ["Alice", "Bob"]
    assert listed[1].include_in_family_tree is False
    assert await repo.get_profile("missing") is None


@pytest.mark.asyncio
async def test_connections_round_trip_in_creation_order(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    root, mum, dad = (Profile(full_name=n) for n in ("Root", "Mum", "Dad"))
    for p in (root, mum, dad):
        await repo.add_profile(p)
    c1 = ProfileConnection(root.id, mum.id, ConnectionType.MOTHER)
    c2 = ProfileConnection(root.id, dad.id, ConnectionType.FATHER)
    await repo.add_connection(c1)
    await repo.add_connection(c2)

    out = await repo.connections_for(root.id)
    assert [(c.connected_profile.full_name, c.relationship_type) for c in out] == [
        ("Mum", ConnectionType.MOTHER),
        ("Dad", ConnectionType.FATHER),
    ]
    assert (await repo.get_connection(c1.id)) == c1
    assert (await repo.find_connection(root.id, dad.id)).id == c2.id
    assert await repo.find_connection(dad.id, root.id) is None

    assert await repo.delete_connection(c1.id) is True
    assert await repo.delete_connection(c1.id) is False
    assert [c.id for c in await repo.connections_for(root.id)] == [c2.id]


@pytest.mark.asyncio
async def test_delete_profile_detaches_connections(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    a, b = Profile(full_name="A"), Profile(full_name="B")
    await repo.add_profile(a)
    await repo.add_profile(b)
    await repo.add_connection(ProfileConnection(a.id, b.id, ConnectionType.FRIEND))

    assert await repo.delete_profile(b.id) is True
    assert await repo.delete_profile(b.id) is False
    assert await repo.connections_for(a.id) == []


@pytest.mark.asyncio
async def test_update_profile_in_place(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    p = Profile(full_name="Margaret Hill")
    await repo.add_profile(p)

    changed = replace(p, preferred_name="Nan", phone_number="+1 202 555 1234")
    assert await repo.update_profile(changed) is True
    stored = await repo.get_profile(p.id)
    assert stored.display_name == "Nan"
    assert stored.phone_number == "+12025551234"
    assert stored.created_at == p.created_at
    assert await repo.update_profile(Profile(full_name="Ghost")) is False


@pytest.mark.asyncio
async def test_details_round_trip(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    dad = Profile(full_name="Dad")
    await repo.add_profile(dad)
    shoes = ProfileDetail(
        dad.id,
        DetailCategory.CLOTHING,
        label="Shoe size",
        value="10",
        metadata={"brand": "Clarks"},
    )
    await repo.add_detail(shoes)
    await repo.add_detail(ProfileDetail(dad.id, DetailCategory.ALLERGY, label="penicillin"))
    await repo.add_detail(
        ProfileDetail(dad.id, DetailCategory.CLOTHING, label="Jacket", value="L")
    )

    assert [d.label for d in await repo.list_details(dad.id)] == [
        "Jacket",
        "penicillin",
        "Shoe size",
    ]
    clothing = await repo.list_details(dad.id, DetailCategory.CLOTHING)
    assert [d.label for d in clothing] == ["Jacket", "Shoe size"]

    found = await repo.get_detail(shoes.id)
    assert found == shoes

    assert await repo.update_detail(replace(shoes, value="11", status="checked")) is True
    updated = await repo.get_detail(shoes.id)
    assert (updated.value, updated.status) == ("11", "checked")
    assert updated.category is DetailCategory.CLOTHING
    assert updated.metadata == {"brand": "Clarks"}

    assert await repo.delete_detail(shoes.id) is True
    assert await repo.delete_detail(shoes.id) is False
    assert await repo.get_detail("missing") is None


@pytest.mark.asyncio
async def test_delete_profile_removes_detail_nodes(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    dad = Profile(full_name="Dad")
    await repo.add_profile(dad)
    await repo.add_detail(ProfileDetail(dad.id, DetailCategory.HOBBY, label="Golf"))

    assert await repo.delete_profile(dad.id) is True
    async with clean_neo4j.session() as session:
        result = await session.run("MATCH (d:ProfileDetail) RETURN count(d) AS n")
        record = await result.single()
    assert record["n"] == 0


@pytest.mark.asyncio
async def test_family_tree_over_neo4j(clean_neo4j):
    repo = Neo4jProfileRepository(clean_neo4j)
    root, a, b, p = (Profile(full_name=n) for n in ("Root", "A", "B", "P"))
    for prof in (root, a, b, p):
        await repo.add_profile(prof)
    for src, dst, rel in [
        (root, a, ConnectionType.SON),
        (root, b, ConnectionType.DAUGHTER),
        (a, p, ConnectionType.FRIEND),
        (b, p, ConnectionType.FRIEND),
        (p, root, ConnectionType.NEIGHBOUR),
    ]:
        await repo.add_connection(ProfileConnection(src.id, dst.id, rel))

    tree = await FamilyTreeBuilder(repo, max_depth=3).build_tree(root)

    assert [c.profile.full_name for c in tree.children] == ["A", "B"]
    for branch in tree.children:
        assert [c.id for c in branch.children] == [p.id]
        assert branch.children[0].children == ()


@pytest.mark.asyncio
async def test_driver_failure_raised_as_store_error():
    driver = AsyncGraphDatabase.driver("bolt://127.0.0.1:1", auth=("neo4j", "x"))
    try:
        repo = Neo4jProfileRepository(driver)
        with pytest.raises(StoreError):
            await repo.connections_for("anyone")
    finally:
        await driver.close()
