"""Neo4j implementation of ProfileRepository (async driver).
Graph: (:Profile {id, full_name, ...})-[:CONNECTED {id, relationship_type, created_at}]->(:Profile).
One CONNECTED relationship per directed edge; a bidirectional connection is two relationships.
Details: (:Profile)-[:HAS_DETAIL]->(:ProfileDetail {id, category, label, value, ...}), metadata as a JSON string.
"""

import json
import logging
from datetime import datetime

from neo4j.exceptions import DriverError, Neo4jError

from kinship.application.ports import StoreError
from kinship.domain import (
    ConnectionType,
    ConnectionWithProfile,
    DetailCategory,
    Profile,
    ProfileConnection,
    ProfileDetail,
)
from kinship.infrastructure.phone import phone_for_storage

logger = logging.getLogger(__name__)


def _datetime_to_iso(dt: datetime) -> str:
    return dt.isoformat(timespec="microseconds")


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


async def ensure_profile_constraint(driver: object) -> None:
    """Create the uniqueness constraint on Profile.id. Idempotent."""
    async with driver.session() as session:
        await session.run(
            "CREATE CONSTRAINT profile_id IF NOT EXISTS "
            "FOR (p:Profile) REQUIRE p.id IS UNIQUE"
        )


class Neo4jProfileRepository:
    """Stores profiles as nodes and connections as CONNECTED relationships.
    Driver failures are raised as StoreError.
    """

    def __init__(
        self,
        driver: object,
        *,
        database: str | None = None,
        default_region: str | None = None,
    ) -> None:
        self._driver = driver
        self._database = database
        self._default_region = default_region

    async def _run(self, query: str, **params) -> list:
        try:
            async with self._driver.session(database=self._database) as session:
                result = await session.run(query, parameters=params)
                return [record async for record in result]
        except (Neo4jError, DriverError) as e:
            logger.error("Neo4j query failed: %s", e)
            raise StoreError(f"Neo4j query failed: {e}") from e

    async def add_profile(self, profile: Profile) -> None:
        await self._run(
            """
            MERGE (p:Profile {id: $id})
            ON CREATE SET
                p.full_name = $full_name,
                p.preferred_name = $preferred_name,
                p.relationship = $relationship,
                p.photo_url = $photo_url,
                p.phone_number = $phone_number,
                p.include_in_family_tree = $include_in_family_tree,
                p.created_at = $created_at
            """,
            id=profile.id,
            full_name=profile.full_name,
            preferred_name=profile.preferred_name,
            relationship=profile.relationship,
            photo_url=profile.photo_url,
            phone_number=phone_for_storage(profile.phone_number, self._default_region),
            include_in_family_tree=profile.include_in_family_tree,
            created_at=_datetime_to_iso(profile.created_at),
        )

    async def get_profile(self, profile_id: str) -> Profile | None:
        records = await self._run(
            "MATCH (p:Profile {id: $id}) RETURN p",
            id=profile_id,
        )
        if not records:
            return None
        return _node_to_profile(records[0]["p"])

    async def list_profiles(self) -> list[Profile]:
        records = await self._run(
            "MATCH (p:Profile) RETURN p ORDER BY p.created_at, p.id"
        )
        return [_node_to_profile(rec["p"]) for rec in records]

    async def update_profile(self, profile: Profile) -> bool:
        records = await self._run(
            """
            MATCH (p:Profile {id: $id})
            SET
                p.full_name = $full_name,
                p.preferred_name = $preferred_name,
                p.relationship = $relationship,
                p.photo_url = $photo_url,
                p.phone_number = $phone_number,
                p.include_in_family_tree = $include_in_family_tree
            RETURN 1 AS updated
            """,
            id=profile.id,
            full_name=profile.full_name,
            preferred_name=profile.preferred_name,
            relationship=profile.relationship,
            photo_url=profile.photo_url,
            phone_number=phone_for_storage(profile.phone_number, self._default_region),
            include_in_family_tree=profile.include_in_family_tree,
        )
        return bool(records)

    async def delete_profile(self, profile_id: str) -> bool:
        records = await self._run(
            """
            MATCH (p:Profile {id: $id})
            OPTIONAL MATCH (p)-[:HAS_DETAIL]->(d:ProfileDetail)
            WITH p, collect(d) AS details
            FOREACH (detail IN details | DETACH DELETE detail)
            DETACH DELETE p
            RETURN 1 AS deleted
            """,
            id=profile_id,
        )
        return bool(records)

    async def add_connection(self, connection: ProfileConnection) -> None:
        await self._run(
            """
            MATCH (a:Profile {id: $from_id}), (b:Profile {id: $to_id})
            CREATE (a)-[:CONNECTED {
                id: $id,
                relationship_type: $relationship_type,
                created_at: $created_at
            }]->(b)
            """,
            from_id=connection.from_profile_id,
            to_id=connection.to_profile_id,
            id=connection.id,
            relationship_type=connection.relationship_type.value,
            created_at=_datetime_to_iso(connection.created_at),
        )

    async def get_connection(self, connection_id: str) -> ProfileConnection | None:
        records = await self._run(
            """
            MATCH (a:Profile)-[c:CONNECTED {id: $id}]->(b:Profile)
            RETURN a.id AS from_id, c, b.id AS to_id
            """,
            id=connection_id,
        )
        if not records:
            return None
        return _record_to_connection(records[0])

    async def find_connection(
        self, from_profile_id: str, to_profile_id: str
    ) -> ProfileConnection | None:
        records = await self._run(
            """
            MATCH (a:Profile {id: $from_id})-[c:CONNECTED]->(b:Profile {id: $to_id})
            RETURN a.id AS from_id, c, b.id AS to_id
            ORDER BY c.created_at
            LIMIT 1
            """,
            from_id=from_profile_id,
            to_id=to_profile_id,
        )
        if not records:
            return None
        return _record_to_connection(records[0])

    async def delete_connection(self, connection_id: str) -> bool:
        records = await self._run(
            """
            MATCH (:Profile)-[c:CONNECTED {id: $id}]->(:Profile)
            DELETE c
            RETURN count(*) AS deleted
            """,
            id=connection_id,
        )
        return bool(records and records[0]["deleted"])

    async def connections_for(self, profile_id: str) -> list[ConnectionWithProfile]:
        records = await self._run(
            """
            MATCH (a:Profile {id: $id})-[c:CONNECTED]->(b:Profile)
            RETURN a.id AS from_id, c, b.id AS to_id, b
            ORDER BY c.created_at, c.id
            """,
            id=profile_id,
        )
        return [
            ConnectionWithProfile(
                connection=_record_to_connection(rec),
                connected_profile=_node_to_profile(rec["b"]),
            )
            for rec in records
        ]

    async def add_detail(self, detail: ProfileDetail) -> None:
        await self._run(
            """
            MATCH (p:Profile {id: $profile_id})
            MERGE (p)-[:HAS_DETAIL]->(d:ProfileDetail {id: $id})
            ON CREATE SET
                d.category = $category,
                d.label = $label,
                d.value = $value,
                d.status = $status,
                d.occasion = $occasion,
                d.metadata = $metadata,
                d.created_at = $created_at,
                d.updated_at = $updated_at
            """,
            profile_id=detail.profile_id,
            id=detail.id,
            category=detail.category.value,
            label=detail.label,
            value=detail.value,
            status=detail.status,
            occasion=detail.occasion,
            metadata=json.dumps(detail.metadata),
            created_at=_datetime_to_iso(detail.created_at),
            updated_at=_datetime_to_iso(detail.updated_at),
        )

    async def get_detail(self, detail_id: str) -> ProfileDetail | None:
        records = await self._run(
            """
            MATCH (p:Profile)-[:HAS_DETAIL]->(d:ProfileDetail {id: $id})
            RETURN p.id AS profile_id, d
            """,
            id=detail_id,
        )
        if not records:
            return None
        return _record_to_detail(records[0])

    async def list_details(
        self, profile_id: str, category: DetailCategory | None = None
    ) -> list[ProfileDetail]:
        records = await self._run(
            """
            MATCH (p:Profile {id: $id})-[:HAS_DETAIL]->(d:ProfileDetail)
            WHERE $category IS NULL OR d.category = $category
            RETURN p.id AS profile_id, d
            ORDER BY toLower(d.label), d.created_at
            """,
            id=profile_id,
            category=category.value if category is not None else None,
        )
        return [_record_to_detail(rec) for rec in records]

    async def update_detail(self, detail: ProfileDetail) -> bool:
        records = await self._run(
            """
            MATCH (:Profile)-[:HAS_DETAIL]->(d:ProfileDetail {id: $id})
            SET
                d.label = $label,
                d.value = $value,
                d.status = $status,
                d.occasion = $occasion,
                d.metadata = $metadata,
                d.updated_at = $updated_at
            RETURN 1 AS updated
            """,
            id=detail.id,
            label=detail.label,
            value=detail.value,
            status=detail.status,
            occasion=detail.occasion,
            metadata=json.dumps(detail.metadata),
            updated_at=_datetime_to_iso(detail.updated_at),
        )
        return bool(records)

    async def delete_detail(self, detail_id: str) -> bool:
        records = await self._run(
            """
            MATCH (d:ProfileDetail {id: $id})
            DETACH DELETE d
            RETURN 1 AS deleted
            """,
            id=detail_id,
        )
        return bool(records)


def _node_to_profile(node) -> Profile:
    include = node.get("include_in_family_tree")
    return Profile(
        id=node["id"],
        full_name=node.get("full_name") or "",
        preferred_name=node.get("preferred_name"),
        relationship=node.get("relationship"),
        photo_url=node.get("photo_url"),
        phone_number=node.get("phone_number"),
        include_in_family_tree=True if include is None else bool(include),
        created_at=_iso_to_datetime(node["created_at"]),
    )


def _record_to_connection(record) -> ProfileConnection:
    c = record["c"]
    return ProfileConnection(
        id=c["id"],
        from_profile_id=record["from_id"],
        to_profile_id=record["to_id"],
        relationship_type=ConnectionType.parse(c.get("relationship_type")),
        created_at=_iso_to_datetime(c["created_at"]),
    )


def _record_to_detail(record) -> ProfileDetail:
    d = record["d"]
    return ProfileDetail(
        id=d["id"],
        profile_id=record["profile_id"],
        category=DetailCategory(d["category"]),
        label=d.get("label") or "",
        value=d.get("value") or "",
        status=d.get("status"),
        occasion=d.get("occasion"),
        metadata=json.loads(d.get("metadata") or "{}"),
        created_at=_iso_to_datetime(d["created_at"]),
        updated_at=_iso_to_datetime(d.get("updated_at") or d["created_at"]),
    )
