"""Infrastructure layer: concrete implementations of application ports."""

from kinship.infrastructure.memory_repository import InMemoryProfileRepository
from kinship.infrastructure.persistence.neo4j_repository import (
    Neo4jProfileRepository,
    ensure_profile_constraint,
)
from kinship.infrastructure.phone import normalize_phone, phone_for_storage

__all__ = [
    "InMemoryProfileRepository",
    "Neo4jProfileRepository",
    "ensure_profile_constraint",
    "normalize_phone",
    "phone_for_storage",
]
