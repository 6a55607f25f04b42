"""Domain layer: entities and value objects. No dependencies on outer layers."""

from kinship.domain.connection_types import ConnectionCategory, ConnectionType
from kinship.domain.details import DetailCategory, ProfileDetail
from kinship.domain.entities import (
    ConnectionWithProfile,
    FamilyTreeNode,
    Profile,
    ProfileConnection,
)

__all__ = [
    "ConnectionCategory",
    "ConnectionType",
    "ConnectionWithProfile",
    "DetailCategory",
    "FamilyTreeNode",
    "Profile",
    "ProfileConnection",
    "ProfileDetail",
]
