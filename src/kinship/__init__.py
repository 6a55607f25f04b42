"""
Kinship core: clean-architecture layout.

- domain: entities (Profile, ProfileConnection, ProfileDetail, FamilyTreeNode), ConnectionType, DetailCategory. No outer dependencies.
- application: use cases (ProfileService, FamilyTreeBuilder), ports (ConnectionStore, ProfileRepository), DTOs.
- infrastructure: adapters (InMemoryProfileRepository, Neo4jProfileRepository).
"""

from kinship.application import (
    ConnectionStore,
    FamilyTreeBuilder,
    ProfileRepository,
    ProfileService,
    StoreError,
    TreeExpansion,
    visible_rows,
)
from kinship.domain import (
    ConnectionCategory,
    ConnectionType,
    ConnectionWithProfile,
    DetailCategory,
    FamilyTreeNode,
    Profile,
    ProfileConnection,
    ProfileDetail,
)
from kinship.infrastructure import InMemoryProfileRepository, Neo4jProfileRepository

__all__ = [
    "ConnectionCategory",
    "ConnectionStore",
    "ConnectionType",
    "ConnectionWithProfile",
    "DetailCategory",
    "FamilyTreeBuilder",
    "FamilyTreeNode",
    "InMemoryProfileRepository",
    "Neo4jProfileRepository",
    "Profile",
    "ProfileConnection",
    "ProfileDetail",
    "ProfileRepository",
    "ProfileService",
    "StoreError",
    "TreeExpansion",
    "visible_rows",
]
