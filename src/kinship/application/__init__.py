"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from kinship.application.dto import (
    ConnectionCreated,
    ConnectionNotFound,
    ConnectionRemoved,
    DetailCreated,
    DetailData,
    DetailNotFound,
    DetailRemoved,
    DetailUpdated,
    Invalid,
    ProfileCreated,
    ProfileData,
    ProfileNotFound,
    ProfileRemoved,
    ProfileUpdated,
)
from kinship.application.family_tree import DEFAULT_MAX_DEPTH, FamilyTreeBuilder
from kinship.application.ports import ConnectionStore, ProfileRepository, StoreError
from kinship.application.profile_service import ProfileService
from kinship.application.tree_view import NodeSummary, TreeExpansion, visible_rows

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ConnectionCreated",
    "ConnectionNotFound",
    "ConnectionRemoved",
    "ConnectionStore",
    "DetailCreated",
    "DetailData",
    "DetailNotFound",
    "DetailRemoved",
    "DetailUpdated",
    "FamilyTreeBuilder",
    "Invalid",
    "NodeSummary",
    "ProfileCreated",
    "ProfileData",
    "ProfileNotFound",
    "ProfileRemoved",
    "ProfileRepository",
    "ProfileService",
    "ProfileUpdated",
    "StoreError",
    "TreeExpansion",
    "visible_rows",
]
