"""Domain entities: Profile, ProfileConnection, and the FamilyTreeNode value type."""

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

from kinship.domain.connection_types import ConnectionType

# Max length for free-text profile fields.
NAME_MAX_LENGTH = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@dataclass(frozen=True)
class Profile:
    """
    A person the account owner keeps records about.
    full_name is required; every optional text field is stored stripped, blank as None.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    full_name: str = field(default="")
    preferred_name: str | None = None
    relationship: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    include_in_family_tree: bool = True
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        name = (self.full_name or "").strip()
        if not name:
            raise ValueError("Profile full_name must be non-empty.")
        if len(name) > NAME_MAX_LENGTH:
            raise ValueError(
                f"Profile full_name must be at most {NAME_MAX_LENGTH} chars."
            )
        object.__setattr__(self, "full_name", name)
        for attr in ("preferred_name", "relationship", "photo_url", "phone_number"):
            object.__setattr__(self, attr, _clean_optional(getattr(self, attr)))

    @property
    def display_name(self) -> str:
        return self.preferred_name or self.full_name


@dataclass(frozen=True)
class ProfileConnection:
    """A directed, typed edge from one profile to another."""

    from_profile_id: str
    to_profile_id: str
    relationship_type: ConnectionType = ConnectionType.OTHER
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.from_profile_id or not self.to_profile_id:
            raise ValueError("Connection endpoints must be non-empty.")
        if self.from_profile_id == self.to_profile_id:
            raise ValueError("A profile cannot be connected to itself.")
        object.__setattr__(
            self, "relationship_type", ConnectionType.parse(self.relationship_type)
        )


@dataclass(frozen=True)
class ConnectionWithProfile:
    """A connection paired with the full record of the profile it points to."""

    connection: ProfileConnection
    connected_profile: Profile

    @property
    def id(self) -> str:
        return self.connection.id

    @property
    def relationship_type(self) -> ConnectionType:
        return self.connection.relationship_type


@dataclass(frozen=True)
class FamilyTreeNode:
    """
    One node of a family tree built around a root profile.
    relationship_to_parent is None for the root; children keep store order.
    """

    profile: Profile
    relationship_to_parent: ConnectionType | None = None
    children: tuple["FamilyTreeNode", ...] = ()
    depth: int = 0

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def walk(self) -> Iterator["FamilyTreeNode"]:
        """Yield this node and all descendants, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def size(self) -> int:
        return sum(1 for _ in self.walk())

    @property
    def height(self) -> int:
        return max(node.depth for node in self.walk()) - self.depth
