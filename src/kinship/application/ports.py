"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from kinship.domain import (
    ConnectionWithProfile,
    DetailCategory,
    Profile,
    ProfileConnection,
    ProfileDetail,
)


class StoreError(Exception):
    """A store read or write failed (I/O, driver, or backend error)."""


class ConnectionStore(Protocol):
    """Read side used by the family tree builder."""

    async def connections_for(self, profile_id: str) -> list[ConnectionWithProfile]:
        """Return outgoing connections of the profile, each with the connected profile.

        Order is stable (creation order). Connections whose target profile no
        longer exists are omitted. Raises StoreError on I/O failure.
        """
        ...


class ProfileRepository(ConnectionStore, Protocol):
    """Persists profiles and the directed connections between them."""

    async def add_profile(self, profile: Profile) -> None:
        ...

    async def get_profile(self, profile_id: str) -> Profile | None:
        """Return the profile with the given id, or None."""
        ...

    async def list_profiles(self) -> list[Profile]:
        """Return all profiles in creation order."""
        ...

    async def update_profile(self, profile: Profile) -> bool:
        """Replace the stored fields of an existing profile. False if not found."""
        ...

    async def delete_profile(self, profile_id: str) -> bool:
        """Delete the profile, its details, and every connection touching it. False if not found."""
        ...

    async def add_connection(self, connection: ProfileConnection) -> None:
        ...

    async def get_connection(self, connection_id: str) -> ProfileConnection | None:
        ...

    async def find_connection(
        self, from_profile_id: str, to_profile_id: str
    ) -> ProfileConnection | None:
        """Return the edge from -> to, or None."""
        ...

    async def delete_connection(self, connection_id: str) -> bool:
        """Delete one directed edge. False if not found."""
        ...

    async def add_detail(self, detail: ProfileDetail) -> None:
        ...

    async def get_detail(self, detail_id: str) -> ProfileDetail | None:
        ...

    async def list_details(
        self, profile_id: str, category: DetailCategory | None = None
    ) -> list[ProfileDetail]:
        """Return the profile's details ordered by label (case-insensitive), optionally one category."""
        ...

    async def update_detail(self, detail: ProfileDetail) -> bool:
        """Replace label, value, status, occasion, metadata, updated_at. False if not found."""
        ...

    async def delete_detail(self, detail_id: str) -> bool:
        ...
