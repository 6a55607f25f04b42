"""In-memory implementation of ProfileRepository (no DB)."""

from dataclasses import replace

from kinship.domain import (
    ConnectionWithProfile,
    DetailCategory,
    Profile,
    ProfileConnection,
    ProfileDetail,
)
from kinship.infrastructure.phone import phone_for_storage


class InMemoryProfileRepository:
    """Stores profiles, connections and details in dicts. Order preserved by insertion."""

    def __init__(self, default_region: str | None = None) -> None:
        self._default_region = default_region
        self._profiles: dict[str, Profile] = {}
        self._connections: dict[str, ProfileConnection] = {}
        self._details: dict[str, ProfileDetail] = {}

    async def add_profile(self, profile: Profile) -> None:
        if profile.id in self._profiles:
            return
        phone = phone_for_storage(profile.phone_number, self._default_region)
        if phone != profile.phone_number:
            profile = replace(profile, phone_number=phone)
        self._profiles[profile.id] = profile

    async def get_profile(self, profile_id: str) -> Profile | None:
        return self._profiles.get(profile_id)

    async def list_profiles(self) -> list[Profile]:
        return list(self._profiles.values())

    async def update_profile(self, profile: Profile) -> bool:
        if profile.id not in self._profiles:
            return False
        phone = phone_for_storage(profile.phone_number, self._default_region)
        self._profiles[profile.id] = replace(profile, phone_number=phone)
        return True

    async def delete_profile(self, profile_id: str) -> bool:
        if self._profiles.pop(profile_id, None) is None:
            return False
        self._details = {
            did: d for did, d in self._details.items() if d.profile_id != profile_id
        }
        self._connections = {
            cid: c
            for cid, c in self._connections.items()
            if profile_id not in (c.from_profile_id, c.to_profile_id)
        }
        return True

    async def add_connection(self, connection: ProfileConnection) -> None:
        self._connections.setdefault(connection.id, connection)

    async def get_connection(self, connection_id: str) -> ProfileConnection | None:
        return self._connections.get(connection_id)

    async def find_connection(
        self, from_profile_id: str, to_profile_id: str
    ) -> ProfileConnection | None:
        for c in self._connections.values():
            if c.from_profile_id == from_profile_id and c.to_profile_id == to_profile_id:
                return c
        return None

    async def delete_connection(self, connection_id: str) -> bool:
        return self._connections.pop(connection_id, None) is not None

    async def connections_for(self, profile_id: str) -> list[ConnectionWithProfile]:
        out = []
        for c in self._connections.values():
            if c.from_profile_id != profile_id:
                continue
            target = self._profiles.get(c.to_profile_id)
            if target is None:
                continue
            out.append(ConnectionWithProfile(connection=c, connected_profile=target))
        return out

    async def add_detail(self, detail: ProfileDetail) -> None:
        self._details.setdefault(detail.id, detail)

    async def get_detail(self, detail_id: str) -> ProfileDetail | None:
        return self._details.get(detail_id)

    async def list_details(
        self, profile_id: str, category: DetailCategory | None = None
    ) -> list[ProfileDetail]:
        out = [
            d
            for d in self._details.values()
            if d.profile_id == profile_id and (category is None or d.category == category)
        ]
        return sorted(out, key=lambda d: (d.label.lower(), d.created_at))

    async def update_detail(self, detail: ProfileDetail) -> bool:
        if detail.id not in self._details:
            return False
        self._details[detail.id] = detail
        return True

    async def delete_detail(self, detail_id: str) -> bool:
        return self._details.pop(detail_id, None) is not None
