"""Profile, connection and detail use cases, plus the family tree entry point."""

import logging
from dataclasses import replace
from datetime import datetime, timezone

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
from kinship.application.family_tree import FamilyTreeBuilder
from kinship.application.ports import ProfileRepository
from kinship.domain import (
    ConnectionType,
    ConnectionWithProfile,
    DetailCategory,
    FamilyTreeNode,
    Profile,
    ProfileConnection,
    ProfileDetail,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """Manage profiles, their details and connections, and build family trees.
    StoreError propagates.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        *,
        tree_builder: FamilyTreeBuilder | None = None,
    ) -> None:
        self._repo = repository
        self._tree_builder = tree_builder or FamilyTreeBuilder(repository)

    async def add_profile(self, data: ProfileData) -> ProfileCreated | Invalid:
        name = (data.full_name or "").strip()
        if not name:
            return Invalid(reason="Name is required.")
        try:
            profile = Profile(
                full_name=name,
                preferred_name=data.preferred_name,
                relationship=data.relationship,
                photo_url=data.photo_url,
                phone_number=data.phone_number,
                include_in_family_tree=data.include_in_family_tree,
            )
        except ValueError as e:
            return Invalid(reason=str(e))

        await self._repo.add_profile(profile)
        return ProfileCreated(profile_id=profile.id, name=profile.display_name)

    async def get_profile(self, profile_id: str) -> Profile | None:
        return await self._repo.get_profile(profile_id)

    async def list_profiles(self) -> list[Profile]:
        return await self._repo.list_profiles()

    async def update_profile(
        self, profile_id: str, data: ProfileData
    ) -> ProfileUpdated | ProfileNotFound | Invalid:
        """Replace the editable fields. id and created_at are kept."""
        current = await self._repo.get_profile(profile_id)
        if current is None:
            return ProfileNotFound(profile_id=profile_id)
        name = (data.full_name or "").strip()
        if not name:
            return Invalid(reason="Name is required.")
        try:
            profile = replace(
                current,
                full_name=name,
                preferred_name=data.preferred_name,
                relationship=data.relationship,
                photo_url=data.photo_url,
                phone_number=data.phone_number,
                include_in_family_tree=data.include_in_family_tree,
            )
        except ValueError as e:
            return Invalid(reason=str(e))

        if not await self._repo.update_profile(profile):
            return ProfileNotFound(profile_id=profile_id)
        return ProfileUpdated(profile_id=profile.id, name=profile.display_name)

    async def delete_profile(self, profile_id: str) -> ProfileRemoved | ProfileNotFound:
        """Delete the profile with its details and every connection to or from it."""
        if not await self._repo.delete_profile(profile_id):
            return ProfileNotFound(profile_id=profile_id)
        logger.info("Deleted profile %s", profile_id)
        return ProfileRemoved(profile_id=profile_id)

    async def connect(
        self,
        from_profile_id: str,
        to_profile_id: str,
        relationship_type: ConnectionType | str,
        *,
        bidirectional: bool = True,
    ) -> ConnectionCreated | ProfileNotFound | Invalid:
        """Connect two profiles. With bidirectional, the reverse edge gets the inverse type."""
        if from_profile_id == to_profile_id:
            return Invalid(reason="A profile cannot be connected to itself.")
        for pid in (from_profile_id, to_profile_id):
            if await self._repo.get_profile(pid) is None:
                return ProfileNotFound(profile_id=pid)
        if await self._repo.find_connection(from_profile_id, to_profile_id):
            return Invalid(reason="These profiles are already connected.")

        rel = ConnectionType.parse(relationship_type)
        connection = ProfileConnection(
            from_profile_id=from_profile_id,
            to_profile_id=to_profile_id,
            relationship_type=rel,
        )
        await self._repo.add_connection(connection)

        inverse_id: str | None = None
        if bidirectional:
            existing = await self._repo.find_connection(to_profile_id, from_profile_id)
            if existing is None:
                inverse = ProfileConnection(
                    from_profile_id=to_profile_id,
                    to_profile_id=from_profile_id,
                    relationship_type=rel.inverse,
                )
                await self._repo.add_connection(inverse)
                inverse_id = inverse.id
        logger.info(
            "Connected %s -> %s as %s (inverse: %s)",
            from_profile_id,
            to_profile_id,
            rel.value,
            inverse_id,
        )
        return ConnectionCreated(
            connection_id=connection.id,
            relationship_type=rel,
            inverse_id=inverse_id,
        )

    async def disconnect(
        self, connection_id: str, *, bidirectional: bool = True
    ) -> ConnectionRemoved | ConnectionNotFound:
        connection = await self._repo.get_connection(connection_id)
        if connection is None:
            return ConnectionNotFound(connection_id=connection_id)

        inverse_removed = False
        if bidirectional:
            inverse = await self._repo.find_connection(
                connection.to_profile_id, connection.from_profile_id
            )
            if inverse is not None:
                inverse_removed = await self._repo.delete_connection(inverse.id)
        await self._repo.delete_connection(connection_id)
        return ConnectionRemoved(
            connection_id=connection_id, inverse_removed=inverse_removed
        )

    async def connections_of(self, profile_id: str) -> list[ConnectionWithProfile]:
        return await self._repo.connections_for(profile_id)

    async def family_tree(
        self, profile_id: str, max_depth: int | None = None
    ) -> FamilyTreeNode | ProfileNotFound:
        root = await self._repo.get_profile(profile_id)
        if root is None:
            return ProfileNotFound(profile_id=profile_id)
        return await self._tree_builder.build_tree(root, max_depth=max_depth)

    async def add_detail(
        self, profile_id: str, data: DetailData
    ) -> DetailCreated | ProfileNotFound | Invalid:
        if await self._repo.get_profile(profile_id) is None:
            return ProfileNotFound(profile_id=profile_id)
        try:
            detail = ProfileDetail(
                profile_id=profile_id,
                category=DetailCategory(data.category),
                label=data.label,
                value=data.value,
                status=data.status,
                occasion=data.occasion,
                metadata=data.metadata,
            )
        except ValueError as e:
            return Invalid(reason=str(e))

        await self._repo.add_detail(detail)
        return DetailCreated(detail_id=detail.id, profile_id=profile_id)

    async def details_of(
        self, profile_id: str, category: DetailCategory | str | None = None
    ) -> list[ProfileDetail] | ProfileNotFound | Invalid:
        if await self._repo.get_profile(profile_id) is None:
            return ProfileNotFound(profile_id=profile_id)
        if category is not None:
            try:
                category = DetailCategory(category)
            except ValueError:
                return Invalid(reason=f"Unknown detail category: {category}")
        return await self._repo.list_details(profile_id, category)

    async def update_detail(
        self, detail_id: str, data: DetailData
    ) -> DetailUpdated | DetailNotFound | Invalid:
        current = await self._repo.get_detail(detail_id)
        if current is None:
            return DetailNotFound(detail_id=detail_id)
        try:
            detail = replace(
                current,
                label=data.label,
                value=data.value,
                status=data.status,
                occasion=data.occasion,
                metadata=data.metadata,
                updated_at=datetime.now(timezone.utc),
            )
        except ValueError as e:
            return Invalid(reason=str(e))

        if not await self._repo.update_detail(detail):
            return DetailNotFound(detail_id=detail_id)
        return DetailUpdated(detail_id=detail_id)

    async def delete_detail(self, detail_id: str) -> DetailRemoved | DetailNotFound:
        if not await self._repo.delete_detail(detail_id):
            return DetailNotFound(detail_id=detail_id)
        return DetailRemoved(detail_id=detail_id)
