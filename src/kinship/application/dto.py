"""Input DTOs and result types for profile, connection and detail use cases."""

from dataclasses import dataclass, field

from kinship.domain import ConnectionType


@dataclass(frozen=True)
class ProfileData:
    """Profile fields as typed by the user (or sent over the API)."""

    full_name: str
    preferred_name: str | None = None
    relationship: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    include_in_family_tree: bool = True


# --- add_profile results ---


@dataclass(frozen=True)
class ProfileCreated:
    profile_id: str
    name: str


@dataclass(frozen=True)
class Invalid:
    """Input rejected (e.g. blank name, self-connection, duplicate edge)."""

    reason: str


# --- connect / disconnect / family_tree results ---


@dataclass(frozen=True)
class ProfileNotFound:
    profile_id: str


@dataclass(frozen=True)
class ConnectionCreated:
    """Connection stored. inverse_id is set when a reverse edge was created."""

    connection_id: str
    relationship_type: ConnectionType
    inverse_id: str | None = None


@dataclass(frozen=True)
class ConnectionRemoved:
    connection_id: str
    inverse_removed: bool = False


@dataclass(frozen=True)
class ConnectionNotFound:
    connection_id: str


# --- update_profile / delete_profile results ---


@dataclass(frozen=True)
class ProfileUpdated:
    profile_id: str
    name: str


@dataclass(frozen=True)
class ProfileRemoved:
    profile_id: str


# --- profile details ---


@dataclass(frozen=True)
class DetailData:
    """Detail fields as typed by the user. category is ignored on update."""

    category: str
    label: str
    value: str = ""
    status: str | None = None
    occasion: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DetailCreated:
    detail_id: str
    profile_id: str


@dataclass(frozen=True)
class DetailUpdated:
    detail_id: str


@dataclass(frozen=True)
class DetailRemoved:
    detail_id: str


@dataclass(frozen=True)
class DetailNotFound:
    detail_id: str
