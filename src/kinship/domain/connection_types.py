"""Connection types between profiles: display labels, categories, inverses."""

from enum import Enum


class ConnectionCategory(str, Enum):
    FAMILY = "Family"
    PROFESSIONAL = "Professional"
    SOCIAL = "Social"
    OTHER = "Other"


class ConnectionType(str, Enum):
    """
    Relationship tag carried by a connection edge.
    Values are the stored strings; unknown stored values parse to OTHER.
    """

    # Family
    ME = "me"
    MOTHER = "mother"
    FATHER = "father"
    SON = "son"
    DAUGHTER = "daughter"
    BROTHER = "brother"
    SISTER = "sister"
    GRANDMOTHER = "grandmother"
    GRANDFATHER = "grandfather"
    GRANDSON = "grandson"
    GRANDDAUGHTER = "granddaughter"
    AUNT = "aunt"
    UNCLE = "uncle"
    NEPHEW = "nephew"
    NIECE = "niece"
    COUSIN = "cousin"
    SPOUSE = "spouse"
    PARTNER = "partner"
    EX_SPOUSE = "exSpouse"
    INLAW = "inlaw"

    # Professional
    DOCTOR = "doctor"
    DENTIST = "dentist"
    LAWYER = "lawyer"
    ACCOUNTANT = "accountant"
    CARER = "carer"

    # Social
    FRIEND = "friend"
    NEIGHBOUR = "neighbour"
    COLLEAGUE = "colleague"

    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | ConnectionType | None") -> "ConnectionType":
        if isinstance(value, ConnectionType):
            return value
        try:
            return cls((value or "").strip())
        except ValueError:
            return cls.OTHER

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value.capitalize())

    @property
    def category(self) -> ConnectionCategory:
        if self in _FAMILY:
            return ConnectionCategory.FAMILY
        if self in _PROFESSIONAL:
            return ConnectionCategory.PROFESSIONAL
        if self in _SOCIAL:
            return ConnectionCategory.SOCIAL
        return ConnectionCategory.OTHER

    @property
    def inverse(self) -> "ConnectionType":
        """Type stored on the reverse edge of a bidirectional connection.

        Gendered inverses are approximate (mother -> son, daughter -> mother).
        """
        if self in _SELF_INVERSE:
            return self
        return _INVERSES.get(self, ConnectionType.OTHER)

    @staticmethod
    def family_types() -> list["ConnectionType"]:
        return list(_FAMILY)

    @staticmethod
    def professional_types() -> list["ConnectionType"]:
        return list(_PROFESSIONAL)

    @staticmethod
    def social_types() -> list["ConnectionType"]:
        return list(_SOCIAL)


_FAMILY = (
    ConnectionType.ME,
    ConnectionType.MOTHER,
    ConnectionType.FATHER,
    ConnectionType.SON,
    ConnectionType.DAUGHTER,
    ConnectionType.BROTHER,
    ConnectionType.SISTER,
    ConnectionType.GRANDMOTHER,
    ConnectionType.GRANDFATHER,
    ConnectionType.GRANDSON,
    ConnectionType.GRANDDAUGHTER,
    ConnectionType.AUNT,
    ConnectionType.UNCLE,
    ConnectionType.NEPHEW,
    ConnectionType.NIECE,
    ConnectionType.COUSIN,
    ConnectionType.SPOUSE,
    ConnectionType.PARTNER,
    ConnectionType.EX_SPOUSE,
    ConnectionType.INLAW,
)

_PROFESSIONAL = (
    ConnectionType.DOCTOR,
    ConnectionType.DENTIST,
    ConnectionType.LAWYER,
    ConnectionType.ACCOUNTANT,
    ConnectionType.CARER,
)

_SOCIAL = (
    ConnectionType.FRIEND,
    ConnectionType.NEIGHBOUR,
    ConnectionType.COLLEAGUE,
)

_DISPLAY_NAMES = {
    ConnectionType.EX_SPOUSE: "Ex Spouse",
    ConnectionType.INLAW: "In Law",
}

_SELF_INVERSE = frozenset(
    {
        ConnectionType.ME,
        ConnectionType.BROTHER,
        ConnectionType.SISTER,
        ConnectionType.COUSIN,
        ConnectionType.SPOUSE,
        ConnectionType.PARTNER,
        ConnectionType.EX_SPOUSE,
        ConnectionType.INLAW,
        ConnectionType.FRIEND,
        ConnectionType.NEIGHBOUR,
        ConnectionType.COLLEAGUE,
        ConnectionType.OTHER,
    }
)

_INVERSES = {
    ConnectionType.MOTHER: ConnectionType.SON,
    ConnectionType.FATHER: ConnectionType.SON,
    ConnectionType.SON: ConnectionType.FATHER,
    ConnectionType.DAUGHTER: ConnectionType.MOTHER,
    ConnectionType.GRANDMOTHER: ConnectionType.GRANDSON,
    ConnectionType.GRANDFATHER: ConnectionType.GRANDSON,
    ConnectionType.GRANDSON: ConnectionType.GRANDFATHER,
    ConnectionType.GRANDDAUGHTER: ConnectionType.GRANDMOTHER,
    ConnectionType.AUNT: ConnectionType.NEPHEW,
    ConnectionType.UNCLE: ConnectionType.NIECE,
    ConnectionType.NEPHEW: ConnectionType.UNCLE,
    ConnectionType.NIECE: ConnectionType.AUNT,
}
