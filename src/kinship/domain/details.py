"""Categorized details kept about a profile: sizes, gift ideas, medical notes, hobbies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

LABEL_MAX_LENGTH = 200
VALUE_MAX_LENGTH = 2000


class DetailCategory(str, Enum):
    CLOTHING = "clothing"
    GIFT_IDEA = "gift_idea"
    MEDICAL_CONDITION = "medical_condition"
    ALLERGY = "allergy"
    LIKE = "like"
    DISLIKE = "dislike"
    NOTE = "note"
    HOBBY = "hobby"
    ACTIVITY_IDEA = "activity_idea"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    DetailCategory.CLOTHING: "Clothing",
    DetailCategory.GIFT_IDEA: "Gift",
    DetailCategory.MEDICAL_CONDITION: "Medical Condition",
    DetailCategory.ALLERGY: "Allergy",
    DetailCategory.LIKE: "Like",
    DetailCategory.DISLIKE: "Dislike",
    DetailCategory.NOTE: "Note",
    DetailCategory.HOBBY: "Hobby",
    DetailCategory.ACTIVITY_IDEA: "Activity",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProfileDetail:
    """
    One labelled value about a profile, e.g. clothing "Shoe size" = "7".
    category is fixed once created; label is required.
    """

    profile_id: str
    category: DetailCategory
    label: str = ""
    value: str = ""
    status: str | None = None
    occasion: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.profile_id:
            raise ValueError("Detail must belong to a profile.")
        object.__setattr__(self, "category", DetailCategory(self.category))
        label = (self.label or "").strip()
        if not label:
            raise ValueError("Detail label must be non-empty.")
        if len(label) > LABEL_MAX_LENGTH:
            raise ValueError(f"Detail label must be at most {LABEL_MAX_LENGTH} chars.")
        value = (self.value or "").strip()
        if len(value) > VALUE_MAX_LENGTH:
            raise ValueError(f"Detail value must be at most {VALUE_MAX_LENGTH} chars.")
        object.__setattr__(self, "label", label)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "status", (self.status or "").strip() or None)
        object.__setattr__(self, "occasion", (self.occasion or "").strip() or None)
        object.__setattr__(self, "metadata", dict(self.metadata or {}))
