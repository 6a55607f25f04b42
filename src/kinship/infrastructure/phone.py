"""Phone number normalization to E.164 for stored profiles."""

import phonenumbers
from phonenumbers import PhoneNumberFormat


def _valid_number(text: str, region: str | None) -> phonenumbers.PhoneNumber | None:
    try:
        number = phonenumbers.parse(text, region)
    except phonenumbers.NumberParseException:
        return None
    return number if phonenumbers.is_valid_number(number) else None


def normalize_phone(raw: str | None, default_region: str | None = None) -> str | None:
    """E.164 form of a profile's phone number.

    Returns None for blank input, text that does not parse, and numbers that
    are not assignable in their region. A national number (no leading +)
    needs default_region, e.g. "0121 234 5678" with "GB".
    """
    text = (raw or "").strip()
    number = _valid_number(text, default_region) if text else None
    if number is None:
        return None
    return phonenumbers.format_number(number, PhoneNumberFormat.E164)


def phone_for_storage(raw: str | None, default_region: str | None = None) -> str | None:
    """E.164 when parseable, otherwise the number as typed (stripped); None when blank."""
    text = (raw or "").strip()
    if not text:
        return None
    return normalize_phone(text, default_region) or text
