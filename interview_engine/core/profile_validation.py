"""
Profile field sanitizing and required-field checks.
"""

import re

from interview_engine.models.candidate import CandidateProfile, RequiredProfileField

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_DIGIT_COUNT = 10
EMAIL_MAX_LENGTH = 100


def normalize_phone_digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def sanitize_phone(value: str | None) -> str:
    """Digits only, keeping the last ten when there are more."""
    digits = normalize_phone_digits(value)
    return digits[-PHONE_DIGIT_COUNT:]


def sanitize_email(value: str | None) -> str:
    return (value or "").strip()[:EMAIL_MAX_LENGTH]


def is_valid_phone(value: str | None) -> bool:
    if not value:
        return False
    return len(normalize_phone_digits(value)) == PHONE_DIGIT_COUNT


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    sanitized = sanitize_email(value)
    return bool(sanitized) and EMAIL_PATTERN.match(sanitized) is not None


def sanitize_field(field: RequiredProfileField, value: str | None) -> str:
    if field == RequiredProfileField.EMAIL:
        return sanitize_email(value)
    if field == RequiredProfileField.PHONE:
        return sanitize_phone(value)
    return (value or "").strip()


def find_missing_fields(profile: CandidateProfile) -> list[RequiredProfileField]:
    """Required fields that are absent or invalid, in declaration order."""
    missing = []
    if not profile.name or not profile.name.strip():
        missing.append(RequiredProfileField.NAME)
    if not is_valid_email(profile.email):
        missing.append(RequiredProfileField.EMAIL)
    if not is_valid_phone(profile.phone):
        missing.append(RequiredProfileField.PHONE)
    return missing


def normalize_profile(profile: CandidateProfile) -> CandidateProfile:
    """Sanitize contact fields and recompute what is still missing."""
    updates = {}
    for field in RequiredProfileField:
        raw = getattr(profile, field.value)
        if raw is None:
            continue
        cleaned = sanitize_field(field, raw)
        updates[field.value] = cleaned or None
    cleaned_profile = profile.model_copy(update=updates)
    return cleaned_profile.model_copy(update={"missing_fields": find_missing_fields(cleaned_profile)})
