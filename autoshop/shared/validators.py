"""Shared validation utilities"""

import re
from datetime import datetime
from typing import Optional

import bleach

NOTES_MAX_LENGTH = 1000

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def clean_notes(notes: Optional[str], max_length: int = NOTES_MAX_LENGTH) -> Optional[str]:
    """
    Strip markup from free-text notes.

    Returns None for blank input.

    Raises:
        ValueError: If the text exceeds max_length
    """
    if notes is None:
        return None

    cleaned = bleach.clean(notes, tags=[], attributes={}, strip=True).strip()
    if not cleaned:
        return None

    if len(cleaned) > max_length:
        raise ValueError(f"Notes exceed maximum length of {max_length} characters")

    return cleaned


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through"""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
