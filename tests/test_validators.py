from datetime import datetime, timedelta, timezone

import pytest

from autoshop.shared.validators import clean_notes, to_local_naive, validate_email


def test_validate_email_normalises():
    assert validate_email("  John.Doe@Example.COM ") == "john.doe@example.com"


def test_validate_email_rejects_garbage():
    with pytest.raises(ValueError):
        validate_email("not-an-email")


def test_clean_notes():
    assert clean_notes(None) is None
    assert clean_notes("   ") is None
    assert clean_notes("<i>rattle</i> at 60mph") == "rattle at 60mph"


def test_clean_notes_length_limit():
    with pytest.raises(ValueError):
        clean_notes("x" * 1001)


def test_to_local_naive():
    naive = datetime(2026, 1, 1, 8, 0)
    assert to_local_naive(naive) is naive

    aware = datetime(2026, 1, 1, 8, 0, tzinfo=timezone(timedelta(hours=2)))
    converted = to_local_naive(aware)
    assert converted.tzinfo is None
    assert converted == aware.astimezone().replace(tzinfo=None)
