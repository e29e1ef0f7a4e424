from __future__ import annotations

import uuid

from propdesk.utils.validators import is_uuid, normalize_search, sanitize_text, temporary_password


def test_sanitize_text_strips_null_and_trims():
    assert sanitize_text("  hello\x00world  ") == "helloworld"
    assert sanitize_text(None) == ""
    assert sanitize_text("abcdef", max_len=3) == "abc"


def test_normalize_search_lowercases():
    assert normalize_search("  Palermo SOHO ") == "palermo soho"
    assert normalize_search("   ") == ""


def test_is_uuid():
    assert is_uuid(str(uuid.uuid4()))
    assert not is_uuid("12345")
    assert not is_uuid(None)


def test_temporary_password_alphabet():
    password = temporary_password()
    assert len(password) == 12
    assert password.isalnum()
    assert password == password.lower()
