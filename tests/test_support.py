from __future__ import annotations

import pytest

from lingua_core.support import submit_support_message


def test_message_is_stored_trimmed_with_status_new(store):
    row = submit_support_message(store, " Ann ", "ann@example.com", "Audio", " The audio never starts. ", user_id="u1")
    assert row["name"] == "Ann"
    assert row["message"] == "The audio never starts."
    assert row["user_id"] == "u1"
    assert row["status"] == "new"
    assert store.support_messages() == [row]


def test_anonymous_message_has_no_user(store):
    row = submit_support_message(store, "Ann", "ann@example.com", "Hi", "Hello", user_id="")
    assert row["user_id"] is None


@pytest.mark.parametrize(
    "fields, text",
    [
        (("", "ann@example.com", "Hi", "Hello"), "missing name"),
        (("Ann", "ann@example.com", "  ", ""), "missing subject, message"),
        (("Ann", "ann.example.com", "Hi", "Hello"), "email"),
    ],
)
def test_invalid_messages_are_rejected(store, fields, text):
    with pytest.raises(ValueError, match=text):
        submit_support_message(store, *fields)
    assert store.support_messages() == []
