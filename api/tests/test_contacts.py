from datetime import datetime, timezone

import pytest

from conftest import run
from contacts import service
from core.errors import ValidationError


def _row(**overrides):
    row = {
        "id": 1,
        "name": "Ada",
        "email": "ada@example.com",
        "message": "Hello there",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize(
    "email",
    [
        "ada@example.com",
        "a.b+c@mail.example.org",
        "x@y.co",
    ],
)
def test_validate_submission_accepts_valid_email(email):
    service.validate_submission(name="Ada", email=email, message="hi")


@pytest.mark.parametrize(
    "email",
    [
        "plainaddress",
        "no-at.example.com",
        "ada@localhost",
        "ada@@example.com",
        "ada @example.com",
        "ada@exa mple.com",
        " ada@example.com",
        "@example.com",
        "ada@.",
    ],
)
def test_validate_submission_rejects_malformed_email(email):
    with pytest.raises(ValidationError) as exc:
        service.validate_submission(name="Ada", email=email, message="hi")
    assert exc.value.message == "Please provide a valid email address"


@pytest.mark.parametrize(
    "fields",
    [
        {"name": None, "email": "ada@example.com", "message": "hi"},
        {"name": "Ada", "email": "", "message": "hi"},
        {"name": "Ada", "email": "ada@example.com", "message": "   "},
    ],
)
def test_validate_submission_requires_all_fields(fields):
    with pytest.raises(ValidationError) as exc:
        service.validate_submission(**fields)
    assert "required" in exc.value.message


def test_validate_submission_rejects_overlong_name():
    with pytest.raises(ValidationError):
        service.validate_submission(name="x" * 256, email="ada@example.com", message="hi")


def test_submit_invalid_email_never_touches_store(fake_db, fake_pool):
    with pytest.raises(ValidationError):
        run(service.submit_contact(fake_db, name="Ada", email="nope", message="hi"))
    assert fake_pool.acquired == 0
    assert fake_pool.calls == []


def test_submit_inserts_and_returns_row(fake_db, fake_pool):
    fake_pool.queue("fetchrow", _row(id=42))

    row = run(service.submit_contact(fake_db, name="Ada", email="ada@example.com", message="Hello there"))

    assert row["id"] == 42
    assert row["email"] == "ada@example.com"
    (method, sql, args) = fake_pool.calls[0]
    assert method == "fetchrow"
    assert "INSERT INTO contacts" in sql
    assert args == ("Ada", "ada@example.com", "Hello there")
    assert fake_pool.acquired == fake_pool.released == 1


def test_submit_allows_duplicate_emails(fake_db, fake_pool):
    fake_pool.queue("fetchrow", _row(id=1), _row(id=2))

    first = run(service.submit_contact(fake_db, name="Ada", email="ada@example.com", message="one"))
    second = run(service.submit_contact(fake_db, name="Ada", email="ada@example.com", message="two"))

    assert (first["id"], second["id"]) == (1, 2)


def test_list_contacts_orders_newest_first(fake_db, fake_pool):
    fake_pool.queue("fetch", [_row(id=2), _row(id=1)])

    rows = run(service.list_contacts(fake_db))

    assert [r["id"] for r in rows] == [2, 1]
    assert "ORDER BY created_at DESC" in fake_pool.sql("fetch")[0]


def test_list_contacts_empty_store(fake_db):
    assert run(service.list_contacts(fake_db)) == []


def test_submit_rejects_nul_characters(fake_db, fake_pool):
    with pytest.raises(ValidationError) as exc:
        run(service.submit_contact(fake_db, name="Ada", email="ada@example.com", message="a\x00b"))

    assert exc.value.message == "message must not contain NUL characters"
    assert fake_pool.acquired == 0
