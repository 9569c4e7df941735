import datetime as dt
from types import SimpleNamespace

from app.models.enums import Permission, UserRole
from app.services.auth import can_write, hash_password, is_session_active, session_expiry, verify_password


def test_password_hash_round_trip() -> None:
    stored = hash_password("s3cret", iterations=1000)

    assert stored.startswith("pbkdf2_sha256$1000$")
    assert verify_password("s3cret", stored)
    assert not verify_password("S3cret", stored)


def test_same_password_gets_different_salts() -> None:
    assert hash_password("s3cret", iterations=1000) != hash_password("s3cret", iterations=1000)


def test_verify_password_rejects_malformed_hashes() -> None:
    assert not verify_password("s3cret", "")
    assert not verify_password("s3cret", "md5$abc")
    assert not verify_password("s3cret", "pbkdf2_sha256$many$salt$digest")


def test_session_expiry_and_activity() -> None:
    now = dt.datetime(2026, 1, 1, 12, tzinfo=dt.timezone.utc)
    expires_at = session_expiry(now, ttl_hours=24)

    assert expires_at == dt.datetime(2026, 1, 2, 12, tzinfo=dt.timezone.utc)
    assert is_session_active(SimpleNamespace(expires_at=expires_at), now)
    assert not is_session_active(SimpleNamespace(expires_at=expires_at), expires_at)


def test_naive_expiry_is_treated_as_utc() -> None:
    now = dt.datetime(2026, 1, 1, 12, tzinfo=dt.timezone.utc)

    assert is_session_active(SimpleNamespace(expires_at=dt.datetime(2026, 1, 1, 13)), now)


def test_write_access_requires_write_permission_or_admin() -> None:
    assert can_write(SimpleNamespace(role=UserRole.USER, permission=Permission.WRITE))
    assert can_write(SimpleNamespace(role=UserRole.ADMIN, permission=Permission.READ))
    assert not can_write(SimpleNamespace(role=UserRole.USER, permission=Permission.READ))
