"""Unit tests for password hashing."""

from src.pm_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain() -> None:
    hashed = hash_password("MySecret1")
    assert hashed != "MySecret1"
    assert hashed.startswith("$2")


def test_verify_round_trip() -> None:
    hashed = hash_password("MySecret1")
    assert verify_password("MySecret1", hashed) is True
    assert verify_password("WrongPass9", hashed) is False


def test_salted() -> None:
    assert hash_password("MySecret1") != hash_password("MySecret1")


def test_placeholder_hash_never_verifies() -> None:
    placeholder = "$2b$12$PROTOCOL.ROLE.ACCOUNT.NO.LOGIN.PLACEHOLDER.HASH.000"
    assert verify_password("anything", placeholder) is False
