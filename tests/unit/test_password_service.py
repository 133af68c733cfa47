"""Unit tests for BcryptPasswordHasher."""

import pytest

from src.services.password_service import BcryptPasswordHasher


@pytest.fixture
def hasher():
    return BcryptPasswordHasher(rounds=4)


class TestPasswordHashing:
    """Tests for bcrypt hash / verify."""

    def test_hash_returns_bcrypt_string(self, hasher):
        hashed = hasher.hash("my-secret-pw")
        assert hashed.startswith("$2b$") or hashed.startswith("$2a$")
        assert len(hashed) == 60

    def test_hash_uses_configured_rounds(self):
        hashed = BcryptPasswordHasher(rounds=5).hash("pw")
        assert hashed.split("$")[2] == "05"

    def test_hash_different_salts(self, hasher):
        assert hasher.hash("same-password") != hasher.hash("same-password")

    def test_hash_is_not_the_password(self, hasher):
        assert "plain-text" not in hasher.hash("plain-text")

    def test_verify_correct(self, hasher):
        hashed = hasher.hash("correct-horse-battery")
        assert hasher.verify("correct-horse-battery", hashed) is True

    def test_verify_wrong(self, hasher):
        hashed = hasher.hash("right-password")
        assert hasher.verify("wrong-password", hashed) is False

    def test_verify_malformed_hash_returns_false(self, hasher):
        assert hasher.verify("anything", "not-a-bcrypt-hash") is False
