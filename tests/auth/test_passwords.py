"""Tests for bcrypt hashing and the password policy."""

from __future__ import annotations

import pytest

from kolhub.auth import PasswordHasher, fits_hash_limit, meets_password_policy


class TestPasswordPolicy:
    @pytest.mark.parametrize("password", ["Passw0rd!", "Abcdefg1?", 'x"Y9zzzzz'])
    def test_accepts_strong_passwords(self, password: str) -> None:
        assert meets_password_policy(password)

    @pytest.mark.parametrize(
        "password",
        [
            "Pa0!",  # too short
            "password1!",  # no uppercase
            "PASSWORD1!",  # no lowercase
            "Password!!",  # no digit
            "Password11",  # no special character
            None,
            12345678,
        ],
    )
    def test_rejects_weak_passwords(self, password: object) -> None:
        assert not meets_password_policy(password)


class TestHashLimit:
    def test_72_bytes_fit(self) -> None:
        assert fits_hash_limit("Aa1!" + "x" * 68)

    def test_longer_is_refused(self) -> None:
        assert not fits_hash_limit("Aa1!" + "x" * 69)

    def test_counts_utf8_bytes(self) -> None:
        assert not fits_hash_limit("Aa1!" + "\u00e9" * 35)


class TestPasswordHasher:
    def test_hash_and_verify(self) -> None:
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("Passw0rd!")

        assert hashed != "Passw0rd!"
        assert hashed.startswith("$2")
        assert hasher.verify("Passw0rd!", hashed)
        assert not hasher.verify("passw0rd!", hashed)

    def test_malformed_hash_is_a_mismatch(self) -> None:
        assert not PasswordHasher(rounds=4).verify("Passw0rd!", "not-a-bcrypt-hash")
