"""Tests for bcrypt password hashing and the credential store."""

from pathlib import Path

import pytest

from tasklist.auth.passwords import hash_password, verify_password, verify_password_async
from tasklist.auth.users import UserStore
from tasklist.core.errors import ErrorCode, TasklistError


def test_hash_is_salted() -> None:
    first = hash_password("secret", rounds=4)
    second = hash_password("secret", rounds=4)

    assert first != second
    assert first.startswith("$2b$04$")


def test_verify_roundtrip() -> None:
    hashed = hash_password("secret", rounds=4)

    assert verify_password("secret", hashed)
    assert not verify_password("Secret", hashed)


def test_long_passwords_use_first_72_bytes() -> None:
    hashed = hash_password("x" * 100, rounds=4)

    assert verify_password("x" * 72, hashed)


def test_malformed_hash_raises() -> None:
    with pytest.raises(ValueError):
        verify_password("secret", "not-a-bcrypt-hash")


@pytest.mark.asyncio
async def test_verify_async() -> None:
    hashed = hash_password("secret", rounds=4)

    assert await verify_password_async("secret", hashed)


class TestUserStore:
    """Credential lookups and provisioning."""

    @pytest.mark.asyncio
    async def test_authenticate(self, tmp_path: Path) -> None:
        users = UserStore.open(tmp_path / "users.db")
        await users.add("ada", "lovelace", rounds=4)

        assert await users.authenticate("ada", "lovelace")
        assert not await users.authenticate("ada", "wrong")
        assert not await users.authenticate("nobody", "lovelace")

    @pytest.mark.asyncio
    async def test_username_match_is_exact(self, tmp_path: Path) -> None:
        users = UserStore.open(tmp_path / "users.db")
        await users.add("ada", "lovelace", rounds=4)

        assert await users.get("Ada") is None
        record = await users.get("ada")
        assert record is not None
        assert record.pass_hash.startswith("$2b$")

    @pytest.mark.asyncio
    async def test_duplicate_user_rejected(self, tmp_path: Path) -> None:
        users = UserStore.open(tmp_path / "users.db")
        await users.add("ada", "one", rounds=4)

        with pytest.raises(TasklistError) as exc_info:
            await users.add("ada", "two", rounds=4)
        assert exc_info.value.code == ErrorCode.STORE_DUPLICATE

    @pytest.mark.asyncio
    async def test_list_and_remove(self, tmp_path: Path) -> None:
        users = UserStore.open(tmp_path / "users.db")
        await users.add("grace", "hopper", rounds=4)
        await users.add("ada", "lovelace", rounds=4)

        assert await users.usernames() == ["ada", "grace"]
        assert await users.remove("ada")
        assert not await users.remove("ada")
        assert await users.usernames() == ["grace"]
