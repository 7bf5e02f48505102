"""Salted password hashing with bcrypt."""

import asyncio

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes; recent releases refuse longer input
_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash.

    Raises ValueError when ``password_hash`` is not a bcrypt hash.
    """
    return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))


async def verify_password_async(password: str, password_hash: str) -> bool:
    """``verify_password`` off the event loop; bcrypt is deliberately slow."""
    return await asyncio.to_thread(verify_password, password, password_hash)
