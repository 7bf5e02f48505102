"""Authentication helpers.

This package provides:
- Password hashing/verification (bcrypt)
- The user credential store
"""

from tasklist.auth.passwords import hash_password, verify_password
from tasklist.auth.users import UserRecord, UserStore

__all__ = ["UserRecord", "UserStore", "hash_password", "verify_password"]
