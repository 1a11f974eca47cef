"""
auth/passwords.py -- One-way salted password hashing.

bcrypt used directly rather than through passlib: passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

bcrypt only reads 72 bytes of input, and bcrypt 5 raises on anything longer.
Plaintexts are UTF-8 encoded and cut to 72 bytes in both hash() and verify(),
so every string hashes, multi-byte passwords included.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

# Cost factor. Fixed by policy; changing it is a code change, not config.
HASH_ROUNDS = 10

MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Hash and verify passwords with bcrypt.

    Usage:
        hasher = PasswordHasher()
        hashed = hasher.hash("s3cret")
        hasher.verify("s3cret", hashed)   # True
    """

    def __init__(self, rounds: int = HASH_ROUNDS) -> None:
        self.rounds = rounds
        # Timing equalization target. Computed once so the first unknown-user
        # login is not measurably slower than the rest.
        self._dummy_hash = self.hash("authservice_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain with a fresh salt."""
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Never raises on mismatch or a malformed hash."""
        try:
            return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
        except ValueError:
            return False

    def verify_dummy(self, plain: str) -> None:
        """Spend one verify's worth of bcrypt work and discard the result.

        Called on the unknown-username login path so response time does not
        reveal whether the username exists.
        """
        self.verify(plain, self._dummy_hash)
