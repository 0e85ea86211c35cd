from __future__ import annotations

import bcrypt

from domain.exceptions import HashingFailure
from domain.repositories import CredentialHasher

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class BcryptHasher(CredentialHasher):
    """
    bcrypt-backed implementation of `CredentialHasher`.

    `rounds` is the log2 cost factor passed to `bcrypt.gensalt`.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self._rounds = rounds

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise HashingFailure(
                f"password is {len(encoded)} bytes, bcrypt accepts at most {MAX_PASSWORD_BYTES}"
            )

        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds))
        except ValueError as exc:
            raise HashingFailure("bcrypt could not hash the password") from exc

        return hashed.decode("utf-8")

    def verify(self, password_hash: str, candidate: str) -> bool:
        encoded = candidate.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False

        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False
