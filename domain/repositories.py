from __future__ import annotations

from typing import List, Protocol

from .models import User


class CredentialHasher(Protocol):
    """
    One-way password transform.

    Implementations salt internally, so hashing the same password twice
    yields two different strings that both verify.
    """

    def hash(self, password: str) -> str:
        """Return a hash of `password`, or raise `HashingFailure`."""

        ...

    def verify(self, password_hash: str, candidate: str) -> bool:
        """Return True only if `candidate` produced `password_hash`."""

        ...


class AccountRegisterer(Protocol):
    def register(self, email: str, password: str, username: str) -> int:
        """
        Create an account and return its new ID.

        Raises `DuplicateAccount` if the email is taken, `HashingFailure` if
        the password cannot be hashed and `StorageFailure` otherwise.
        """

        ...


class AccountAuthenticator(Protocol):
    def login(self, email: str, password: str) -> User:
        """
        Return the account for `email` if `password` verifies.

        Raises `NotFound` or `InvalidCredentials`.
        """

        ...


class AccountLookup(Protocol):
    def get_by_email(self, email: str) -> User:
        """Return the account for `email` or raise `NotFound`."""

        ...

    def list_all(self) -> List[User]:
        """Return every account, in storage order."""

        ...


class AccountStore(AccountRegisterer, AccountAuthenticator, AccountLookup, Protocol):
    """
    Persistence abstraction for game accounts.

    Implementations are responsible for:
    - Enforcing email uniqueness through the storage engine itself.
    - Never returning a `User` with `password_hash` set.
    - Mapping driver errors to the `AccountError` hierarchy.
    """
