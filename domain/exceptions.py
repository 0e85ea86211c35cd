from __future__ import annotations

from enum import Enum


class AccountErrorKind(Enum):
    DUPLICATE_ACCOUNT = "duplicate_account"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    HASHING_FAILURE = "hashing_failure"
    STORAGE_FAILURE = "storage_failure"


class AccountError(Exception):
    """
    Base class for failures signalled by an account store.

    Messages are for logs only. Callers decide what to show by matching on
    the subclass or on `kind`.
    """

    kind: AccountErrorKind


class DuplicateAccount(AccountError):
    """An account with this email already exists."""

    kind = AccountErrorKind.DUPLICATE_ACCOUNT


class NotFound(AccountError):
    """No account matches the email."""

    kind = AccountErrorKind.NOT_FOUND


class InvalidCredentials(AccountError):
    """The account exists but the password does not verify."""

    kind = AccountErrorKind.INVALID_CREDENTIALS


class HashingFailure(AccountError):
    """The credential hasher could not produce a hash."""

    kind = AccountErrorKind.HASHING_FAILURE


class StorageFailure(AccountError):
    """Any persistence error other than a duplicate email."""

    kind = AccountErrorKind.STORAGE_FAILURE
