from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from domain.exceptions import AccountError, DuplicateAccount, InvalidCredentials, NotFound
from domain.models import User
from domain.repositories import AccountAuthenticator, AccountLookup, AccountRegisterer

logger = logging.getLogger(__name__)

MSG_USER_EXISTS = "user already exists"
MSG_REGISTER_FAILED = "failed to register user"
MSG_INVALID_LOGIN = "invalid email or password"
MSG_USER_NOT_FOUND = "user not found"
MSG_INTERNAL_ERROR = "internal error"
MSG_EMAIL_REQUIRED = "email query param required"
MSG_LIST_FAILED = "failed to get users"


@dataclass
class RegisterRequest:
    """Already-validated registration input from an interface layer."""

    email: str
    password: str
    username: str


@dataclass
class RegisterResult:
    success: bool
    error_message: Optional[str] = None
    user_id: Optional[int] = None


@dataclass
class UserResult:
    """Result of an operation that yields a single account."""

    success: bool
    error_message: Optional[str] = None
    user: Optional[User] = None


@dataclass
class UsersResult:
    success: bool
    error_message: Optional[str] = None
    users: List[User] = field(default_factory=list)


def register_account(request: RegisterRequest, registerer: AccountRegisterer) -> RegisterResult:
    """
    Create a new account.

    A taken email is reported as such; every other failure collapses into a
    generic message so storage or hashing details never reach the caller.
    """

    op = "application.services.register_account"

    try:
        user_id = registerer.register(request.email, request.password, request.username)
    except DuplicateAccount as exc:
        logger.warning("user already exists", extra={"op": op, "kind": exc.kind.value})
        return RegisterResult(success=False, error_message=MSG_USER_EXISTS)
    except AccountError as exc:
        logger.error(
            "failed to register user",
            exc_info=exc,
            extra={"op": op, "kind": exc.kind.value},
        )
        return RegisterResult(success=False, error_message=MSG_REGISTER_FAILED)

    logger.info("user registered", extra={"op": op, "user_id": user_id})
    return RegisterResult(success=True, user_id=user_id)


def login_account(email: str, password: str, authenticator: AccountAuthenticator) -> UserResult:
    """
    Check credentials and return the account.

    Unknown email and wrong password produce the same message so the
    response cannot be used to discover which emails are registered. The
    distinct kind is still logged.
    """

    op = "application.services.login_account"

    try:
        user = authenticator.login(email, password)
    except (NotFound, InvalidCredentials) as exc:
        logger.info("failed to login user", extra={"op": op, "kind": exc.kind.value})
        return UserResult(success=False, error_message=MSG_INVALID_LOGIN)
    except AccountError as exc:
        logger.error("failed to login user", exc_info=exc, extra={"op": op, "kind": exc.kind.value})
        return UserResult(success=False, error_message=MSG_INVALID_LOGIN)

    logger.info("user logged in", extra={"op": op, "user_id": user.id})
    return UserResult(success=True, user=user)


def get_account(email: str, lookup: AccountLookup) -> UserResult:
    op = "application.services.get_account"

    email = email.strip()
    if not email:
        return UserResult(success=False, error_message=MSG_EMAIL_REQUIRED)

    try:
        user = lookup.get_by_email(email)
    except NotFound:
        return UserResult(success=False, error_message=MSG_USER_NOT_FOUND)
    except AccountError as exc:
        logger.error("failed to get user", exc_info=exc, extra={"op": op, "kind": exc.kind.value})
        return UserResult(success=False, error_message=MSG_INTERNAL_ERROR)

    return UserResult(success=True, user=user)


def list_accounts(lookup: AccountLookup) -> UsersResult:
    op = "application.services.list_accounts"

    try:
        users = lookup.list_all()
    except AccountError as exc:
        logger.error("failed to get users", exc_info=exc, extra={"op": op, "kind": exc.kind.value})
        return UsersResult(success=False, error_message=MSG_LIST_FAILED)

    return UsersResult(success=True, users=users)
