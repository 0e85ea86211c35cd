from __future__ import annotations

import logging
from typing import Annotated, List

from email_validator import validate_email
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import AfterValidator, BaseModel, Field

from application.services import (
    RegisterRequest,
    get_account,
    list_accounts,
    login_account,
    register_account,
)
from domain.repositories import AccountStore

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_ERROR = "Error"


def _check_email(value: str) -> str:
    # Validate only; the store keeps the address exactly as the client sent it.
    validate_email(value, check_deliverability=False)
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class RegisterBody(BaseModel):
    email: Email
    password: str = Field(min_length=1)
    username: str = Field(min_length=1)


class LoginBody(BaseModel):
    email: Email
    password: str = Field(min_length=1)


def ok(**payload) -> dict:
    return {"status": STATUS_OK, **payload}


def error(message: str) -> dict:
    return {"status": STATUS_ERROR, "error": message}


def _describe_validation_errors(errors: List[dict]) -> str:
    """
    Turn pydantic error entries into the short messages clients expect, e.g.
    "field email is a required field, field username is a required field".
    """

    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        if err.get("type") == "json_invalid" or not loc:
            return "failed to decode request"

        name = loc[-1]
        if err.get("type") in ("missing", "string_too_short"):
            messages.append(f"field {name} is a required field")
        elif name == "email":
            messages.append(f"field {name} is not a valid email")
        else:
            messages.append(f"field {name} is not valid")

    return ", ".join(messages)


def create_http_app(store: AccountStore) -> FastAPI:
    """
    Build the FastAPI application wired to the application layer.

    This module contains only HTTP concerns: decoding and validating request
    bodies and rendering results into the `{"status", "error"}` envelope.
    Failures are reported in the body with HTTP 200, as existing game
    clients expect.
    """

    app = FastAPI(title="game accounts")
    auth = APIRouter(prefix="/auth")
    users = APIRouter(prefix="/users")

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc.errors())
        logger.info("invalid request", extra={"path": request.url.path, "error": message})
        return JSONResponse(error(message))

    @auth.post("/register")
    def register(body: RegisterBody):
        result = register_account(
            RegisterRequest(email=body.email, password=body.password, username=body.username),
            store,
        )
        if not result.success:
            return error(result.error_message)
        return ok(user_id=result.user_id)

    @auth.post("/login")
    def login(body: LoginBody):
        result = login_account(body.email, body.password, store)
        if not result.success:
            return error(result.error_message)
        return ok(user=result.user.to_dict())

    @users.get("/user")
    def get_user(email: str = ""):
        result = get_account(email, store)
        if not result.success:
            return error(result.error_message)
        return ok(user=result.user.to_dict())

    @users.get("")
    def get_users():
        result = list_accounts(store)
        if not result.success:
            return error(result.error_message)
        return ok(users=[u.to_dict() for u in result.users])

    app.include_router(auth)
    app.include_router(users)
    return app
