from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from domain.repositories import AccountStore
from infrastructure.security.bcrypt_hasher import DEFAULT_ROUNDS, BcryptHasher

BACKENDS = ("sqlite", "postgres")
ENVIRONMENTS = ("local", "dev", "prod")


@dataclass
class Settings:
    db_backend: str = "sqlite"
    db_path: str = "game.db"
    database_url: str = ""
    bcrypt_rounds: int = DEFAULT_ROUNDS
    http_host: str = "0.0.0.0"
    http_port: int = 8082
    log_level: str = "INFO"
    env: str = "local"

    @property
    def json_logs(self) -> bool:
        return self.env != "local"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from the process environment (or the given mapping).

    Callers that want `.env` support call `dotenv.load_dotenv()` first.
    """

    if env is None:
        env = os.environ

    settings = Settings(
        db_backend=env.get("DB_BACKEND", "sqlite").lower(),
        db_path=env.get("DB_PATH", "game.db"),
        database_url=env.get("DATABASE_URL", ""),
        bcrypt_rounds=_int_setting(env, "BCRYPT_ROUNDS", DEFAULT_ROUNDS),
        http_host=env.get("HTTP_HOST", "0.0.0.0"),
        http_port=_int_setting(env, "HTTP_PORT", 8082),
        log_level=env.get("LOG_LEVEL", "INFO"),
        env=env.get("ENV", "local").lower(),
    )

    if settings.db_backend not in BACKENDS:
        raise RuntimeError(f"DB_BACKEND must be one of {BACKENDS}, got {settings.db_backend!r}.")
    if settings.db_backend == "postgres" and not settings.database_url:
        raise RuntimeError("DATABASE_URL environment variable is not set.")
    if settings.env not in ENVIRONMENTS:
        raise RuntimeError(f"ENV must be one of {ENVIRONMENTS}, got {settings.env!r}.")

    return settings


def build_account_store(settings: Settings) -> AccountStore:
    hasher = BcryptHasher(rounds=settings.bcrypt_rounds)

    if settings.db_backend == "postgres":
        from infrastructure.db.account_repository_postgres import PostgresAccountRepository

        return PostgresAccountRepository(settings.database_url, hasher)

    from infrastructure.db.account_repository_sqlite import SqliteAccountRepository

    return SqliteAccountRepository(settings.db_path, hasher)
