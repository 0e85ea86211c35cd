from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

import psycopg2
import psycopg2.errors
import psycopg2.extras

from domain.exceptions import DuplicateAccount, InvalidCredentials, NotFound, StorageFailure
from domain.models import DEFAULT_AVATAR, STARTING_DEMO_BALANCE, User
from domain.repositories import AccountStore, CredentialHasher

_COLUMNS = (
    "id, email, password, username, balance, demo_balance, address, "
    "access_token, roles, avatar, game_started, switch_account"
)


class PostgresAccountRepository(AccountStore):
    """
    Postgres-backed implementation of `AccountStore`.

    Uses the same `users` layout as the SQLite repository, with `BIGSERIAL`
    for the identifier. A connection is opened per call and closed after it.
    """

    def __init__(self, dsn: str, hasher: CredentialHasher) -> None:
        self._dsn = dsn
        self._hasher = hasher
        self._dummy_hash = hasher.hash("dummy")
        self._ensure_table()

    @contextmanager
    def _get_connection(self) -> Iterator["psycopg2.extensions.connection"]:
        try:
            conn = psycopg2.connect(self._dsn)
        except psycopg2.Error as exc:
            raise StorageFailure("cannot connect to postgres") from exc
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS users (
                            id BIGSERIAL PRIMARY KEY,
                            email TEXT NOT NULL UNIQUE,
                            password TEXT NOT NULL,
                            username TEXT,
                            balance BIGINT NOT NULL DEFAULT 0,
                            demo_balance BIGINT NOT NULL DEFAULT 0,
                            address TEXT DEFAULT '',
                            access_token TEXT DEFAULT '',
                            roles TEXT DEFAULT '',
                            avatar TEXT DEFAULT '{DEFAULT_AVATAR}',
                            game_started BOOLEAN NOT NULL DEFAULT FALSE,
                            switch_account BOOLEAN NOT NULL DEFAULT FALSE
                        );

                        CREATE INDEX IF NOT EXISTS idx_email ON users(email);
                        """
                    )
                conn.commit()
            except psycopg2.Error as exc:
                raise StorageFailure("cannot create users table") from exc

    @staticmethod
    def _to_domain(row: dict) -> User:
        return User(
            id=int(row["id"]),
            email=row["email"],
            username=row["username"] or "",
            password_hash=row["password"],
            balance=int(row["balance"]),
            demo_balance=int(row["demo_balance"]),
            address=row["address"] or "",
            access_token=row["access_token"] or "",
            roles=row["roles"] or "",
            avatar=row["avatar"] or "",
            game_started=bool(row["game_started"]),
            switch_account=bool(row["switch_account"]),
        )

    def _find_by_email(self, email: str) -> Optional[User]:
        with self._get_connection() as conn:
            try:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email = %s", (email,))
                    row = cur.fetchone()
            except psycopg2.Error as exc:
                raise StorageFailure("cannot read users table") from exc
            if not row:
                return None
            return self._to_domain(row)

    def register(self, email: str, password: str, username: str) -> int:
        password_hash = self._hasher.hash(password)

        with self._get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO users (
                            email, password, username, balance, demo_balance, address,
                            access_token, roles, avatar, game_started, switch_account
                        )
                        VALUES (%s, %s, %s, %s, %s, '', '', '', %s, FALSE, FALSE)
                        RETURNING id
                        """,
                        (email, password_hash, username, 0, STARTING_DEMO_BALANCE, DEFAULT_AVATAR),
                    )
                    user_id = cur.fetchone()[0]
                conn.commit()
            except psycopg2.errors.UniqueViolation as exc:
                conn.rollback()
                raise DuplicateAccount(f"email already registered: {email}") from exc
            except psycopg2.Error as exc:
                conn.rollback()
                raise StorageFailure("cannot insert user") from exc

            return int(user_id)

    def login(self, email: str, password: str) -> User:
        user = self._find_by_email(email)
        if user is None:
            self._hasher.verify(self._dummy_hash, password)
            raise NotFound(f"no user with email {email}")

        if not self._hasher.verify(user.password_hash, password):
            raise InvalidCredentials(f"wrong password for {email}")

        return user.without_password()

    def get_by_email(self, email: str) -> User:
        user = self._find_by_email(email)
        if user is None:
            raise NotFound(f"no user with email {email}")
        return user.without_password()

    def list_all(self) -> List[User]:
        with self._get_connection() as conn:
            try:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(f"SELECT {_COLUMNS} FROM users")
                    rows = cur.fetchall()
            except psycopg2.Error as exc:
                raise StorageFailure("cannot read users table") from exc
            return [self._to_domain(row).without_password() for row in rows]
