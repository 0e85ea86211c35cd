from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Optional

from domain.exceptions import DuplicateAccount, InvalidCredentials, NotFound, StorageFailure
from domain.models import DEFAULT_AVATAR, STARTING_DEMO_BALANCE, User
from domain.repositories import AccountStore, CredentialHasher

_COLUMNS = (
    "id, email, password, username, balance, demo_balance, address, "
    "access_token, roles, avatar, game_started, switch_account"
)


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        return code == sqlite3.SQLITE_CONSTRAINT_UNIQUE
    # Python < 3.11 does not expose the extended result code.
    return "UNIQUE constraint failed" in str(exc)


class SqliteAccountRepository(AccountStore):
    """
    SQLite-backed implementation of `AccountStore`.

    Owns the `users` table. Every call opens its own connection, so the
    repository can be shared between request threads; SQLite's own locking
    and the UNIQUE constraint on `email` keep concurrent registrations
    consistent. The table is created if needed.
    """

    def __init__(self, db_path: str, hasher: CredentialHasher, timeout: float = 30.0) -> None:
        self._db_path = db_path
        self._hasher = hasher
        self._timeout = timeout
        self._dummy_hash = hasher.hash("dummy")
        self._ensure_table()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StorageFailure(f"cannot open {self._db_path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            try:
                conn.executescript(
                    f"""
                    CREATE TABLE IF NOT EXISTS users (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        email TEXT NOT NULL UNIQUE,
                        password TEXT NOT NULL,
                        username TEXT,
                        balance INTEGER NOT NULL DEFAULT 0,
                        demo_balance INTEGER NOT NULL DEFAULT 0,
                        address TEXT DEFAULT '',
                        access_token TEXT DEFAULT '',
                        roles TEXT DEFAULT '',
                        avatar TEXT DEFAULT '{DEFAULT_AVATAR}',
                        game_started BOOLEAN NOT NULL DEFAULT 0,
                        switch_account BOOLEAN NOT NULL DEFAULT 0
                    );

                    CREATE INDEX IF NOT EXISTS idx_email ON users(email);
                    """
                )
            except sqlite3.Error as exc:
                raise StorageFailure("cannot create users table") from exc

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> User:
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
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE email = ?", (email,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageFailure("cannot read users table") from exc
            if not row:
                return None
            return self._to_domain(row)

    def register(self, email: str, password: str, username: str) -> int:
        password_hash = self._hasher.hash(password)

        with self._get_connection() as conn:
            try:
                cur = conn.execute(
                    """
                    INSERT INTO users (
                        email, password, username, balance, demo_balance, address,
                        access_token, roles, avatar, game_started, switch_account
                    )
                    VALUES (?, ?, ?, ?, ?, '', '', '', ?, 0, 0)
                    """,
                    (email, password_hash, username, 0, STARTING_DEMO_BALANCE, DEFAULT_AVATAR),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                if _is_unique_violation(exc):
                    raise DuplicateAccount(f"email already registered: {email}") from exc
                raise StorageFailure("cannot insert user") from exc
            except sqlite3.Error as exc:
                raise StorageFailure("cannot insert user") from exc

            return int(cur.lastrowid)

    def login(self, email: str, password: str) -> User:
        user = self._find_by_email(email)
        if user is None:
            # Spend the same bcrypt work as a real check so response time
            # does not reveal whether the email exists.
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
                rows = conn.execute(f"SELECT {_COLUMNS} FROM users").fetchall()
            except sqlite3.Error as exc:
                raise StorageFailure("cannot read users table") from exc
            return [self._to_domain(row).without_password() for row in rows]
