import unittest

from application.services import (
    MSG_EMAIL_REQUIRED,
    MSG_INTERNAL_ERROR,
    MSG_INVALID_LOGIN,
    MSG_LIST_FAILED,
    MSG_REGISTER_FAILED,
    MSG_USER_EXISTS,
    MSG_USER_NOT_FOUND,
    RegisterRequest,
    get_account,
    list_accounts,
    login_account,
    register_account,
)
from domain.exceptions import (
    DuplicateAccount,
    HashingFailure,
    InvalidCredentials,
    NotFound,
    StorageFailure,
)
from domain.models import User
from domain.repositories import AccountStore


class InMemoryAccountStore(AccountStore):
    """Keeps plaintext passwords; good enough to exercise the service layer."""

    def __init__(self):
        self.users = {}
        self.passwords = {}
        self.next_id = 1

    def register(self, email: str, password: str, username: str) -> int:
        if email in self.users:
            raise DuplicateAccount(email)
        user = User(id=self.next_id, email=email, username=username)
        self.users[email] = user
        self.passwords[email] = password
        self.next_id += 1
        return user.id

    def login(self, email: str, password: str) -> User:
        if email not in self.users:
            raise NotFound(email)
        if self.passwords[email] != password:
            raise InvalidCredentials(email)
        return self.users[email]

    def get_by_email(self, email: str) -> User:
        if email not in self.users:
            raise NotFound(email)
        return self.users[email]

    def list_all(self):
        return list(self.users.values())


class BrokenAccountStore(AccountStore):
    def __init__(self, error):
        self.error = error

    def register(self, email, password, username):
        raise self.error

    def login(self, email, password):
        raise self.error

    def get_by_email(self, email):
        raise self.error

    def list_all(self):
        raise self.error


class ApplicationServicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryAccountStore()
        self.request = RegisterRequest(email="alice@game.io", password="secret", username="alice")

    def test_register_returns_new_id(self):
        result = register_account(self.request, self.store)
        self.assertTrue(result.success)
        self.assertEqual(result.user_id, 1)
        self.assertIsNone(result.error_message)

    def test_register_duplicate_email_reports_user_exists(self):
        register_account(self.request, self.store)
        result = register_account(self.request, self.store)
        self.assertFalse(result.success)
        self.assertEqual(result.error_message, MSG_USER_EXISTS)
        self.assertEqual(len(self.store.users), 1)

    def test_register_duplicate_does_not_log_email(self):
        register_account(self.request, self.store)
        with self.assertLogs("application.services", level="WARNING") as logs:
            register_account(self.request, self.store)

        [record] = logs.records
        self.assertEqual(record.kind, "duplicate_account")
        self.assertFalse(hasattr(record, "email"))
        self.assertNotIn("alice@game.io", record.getMessage())

    def test_register_internal_failures_are_opaque(self):
        for err in (HashingFailure("too long"), StorageFailure("disk I/O error")):
            result = register_account(self.request, BrokenAccountStore(err))
            self.assertFalse(result.success)
            self.assertEqual(result.error_message, MSG_REGISTER_FAILED)

    def test_login_success_returns_user(self):
        register_account(self.request, self.store)
        result = login_account("alice@game.io", "secret", self.store)
        self.assertTrue(result.success)
        self.assertEqual(result.user.email, "alice@game.io")

    def test_login_unknown_email_and_wrong_password_look_the_same(self):
        register_account(self.request, self.store)
        wrong_password = login_account("alice@game.io", "wrong", self.store)
        unknown_email = login_account("nobody@game.io", "secret", self.store)

        self.assertFalse(wrong_password.success)
        self.assertFalse(unknown_email.success)
        self.assertEqual(wrong_password.error_message, MSG_INVALID_LOGIN)
        self.assertEqual(wrong_password.error_message, unknown_email.error_message)
        self.assertIsNone(wrong_password.user)
        self.assertIsNone(unknown_email.user)

    def test_login_storage_failure_uses_same_message(self):
        result = login_account("alice@game.io", "secret", BrokenAccountStore(StorageFailure("x")))
        self.assertEqual(result.error_message, MSG_INVALID_LOGIN)

    def test_get_account(self):
        register_account(self.request, self.store)
        result = get_account("  alice@game.io ", self.store)
        self.assertTrue(result.success)
        self.assertEqual(result.user.username, "alice")

    def test_get_account_errors(self):
        self.assertEqual(get_account("", self.store).error_message, MSG_EMAIL_REQUIRED)
        self.assertEqual(get_account("   ", self.store).error_message, MSG_EMAIL_REQUIRED)
        self.assertEqual(
            get_account("nobody@game.io", self.store).error_message, MSG_USER_NOT_FOUND
        )
        self.assertEqual(
            get_account("a@game.io", BrokenAccountStore(StorageFailure("x"))).error_message,
            MSG_INTERNAL_ERROR,
        )

    def test_list_accounts(self):
        self.assertEqual(list_accounts(self.store).users, [])

        register_account(self.request, self.store)
        register_account(
            RegisterRequest(email="bob@game.io", password="pw", username="bob"), self.store
        )
        result = list_accounts(self.store)
        self.assertTrue(result.success)
        self.assertEqual({u.email for u in result.users}, {"alice@game.io", "bob@game.io"})

    def test_list_accounts_failure(self):
        result = list_accounts(BrokenAccountStore(StorageFailure("x")))
        self.assertFalse(result.success)
        self.assertEqual(result.error_message, MSG_LIST_FAILED)
        self.assertEqual(result.users, [])


if __name__ == "__main__":
    unittest.main()
