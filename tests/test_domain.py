import unittest

from domain.exceptions import (
    AccountError,
    AccountErrorKind,
    DuplicateAccount,
    HashingFailure,
    InvalidCredentials,
    NotFound,
    StorageFailure,
)
from domain.models import User


class UserModelTests(unittest.TestCase):
    def test_defaults_for_new_account(self):
        user = User(id=1, email="a@x.com", username="alice")
        self.assertEqual(user.balance, 0)
        self.assertEqual(user.demo_balance, 5000)
        self.assertEqual(user.avatar, "avatar.jpg")
        self.assertFalse(user.game_started)
        self.assertFalse(user.switch_account)

    def test_to_dict_never_includes_password(self):
        user = User(id=1, email="a@x.com", username="alice", password_hash="$2b$10$abc")
        data = user.to_dict()
        self.assertNotIn("password", data)
        self.assertNotIn("password_hash", data)
        self.assertNotIn("$2b$10$abc", data.values())
        self.assertEqual(
            set(data),
            {
                "id",
                "email",
                "username",
                "balance",
                "demoBalance",
                "address",
                "access_token",
                "roles",
                "avatar",
                "gameStarted",
                "switchAccount",
            },
        )

    def test_without_password(self):
        user = User(id=1, email="a@x.com", username="alice", password_hash="hash")
        self.assertEqual(user.without_password().password_hash, "")


class AccountErrorTests(unittest.TestCase):
    def test_each_error_has_its_own_kind(self):
        errors = [DuplicateAccount, NotFound, InvalidCredentials, HashingFailure, StorageFailure]
        kinds = {cls.kind for cls in errors}
        self.assertEqual(kinds, set(AccountErrorKind))
        for cls in errors:
            self.assertTrue(issubclass(cls, AccountError))

    def test_not_found_and_invalid_credentials_are_distinct(self):
        self.assertNotEqual(NotFound.kind, InvalidCredentials.kind)
        self.assertFalse(issubclass(NotFound, InvalidCredentials))


if __name__ == "__main__":
    unittest.main()
