from dataclasses import dataclass

STARTING_DEMO_BALANCE = 5000
DEFAULT_AVATAR = "avatar.jpg"


@dataclass
class User:
    """
    Domain representation of a game account.

    `password_hash` is only populated inside a store implementation; every
    `User` handed to a caller has it cleared.
    """

    id: int
    email: str
    username: str
    password_hash: str = ""
    balance: int = 0
    demo_balance: int = STARTING_DEMO_BALANCE
    address: str = ""
    access_token: str = ""
    roles: str = ""
    avatar: str = DEFAULT_AVATAR
    game_started: bool = False
    switch_account: bool = False

    def without_password(self) -> "User":
        self.password_hash = ""
        return self

    def to_dict(self) -> dict:
        """Public JSON shape of the account. The password is never included."""

        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "balance": self.balance,
            "demoBalance": self.demo_balance,
            "address": self.address,
            "access_token": self.access_token,
            "roles": self.roles,
            "avatar": self.avatar,
            "gameStarted": self.game_started,
            "switchAccount": self.switch_account,
        }
