"""Account service: register, authenticate, profile."""

from __future__ import annotations

import uuid
from decimal import Decimal

import structlog

from predictx.accounts.passwords import hash_password, verify_password
from predictx.errors import (
    InvalidCredentialsError,
    RegistrationError,
    UserExistsError,
    UserNotFoundError,
)
from predictx.ledger.records import UserRecord
from predictx.ledger.store import LedgerStore
from predictx.models.account import UserProfile

log = structlog.get_logger(__name__)

MIN_USERNAME_LEN = 3
MIN_PASSWORD_LEN = 6


class AccountService:
    """Creates users with a starting balance. Token issuance is left to the caller."""

    def __init__(
        self,
        store: LedgerStore,
        starting_balance: Decimal = Decimal(10000),
        bcrypt_rounds: int = 12,
    ) -> None:
        self.store = store
        self.starting_balance = starting_balance
        self.bcrypt_rounds = bcrypt_rounds

    def register(self, username: str, email: str, password: str) -> UserRecord:
        if not username or not email or not password:
            raise RegistrationError("Missing fields")
        if len(username) < MIN_USERNAME_LEN:
            raise RegistrationError("Username too short")
        if len(password) < MIN_PASSWORD_LEN:
            raise RegistrationError("Password too short")
        user = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            balance=self.starting_balance,
        )
        if not self.store.add_user(user):
            log.warning("registration_rejected", code=UserExistsError.code, username=username)
            raise UserExistsError()
        log.info("user_registered", user_id=user.id, username=username)
        return user

    def authenticate(self, email: str, password: str) -> UserRecord:
        user = self.store.find_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    def profile(self, user_id: str) -> UserProfile:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user.profile(self.store.positions(user_id))
