"""
auth/accounts.py -- Signup and signin on top of the hasher and UserStore.

Both operations raise core.errors subclasses on expected failures; the API
layer renders them through its TrackerError handler.

Signin always runs bcrypt, whether or not the email exists. The unknown-email
branch verifies against _DUMMY_HASH so response time does not reveal which
emails are registered, even though the error codes themselves differ.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.tokens import _DUMMY_HASH, hash_password, verify_password
from core.errors import (
    AdminSignupDisabledError,
    DuplicateUserError,
    InvalidPasswordError,
    UserNotFoundError,
)

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("tickettracker.auth")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_user(
    store: UserStore,
    email: str,
    password: str,
    role: Role = Role.USER,
    allow_admin: bool = True,
) -> User:
    """Create a new account and return the stored User.

    Raises:
        AdminSignupDisabledError: role is ADMIN and allow_admin is False.
        DuplicateUserError: the email is already registered, including the
            race where a concurrent signup wins the UNIQUE constraint.
    """
    role = Role(role)
    if role is Role.ADMIN and not allow_admin:
        raise AdminSignupDisabledError()

    email = normalize_email(email)
    if store.get_by_email(email) is not None:
        raise DuplicateUserError()

    user = User(email=email, role=role.value, hashed_password=hash_password(password))
    try:
        user_id = store.create_user(user)
    except IntegrityError as exc:
        raise DuplicateUserError() from exc

    logger.info("Registered user %s (role=%s)", user_id, role.value)
    created = store.get_by_id(user_id)
    if created is None:
        raise RuntimeError(f"user {user_id} missing after insert")
    return created


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Return the User whose credentials match, or raise.

    Raises:
        UserNotFoundError: no account for this email.
        InvalidPasswordError: the password does not match.
    """
    user = store.get_by_email(normalize_email(email))
    if user is None:
        # Equalize timing -- do NOT return before running bcrypt
        verify_password(password, _DUMMY_HASH)
        logger.info("Signin failed: unknown email")
        raise UserNotFoundError()
    if not verify_password(password, user.hashed_password):
        logger.info("Signin failed: bad password for user %s", user.id)
        raise InvalidPasswordError()
    return user
