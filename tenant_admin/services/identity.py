# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Password identity provider backed by bcrypt hashes.

Hashes are kept in a credential store (in-memory dict or the ``users``
collection) separate from the user entity, so domain objects never carry
secrets.
"""

import logging
from typing import Optional, Protocol

import bcrypt
from opentelemetry import trace

from ..domain.errors import NotFoundError
from ..domain.repositories import UserRepository
from ..models.identifiers import UserId

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


class CredentialStore(Protocol):
    def get_password_hash(self, user_id: UserId) -> Optional[str]: ...

    def set_password_hash(self, user_id: UserId, password_hash: str) -> None: ...


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a password using bcrypt with salt.

    Args:
        password: Plain text password to hash
        rounds: bcrypt cost factor

    Returns:
        Hashed password string
    """
    with tracer.start_as_current_span("identity.hash_password") as span:
        span.set_attribute("identity.operation", "hash_password")
        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')


def check_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash; malformed hashes never match."""
    with tracer.start_as_current_span("identity.check_password") as span:
        span.set_attribute("identity.operation", "check_password")
        try:
            result = bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
        except ValueError as e:
            span.set_attribute("identity.verification_result", "error")
            logger.error(f"Password verification error: {str(e)}")
            return False

        span.set_attribute("identity.verification_result", "success" if result else "failed")
        return result


class PasswordIdentityProvider:
    """Verifies and updates passwords for users looked up by email."""

    def __init__(self, user_repository: UserRepository, credentials: CredentialStore, rounds: int = BCRYPT_ROUNDS):
        self.user_repository = user_repository
        self.credentials = credentials
        self.rounds = rounds

    def verify_password(self, email: str, password: str) -> bool:
        user = self.user_repository.find_by_email(email)
        if user is None:
            return False
        stored = self.credentials.get_password_hash(user.id)
        if stored is None:
            logger.warning(f"No credentials stored for user {user.id}")
            return False
        return check_password(password, stored)

    def update_password(self, user_id: UserId, new_password: str) -> None:
        if self.user_repository.find_by_id(user_id) is None:
            raise NotFoundError("User not found")
        self.credentials.set_password_hash(user_id, hash_password(new_password, self.rounds))
        logger.info(f"Password updated for user {user_id}")
