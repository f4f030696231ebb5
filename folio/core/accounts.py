"""
    Registration and login for Folio users.

    Both flows answer with the user's public fields plus a signed token
    (see `folio.core.auth.create_token`).
"""

import logging
from typing import Optional
from folio.core import auth
from folio.core.db import transaction
from folio.core.models import User, Role
from folio.core.users import UserService
from folio.core.utils import is_blank
from folio.core.exceptions import (
    InvalidInputError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from folio.schemas import user as user_schemas

logger = logging.getLogger(__name__)


def _auth_response(user) -> user_schemas.AuthResponse:
    record = user_schemas.User.model_validate(user)
    return user_schemas.AuthResponse(**record.model_dump(), token=auth.create_token(record))


class AuthService:

    @staticmethod
    def register(data: user_schemas.UserCreate) -> user_schemas.AuthResponse:
        """Creates a USER account; self-registration never grants other roles."""
        with transaction():
            user = UserService.insert(data, role=Role.USER)
            logger.info(f"User registered with id: {user.id} and email: {user.email}")
            return _auth_response(user)

    @staticmethod
    def login(email: Optional[str], password: Optional[str]) -> user_schemas.AuthResponse:
        if is_blank(email):
            logger.warning("Login attempt with missing email")
            raise InvalidInputError("Email is required")
        if is_blank(password):
            logger.warning("Login attempt with missing password")
            raise InvalidInputError("Password is required")

        with transaction():
            user = User.get_by_email(email)
            if not user:
                logger.warning(f"Login failed: no user with email: {email}")
                raise InvalidCredentialsError()
            if not auth.verify_password(password, user.password):
                logger.warning(f"Login failed: invalid password for user: {email}")
                raise InvalidCredentialsError()
            logger.info(f"User login successful: {email} (id: {user.id})")
            return _auth_response(user)

    @staticmethod
    def whoami(claims: user_schemas.TokenClaims) -> user_schemas.User:
        """Resolves decoded token claims to the current state of their user."""
        with transaction():
            if user := User.get(claims.user_id):
                return user_schemas.User.model_validate(user)
        raise InvalidTokenError("Token refers to a user that no longer exists")
