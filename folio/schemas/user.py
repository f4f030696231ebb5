#!/usr/bin/env python
"""
    User Schemas for Folio.
    Passwords are accepted on input only and never serialized back.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, EmailStr, StringConstraints
from folio.core.models import Role
from folio.schemas.base import FolioModel, FolioPatch, Text


def fits_bcrypt(value: str) -> str:
    """bcrypt refuses input longer than 72 bytes."""
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes when UTF-8 encoded")
    return value


# Not stripped: surrounding whitespace is part of the secret
Password = Annotated[str, StringConstraints(min_length=6, max_length=72), AfterValidator(fits_bcrypt)]


class UserCreate(FolioModel):
    name: Text(1, 100)
    surname: Text(1, 100)
    email: EmailStr
    address: Optional[Text(0, 255)] = None
    city: Optional[Text(0, 100)] = None
    password: Password
    role: Role = Role.USER

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ada",
                "surname": "Lovelace",
                "email": "ada@example.org",
                "address": "12 St James's Square",
                "city": "London",
                "password": "analytical"
            }
        }


class UserUpdate(FolioPatch):
    name: Optional[Text(1, 100)] = None
    surname: Optional[Text(1, 100)] = None
    email: Optional[EmailStr] = None
    address: Optional[Text(0, 255)] = None
    city: Optional[Text(0, 100)] = None
    password: Optional[Password] = None


class User(FolioModel):
    id: int
    name: str
    surname: str
    email: str
    address: Optional[str] = None
    city: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None


class AuthResponse(User):
    token: str


class TokenClaims(FolioModel):
    user_id: int
    email: str
    role: Role
