#!/usr/bin/env python
"""
    Author Schemas for Folio,
    including the create, patch and response shapes of an Author.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import Optional
from folio.schemas.base import FolioModel, FolioPatch, Text


class AuthorCreate(FolioModel):
    first_name: Text(1, 100)
    last_name: Text(1, 100)
    biography: Optional[Text(0, 1000)] = None
    nationality: Optional[Text(0, 100)] = None

    class Config:
        json_schema_extra = {
            "example": {
                "firstName": "Ursula",
                "lastName": "Le Guin",
                "biography": "American author of speculative fiction.",
                "nationality": "American"
            }
        }


class AuthorUpdate(FolioPatch):
    first_name: Optional[Text(1, 100)] = None
    last_name: Optional[Text(1, 100)] = None
    biography: Optional[Text(0, 1000)] = None
    nationality: Optional[Text(0, 100)] = None


class AuthorSummary(FolioModel):
    id: int
    first_name: str
    last_name: str


class Author(AuthorSummary):
    biography: Optional[str] = None
    nationality: Optional[str] = None
    full_name: str
