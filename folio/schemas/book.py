#!/usr/bin/env python
"""
    Book Schemas for Folio,
    including the create, patch and response shapes of a Book.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import List, Optional
from pydantic import Field
from folio.schemas.base import FolioModel, FolioPatch, Text
from folio.schemas.author import AuthorSummary


class BookCreate(FolioModel):
    title: Text(1, 255)
    author: Optional[Text(2, 100)] = None
    content: Optional[Text(0, 10000)] = None
    publication_year: Optional[int] = Field(default=None, ge=1000, le=9999)
    isbn: Text(10, 17)
    author_ids: List[int] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "The Dispossessed",
                "author": "Ursula K. Le Guin",
                "publicationYear": 1974,
                "isbn": "9780060512750",
                "authorIds": [1]
            }
        }


class BookUpdate(FolioPatch):
    title: Optional[Text(1, 255)] = None
    author: Optional[Text(2, 100)] = None
    content: Optional[Text(0, 10000)] = None
    publication_year: Optional[int] = Field(default=None, ge=1000, le=9999)
    isbn: Optional[Text(10, 17)] = None
    author_ids: Optional[List[int]] = None


class Book(FolioModel):
    id: int
    title: str
    author: Optional[str] = None
    content: Optional[str] = None
    publication_year: Optional[int] = None
    isbn: str
    available: bool
    authors: List[AuthorSummary] = Field(default_factory=list)
