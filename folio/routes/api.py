#!/usr/bin/env python

"""
    API routes for Folio,
    including the author, book and loan endpoints.

    Handlers only translate HTTP to service calls; failures propagate as
    `FolioAPIError`s and are rendered by `folio.routes.handlers`.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import List, Optional
from fastapi import APIRouter, Query, Response, status
from folio import __version__ as VERSION
from folio.configs import DEFAULT_PAGE_SIZE
from folio.core.catalog import AuthorService, BookService
from folio.core.exceptions import InvalidInputError
from folio.core.loans import LoanService
from folio.core.utils import is_blank
from folio.core.models import LoanStatus
from folio.routes.schemas import BorrowRequest
from folio.schemas.author import Author, AuthorCreate, AuthorUpdate
from folio.schemas.book import Book, BookCreate, BookUpdate
from folio.schemas.loan import Loan, LoanUpdate
from folio.schemas.base import Page

router = APIRouter()


def loan_status(value: Optional[str]) -> Optional[LoanStatus]:
    """Parses a `status` filter case-insensitively, as loan updates do."""
    if is_blank(value):
        return None
    try:
        return LoanStatus(value.strip().upper())
    except ValueError as e:
        raise InvalidInputError(f"Unknown loan status: {value}") from e


@router.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


# Authors

@router.get("/authors", response_model=List[Author])
def get_authors(name: Optional[str] = None, nationality: Optional[str] = None):
    return AuthorService.list(name=name, nationality=nationality)

@router.get("/authors/{author_id}", response_model=Author)
def get_author(author_id: int):
    return AuthorService.get(author_id)

@router.post("/authors", response_model=Author, status_code=status.HTTP_201_CREATED)
def create_author(author: AuthorCreate):
    return AuthorService.create(author)

@router.post("/authors/bulk", response_model=List[Author], status_code=status.HTTP_201_CREATED)
def create_authors(authors: List[AuthorCreate]):
    return AuthorService.create_many(authors)

@router.put("/authors/{author_id}", response_model=Author)
def update_author(author_id: int, author: AuthorUpdate):
    return AuthorService.update(author_id, author)

@router.delete("/authors/{author_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_author(author_id: int):
    AuthorService.delete(author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Books

@router.get("/books", response_model=Page[Book])
def get_books(
    page: int = Query(0, description="Zero-based page index"),
    size: int = Query(DEFAULT_PAGE_SIZE, description="Page size"),
    sort_by: str = Query("id", alias="sortBy"),
    sort_direction: str = Query("ASC", alias="sortDirection"),
):
    return BookService.list(page=page, size=size, sort_by=sort_by, sort_direction=sort_direction)

@router.get("/books/{book_id}", response_model=Book)
def get_book(book_id: int):
    return BookService.get(book_id)

@router.post("/books", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(book: BookCreate):
    return BookService.create(book)

@router.post("/books/bulk", response_model=List[Book], status_code=status.HTTP_201_CREATED)
def create_books(books: List[BookCreate]):
    return BookService.create_many(books)

@router.put("/books/{book_id}", response_model=Book)
def update_book(book_id: int, book: BookUpdate):
    return BookService.update(book_id, book)

@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_book(book_id: int):
    BookService.delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Loans

@router.get("/loans", response_model=List[Loan])
def get_loans(
    user_id: Optional[int] = Query(None, alias="userId"),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    return LoanService.list(user_id=user_id, status=loan_status(status_filter))

@router.post("/loans/borrow", response_model=Loan, status_code=status.HTTP_201_CREATED)
def borrow_book(borrow: BorrowRequest):
    """Borrow a book: opens an ACTIVE loan and marks the book unavailable."""
    return LoanService.borrow(borrow.user_id, borrow.book_id)

@router.post("/loans/return/{loan_id}", response_model=Loan)
def return_book(loan_id: int):
    """Return a loan: marks it RETURNED and the book available again."""
    return LoanService.return_loan(loan_id)

@router.get("/loans/{loan_id}", response_model=Loan)
def get_loan(loan_id: int):
    return LoanService.get(loan_id)

@router.put("/loans/{loan_id}", response_model=Loan)
def update_loan(loan_id: int, loan: LoanUpdate):
    return LoanService.update(loan_id, loan)

@router.delete("/loans/{loan_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_loan(loan_id: int):
    LoanService.delete(loan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
