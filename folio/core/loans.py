#!/usr/bin/env python

"""
    Loan workflow for Folio.

    Every operation keeps `Loan.status == ACTIVE` equivalent to
    `Book.available == False` for the loan's book. Availability only ever
    changes through the conditional updates in `Book.reserve` and
    `Book.release`, inside the same transaction as the loan write, so two
    concurrent borrows of one book cannot both succeed.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from typing import List, Optional
from folio.core.db import session as db, transaction
from folio.core.models import Book, Loan, LoanStatus, User
from folio.core.utils import require_id
from folio.core.exceptions import (
    InvalidInputError,
    BookNotFoundError,
    BookUnavailableError,
    UserNotFoundError,
    LoanNotFoundError,
    LoanAlreadyReturnedError,
    MissingBookError,
)
from folio.schemas import loan as loan_schemas

logger = logging.getLogger(__name__)


def _today():
    return datetime.date.today()


class LoanService:

    @classmethod
    def _load(cls, loan_id, lock=False) -> Loan:
        require_id(loan_id, "loan ID")
        loan = Loan.get_for_update(loan_id) if lock else Loan.get(loan_id)
        if not loan:
            logger.warning(f"Loan not found with id: {loan_id}")
            raise LoanNotFoundError(f"Loan not found with id: {loan_id}")
        return loan

    @classmethod
    def list(cls, user_id: Optional[int] = None,
             status: Optional[LoanStatus] = None) -> List[loan_schemas.Loan]:
        with transaction():
            return [loan_schemas.Loan.model_validate(loan) for loan in Loan.filter(user_id, status)]

    @classmethod
    def get(cls, loan_id: int) -> loan_schemas.Loan:
        with transaction():
            return loan_schemas.Loan.model_validate(cls._load(loan_id))

    @classmethod
    def borrow(cls, user_id: int, book_id: int) -> loan_schemas.Loan:
        """Lends a book to a user, opening an ACTIVE loan.

        Raises:
            InvalidIdError: If either id is missing or not positive.
            UserNotFoundError: If the user does not exist.
            BookNotFoundError: If the book does not exist.
            BookUnavailableError: If the book is held by another loan.
        """
        require_id(user_id, "user ID")
        require_id(book_id, "book ID")
        with transaction():
            if not User.get_for_update(user_id, key_share=True):
                logger.warning(f"Borrow rejected: user {user_id} not found")
                raise UserNotFoundError(f"User not found with id: {user_id}")

            if not Book.reserve(book_id):
                if Book.get(book_id) is None:
                    logger.warning(f"Borrow rejected: book {book_id} not found")
                    raise BookNotFoundError(f"Book not found with id: {book_id}")
                logger.warning(f"Borrow rejected: book {book_id} is not available")
                raise BookUnavailableError()

            loan = Loan(
                user_id=user_id,
                book_id=book_id,
                loan_date=_today(),
                return_date=None,
                status=LoanStatus.ACTIVE,
            )
            db.add(loan)
            db.flush()
            logger.info(f"User {user_id} borrowed book {book_id} (loan {loan.id})")
            return loan_schemas.Loan.model_validate(loan)

    @classmethod
    def return_loan(cls, loan_id: int) -> loan_schemas.Loan:
        """Closes an ACTIVE loan and puts its book back on the shelf."""
        with transaction():
            loan = cls._load(loan_id)
            if not Loan.close(loan_id, _today()):
                logger.warning(f"Return rejected: loan {loan_id} is already returned")
                raise LoanAlreadyReturnedError()
            if not Book.release(loan.book_id):
                logger.warning(f"Loan {loan_id} returned but book {loan.book_id} no longer exists")
            db.flush()
            logger.info(f"Loan {loan_id} returned, book {loan.book_id} available")
            return loan_schemas.Loan.model_validate(loan)

    @classmethod
    def update(cls, loan_id: int, patch: loan_schemas.LoanUpdate) -> loan_schemas.Loan:
        """Applies the supplied dates and status, deriving book availability.

        A status change to RETURNED releases the book and defaults the
        return date to today; a change to ACTIVE re-reserves the book and
        clears the return date.
        """
        with transaction():
            loan = cls._load(loan_id, lock=True)
            previous = loan.status
            status = patch.status or previous
            loan_date = patch.loan_date or loan.loan_date

            if status == LoanStatus.ACTIVE and patch.return_date:
                raise InvalidInputError("An active loan cannot have a return date")
            return_date = patch.return_date or loan.return_date

            if status != previous:
                if Book.get(loan.book_id) is None:
                    logger.error(f"Loan {loan_id} references missing book {loan.book_id}")
                    raise MissingBookError()
                if status == LoanStatus.RETURNED:
                    Book.release(loan.book_id)
                    return_date = return_date or _today()
                else:
                    if not Book.reserve(loan.book_id):
                        logger.warning(f"Reactivating loan {loan_id} rejected: book {loan.book_id} is on another loan")
                        raise BookUnavailableError("Book is on another active loan")
                    return_date = None

            if return_date and return_date < loan_date:
                raise InvalidInputError("Return date cannot be before the loan date")

            loan.loan_date = loan_date
            loan.return_date = return_date
            loan.status = status
            db.flush()
            logger.info(f"Updated loan {loan_id}: status {previous.value} -> {status.value}")
            return loan_schemas.Loan.model_validate(loan)

    @classmethod
    def delete(cls, loan_id: int) -> None:
        """Deletes a loan; an ACTIVE loan releases its book first."""
        with transaction():
            loan = cls._load(loan_id, lock=True)
            if loan.status == LoanStatus.ACTIVE:
                Book.release(loan.book_id)
            db.delete(loan)
            logger.info(f"Deleted loan {loan_id} (was {loan.status.value})")
