#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_loans
    ~~~~~~~~~~~~~~~~

    This module tests the borrow / return / update / delete workflow
    and the book availability it maintains.
"""

import datetime
import threading
from concurrent.futures import ThreadPoolExecutor
import pytest
from sqlalchemy import delete, select
from folio.core.catalog import BookService
from folio.core.db import session as db
from folio.core.loans import LoanService
from folio.core.models import Book, Loan, LoanStatus
from folio.core.exceptions import (
    InvalidIdError,
    InvalidInputError,
    BookNotFoundError,
    BookUnavailableError,
    UserNotFoundError,
    LoanNotFoundError,
    LoanAlreadyReturnedError,
    MissingBookError,
)
from folio.schemas.loan import LoanUpdate


def availability_matches_loans():
    """True when every book is unavailable iff an ACTIVE loan references it."""
    books = db.scalars(select(Book)).all()
    active = set(db.scalars(select(Loan.book_id).where(Loan.status == LoanStatus.ACTIVE)).all())
    result = all(book.available == (book.id not in active) for book in books)
    db.remove()
    return result


def loan_count():
    count = Loan.count()
    db.remove()
    return count


@pytest.fixture
def reader(make_user):
    return make_user()


@pytest.fixture
def book(make_book):
    return make_book()


def test_borrow_marks_book_unavailable(reader, book):
    loan = LoanService.borrow(reader.id, book.id)

    assert loan.status == LoanStatus.ACTIVE
    assert loan.loan_date == datetime.date.today()
    assert loan.return_date is None
    assert loan.user_id == reader.id and loan.book_id == book.id
    assert BookService.get(book.id).available is False
    assert availability_matches_loans()


def test_borrow_unavailable_book_conflicts_without_side_effects(make_user, book):
    first, second = make_user(), make_user()
    LoanService.borrow(first.id, book.id)

    with pytest.raises(BookUnavailableError):
        LoanService.borrow(second.id, book.id)

    assert loan_count() == 1
    assert LoanService.list(user_id=second.id) == []
    assert availability_matches_loans()


def test_same_reader_cannot_borrow_a_book_twice(reader, book):
    outcomes = []
    for _ in range(2):
        try:
            outcomes.append(LoanService.borrow(reader.id, book.id))
        except BookUnavailableError as e:
            outcomes.append(e)

    assert sum(isinstance(o, BookUnavailableError) for o in outcomes) == 1
    assert len(LoanService.list(status=LoanStatus.ACTIVE)) == 1


def borrow_at_once(user_ids, book_id):
    """Runs one borrow per user, all released together; returns the outcomes."""
    barrier = threading.Barrier(len(user_ids))

    def attempt(user_id):
        barrier.wait()
        try:
            return LoanService.borrow(user_id, book_id)
        except BookUnavailableError as e:
            return e

    with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
        return list(pool.map(attempt, user_ids))


def test_concurrent_borrows_of_one_book_have_one_winner(file_database, make_user, make_book):
    readers = [make_user().id for _ in range(8)]
    book = make_book()

    outcomes = borrow_at_once(readers, book.id)

    conflicts = [o for o in outcomes if isinstance(o, BookUnavailableError)]
    loans = [o for o in outcomes if not isinstance(o, BookUnavailableError)]
    assert len(loans) == 1
    assert len(conflicts) == len(readers) - 1
    assert [loan.id for loan in LoanService.list(status=LoanStatus.ACTIVE)] == [loans[0].id]
    assert loan_count() == 1
    assert availability_matches_loans()


@pytest.mark.parametrize("user_id, book_id", [
    (None, 1), (1, None), (0, 1), (1, -3), ("1", 1),
])
def test_borrow_rejects_invalid_ids(user_id, book_id):
    with pytest.raises(InvalidIdError):
        LoanService.borrow(user_id, book_id)


def test_borrow_missing_book_is_not_found(reader):
    with pytest.raises(BookNotFoundError):
        LoanService.borrow(reader.id, 999)
    assert loan_count() == 0


def test_borrow_missing_user_is_not_found(book):
    with pytest.raises(UserNotFoundError):
        LoanService.borrow(999, book.id)
    assert BookService.get(book.id).available is True


def test_borrow_return_return_scenario(reader, book):
    loan = LoanService.borrow(reader.id, book.id)

    returned = LoanService.return_loan(loan.id)
    assert returned.status == LoanStatus.RETURNED
    assert returned.return_date == datetime.date.today()
    assert BookService.get(book.id).available is True

    with pytest.raises(LoanAlreadyReturnedError):
        LoanService.return_loan(loan.id)
    assert LoanService.get(loan.id).return_date == datetime.date.today()
    assert availability_matches_loans()


def test_book_can_be_borrowed_again_after_return(make_user, book):
    first, second = make_user(), make_user()
    LoanService.return_loan(LoanService.borrow(first.id, book.id).id)

    loan = LoanService.borrow(second.id, book.id)
    assert loan.status == LoanStatus.ACTIVE
    assert availability_matches_loans()


def test_return_missing_loan_is_not_found():
    with pytest.raises(LoanNotFoundError):
        LoanService.return_loan(42)


def test_update_to_returned_releases_book(reader, book):
    loan = LoanService.borrow(reader.id, book.id)

    updated = LoanService.update(loan.id, LoanUpdate(status="returned"))

    assert updated.status == LoanStatus.RETURNED
    assert updated.return_date == datetime.date.today()
    assert BookService.get(book.id).available is True
    assert availability_matches_loans()


def test_update_back_to_active_reserves_book_and_clears_return_date(reader, book):
    loan = LoanService.return_loan(LoanService.borrow(reader.id, book.id).id)

    updated = LoanService.update(loan.id, LoanUpdate(status="ACTIVE"))

    assert updated.status == LoanStatus.ACTIVE
    assert updated.return_date is None
    assert BookService.get(book.id).available is False
    assert availability_matches_loans()


def test_update_cannot_reactivate_loan_of_book_held_elsewhere(make_user, book):
    first, second = make_user(), make_user()
    old = LoanService.return_loan(LoanService.borrow(first.id, book.id).id)
    LoanService.borrow(second.id, book.id)

    with pytest.raises(BookUnavailableError):
        LoanService.update(old.id, LoanUpdate(status="ACTIVE"))

    assert LoanService.get(old.id).status == LoanStatus.RETURNED
    assert availability_matches_loans()


def test_update_dates_without_status_change(reader, book):
    loan = LoanService.return_loan(LoanService.borrow(reader.id, book.id).id)
    earlier = datetime.date.today() - datetime.timedelta(days=14)

    updated = LoanService.update(loan.id, LoanUpdate(loan_date=earlier))

    assert updated.loan_date == earlier
    assert updated.status == LoanStatus.RETURNED
    assert BookService.get(book.id).available is True


def test_update_rejects_return_date_on_active_loan(reader, book):
    loan = LoanService.borrow(reader.id, book.id)
    with pytest.raises(InvalidInputError):
        LoanService.update(loan.id, LoanUpdate(return_date=datetime.date.today()))


def test_update_rejects_return_before_loan_date(reader, book):
    loan = LoanService.borrow(reader.id, book.id)
    yesterday = datetime.date.today() - datetime.timedelta(days=1)
    with pytest.raises(InvalidInputError):
        LoanService.update(loan.id, LoanUpdate(status="RETURNED", return_date=yesterday))
    assert BookService.get(book.id).available is False


def test_update_rejects_unknown_status():
    with pytest.raises(ValueError):
        LoanUpdate(status="LOST")


def test_update_status_change_without_book_is_internal_error(reader, book):
    loan = LoanService.borrow(reader.id, book.id)
    db.execute(delete(Book).where(Book.id == book.id))
    db.commit()
    db.remove()

    with pytest.raises(MissingBookError):
        LoanService.update(loan.id, LoanUpdate(status="RETURNED"))


def test_update_missing_loan_is_not_found():
    with pytest.raises(LoanNotFoundError):
        LoanService.update(5, LoanUpdate(status="RETURNED"))


def test_delete_active_loan_restores_availability(reader, book):
    loan = LoanService.borrow(reader.id, book.id)

    LoanService.delete(loan.id)

    assert BookService.get(book.id).available is True
    with pytest.raises(LoanNotFoundError):
        LoanService.get(loan.id)


def test_delete_returned_loan_leaves_availability_alone(make_user, book):
    first, second = make_user(), make_user()
    old = LoanService.return_loan(LoanService.borrow(first.id, book.id).id)
    LoanService.borrow(second.id, book.id)

    LoanService.delete(old.id)

    assert BookService.get(book.id).available is False
    assert availability_matches_loans()


def test_delete_missing_loan_is_not_found():
    with pytest.raises(LoanNotFoundError):
        LoanService.delete(1)


def test_list_filters_by_user_and_status(make_user, make_book):
    first, second = make_user(), make_user()
    a, b = make_book(), make_book()
    kept = LoanService.borrow(first.id, a.id)
    LoanService.return_loan(LoanService.borrow(second.id, b.id).id)

    assert [loan.id for loan in LoanService.list(user_id=first.id)] == [kept.id]
    assert [loan.id for loan in LoanService.list(status=LoanStatus.ACTIVE)] == [kept.id]
    assert len(LoanService.list()) == 2
