#!/usr/bin/env python

"""
    Models for Folio,
    including the definition of the catalog, patron and loan tables.

    Associations are never traversed lazily: every lookup across tables
    goes through an explicit, id-keyed query below.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import enum
import datetime
from sqlalchemy import (
    Column, String, Boolean, Integer, Text, Date, DateTime, ForeignKey, Table,
    Enum as SQLAlchemyEnum, select, update, delete, func, or_,
)
from folio.core.db import session as db, Base


class LoanStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


book_authors = Table(
    'book_authors',
    Base.metadata,
    Column('book_id', Integer, ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
    Column('author_id', Integer, ForeignKey('authors.id', ondelete='CASCADE'), primary_key=True),
)


class Author(Base):
    __tablename__ = 'authors'

    SORTABLE = {'id', 'first_name', 'last_name', 'nationality'}

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    biography = Column(Text)
    nationality = Column(String(100))

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def search(cls, name):
        """Case-insensitive substring match on first, last or full name."""
        pattern = f"%{name.strip().lower()}%"
        full_name = func.lower(cls.first_name + ' ' + cls.last_name)
        return db.scalars(select(cls).where(or_(
            func.lower(cls.first_name).like(pattern),
            func.lower(cls.last_name).like(pattern),
            full_name.like(pattern),
        )).order_by(cls.id)).all()

    @classmethod
    def by_nationality(cls, nationality):
        return db.scalars(select(cls).where(
            func.lower(cls.nationality) == nationality.strip().lower()
        ).order_by(cls.id)).all()

    @classmethod
    def get_by_ids(cls, ids):
        if not ids:
            return []
        return db.scalars(select(cls).where(cls.id.in_(ids)).order_by(cls.id)).all()

    def unlink_books(self):
        db.execute(delete(book_authors).where(book_authors.c.author_id == self.id))


class Book(Base):
    __tablename__ = 'books'

    SORTABLE = {'id', 'title', 'author', 'publication_year', 'isbn', 'available'}

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(100))
    content = Column(Text)
    publication_year = Column(Integer)
    isbn = Column(String(17), nullable=False)
    available = Column(Boolean, default=True, nullable=False)

    @classmethod
    def reserve(cls, book_id) -> bool:
        """Atomically flips an available book to unavailable.

        Returns False when no row matched, i.e. the book is missing or
        already held by another loan.
        """
        result = db.execute(
            update(cls)
            .where(cls.id == book_id, cls.available == True)  # noqa: E712
            .values(available=False)
            .execution_options(synchronize_session='evaluate')
        )
        return result.rowcount == 1

    @classmethod
    def release(cls, book_id) -> bool:
        result = db.execute(
            update(cls)
            .where(cls.id == book_id)
            .values(available=True)
            .execution_options(synchronize_session='evaluate')
        )
        return result.rowcount == 1

    @classmethod
    def author_ids_for(cls, book_ids):
        """Maps each book id to the sorted list of its author ids."""
        mapping = {book_id: [] for book_id in book_ids}
        if not mapping:
            return mapping
        rows = db.execute(
            select(book_authors.c.book_id, book_authors.c.author_id)
            .where(book_authors.c.book_id.in_(list(mapping)))
            .order_by(book_authors.c.author_id)
        )
        for book_id, author_id in rows:
            mapping[book_id].append(author_id)
        return mapping

    def set_authors(self, author_ids):
        db.execute(delete(book_authors).where(book_authors.c.book_id == self.id))
        if author_ids:
            db.execute(book_authors.insert(), [
                {'book_id': self.id, 'author_id': author_id}
                for author_id in sorted(set(author_ids))
            ])


class User(Base):
    __tablename__ = 'users'

    SORTABLE = {'id', 'name', 'surname', 'email', 'city', 'role', 'created_at'}

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    address = Column(String(255))
    city = Column(String(100))
    password = Column(String(100), nullable=False)
    role = Column(SQLAlchemyEnum(Role), default=Role.USER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    @classmethod
    def get_by_email(cls, email):
        if not email:
            return None
        return db.scalars(select(cls).where(
            func.lower(cls.email) == email.strip().lower()
        )).first()


class Loan(Base):
    __tablename__ = 'loans'

    SORTABLE = {'id', 'loan_date', 'return_date', 'status'}

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey('books.id', ondelete='CASCADE'), nullable=False, index=True)
    loan_date = Column(Date, nullable=False, default=datetime.date.today)
    return_date = Column(Date, nullable=True)
    status = Column(SQLAlchemyEnum(LoanStatus), default=LoanStatus.ACTIVE, nullable=False)

    @classmethod
    def filter(cls, user_id=None, status=None):
        query = select(cls)
        if user_id is not None:
            query = query.where(cls.user_id == user_id)
        if status is not None:
            query = query.where(cls.status == status)
        return db.scalars(query.order_by(cls.id)).all()

    @classmethod
    def close(cls, loan_id, return_date) -> bool:
        """Atomically marks an active loan returned; False if it was not active."""
        result = db.execute(
            update(cls)
            .where(cls.id == loan_id, cls.status == LoanStatus.ACTIVE)
            .values(status=LoanStatus.RETURNED, return_date=return_date)
            .execution_options(synchronize_session='evaluate')
        )
        return result.rowcount == 1

    @classmethod
    def has_active(cls, book_id=None, user_id=None) -> bool:
        criteria = [cls.status == LoanStatus.ACTIVE]
        if book_id is not None:
            criteria.append(cls.book_id == book_id)
        if user_id is not None:
            criteria.append(cls.user_id == user_id)
        return cls.count(*criteria) > 0

    @classmethod
    def purge(cls, book_id=None, user_id=None, status=None):
        """Deletes the loan history of a book or user being removed."""
        if book_id is None and user_id is None:
            raise ValueError("purge requires a book_id or a user_id")
        query = delete(cls)
        if book_id is not None:
            query = query.where(cls.book_id == book_id)
        if user_id is not None:
            query = query.where(cls.user_id == user_id)
        if status is not None:
            query = query.where(cls.status == status)
        db.execute(query.execution_options(synchronize_session='evaluate'))
