import logging
from typing import List, Optional
from folio.core.db import session as db, transaction
from folio.core.models import Author, Book, Loan
from folio.core.utils import require_id, merge, check_batch, paginate, is_blank
from folio.core.exceptions import (
    AuthorNotFoundError,
    BookNotFoundError,
    ActiveLoanError,
)
from folio.schemas import author as author_schemas
from folio.schemas import book as book_schemas
from folio.schemas.base import Page

logger = logging.getLogger(__name__)


class AuthorService:

    FIELDS = ('first_name', 'last_name', 'biography', 'nationality')

    @classmethod
    def _load(cls, author_id) -> Author:
        require_id(author_id, "author ID")
        if author := Author.get(author_id):
            return author
        logger.warning(f"Author not found with id: {author_id}")
        raise AuthorNotFoundError(f"Author not found with id: {author_id}")

    @classmethod
    def list(cls, name: Optional[str] = None, nationality: Optional[str] = None):
        """Every author, or those matching `name` (preferred) or `nationality`."""
        with transaction():
            if not is_blank(name):
                authors = Author.search(name)
            elif not is_blank(nationality):
                authors = Author.by_nationality(nationality)
            else:
                authors = Author.get_many()
            return [author_schemas.Author.model_validate(a) for a in authors]

    @classmethod
    def get(cls, author_id: int) -> author_schemas.Author:
        with transaction():
            return author_schemas.Author.model_validate(cls._load(author_id))

    @classmethod
    def create(cls, data: author_schemas.AuthorCreate) -> author_schemas.Author:
        with transaction():
            author = Author(**data.model_dump())
            db.add(author)
            db.flush()
            logger.info(f"Created author {author.full_name} with id: {author.id}")
            return author_schemas.Author.model_validate(author)

    @classmethod
    def create_many(cls, items: List[author_schemas.AuthorCreate]) -> List[author_schemas.Author]:
        check_batch(items, "authors")
        with transaction():
            authors = [Author(**data.model_dump()) for data in items]
            db.add_all(authors)
            db.flush()
            logger.info(f"Created {len(authors)} authors in bulk")
            return [author_schemas.Author.model_validate(a) for a in authors]

    @classmethod
    def update(cls, author_id: int, patch: author_schemas.AuthorUpdate) -> author_schemas.Author:
        with transaction():
            author = cls._load(author_id)
            changed = merge(author, patch.model_dump(), cls.FIELDS)
            db.flush()
            logger.info(f"Updated author {author_id}: {', '.join(changed) or 'no changes'}")
            return author_schemas.Author.model_validate(author)

    @classmethod
    def delete(cls, author_id: int) -> None:
        with transaction():
            author = cls._load(author_id)
            author.unlink_books()
            db.delete(author)
            logger.info(f"Deleted author with id: {author_id}")


class BookService:

    FIELDS = ('title', 'author', 'content', 'publication_year', 'isbn')

    @classmethod
    def _load(cls, book_id, lock=False) -> Book:
        require_id(book_id, "book ID")
        if book := (Book.get_for_update(book_id) if lock else Book.get(book_id)):
            return book
        logger.warning(f"Book not found with id: {book_id}")
        raise BookNotFoundError(f"Book not found with id: {book_id}")

    @classmethod
    def _check_authors(cls, author_ids):
        wanted = set(author_ids or [])
        found = {a.id for a in Author.get_by_ids(list(wanted))}
        if missing := sorted(wanted - found):
            raise AuthorNotFoundError(
                f"Author not found with id: {', '.join(map(str, missing))}")

    @classmethod
    def to_records(cls, books) -> List[book_schemas.Book]:
        """Builds book records, resolving each book's authors by id."""
        author_ids = Book.author_ids_for([b.id for b in books])
        wanted = {i for ids in author_ids.values() for i in ids}
        authors = {
            a.id: author_schemas.AuthorSummary.model_validate(a)
            for a in Author.get_by_ids(list(wanted))
        }
        return [
            book_schemas.Book.model_validate(book).model_copy(update={
                'authors': [authors[i] for i in author_ids[book.id] if i in authors]
            })
            for book in books
        ]

    @classmethod
    def list(cls, page: int = 0, size: int = 10, sort_by: str = "id",
             sort_direction: str = "ASC") -> Page[book_schemas.Book]:
        with transaction():
            books, total, pages = paginate(Book, page, size, sort_by, sort_direction)
            logger.debug(f"Retrieved {len(books)} books out of {total} total")
            return Page[book_schemas.Book](
                content=cls.to_records(books), page=page, size=size,
                total_elements=total, total_pages=pages)

    @classmethod
    def get(cls, book_id: int) -> book_schemas.Book:
        with transaction():
            return cls.to_records([cls._load(book_id)])[0]

    @classmethod
    def _insert(cls, data: book_schemas.BookCreate) -> Book:
        book = Book(**data.model_dump(exclude={'author_ids'}))
        book.available = True
        db.add(book)
        db.flush()
        book.set_authors(data.author_ids)
        return book

    @classmethod
    def create(cls, data: book_schemas.BookCreate) -> book_schemas.Book:
        with transaction():
            cls._check_authors(data.author_ids)
            book = cls._insert(data)
            logger.info(f"Created book '{book.title}' with id: {book.id}")
            return cls.to_records([book])[0]

    @classmethod
    def create_many(cls, items: List[book_schemas.BookCreate]) -> List[book_schemas.Book]:
        check_batch(items, "books")
        with transaction():
            cls._check_authors([i for data in items for i in data.author_ids])
            books = [cls._insert(data) for data in items]
            logger.info(f"Created {len(books)} books in bulk")
            return cls.to_records(books)

    @classmethod
    def update(cls, book_id: int, patch: book_schemas.BookUpdate) -> book_schemas.Book:
        with transaction():
            book = cls._load(book_id)
            changed = merge(book, patch.model_dump(), cls.FIELDS)
            if patch.author_ids:
                cls._check_authors(patch.author_ids)
                book.set_authors(patch.author_ids)
                changed.append('authors')
            db.flush()
            logger.info(f"Updated book {book_id}: {', '.join(changed) or 'no changes'}")
            return cls.to_records([book])[0]

    @classmethod
    def delete(cls, book_id: int) -> None:
        with transaction():
            book = cls._load(book_id, lock=True)
            # Claiming the book through the same conditional update a borrow
            # uses serializes this delete with any borrow of it
            if not Book.reserve(book_id):
                logger.warning(f"Refusing to delete book {book_id} with an active loan")
                raise ActiveLoanError("Book has an active loan and cannot be deleted")
            Loan.purge(book_id=book_id)
            book.set_authors([])
            db.delete(book)
            logger.info(f"Deleted book with id: {book_id}")
