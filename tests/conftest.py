import os

# Set TESTING before any folio imports so the in-memory database is used
os.environ["TESTING"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from folio.core.db import Base, engine, session as db_session, _engine_kwargs
from folio.core import models  # noqa: F401
from folio.core.catalog import AuthorService, BookService
from folio.core.users import UserService
from folio.schemas.author import AuthorCreate
from folio.schemas.book import BookCreate
from folio.schemas.user import UserCreate


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    try:
        yield db_session
    finally:
        db_session.remove()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_database(tmp_path):
    """Rebinds the session to a file-backed SQLite database.

    The in-memory database shares one connection between threads, so tests
    that run requests side by side need real, separate connections.
    """
    uri = f"sqlite:///{tmp_path / 'folio.db'}"
    file_engine = create_engine(uri, **_engine_kwargs(uri))
    Base.metadata.create_all(bind=file_engine)
    db_session.remove()
    db_session.configure(bind=file_engine)
    try:
        yield file_engine
    finally:
        db_session.remove()
        db_session.configure(bind=engine)
        file_engine.dispose()


@pytest.fixture
def client():
    from folio.app import app
    return TestClient(app)


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make_user(**overrides):
        counter["n"] += 1
        data = {
            "name": "Ada",
            "surname": "Lovelace",
            "email": f"reader{counter['n']}@example.org",
            "city": "London",
            "password": "secret123",
        }
        data.update(overrides)
        return UserService.create(UserCreate(**data))
    return _make_user


@pytest.fixture
def make_author():
    def _make_author(first_name="Ursula", last_name="Le Guin", **overrides):
        return AuthorService.create(AuthorCreate(
            first_name=first_name, last_name=last_name, **overrides))
    return _make_author


@pytest.fixture
def make_book():
    counter = {"n": 0}

    def _make_book(**overrides):
        counter["n"] += 1
        data = {
            "title": f"Book {counter['n']}",
            "publication_year": 1974,
            "isbn": f"97800605127{counter['n']:02d}",
        }
        data.update(overrides)
        return BookService.create(BookCreate(**data))
    return _make_book
