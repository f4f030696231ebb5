"""
Seed README

1. Creates the Folio tables if they do not exist yet
2. Adds a handful of authors and books through the catalog services
    - Books are linked to their authors by id and start out available
3. Registers a demo patron (and optionally an admin) through the user service
    - Passwords are hashed exactly as for accounts created over the API
"""

import argparse
import logging
from folio.core import db
from folio.core.catalog import AuthorService, BookService
from folio.core.exceptions import EmailExistsError
from folio.core.models import Role
from folio.core.users import UserService
from folio.schemas.author import AuthorCreate
from folio.schemas.book import BookCreate
from folio.schemas.user import UserCreate

logger = logging.getLogger(__name__)

AUTHORS = [
    {"first_name": "Ursula", "last_name": "Le Guin", "nationality": "American"},
    {"first_name": "Chinua", "last_name": "Achebe", "nationality": "Nigerian"},
    {"first_name": "Italo", "last_name": "Calvino", "nationality": "Italian"},
]

BOOKS = [
    {"title": "The Dispossessed", "publication_year": 1974, "isbn": "9780060512750", "author": 0},
    {"title": "A Wizard of Earthsea", "publication_year": 1968, "isbn": "9780547773742", "author": 0},
    {"title": "Things Fall Apart", "publication_year": 1958, "isbn": "9780385474542", "author": 1},
    {"title": "Invisible Cities", "publication_year": 1972, "isbn": "9780156453806", "author": 2},
]


def seed_catalog():
    authors = AuthorService.create_many([AuthorCreate(**a) for a in AUTHORS])
    books = BookService.create_many([
        BookCreate(
            title=b["title"],
            publication_year=b["publication_year"],
            isbn=b["isbn"],
            author=authors[b["author"]].full_name,
            author_ids=[authors[b["author"]].id],
        ) for b in BOOKS
    ])
    logger.info(f"[Seeding] Added {len(authors)} authors and {len(books)} books")
    return authors, books


def seed_user(email, password, role=Role.USER):
    try:
        user = UserService.create(UserCreate(
            name="Demo", surname=role.value.title(), email=email,
            city="Alexandria", password=password, role=role))
        logger.info(f"[Seeding] Added {role.value} {user.email} (id: {user.id})")
    except EmailExistsError:
        logger.info(f"[Seeding] {email} already exists, skipping")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Seed a Folio database with sample data")
    parser.add_argument("--email", help="Demo patron email", default="reader@example.org")
    parser.add_argument("--password", help="Demo patron password", default="reader123")
    parser.add_argument("--admin-email", help="Also create an admin with this email", default=None)
    parser.add_argument("--skip-catalog", action="store_true", help="Only create users")
    args = parser.parse_args()

    db.init()
    if not args.skip_catalog:
        seed_catalog()
    seed_user(args.email, args.password)
    if args.admin_email:
        seed_user(args.admin_email, args.password, role=Role.ADMIN)
