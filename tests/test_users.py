#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_users
    ~~~~~~~~~~~~~~~~

    This module tests user management, registration and login.
"""

import pytest
from folio.core import auth
from folio.core.accounts import AuthService
from folio.core.loans import LoanService
from folio.core.models import Role, User
from folio.core.db import session as db
from folio.core.users import UserService
from folio.core.exceptions import (
    InvalidInputError,
    InvalidCredentialsError,
    InvalidTokenError,
    EmailExistsError,
    UserNotFoundError,
    ActiveLoanError,
)
from folio.schemas.user import TokenClaims, UserCreate, UserUpdate


def stored_password(user_id):
    password = User.get(user_id).password
    db.remove()
    return password


def _signup(**overrides):
    data = {"name": "Grace", "surname": "Hopper", "email": "grace@example.org",
            "city": "Arlington", "password": "cobol1959"}
    data.update(overrides)
    return UserCreate(**data)


def test_create_user_hashes_password(make_user):
    user = make_user(password="plaintext")

    assert "password" not in user.model_dump()
    assert user.role == Role.USER
    stored = stored_password(user.id)
    assert stored != "plaintext"
    assert auth.verify_password("plaintext", stored)


def test_duplicate_email_is_rejected_case_insensitively(make_user):
    make_user(email="dup@example.org")
    with pytest.raises(EmailExistsError):
        make_user(email="DUP@example.org")


def test_bulk_users_rejects_duplicates_within_batch():
    with pytest.raises(EmailExistsError):
        UserService.create_many([
            _signup(email="same@example.org"),
            _signup(email="Same@example.org"),
        ])
    assert UserService.list().total_elements == 0


def test_bulk_users_rejects_empty_batch():
    with pytest.raises(InvalidInputError):
        UserService.create_many([])


def test_update_user_merges_fields_and_rehashes_password(make_user):
    user = make_user(city="London")

    updated = UserService.update(user.id, UserUpdate(city="Cambridge", name="", password="newsecret"))

    assert updated.city == "Cambridge"
    assert updated.name == user.name
    assert auth.verify_password("newsecret", stored_password(user.id))


def test_update_user_email_conflict(make_user):
    first, second = make_user(), make_user()
    with pytest.raises(EmailExistsError):
        UserService.update(second.id, UserUpdate(email=first.email))

    # Changing only the case of one's own email is not a conflict
    updated = UserService.update(first.id, UserUpdate(email=first.email.upper()))
    assert updated.email.lower() == first.email


def test_update_user_rejects_short_password():
    with pytest.raises(ValueError):
        UserUpdate(password="abc")


def test_password_surrounding_spaces_are_kept():
    user = UserService.create(_signup(password="  hunter22  "))

    assert auth.verify_password("  hunter22  ", stored_password(user.id))
    assert AuthService.login("grace@example.org", "  hunter22  ").id == user.id
    with pytest.raises(InvalidCredentialsError):
        AuthService.login("grace@example.org", "hunter22")


@pytest.mark.parametrize("password", ["\u00e9" * 40, "\u5bc6" * 25])
def test_password_over_72_bytes_is_invalid(password):
    assert len(password) <= 72
    with pytest.raises(ValueError, match="72 bytes"):
        _signup(password=password)
    with pytest.raises(ValueError, match="72 bytes"):
        UserUpdate(password=password)


def test_multibyte_password_within_limit_round_trips():
    password = "\u00e9" * 36
    AuthService.register(_signup(password=password))
    assert AuthService.login("grace@example.org", password).email == "grace@example.org"


def test_get_missing_user():
    with pytest.raises(UserNotFoundError):
        UserService.get(12)


def test_list_users_paginates(make_user):
    for _ in range(3):
        make_user()

    page = UserService.list(page=0, size=2, sort_by="email", sort_direction="DESC")
    assert [u.email for u in page.content] == ["reader3@example.org", "reader2@example.org"]
    assert page.total_pages == 2


def test_delete_user_with_active_loan_conflicts(make_user, make_book):
    user = make_user()
    loan = LoanService.borrow(user.id, make_book().id)

    with pytest.raises(ActiveLoanError):
        UserService.delete(user.id)
    assert len(LoanService.list(user_id=user.id)) == 1

    LoanService.return_loan(loan.id)
    UserService.delete(user.id)
    with pytest.raises(UserNotFoundError):
        UserService.get(user.id)
    assert LoanService.list() == []


def test_refused_user_delete_keeps_loan_history(make_user, make_book):
    user = make_user()
    returned = LoanService.return_loan(LoanService.borrow(user.id, make_book().id).id)
    LoanService.borrow(user.id, make_book().id)

    with pytest.raises(ActiveLoanError):
        UserService.delete(user.id)

    assert returned.id in [loan.id for loan in LoanService.list(user_id=user.id)]
    assert UserService.get(user.id).id == user.id


def test_register_always_creates_plain_user():
    response = AuthService.register(_signup(role=Role.ADMIN))

    assert response.role == Role.USER
    claims = auth.decode_token(response.token)
    assert claims.user_id == response.id
    assert claims.role == Role.USER


def test_register_duplicate_email():
    AuthService.register(_signup())
    with pytest.raises(EmailExistsError):
        AuthService.register(_signup(email="Grace@Example.org"))


def test_login_returns_token_for_same_user(make_user):
    user = make_user(email="ada@example.org", password="engine42", role=Role.ADMIN)

    response = AuthService.login("ada@example.org", "engine42")

    assert response.id == user.id
    claims = auth.decode_token(response.token)
    assert claims.user_id == user.id
    assert claims.role == Role.ADMIN


@pytest.mark.parametrize("email, password, error", [
    ("", "engine42", InvalidInputError),
    ("ada@example.org", "  ", InvalidInputError),
    ("nobody@example.org", "engine42", InvalidCredentialsError),
    ("ada@example.org", "wrong-password", InvalidCredentialsError),
])
def test_login_failures(make_user, email, password, error):
    make_user(email="ada@example.org", password="engine42")
    with pytest.raises(error):
        AuthService.login(email, password)


def test_whoami_of_deleted_user_is_unauthorized(make_user):
    user = make_user()
    claims = TokenClaims(user_id=user.id, email=user.email, role=user.role)
    assert AuthService.whoami(claims).id == user.id

    UserService.delete(user.id)
    with pytest.raises(InvalidTokenError):
        AuthService.whoami(claims)
