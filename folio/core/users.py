import logging
from typing import List
from folio.core.auth import hash_password
from folio.core.db import session as db, transaction
from folio.core.models import User, Loan, LoanStatus, Role
from folio.core.utils import require_id, merge, check_batch, paginate
from folio.core.exceptions import (
    EmailExistsError,
    UserNotFoundError,
    ActiveLoanError,
)
from folio.schemas import user as user_schemas
from folio.schemas.base import Page

logger = logging.getLogger(__name__)


class UserService:

    FIELDS = ('name', 'surname', 'email', 'address', 'city')

    @classmethod
    def _load(cls, user_id, lock=False) -> User:
        require_id(user_id, "user ID")
        if user := (User.get_for_update(user_id) if lock else User.get(user_id)):
            return user
        logger.warning(f"User not found with id: {user_id}")
        raise UserNotFoundError(f"User not found with id: {user_id}")

    @classmethod
    def insert(cls, data: user_schemas.UserCreate, role: Role = None) -> User:
        """Adds a user to the current transaction, hashing the password.

        Callers own the transaction; raises EmailExistsError on a duplicate.
        """
        if User.get_by_email(data.email):
            logger.warning(f"User creation failed: email already exists: {data.email}")
            raise EmailExistsError()
        user = User(**data.model_dump(exclude={'password', 'role'}))
        user.email = user.email.strip()
        user.role = role or data.role
        user.password = hash_password(data.password)
        db.add(user)
        db.flush()
        return user

    @classmethod
    def list(cls, page: int = 0, size: int = 10, sort_by: str = "id",
             sort_direction: str = "ASC") -> Page[user_schemas.User]:
        with transaction():
            users, total, pages = paginate(User, page, size, sort_by, sort_direction)
            logger.info(f"Retrieved page {page} with {len(users)} users (total: {total})")
            return Page[user_schemas.User](
                content=[user_schemas.User.model_validate(u) for u in users],
                page=page, size=size, total_elements=total, total_pages=pages)

    @classmethod
    def get(cls, user_id: int) -> user_schemas.User:
        with transaction():
            return user_schemas.User.model_validate(cls._load(user_id))

    @classmethod
    def create(cls, data: user_schemas.UserCreate) -> user_schemas.User:
        with transaction():
            user = cls.insert(data)
            logger.info(f"Created user with id: {user.id} and email: {user.email}")
            return user_schemas.User.model_validate(user)

    @classmethod
    def create_many(cls, items: List[user_schemas.UserCreate]) -> List[user_schemas.User]:
        check_batch(items, "users")
        seen = set()
        for data in items:
            email = data.email.strip().lower()
            if email in seen:
                raise EmailExistsError(f"Duplicate email in request: {data.email}")
            seen.add(email)
        with transaction():
            users = [cls.insert(data) for data in items]
            logger.info(f"Created {len(users)} users in bulk")
            return [user_schemas.User.model_validate(u) for u in users]

    @classmethod
    def update(cls, user_id: int, patch: user_schemas.UserUpdate) -> user_schemas.User:
        with transaction():
            user = cls._load(user_id)
            if patch.email and patch.email.strip().lower() != user.email.lower():
                if User.get_by_email(patch.email):
                    logger.warning(f"Email update failed: email already exists: {patch.email}")
                    raise EmailExistsError()
            changed = merge(user, patch.model_dump(), cls.FIELDS)
            if patch.password:
                user.password = hash_password(patch.password)
                changed.append('password')
            db.flush()
            logger.info(f"Updated user {user_id}: {', '.join(changed) or 'no changes'}")
            return user_schemas.User.model_validate(user)

    @classmethod
    def delete(cls, user_id: int) -> None:
        with transaction():
            user = cls._load(user_id, lock=True)
            # Write before checking so the check runs under the write lock
            Loan.purge(user_id=user_id, status=LoanStatus.RETURNED)
            if Loan.has_active(user_id=user_id):
                logger.warning(f"Refusing to delete user {user_id} with an active loan")
                raise ActiveLoanError("User has an active loan and cannot be deleted")
            db.delete(user)
            logger.info(f"Deleted user with id: {user_id}")
