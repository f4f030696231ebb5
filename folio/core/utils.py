import re
import math
import logging
from sqlalchemy import select, func
from folio.core.db import session as db
from folio.core.exceptions import InvalidIdError, InvalidInputError, BulkLimitError
from folio.configs import BULK_LIMIT, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_id(value, label="ID"):
    """Rejects missing, non-integer and non-positive identifiers."""
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidIdError(f"Valid {label} is required")
    return value


def merge(record, patch: dict, fields):
    """Copies each non-blank value in `patch` onto `record`; returns changed fields."""
    changed = []
    for field in fields:
        value = patch.get(field)
        if is_blank(value):
            continue
        if isinstance(value, str):
            value = value.strip()
        if getattr(record, field) != value:
            setattr(record, field, value)
            changed.append(field)
    return changed


def check_batch(items, label="items"):
    if not items:
        raise InvalidInputError(f"{label.capitalize()} list cannot be empty")
    if len(items) > BULK_LIMIT:
        raise BulkLimitError(f"Cannot create more than {BULK_LIMIT} {label} at once")


def paginate(model, page=0, size=10, sort_by="id", sort_direction="ASC"):
    """Returns (rows, total, total_pages) for one page of `model` rows."""
    if page is None or page < 0:
        raise InvalidInputError("Page index must not be negative")
    if size is None or not 1 <= size <= MAX_PAGE_SIZE:
        raise InvalidInputError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
    column_name = to_snake(sort_by or "id")
    if column_name not in model.SORTABLE:
        raise InvalidInputError(f"Cannot sort by '{sort_by}'")
    column = getattr(model, column_name)
    order = column.desc() if (sort_direction or "").upper() == "DESC" else column.asc()

    total = db.scalar(select(func.count()).select_from(model))
    rows = db.scalars(
        select(model).order_by(order, model.id).offset(page * size).limit(size)
    ).all()
    total_pages = math.ceil(total / size) if total else 0
    return rows, total, total_pages
