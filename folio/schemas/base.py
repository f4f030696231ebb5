from datetime import datetime
from typing import Annotated, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar('T')


def Text(min_length: int = 1, max_length: Optional[int] = None):
    """A stripped string that must be non-blank (for `min_length` >= 1)."""
    return Annotated[str, StringConstraints(
        strip_whitespace=True, min_length=min_length, max_length=max_length)]


class FolioModel(BaseModel):

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class FolioPatch(FolioModel):
    """Partial update: blank strings count as absent and never overwrite."""

    @field_validator('*', mode='before')
    @classmethod
    def blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Page(FolioModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int


class ErrorResponse(FolioModel):
    status: int
    message: str
    field_errors: Optional[Dict[str, str]] = None
    timestamp: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "status": 404,
                "message": "Book not found",
                "fieldErrors": None,
                "timestamp": "2025-10-01T12:00:00Z"
            }
        }
