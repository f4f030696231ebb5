from datetime import date
from typing import Optional
from pydantic import field_validator
from folio.core.models import LoanStatus
from folio.schemas.base import FolioModel, FolioPatch


class LoanUpdate(FolioPatch):
    loan_date: Optional[date] = None
    return_date: Optional[date] = None
    status: Optional[LoanStatus] = None

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class Loan(FolioModel):
    id: int
    user_id: int
    book_id: int
    loan_date: date
    return_date: Optional[date] = None
    status: LoanStatus
