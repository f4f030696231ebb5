from typing import Optional
from folio.schemas.base import FolioModel


class BorrowRequest(FolioModel):
    user_id: Optional[int] = None
    book_id: Optional[int] = None


class LoginRequest(FolioModel):
    email: Optional[str] = None
    password: Optional[str] = None
