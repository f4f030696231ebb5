from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from folio.configs import DEFAULT_PAGE_SIZE
from folio.core import auth
from folio.core.accounts import AuthService
from folio.core.exceptions import InvalidTokenError
from folio.core.users import UserService
from folio.routes.schemas import LoginRequest
from folio.schemas.base import Page
from folio.schemas.user import AuthResponse, TokenClaims, User, UserCreate, UserUpdate

router = APIRouter(prefix="/users")

bearer = HTTPBearer(auto_error=False)


def current_claims(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> TokenClaims:
    """Decodes the `Authorization: Bearer <token>` header of the request."""
    if not credentials:
        raise InvalidTokenError("Authentication token is required")
    return auth.decode_token(credentials.credentials)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate):
    return AuthService.register(user)

@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest):
    return AuthService.login(credentials.email, credentials.password)

@router.get("/me", response_model=User)
def me(claims: TokenClaims = Depends(current_claims)):
    return AuthService.whoami(claims)

@router.get("", response_model=Page[User])
def get_users(
    page: int = Query(0, description="Zero-based page index"),
    size: int = Query(DEFAULT_PAGE_SIZE, description="Page size"),
    sort_by: str = Query("id", alias="sortBy"),
    sort_direction: str = Query("ASC", alias="sortDirection"),
):
    return UserService.list(page=page, size=size, sort_by=sort_by, sort_direction=sort_direction)

@router.get("/{user_id}", response_model=User)
def get_user(user_id: int):
    return UserService.get(user_id)

@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate):
    return UserService.create(user)

@router.post("/bulk", response_model=List[User], status_code=status.HTTP_201_CREATED)
def create_users(users: List[UserCreate]):
    return UserService.create_many(users)

@router.put("/{user_id}", response_model=User)
def update_user(user_id: int, user: UserUpdate):
    return UserService.update(user_id, user)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_user(user_id: int):
    UserService.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
