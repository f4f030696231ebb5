import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
import jwt
from folio.configs import SECRET_KEY, TOKEN_TTL_MINUTES, TOKEN_ISSUER
from folio.core.exceptions import InvalidTokenError
from folio.core.models import Role
from folio.schemas.user import TokenClaims

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SECRET = None  # Will be initialized lazily


def _get_secret() -> str:
    """Get or initialize the token signing key lazily."""
    global SECRET
    if SECRET is None:
        SECRET = SECRET_KEY
        if not SECRET:
            logger.warning("FOLIO_SECRET_KEY is not set; tokens will not survive a restart")
            SECRET = secrets.token_urlsafe(32)
    return SECRET


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # Malformed hash on record
        return False


def create_token(user, ttl_minutes: int = TOKEN_TTL_MINUTES) -> str:
    """Issues a signed JWT carrying the user's id, email and role."""
    now = datetime.now(timezone.utc)
    role = user.role.value if isinstance(user.role, Role) else str(user.role)
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": str(user.id),
        "email": user.email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(payload, _get_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """Verifies signature, issuer and expiry; rejects anything else as 401."""
    if not token:
        raise InvalidTokenError("Authentication token is required")
    try:
        payload = jwt.decode(
            token,
            _get_secret(),
            algorithms=[ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError() from e

    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, ValueError) as e:
        raise InvalidTokenError("Malformed token claims") from e
