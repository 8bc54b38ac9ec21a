import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import jwt, JWTError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi import Depends, Request

from dependencies import get_app_settings, get_token_service, get_user_store
from errors import InvalidToken, Unauthenticated

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# auto_error=False: a missing header is reported by the gate itself as 401 "Access denied".
bearer_scheme = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain password against a hashed one."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Hashes a password."""
    return pwd_context.hash(password)


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str


class TokenService:
    """Issues and verifies signed session tokens carrying {userId, username}."""

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM,
                 expires_delta: Optional[timedelta] = None):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    def issue(self, user_id: int, username: str) -> str:
        """Generates a JWT access token."""
        issued_at = datetime.now(timezone.utc)
        to_encode = {
            "userId": user_id,
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Decodes the token; raises InvalidToken on a bad signature, bad payload or expiry."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidToken() from e

        user_id = payload.get("userId")
        username = payload.get("username")
        if user_id is None or username is None:
            raise InvalidToken()

        try:
            return Identity(user_id=int(user_id), username=str(username))
        except (TypeError, ValueError) as e:
            raise InvalidToken() from e


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    settings=Depends(get_app_settings),
    users=Depends(get_user_store),
) -> Identity:
    """
    Auth gate for protected routes. The identity is trusted from the token
    alone unless VERIFY_TOKEN_USER is enabled, in which case the user must
    still exist in the store.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    identity = tokens.verify(credentials.credentials)

    if settings.verify_token_user and users.find_by_id(identity.user_id) is None:
        logger.warning("Token for unknown user %s rejected", identity.user_id)
        raise InvalidToken()

    request.state.user = identity
    return identity
