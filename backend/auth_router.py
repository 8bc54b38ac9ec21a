import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from auth import Identity, TokenService, get_current_user, get_password_hash, verify_password
from dependencies import get_token_service, get_user_store
from errors import InvalidCredentials, StoreError, UserNotFound, ValidationError
from user_store import UserStore
import schemas

logger = logging.getLogger(__name__)

auth_router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={code: {"model": schemas.ErrorResponse} for code in (400, 401, 409, 500)},
)

def auth_response(user, tokens: TokenService) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        token=tokens.issue(user.id, user.username),
        user=schemas.UserSummary.model_validate(user),
    )

@auth_router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    user_data: schemas.UserCreate,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
):
    if not (user_data.username and user_data.email and user_data.password):
        raise ValidationError("All fields are required")

    # Hash the password and create the new user; duplicates raise a 409
    try:
        new_user = users.create(
            username=user_data.username,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
        )
    except SQLAlchemyError as e:
        logger.exception("Registration error: %s", e)
        raise StoreError("Registration failed") from e

    # Create and return an access token for automatic login
    return auth_response(new_user, tokens)

@auth_router.post("/login", response_model=schemas.AuthResponse)
def login_for_access_token(
    credentials: schemas.UserLogin,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
):
    if not (credentials.email and credentials.password):
        raise InvalidCredentials()

    try:
        db_user = users.find_by_email(credentials.email)
    except SQLAlchemyError as e:
        logger.exception("Login error: %s", e)
        raise StoreError("Login failed") from e

    try:
        password_ok = bool(db_user) and verify_password(credentials.password, db_user.hashed_password)
    except ValueError as e:
        # passlib rejects stored hashes it cannot identify
        logger.exception("Unreadable password hash for %s: %s", credentials.email, e)
        raise StoreError("Login failed") from e

    if not password_ok:
        logger.info("Failed login for %s", credentials.email)
        raise InvalidCredentials()

    return auth_response(db_user, tokens)

@auth_router.get("/me", response_model=schemas.UserProfile)
def read_current_user(
    identity: Identity = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    try:
        profile = users.find_by_id(identity.user_id)
    except SQLAlchemyError as e:
        logger.exception("Profile lookup failed for user %s: %s", identity.user_id, e)
        raise StoreError("Server error") from e

    if profile is None:
        raise UserNotFound()
    return profile
