"""Registration and login endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from core.config import Settings
from core.security import create_access_token
from models.user import User
from schemas.user import AccessTokenResponse, UserLogin, UserRegister, UserResponse
from services import user_service
from services.exceptions import EmailAlreadyRegisteredError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User, settings: Settings) -> AccessTokenResponse:
    return AccessTokenResponse(
        access_token=create_access_token(user.id, settings),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AccessTokenResponse, status_code=201)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AccessTokenResponse:
    """
    Create an account and return an access token for it.

    Returns 409 if the email is already registered.
    """
    try:
        user = await user_service.register_user(db, data)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return _token_response(user, settings)


@router.post("/login", response_model=AccessTokenResponse)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AccessTokenResponse:
    """
    Exchange email and password for an access token.

    Unknown emails and wrong passwords get the same 401 response.
    """
    user = await user_service.authenticate_user(db, data.email, data.password)
    if user is None:
        logger.warning("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_response(user, settings)
