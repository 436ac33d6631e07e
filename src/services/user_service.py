"""Service layer for user registration and login."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import hash_password, verify_password
from models.user import User
from schemas.user import UserRegister
from services.exceptions import EmailAlreadyRegisteredError

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by (already lower-cased) email."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: UserRegister) -> User:
    """
    Create a new user account.

    Raises:
        EmailAlreadyRegisteredError: If the email is already taken.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if await get_user_by_email(db, data.email) is not None:
        raise EmailAlreadyRegisteredError(data.email)

    user = User(
        email=data.email,
        name=data.name,
        password_hash=hash_password(data.password),
    )
    try:
        async with db.begin_nested():
            db.add(user)
    except IntegrityError as e:
        # Race condition: another request registered the email between check and insert
        raise EmailAlreadyRegisteredError(data.email) from e

    logger.info("Registered user %s", user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Return the user if the email/password pair is valid, otherwise None."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
