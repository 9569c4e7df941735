from __future__ import annotations

import datetime as dt
import hashlib
import hmac
import logging
import secrets

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.settings import Settings
from app.models.enums import Permission, UserRole
from app.models.user import User, UserSession

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 260_000
TOKEN_BYTES = 32


class AuthError(ValueError):
    pass


def hash_password(password: str, salt: str | None = None, iterations: int = HASH_ITERATIONS) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, expected = password_hash.split("$", 3)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM or not iterations.isdigit():
        return False

    candidate = hash_password(password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate.rsplit("$", 1)[1], expected)


def session_expiry(now: dt.datetime, ttl_hours: int) -> dt.datetime:
    return now + dt.timedelta(hours=ttl_hours)


def is_session_active(user_session: UserSession, now: dt.datetime) -> bool:
    expires_at = user_session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=dt.timezone.utc)
    return expires_at > now


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    user = await session.scalar(select(User).where(User.email == email.strip().lower()))
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        raise AuthError("Invalid email or password")
    return user


async def open_session(session: AsyncSession, user: User, ttl_hours: int) -> UserSession:
    now = dt.datetime.now(tz=dt.timezone.utc)
    user_session = UserSession(
        token=secrets.token_urlsafe(TOKEN_BYTES),
        user_id=user.id,
        created_at=now,
        expires_at=session_expiry(now, ttl_hours),
    )
    session.add(user_session)
    await session.commit()
    logger.info("User %s logged in", user.email)
    return user_session


async def resolve_session(session: AsyncSession, token: str) -> User:
    user_session = await session.scalar(
        select(UserSession).options(selectinload(UserSession.user)).where(UserSession.token == token)
    )
    if user_session is None:
        raise AuthError("Invalid session")

    if not is_session_active(user_session, dt.datetime.now(tz=dt.timezone.utc)):
        await session.delete(user_session)
        await session.commit()
        raise AuthError("Session expired")
    return user_session.user


async def close_session(session: AsyncSession, token: str) -> None:
    await session.execute(delete(UserSession).where(UserSession.token == token))
    await session.commit()


def can_write(user: User) -> bool:
    return user.role == UserRole.ADMIN or user.permission == Permission.WRITE


async def ensure_admin(session: AsyncSession, settings: Settings) -> None:
    email = settings.admin_email.strip().lower()
    existing = await session.scalar(select(User).where(User.email == email))
    if existing is not None:
        return

    session.add(
        User(
            email=email,
            name=settings.admin_name,
            password_hash=hash_password(settings.admin_password),
            role=UserRole.ADMIN,
            permission=Permission.WRITE,
        )
    )
    await session.commit()
    logger.info("Seeded admin user %s", email)
