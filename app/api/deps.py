from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.models.user import User
from app.services.auth import AuthError, can_write, resolve_session
from app.services.store import SqlTransactionStore, TransactionStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_transaction_store(session: AsyncSession = Depends(get_session)) -> TransactionStore:
    return SqlTransactionStore(session)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    session: AsyncSession = Depends(get_session),
) -> User:
    try:
        return await resolve_session(session, token)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_write_access(user: User = Depends(get_current_user)) -> User:
    if not can_write(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Write permission required")
    return user
