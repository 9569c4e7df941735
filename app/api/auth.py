from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_bearer_token, get_current_user
from app.db.session import get_session
from app.db.settings import Settings, get_settings
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, SessionResponse, UserRead
from app.services.auth import AuthError, authenticate, close_session, open_session

router = APIRouter(prefix="/api/auth", tags=["auth"])


def serialize_user(user: User) -> UserRead:
    return UserRead(id=user.id, email=user.email, name=user.name, role=user.role, permission=user.permission)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    try:
        user = await authenticate(session, payload.email, payload.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    user_session = await open_session(session, user, settings.session_ttl_hours)
    return LoginResponse(token=user_session.token, user=serialize_user(user))


@router.get("/verify", response_model=SessionResponse)
async def verify_session(user: User = Depends(get_current_user)) -> SessionResponse:
    return SessionResponse(user=serialize_user(user))


@router.post("/logout")
async def logout(
    token: str = Depends(get_bearer_token),
    session: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await close_session(session, token)
    return {"status": "ok"}
