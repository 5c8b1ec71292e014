"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from notifyhub.domain.entities import User
from notifyhub.domain.errors import StoreUnavailable
from notifyhub.infrastructure.database import get_db
from notifyhub.infrastructure.push import PushGateway
from notifyhub.infrastructure.repositories import UserRepository
from notifyhub.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def _unauthorized(detail: str = "Invalid credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def store_unavailable(exc: StoreUnavailable) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(exc),
        headers={"Retry-After": "5"},
    )


def resolve_current_user(token: str | None, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc

    email = payload.get("sub")
    if not isinstance(email, str) or not email:
        raise _unauthorized()

    try:
        user = UserRepository(db).get_by_email(email)
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def get_push_gateway(request: Request) -> PushGateway:
    """Return the process-scoped gateway created by the app factory."""

    return request.app.state.push_gateway
