"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from eventcraft.application.use_cases.notifications import NotificationDispatcher
from eventcraft.config import get_settings
from eventcraft.domain.entities import USER_ROLE_ADMIN, USER_ROLE_ORGANIZER, User
from eventcraft.infrastructure.database import get_db
from eventcraft.infrastructure.repositories import UserRepository
from eventcraft.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token.

    The token subject carries the user id.
    """

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise _credentials_error() from exc

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return current_user


def require_organizer(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is an organizer or an administrator."""

    if not (
        current_user.has_role(USER_ROLE_ORGANIZER) or current_user.has_role(USER_ROLE_ADMIN)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return current_user


def get_notification_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    """Return a dispatcher bound to the request's database session."""

    return NotificationDispatcher(db, get_settings())
