"""Endpoint đăng nhập, đăng xuất và thông tin người dùng hiện tại."""

import logging

from fastapi import APIRouter, Response

from .. import schemas
from ..core.config import settings
from ..core.exceptions import AuthenticationError, ForbiddenError
from ..core.security import canonical_role, create_access_token
from ..dependencies import AuthenticatedUser, DbSession
from ..models import Admin
from ..services import accounts

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

COOKIE_MAX_AGE = 7 * 24 * 60 * 60


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.COOKIE_NAME,
        token,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="none" if settings.COOKIE_SECURE else "lax",
        path="/",
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, response: Response, db: DbSession):
    """Đăng nhập bằng email/mật khẩu, trả về JWT và đặt cookie phiên."""
    user = accounts.authenticate(db, payload.email, payload.password)
    role = canonical_role(user.role)
    token = create_access_token(user.id, role)
    _set_session_cookie(response, token)
    return {"token": token, "user": accounts.user_payload(user, role=role)}


@router.post("/logout", response_model=schemas.MessageResponse)
def logout(response: Response):
    response.delete_cookie(settings.COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=schemas.UserEnvelope)
def me(current: AuthenticatedUser, db: DbSession):
    user = db.get(Admin, current.id)
    if user is None:
        raise AuthenticationError("Not user")
    if user.status == "Suspend":
        raise ForbiddenError("Account suspended")
    return {"user": accounts.user_payload(user)}
