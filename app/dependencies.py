"""
Module định nghĩa các dependency cho API, giúp tái sử dụng logic.

Dependency Injection là một tính năng cốt lõi của FastAPI, cho phép tách biệt
và tái sử dụng các thành phần như session database, xác thực người dùng và
kiểm tra quyền truy cập theo vai trò.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .core.config import settings
from .core.database import get_db
from .core.exceptions import AuthenticationError, ForbiddenError
from .core.security import canonical_role, decode_access_token
from .models import Admin

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

DbSession = Annotated[Session, Depends(get_db)]


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: str


def get_current_user(
    request: Request,
    db: DbSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> CurrentUser:
    """
    Xác định người dùng hiện tại từ Bearer token hoặc cookie phiên.

    Raises:
        AuthenticationError: Không có token, token không hợp lệ hoặc người dùng không tồn tại.
        ForbiddenError: Tài khoản đã bị khoá.
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.COOKIE_NAME, "")
    if not token:
        raise AuthenticationError("No token")

    payload = decode_access_token(token)
    try:
        user_id = int(payload["id"])
    except (TypeError, ValueError):
        raise AuthenticationError("Authentication failed")

    user = db.get(Admin, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if user.status == "Suspend":
        raise ForbiddenError("Account suspended")
    return CurrentUser(id=user.id, role=canonical_role(user.role))


def require_roles(*roles: str) -> Callable[..., CurrentUser]:
    """Tạo dependency chỉ cho phép các vai trò trong `roles`."""

    def _checker(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        if user.role not in roles:
            logger.info(f"Từ chối người dùng {user.id} (vai trò '{user.role}'), yêu cầu {roles}.")
            raise ForbiddenError("Forbidden")
        return user

    return _checker


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
AdminUser = Annotated[CurrentUser, Depends(require_roles("admin"))]
# Admin, office admin và tài khoản showroom đều được xem báo cáo và phản hồi.
StaffUser = Annotated[CurrentUser, Depends(require_roles("admin", "officeAdmin", "showroom"))]
