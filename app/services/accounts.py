"""
Đăng nhập và quản lý tài khoản người dùng.
"""

import hmac
import logging
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import (AuthenticationError, BadRequestError,
                               ConflictError, ForbiddenError, NotFoundError)
from ..core.security import (canonical_role, hash_password, is_password_hash, role_from_label,
                             verify_password)
from ..models import Admin

logger = logging.getLogger(__name__)

USER_STATUSES = ("Active", "Inactive", "Pending", "Suspend")


def user_payload(user: Admin, role: str = None) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.username,
        "email": user.email,
        "role": role or user.role,
        "status": user.status or "Active",
        "showroom_name": user.showroom_name or "",
    }


def _find_by_email(db: Session, email: str) -> Admin:
    return db.execute(
        select(Admin).where(func.lower(Admin.email) == email.strip().lower())
    ).scalar_one_or_none()


def authenticate(db: Session, email: str, password: str) -> Admin:
    """
    Kiểm tra thông tin đăng nhập và trả về tài khoản tương ứng.

    Mật khẩu cũ lưu dạng văn bản thuần được băm lại bằng bcrypt ngay khi
    đăng nhập thành công.

    Raises:
        BadRequestError: Thiếu email hoặc mật khẩu.
        AuthenticationError: Sai thông tin đăng nhập.
        ForbiddenError: Tài khoản đã bị khoá.
    """
    if not email or not password:
        raise BadRequestError("email and password are required")

    user = _find_by_email(db, email)
    if user is None:
        logger.info(f"Đăng nhập thất bại: không có tài khoản '{email}'.")
        raise AuthenticationError("Invalid credentials")
    if user.status == "Suspend":
        raise ForbiddenError("Account suspended")

    if not verify_password(password, user.password):
        stored = user.password or ""
        if is_password_hash(stored) or not hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8")):
            logger.info(f"Đăng nhập thất bại: sai mật khẩu cho '{email}'.")
            raise AuthenticationError("Invalid credentials")
        user.password = hash_password(password)
        db.commit()
        logger.info(f"Đã nâng cấp mật khẩu văn bản thuần sang bcrypt cho tài khoản {user.id}.")
    return user


def list_users(db: Session) -> List[Dict[str, Any]]:
    users = db.execute(select(Admin).order_by(Admin.id)).scalars().all()
    return [user_payload(user) for user in users]


def create_user(db: Session, name: str, email: str, password: str, role: str,
                status: str = None, showroom_name: str = None) -> Dict[str, Any]:
    if not name or not email or not password or not role:
        raise BadRequestError("name, email, password, role are required")
    if _find_by_email(db, email) is not None:
        raise ConflictError("Email already exists")
    if status and status not in USER_STATUSES:
        raise BadRequestError("Invalid status")

    user = Admin(
        username=name.strip(),
        email=email.strip().lower(),
        password=hash_password(password),
        role=canonical_role(role_from_label(role)),
        status=status or "Active",
        showroom_name=(showroom_name or "").strip(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(user)
    logger.info(f"Đã tạo tài khoản {user.id} ({user.role}).")
    return user_payload(user)


def update_user(db: Session, user_id: int, name: str = None, email: str = None, password: str = None,
                role: str = None, status: str = None, showroom_name: str = None) -> Dict[str, Any]:
    user = db.get(Admin, user_id)
    if user is None:
        raise NotFoundError("Not found")
    if status and status not in USER_STATUSES:
        raise BadRequestError("Invalid status")

    if name:
        user.username = name.strip()
    if email:
        user.email = email.strip().lower()
    if role:
        user.role = canonical_role(role_from_label(role))
    if status:
        user.status = status
    if password:
        user.password = hash_password(password)
    if showroom_name is not None:
        user.showroom_name = showroom_name.strip()

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(user)
    return user_payload(user)


def delete_user(db: Session, user_id: int) -> None:
    user = db.get(Admin, user_id)
    if user is None:
        raise NotFoundError("Not found")
    db.delete(user)
    db.commit()
    logger.info(f"Đã xoá tài khoản {user_id}.")
