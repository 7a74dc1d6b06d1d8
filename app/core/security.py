"""
Các tiện ích bảo mật: băm mật khẩu bằng bcrypt và phát hành/giải mã JWT.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from jose import JWTError, jwt

from .config import settings
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ROLES = ("admin", "officeAdmin", "showroom")

# Các cách viết vai trò cũ còn tồn tại trong dữ liệu, đã được chuẩn hoá
# (bỏ ký tự không phải chữ cái, chuyển về chữ thường).
_ROLE_ALIASES = {
    "admin": "admin",
    "officeadmin": "officeAdmin",
    "office": "officeAdmin",
    "showroom": "showroom",
    "customer": "showroom",
}

# Nhãn vai trò hiển thị trên giao diện quản trị.
_ROLE_LABELS = {
    "Admin": "admin",
    "Office Admin": "officeAdmin",
    "Showroom": "showroom",
    "Customer": "showroom",
}


def canonical_role(role: str) -> str:
    """Chuẩn hoá vai trò lưu trong database về một trong `ROLES`."""
    key = "".join(ch for ch in (role or "") if ch.isalpha()).lower()
    return _ROLE_ALIASES.get(key, role if role in ROLES else "showroom")


def role_from_label(role: str) -> str:
    """Ánh xạ nhãn vai trò từ form quản trị sang giá trị lưu trữ."""
    return _ROLE_LABELS.get(role, role)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def is_password_hash(value: str) -> bool:
    """True nếu giá trị lưu trữ là một hash bcrypt (`$2a$`, `$2b$`, `$2y$`)."""
    return (value or "").startswith("$2")


def verify_password(password: str, hashed: str) -> bool:
    """Kiểm tra mật khẩu; trả về False nếu giá trị lưu trữ không phải hash bcrypt."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), (hashed or "").encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: int, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRE_DAYS)
    payload = {"id": str(user_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Giải mã và xác thực JWT.

    Raises:
        AuthenticationError: Nếu token sai chữ ký, hết hạn hoặc không đúng định dạng.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        # Token hỏng hoặc hết hạn là tình huống bình thường, chỉ ghi ở mức debug.
        logger.debug(f"Token không hợp lệ: {e}")
        raise AuthenticationError("Authentication failed")
    if "id" not in payload:
        raise AuthenticationError("Authentication failed")
    return payload
