"""
Cấu hình của API showroom, đọc từ biến môi trường và tệp `.env`.

Mọi module dùng chung đối tượng `settings` được tạo ở cuối tệp. Riêng
`JWT_SECRET` là bắt buộc: thiếu biến này ứng dụng sẽ không khởi động.
"""

from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyUrl, BeforeValidator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_cors_origins(value: Any) -> List[str] | str:
    """
    Chuyển đổi chuỗi CORS từ biến môi trường thành danh sách các URL.

    Args:
        value: Giá trị đầu vào, có thể là chuỗi hoặc danh sách.

    Returns:
        Danh sách các origin hợp lệ.
    """
    if isinstance(value, str) and not value.startswith("["):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, str)):
        return value
    raise ValueError(value)


SmsProvider = Literal["greenweb", "bulksmsbd", "smsnetbd"]


class Settings(BaseSettings):
    """Toàn bộ thiết lập của ứng dụng, nhóm theo chức năng."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Cấu hình chung ---
    PROJECT_NAME: str = "Showroom Feedback API"
    DESCRIPTION: str = "API quản lý khách hàng showroom, phản hồi và báo cáo."
    API_PREFIX: str = "/api/user"
    BACKEND_CORS_ORIGINS: Annotated[
        List[AnyUrl], BeforeValidator(_parse_cors_origins)
    ] = ["http://localhost:3000"]
    LOGGER_CONFIG_PATH: Path = Path("configs/logger.yaml")

    # --- Cấu hình Database ---
    DATABASE_URL: str = "sqlite:///data/showroom.db"
    AUTO_CREATE_TABLES: bool = True

    # --- Cấu hình xác thực ---
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7
    COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False

    # --- Cấu hình logic nghiệp vụ ---
    # Múi giờ dùng để cắt "ngày" cho mọi báo cáo (mặc định GMT+6).
    TIMEZONE: str = "Asia/Dhaka"

    # --- Cấu hình SMS (giá trị dự phòng khi bảng message_settings còn trống) ---
    SMS_PROVIDER: SmsProvider = "greenweb"
    SMS_API_KEY: str = ""
    SMS_SENDER_ID: str = ""
    SMS_TIMEOUT_SECONDS: float = 10.0
    FEEDBACK_URL: str = "http://localhost:3000/user/feedback"

    @field_validator("TIMEZONE")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        """Đảm bảo tên múi giờ tồn tại trong cơ sở dữ liệu IANA."""
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError:
            raise ValueError(f"Múi giờ không hợp lệ: '{value}'")
        return value

    @property
    def tz(self) -> ZoneInfo:
        """Đối tượng múi giờ địa phương của hệ thống showroom."""
        return ZoneInfo(self.TIMEZONE)

    @property
    def sqlite_path(self) -> Optional[Path]:
        """Đường dẫn tệp SQLite (nếu DATABASE_URL trỏ tới một tệp SQLite)."""
        prefix = "sqlite:///"
        if not self.DATABASE_URL.startswith(prefix):
            return None
        raw = self.DATABASE_URL[len(prefix):]
        if not raw or raw == ":memory:":
            return None
        return Path(raw)


settings = Settings()
