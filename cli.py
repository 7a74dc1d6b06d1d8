"""
Module định nghĩa giao diện dòng lệnh (CLI) cho ứng dụng.

Sử dụng Typer để tạo các câu lệnh tiện ích, bao gồm:
- `init-db`: Tạo các bảng còn thiếu trong cơ sở dữ liệu.
- `create-admin`: Tạo tài khoản đầu tiên để đăng nhập dashboard.
- `serve`: Khởi chạy web server FastAPI.
"""

import logging
from typing_extensions import Annotated

import typer
import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import SessionLocal, init_db as create_tables
from app.core.exceptions import AppError
from app.core.security import ROLES
from app.services import accounts
from app.utils.logger import setup_logging

# Cấu hình logging ngay từ đầu để áp dụng cho toàn bộ ứng dụng.
setup_logging(settings.LOGGER_CONFIG_PATH)
logger = logging.getLogger(__name__)

cli_app = typer.Typer(
    help="CLI để quản lý và vận hành API khách hàng & phản hồi showroom."
)


@cli_app.command()
def init_db():
    """Tạo các bảng còn thiếu trong cơ sở dữ liệu đã cấu hình."""
    try:
        create_tables()
    except SQLAlchemyError as e:
        logger.error(f"❌ Lỗi khi khởi tạo cơ sở dữ liệu: {e}", exc_info=True)
        raise typer.Exit(code=1)
    logger.info("✅ Cơ sở dữ liệu đã sẵn sàng.")


@cli_app.command()
def create_admin(
    email: Annotated[str, typer.Option(help="Email đăng nhập.")],
    password: Annotated[
        str, typer.Option(prompt=True, hide_input=True, confirmation_prompt=True)
    ],
    name: Annotated[str, typer.Option(help="Tên hiển thị.")] = "Administrator",
    role: Annotated[str, typer.Option(help=f"Vai trò: {', '.join(ROLES)}.")] = "admin",
    showroom_name: Annotated[str, typer.Option(help="Showroom gắn với tài khoản (nếu có).")] = "",
):
    """Tạo một tài khoản mới (mặc định là admin) trực tiếp trong cơ sở dữ liệu."""
    create_tables()
    with SessionLocal() as db:
        try:
            user = accounts.create_user(db, name, email, password, role, showroom_name=showroom_name)
        except AppError as e:
            logger.error(f"❌ Không thể tạo tài khoản '{email}': {e.message}")
            raise typer.Exit(code=1)
    logger.info(f"✅ Đã tạo tài khoản {user['email']} với vai trò '{user['role']}'.")


@cli_app.command()
def serve(
    host: Annotated[
        str, typer.Option(help="Host để chạy server.")
    ] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port để chạy server.")] = 8000,
    reload: Annotated[
        bool, typer.Option(help="Tự động tải lại khi code thay đổi.")
    ] = True,
):
    """Khởi chạy ứng dụng web FastAPI với Uvicorn."""
    logger.info(f"🚀 Khởi chạy FastAPI server tại http://{host}:{port}{settings.API_PREFIX}")
    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["app", "configs"],
    )


if __name__ == "__main__":
    cli_app()
