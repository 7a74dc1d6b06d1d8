"""
Module quản lý kết nối cơ sở dữ liệu bằng SQLAlchemy.

Cung cấp `engine`, factory `SessionLocal` và lớp `Base` cho các ORM model.
Mỗi request API nhận một session riêng thông qua dependency `get_db`, và
session luôn được đóng lại khi request kết thúc.
"""

import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _build_engine(url: str) -> Engine:
    """Tạo SQLAlchemy engine, thêm tuỳ chọn riêng cho SQLite khi cần."""
    connect_args = {}
    if url.startswith("sqlite"):
        # SQLite mặc định chỉ cho phép dùng kết nối trong luồng đã tạo ra nó,
        # trong khi FastAPI chạy endpoint đồng bộ trên threadpool.
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = _build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None) -> None:
    """
    Tạo toàn bộ các bảng còn thiếu trong cơ sở dữ liệu.

    Với SQLite dạng tệp, thư mục chứa tệp sẽ được tạo trước nếu chưa tồn tại.
    """
    # Import để đăng ký các model vào `Base.metadata`.
    from .. import models  # noqa: F401

    if bind is None:
        bind = engine
        sqlite_path = settings.sqlite_path
        if sqlite_path is not None:
            sqlite_path.parent.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=bind)
    logger.info(f"Đã khởi tạo schema cơ sở dữ liệu ({bind.url.render_as_string(hide_password=True)}).")


def get_db() -> Iterator[Session]:
    """
    Dependency cung cấp một session SQLAlchemy cho mỗi request.

    Yields:
        Một đối tượng `Session` đang hoạt động; được đóng khi request kết thúc.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
