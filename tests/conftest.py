import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMEZONE"] = "Asia/Dhaka"
os.environ["SMS_API_KEY"] = ""

from datetime import datetime, timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import Admin, Feedback, Sale, Showroom, ShowroomCustomer
from app.utils.dates import local_date, local_midnight_utc

API = settings.API_PREFIX

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Mỗi test dùng một database SQLite trong bộ nhớ hoàn toàn mới."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    def _make(role: str = "admin", email: str = None, status: str = "Active",
              password: str = "secret123", showroom_name: str = "") -> Admin:
        user = Admin(
            username=f"{role} user",
            email=email or f"{role}-{db_session.query(Admin).count()}@example.com",
            password=hash_password(password),
            role=role,
            status=status,
            showroom_name=showroom_name,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


def auth_headers(user: Admin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def admin_headers(make_user) -> dict:
    return auth_headers(make_user("admin"))


def today_at(hours: float = 0, days: int = 0) -> datetime:
    """Thời điểm UTC naive ứng với `hours` giờ sau 00:00 (giờ địa phương) của hôm nay + `days`."""
    return local_midnight_utc(local_date() + timedelta(days=days)) + timedelta(hours=hours)


@pytest.fixture
def seed(db_session: Session):
    """Các hàm tiện ích để ghi trực tiếp sự kiện vào database."""

    class Seeder:
        @staticmethod
        def visit(showroom: str, phone: str, category: str = "Sofa", at: datetime = None) -> ShowroomCustomer:
            row = ShowroomCustomer(
                customer_name="Khách", phone_number=phone, category=category,
                showroom_branch=showroom, created_at=at or today_at(10),
            )
            db_session.add(row)
            db_session.commit()
            return row

        @staticmethod
        def feedback(showroom: str, phone: str, category: str = "Sofa", at: datetime = None) -> Feedback:
            row = Feedback(
                name="Khách", email="k@example.com", phone=phone, message="Tốt",
                showroom=showroom, category=category, created_at=at or today_at(11),
            )
            db_session.add(row)
            db_session.commit()
            return row

        @staticmethod
        def sale(showroom: str, amount: float, at: datetime = None) -> Sale:
            row = Sale(showroom_branch=showroom, amount=amount, created_at=at or today_at(12))
            db_session.add(row)
            db_session.commit()
            return row

        @staticmethod
        def showroom(name: str, active: bool = True, status: str = None) -> Showroom:
            row = Showroom(name=name, active=active, status=status)
            db_session.add(row)
            db_session.commit()
            return row

    return Seeder
