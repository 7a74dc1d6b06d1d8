"""
SQLAlchemy ORM models cho cơ sở dữ liệu showroom.

Các bảng sự kiện (`showroom_customers`, `feedbacks`, `sales`) không có khoá
ngoại tới `showrooms`: chúng được liên kết với nhau qua chuỗi tên showroom,
giữ nguyên cách dữ liệu đang được ghi nhận.
"""

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Integer,
                        String, Text, UniqueConstraint)
from sqlalchemy.orm import relationship

from .core.database import Base
from .utils.dates import utcnow


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Admin(TimestampMixin, Base):
    """Tài khoản đăng nhập (admin, office admin hoặc showroom)."""
    __tablename__ = "admins"
    id = Column(Integer, primary_key=True)
    username = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="showroom")
    status = Column(String(20), nullable=False, default="Active")
    showroom_name = Column(String(120), nullable=False, default="")


class Category(TimestampMixin, Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="Active")


class Showroom(TimestampMixin, Base):
    """
    Danh mục showroom, dùng để lọc kết quả báo cáo.

    `status` là trường cũ: bản ghi không có `status` được coi là đang hoạt động.
    """
    __tablename__ = "showrooms"
    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False, unique=True)
    active = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=True)


class ShowroomCustomer(TimestampMixin, Base):
    """Một lượt khách ghé thăm showroom (sự kiện visit)."""
    __tablename__ = "showroom_customers"
    id = Column(Integer, primary_key=True)
    customer_name = Column(String(120), nullable=False)
    phone_number = Column(String(40), nullable=False, index=True)
    category = Column(String(120), nullable=False)
    showroom_branch = Column(String(120), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="Interested")
    notes = Column(Text, nullable=False, default="")

    email = Column(String(255), nullable=False, default="")
    division = Column(String(120), nullable=False, default="")
    upazila = Column(String(120), nullable=False, default="")
    interest_level = Column(Integer, nullable=False, default=0)
    random_customer = Column(String(120), nullable=False, default="")
    quotation = Column(Text, nullable=False, default="")
    remember_note = Column(Text, nullable=False, default="")
    remember_date = Column(DateTime, nullable=True)
    customer_type = Column(String(20), nullable=False, default="individual")
    business_name = Column(String(120), nullable=False, default="")


class Feedback(TimestampMixin, Base):
    __tablename__ = "feedbacks"
    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(40), nullable=False, index=True)
    message = Column(Text, nullable=False)
    showroom = Column(String(120), nullable=False, default="", index=True)
    category = Column(String(120), nullable=False, default="")
    status = Column(String(20), nullable=False, default="new")


class Sale(TimestampMixin, Base):
    __tablename__ = "sales"
    id = Column(Integer, primary_key=True)
    showroom_branch = Column(String(120), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    notes = Column(Text, nullable=False, default="")


class OfficeAdminDaily(TimestampMixin, Base):
    """Số lượt khách do office admin nhập tay cho một (ngày, showroom)."""
    __tablename__ = "office_admin_daily"
    id = Column(Integer, primary_key=True)
    office_admin_id = Column(Integer, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    showroom = Column(String(120), nullable=False, default="")
    count = Column(Float, nullable=False)

    office_admin = relationship(Admin)
    __table_args__ = (
        UniqueConstraint("office_admin_id", "date", "showroom", name="uq_office_admin_daily"),
    )


class MessageSettings(TimestampMixin, Base):
    """Cấu hình gửi SMS; bảng chỉ chứa tối đa một dòng."""
    __tablename__ = "message_settings"
    id = Column(Integer, primary_key=True)
    sms_provider = Column(String(20), nullable=False, default="greenweb")
    sms_api_key = Column(String(255), nullable=False, default="")
    sms_sender_id = Column(String(60), nullable=False, default="")
    feedback_url = Column(String(500), nullable=False, default="")
