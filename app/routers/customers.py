"""
Ghi nhận khách hàng ghé showroom và gửi SMS mời phản hồi.

Mỗi bản ghi là một lượt ghé thăm; các báo cáo phân tích đếm số điện thoại
duy nhất trên các bản ghi này.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select

from .. import schemas
from ..core.caching import private_brief_cache
from ..core.exceptions import BadRequestError, NotFoundError
from ..dependencies import DbSession, StaffUser
from ..models import ShowroomCustomer
from ..services import sms
from ..utils.dates import local_day_bounds, parse_day
from ..utils.pagination import clamp_paging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/showroom/customers", tags=["Showroom Customers"])


def _get_or_404(db, customer_id: int) -> ShowroomCustomer:
    customer = db.get(ShowroomCustomer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


@router.post("", response_model=schemas.CustomerCreated, status_code=status.HTTP_201_CREATED)
def create_customer(payload: schemas.CustomerCreate, _: StaffUser, db: DbSession):
    """
    Ghi nhận một lượt khách ghé showroom rồi gửi SMS xin phản hồi.

    Lượt ghé vẫn được lưu nếu gửi SMS thất bại; kết quả gửi được trả về
    trong trường `sms`.
    """
    if not payload.customer_name or not payload.phone_number or not payload.category or not payload.showroom_branch:
        raise BadRequestError("customerName, phoneNumber, category, showroomBranch are required")

    customer = ShowroomCustomer(
        customer_name=payload.customer_name.strip(),
        phone_number=payload.phone_number.strip(),
        category=payload.category.strip(),
        showroom_branch=payload.showroom_branch.strip(),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)

    config = sms.load_sms_config(db)
    message = sms.feedback_request_message(customer.showroom_branch, customer.category, config.feedback_url)
    try:
        result = {"ok": True, **sms.send_sms(sms.normalize_bd_phone(customer.phone_number), message, config)}
        reply = "Customer recorded and SMS sent"
    except sms.SmsError as e:
        logger.error(f"Không gửi được SMS cho khách {customer.id} qua '{config.provider}': {e}")
        result = {"ok": False, "provider": config.provider, "error": str(e)}
        reply = "Customer recorded, SMS not sent"

    return {"message": reply, "sms": result, "customer": schemas.CustomerOut.model_validate(customer)}


@router.get("", response_model=schemas.CustomerList,
            response_model_exclude_none=True, dependencies=[Depends(private_brief_cache)])
def list_customers(
    _: StaffUser,
    db: DbSession,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    showroom: str = Query(""),
    date: str = Query("", description="Lọc theo ngày (YYYY-MM-DD)"),
):
    """Danh sách lượt ghé mới nhất trước; chỉ phân trang khi có cả `page` và `limit`."""
    statement = select(ShowroomCustomer)
    if showroom.strip():
        statement = statement.where(ShowroomCustomer.showroom_branch == showroom.strip())
    if date.strip():
        day = parse_day(date)
        if day is None:
            raise BadRequestError("Invalid date, expected YYYY-MM-DD")
        start, end = local_day_bounds(day)
        statement = statement.where(ShowroomCustomer.created_at >= start, ShowroomCustomer.created_at < end)
    statement = statement.order_by(ShowroomCustomer.created_at.desc(), ShowroomCustomer.id.desc())

    if not page or not limit:
        customers = db.execute(statement).scalars().all()
        return {"customers": [schemas.CustomerOut.model_validate(c) for c in customers]}

    page_value, limit_value = clamp_paging(page, limit)
    total = db.execute(select(func.count()).select_from(statement.order_by(None).subquery())).scalar_one()
    customers = db.execute(
        statement.offset((page_value - 1) * limit_value).limit(limit_value)
    ).scalars().all()
    return {
        "customers": [schemas.CustomerOut.model_validate(c) for c in customers],
        "page": page_value,
        "limit": limit_value,
        "total": total,
    }


@router.get("/{customer_id}", response_model=schemas.CustomerEnvelope)
def get_customer(customer_id: int, _: StaffUser, db: DbSession):
    return {"customer": schemas.CustomerOut.model_validate(_get_or_404(db, customer_id))}


@router.put("/{customer_id}", response_model=schemas.CustomerEnvelope)
def update_customer(customer_id: int, payload: schemas.CustomerUpdate, _: StaffUser, db: DbSession):
    """Chỉ cho phép sửa tên, số điện thoại, danh mục, trạng thái và ghi chú."""
    customer = _get_or_404(db, customer_id)
    if payload.customer_name:
        customer.customer_name = payload.customer_name.strip()
    if payload.phone_number:
        customer.phone_number = payload.phone_number.strip()
    if payload.category:
        customer.category = payload.category.strip()
    if payload.status:
        customer.status = payload.status
    if payload.notes is not None:
        customer.notes = str(payload.notes)
    db.commit()
    db.refresh(customer)
    return {"customer": schemas.CustomerOut.model_validate(customer)}


@router.delete("/{customer_id}", response_model=schemas.MessageResponse)
def delete_customer(customer_id: int, _: StaffUser, db: DbSession):
    customer = db.get(ShowroomCustomer, customer_id)
    if customer is None:
        raise NotFoundError("Not found")
    db.delete(customer)
    db.commit()
    return {"message": "Deleted"}
