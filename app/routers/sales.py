"""Ghi nhận và tra cứu doanh số theo showroom."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import false, select

from .. import schemas
from ..core.caching import private_short_cache
from ..core.exceptions import BadRequestError
from ..dependencies import DbSession, StaffUser
from ..models import Sale
from ..services.analytics import resolve_range
from ..utils.dates import as_utc, local_date, local_midnight_utc, parse_moment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=schemas.SaleCreated, status_code=status.HTTP_201_CREATED)
def create_sale(payload: schemas.SaleIn, _: StaffUser, db: DbSession):
    """Ghi một khoản doanh số; nếu có `date`, bản ghi được gán vào đầu ngày đó."""
    amount = payload.amount
    if not payload.showroom_branch or isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise BadRequestError("showroomBranch and numeric amount are required")
    if amount < 0:
        raise BadRequestError("amount must not be negative")

    sale = Sale(showroom_branch=payload.showroom_branch.strip(), amount=float(amount), notes=payload.notes or "")
    if payload.date:
        moment = parse_moment(payload.date)
        if moment is not None:
            sale.created_at = local_midnight_utc(local_date(moment))
    db.add(sale)
    db.commit()
    db.refresh(sale)
    logger.info(f"Ghi nhận doanh số {sale.amount} cho '{sale.showroom_branch}'.")
    return {"message": "Sale recorded", "sale": schemas.SaleOut.model_validate(sale)}


@router.get("", response_model=schemas.SaleList, dependencies=[Depends(private_short_cache)])
def list_sales(
    _: StaffUser,
    db: DbSession,
    from_: str = Query("", alias="from"),
    to: str = Query(""),
    showroom: str = Query(""),
):
    date_range = resolve_range(from_ or None, to or None)
    statement = select(Sale)
    if date_range.is_valid:
        statement = statement.where(Sale.created_at >= date_range.start, Sale.created_at < date_range.end)
    else:
        statement = statement.where(false())
    if showroom.strip():
        statement = statement.where(Sale.showroom_branch == showroom.strip())
    sales = db.execute(statement.order_by(Sale.created_at.desc(), Sale.id.desc())).scalars().all()
    return {
        "items": [schemas.SaleOut.model_validate(s) for s in sales],
        "from": as_utc(date_range.start),
        "to": as_utc(date_range.end),
    }
