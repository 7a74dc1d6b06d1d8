"""Số lượt khách nhập tay của office admin và các thống kê đối chiếu."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..core.caching import private_short_cache
from ..dependencies import DbSession, StaffUser
from ..services.office_admin import OfficeAdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/office-admin", tags=["Office Admin"])


@router.get("/daily-count", response_model=schemas.DailyCountOut)
def get_daily_count(
    user: StaffUser,
    db: DbSession,
    date: Optional[str] = Query(None, description="Ngày (YYYY-MM-DD), mặc định hôm nay"),
    showroom: str = Query(""),
):
    return OfficeAdminService(db, user.id).get_daily(date, showroom)


@router.put("/daily-count", response_model=schemas.DailyCountOut)
def upsert_daily_count(payload: schemas.DailyCountIn, user: StaffUser, db: DbSession):
    """Ghi đè số nhập tay của người gọi cho (ngày, showroom); gửi lại nhiều lần không tạo bản ghi trùng."""
    return OfficeAdminService(db, user.id).upsert_daily(payload.count, payload.date, payload.showroom or "")


@router.get("/today-stats", response_model=schemas.TodayStats,
            response_model_exclude_none=True, dependencies=[Depends(private_short_cache)])
def today_stats(user: StaffUser, db: DbSession, showroom: str = Query("")):
    return OfficeAdminService(db, user.id).today_stats(showroom)


@router.get("/daily-stats", response_model=schemas.DailyStats, dependencies=[Depends(private_short_cache)])
def daily_stats(
    user: StaffUser,
    db: DbSession,
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    showroom: str = Query(""),
):
    """Thống kê từng ngày trong khoảng `[from, to]`, kể cả ngày không có dữ liệu."""
    return OfficeAdminService(db, user.id).daily_stats(from_, to, showroom)


# --- Gộp mọi office admin (dành cho tài khoản showroom) ---

@router.get("/showroom-range-stats", response_model=schemas.DailyStats, dependencies=[Depends(private_short_cache)])
def showroom_range_stats(
    _: StaffUser,
    db: DbSession,
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    showroom: str = Query(""),
):
    return OfficeAdminService(db).daily_stats(from_, to, showroom, unique_visitors=True)


@router.get("/showroom-today-stats", response_model=schemas.ShowroomTodayStats,
            dependencies=[Depends(private_short_cache)])
def showroom_today_stats(_: StaffUser, db: DbSession, showroom: str = Query("")):
    return OfficeAdminService(db).showroom_today_stats(showroom)
