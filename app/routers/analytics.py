"""
Các endpoint báo cáo phân tích cho dashboard showroom.

Mọi báo cáo dùng chung một dependency để đọc bộ lọc từ query string và khởi
tạo `AnalyticsService`. Khoảng thời gian nhận cả hai cách đặt tên tham số
(`start`/`end` và `from`/`to`).
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..core.caching import private_short_cache
from ..dependencies import DbSession, StaffUser
from ..services.analytics import AnalyticsService, resolve_range

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
    dependencies=[Depends(private_short_cache)],
)


def get_analytics_service(
    db: DbSession,
    start: Optional[str] = Query(None, description="Thời điểm bắt đầu (ISO 8601)"),
    end: Optional[str] = Query(None, description="Thời điểm kết thúc, không bao gồm (ISO 8601)"),
    from_: Optional[str] = Query(None, alias="from", description="Tên khác của `start`"),
    to: Optional[str] = Query(None, description="Tên khác của `end`"),
    showroom: str = Query("", description="Lọc theo tên showroom"),
    category: str = Query("", description="Lọc theo danh mục"),
) -> AnalyticsService:
    """
    Dependency khởi tạo `AnalyticsService` cho mỗi request.

    Mặc định là 30 ngày gần nhất nếu client không gửi khoảng thời gian.
    """
    date_range = resolve_range(start or from_, end or to)
    if not date_range.is_valid:
        logger.warning(f"Khoảng thời gian không hợp lệ: start={start or from_!r}, end={end or to!r}.")
    return AnalyticsService(db, date_range, showroom, category)


Service = Annotated[AnalyticsService, Depends(get_analytics_service)]


@router.get("/showroom-summary", response_model=schemas.ShowroomSummary)
def showroom_summary(_: StaffUser, service: Service):
    """Tổng hợp khách duy nhất, phản hồi duy nhất và độ chính xác theo showroom."""
    return service.showroom_summary()


@router.get("/showroom-report", response_model=schemas.ShowroomReport)
def showroom_report(_: StaffUser, service: Service):
    """Báo cáo số khách và phản hồi theo cặp (showroom, danh mục)."""
    return service.showroom_report()


@router.get("/showroom-daily", response_model=schemas.ShowroomDaily)
def showroom_daily(_: StaffUser, service: Service):
    return service.showroom_daily()
