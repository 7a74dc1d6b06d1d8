"""
Đối chiếu số lượt khách nhập tay của office admin với số liệu ghi nhận tự động.

Mỗi office admin nhập một con số cho mỗi (ngày, showroom). Tỷ lệ đối chiếu
được tính bằng `số lượt ghi nhận tại showroom / số nhập tay * 100`.
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.data_handler import query_dataframe
from ..core.exceptions import BadRequestError, ConflictError
from ..models import OfficeAdminDaily, ShowroomCustomer
from ..utils.dates import day_key, local_date, local_day_bounds, parse_day
from ..utils.metrics import percent

logger = logging.getLogger(__name__)

Number = Union[int, float]

# Giới hạn số ngày của một báo cáo theo ngày và miền ngày hợp lệ.
MAX_RANGE_DAYS = 366
MIN_DAY = date(1970, 1, 1)
MAX_DAY = date(9999, 12, 30)


def parse_count(raw: Any) -> Number:
    """
    Xác thực số lượt nhập tay: phải là số hữu hạn và không âm.

    Chấp nhận chuỗi số (ví dụ "12"). Giá trị âm hoặc không phải số bị từ chối,
    không bị ép về 0.

    Raises:
        BadRequestError: Nếu giá trị không hợp lệ.
    """
    if raw is None or isinstance(raw, bool):
        raise BadRequestError("Invalid count")
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise BadRequestError("Invalid count")
    if not math.isfinite(value) or value < 0:
        raise BadRequestError("Invalid count")
    return int(value) if value.is_integer() else value


def _normalize_count(value: Optional[float]) -> Number:
    if value is None:
        return 0
    return int(value) if float(value).is_integer() else value


def _require_day(value: Optional[str], default: date) -> date:
    if value is None or str(value).strip() == "":
        return default
    parsed = parse_day(value)
    if parsed is None:
        raise BadRequestError("Invalid date, expected YYYY-MM-DD")
    if not MIN_DAY <= parsed <= MAX_DAY:
        raise BadRequestError("Date out of range")
    return parsed


def _days_between(first: date, last: date) -> Iterable[date]:
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


class OfficeAdminService:
    """Các thao tác đọc/ghi và thống kê số lượt nhập tay.

    `office_admin_id` là None khi thống kê gộp cho toàn bộ office admin.
    """

    def __init__(self, db: Session, office_admin_id: Optional[int] = None):
        self.db = db
        self.office_admin_id = office_admin_id

    def _manual_counts(self, first: str, last: str, showroom: str = "") -> pd.DataFrame:
        statement = select(
            OfficeAdminDaily.date.label("date"),
            OfficeAdminDaily.showroom.label("showroom"),
            OfficeAdminDaily.count.label("count"),
        ).where(OfficeAdminDaily.date >= first, OfficeAdminDaily.date <= last)
        if self.office_admin_id is not None:
            statement = statement.where(OfficeAdminDaily.office_admin_id == self.office_admin_id)
        if showroom:
            statement = statement.where(OfficeAdminDaily.showroom == showroom)
        return query_dataframe(self.db, statement)

    def _visits(self, first: date, last: date, showroom: str = "") -> pd.DataFrame:
        start, _ = local_day_bounds(first)
        _, end = local_day_bounds(last)
        statement = select(
            ShowroomCustomer.showroom_branch.label("showroom"),
            ShowroomCustomer.phone_number.label("phone"),
            ShowroomCustomer.created_at.label("created_at"),
        ).where(ShowroomCustomer.created_at >= start, ShowroomCustomer.created_at < end)
        if showroom:
            statement = statement.where(ShowroomCustomer.showroom_branch == showroom)
        frame = query_dataframe(self.db, statement)
        if frame.empty:
            return frame.assign(date=pd.Series(dtype=str))
        return frame.assign(date=frame["created_at"].map(day_key))

    # --- Số nhập tay ---

    def get_daily(self, date_str: Optional[str] = None, showroom: str = "") -> Dict[str, Any]:
        day = _require_day(date_str, local_date()).isoformat()
        showroom = (showroom or "").strip()
        record = self.db.execute(
            select(OfficeAdminDaily).where(
                OfficeAdminDaily.office_admin_id == self.office_admin_id,
                OfficeAdminDaily.date == day,
                OfficeAdminDaily.showroom == showroom,
            )
        ).scalar_one_or_none()
        return {"date": day, "showroom": showroom, "count": _normalize_count(record.count if record else 0)}

    def upsert_daily(self, raw_count: Any, date_str: Optional[str] = None, showroom: str = "") -> Dict[str, Any]:
        """
        Ghi (hoặc ghi đè) số nhập tay cho (office admin, ngày, showroom).

        Raises:
            BadRequestError: Số lượt hoặc ngày không hợp lệ.
            ConflictError: Hai yêu cầu đồng thời cùng tạo một bản ghi.
        """
        count = parse_count(raw_count)
        day = _require_day(date_str, local_date()).isoformat()
        showroom = (showroom or "").strip()

        record = self.db.execute(
            select(OfficeAdminDaily).where(
                OfficeAdminDaily.office_admin_id == self.office_admin_id,
                OfficeAdminDaily.date == day,
                OfficeAdminDaily.showroom == showroom,
            )
        ).scalar_one_or_none()
        if record is None:
            record = OfficeAdminDaily(office_admin_id=self.office_admin_id, date=day, showroom=showroom)
            self.db.add(record)
        record.count = count

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Trùng khoá khi ghi số nhập tay (admin={self.office_admin_id}, date={day}, showroom='{showroom}')."
            )
            raise ConflictError("Duplicate")
        self.db.refresh(record)
        logger.info(f"Office admin {self.office_admin_id} ghi {count} lượt cho '{showroom}' ngày {day}.")
        return {"date": record.date, "showroom": record.showroom, "count": _normalize_count(record.count)}

    # --- Thống kê ---

    def today_stats(self, showroom: str = "") -> Dict[str, Any]:
        """So sánh tổng số lượt ghi nhận hôm nay (không loại trùng) với số nhập tay."""
        showroom = (showroom or "").strip()
        today = local_date()
        day = today.isoformat()

        visits = self._visits(today, today, showroom)
        manual = self._manual_counts(day, day, showroom)

        showroom_today = int(len(visits))
        admin_today = _normalize_count(float(manual["count"].sum()) if not manual.empty else 0)
        ratio = showroom_today / admin_today if admin_today > 0 else 0

        breakdown = None
        if not showroom:
            visitors_by = visits.groupby("showroom").size().to_dict() if not visits.empty else {}
            admin_by = manual.groupby("showroom")["count"].sum().to_dict() if not manual.empty else {}
            breakdown = []
            for name in sorted(set(visitors_by) | set(admin_by)):
                visitors = int(visitors_by.get(name, 0))
                admin = _normalize_count(float(admin_by.get(name, 0)))
                breakdown.append({
                    "showroom": name,
                    "visitors": visitors,
                    "admin": admin,
                    "accuracy_percent": percent(visitors, admin),
                })

        return {
            "date": day,
            "showroom": showroom,
            "showroom_today": showroom_today,
            "admin_today": admin_today,
            "ratio": ratio,
            "ratio_percent": percent(showroom_today, admin_today),
            "breakdown": breakdown,
        }

    def daily_stats(self, from_str: Optional[str] = None, to_str: Optional[str] = None,
                    showroom: str = "", unique_visitors: bool = False) -> Dict[str, Any]:
        """
        Thống kê theo từng ngày trong khoảng `[from, to]` (tính cả hai đầu).

        Mọi ngày trong khoảng đều có một dòng, kể cả ngày không có dữ liệu.
        Mặc định số lượt tại showroom là tổng số bản ghi; `unique_visitors=True`
        đếm số điện thoại duy nhất mỗi ngày.
        """
        showroom = (showroom or "").strip()
        first = _require_day(from_str, local_date())
        last = _require_day(to_str, first)
        if (last - first).days >= MAX_RANGE_DAYS:
            raise BadRequestError(f"Date range too long, at most {MAX_RANGE_DAYS} days")

        visits = self._visits(first, last, showroom)
        manual = self._manual_counts(first.isoformat(), last.isoformat(), showroom)

        showroom_by: Dict[str, int] = defaultdict(int)
        if not visits.empty:
            grouped = visits.groupby("date")["phone"]
            counts = grouped.nunique() if unique_visitors else grouped.size()
            showroom_by.update({key: int(value) for key, value in counts.items()})
        admin_by: Dict[str, float] = defaultdict(float)
        if not manual.empty:
            admin_by.update({key: float(value) for key, value in manual.groupby("date")["count"].sum().items()})

        days: List[Dict[str, Any]] = []
        for current in _days_between(first, last):
            key = current.isoformat()
            visitors = showroom_by.get(key, 0)
            admin = _normalize_count(admin_by.get(key, 0))
            days.append({
                "date": key,
                "showroom": visitors,
                "admin": admin,
                "ratio_percent": percent(visitors, admin),
            })

        return {
            "from": first.isoformat(),
            "to": last.isoformat(),
            "showroom": showroom,
            "days": days,
            "total_showroom": sum(day["showroom"] for day in days),
        }

    def showroom_today_stats(self, showroom: str = "") -> Dict[str, Any]:
        """Số khách duy nhất hôm nay so với tổng số nhập tay của mọi office admin."""
        showroom = (showroom or "").strip()
        today = local_date()
        day = today.isoformat()

        visits = self._visits(today, today, showroom)
        manual = self._manual_counts(day, day, showroom)

        visitors_by = visits.groupby("showroom")["phone"].nunique().to_dict() if not visits.empty else {}
        admin_by = manual.groupby("showroom")["count"].sum().to_dict() if not manual.empty else {}

        breakdown = []
        visitors_today, admin_today = 0, 0.0
        for name in sorted(set(visitors_by) | set(admin_by)):
            visitors = int(visitors_by.get(name, 0))
            admin = float(admin_by.get(name, 0))
            visitors_today += visitors
            admin_today += admin
            breakdown.append({
                "showroom": name,
                "visitors": visitors,
                "admin": _normalize_count(admin),
                "accuracy_percent": percent(visitors, admin),
            })

        return {
            "date": day,
            "showroom": showroom,
            "visitors_today": visitors_today,
            "admin_today": _normalize_count(admin_today),
            "ratio_percent": percent(visitors_today, admin_today),
            "accuracy_breakdown": breakdown,
        }
