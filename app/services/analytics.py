"""
Logic nghiệp vụ cho các báo cáo phân tích showroom.

Ba nguồn sự kiện độc lập (lượt khách ghé showroom, phản hồi, doanh số) được
đọc riêng rẽ theo cùng một khoảng thời gian, gom nhóm bằng pandas rồi ghép
lại trong bộ nhớ theo chuỗi tên showroom (và danh mục, hoặc ngày).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set, Tuple

import pandas as pd
from sqlalchemy import false, select
from sqlalchemy.orm import Session

from ..core.data_handler import query_dataframe
from ..models import Feedback, Sale, Showroom, ShowroomCustomer
from ..utils.dates import (as_utc, day_key, local_date, local_midnight_utc,
                           parse_moment, utcnow)
from ..utils.metrics import mean_rounded, percent

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class DateRange:
    """Khoảng thời gian nửa mở `[start, end)` theo UTC naive.

    Một đầu mút bằng None nghĩa là client gửi chuỗi ngày không đọc được:
    khoảng thời gian khi đó không khớp bản ghi nào.
    """
    start: Optional[datetime]
    end: Optional[datetime]

    @property
    def is_valid(self) -> bool:
        return self.start is not None and self.end is not None


def resolve_range(start: Optional[str] = None, end: Optional[str] = None,
                  now: Optional[datetime] = None) -> DateRange:
    """Xác định khoảng thời gian báo cáo từ tham số query.

    Mặc định là 30 ngày gần nhất tính theo ngày địa phương: từ 00:00 của
    29 ngày trước tới 00:00 ngày mai (bao gồm cả hôm nay).
    """
    today = local_date(now)
    end_dt = parse_moment(end) if end else local_midnight_utc(today + timedelta(days=1))
    start_dt = parse_moment(start) if start else local_midnight_utc(today - timedelta(days=29))
    return DateRange(start_dt, end_dt)


def active_showroom_names(db: Session) -> Set[str]:
    """Tập tên các showroom đang hoạt động trong danh mục.

    Một showroom được coi là hoạt động nếu `active` là True, hoặc chưa có
    trường `status` cũ, hoặc `status == "Active"`.
    """
    rows = db.execute(select(Showroom.name, Showroom.active, Showroom.status)).all()
    return {
        (name or "")
        for name, active, status in rows
        if active is True or not status or status == "Active"
    }


def _is_listed(showroom: str, active: Set[str]) -> bool:
    # Danh mục rỗng nghĩa là không lọc.
    return not active or (showroom or "") in active


class AnalyticsService:
    """Lớp chứa logic tổng hợp số liệu cho các báo cáo showroom.

    Mỗi instance tương ứng với một bộ lọc (khoảng thời gian, showroom,
    danh mục) cụ thể từ người dùng.
    """

    def __init__(self, db: Session, date_range: DateRange, showroom: str = "", category: str = ""):
        self.db = db
        self.range = date_range
        self.showroom = (showroom or "").strip()
        self.category = (category or "").strip()

    def _window(self, column) -> list:
        if not self.range.is_valid:
            return [false()]
        return [column >= self.range.start, column < self.range.end]

    def _visit_frame(self, *conditions) -> pd.DataFrame:
        statement = (
            select(
                ShowroomCustomer.showroom_branch.label("showroom"),
                ShowroomCustomer.category.label("category"),
                ShowroomCustomer.phone_number.label("phone"),
                ShowroomCustomer.created_at.label("created_at"),
            )
            .where(*self._window(ShowroomCustomer.created_at), *conditions)
            .order_by(ShowroomCustomer.created_at, ShowroomCustomer.id)
        )
        return query_dataframe(self.db, statement)

    def _feedback_frame(self, *conditions) -> pd.DataFrame:
        statement = (
            select(
                Feedback.showroom.label("showroom"),
                Feedback.category.label("category"),
                Feedback.phone.label("phone"),
                Feedback.created_at.label("created_at"),
            )
            .where(*self._window(Feedback.created_at), *conditions)
            .order_by(Feedback.created_at, Feedback.id)
        )
        return query_dataframe(self.db, statement)

    def _sales_frame(self, *conditions) -> pd.DataFrame:
        statement = (
            select(
                Sale.showroom_branch.label("showroom"),
                Sale.amount.label("amount"),
                Sale.created_at.label("created_at"),
            )
            .where(*self._window(Sale.created_at), *conditions)
            .order_by(Sale.created_at, Sale.id)
        )
        return query_dataframe(self.db, statement)

    def _response_range(self) -> Dict[str, Optional[datetime]]:
        return {"from": as_utc(self.range.start), "to": as_utc(self.range.end)}

    def showroom_summary(self) -> Dict[str, Any]:
        """Số khách duy nhất, phản hồi duy nhất và độ chính xác cho từng showroom."""
        visits = self._visit_frame()
        feedbacks = self._feedback_frame()

        by_showroom: Dict[str, Dict[str, Any]] = {}

        def _row(name: str) -> Dict[str, Any]:
            return by_showroom.setdefault(name, {
                "showroom": name,
                "unique_customers": 0,
                "unique_feedbacks": 0,
                "last_activity": None,
            })

        if not visits.empty:
            grouped = visits.groupby("showroom", sort=True).agg(
                unique_customers=("phone", "nunique"),
                last_activity=("created_at", "max"),
            )
            for name, group in grouped.iterrows():
                row = _row(name or "")
                row["unique_customers"] = int(group["unique_customers"])
                row["last_activity"] = pd.Timestamp(group["last_activity"]).to_pydatetime()

        if not feedbacks.empty:
            for name, count in feedbacks.groupby("showroom", sort=True)["phone"].nunique().items():
                _row(name or "")["unique_feedbacks"] = int(count)

        active = active_showroom_names(self.db)
        now = utcnow()
        items = []
        for _, row in sorted(by_showroom.items()):
            if not _is_listed(row["showroom"], active):
                continue
            accuracy = percent(row["unique_feedbacks"], row["unique_customers"])
            last_activity = row["last_activity"]
            is_recent = last_activity is not None and now - last_activity < ACTIVITY_WINDOW
            items.append({
                **row,
                "last_activity": as_utc(last_activity),
                "accuracy": accuracy,
                # Chưa có công thức riêng cho hiệu suất, tạm dùng bằng độ chính xác.
                "performance": accuracy,
                "status": "Active" if is_recent else "Inactive",
            })

        logger.debug(f"showroom_summary: {len(items)}/{len(by_showroom)} showroom sau khi lọc danh mục.")
        return {
            "items": items,
            **self._response_range(),
            "avg_accuracy": mean_rounded(item["accuracy"] for item in items),
            "avg_performance": mean_rounded(item["performance"] for item in items),
        }

    def _matching(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Lọc các dòng khớp showroom/danh mục, không phân biệt hoa thường."""
        if frame.empty:
            return frame
        mask = pd.Series(True, index=frame.index)
        if self.showroom:
            mask &= frame["showroom"].fillna("").str.casefold() == self.showroom.casefold()
        if self.category:
            mask &= frame["category"].fillna("").str.casefold() == self.category.casefold()
        return frame[mask]

    def showroom_report(self) -> Dict[str, Any]:
        """Số khách và phản hồi theo cặp (showroom, danh mục).

        Bộ lọc showroom/danh mục so khớp chính xác nhưng không phân biệt hoa
        thường (kể cả ký tự ngoài ASCII, so sánh bằng `str.casefold` sau khi
        đọc). Khi đã lọc theo danh mục, mỗi showroom chỉ còn một dòng.
        """
        visits = self._matching(self._visit_frame())
        feedbacks = self._matching(self._feedback_frame())
        by_category = bool(self.category)

        rows: Dict[Tuple[str, str], Dict[str, Any]] = {}

        def _row(showroom: str, category: str) -> Dict[str, Any]:
            return rows.setdefault((showroom, category), {
                "showroom": showroom,
                "category": category,
                "customer_count": 0,
                "feedback_count": 0,
            })

        if not visits.empty:
            if by_category:
                grouped = visits.groupby("showroom", sort=True).agg(
                    customer_count=("phone", "nunique"),
                    category=("category", "first"),
                )
                for name, group in grouped.iterrows():
                    _row(name or "", group["category"] or "")["customer_count"] = int(group["customer_count"])
            else:
                grouped = visits.groupby(["showroom", "category"], sort=True)["phone"].nunique()
                for (name, category), count in grouped.items():
                    _row(name or "", category or "")["customer_count"] = int(count)

        if not feedbacks.empty:
            if by_category:
                # Phía phản hồi dùng đúng chuỗi danh mục của bộ lọc làm khoá ghép.
                grouped = feedbacks.groupby("showroom", sort=True)["phone"].nunique()
                for name, count in grouped.items():
                    _row(name or "", self.category)["feedback_count"] = int(count)
            else:
                grouped = feedbacks.groupby(["showroom", "category"], sort=True)["phone"].nunique()
                for (name, category), count in grouped.items():
                    _row(name or "", category or "")["feedback_count"] = int(count)

        active = active_showroom_names(self.db)
        return {
            "rows": [row for _, row in sorted(rows.items()) if _is_listed(row["showroom"], active)],
            **self._response_range(),
        }

    @staticmethod
    def _by_day(frame: pd.DataFrame) -> pd.DataFrame:
        return frame.assign(day=frame["created_at"].map(day_key))

    def showroom_daily(self) -> Dict[str, Any]:
        """Xu hướng theo ngày: khách duy nhất, độ chính xác và doanh số.

        Chỉ những ngày có dữ liệu ở ít nhất một nguồn mới xuất hiện. Giá trị
        trung bình chỉ tính trên các ngày có chỉ số khác 0.
        """
        visit_conditions, feedback_conditions, sale_conditions = [], [], []
        if self.showroom:
            visit_conditions.append(ShowroomCustomer.showroom_branch == self.showroom)
            feedback_conditions.append(Feedback.showroom == self.showroom)
            sale_conditions.append(Sale.showroom_branch == self.showroom)

        visits = self._visit_frame(*visit_conditions)
        feedbacks = self._feedback_frame(*feedback_conditions)
        sales = self._sales_frame(*sale_conditions)

        by_day: Dict[str, Dict[str, Any]] = {}

        def _row(day: str) -> Dict[str, Any]:
            return by_day.setdefault(day, {"day": day, "visitors": 0, "feedbacks": 0, "sales": 0.0})

        if not visits.empty:
            for day, count in self._by_day(visits).groupby("day")["phone"].nunique().items():
                _row(day)["visitors"] = int(count)
        if not feedbacks.empty:
            for day, count in self._by_day(feedbacks).groupby("day")["phone"].nunique().items():
                _row(day)["feedbacks"] = int(count)
        if not sales.empty:
            for day, amount in self._by_day(sales).groupby("day")["amount"].sum().items():
                _row(day)["sales"] = float(amount)

        days: List[Dict[str, Any]] = []
        for day in sorted(by_day):
            row = by_day[day]
            accuracy = percent(row["feedbacks"], row["visitors"])
            days.append({
                "day": day,
                "visitors": row["visitors"],
                "accuracy": accuracy,
                "performance": accuracy,
                "sales": row["sales"],
            })

        return {
            "days": days,
            "total_visitors": sum(day["visitors"] for day in days),
            "avg_accuracy": mean_rounded(d["accuracy"] for d in days if d["accuracy"] > 0),
            "avg_performance": mean_rounded(d["performance"] for d in days if d["performance"] > 0),
            **self._response_range(),
        }
