"""
Tiện ích xử lý thời gian.

Quy ước của toàn bộ ứng dụng:
- Thời điểm lưu trong database là UTC dạng naive (không kèm tzinfo).
- "Ngày" (day key `YYYY-MM-DD`) luôn được tính theo múi giờ `settings.TIMEZONE`.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from dateutil import parser as date_parser

from ..core.config import settings


def utcnow() -> datetime:
    """Thời điểm hiện tại theo UTC, dạng naive để so sánh với dữ liệu đã lưu."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(moment: datetime) -> datetime:
    """Chuyển một datetime bất kỳ về UTC naive; datetime naive được hiểu là giờ địa phương."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=settings.tz)
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Gắn tzinfo UTC cho một datetime UTC naive (dùng khi trả về JSON)."""
    if moment is None:
        return None
    return moment.replace(tzinfo=timezone.utc)


def local_date(moment: Optional[datetime] = None) -> date:
    """Ngày địa phương của một thời điểm UTC naive (mặc định: bây giờ)."""
    moment = moment if moment is not None else utcnow()
    return moment.replace(tzinfo=timezone.utc).astimezone(settings.tz).date()


def day_key(moment: Optional[datetime] = None) -> str:
    """Khoá ngày `YYYY-MM-DD` theo giờ địa phương."""
    return local_date(moment).isoformat()


def local_midnight_utc(day: date) -> datetime:
    """Thời điểm UTC naive tương ứng với 00:00 giờ địa phương của `day`."""
    return to_utc_naive(datetime.combine(day, time.min))


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Khoảng UTC nửa mở `[00:00, 00:00 hôm sau)` của một ngày địa phương."""
    return local_midnight_utc(day), local_midnight_utc(day + timedelta(days=1))


def parse_day(value: str) -> Optional[date]:
    """Đọc chuỗi `YYYY-MM-DD`; trả về None nếu không hợp lệ."""
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def parse_moment(value: str) -> Optional[datetime]:
    """
    Đọc một chuỗi ngày/giờ do client gửi lên thành UTC naive.

    Chuỗi chỉ có ngày được hiểu là 00:00 giờ địa phương; chuỗi có offset được
    giữ nguyên offset. Trả về None nếu không đọc được.
    """
    try:
        parsed = date_parser.isoparse(str(value).strip())
    except (ValueError, OverflowError):
        try:
            parsed = date_parser.parse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    return to_utc_naive(parsed)
