"""
Định nghĩa các Pydantic model (schema) để xác thực dữ liệu API.

Các model này đóng vai trò là "hợp đồng dữ liệu" (data contract) với giao
diện dashboard. Tên trường trong JSON dùng camelCase (ví dụ `avgAccuracy`)
thông qua alias, còn trong Python vẫn dùng snake_case.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(BaseModel):
    message: str


# --- Xác thực & tài khoản ---

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: str
    status: str = "Active"
    showroom_name: str = ""


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class UserEnvelope(BaseModel):
    user: UserOut


class UserList(BaseModel):
    users: List[UserOut]


class UserCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    showroom_name: Optional[str] = None


class UserUpdate(UserCreate):
    pass


# --- Danh mục sản phẩm ---

class CategoryIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class CategoryOut(CamelModel):
    id: int
    name: str
    description: str = ""
    status: str = "Active"
    created_at: datetime


class CategoryEnvelope(BaseModel):
    category: CategoryOut


class CategoryList(BaseModel):
    categories: List[CategoryOut]


# --- Showroom ---

class ShowroomIn(CamelModel):
    name: Optional[str] = None
    active: Optional[bool] = None
    status: Optional[str] = None


class ShowroomOut(CamelModel):
    id: int
    name: str
    active: Optional[bool] = None
    created_at: Optional[datetime] = None


class ShowroomEnvelope(BaseModel):
    showroom: ShowroomOut


class ShowroomList(BaseModel):
    showrooms: List[ShowroomOut]


# --- Phản hồi ---

FeedbackStatus = Literal["new", "reviewed", "resolved"]


class FeedbackIn(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    showroom: str = ""
    category: str = ""


class FeedbackOut(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    message: str
    showroom: str = ""
    category: str = ""
    status: str
    created_at: datetime


class FeedbackStatusIn(BaseModel):
    status: Optional[str] = None


class FeedbackEnvelope(BaseModel):
    feedback: FeedbackOut


class FeedbackList(BaseModel):
    feedbacks: List[FeedbackOut]
    page: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None


# --- Khách hàng showroom (lượt ghé thăm) ---

class CustomerCreate(CamelModel):
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    category: Optional[str] = None
    showroom_branch: Optional[str] = None


class CustomerUpdate(CamelModel):
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    category: Optional[str] = None
    status: Optional[Literal["Interested", "Not Interested", "Follow-up"]] = None
    notes: Optional[Any] = None


class CustomerOut(CamelModel):
    id: int
    customer_name: str
    phone_number: str
    category: str
    showroom_branch: str
    status: str
    notes: str = ""
    created_at: datetime


class CustomerEnvelope(BaseModel):
    customer: CustomerOut


class CustomerCreated(BaseModel):
    message: str
    sms: dict
    customer: CustomerOut


class CustomerList(BaseModel):
    customers: List[CustomerOut]
    page: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None


# --- Doanh số ---

class SaleIn(CamelModel):
    showroom_branch: Optional[str] = None
    amount: Any = None
    notes: Optional[str] = None
    date: Optional[str] = None


class SaleOut(CamelModel):
    id: int
    showroom_branch: str
    amount: float
    notes: str = ""
    created_at: datetime


class SaleCreated(BaseModel):
    message: str
    sale: SaleOut


class SaleList(BaseModel):
    items: List[SaleOut]
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None


# --- Cấu hình SMS ---

class MessageSettingsIn(CamelModel):
    sms_provider: Optional[str] = None
    sms_api_key: Optional[str] = None
    sms_sender_id: Optional[str] = None
    feedback_url: Optional[str] = None


class MessageSettingsOut(CamelModel):
    sms_provider: str = "greenweb"
    sms_api_key: str = ""
    sms_sender_id: str = ""
    feedback_url: str = ""


class MessageSettingsEnvelope(BaseModel):
    settings: MessageSettingsOut


# --- Báo cáo phân tích ---

class ShowroomSummaryItem(CamelModel):
    """Một dòng tổng hợp cho một showroom trong khoảng thời gian báo cáo."""
    showroom: str
    unique_customers: int
    unique_feedbacks: int
    last_activity: Optional[datetime] = None
    accuracy: int
    performance: int
    status: Literal["Active", "Inactive"]


class ShowroomSummary(CamelModel):
    items: List[ShowroomSummaryItem]
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None
    avg_accuracy: int
    avg_performance: int


class ShowroomReportRow(CamelModel):
    showroom: str
    category: str
    customer_count: int
    feedback_count: int


class ShowroomReport(CamelModel):
    rows: List[ShowroomReportRow]
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None


class ShowroomDay(CamelModel):
    day: str
    visitors: int
    accuracy: int
    performance: int
    sales: float


class ShowroomDaily(CamelModel):
    """Xu hướng theo ngày cho biểu đồ trên dashboard."""
    days: List[ShowroomDay]
    total_visitors: int
    avg_accuracy: int
    avg_performance: int
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None


# --- Đối chiếu số liệu office admin ---

class DailyCountIn(CamelModel):
    date: Optional[str] = None
    showroom: Optional[str] = None
    # Giữ kiểu Any để tự xác thực và trả lỗi 400 thống nhất.
    count: Any = None


class DailyCountOut(CamelModel):
    date: str
    showroom: str = ""
    count: Number


class ShowroomAccuracy(CamelModel):
    showroom: str
    visitors: int
    admin: Number
    accuracy_percent: int


class TodayStats(CamelModel):
    date: str
    showroom: str = ""
    showroom_today: int
    admin_today: Number
    ratio: float
    ratio_percent: int
    breakdown: Optional[List[ShowroomAccuracy]] = None


class DayStat(CamelModel):
    date: str
    showroom: int
    admin: Number
    ratio_percent: int


class DailyStats(CamelModel):
    from_: str = Field(alias="from")
    to: str
    showroom: str = ""
    days: List[DayStat]
    total_showroom: int


class ShowroomTodayStats(CamelModel):
    date: str
    showroom: str = ""
    visitors_today: int
    admin_today: Number
    ratio_percent: int
    accuracy_breakdown: List[ShowroomAccuracy]
