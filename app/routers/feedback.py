"""Thu thập phản hồi của khách hàng và quản lý trạng thái xử lý."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select

from .. import schemas
from ..core.caching import private_short_cache
from ..core.exceptions import BadRequestError, NotFoundError
from ..dependencies import AdminUser, DbSession, StaffUser
from ..models import Feedback
from ..utils.pagination import clamp_paging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Feedback"])

FEEDBACK_STATUSES = ("new", "reviewed", "resolved")


@router.post("/feedback", response_model=schemas.FeedbackEnvelope, status_code=status.HTTP_201_CREATED)
def create_feedback(payload: schemas.FeedbackIn, db: DbSession):
    """Endpoint công khai để khách hàng gửi phản hồi."""
    if not payload.name or not payload.email or not payload.phone or not payload.message:
        raise BadRequestError("name, email, phone, message are required")

    feedback = Feedback(
        name=payload.name.strip(),
        email=payload.email.strip(),
        phone=payload.phone.strip(),
        message=payload.message.strip(),
        showroom=payload.showroom or "",
        category=payload.category or "",
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    logger.info(f"Nhận phản hồi mới {feedback.id} cho showroom '{feedback.showroom}'.")
    return {"feedback": schemas.FeedbackOut.model_validate(feedback)}


@router.get("/feedbacks", response_model=schemas.FeedbackList,
            response_model_exclude_none=True, dependencies=[Depends(private_short_cache)])
def list_feedbacks(
    _: StaffUser,
    db: DbSession,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    showroom: str = Query("", description="Lọc theo tên showroom"),
):
    """Danh sách phản hồi mới nhất trước; chỉ phân trang khi có `page` hoặc `limit`."""
    statement = select(Feedback)
    showroom = showroom.strip()
    if showroom:
        statement = statement.where(Feedback.showroom == showroom)
    statement = statement.order_by(Feedback.created_at.desc(), Feedback.id.desc())

    if page is None and limit is None:
        feedbacks = db.execute(statement).scalars().all()
        return {"feedbacks": [schemas.FeedbackOut.model_validate(f) for f in feedbacks]}

    page_value, limit_value = clamp_paging(page, limit)
    total = db.execute(select(func.count()).select_from(statement.order_by(None).subquery())).scalar_one()
    feedbacks = db.execute(
        statement.offset((page_value - 1) * limit_value).limit(limit_value)
    ).scalars().all()
    return {
        "feedbacks": [schemas.FeedbackOut.model_validate(f) for f in feedbacks],
        "page": page_value,
        "limit": limit_value,
        "total": total,
    }


@router.put("/feedbacks/{feedback_id}/status", response_model=schemas.FeedbackEnvelope)
def update_feedback_status(feedback_id: int, payload: schemas.FeedbackStatusIn, _: AdminUser, db: DbSession):
    if payload.status not in FEEDBACK_STATUSES:
        raise BadRequestError("Invalid status")
    feedback = db.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Not found")
    feedback.status = payload.status
    db.commit()
    db.refresh(feedback)
    return {"feedback": schemas.FeedbackOut.model_validate(feedback)}


@router.delete("/feedbacks/{feedback_id}", response_model=schemas.MessageResponse)
def delete_feedback(feedback_id: int, _: AdminUser, db: DbSession):
    feedback = db.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Not found")
    db.delete(feedback)
    db.commit()
    return {"message": "Deleted"}
