"""Cấu hình nhà cung cấp SMS và đường dẫn form phản hồi (chỉ admin)."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select

from .. import schemas
from ..core.caching import private_short_cache
from ..core.exceptions import BadRequestError
from ..dependencies import AdminUser, DbSession
from ..models import MessageSettings
from ..services.sms import PROVIDERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/message-settings", tags=["Message Settings"])


def _stored(db) -> MessageSettings:
    return db.execute(select(MessageSettings).order_by(MessageSettings.id).limit(1)).scalar_one_or_none()


def _payload(stored: MessageSettings) -> dict:
    if stored is None:
        return {"settings": schemas.MessageSettingsOut()}
    return {
        "settings": schemas.MessageSettingsOut(
            sms_provider=stored.sms_provider or "greenweb",
            sms_api_key=stored.sms_api_key or "",
            sms_sender_id=stored.sms_sender_id or "",
            feedback_url=stored.feedback_url or "",
        )
    }


@router.get("", response_model=schemas.MessageSettingsEnvelope, dependencies=[Depends(private_short_cache)])
def get_message_settings(_: AdminUser, db: DbSession):
    return _payload(_stored(db))


@router.put("", response_model=schemas.MessageSettingsEnvelope)
def update_message_settings(payload: schemas.MessageSettingsIn, _: AdminUser, db: DbSession):
    if payload.sms_provider and payload.sms_provider.lower() not in PROVIDERS:
        raise BadRequestError("Invalid smsProvider")

    stored = _stored(db)
    if stored is None:
        stored = MessageSettings()
        db.add(stored)
    if payload.sms_provider is not None:
        stored.sms_provider = payload.sms_provider.lower()
    if payload.sms_api_key is not None:
        stored.sms_api_key = payload.sms_api_key
    if payload.sms_sender_id is not None:
        stored.sms_sender_id = payload.sms_sender_id
    if payload.feedback_url is not None:
        stored.feedback_url = payload.feedback_url
    db.commit()
    db.refresh(stored)
    logger.info(
        f"Đã cập nhật cấu hình SMS: provider={stored.sms_provider}, "
        f"has_api_key={bool(stored.sms_api_key)}, sender_id={stored.sms_sender_id!r}."
    )
    return _payload(stored)
