"""
Gửi SMS mời khách hàng để lại phản hồi.

Hỗ trợ ba nhà cung cấp: greenweb, bulksmsbd và smsnetbd. Cấu hình được truyền
vào dưới dạng một `SmsConfig` bất biến, được tạo từ bảng `message_settings`
và các biến môi trường dự phòng.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models import MessageSettings

logger = logging.getLogger(__name__)

PROVIDERS = ("greenweb", "bulksmsbd", "smsnetbd")
DEFAULT_SENDER_ID = "880"


class SmsError(Exception):
    """Lỗi khi gửi SMS (thiếu cấu hình hoặc nhà cung cấp trả lỗi)."""


@dataclass(frozen=True)
class SmsConfig:
    provider: str
    api_key: str
    sender_id: str
    feedback_url: str
    timeout: float = 10.0


def load_sms_config(db: Session) -> SmsConfig:
    """Ghép cấu hình lưu trong database với giá trị dự phòng từ môi trường."""
    stored: Optional[MessageSettings] = db.execute(
        select(MessageSettings).order_by(MessageSettings.id).limit(1)
    ).scalar_one_or_none()
    return SmsConfig(
        provider=(stored.sms_provider if stored and stored.sms_provider else settings.SMS_PROVIDER).lower(),
        api_key=(stored.sms_api_key if stored and stored.sms_api_key else settings.SMS_API_KEY),
        sender_id=(stored.sms_sender_id if stored and stored.sms_sender_id else settings.SMS_SENDER_ID),
        feedback_url=(stored.feedback_url if stored and stored.feedback_url else settings.FEEDBACK_URL),
        timeout=settings.SMS_TIMEOUT_SECONDS,
    )


def normalize_bd_phone(number: str) -> str:
    """Chuẩn hoá số điện thoại Bangladesh về dạng bắt đầu bằng `880`."""
    if not number:
        return number
    digits = re.sub(r"\D+", "", str(number))
    if digits.startswith("880"):
        return digits
    if digits.startswith("0"):
        return "88" + digits
    if digits.startswith("1"):
        return "880" + digits
    return digits


def feedback_request_message(showroom: str, category: str, feedback_url: str) -> str:
    return (
        f"Dear Sir/Madam, thank you for visiting {showroom}. "
        f"You showed interest in {category}. "
        f"Please share your feedback here: {feedback_url}"
    )


def _send_via_greenweb(to: str, message: str, config: SmsConfig) -> Dict[str, Any]:
    if not config.api_key:
        raise SmsError("SMS_API_KEY is required for Greenweb")
    response = requests.get(
        "https://api.greenweb.com.bd/api.php",
        params={"token": config.api_key, "to": to, "message": message},
        timeout=config.timeout,
    )
    if not response.ok:
        raise SmsError(f"Greenweb error: {response.status_code}")
    return {"provider": "greenweb", "result": response.text}


def _json_or_empty(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _send_via_bulksmsbd(to: str, message: str, config: SmsConfig) -> Dict[str, Any]:
    if not config.api_key:
        raise SmsError("SMS_API_KEY is required for BulkSMSBD")
    response = requests.post(
        "https://bulksmsbd.net/api/smsapi",
        data={
            "api_key": config.api_key,
            "type": "text",
            "senderid": config.sender_id or DEFAULT_SENDER_ID,
            "number": to,
            "message": message,
        },
        timeout=config.timeout,
    )
    if not response.ok:
        raise SmsError(f"BulkSMSBD error: {response.status_code}")
    return {"provider": "bulksmsbd", "result": _json_or_empty(response)}


def _send_via_smsnetbd(to: str, message: str, config: SmsConfig) -> Dict[str, Any]:
    if not config.api_key:
        raise SmsError("SMS_API_KEY is required for SMS.net.bd")
    response = requests.post(
        "https://sms.net.bd/smsapi",
        data={
            "api_key": config.api_key,
            "type": "text",
            "contacts": to,
            "senderid": config.sender_id or DEFAULT_SENDER_ID,
            "msg": message,
        },
        timeout=config.timeout,
    )
    if not response.ok:
        raise SmsError(f"SMS.net.bd error: {response.status_code}")
    return {"provider": "smsnetbd", "result": _json_or_empty(response)}


_SENDERS = {
    "greenweb": _send_via_greenweb,
    "bulksmsbd": _send_via_bulksmsbd,
    "smsnetbd": _send_via_smsnetbd,
}


def send_sms(to: str, message: str, config: SmsConfig) -> Dict[str, Any]:
    """
    Gửi một tin nhắn qua nhà cung cấp được cấu hình.

    Raises:
        SmsError: Thiếu tham số, nhà cung cấp không được hỗ trợ hoặc gửi thất bại.
    """
    if not to or not message:
        raise SmsError("to and message are required")
    sender = _SENDERS.get((config.provider or "").lower())
    if sender is None:
        raise SmsError(f"Unsupported SMS provider: {config.provider}")
    try:
        return sender(to, message, config)
    except requests.exceptions.RequestException as e:
        raise SmsError(f"{config.provider} request failed: {e}") from e
