import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from fastapi.concurrency import run_in_threadpool

from ..ports.kv_store import KeyValueStore
from ..ports.sms_sender import SMSSender
from ...exceptions import (
    DeliveryError,
    OTPExpiredError,
    OTPMismatchError,
    OTPNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

OTP_TTL_SECONDS = 5 * 60
OTP_RETENTION_GRACE_SECONDS = 5 * 60
SMS_TEMPLATE = "Your Textify verification code is: {code}"


def generate_otp() -> str:
    """Six-digit code drawn uniformly from 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


@dataclass
class OtpRecord:
    code: str
    expires_at: datetime

    def to_dict(self) -> dict:
        return {"code": self.code, "expires_at": self.expires_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> "OtpRecord":
        return cls(code=data["code"], expires_at=datetime.fromisoformat(data["expires_at"]))


@dataclass
class OTPService:
    """Issues and verifies one-time passcodes keyed by phone number.

    Each phone number holds at most one pending code. Issuing again replaces
    it; a successful verification consumes it. Expiry is checked when a code
    is verified, and the store also evicts records once ``ttl_seconds`` plus
    ``retention_grace_seconds`` have passed so unverified codes do not pile up.

    There is no limit on failed attempts within the TTL.
    """

    store: KeyValueStore
    sms_sender: SMSSender
    from_number: str
    ttl_seconds: int = OTP_TTL_SECONDS
    retention_grace_seconds: int = OTP_RETENTION_GRACE_SECONDS
    clock: Callable[[], datetime] = datetime.utcnow
    code_generator: Callable[[], str] = generate_otp

    async def send_otp(self, phone: Optional[str]) -> str:
        if not phone:
            raise ValidationError("Phone number is required.")

        code = self.code_generator()
        record = OtpRecord(code=code, expires_at=self.clock() + timedelta(seconds=self.ttl_seconds))
        self.store.set(phone, record.to_dict(), ttl_seconds=self.ttl_seconds + self.retention_grace_seconds)
        logger.debug(f"Generated OTP {code} for {phone}")

        # The record stays in place when delivery fails
        try:
            sid = await run_in_threadpool(
                self.sms_sender.send,
                SMS_TEMPLATE.format(code=code),
                self.from_number,
                phone,
            )
        except Exception as e:
            logger.error(f"Error sending SMS to {phone}: {e}", exc_info=True)
            raise DeliveryError() from e

        logger.info(f"OTP sent to {phone}, SID: {sid}")
        return sid

    def verify_otp(self, phone: Optional[str], code: Optional[Union[str, int]]) -> None:
        if not phone or not code:
            raise ValidationError("Phone number and OTP are required.")

        raw = self.store.get(phone)
        if raw is None:
            raise OTPNotFoundError()

        record = OtpRecord.from_dict(raw)
        if self.clock() > record.expires_at:
            self.store.compare_and_delete(phone, raw)
            logger.info(f"Expired OTP purged for {phone}")
            raise OTPExpiredError()

        if record.code != str(code):
            logger.info(f"OTP mismatch for {phone}")
            raise OTPMismatchError()

        if not self.store.compare_and_delete(phone, raw):
            # Consumed or replaced since it was read
            raise OTPNotFoundError()
        logger.info(f"Phone number {phone} verified")
