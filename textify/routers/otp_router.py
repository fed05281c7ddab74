from typing import Optional
import logging

from fastapi import APIRouter, Depends

from ..application.services.otp_service import OTPService
from ..exceptions import create_success_response
from ..schemas.otp import SendOTPRequest, VerifyOTPRequest, OTPResponse
from .dependencies import get_otp_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["OTP"])


@router.post("/send-otp", response_model=OTPResponse)
async def send_otp(
    payload: Optional[SendOTPRequest] = None,
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Generate a one-time passcode and text it to the phone number
    """
    phone = payload.phoneNumber if payload else None
    await otp_service.send_otp(phone)
    return create_success_response("OTP sent successfully.")


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(
    payload: Optional[VerifyOTPRequest] = None,
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Check a submitted passcode; a correct code can only be used once
    """
    phone = payload.phoneNumber if payload else None
    code = payload.otp if payload else None
    otp_service.verify_otp(phone, code)
    return create_success_response("Phone number verified successfully.")
