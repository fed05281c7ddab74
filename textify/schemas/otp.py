# textify/schemas/otp.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Union


def _phone_as_text(v):
    # Clients sometimes send the number as a JSON number
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class SendOTPRequest(BaseModel):
    phoneNumber: Optional[str] = Field(None, description="Destination phone number; format is not validated")

    @field_validator("phoneNumber", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return _phone_as_text(v)


class VerifyOTPRequest(BaseModel):
    phoneNumber: Optional[str] = Field(None, description="Phone number the code was sent to")
    otp: Optional[Union[str, int]] = Field(None, description="Code received by SMS")

    @field_validator("phoneNumber", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return _phone_as_text(v)


class OTPResponse(BaseModel):
    success: bool
    message: str
