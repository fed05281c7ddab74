# textify/schemas/profile.py
from pydantic import BaseModel
from typing import Optional

from ..application.services.profile_service import ProfileRecord


class UserResponse(BaseModel):
    name: str
    about: Optional[str] = None
    profilePicture: Optional[str] = None

    @classmethod
    def from_record(cls, record: ProfileRecord) -> "UserResponse":
        return cls(name=record.name, about=record.about, profilePicture=record.picture_path)


class ProfileSavedResponse(BaseModel):
    success: bool
    message: str


class ProfileUpdatedResponse(BaseModel):
    success: bool
    message: str
    user: UserResponse


class ProfileResponse(BaseModel):
    success: bool
    user: UserResponse
