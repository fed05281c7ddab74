from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ..application.ports.upload_store import UploadStore
from ..application.services.profile_service import ProfileService
from ..exceptions import create_success_response
from ..schemas.profile import (
    ProfileResponse,
    ProfileSavedResponse,
    ProfileUpdatedResponse,
    UserResponse,
)
from .dependencies import get_profile_service, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])


async def save_uploaded_picture(upload_file: Optional[UploadFile], upload_store: UploadStore) -> Optional[str]:
    """Store an uploaded picture and return its path, or None when no file was sent"""
    if upload_file is None or not upload_file.filename:
        return None
    try:
        data = await upload_file.read()
        path = upload_store.save("", upload_file.filename, data)
    except OSError as e:
        logger.error(f"Failed to save profile picture: {e}")
        raise HTTPException(status_code=500, detail="Failed to save image")
    logger.info(f"File uploaded successfully: {path}")
    return path


@router.post("", response_model=ProfileSavedResponse)
async def create_profile(
    name: Optional[str] = Form(None),
    phoneNumber: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    profile_service: ProfileService = Depends(get_profile_service),
    upload_store: UploadStore = Depends(get_upload_store),
):
    """
    Create or replace the profile stored for a phone number
    """
    # Reject before touching the disk
    profile_service.check_create_fields(phoneNumber, name)
    picture_path = await save_uploaded_picture(profilePicture, upload_store)
    profile_service.create_profile(phoneNumber, name, picture_path)
    return create_success_response("Profile updated successfully.")


@router.put("/{phoneNumber}", response_model=ProfileUpdatedResponse)
async def update_profile(
    phoneNumber: str,
    name: Optional[str] = Form(None),
    about: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    profile_service: ProfileService = Depends(get_profile_service),
    upload_store: UploadStore = Depends(get_upload_store),
):
    """
    Update only the fields present in the form
    """
    profile_service.get_profile(phoneNumber)
    picture_path = await save_uploaded_picture(profilePicture, upload_store)
    profile = profile_service.update_profile(phoneNumber, name=name, about=about, picture_path=picture_path)
    return create_success_response(
        "Profile updated successfully.",
        user=UserResponse.from_record(profile).model_dump(),
    )


@router.get("/{phoneNumber}", response_model=ProfileResponse)
async def get_profile(
    phoneNumber: str,
    profile_service: ProfileService = Depends(get_profile_service),
):
    profile = profile_service.get_profile(phoneNumber)
    return {"success": True, "user": UserResponse.from_record(profile).model_dump()}
