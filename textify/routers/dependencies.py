from fastapi import Request

from ..application.services.otp_service import OTPService
from ..application.services.profile_service import ProfileService
from ..application.ports.upload_store import UploadStore


# Services are built once per process in main.create_app and kept on app.state
def get_otp_service(request: Request) -> OTPService:
    return request.app.state.otp_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store
