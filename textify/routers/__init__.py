# Routers package
from . import otp_router
from . import profile_router

__all__ = [
    "otp_router",
    "profile_router",
]
