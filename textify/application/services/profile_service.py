import logging
from dataclasses import dataclass, asdict
from typing import Optional

from ..ports.kv_store import KeyValueStore
from ...exceptions import ProfileNotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ProfileRecord:
    name: str
    about: Optional[str] = None
    picture_path: Optional[str] = None


@dataclass
class ProfileService:
    store: KeyValueStore

    @staticmethod
    def check_create_fields(phone: Optional[str], name: Optional[str]) -> None:
        if not name or not phone:
            raise ValidationError("Name and phone number are required.")

    def create_profile(self, phone: Optional[str], name: Optional[str], picture_path: Optional[str] = None) -> ProfileRecord:
        self.check_create_fields(phone, name)
        profile = ProfileRecord(name=name, picture_path=picture_path)
        self.store.set(phone, asdict(profile))
        logger.info(f"Profile saved for {phone}")
        return profile

    def update_profile(
        self,
        phone: Optional[str],
        name: Optional[str] = None,
        about: Optional[str] = None,
        picture_path: Optional[str] = None,
    ) -> ProfileRecord:
        if not phone:
            raise ValidationError("Phone number is required.")
        profile = self.get_profile(phone)
        # Empty values leave the stored field untouched
        if name:
            profile.name = name
        if about:
            profile.about = about
        if picture_path:
            profile.picture_path = picture_path
        self.store.set(phone, asdict(profile))
        logger.info(f"Profile updated for {phone}")
        return profile

    def get_profile(self, phone: str) -> ProfileRecord:
        raw = self.store.get(phone)
        if raw is None:
            raise ProfileNotFoundError()
        return ProfileRecord(**raw)
