#config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

DEFAULT_ALLOWED_ORIGINS = ",".join([
    "https://textify.onrender.com",
    "https://textify-app.onrender.com",
    "http://localhost:3000",
    "http://127.0.0.1:5500",
])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    # Application Settings
    APP_NAME: str = "Textify API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 3000))

    # Twilio Settings (all three are required at startup)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    # CORS Settings (comma-separated to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = DEFAULT_ALLOWED_ORIGINS

    # File Upload Settings
    UPLOAD_DIR: str = "uploads"
    PUBLIC_DIR: str = "public"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB

    # OTP Settings
    OTP_TTL_SECONDS: int = 5 * 60
    OTP_RETENTION_GRACE_SECONDS: int = 5 * 60
    STORE_SWEEP_INTERVAL_SEC: int = 60

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    def missing_twilio_settings(self) -> List[str]:
        """Names of the required Twilio settings that are unset."""
        required = {
            "TWILIO_ACCOUNT_SID": self.TWILIO_ACCOUNT_SID,
            "TWILIO_AUTH_TOKEN": self.TWILIO_AUTH_TOKEN,
            "TWILIO_PHONE_NUMBER": self.TWILIO_PHONE_NUMBER,
        }
        return [name for name, value in required.items() if not value]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
