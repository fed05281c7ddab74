import os
import sys
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles
from twilio.rest import Client

from .config import Settings, settings as default_settings
from .exceptions import (
    TextifyError,
    textify_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware, RequestSizeLimitMiddleware
from .application.ports.kv_store import KeyValueStore
from .application.ports.sms_sender import SMSSender
from .application.ports.upload_store import UploadStore
from .application.services.otp_service import OTPService
from .application.services.profile_service import ProfileService
from .infrastructure.kv.memory_kv_store import InMemoryKeyValueStore
from .infrastructure.sms.twilio_sender import TwilioSMSSender
from .infrastructure.storage.local_storage import LocalUploadStore
from .routers import otp_router, profile_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format=default_settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


async def sweep_expired(stores: list, interval_seconds: int) -> None:
    """Periodically evict store entries whose retention TTL has lapsed."""
    while True:
        await asyncio.sleep(interval_seconds)
        purged = 0
        for store in stores:
            try:
                purged += store.purge_expired()
            except Exception as e:
                logger.error(f"Store sweep failed: {e}", exc_info=True)
        if purged:
            logger.info(f"Evicted {purged} expired store entries")


def build_sms_sender(settings: Settings) -> SMSSender:
    missing = settings.missing_twilio_settings()
    if missing:
        raise RuntimeError(f"Twilio credentials are not configured: {', '.join(missing)}")
    return TwilioSMSSender(Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN))


def create_app(
    settings: Optional[Settings] = None,
    sms_sender: Optional[SMSSender] = None,
    otp_store: Optional[KeyValueStore] = None,
    profile_store: Optional[KeyValueStore] = None,
    upload_store: Optional[UploadStore] = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Textify API...")
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
        sender = sms_sender
        if sender is None:
            try:
                sender = build_sms_sender(settings)
            except RuntimeError as e:
                logger.critical(f"FATAL ERROR: {e}")
                raise
        app.state.otp_service = OTPService(
            store=app.state.otp_store,
            sms_sender=sender,
            from_number=settings.TWILIO_PHONE_NUMBER,
            ttl_seconds=settings.OTP_TTL_SECONDS,
            retention_grace_seconds=settings.OTP_RETENTION_GRACE_SECONDS,
        )
        app.state.profile_service = ProfileService(store=app.state.profile_store)
        sweeper = asyncio.create_task(
            sweep_expired([app.state.otp_store, app.state.profile_store], settings.STORE_SWEEP_INTERVAL_SEC)
        )
        yield
        # Shutdown
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        logger.info("Shutting down Textify API...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.otp_store = otp_store if otp_store is not None else InMemoryKeyValueStore()
    app.state.profile_store = profile_store if profile_store is not None else InMemoryKeyValueStore()
    app.state.upload_store = upload_store or LocalUploadStore(settings.UPLOAD_DIR)

    app.add_exception_handler(TextifyError, textify_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=settings.MAX_FILE_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api")
    def health_check():
        return {"message": "Textify backend API is running."}

    app.include_router(otp_router.router)
    app.include_router(profile_router.router)

    # Mount static files for uploaded pictures, then the frontend
    # UPLOAD_DIR is created at startup, not on import
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
    if os.path.isdir(settings.PUBLIC_DIR):
        app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")

    return app


app = create_app()


def run() -> None:
    missing = default_settings.missing_twilio_settings()
    if missing:
        logger.critical(f"FATAL ERROR: Twilio credentials are not configured: {', '.join(missing)}")
        sys.exit(1)

    import uvicorn
    logger.info(f"Textify backend server listening at http://localhost:{default_settings.PORT}")
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
