"""
Main FastAPI Application
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from nxtbeings.core.config import settings
from nxtbeings.core.database import init_db
from nxtbeings.core.logging import setup_logging
from nxtbeings.routers import auth
from nxtbeings.services.otp_service import OtpService
from nxtbeings.services.otp_store import OtpStore
from nxtbeings.tasks.cleanup import OtpSweeper
from nxtbeings.utils.sms import get_sms_gateway

setup_logging()
logger = logging.getLogger(__name__)


def build_otp_service() -> OtpService:
    """Create the OTP service from settings"""
    return OtpService(
        store=OtpStore(),
        gateway=get_sms_gateway(),
        expiry_seconds=settings.OTP_EXPIRY,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        send_timeout=settings.SMS_TIMEOUT,
    )


app = FastAPI(title=settings.APP_NAME)
app.state.otp_service = build_otp_service()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report invalid input as 400 with one entry per field"""
    errors = [
        {
            "param": ".".join(str(part) for part in err["loc"] if part != "body"),
            "msg": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"errors": errors})


# Startup event
@app.on_event("startup")
async def startup():
    """Create database tables and start the OTP sweeper"""
    init_db()
    logger.info("[STARTUP] Database tables created/verified")

    sweeper = OtpSweeper(app.state.otp_service, interval=settings.OTP_CLEANUP_INTERVAL)
    sweeper.start()
    app.state.otp_sweeper = sweeper


@app.on_event("shutdown")
async def shutdown():
    sweeper = getattr(app.state, "otp_sweeper", None)
    if sweeper:
        await sweeper.stop()


# Health check
@app.get("/")
async def root():
    return {"message": "NxtBeings API", "version": "1.0", "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
