"""
Application Configuration
All settings loaded from environment variables
"""
from pydantic import BaseModel
from typing import Optional
import os


class Settings(BaseModel):
    # ==================== Application ====================
    APP_NAME: str = os.getenv("APP_NAME", "NxtBeings")

    # ==================== Database ====================
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "db")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "nxtbeings")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "nxtbeings")

    # ==================== Auth ====================
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-this")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_MINUTES: int = int(os.getenv("JWT_EXPIRES_MINUTES", "10080"))  # 7 days
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))

    # ==================== SMS ====================
    SMS_GATEWAY_DEFAULT: str = os.getenv("SMS_GATEWAY_DEFAULT", "console")
    SMS_API_KEY: str = os.getenv("SMS_API_KEY", "")
    SMS_API_URL: str = os.getenv("SMS_API_URL", "https://api.kavenegar.com/v1")
    SMS_SENDER: str = os.getenv("SMS_SENDER", "")
    SMS_TIMEOUT: float = float(os.getenv("SMS_TIMEOUT", "10"))
    SMS_MOCK_DELAY: float = float(os.getenv("SMS_MOCK_DELAY", "0"))

    # ==================== OTP ====================
    OTP_EXPIRY: int = int(os.getenv("OTP_EXPIRY", "300"))
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))
    OTP_CLEANUP_INTERVAL: int = int(os.getenv("OTP_CLEANUP_INTERVAL", "300"))

    # ==================== Phone Validation ====================
    PHONE_MIN_LENGTH: int = int(os.getenv("PHONE_MIN_LENGTH", "10"))

    # ==================== Logging ====================
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/app.log")
    LOG_MAX_SIZE: int = int(os.getenv("LOG_MAX_SIZE", "10485760"))  # 10MB
    LOG_BACKUP_COUNT: int = int(os.getenv("LOG_BACKUP_COUNT", "5"))

    # ==================== CORS ====================
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_ALLOW_CREDENTIALS: bool = os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"

    # ==================== Features ====================
    FEATURE_OTP_ENABLED: bool = os.getenv("FEATURE_OTP_ENABLED", "true").lower() in ("true", "1", "yes")


settings = Settings()
