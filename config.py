"""
Configuration for the Relax Inn booking app.
Production (Railway/Render/Vercel): APP_SECRET is required; fails if missing.
Local: falls back to a development secret so the OTP flow works out of the box.
"""
import os


def _is_production():
    """True when running on Railway, Render, or explicit production."""
    return (
        os.environ.get("RENDER") == "true"
        or os.environ.get("RAILWAY_ENVIRONMENT") is not None
        or os.environ.get("FLASK_ENV") == "production"
    )


def _get_app_secret():
    """OTP signing secret: shared by issuer and verifier, so it must be stable across workers."""
    secret = os.environ.get("APP_SECRET")
    if secret and secret.strip():
        return secret.strip()
    if _is_production():
        raise RuntimeError(
            "APP_SECRET is required in production. "
            "Set it to a long random string in your service environment variables."
        )
    return "dev-otp-secret-change-in-production"


def _env_flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("true", "on", "1")


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"
    ENV_NAME = "production" if _is_production() else os.environ.get("FLASK_ENV", "development")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    APP_SECRET = _get_app_secret()
    OTP_TTL_MINUTES = int(os.environ.get("OTP_TTL_MINUTES") or 10)

    BASE_URL = os.environ.get("BASE_URL") or os.environ.get("NEXT_PUBLIC_BASE_URL")

    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = int(os.environ.get("MAIL_PORT") or 587)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER") or os.environ.get("SENDER_EMAIL") or os.environ.get("MAIL_USERNAME")
    TEST_RECIPIENT = os.environ.get("TEST_RECIPIENT")

    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET")
    STRIPE_PRICE_WEEKLY = os.environ.get("STRIPE_PRICE_WEEKLY")
    STRIPE_PRICE_MONTHLY = os.environ.get("STRIPE_PRICE_MONTHLY")
    STRIPE_PRICE_MOVEIN = os.environ.get("STRIPE_PRICE_MOVEIN")
