import pytest

from app import create_app
from config import Config


class TestConfig(Config):
    TESTING = True
    APP_SECRET = "test-secret-0123456789abcdef"
    OTP_TTL_MINUTES = 10
    BASE_URL = "https://relaxinn.test"
    MAIL_SERVER = "localhost"
    MAIL_DEFAULT_SENDER = "Relax Inn <desk@relaxinn.test>"
    MAIL_SUPPRESS_SEND = True
    TEST_RECIPIENT = None
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_dummy"
    STRIPE_PRICE_WEEKLY = "price_weekly"
    STRIPE_PRICE_MONTHLY = "price_monthly"
    STRIPE_PRICE_MOVEIN = "price_movein"


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()
