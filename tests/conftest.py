import pytest

from otp_backend import create_app
from otp_backend.config import TestingConfig

# RFC 4226 Appendix D secret, ASCII "12345678901234567890"
RFC4226_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def rfc_secret():
    return RFC4226_SECRET


@pytest.fixture
def app():
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()
