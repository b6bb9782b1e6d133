"""
Configuration for the OTP backend.

Values come from OTP_* environment variables, falling back to the engine
defaults.
"""

import os

from otp_engine import otp_core


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    SECRET_KEY = os.environ.get("OTP_SECRET_KEY", "otp_demo_secret_key")

    OTP_DEFAULT_DIGITS = _env_int("OTP_DEFAULT_DIGITS", otp_core.DEFAULT_DIGITS)
    OTP_DEFAULT_PERIOD = _env_int("OTP_DEFAULT_PERIOD", otp_core.DEFAULT_TIME_STEP)
    OTP_DEFAULT_ALGORITHM = os.environ.get("OTP_DEFAULT_ALGORITHM", otp_core.DEFAULT_ALGORITHM.value)
    OTP_SECRET_LENGTH = _env_int("OTP_SECRET_LENGTH", otp_core.DEFAULT_SECRET_LENGTH)
    OTP_VERIFY_WINDOW = _env_int("OTP_VERIFY_WINDOW", 1)
    OTP_HOTP_LOOK_AHEAD = _env_int("OTP_HOTP_LOOK_AHEAD", 0)
    # Upper bounds accepted over HTTP; the engine itself does not cap digits
    OTP_MAX_DIGITS = _env_int("OTP_MAX_DIGITS", 10)
    OTP_MAX_SECRET_LENGTH = _env_int("OTP_MAX_SECRET_LENGTH", 128)

    CORS_ORIGINS = os.environ.get("OTP_CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("OTP_LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = "DEBUG"
