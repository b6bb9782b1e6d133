"""
otp_engine package
==================

HOTP / TOTP generation and verification per RFC 4226 & RFC 6238.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-<alg>(key=secret, msg=counter)) mod 10^digits

- TOTP (Time-based One-Time Password):
  HOTP with counter = floor(timestamp / period)
  → default period = 30s, 6 digits, SHA1.

- Dynamic Truncation:
  4 bytes taken from the HMAC at offset (last byte & 0x0F), top bit cleared.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from otp_engine import hotp, totp, random_secret
>>> hotp("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", 0)
'755224'
>>> code, remaining = totp(random_secret())
"""

from .algorithms import Algorithm
from .errors import (
    InvalidCounterError,
    InvalidDigitsError,
    InvalidEncodingError,
    InvalidPeriodError,
    OTPError,
    UnsupportedAlgorithmError,
)
from .otp_core import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_SECRET_LENGTH,
    DEFAULT_TIME_STEP,
    hotp,
    random_secret,
    totp,
    verify_hotp,
    verify_totp,
)
from .refresher import TOTPRefresher

__all__ = [
    "Algorithm",
    "DEFAULT_ALGORITHM",
    "DEFAULT_DIGITS",
    "DEFAULT_SECRET_LENGTH",
    "DEFAULT_TIME_STEP",
    "InvalidCounterError",
    "InvalidDigitsError",
    "InvalidEncodingError",
    "InvalidPeriodError",
    "OTPError",
    "TOTPRefresher",
    "UnsupportedAlgorithmError",
    "hotp",
    "random_secret",
    "totp",
    "verify_hotp",
    "verify_totp",
]
