"""
errors.py — typed failures raised by the OTP engine.

Every error is an input-validation failure; nothing here is retryable.
All of them subclass ValueError so callers that already catch ValueError
for bad input keep working.
"""


class OTPError(ValueError):
    """Base class for invalid OTP parameters."""


class InvalidEncodingError(OTPError):
    """Secret is not valid Base32 (character outside the RFC 4648 alphabet)."""


class UnsupportedAlgorithmError(OTPError):
    """Algorithm name is not one of SHA1, SHA256, SHA512."""


class InvalidPeriodError(OTPError):
    """TOTP period is not a positive integer."""


class InvalidDigitsError(OTPError):
    """Digit count is not a positive integer."""


class InvalidCounterError(OTPError):
    """Counter is not an unsigned 64-bit integer."""
