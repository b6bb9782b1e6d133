"""
otp_core.py — Core library for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions only, usable directly by the CLI and the Flask backend.
- No argparse, no file I/O, no persisted state.
- Every parameter is validated here, before any hashing happens.

Security notes:
- Secrets are never logged in full.
- The engine is stateless. Callers that store HOTP counters must make the
  verify-and-increment step atomic per secret (see verify_hotp).
"""

from typing import Optional, Tuple, Union
import hmac
import logging
import secrets
import struct
import time

from . import base32
from .algorithms import Algorithm
from .errors import (
    InvalidCounterError,
    InvalidDigitsError,
    InvalidPeriodError,
)

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_ALGORITHM = Algorithm.SHA1
DEFAULT_SECRET_LENGTH = 20  # characters fed to random_secret()
MAX_COUNTER = 2 ** 64 - 1
SECRET_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

AlgorithmLike = Union[Algorithm, str]


# --- Boundary validation ---------------------------------------------------
def _is_int(value) -> bool:
    # bool is an int subclass, but True digits is nonsense
    return isinstance(value, int) and not isinstance(value, bool)


def check_digits(digits: int) -> int:
    if not _is_int(digits) or digits <= 0:
        raise InvalidDigitsError("digits must be a positive integer, got %r" % (digits,))
    return digits


def check_period(period: int) -> int:
    if not _is_int(period) or period <= 0:
        raise InvalidPeriodError("period must be a positive integer, got %r" % (period,))
    return period


def check_counter(counter: int) -> int:
    if not _is_int(counter) or not 0 <= counter <= MAX_COUNTER:
        raise InvalidCounterError(
            "counter must be an integer in [0, 2**64), got %r" % (counter,)
        )
    return counter


def _resolve_timestamp(timestamp: Optional[int]) -> int:
    if timestamp is None:
        return int(time.time())
    if not _is_int(timestamp):
        raise InvalidCounterError("timestamp must be integer epoch seconds, got %r" % (timestamp,))
    return timestamp


def _codes_equal(expected: str, code) -> bool:
    # lone surrogates are legal in JSON strings; they must compare unequal
    return hmac.compare_digest(expected.encode("ascii"), str(code).encode("utf-8", "surrogatepass"))


def mask_secret(secret: str) -> str:
    """Short, log-safe form of a secret."""
    return str(secret)[:4] + "..."


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Encode the counter as the 8-byte big-endian message RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes starting at offset, clear the MSB (0x7F) of the first one
    - return the resulting 31-bit unsigned integer

    With the largest offset (15) the last byte read is index 18, so any
    digest of 19+ bytes works; SHA1/256/512 give 20/32/64.
    """
    offset = hmac_digest[-1] & 0x0F
    code = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )
    return code


def hotp(
    secret_b32: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: AlgorithmLike = DEFAULT_ALGORITHM,
) -> str:
    """
    Generate an HOTP code (RFC 4226).

    Steps:
    1. Validate digits / algorithm / counter (no hashing on bad input)
    2. Base32-decode secret -> raw key bytes
    3. Message = 8-byte counter (big-endian)
    4. HMAC-<algorithm>(key, message)
    5. Dynamic truncate -> dbc
    6. otp = dbc % 10^digits, zero-padded to exactly `digits` characters

    Arguments:
        secret_b32: Base32 secret
        counter: integer counter in [0, 2**64)
        digits: number of OTP digits (6 or 8 in practice, not restricted here)
        algorithm: Algorithm member or name ("SHA1", "SHA256", "SHA512")

    Returns:
        str: zero-padded HOTP code

    Raises:
        InvalidDigitsError, UnsupportedAlgorithmError, InvalidCounterError,
        InvalidEncodingError
    """
    check_digits(digits)
    algorithm = Algorithm.parse(algorithm)
    check_counter(counter)
    key = base32.decode(secret_b32)

    msg = int_to_bytes(counter)
    digest = hmac.new(key, msg, algorithm.digestmod).digest()
    dbc = dynamic_truncate(digest)
    code = str(dbc % (10 ** digits)).zfill(digits)
    logger.debug(
        "HOTP: HMAC-%s(key=%s, counter=%d) dbc=%d", algorithm.value, mask_secret(secret_b32), counter, dbc
    )
    return code


def totp(
    secret_b32: str,
    timestamp: Optional[int] = None,
    period: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: AlgorithmLike = DEFAULT_ALGORITHM,
) -> Tuple[str, int]:
    """
    Generate a TOTP code (RFC 6238): HOTP with counter = floor(timestamp / period).

    Arguments:
        secret_b32: Base32 secret
        timestamp: epoch seconds (None -> time.time())
        period: time step X in seconds, default 30
        digits: number of OTP digits
        algorithm: Algorithm member or name

    Returns:
        (code, remaining_seconds)
        - remaining_seconds is in [1, period]; on an exact multiple of
          period it equals period, never 0.

    Raises:
        InvalidPeriodError plus everything hotp() raises.
        InvalidCounterError also covers a timestamp that is not an integer,
        and one whose counter falls outside [0, 2**64).
    """
    check_period(period)
    timestamp = _resolve_timestamp(timestamp)

    counter = timestamp // period
    remaining = period - (timestamp % period)
    code = hotp(secret_b32, counter, digits, algorithm)
    logger.debug("TOTP: time=%d, counter=%d, remaining=%ds", timestamp, counter, remaining)
    return code, remaining


def random_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """
    Generate a new Base32 secret.

    `length` alphanumeric characters are drawn with the `secrets` CSPRNG and
    the ASCII bytes of that text are Base32-encoded (unpadded). The result
    therefore carries about log2(62) bits per character, not 8.

    A non-positive length gives an empty string; callers must reject it.
    """
    if not _is_int(length) or length <= 0:
        return ""
    text = "".join(secrets.choice(SECRET_CHARS) for _ in range(length))
    return base32.encode(text.encode("ascii"))


# --- OTP verification helpers ---------------------------------------------
def verify_totp(
    secret_b32: str,
    code: str,
    timestamp: Optional[int] = None,
    period: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: AlgorithmLike = DEFAULT_ALGORITHM,
    window: int = 1,
) -> bool:
    """
    Check a user-supplied TOTP code, allowing `window` steps of clock drift
    on either side. Comparison is constant-time.

    Replay protection (refusing a code already accepted inside its window)
    is the caller's job; this function keeps no state.
    """
    if not _is_int(window) or window < 0:
        raise ValueError("window must be a non-negative integer, got %r" % (window,))
    check_period(period)
    timestamp = _resolve_timestamp(timestamp)

    counter = timestamp // period
    for offset in range(-window, window + 1):
        test_counter = counter + offset
        if test_counter < 0 or test_counter > MAX_COUNTER:
            continue
        expected = hotp(secret_b32, test_counter, digits, algorithm)
        if _codes_equal(expected, code):
            logger.debug("TOTP accepted at drift %+d", offset)
            return True
    return False


def verify_hotp(
    secret_b32: str,
    code: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: AlgorithmLike = DEFAULT_ALGORITHM,
    look_ahead: int = 0,
) -> Tuple[bool, int]:
    """
    Check a user-supplied HOTP code against counter .. counter + look_ahead.

    Returns:
        (True, matched_counter + 1) on success, (False, counter) otherwise.

    The caller owns the counter. Reading it, calling this function and
    storing the returned next counter must be one serialized operation per
    secret, otherwise concurrent requests can accept the same code twice.
    """
    if not _is_int(look_ahead) or look_ahead < 0:
        raise ValueError("look_ahead must be a non-negative integer, got %r" % (look_ahead,))
    check_counter(counter)

    for i in range(look_ahead + 1):
        if counter + i > MAX_COUNTER:
            break
        expected = hotp(secret_b32, counter + i, digits, algorithm)
        if _codes_equal(expected, code):
            return True, counter + i + 1
    return False, counter
