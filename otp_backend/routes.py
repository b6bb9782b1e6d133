"""
OTP BACKEND API ROUTES - FLASK BLUEPRINT

JSON endpoints a front-end view calls to display HOTP/TOTP codes.
Every parameter is parsed and validated here, once, before it reaches the
engine; engine errors come back as HTTP 400.

EXAMPLES:
curl "http://localhost:5000/api/totp?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
curl "http://localhost:5000/api/hotp?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ&counter=1&digits=8"
curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d '{"length": 20}'
"""

import logging
from typing import Any, Mapping, Optional, Type

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from otp_engine import otp_core
from otp_engine.errors import (
    InvalidCounterError,
    InvalidDigitsError,
    InvalidPeriodError,
    OTPError,
)

logger = logging.getLogger(__name__)

otp_bp = Blueprint("otp_api", __name__, url_prefix="/api")


# --- Parameter parsing -----------------------------------------------------
def _int_param(
    source: Mapping[str, Any],
    name: str,
    error: Type[OTPError],
    default: Optional[int] = None,
    required: bool = False,
) -> Optional[int]:
    """
    Read an integer field from query args or a JSON body.

    Text that is not a base-10 integer raises the typed engine error for the
    field instead of being coerced.
    """
    raw = source.get(name)
    if raw is None or raw == "":
        if required:
            raise BadRequest(f"'{name}' is required")
        return default
    if isinstance(raw, bool):
        raise error(f"{name} must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip(), 10)
        except ValueError:
            pass
    raise error(f"{name} must be an integer, got {raw!r}")


def _secret_param(source: Mapping[str, Any]) -> str:
    secret = source.get("secret")
    if not isinstance(secret, str) or not secret:
        raise BadRequest("'secret' is required")
    return secret


def _json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON object body is required")
    return data


def _otp_options(source: Mapping[str, Any]) -> dict:
    cfg = current_app.config
    digits = _int_param(source, "digits", InvalidDigitsError, cfg["OTP_DEFAULT_DIGITS"])
    if digits > cfg["OTP_MAX_DIGITS"]:
        raise InvalidDigitsError(f"digits must be at most {cfg['OTP_MAX_DIGITS']}, got {digits}")
    return {
        "digits": digits,
        "algorithm": source.get("algorithm") or cfg["OTP_DEFAULT_ALGORITHM"],
    }


# --- Error handlers ----------------------------------------------------------
@otp_bp.errorhandler(OTPError)
def handle_otp_error(e: OTPError):
    logger.warning("Rejected %s %s: %s", request.method, request.path, e)
    return jsonify({"error": str(e), "type": type(e).__name__}), 400


@otp_bp.errorhandler(BadRequest)
def handle_bad_request(e: BadRequest):
    logger.warning("Bad request %s %s: %s", request.method, request.path, e.description)
    return jsonify({"error": e.description, "type": "BadRequest"}), 400


# --- Endpoints ---------------------------------------------------------------
@otp_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@otp_bp.route("/hotp", methods=["GET"])
def get_hotp():
    """
    HOTP code for a counter.

      curl "http://localhost:5000/api/hotp?secret=...&counter=1"

    Query params:
      secret: REQUIRED - Base32 secret
      counter: REQUIRED - non-negative integer
      digits: default OTP_DEFAULT_DIGITS
      algorithm: SHA1 | SHA256 | SHA512
    """
    args = request.args
    secret = _secret_param(args)
    counter = _int_param(args, "counter", InvalidCounterError, required=True)
    options = _otp_options(args)

    code = otp_core.hotp(secret, counter, options["digits"], options["algorithm"])
    return jsonify({"code": code, "counter": counter})


@otp_bp.route("/totp", methods=["GET"])
def get_totp():
    """
    Current TOTP code plus seconds left in its window.

      curl "http://localhost:5000/api/totp?secret=...&period=30"

    Query params:
      secret: REQUIRED - Base32 secret
      time: epoch seconds (default: now)
      period: default OTP_DEFAULT_PERIOD
      digits, algorithm: as for /hotp
    """
    args = request.args
    secret = _secret_param(args)
    period = _int_param(args, "period", InvalidPeriodError, current_app.config["OTP_DEFAULT_PERIOD"])
    timestamp = _int_param(args, "time", InvalidCounterError)
    options = _otp_options(args)

    code, remaining = otp_core.totp(
        secret, timestamp=timestamp, period=period, digits=options["digits"], algorithm=options["algorithm"]
    )
    return jsonify({"code": code, "remaining": remaining, "period": period})


@otp_bp.route("/secret", methods=["POST"])
def generate_secret():
    """
    New random Base32 secret.

      curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d '{"length": 20}'
    """
    data = request.get_json(silent=True) or {}
    length = data.get("length", current_app.config["OTP_SECRET_LENGTH"])
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise BadRequest("'length' must be a positive integer")
    if length > current_app.config["OTP_MAX_SECRET_LENGTH"]:
        raise BadRequest(f"'length' must be at most {current_app.config['OTP_MAX_SECRET_LENGTH']}")

    secret = otp_core.random_secret(length)
    logger.info("Generated secret %s (length=%d)", otp_core.mask_secret(secret), length)
    return jsonify({"secret": secret})


@otp_bp.route("/verify_totp", methods=["POST"])
def verify_totp_route():
    """
    Verify a TOTP code.

    Input (JSON body):
      {"secret": "...", "code": "123456", "period": 30, "window": 1, "time": 1111111109}

    Output:
      {"valid": true} or {"valid": false}
    """
    data = _json_body()
    secret = _secret_param(data)
    if "code" not in data:
        raise BadRequest("'code' is required")
    cfg = current_app.config
    options = _otp_options(data)
    window = data.get("window", cfg["OTP_VERIFY_WINDOW"])
    if isinstance(window, bool) or not isinstance(window, int) or window < 0:
        raise BadRequest("'window' must be a non-negative integer")

    valid = otp_core.verify_totp(
        secret,
        str(data["code"]),
        timestamp=_int_param(data, "time", InvalidCounterError),
        period=_int_param(data, "period", InvalidPeriodError, cfg["OTP_DEFAULT_PERIOD"]),
        digits=options["digits"],
        algorithm=options["algorithm"],
        window=window,
    )
    logger.info("TOTP verification for %s: %s", otp_core.mask_secret(secret), "ok" if valid else "failed")
    return jsonify({"valid": valid})


@otp_bp.route("/verify_hotp", methods=["POST"])
def verify_hotp_route():
    """
    Verify a HOTP code.

    Input (JSON body):
      {"secret": "...", "code": "123456", "counter": 1, "look_ahead": 0}

    Output:
      {"valid": true, "next_counter": 2}   on success
      {"valid": false, "next_counter": 1}  otherwise

    The caller stores next_counter; this service keeps no counter state.
    """
    data = _json_body()
    secret = _secret_param(data)
    if "code" not in data:
        raise BadRequest("'code' is required")
    counter = _int_param(data, "counter", InvalidCounterError, required=True)
    options = _otp_options(data)
    look_ahead = data.get("look_ahead", current_app.config["OTP_HOTP_LOOK_AHEAD"])
    if isinstance(look_ahead, bool) or not isinstance(look_ahead, int) or look_ahead < 0:
        raise BadRequest("'look_ahead' must be a non-negative integer")

    valid, next_counter = otp_core.verify_hotp(
        secret,
        str(data["code"]),
        counter,
        digits=options["digits"],
        algorithm=options["algorithm"],
        look_ahead=look_ahead,
    )
    logger.info("HOTP verification for %s at counter %d: %s",
                otp_core.mask_secret(secret), counter, "ok" if valid else "failed")
    return jsonify({"valid": valid, "next_counter": next_counter})
