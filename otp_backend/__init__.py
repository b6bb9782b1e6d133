"""
Backend package for serving OTP codes over HTTP using Flask.
Integrates with the otp_engine core functions.
"""

from .app import create_app

__all__ = ["create_app"]
