"""
algorithms.py — the closed set of HMAC hash algorithms usable for OTP.
"""

import hashlib
from enum import Enum
from typing import Callable, Union

from .errors import UnsupportedAlgorithmError


class Algorithm(str, Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def parse(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """
        Resolve an algorithm name as it appears in an otpauth URI
        ('SHA1', 'sha256', ...) to an Algorithm member.

        Raises:
            UnsupportedAlgorithmError: for anything outside SHA1/SHA256/SHA512.
                There is no fallback to SHA1.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise UnsupportedAlgorithmError(
            "Unsupported algorithm %r, must be SHA1, SHA256 or SHA512" % (value,)
        )

    @property
    def digestmod(self) -> Callable:
        """hashlib constructor handed to hmac.new()."""
        return _DIGESTMODS[self]


_DIGESTMODS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}