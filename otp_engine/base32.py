"""
base32.py — RFC 4648 Base32 codec for OTP secrets.

- decode() is lenient in the way authenticator apps are: case-insensitive,
  trailing '=' stripped without checking their count.
- encode() never emits '=' padding (the otpauth scheme does not use it).
"""

import base64

from .errors import InvalidEncodingError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_DECODE_MAP = {char: value for value, char in enumerate(ALPHABET)}


def decode(text: str) -> bytes:
    """
    Decode Base32 text into raw key bytes.

    Each symbol contributes 5 bits to a running bit buffer; a byte is emitted
    every time 8 bits are available. Leftover bits at the end (< 8) are the
    Base32 padding and are discarded.

    Raises:
        InvalidEncodingError: on any character outside the alphabet
            (after stripping trailing '=').
    """
    if not isinstance(text, str):
        raise InvalidEncodingError("Base32 secret must be text, got %s" % type(text).__name__)

    buffer = 0
    bits = 0
    out = bytearray()
    for position, char in enumerate(text.rstrip("=")):
        value = _DECODE_MAP.get(char.upper()) if char.isascii() else None
        if value is None:
            raise InvalidEncodingError(
                "Invalid base32 character %r at position %d" % (char, position)
            )
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    return bytes(out)


def encode(data: bytes) -> str:
    """
    Encode raw bytes as unpadded, upper-case Base32 text.

    The final partial group is filled with zero bits.
    """
    return base64.b32encode(bytes(data)).decode("ascii").rstrip("=")
