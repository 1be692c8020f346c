"""
Word Obfuscation

Hides the hourly word from casual inspection of stored records:
a Caesar shift keyed by the hour id, then Base64. This is NOT encryption;
the key is derivable from the public hour id.
"""

import base64
import binascii
import re

from ..errors import DecodeError
from ..utils.helpers import string_hash, to_base36

# Standard Base64 alphabet with trailing padding only
ENCODED_PAYLOAD_PATTERN = re.compile(r'^[A-Za-z0-9+/]+=*$')


def key_for(hour_id: str) -> int:
    """Shift key in [0, 26): sum of the hour id's character codes mod 26."""
    return sum(ord(char) for char in hour_id) % 26


def _shift(text: str, shift: int) -> str:
    shifted = []
    for char in text:
        if 'a' <= char <= 'z':
            shifted.append(chr((ord(char) - 97 + shift) % 26 + 97))
        elif 'A' <= char <= 'Z':
            shifted.append(chr((ord(char) - 65 + shift) % 26 + 65))
        else:
            shifted.append(char)
    return ''.join(shifted)


def encode(word: str, hour_id: str) -> str:
    """Obfuscate ``word`` for storage under ``hour_id``."""
    shifted = _shift(word.lower(), key_for(hour_id))
    return base64.b64encode(shifted.encode('utf-8')).decode('ascii')


def decode(payload: str, hour_id: str) -> str:
    """
    Reverse :func:`encode`. Returns the lowercase word.

    Raises:
        DecodeError: If the payload is not valid Base64 text
    """
    if not isinstance(payload, str) or not ENCODED_PAYLOAD_PATTERN.match(payload):
        raise DecodeError(f"Failed to decode word payload for hour {hour_id}: not Base64")
    try:
        shifted = base64.b64decode(payload, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise DecodeError(f"Failed to decode word payload for hour {hour_id}: {e}") from e
    return _shift(shifted, 26 - key_for(hour_id))


def fingerprint(word: str, hour_id: str) -> str:
    """Short radix-36 digest of the word salted with the hour id."""
    return to_base36(abs(string_hash(word.lower() + hour_id)))


def verify_fingerprint(word: str, expected: str, hour_id: str) -> bool:
    """Check ``word`` against a stored fingerprint, ignoring case."""
    return fingerprint(word, hour_id) == expected
