"""
Helper Functions

Contains utility functions used throughout the application.
"""

from typing import Dict


def get_user_identity(request_obj) -> Dict[str, str]:
    """Extract user identity information from request."""
    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'
    user_agent = getattr(getattr(request_obj, 'user_agent', None), 'string', None)

    return {
        'user_ip': user_ip,
        'user_agent': user_agent or 'unknown',
    }


def string_hash(text: str) -> int:
    """
    Classic 32-bit rolling string hash (``h = h * 31 + c``), signed.

    Non-cryptographic. Used for seed-to-index selection and word
    fingerprints, so the value must never change between releases.
    """
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


_BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def to_base36(number: int) -> str:
    """Render a non-negative integer in lowercase radix 36."""
    if number < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))
