"""Storage keys for pricing matrices.

One encoding everywhere: ``pricing_matrix_`` + standard base64 of the
UTF-8 book size label, after normalization. Reversible and safe for
Persian labels.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional

MATRIX_KEY_PREFIX = "pricing_matrix_"
MAX_BOOK_SIZE_LENGTH = 50

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")


def normalize_book_size(book_size: str) -> str:
    """Strip parenthetical descriptions: ``"رقعی (14×20)"`` -> ``"رقعی"``.

    Returns the stripped input when nothing would be left.
    """
    normalized = _PARENTHETICAL.sub("", book_size).strip()
    return normalized or book_size.strip()


def encode_size_key(book_size: str) -> str:
    encoded = base64.b64encode(normalize_book_size(book_size).encode("utf-8"))
    return MATRIX_KEY_PREFIX + encoded.decode("ascii")


def decode_size_key(setting_key: str) -> Optional[str]:
    """Book size for a matrix key, or None if the key is not one we wrote."""
    if not setting_key.startswith(MATRIX_KEY_PREFIX):
        return None
    safe_key = setting_key[len(MATRIX_KEY_PREFIX):]
    try:
        decoded = base64.b64decode(safe_key, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if not decoded or len(decoded) > MAX_BOOK_SIZE_LENGTH or not decoded.isprintable():
        return None
    return decoded
