"""
Opaque cursor tokens.

Page results carry their `next` key in logical form. When a key has to leave
the process, for example in a query string, it is turned into an opaque
URL-safe token of its order-preserving encoding and parsed back on the way in.
"""

import base64
import binascii
from typing import TypeVar

from .exceptions import DecodeError, InvalidCursorError
from .keys import KeyCodec

K = TypeVar("K")


def encode_cursor(codec: KeyCodec[K], key: K) -> str:
    """Converts a key into an unpadded URL-safe base64 token."""
    return base64.urlsafe_b64encode(codec.encode(key)).rstrip(b"=").decode("ascii")


def decode_cursor(codec: KeyCodec[K], token: str) -> K:
    """
    Parses a token produced by `encode_cursor` back into a key.

    Raises:
        InvalidCursorError: If the token is not base64 or not a valid encoded key
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise InvalidCursorError(token, original_error=e) from e

    try:
        return codec.decode(raw)
    except DecodeError as e:
        raise InvalidCursorError(token, original_error=e) from e
