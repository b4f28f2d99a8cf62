"""
data: URI helpers

Syntax: data:[<mediatype>][;base64],<payload>
Example: data:application/octet-stream;base64,AACAvwAA...
"""

import base64
import binascii
from typing import Tuple
from urllib.parse import unquote_to_bytes

from gltfkit.exceptions import InvalidDataURIError

DATA_URI_PREFIX = "data:"
DEFAULT_BASE64_MIME = "application/octet-stream"
DEFAULT_TEXT_MIME = "text/plain;charset=US-ASCII"


def is_data_uri(uri: str) -> bool:
    return bool(uri) and uri.startswith(DATA_URI_PREFIX)


def decode_data_uri(uri: str) -> Tuple[bytes, str]:
    """
    Decode a data: URI into (payload bytes, MIME type).

    When the media type is omitted it defaults to application/octet-stream
    for base64 payloads and text/plain;charset=US-ASCII otherwise.

    Raises:
        InvalidDataURIError: Missing "data:" prefix or comma, or bad base64
    """
    if not is_data_uri(uri):
        raise InvalidDataURIError("invalid data URI: missing 'data:' prefix")

    header, sep, payload = uri[len(DATA_URI_PREFIX):].partition(',')
    if not sep:
        raise InvalidDataURIError("invalid data URI: missing ','")

    is_base64 = header.endswith(';base64')
    mime = header[:-len(';base64')] if is_base64 else header

    if is_base64:
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidDataURIError(f"invalid base64 payload in data URI: {e}") from e
    else:
        data = unquote_to_bytes(payload)

    if not mime:
        mime = DEFAULT_BASE64_MIME if is_base64 else DEFAULT_TEXT_MIME

    return data, mime
