"""
Helpers for data URIs exchanged with the browser
(``data:<mimetype>;base64,<encoded_data>``).
"""
import base64
import binascii
import re
from typing import Tuple

DATA_URI_RE = re.compile(r'^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<data>.*)$', re.DOTALL)


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URI.

    Returns:
        Tuple of (mime_type, payload bytes)

    Raises:
        ValueError: if the string is not a base64 data URI
    """
    if not uri or not uri.startswith("data:"):
        raise ValueError("Expected a data URI starting with 'data:'")

    match = DATA_URI_RE.match(uri.strip())
    if not match:
        raise ValueError("Malformed data URI")

    params = [p for p in match.group("params").split(";") if p]
    if "base64" not in params:
        raise ValueError("Data URI must use base64 encoding")

    payload = re.sub(r'\s+', '', match.group("data"))
    padding_needed = len(payload) % 4
    if padding_needed:
        payload += "=" * (4 - padding_needed)

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e

    mime_type = match.group("mime") or "application/octet-stream"
    return mime_type, data


def to_data_uri(mime_type: str, data: bytes) -> str:
    """Encode bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
