"""Byte-to-text decoding for feed payloads of unknown encoding."""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

_XML_DECL_ENCODING_RE = re.compile(rb"""<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z0-9._:-]+)["']""")
_CHARSET_RE = re.compile(r"""charset\s*=\s*["']?([A-Za-z0-9._:-]+)""", re.IGNORECASE)


def detect_encoding(content: bytes, content_type: str | None = None) -> str:
    """Pick an encoding: XML declaration first, then the Content-Type charset, then UTF-8."""
    match = _XML_DECL_ENCODING_RE.search(content[:100])
    if match:
        candidate = match.group(1).decode("ascii")
        if _is_known(candidate):
            return candidate
        logger.warning("Unknown XML declaration encoding %r", candidate)

    if content_type:
        match = _CHARSET_RE.search(content_type)
        if match and _is_known(match.group(1)):
            return match.group(1)

    return DEFAULT_ENCODING


def decode_body(content: bytes, content_type: str | None = None) -> str:
    """Decode a feed body, replacing undecodable bytes and dropping a leading BOM."""
    encoding = detect_encoding(content, content_type)
    text = content.decode(encoding, errors="replace")
    return text.lstrip("\ufeff")


def _is_known(encoding: str) -> bool:
    # bytes.decode rejects codecs such as hex or base64 that are not text encodings
    try:
        b"".decode(encoding)
    except LookupError:
        return False
    return True
