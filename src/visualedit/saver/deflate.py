"""Raw DEFLATE compression of HTML sent to the edit API.

Compressed content is marked with a ``rawdeflate,`` prefix followed by
the base64-encoded raw DEFLATE stream, so the server can tell it apart
from plain content.
"""

from __future__ import annotations

import base64
import zlib

DEFLATE_PREFIX = "rawdeflate,"

# Negative window bits: raw stream without zlib header or checksum
_RAW_WBITS = -zlib.MAX_WBITS


def deflate(html: str, level: int = 5) -> str:
    """Compress a string with raw DEFLATE.

    Args:
        html: HTML to deflate.
        level: Compression level, 0-9.

    Returns:
        ``rawdeflate,`` followed by the base64-encoded compressed bytes.
    """
    compressor = zlib.compressobj(level, zlib.DEFLATED, _RAW_WBITS)
    data = compressor.compress(html.encode("utf-8")) + compressor.flush()
    return DEFLATE_PREFIX + base64.b64encode(data).decode("ascii")


def inflate(content: str) -> str:
    """Decompress content produced by ``deflate``.

    Content without the ``rawdeflate,`` prefix is returned unchanged.

    Raises:
        ValueError: If the prefixed payload is not valid base64 DEFLATE data.
    """
    if not content.startswith(DEFLATE_PREFIX):
        return content
    payload = content.removeprefix(DEFLATE_PREFIX)
    try:
        data = base64.b64decode(payload, validate=True)
        return zlib.decompress(data, _RAW_WBITS).decode("utf-8")
    except (ValueError, zlib.error) as e:
        msg = f"Invalid deflated content: {e}"
        raise ValueError(msg) from e
