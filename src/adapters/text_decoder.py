"""Decoding of host tool output.

`wsl.exe` writes its console text as UTF-16LE, sometimes with a byte-order
mark. The decoder is strict: bytes that are not valid UTF-16 raise
`DecodeError` instead of being replaced.
"""

from __future__ import annotations

import codecs

from core.domain.errors import DecodeError


def decode_wide_output(raw: bytes) -> str:
    """Decode UTF-16 console output; a BOM, when present, picks the byte order."""

    encoding = "utf-16-le"
    payload = raw
    if raw.startswith(codecs.BOM_UTF16_LE):
        payload = raw[len(codecs.BOM_UTF16_LE):]
    elif raw.startswith(codecs.BOM_UTF16_BE):
        encoding = "utf-16-be"
        payload = raw[len(codecs.BOM_UTF16_BE):]

    try:
        return payload.decode(encoding, errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"host tool output is not valid {encoding.upper()}: {exc}") from exc
