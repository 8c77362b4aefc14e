from __future__ import annotations

import base64
import hashlib
import re
import time
from datetime import datetime, timedelta, timezone

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_FRACTION_RE = re.compile(r"[Tt ][0-9:]+\.([0-9]+)")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def b64decode_lenient(value: str) -> bytes:
    """Standard-alphabet base64 with optional padding and embedded whitespace."""
    compact = "".join(value.split())
    padding = "=" * (-len(compact) % 4)
    return base64.b64decode(compact + padding, validate=True)


def parse_hex(value: str) -> bytes:
    """Decode hex text with an optional ``0x`` prefix."""
    digits = value[2:] if value.startswith(("0x", "0X")) else value
    if len(digits) % 2 or not _HEX_RE.match(digits):
        raise ValueError(f"Invalid hex string: {value!r}")
    return bytes.fromhex(digits)


def expiry_after(seconds: int) -> int:
    """Unix timestamp ``seconds`` from now, used as transaction expiry."""
    return int(time.time()) + seconds


def millis_to_rfc3339(millis: int) -> str:
    moment = _EPOCH + timedelta(milliseconds=millis)
    text = moment.isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def rfc3339_to_millis(value: str) -> int:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        raise ValueError(f"Timestamp {value!r} has no timezone offset")
    fraction = _FRACTION_RE.search(text)
    if fraction and fraction.group(1)[3:].strip("0"):
        raise ValueError(f"Timestamp {value!r} is more precise than milliseconds")
    delta = moment - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
