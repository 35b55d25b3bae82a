"""Shared parsing utilities for project file ingestion."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
import hashlib
import math
import re

_NON_NUMERIC = re.compile(r"[^-0-9.]")


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, (Path, str)):
        return Path(source).read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def compute_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def parse_quantity(value: object) -> float:
    """Parse a survey number, accepting Turkish/European formatting.

    ``"1.234,5"`` and ``"1234,5"`` both give ``1234.5``; a lone dot is a
    decimal point, repeated dots are thousands separators. Unparseable text
    gives ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return 0.0 if math.isnan(number) else number
    s = str(value).strip()
    if not s or s.upper() == "NAN":
        return 0.0
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    if "," in s or s.count(".") > 1:
        s = s.replace(".", "").replace(",", ".")
    try:
        # plain and scientific notation ("1.5e3") parse directly
        result = float(s)
    except ValueError:
        try:
            result = float(_NON_NUMERIC.sub("", s))
        except ValueError:
            return 0.0
    if not math.isfinite(result):
        return 0.0
    return -result if negative else result


def parse_optional_quantity(value: object) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_quantity(value)
