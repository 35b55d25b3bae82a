"""Central configuration for the metraj checker package."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

BASE_DIR = Path(__file__).resolve().parent.parent
HISTORY_DIR = BASE_DIR / "history"

DEFAULT_TOLERANCE = 0.01
DEFAULT_DECIMAL_PLACES = 3
# floats carry at most 17 significant digits
MAX_DECIMAL_PLACES = 17
DEFAULT_STANDARD_REFERENCE = "TS 500"


@dataclass(slots=True, frozen=True)
class Settings:
    tolerance: float
    decimal_places: int
    standard_reference: str
    history_dir: Path


def _to_float(value: object | None) -> float | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_int(value: object | None) -> int | None:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def _to_path(value: object | None) -> Path | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``METRAJ_*`` environment variables."""

    env = os.environ if env is None else env
    tolerance = _to_float(env.get("METRAJ_TOLERANCE"))
    if tolerance is None or tolerance < 0:
        tolerance = DEFAULT_TOLERANCE
    decimal_places = _to_int(env.get("METRAJ_DECIMAL_PLACES"))
    if decimal_places is None or decimal_places < 0:
        decimal_places = DEFAULT_DECIMAL_PLACES
    decimal_places = min(decimal_places, MAX_DECIMAL_PLACES)
    standard_reference = (env.get("METRAJ_STANDARD_REFERENCE") or "").strip() or DEFAULT_STANDARD_REFERENCE
    history_dir = _to_path(env.get("METRAJ_HISTORY_DIR")) or HISTORY_DIR
    return Settings(
        tolerance=tolerance,
        decimal_places=decimal_places,
        standard_reference=standard_reference,
        history_dir=history_dir,
    )


SETTINGS = load_settings()
