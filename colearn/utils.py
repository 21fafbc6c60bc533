import math
import secrets
from datetime import date, datetime, timezone


def generate_id(prefix: str) -> str:
    """Generate unique ID with prefix"""
    return f"{prefix}_{secrets.token_hex(8).upper()}"


def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() rounds half to even)"""
    return int(math.floor(value + 0.5))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def iso_now() -> str:
    return utc_now().isoformat()
