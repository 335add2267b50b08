# export_urls/utils/formatting.py
from babel.numbers import format_decimal
from datetime import datetime
from typing import Optional
import pytz

# Unités binaires, de la plus grande à la plus petite
SIZE_UNITS = [
    ("TB", 1024 ** 4),
    ("GB", 1024 ** 3),
    ("MB", 1024 ** 2),
    ("KB", 1024),
    ("B", 1),
]

def format_number(value: float, decimals: int = 2) -> str:
    pattern = "#,##0." + "0" * decimals if decimals else "#,##0"
    return format_decimal(value, format=pattern, locale="en_US")

def size_format(num_bytes: int, decimals: int = 2) -> str:
    """Human-readable size, e.g. ``1.50 KB`` or ``1,023.00 KB``."""
    if num_bytes == 0:
        return format_number(0, decimals) + " B"
    for unit, magnitude in SIZE_UNITS:
        if num_bytes >= magnitude:
            return f"{format_number(num_bytes / magnitude, decimals)} {unit}"
    return format_number(num_bytes, decimals) + " B"

def local_now(tz_name: str = "UTC", now: Optional[datetime] = None) -> datetime:
    tz = pytz.timezone(tz_name)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz)

def format_log_timestamp(dt: datetime) -> str:
    return dt.strftime("[%Y-%m-%d %H:%M:%S]")

def export_filename(kind: str, dt: datetime) -> str:
    return f"{kind}-urls-{dt.strftime('%Y-%m-%d-%H-%M')}.csv"
