"""Lenient input coercion for admin-entered values.

Unparseable input never fails: prices fall back to 0, lists to empty.
"""

import math
import re
from typing import Any, Optional, Union
from urllib.parse import urlparse

from src.schemas.product import DraftField

# Leading numeric prefix: "12.5 usd" reads as 12.5
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*(\d+)")
_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_URL = re.compile(r"https?://\S+")

VIDEO_EXTENSIONS = (".mp4", ".mov", ".webm", ".m4v")


def parse_price(value: Union[str, float, int, None]) -> float:
    """Parse a price; non-numeric input, NaN and infinities become 0.0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return 0.0
        number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_tags(text: str) -> tuple[str, ...]:
    """Comma-split, trim, drop empty entries."""
    return tuple(tag.strip() for tag in text.split(",") if tag.strip())


def parse_stock(text: str) -> str:
    """Stock quantity as a digit string; anything unreadable is "0"."""
    match = _INT_PREFIX.match(text)
    if not match:
        return "0"
    return str(int(match.group(1)))


def normalize_hex(text: str) -> str:
    """``ffd700`` → ``#FFD700``; non-hex input is kept as typed."""
    value = text.strip()
    match = _HEX_COLOR.match(value)
    if not match:
        return value
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.upper()}"


def coerce_field(field: DraftField, text: str) -> Any:
    """Convert raw text into the value stored for a top-level field."""
    if field == DraftField.BASE_PRICE:
        return parse_price(text)
    if field == DraftField.TAGS:
        return parse_tags(text)
    return text.strip()


def is_video_url(url: str) -> bool:
    return urlparse(url).path.lower().endswith(VIDEO_EXTENSIONS)


def split_media_urls(text: Optional[str]) -> tuple[list[str], list[str]]:
    """Pull http(s) URLs out of text, split into (images, videos)."""
    images: list[str] = []
    videos: list[str] = []
    for url in _URL.findall(text or ""):
        (videos if is_video_url(url) else images).append(url)
    return images, videos
