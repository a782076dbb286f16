"""Write-side normalization of package fields."""

import re
import unicodedata
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from turismo.core.exceptions import ValidationError
from turismo.services.pricing import HUNDRED, ZERO, to_decimal
from turismo.timeutils import as_utc

VALID_CITIES = ("Puno", "Cusco", "Lima", "Arequipa", "Other")
VALID_CURRENCIES = ("PEN", "USD", "EUR")
DEFAULT_CITY = "Puno"
DEFAULT_CURRENCY = "PEN"

MAX_MEDIA = 60
MAX_CAPTION = 500
MAX_SLUG = 220
SLUG_FALLBACK = "paquete"

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def clean_string_list(value: Any) -> List[str]:
    """Accept a list or newline separated text; trim, drop blanks, dedupe keeping order."""
    if isinstance(value, str):
        raw = value.splitlines()
    elif isinstance(value, (list, tuple)):
        raw = value
    else:
        return []
    return _dedupe(s for s in (str(x if x is not None else "").strip() for x in raw) if s)


def normalize_languages(value: Any) -> List[str]:
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw = value
    else:
        return []
    return _dedupe(s for s in (str(x if x is not None else "").strip().lower() for x in raw) if s)


def normalize_media(value: Any) -> List[Dict[str, str]]:
    """Coerce to ``[{type, url, caption?}]``.

    Entries without a url are dropped, duplicates by (type, lowercased url)
    keep the first occurrence and the list is capped at MAX_MEDIA.
    Running it on its own output returns the same list.
    """
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    out: List[Dict[str, str]] = []
    seen = set()
    for item in value:
        if hasattr(item, "model_dump"):
            item = item.model_dump(exclude_none=True)
        if not isinstance(item, dict):
            continue
        media_type = "video" if item.get("type") == "video" else "image"
        url = str(item.get("url") or "").strip()
        if not url:
            continue
        key = (media_type, url.lower())
        if key in seen:
            continue
        seen.add(key)
        entry = {"type": media_type, "url": url}
        caption = item.get("caption")
        if caption:
            entry["caption"] = str(caption)[:MAX_CAPTION]
        out.append(entry)
        if len(out) >= MAX_MEDIA:
            break
    return out


def to_absolute(base: str, url: Optional[str]) -> Optional[str]:
    if not url:
        return url
    if re.match(r"^https?://", url, re.IGNORECASE):
        return url
    path = url if url.startswith("/") else f"/{url}"
    return f"{base.rstrip('/')}{path}"


def absolute_media(base: str, media: Optional[List[Dict[str, str]]]) -> List[Dict[str, str]]:
    return [{**m, "url": to_absolute(base, m.get("url"))} for m in (media or [])]


def slugify(text: str) -> str:
    """Lowercase ASCII slug; accents are folded (``Titicaca Día`` -> ``titicaca-dia``)."""
    folded = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_STRIP.sub("-", folded.lower()).strip("-")
    return slug[:MAX_SLUG].rstrip("-")


def slug_base(title: str) -> str:
    return slugify(title) or SLUG_FALLBACK


def slug_candidate(base: str, attempt: int) -> str:
    """``base`` for the first attempt, then ``base-2``, ``base-3``..."""
    if attempt <= 1:
        return base
    suffix = f"-{attempt}"
    return f"{base[:MAX_SLUG - len(suffix)].rstrip('-')}{suffix}"


def normalize_currency(value: Any, *, strict: bool = False) -> str:
    currency = str(value or "").strip().upper()
    if currency in VALID_CURRENCIES:
        return currency
    if strict:
        raise ValidationError(
            f"Invalid currency. Must be one of: {', '.join(VALID_CURRENCIES)}", field="currency"
        )
    return DEFAULT_CURRENCY


def normalize_city(value: Any, *, strict: bool = False) -> str:
    city = str(value or "").strip()
    for valid in VALID_CITIES:
        if city.lower() == valid.lower():
            return valid
    if strict:
        raise ValidationError(
            f"Invalid city. Must be one of: {', '.join(VALID_CITIES)}", field="city"
        )
    return DEFAULT_CITY


def clamp_percent(value: Any) -> Optional[Decimal]:
    pct = to_decimal(value)
    if pct is None:
        return None
    return max(ZERO, min(HUNDRED, pct))


def clamp_non_negative(value: Any) -> Optional[Decimal]:
    amount = to_decimal(value)
    if amount is None:
        return None
    return max(ZERO, amount)


def order_window(
    start: Optional[datetime], end: Optional[datetime]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """UTC-normalized ``(start, end)``, swapped when inverted."""
    start, end = as_utc(start), as_utc(end)
    if start is not None and end is not None and start > end:
        return end, start
    return start, end
