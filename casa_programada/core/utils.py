import math
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

DEFAULT_PAGE_SIZE = 10


def mask_email(email: str) -> str:
    """
    Masks an email address for log output.
    Format: jo***@domain.com
    """
    if not email or "@" not in email:
        return "***"
    user, domain = email.split("@", 1)
    return f"{user[:2]}***@{domain}"


def format_iso_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """
    Formats a stored timestamp the way the front-end expects it.
    Format: YYYY-MM-DDTHH:MM:SS.000Z
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def to_float(value: object) -> float:
    """Coerces a stored numeric column to float; NULL and garbage become 0.0."""
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_page(page: int, page_size: int) -> Tuple[int, int]:
    """Clamps 1-indexed page and page size to usable values."""
    page = page if page and page >= 1 else 1
    page_size = page_size if page_size and page_size >= 1 else DEFAULT_PAGE_SIZE
    return page, page_size


def build_pagination(total: int, page: int, page_size: int) -> Dict[str, int]:
    return {
        "total": total,
        "pagina": page,
        "limite": page_size,
        "totalPaginas": math.ceil(total / page_size),
    }


def contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere. Wildcards inside text are escaped with a backslash."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
