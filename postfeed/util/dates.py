from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from dateutil import parser as dateparse


def normalize_published(value) -> Optional[str]:
    """Turn a front-matter/feed date into an ISO `YYYY-MM-DD` string.

    YAML already hands us `date`/`datetime` objects for unquoted dates;
    anything else goes through dateutil. Empty values mean "unpublished".
    Raises ValueError for text dateutil cannot read.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return dateparse.parse(str(value)).date().isoformat()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"unreadable date {value!r}") from e


def format_published(published: Optional[str]) -> str:
    if not published:
        return "Unpublished"
    d = dateparse.parse(published)
    return f"{d:%B} {d.day}, {d.year}"
