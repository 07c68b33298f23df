from __future__ import annotations
import logging
from typing import List

import feedparser
import requests
from bs4 import BeautifulSoup

from postfeed.errors import SourceReadError
from postfeed.util.dates import normalize_published
from .base import EntryKind, ExternalStandalonePost, ExternalSeries, ExternalSeriesPart

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 280


def _require(item: dict, field: str, where: str) -> str:
    value = item.get(field)
    if not value:
        raise SourceReadError(f"{where}: missing {field!r}")
    return str(value)


def _published(value, where: str):
    try:
        return normalize_published(value)
    except ValueError as e:
        raise SourceReadError(f"{where}: {e}") from e


def load_external(item: dict):
    """Build an external post or series from an inline `entries.yml` item.

    item: {title, source, description?, url?, published?, parts?}
    - With `parts` it is an external series; each part needs {title, url}.
    - Without `parts` it is a single external post and needs `url`.
    """
    title = _require(item, "title", "external entry")
    where = f"external entry {title!r}"
    source = _require(item, "source", where)
    if "slug" in item:
        raise SourceReadError(f"{where}: external entries are keyed by title and take no slug")

    if "parts" in item:
        raw_parts = item.get("parts") or []
        if not isinstance(raw_parts, list) or not raw_parts:
            raise SourceReadError(f"{where}: 'parts' must be a non-empty list")
        parts: List[ExternalSeriesPart] = []
        for i, p in enumerate(raw_parts, start=1):
            if not isinstance(p, dict):
                raise SourceReadError(f"{where}: part {i} is not a mapping")
            part_where = f"{where} part {i}"
            parts.append(ExternalSeriesPart(
                title=_require(p, "title", part_where),
                url=_require(p, "url", part_where),
                published=_published(p.get("published"), part_where),
            ))
        return ExternalSeries(
            kind=EntryKind.EXTERNAL_SERIES.value,
            title=title,
            description=item.get("description") or "",
            source=source,
            parts=parts,
        )

    return ExternalStandalonePost(
        kind=EntryKind.EXTERNAL_STANDALONE.value,
        title=title,
        description=item.get("description") or "",
        published=_published(item.get("published"), where),
        source=source,
        url=_require(item, "url", where),
    )


def _plain_text(html: str) -> str:
    text = BeautifulSoup(html or "", "html.parser").get_text(" ", strip=True)
    if len(text) > DESCRIPTION_LIMIT:
        text = text[: DESCRIPTION_LIMIT - 1].rstrip() + "…"
    return text


def fetch_feed(feed_url: str, source: str, ua: str, *, timeout: int = 20) -> List[dict]:
    """Read an RSS/Atom feed of posts published on another platform and
    return them as inline external-post items, newest first as the feed
    lists them.
    """
    headers = {"User-Agent": ua, "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9,*/*;q=0.8"}
    try:
        r = requests.get(feed_url, headers=headers, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceReadError(f"cannot fetch {feed_url}: {e}") from e

    d = feedparser.parse(r.content)
    if d.bozo and not d.entries:
        raise SourceReadError(f"cannot parse feed {feed_url}: {d.bozo_exception}")

    items = []
    for e in d.entries or []:
        title = getattr(e, "title", None)
        url = getattr(e, "link", None)
        if not title or not url:
            logger.warning("skipping feed entry without title or link in %s", feed_url)
            continue
        published = getattr(e, "published", getattr(e, "updated", "")) or ""
        try:
            published = normalize_published(published)
        except ValueError:
            logger.warning("unreadable date %r for %r; importing as unpublished", published, title)
            published = None
        items.append({
            "title": title,
            "source": source,
            "url": url,
            "published": published,
            "description": _plain_text(getattr(e, "summary", "")),
        })
    return items
