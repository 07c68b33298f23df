from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional

import yaml

from postfeed.errors import SourceReadError
from postfeed.sources.base import RawEntry
from postfeed.sources import local as local_src
from postfeed.sources import external as ext_src
from postfeed.util.paths import ensure_dir

logger = logging.getLogger(__name__)

INDEX_NAME = "entries.yml"


def read_index(content_dir: Path) -> List[dict]:
    """Items of `entries.yml`. An empty file or an empty `entries:` is an
    empty feed; anything else without an `entries` list is an error.
    """
    index_path = content_dir / INDEX_NAME
    try:
        data = yaml.safe_load(index_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"cannot read content index {index_path}: {e}") from e
    except yaml.YAMLError as e:
        raise SourceReadError(f"bad YAML in {index_path}: {e}") from e
    if data is None:
        return []
    if not isinstance(data, dict) or "entries" not in data:
        raise SourceReadError(f"{index_path}: expected a mapping with an 'entries' list")
    items = data["entries"]
    if items is None:
        return []
    if not isinstance(items, list):
        raise SourceReadError(f"{index_path}: 'entries' must be a list")
    return items


def save_index(content_dir: Path, items: List[dict]):
    ensure_dir(content_dir)
    index_path = content_dir / INDEX_NAME
    tmp = index_path.with_suffix(".tmp")
    tmp.write_text(
        yaml.safe_dump({"entries": items}, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    tmp.replace(index_path)


def _load_item(content_dir: Path, item) -> RawEntry:
    if not isinstance(item, dict):
        raise SourceReadError(f"content index item {item!r} is not a mapping")
    if "post" in item:
        return local_src.load_post(content_dir, str(item["post"]))
    if "series" in item:
        return local_src.load_series(content_dir, str(item["series"]))
    if "source" in item:
        return ext_src.load_external(item)
    raise SourceReadError(f"content index item {item!r} is neither post, series nor external")


class ContentReader:
    """Loads every raw entry of the feed in content-index order.

    With `cache=True` the first successful load is kept and handed back on
    later calls; callers must treat the result as read-only.
    """

    def __init__(self, content_dir: Path, *, cache: bool = False):
        self.content_dir = Path(content_dir)
        self.cache = cache
        self._cached: Optional[List[RawEntry]] = None

    def load_all_entries(self) -> List[RawEntry]:
        if self.cache and self._cached is not None:
            return self._cached

        entries: List[RawEntry] = []
        keys = set()
        for item in read_index(self.content_dir):
            entry = _load_item(self.content_dir, item)
            key = entry.get("slug") or entry.get("title")
            if key in keys:
                raise SourceReadError(f"entry {key!r} appears twice in the content index")
            keys.add(key)
            entries.append(entry)

        logger.info("loaded %d entries from %s", len(entries), self.content_dir)
        if self.cache:
            self._cached = entries
        return entries

    def clear_cache(self):
        self._cached = None


def import_feed(content_dir: Path, feed_url: str, source: str, ua: str) -> List[dict]:
    """Append feed entries not yet in the content index.

    External titles and local slugs share one key space, so a feed item
    whose title is already either one is skipped. Returns the items that
    were added.
    """
    items = read_index(content_dir)
    known = set()
    for it in items:
        if not isinstance(it, dict):
            continue
        if "source" in it:
            known.add(it.get("title"))
        for local_kind in ("post", "series"):
            if local_kind in it:
                known.add(str(it[local_kind]))

    added = []
    for it in ext_src.fetch_feed(feed_url, source, ua):
        if it["title"] in known:
            logger.warning("skipping %r from %s: already in the content index", it["title"], feed_url)
            continue
        known.add(it["title"])
        added.append(it)
    if added:
        save_index(content_dir, items + added)
    logger.info("imported %d of the entries in %s", len(added), feed_url)
    return added
