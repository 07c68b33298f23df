"""Classification and list/detail projection of raw feed entries.

Everything here is pure: no I/O, and input records are never mutated or
shared with the returned views.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from postfeed.errors import AmbiguousEntryError, DuplicateEntryError, NotFoundError
from postfeed.sources.base import EntryKind, RawEntry

logger = logging.getLogger(__name__)

OUTPUT_FIELD = "output"

_KINDS = {
    (False, False): EntryKind.LOCAL_STANDALONE,
    (False, True): EntryKind.LOCAL_SERIES,
    (True, False): EntryKind.EXTERNAL_STANDALONE,
    (True, True): EntryKind.EXTERNAL_SERIES,
}


def is_external(entry: dict) -> bool:
    return "source" in entry


def has_parts(entry: dict) -> bool:
    parts = entry.get("parts")
    return isinstance(parts, list) and len(parts) > 0


def _describe(entry) -> str:
    if not isinstance(entry, dict):
        return repr(entry)
    return repr(entry.get("slug") or entry.get("title") or sorted(entry))


def classify(entry: dict) -> EntryKind:
    """Assign exactly one of the four entry kinds to a raw record.

    The two questions ("is it external?", "is it a series?") are answered
    independently, so asking them in either order gives the same kind. A
    `kind` tag set by the reader must agree with the record's shape.
    """
    if not isinstance(entry, dict):
        raise AmbiguousEntryError(f"entry {entry!r} is not a record")
    external = is_external(entry)
    series = has_parts(entry)

    if "parts" in entry and not series:
        raise AmbiguousEntryError(f"entry {_describe(entry)} has an empty or invalid 'parts'")
    if external and "slug" in entry:
        raise AmbiguousEntryError(f"entry {_describe(entry)} has both a source and a local slug")
    if not external and not entry.get("slug"):
        raise AmbiguousEntryError(f"entry {_describe(entry)} has neither a source nor a slug")
    if external and not entry.get("title"):
        raise AmbiguousEntryError(f"external entry {_describe(entry)} has no title")

    kind = _KINDS[(external, series)]
    tag = entry.get("kind")
    if tag is not None:
        try:
            tagged = EntryKind(tag)
        except ValueError:
            raise AmbiguousEntryError(f"entry {_describe(entry)} has unknown kind {tag!r}") from None
        if tagged is not kind:
            raise AmbiguousEntryError(
                f"entry {_describe(entry)} is tagged {tagged.value} but looks like {kind.value}"
            )
    return kind


def render_key(entry: dict) -> str:
    """Stable list key: slug for local entries, title for external ones."""
    if is_external(entry):
        return entry["title"]
    return entry["slug"]


def _rebuild(value, omit: Sequence[str] = ()):
    # new containers all the way down so views never alias the reader's records
    if isinstance(value, dict):
        return {k: _rebuild(v) for k, v in value.items() if k not in omit}
    if isinstance(value, list):
        return [_rebuild(v) for v in value]
    return value


def _list_entry(entry: dict, kind: EntryKind) -> dict:
    if kind is EntryKind.LOCAL_STANDALONE:
        return _rebuild(entry, omit=(OUTPUT_FIELD,))
    if kind is EntryKind.LOCAL_SERIES:
        view = _rebuild(entry, omit=("parts",))
        view["parts"] = [_rebuild(p, omit=(OUTPUT_FIELD,)) for p in entry["parts"]]
        return view
    return _rebuild(entry)


def list_view(entries: Sequence[RawEntry]) -> List[dict]:
    """Project raw entries for the feed index.

    Same length and order as the input. Compiled output is left out of
    local posts and of every local series part; nothing else is dropped.
    One malformed record fails the whole call.
    """
    views = []
    keys = set()
    for index, entry in enumerate(entries):
        try:
            kind = classify(entry)
        except AmbiguousEntryError:
            logger.error("cannot classify entry #%d %s; aborting", index, _describe(entry))
            raise
        key = render_key(entry)
        if key in keys:
            logger.error("entry #%d reuses key %r; aborting", index, key)
            raise DuplicateEntryError(f"more than one entry is keyed {key!r}")
        keys.add(key)
        views.append(_list_entry(entry, kind))
    return views


def detail_view(entries: Sequence[RawEntry], slug: str, part_slug: Optional[str] = None) -> dict:
    """Full record, compiled output included, for a post or a series part.

    A series slug without a part slug resolves to the first part. External
    entries have no detail page here.
    """
    for entry in entries:
        kind = classify(entry)
        if kind is EntryKind.LOCAL_STANDALONE and entry["slug"] == slug and part_slug is None:
            return _rebuild(entry)
        if kind is EntryKind.LOCAL_SERIES and entry["slug"] == slug:
            parts = entry["parts"]
            if part_slug is None:
                number = 1
            else:
                number = next((i for i, p in enumerate(parts, start=1) if p["slug"] == part_slug), None)
                if number is None:
                    raise NotFoundError(f"series {slug!r} has no part {part_slug!r}")
            detail = _rebuild(parts[number - 1])
            detail.update(
                series_slug=entry["slug"],
                series_title=entry["title"],
                part_number=number,
                part_count=len(parts),
            )
            return detail
    if part_slug is None:
        raise NotFoundError(f"no post {slug!r}")
    raise NotFoundError(f"no series {slug!r}")
