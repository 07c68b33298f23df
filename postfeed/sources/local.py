from __future__ import annotations
import logging
from pathlib import Path
from typing import List

import frontmatter
import yaml
from markdown_it import MarkdownIt

from postfeed.errors import SourceReadError
from postfeed.util.dates import normalize_published
from .base import EntryKind, StandalonePost, Series, SeriesPart

logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark", {"html": True})


def _read_document(path: Path) -> tuple[dict, str]:
    try:
        doc = frontmatter.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SourceReadError(f"cannot read {path}: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise SourceReadError(f"bad front matter in {path}: {e}") from e
    meta = doc.metadata or {}
    if not isinstance(meta, dict):
        raise SourceReadError(f"front matter of {path} is not a mapping")
    return dict(meta), doc.content


def _published(meta: dict, path: Path):
    try:
        return normalize_published(meta.get("published"))
    except ValueError as e:
        raise SourceReadError(f"{path}: {e}") from e


def compile_markdown(text: str) -> str:
    return _md.render(text).strip()


def load_post(content_dir: Path, slug: str) -> StandalonePost:
    path = content_dir / "posts" / f"{slug}.md"
    meta, body = _read_document(path)
    return StandalonePost(
        kind=EntryKind.LOCAL_STANDALONE.value,
        slug=slug,
        title=meta.get("title") or slug,
        description=meta.get("description") or "",
        published=_published(meta, path),
        output=compile_markdown(body),
    )


def load_series(content_dir: Path, slug: str) -> Series:
    """Load a series directory: `index.md` holds the title, description and
    the ordered list of part slugs; every part is `<part>.md` next to it.

    Part order is whatever `parts:` says, never re-sorted by date.
    """
    series_dir = content_dir / "series" / slug
    index_path = series_dir / "index.md"
    meta, _ = _read_document(index_path)

    part_slugs = meta.get("parts") or []
    if not isinstance(part_slugs, list) or not part_slugs:
        raise SourceReadError(f"series {slug!r} lists no parts in {index_path}")

    parts: List[SeriesPart] = []
    seen = set()
    for part_slug in part_slugs:
        part_slug = str(part_slug)
        if part_slug in seen:
            raise SourceReadError(f"series {slug!r} lists part {part_slug!r} twice")
        seen.add(part_slug)
        part_path = series_dir / f"{part_slug}.md"
        part_meta, body = _read_document(part_path)
        parts.append(SeriesPart(
            slug=part_slug,
            title=part_meta.get("title") or part_slug,
            published=_published(part_meta, part_path),
            output=compile_markdown(body),
        ))

    logger.debug("loaded series %s with %d parts", slug, len(parts))
    return Series(
        kind=EntryKind.LOCAL_SERIES.value,
        slug=slug,
        title=meta.get("title") or slug,
        description=meta.get("description") or "",
        published=parts[0]["published"],
        parts=parts,
    )
