import logging
from pathlib import Path
from typing import List, Sequence
from jinja2 import Template
from postfeed.aggregator.normalize import detail_view, has_parts, is_external, render_key
from postfeed.util.dates import format_published
from postfeed.util.paths import ensure_dir

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_BASE_PATH = "/blog"


def base_path(site: dict) -> str:
    """URL prefix of post pages: "/blog", or "" to put them at the site root.

    A missing or null value means the default.
    """
    value = site.get("base_path")
    if value is None:
        value = DEFAULT_BASE_PATH
    value = str(value).strip("/")
    return f"/{value}" if value else ""


def _template(name: str) -> Template:
    return Template((TEMPLATES_DIR / name).read_text(encoding="utf-8"), autoescape=True)


def feed_items(entries: Sequence[dict]) -> List[dict]:
    """Tag list-view entries for the index template.

    External first, then parts: the same two-step check the template relies
    on, so every entry lands in exactly one branch.
    """
    items = []
    for entry in entries:
        if is_external(entry):
            variant = "external_series" if has_parts(entry) else "external_post"
        elif has_parts(entry):
            variant = "series"
        else:
            variant = "post"
        if variant == "external_series":
            date = entry["parts"][0].get("published")
        else:
            date = entry.get("published")
        items.append({
            "key": render_key(entry),
            "variant": variant,
            "entry": entry,
            "date": format_published(date),
        })
    return items


def render_index(entries: Sequence[dict], site: dict) -> str:
    return _template("index.html.j2").render(site=site, base=base_path(site), items=feed_items(entries))


def render_detail(detail: dict, site: dict, parts: Sequence[dict] = ()) -> str:
    return _template("post.html.j2").render(
        site=site,
        base=base_path(site),
        post=detail,
        date=format_published(detail.get("published")),
        parts=parts,
    )


def render_site(entries: Sequence[dict], views: Sequence[dict], out_dir: Path, site: dict) -> List[Path]:
    """Write the static feed.

    Parameters
    ----------
    entries : raw entries as the reader returned them (detail pages).
    views : list view of the same entries (index page).
    out_dir : where `index.html` and `<base_path>/...` pages go.
    site : {title, description, base_path}

    Returns
    -------
    list of written files, index first.
    """
    ensure_dir(out_dir)
    base = out_dir / base_path(site).lstrip("/")
    written = []

    index_path = out_dir / "index.html"
    index_path.write_text(render_index(views, site), encoding="utf-8")
    written.append(index_path)

    for view in views:
        if is_external(view):
            continue
        if has_parts(view):
            for part in view["parts"]:
                detail = detail_view(entries, view["slug"], part["slug"])
                page = base / view["slug"] / part["slug"] / "index.html"
                ensure_dir(page.parent)
                page.write_text(render_detail(detail, site, view["parts"]), encoding="utf-8")
                written.append(page)
        else:
            detail = detail_view(entries, view["slug"])
            page = base / view["slug"] / "index.html"
            ensure_dir(page.parent)
            page.write_text(render_detail(detail, site), encoding="utf-8")
            written.append(page)

    logger.info("wrote %d pages to %s", len(written), out_dir)
    return written
