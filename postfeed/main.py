#!/usr/bin/env python3
import argparse
import json
import logging
from pathlib import Path
import yaml

from postfeed.aggregator.aggregator import ContentReader, import_feed
from postfeed.aggregator.normalize import detail_view, list_view
from postfeed.errors import ConfigError, NotFoundError, PostfeedError
from postfeed.report.render import render_site
from postfeed.util.paths import resolve_dir

logger = logging.getLogger("postfeed")

DEFAULTS = {
    "content_dir": "./content",
    "out_dir": "./public",
    "cache": False,
    "user_agent": "postfeed/0.1",
    "site": {"title": "Posts", "description": "", "base_path": "/blog"},
}


def load_config(config_path: Path) -> dict:
    """Defaults <- config file. A missing file means all defaults.

    Directories come back as absolute Paths resolved against the file's
    directory.
    """
    raw = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {config_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"config {config_path} must be a mapping")
    raw_site = raw.get("site") or {}
    if not isinstance(raw_site, dict):
        raise ConfigError(f"config {config_path}: 'site' must be a mapping")
    cfg = dict(DEFAULTS)
    cfg.update(raw)
    site = dict(DEFAULTS["site"])
    site.update(raw_site)
    cfg["site"] = site

    base = config_path.resolve().parent
    cfg["content_dir"] = resolve_dir(str(cfg["content_dir"]), base)
    cfg["out_dir"] = resolve_dir(str(cfg["out_dir"]), base)
    return cfg


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_build(args, cfg) -> int:
    out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else cfg["out_dir"]
    entries = ContentReader(cfg["content_dir"], cache=cfg["cache"]).load_all_entries()
    written = render_site(entries, list_view(entries), out_dir, cfg["site"])
    print(f"[postfeed] Wrote {len(written)} pages to {out_dir}")
    return 0


def cmd_list(args, cfg) -> int:
    entries = ContentReader(cfg["content_dir"], cache=cfg["cache"]).load_all_entries()
    _print_json(list_view(entries))
    return 0


def cmd_show(args, cfg) -> int:
    entries = ContentReader(cfg["content_dir"], cache=cfg["cache"]).load_all_entries()
    try:
        detail = detail_view(entries, args.slug, args.part)
    except NotFoundError as e:
        print(f"[postfeed] not found: {e}")
        return 1
    _print_json(detail)
    return 0


def cmd_import_feed(args, cfg) -> int:
    added = import_feed(cfg["content_dir"], args.url, args.source, cfg["user_agent"])
    if not added:
        print("[postfeed] Nothing new in feed.")
        return 0
    print(f"[postfeed] Added {len(added)} external posts:")
    for it in added:
        print(f"  - {it['title']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="postfeed", description="Personal post feed builder")
    ap.add_argument("--config", default="config.yml")
    ap.add_argument("--content-dir", default=None, help="override content directory")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("build", help="render the index and every post page")
    p.add_argument("--out-dir", default=None, help="override output directory")
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("list", help="print the feed list view as JSON")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="print one post or series part as JSON")
    p.add_argument("slug")
    p.add_argument("part", nargs="?", default=None, help="series part slug (defaults to part 1)")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("import-feed", help="add posts from another platform's RSS/Atom feed")
    p.add_argument("url")
    p.add_argument("--source", required=True, help="platform name shown as 'Read on <source>'")
    p.set_defaults(func=cmd_import_feed)
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error("%s", e)
        return 2
    if args.content_dir:
        cfg["content_dir"] = Path(args.content_dir).expanduser().resolve()

    try:
        return args.func(args, cfg)
    except PostfeedError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
