from __future__ import annotations

import pytest
import requests
import yaml

from postfeed.aggregator.aggregator import ContentReader, import_feed, read_index
from postfeed.errors import SourceReadError
from postfeed.sources import external as ext_src

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Jane on Dev.to</title>
    <link>https://dev.to/jane</link>
    <item>
      <title>New Post</title>
      <link>https://dev.to/jane/new-post</link>
      <pubDate>Tue, 02 Mar 2021 10:00:00 +0000</pubDate>
      <description>&lt;p&gt;Some &lt;b&gt;bold&lt;/b&gt; claims.&lt;/p&gt;</description>
    </item>
    <item>
      <title>Testing React Hooks</title>
      <link>https://dev.to/jane/testing-react-hooks</link>
      <pubDate>Wed, 01 Jan 2020 10:00:00 +0000</pubDate>
      <description>Already listed.</description>
    </item>
    <item>
      <link>https://dev.to/jane/untitled</link>
    </item>
  </channel>
</rss>
"""


class FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(content=RSS, status=200):
        def _get(url, headers=None, timeout=None):
            calls.append({"url": url, "headers": headers, "timeout": timeout})
            return FakeResponse(content, status)

        monkeypatch.setattr(ext_src.requests, "get", _get)
        return calls

    return install


def test_fetch_feed_builds_external_items(fake_get):
    calls = fake_get()
    items = ext_src.fetch_feed("https://dev.to/feed/jane", "Dev.to", "test-agent")
    assert calls[0]["headers"]["User-Agent"] == "test-agent"
    assert calls[0]["timeout"] == 20
    assert [it["title"] for it in items] == ["New Post", "Testing React Hooks"]
    assert items[0] == {
        "title": "New Post",
        "source": "Dev.to",
        "url": "https://dev.to/jane/new-post",
        "published": "2021-03-02",
        "description": "Some bold claims.",
    }


def test_fetch_feed_http_error_is_source_read_error(fake_get):
    fake_get(status=503)
    with pytest.raises(SourceReadError, match="cannot fetch"):
        ext_src.fetch_feed("https://dev.to/feed/jane", "Dev.to", "ua")


def test_fetch_feed_garbage_is_source_read_error(fake_get):
    fake_get(content=b"<<<not a feed")
    with pytest.raises(SourceReadError, match="cannot parse"):
        ext_src.fetch_feed("https://dev.to/feed/jane", "Dev.to", "ua")


def test_import_feed_appends_only_new_titles(content_dir, fake_get):
    fake_get()
    added = import_feed(content_dir, "https://dev.to/feed/jane", "Dev.to", "ua")
    assert [it["title"] for it in added] == ["New Post"]

    items = read_index(content_dir)
    assert items[0] == {"post": "hello-world"}
    assert items[-1]["title"] == "New Post"
    assert len(items) == 6

    entries = ContentReader(content_dir).load_all_entries()
    assert entries[-1]["kind"] == "external_standalone"
    assert entries[-1]["published"] == "2021-03-02"

    assert import_feed(content_dir, "https://dev.to/feed/jane", "Dev.to", "ua") == []


def test_import_feed_writes_readable_yaml(content_dir, fake_get):
    fake_get()
    import_feed(content_dir, "https://dev.to/feed/jane", "Dev.to", "ua")
    data = yaml.safe_load((content_dir / "entries.yml").read_text(encoding="utf-8"))
    assert list(data) == ["entries"]
    assert not (content_dir / "entries.tmp").exists()


def test_long_description_is_truncated():
    text = ext_src._plain_text("<p>" + "word " * 200 + "</p>")
    assert len(text) <= ext_src.DESCRIPTION_LIMIT
    assert text.endswith("…")


def test_import_feed_skips_titles_that_match_local_slugs(content_dir, fake_get, caplog):
    clashing = RSS.replace(b"<title>New Post</title>", b"<title>hello-world</title>")
    fake_get(content=clashing)
    assert import_feed(content_dir, "https://dev.to/feed/jane", "Dev.to", "ua") == []
    assert "skipping 'hello-world'" in caplog.text

    entries = ContentReader(content_dir).load_all_entries()
    assert len(entries) == 5


def test_import_feed_skips_titles_that_match_series_slugs(content_dir, fake_get):
    fake_get(content=RSS.replace(b"<title>New Post</title>", b"<title>building-a-blog</title>"))
    assert import_feed(content_dir, "https://dev.to/feed/jane", "Dev.to", "ua") == []
    assert len(read_index(content_dir)) == 5
