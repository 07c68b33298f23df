from __future__ import annotations

from pathlib import Path

import pytest


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write():
    return _write


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """A content tree with one of each entry kind plus a draft, in a
    deliberately non-chronological order."""
    root = tmp_path / "content"
    _write(root / "entries.yml", """\
entries:
  - post: hello-world
  - series: building-a-blog
  - title: Testing React Hooks
    source: Dev.to
    url: https://dev.to/jane/testing-react-hooks
    published: 2020-01-01
    description: Notes on testing hooks.
  - title: Type-safe Forms
    source: Medium
    description: A two-part series.
    parts:
      - title: Schemas
        url: https://medium.com/@jane/schemas
        published: 2019-05-02
      - title: Validation
        url: https://medium.com/@jane/validation
        published: 2019-06-10
  - post: work-in-progress
""")
    _write(root / "posts" / "hello-world.md", """\
---
title: Hello World
description: The first post.
published: 2021-01-01
---
Hello **there**.
""")
    _write(root / "posts" / "work-in-progress.md", """\
---
title: Work in Progress
description: Not out yet.
---
Draft text.
""")
    _write(root / "series" / "building-a-blog" / "index.md", """\
---
title: Building a Blog
description: From zero to deployed.
parts:
  - setup
  - deploy
---
""")
    _write(root / "series" / "building-a-blog" / "setup.md", """\
---
title: Setup
published: 2021-03-05
---
# Setup
""")
    _write(root / "series" / "building-a-blog" / "deploy.md", """\
---
title: Deploy
published: 2021-02-01
---
# Deploy
""")
    return root
