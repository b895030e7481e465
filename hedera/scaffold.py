"""Starter content for new Hedera projects.

Functions:
    generate_scaffold: Write a runnable starter site into a directory.
    new_post: Create a dated, empty Markdown post.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

DEFAULT_POST_NAME = "new-post"

CONFIG_YML = """\
name: Your New Hedera Site
description: A static site built with Hedera
"""

LAYOUT_DEFAULT = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <link rel="stylesheet" href="/css/site.css" media="all">
    <title>{{ page.title or site.title }}</title>
</head>
<body>
{{ content }}
</body>
</html>
"""

LAYOUT_POST = """\
---
layout: default
---
<h2>{{ page.title }}</h2>
<p class="meta">{{ page.date | date_to_string }}</p>

<div class="post">
{{ content }}
</div>
"""

CSS_SITE = """\
body {
    font-family: sans-serif;
}

h1 {
    color: darkgreen;
}
"""

WELCOME_POST = """\
---
layout: post
title: "Welcome to Hedera!"
---

You'll find this post in your `_posts` directory. Edit it and rebuild
(or run `hedera serve`) to see your changes.
To add new posts, add a file to `_posts` named `YYYY-MM-DD-name-of-post.md`,
or run `hedera newpost name-of-post`.

Code blocks are highlighted:

```python
def greet(name):
    print(f"Hello, {name}!")
```
"""

INDEX_HTML = """\
---
layout: default
title: Your New Hedera Site
---
<div id="home">
  <h1>Blog Posts</h1>
  <ul class="posts">
    {% for post in site.posts %}
      <li><span>{{ post.date | date_to_string }}</span> &raquo; <a href="{{ post.url }}">{{ post.title }}</a></li>
    {% endfor %}
  </ul>
</div>
"""

RSS_XML = """\
---
layout: nil
---
<?xml version="1.0" encoding="utf-8" ?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
  <channel>
    <title>{{ site.name | xml_escape }}</title>
    <link>{{ site.baseurl | xml_escape }}</link>
    <atom:link rel="self" type="application/rss+xml" href="{{ page.url | xml_escape }}" />
    <description>{{ site.description | xml_escape }}</description>
    <pubDate>{{ site.time | date("%a, %d %b %Y %H:%M:%S %z") }}</pubDate>
    <lastBuildDate>{{ site.time | date("%a, %d %b %Y %H:%M:%S %z") }}</lastBuildDate>
    {% for post in site.posts | limit(25) %}
    <item>
      <title>{{ post.title | xml_escape }}</title>
      <link>{{ post.url | xml_escape }}</link>
      <guid isPermaLink="false">{{ post.url | xml_escape }}</guid>
      <pubDate>{{ post.date | date("%a, %d %b %Y %H:%M:%S %z") }}</pubDate>
      <description>{{ post.content | xml_escape }}</description>
    </item>
    {% endfor %}
  </channel>
</rss>
"""


def generate_scaffold(root: Path, today: datetime | None = None) -> list[Path]:
    """Create the directory structure and files for a new Hedera project.

    Args:
        root: Root directory for the new project; created if missing.
        today: Date used for the welcome post's filename.

    Returns:
        Paths of the files written.
    """
    today = today or datetime.now()
    files = {
        "_config.yml": CONFIG_YML,
        "_layouts/default.html": LAYOUT_DEFAULT,
        "_layouts/post.html": LAYOUT_POST,
        "css/site.css": CSS_SITE,
        f"_posts/{today:%Y-%m-%d}-welcome-to-hedera.md": WELCOME_POST,
        "index.html": INDEX_HTML,
        "rss.xml": RSS_XML,
    }
    written = []
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def new_post(posts_dir: Path, name: str = DEFAULT_POST_NAME, today: datetime | None = None) -> Path:
    """Create an empty dated Markdown post.

    Args:
        posts_dir: Posts directory; created if missing.
        name: Post name used after the date prefix.
        today: Date for the filename prefix.

    Returns:
        Path of the new file.

    Raises:
        FileExistsError: If the post already exists.
    """
    today = today or datetime.now()
    posts_dir.mkdir(parents=True, exist_ok=True)
    path = posts_dir / f"{today:%Y-%m-%d}-{name or DEFAULT_POST_NAME}.md"
    with open(path, "x", encoding="utf-8") as f:
        f.write("---\nlayout: post\ntitle: \"\"\n---\n")
    return path
