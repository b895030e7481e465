"""Site configuration for Hedera.

The configuration is read once from ``_config.yml`` in the project root and
turned into an immutable SiteConfig record. Directory settings are resolved
to absolute paths so every later component can compare paths directly.

Key items:
- SiteConfig: Frozen dataclass holding all settings.
- load_config: Parse ``_config.yml`` and apply defaults.
- PERMALINK_STYLES: Canonical permalink keywords and their patterns.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "_config.yml"

PERMALINK_STYLES = {
    "date": "/:categories/:year/:month/:day/:title.html",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "none": "/:categories/:title.html",
}

DEFAULT_MARKDOWN_EXT = ("md", "mkd", "markdown")
DEFAULT_PORT = 4000

_KNOWN_KEYS = {
    "baseurl",
    "title",
    "name",
    "source",
    "destination",
    "posts",
    "data",
    "includes",
    "layouts",
    "permalink",
    "exclude",
    "host",
    "port",
    "limit_posts",
    "markdown_ext",
    "paginate",
    "conversion",
}


@dataclass(frozen=True)
class ConversionRule:
    """External converter for a custom source extension.

    Attributes:
        ext: Output extension (without the leading dot).
        command: Jinja2 template for the shell command; sees ``from`` and ``to``.
    """

    ext: str
    command: str


@dataclass(frozen=True)
class SiteConfig:
    """Immutable site settings.

    Attributes:
        source: Absolute source root.
        destination: Absolute output root.
        posts: Absolute posts directory.
        data: Absolute data directory.
        includes: Absolute includes directory.
        layouts: Absolute layouts directory.
        baseurl: Base URL prepended to every public URL.
        title: Site title (falls back to name).
        name: Site name.
        permalink: Expanded permalink pattern.
        exclude: Path suffixes skipped during the page walk.
        host: Host for the preview server.
        port: Port for the preview server.
        limit_posts: Maximum length of site.posts (0 = unlimited).
        markdown_ext: Extensions (without dot) treated as Markdown.
        paginate: Posts per pagination page (0 = disabled).
        conversion: Mapping of source extension to ConversionRule.
        extra: Any other top-level keys, exposed on the site object.
    """

    source: Path
    destination: Path
    posts: Path
    data: Path
    includes: Path
    layouts: Path
    baseurl: str = ""
    title: str = ""
    name: str = ""
    permalink: str = PERMALINK_STYLES["date"]
    exclude: tuple[str, ...] = ()
    host: str = ""
    port: int = DEFAULT_PORT
    limit_posts: int = 0
    markdown_ext: tuple[str, ...] = DEFAULT_MARKDOWN_EXT
    paginate: int = 0
    conversion: dict[str, ConversionRule] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def is_markdown(self, path: Path) -> bool:
        """Check if a path has one of the configured Markdown extensions."""
        suffix = path.suffix
        return bool(suffix) and suffix[1:] in self.markdown_ext

    def conversion_for(self, path: Path) -> ConversionRule | None:
        """Return the external conversion rule for path, if any."""
        if not path.suffix:
            return None
        return self.conversion.get(path.suffix[1:])

    def is_convertible(self, path: Path) -> bool:
        """Check if a path is rendered rather than copied.

        Markdown, ``.html``, ``.xml`` and conversion-table extensions are
        convertible.
        """
        if self.is_markdown(path):
            return True
        if path.suffix in (".html", ".xml"):
            return True
        return self.conversion_for(path) is not None

    def with_serve_baseurl(self) -> SiteConfig:
        """Return a copy whose baseurl points at the local preview server.

        Only the host part of a non-empty baseurl is replaced.
        """
        if not self.baseurl:
            return self
        parts = urlsplit(self.baseurl)
        netloc = f"{self.host or 'localhost'}:{self.port}"
        baseurl = urlunsplit(
            (parts.scheme or "http", netloc, parts.path, parts.query, parts.fragment)
        )
        return dataclasses.replace(self, baseurl=baseurl)


def load_config(
    project_root: Path,
    source: str | None = None,
    destination: str | None = None,
) -> SiteConfig:
    """Load site configuration from ``_config.yml``.

    Args:
        project_root: Directory containing ``_config.yml``.
        source: Optional override for the ``source`` setting.
        destination: Optional override for the ``destination`` setting.

    Returns:
        SiteConfig with defaults applied and paths resolved.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed.
    """
    config_path = project_root / CONFIG_FILENAME
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    if source:
        loaded["source"] = source
    if destination:
        loaded["destination"] = destination
    return config_from_mapping(loaded, project_root)


def config_from_mapping(raw: dict[str, Any], project_root: Path) -> SiteConfig:
    """Build a SiteConfig from an already parsed mapping.

    Args:
        raw: Parsed configuration mapping.
        project_root: Directory that relative source/destination resolve against.

    Returns:
        SiteConfig with defaults applied and paths resolved.

    Raises:
        ConfigError: If a value has the wrong shape.
    """
    root = project_root.resolve()
    source = (root / _string(raw, "source", ".")).resolve()
    destination = (root / _string(raw, "destination", "_site")).resolve()

    permalink = _string(raw, "permalink", "date")
    permalink = PERMALINK_STYLES.get(permalink, permalink)

    name = _string(raw, "name", "")
    port = _integer(raw, "port", DEFAULT_PORT)
    return SiteConfig(
        source=source,
        destination=destination,
        posts=(source / _string(raw, "posts", "_posts")).resolve(),
        data=(source / _string(raw, "data", "_data")).resolve(),
        includes=(source / _string(raw, "includes", "_includes")).resolve(),
        layouts=(source / _string(raw, "layouts", "_layouts")).resolve(),
        baseurl=_string(raw, "baseurl", ""),
        title=_string(raw, "title", "") or name,
        name=name,
        permalink=permalink,
        exclude=tuple(str(item) for item in (raw.get("exclude") or [])),
        host=_string(raw, "host", ""),
        port=port if port > 0 else DEFAULT_PORT,
        limit_posts=_integer(raw, "limit_posts", 0),
        markdown_ext=_markdown_ext(raw.get("markdown_ext")),
        paginate=_integer(raw, "paginate", 0),
        conversion=_conversion(raw.get("conversion")),
        extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
    )


def _string(raw: dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, (str, int, float)):
        raise ConfigError(f"Config key '{key}' must be a string")
    return str(value)


def _integer(raw: dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Config key '{key}' must be an integer") from exc


def _markdown_ext(value: Any) -> tuple[str, ...]:
    if not value:
        return DEFAULT_MARKDOWN_EXT
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [str(item) for item in value]
    else:
        raise ConfigError("Config key 'markdown_ext' must be a string or list")
    return tuple(item.strip().lstrip(".") for item in items if item.strip())


def _conversion(value: Any) -> dict[str, ConversionRule]:
    """Parse the conversion table, ignoring incomplete entries."""
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("Config key 'conversion' must be a mapping")
    rules: dict[str, ConversionRule] = {}
    for ext, rule in value.items():
        if not isinstance(rule, dict):
            continue
        if "ext" not in rule or "command" not in rule:
            continue
        rules[str(ext).lstrip(".")] = ConversionRule(
            ext=str(rule["ext"]).lstrip("."), command=str(rule["command"])
        )
    return rules
