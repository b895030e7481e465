"""Development server for Hedera.

Serves the built site for local preview and keeps it current:
- Performs one full build on start.
- Serves the destination tree over HTTP in a background thread.
- Watches the source tree and re-renders only the file that changed.

Single-file rebuilds reuse the site model of the initial build; a post added
while serving is rendered to disk but appears in listings only after the
next full build.

Key classes:
- DevServer: Main class for running the development server.
- Debouncer: Coalesces bursts of change events into one rebuild.
- _ChangeHandler: File system event handler feeding the debouncer.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections.abc import Callable
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .build import BuildContext, build_site
from .config import SiteConfig
from .errors import FrontMatterError
from .extractors import read_front_matter
from .utils import has_hidden_part, is_within

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.1

# Read-only events such as opened and closed_no_write never trigger a rebuild
WATCHED_EVENTS = (EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED)


class _PreviewHandler(SimpleHTTPRequestHandler):
    """Static file handler that disables caching and logs through logging."""

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def log_message(self, format, *args):  # noqa: A002 - signature from base class
        logger.debug("%s - %s", self.address_string(), format % args)


class Debouncer:
    """Runs a callback once a burst of triggers has gone quiet.

    There is a single pending slot: each trigger cancels the pending timer
    and starts a new one, so only the latest arguments fire.

    Attributes:
        delay: Quiet period in seconds.
        callback: Called with the latest (src, dst) pair.
    """

    def __init__(
        self,
        callback: Callable[[Path, Path], None],
        delay: float = DEBOUNCE_SECONDS,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.callback = callback
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    def trigger(self, src: Path, dst: Path) -> None:
        """Schedule callback(src, dst), replacing any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(
                self.delay, self._fire, args=(self._generation, src, dst)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, generation: int, src: Path, dst: Path) -> None:
        with self._lock:
            # A newer trigger superseded this timer after it expired
            if generation != self._generation:
                return
            self._timer = None
        self.callback(src, dst)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class DevServer:
    """Development server with incremental rebuilds.

    Attributes:
        config: Site configuration with the preview base URL applied.
        context: BuildContext of the initial full build.
        debouncer: Debouncer driving single-file rebuilds.
    """

    def __init__(self, config: SiteConfig, debounce_seconds: float = DEBOUNCE_SECONDS):
        """Initialize the development server.

        Args:
            config: Site configuration as loaded from ``_config.yml``.
            debounce_seconds: Quiet period before a change is rebuilt.
        """
        self.config = config.with_serve_baseurl()
        self.context = BuildContext.create(self.config)
        self.debouncer = Debouncer(self.rebuild_file, delay=debounce_seconds)
        self._observer: Observer | None = None
        self._httpd: ThreadingHTTPServer | None = None
        self._rebuild_lock = threading.Lock()

    def start(self) -> None:  # pragma: no cover - integration path
        build_site(self.config, self.context)
        threading.Thread(target=self._start_http, daemon=True).start()
        self._start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        self.debouncer.cancel()
        if self._observer:
            self._observer.stop()
            self._observer.join()
        if self._httpd:
            self._httpd.shutdown()

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler = functools.partial(_PreviewHandler, directory=str(self.config.destination))
        self._httpd = ThreadingHTTPServer((self.config.host, self.config.port), handler)
        logger.info(
            "Listening at http://%s:%d", self.config.host or "localhost", self.config.port
        )
        self._httpd.serve_forever()

    def _start_watcher(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        observer.schedule(handler, str(self.config.source), recursive=True)
        posts = self.config.posts
        if posts.is_dir() and not is_within(posts, self.config.source):
            observer.schedule(handler, str(posts), recursive=True)
        observer.start()
        self._observer = observer

    def classify(self, path: Path) -> Path | None:
        """Resolve the destination for a changed source file.

        Args:
            path: Changed file.

        Returns:
            Destination path, or None if the change should be ignored.
        """
        config = self.config
        path = path.resolve()
        if is_within(path, config.destination):
            return None
        resolver = self.context.resolver
        is_post = resolver.is_post(path)
        if not is_post and has_hidden_part(path, config.source):
            return None
        try:
            _, front = read_front_matter(path, config.is_markdown(path))
        except (FrontMatterError, OSError):
            # Likely mid-write or deleted
            return None
        return resolver.destination_for(path, front)

    def rebuild_file(self, src: Path, dst: Path) -> None:
        """Re-render one file; failures are logged and never raised."""
        logger.info("%s => %s", src, self.context.pipeline.output_path(src, dst))
        with self._rebuild_lock:
            try:
                self.context.pipeline.convert(src, dst, self.context.globals())
            except Exception as exc:
                logger.error("Error: %s", exc)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in WATCHED_EVENTS:
            return
        path = Path(getattr(event, "dest_path", "") or event.src_path)
        dst = self.server.classify(path)
        if dst is None:
            return
        self.server.debouncer.trigger(path.resolve(), dst)
