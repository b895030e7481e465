import logging
from pathlib import Path

from hedera.config import load_config
from hedera.server import Debouncer, DevServer, _ChangeHandler


class DummyEvent:
    def __init__(self, path, is_directory=False, event_type="modified"):
        self.src_path = str(path)
        self.is_directory = is_directory
        self.event_type = event_type


class FakeTimer:
    created = []

    def __init__(self, delay, function, args=()):
        self.delay = delay
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class RecordingDebouncer:
    def __init__(self):
        self.calls = []

    def trigger(self, src, dst):
        self.calls.append((src, dst))


def create_project(tmp_path: Path, config_text: str = "name: Blog\n") -> Path:
    project = tmp_path
    (project / "_posts").mkdir()
    (project / "_layouts").mkdir()
    (project / "_config.yml").write_text(config_text, encoding="utf-8")
    (project / "index.md").write_text("# Home\n", encoding="utf-8")
    (project / "_posts" / "2020-03-05-hello.md").write_text(
        "---\ntitle: Hello\n---\nhi\n", encoding="utf-8"
    )
    return project


def test_debouncer_coalesces_bursts():
    FakeTimer.created = []
    fired = []
    debouncer = Debouncer(lambda src, dst: fired.append((src, dst)), delay=0.5, timer_factory=FakeTimer)

    debouncer.trigger(Path("a"), Path("A"))
    debouncer.trigger(Path("b"), Path("B"))
    debouncer.trigger(Path("c"), Path("C"))

    assert len(FakeTimer.created) == 3
    assert [t.cancelled for t in FakeTimer.created] == [True, True, False]
    assert all(t.daemon and t.started and t.delay == 0.5 for t in FakeTimer.created)

    FakeTimer.created[-1].fire()
    assert fired == [(Path("c"), Path("C"))]


def test_debouncer_cancel():
    FakeTimer.created = []
    debouncer = Debouncer(lambda src, dst: None, timer_factory=FakeTimer)
    debouncer.trigger(Path("a"), Path("A"))
    debouncer.cancel()
    assert FakeTimer.created[0].cancelled


def test_debouncer_ignores_superseded_timer():
    FakeTimer.created = []
    fired = []
    debouncer = Debouncer(lambda src, dst: fired.append((src, dst)), timer_factory=FakeTimer)
    debouncer.trigger(Path("a"), Path("A"))
    debouncer.trigger(Path("b"), Path("B"))
    first, second = FakeTimer.created

    # The first timer expired before the second trigger could cancel it
    first.fire()
    assert fired == []

    debouncer.cancel()
    assert second.cancelled

    second.fire()
    assert fired == []


def test_dev_server_uses_preview_baseurl(tmp_path):
    project = create_project(tmp_path, "baseurl: http://example.com/blog\nport: 4001\n")
    server = DevServer(load_config(project))
    assert server.config.baseurl == "http://localhost:4001/blog"
    assert server.context.config is server.config


def test_classify_pages_and_posts(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    config = server.config

    assert server.classify(config.source / "index.md") == config.destination / "index.html"
    post = config.posts / "2020-03-05-hello.md"
    assert server.classify(post) == config.destination / "2020/03/05/hello.html"


def test_classify_ignores_destination_hidden_and_missing(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    config = server.config
    config.destination.mkdir()
    (config.destination / "index.html").write_text("x", encoding="utf-8")
    (config.layouts / "default.html").write_text("x", encoding="utf-8")
    (project / ".git").mkdir()
    (project / ".git" / "HEAD").write_text("ref", encoding="utf-8")

    assert server.classify(config.destination / "index.html") is None
    assert server.classify(config.layouts / "default.html") is None
    assert server.classify(project / ".git" / "HEAD") is None
    assert server.classify(project / "deleted.md") is None


def test_classify_ignores_bad_front_matter(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    broken = project / "broken.html"
    broken.write_text("---\ntitle: [x\n---\n", encoding="utf-8")
    assert server.classify(broken) is None


def test_change_handler_feeds_debouncer(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    server.debouncer = RecordingDebouncer()
    handler = _ChangeHandler(server)

    handler.on_any_event(DummyEvent(project / "_posts", is_directory=True))
    handler.on_any_event(DummyEvent(project / "_layouts" / "post.html"))
    assert server.debouncer.calls == []

    handler.on_any_event(DummyEvent(project / "index.md"))
    assert server.debouncer.calls == [
        (server.config.source / "index.md", server.config.destination / "index.html")
    ]


def test_change_handler_ignores_read_only_events(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    server.debouncer = RecordingDebouncer()
    handler = _ChangeHandler(server)

    handler.on_any_event(DummyEvent(project / "index.md", event_type="opened"))
    handler.on_any_event(DummyEvent(project / "index.md", event_type="closed_no_write"))
    assert server.debouncer.calls == []

    handler.on_any_event(DummyEvent(project / "index.md", event_type="created"))
    handler.on_any_event(DummyEvent(project / "index.md", event_type="closed"))
    assert len(server.debouncer.calls) == 1


def test_rebuild_file_renders_one_file(tmp_path):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    config = server.config
    server.rebuild_file(config.source / "index.md", config.destination / "index.html")
    assert (config.destination / "index.html").read_text(encoding="utf-8") == "<h1>Home</h1>\n"


def test_rebuild_file_logs_errors(tmp_path, caplog):
    project = create_project(tmp_path)
    server = DevServer(load_config(project))
    config = server.config
    page = config.source / "page.html"
    page.write_text("---\nlayout: missing\n---\nbody", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="hedera.server"):
        server.rebuild_file(page, config.destination / "page.html")

    assert "Layout 'missing' not found" in caplog.text
    assert not (config.destination / "page.html").exists()
