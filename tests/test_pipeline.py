import logging
import subprocess
from pathlib import Path

import pytest

from hedera.build import BuildContext
from hedera.config import load_config
from hedera.errors import ConversionError, LayoutError, TemplateRenderError


def create_project(tmp_path: Path, config_text: str = "name: Blog\n") -> Path:
    project = tmp_path
    (project / "_layouts").mkdir()
    (project / "_posts").mkdir()
    (project / "_config.yml").write_text(config_text, encoding="utf-8")
    (project / "_layouts" / "default.html").write_text(
        "<html>{{ content }}</html>", encoding="utf-8"
    )
    (project / "_layouts" / "post.html").write_text(
        "---\nlayout: default\n---\n<article>{{ page.title }}|{{ content }}</article>",
        encoding="utf-8",
    )
    return project


def make_context(project: Path) -> BuildContext:
    ctx = BuildContext.create(load_config(project))
    ctx.site["name"] = "Blog"
    return ctx


def convert_page(ctx: BuildContext, src: Path):
    return ctx.pipeline.convert(src, ctx.resolver.page_destination(src), ctx.globals())


def test_post_renders_through_nested_layouts(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.posts / "2020-03-05-hello.md"
    src.write_text("---\nlayout: post\ntitle: Hello\n---\n# Hi {{ site.name }}\n", encoding="utf-8")

    written = ctx.pipeline.convert(src, ctx.resolver.post_destination(src, {}), ctx.globals())

    assert written == ctx.config.destination / "2020/03/05/hello.html"
    html = written.read_text(encoding="utf-8")
    assert html.startswith("<html><article>Hello|<h1>Hi Blog</h1>")
    assert html.endswith("</article></html>")


def test_page_sees_its_own_url_and_date(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "about.html"
    src.write_text(
        "---\ntitle: About\ndate: 2021-06-07\n---\n{{ page.url }} {{ page.date | date }} {{ page.title }}",
        encoding="utf-8",
    )
    written = convert_page(ctx, src)
    assert written.read_text(encoding="utf-8") == "/about.html 2021-06-07 About"


def test_markdown_without_front_matter_uses_plain_layout(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "notes.md"
    src.write_text("Hello *world*\n", encoding="utf-8")
    written = convert_page(ctx, src)
    assert written == ctx.config.destination / "notes.html"
    assert "<p>Hello <em>world</em></p>" in written.read_text(encoding="utf-8")


def test_plain_layout_is_used_when_present(tmp_path):
    project = create_project(tmp_path)
    (project / "_layouts" / "plain.html").write_text("[{{ content }}]", encoding="utf-8")
    ctx = make_context(project)
    src = ctx.config.source / "notes.md"
    src.write_text("text", encoding="utf-8")
    assert convert_page(ctx, src).read_text(encoding="utf-8") == "[<p>text</p>\n]"


def test_convertable_false_skips_template_execution(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "raw.html"
    src.write_text("---\nconvertable: false\n---\n{{ raw }}", encoding="utf-8")
    assert convert_page(ctx, src).read_text(encoding="utf-8") == "{{ raw }}"


def test_non_convertible_files_are_copied(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "img" / "logo.png"
    src.parent.mkdir()
    src.write_bytes(b"\x89PNG\x00\x01{{ x }}")
    written = convert_page(ctx, src)
    assert written.read_bytes() == b"\x89PNG\x00\x01{{ x }}"


def test_ignored_extensions_are_skipped(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "settings.yml"
    src.write_text("a: 1\n", encoding="utf-8")
    assert convert_page(ctx, src) is None
    assert not (ctx.config.destination / "settings.yml").exists()


def test_missing_layout_raises(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "page.html"
    src.write_text("---\nlayout: nope\n---\nbody", encoding="utf-8")
    with pytest.raises(LayoutError, match="nope"):
        convert_page(ctx, src)


def test_layout_cycle_raises(tmp_path):
    project = create_project(tmp_path)
    (project / "_layouts" / "a.html").write_text("---\nlayout: b\n---\nA{{ content }}", encoding="utf-8")
    (project / "_layouts" / "b.html").write_text("---\nlayout: a\n---\nB{{ content }}", encoding="utf-8")
    ctx = make_context(project)
    src = ctx.config.source / "page.html"
    src.write_text("---\nlayout: a\n---\nbody", encoding="utf-8")
    with pytest.raises(LayoutError, match="cycle"):
        convert_page(ctx, src)


def test_template_error_names_file(tmp_path):
    project = create_project(tmp_path)
    ctx = make_context(project)
    src = ctx.config.source / "broken.html"
    src.write_text("{% if %}", encoding="utf-8")
    with pytest.raises(TemplateRenderError) as excinfo:
        convert_page(ctx, src)
    assert excinfo.value.source_path == src


CONVERSION_CONFIG = """\
conversion:
  coffee:
    ext: js
    command: "coffee -c {{ from }} -o {{ to }}"
  bad:
    ext: out
    command: "run {{ from"
"""


def test_converter_runs_rendered_command(monkeypatch, tmp_path):
    project = create_project(tmp_path, CONVERSION_CONFIG)
    ctx = make_context(project)
    src = ctx.config.source / "app.coffee"
    src.write_text("x = 1", encoding="utf-8")
    calls = []

    def fake_run(command, shell=False, check=False):
        calls.append((command, shell))
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr("hedera.pipeline.subprocess.run", fake_run)
    written = convert_page(ctx, src)
    expected = ctx.config.destination / "app.js"
    assert written == expected
    assert calls == [(f"coffee -c {src} -o {expected}", True)]


def test_converter_failure_raises(monkeypatch, tmp_path):
    project = create_project(tmp_path, CONVERSION_CONFIG)
    ctx = make_context(project)
    src = ctx.config.source / "app.coffee"
    src.write_text("x = 1", encoding="utf-8")
    monkeypatch.setattr(
        "hedera.pipeline.subprocess.run",
        lambda command, shell=False, check=False: subprocess.CompletedProcess(command, 2),
    )
    with pytest.raises(ConversionError, match="status 2"):
        convert_page(ctx, src)


def test_malformed_converter_command_is_skipped(monkeypatch, tmp_path, caplog):
    project = create_project(tmp_path, CONVERSION_CONFIG)
    ctx = make_context(project)
    src = ctx.config.source / "data.bad"
    src.write_text("x", encoding="utf-8")

    def fail_run(*args, **kwargs):
        raise AssertionError("converter must not run")

    monkeypatch.setattr("hedera.pipeline.subprocess.run", fail_run)
    with caplog.at_level(logging.WARNING, logger="hedera.pipeline"):
        assert convert_page(ctx, src) is None
    assert "conversion command" in caplog.text
