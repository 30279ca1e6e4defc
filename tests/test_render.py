from __future__ import annotations

import pytest
from rich.cells import cell_len

from customclaude_tui.render import DEFAULT_CODE_THEME, MarkdownRenderer, RenderError


@pytest.fixture
def renderer() -> MarkdownRenderer:
    return MarkdownRenderer(DEFAULT_CODE_THEME)


def test_empty_theme_is_rejected():
    with pytest.raises(RenderError):
        MarkdownRenderer("")


def test_markdown_is_styled_not_echoed(renderer):
    lines = renderer.render("Some **bold** text", 40)
    plain = "\n".join(line.plain for line in lines)
    assert "bold" in plain
    assert "**" not in plain
    assert any(span.style for line in lines for span in line.spans)


def test_lines_fit_width(renderer):
    text = "A paragraph that is long enough to wrap several times at a narrow width."
    lines = renderer.render(text, 20)
    assert len(lines) > 1
    assert all(cell_len(line.plain) <= 20 for line in lines)


def test_code_block_keeps_content(renderer):
    lines = renderer.render("```python\nprint('hi')\n```", 40)
    assert any("print" in line.plain for line in lines)


def test_blank_margins_are_trimmed(renderer):
    lines = renderer.render("# Title\n\nbody", 40)
    assert lines[0].plain.strip()
    assert lines[-1].plain.strip()


def test_empty_text_renders_nothing(renderer):
    assert renderer.render("", 40) == []


def test_failures_surface_as_render_error(renderer, monkeypatch):
    def explode(*args, **kwargs):
        raise ValueError("bad segment")

    monkeypatch.setattr(renderer._console, "render_lines", explode)
    with pytest.raises(RenderError, match="bad segment"):
        renderer.render("text", 40)
