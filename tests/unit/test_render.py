"""Tests for HTML preview rendering."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mdshelf.config import FONT_SIZES, PLANTUML_SERVER_URL
from mdshelf.core.diagram import diagram_url
from mdshelf.core.files import describe_file, format_file_size, read_document
from mdshelf.core.render import (
    DARK_THEME,
    LIGHT_THEME,
    MarkdownItRenderer,
    build_html_page,
    next_font_size,
    previous_font_size,
    render_document,
    render_html,
    substitute_diagrams,
)
from mdshelf.exceptions import DiagramEncodeError, ValidationError
from mdshelf.protocols import MarkupRendererProtocol
from tests.unit.fakes import FakeRenderer

DIAGRAM_DOC = """\
# Flow

```plantuml
Bob -> Alice: hi
```

Text after.
"""


def test_plantuml_block_becomes_image() -> None:
    out = substitute_diagrams(DIAGRAM_DOC)

    assert "```plantuml" not in out
    assert f'src="{diagram_url("Bob -> Alice: hi")}"' in out
    assert "# Flow" in out
    assert "Text after." in out


@pytest.mark.parametrize("language", ["puml", "uml", "PlantUML"])
def test_diagram_language_aliases(language: str) -> None:
    out = substitute_diagrams(f"```{language}\nA -> B\n```\n")
    assert PLANTUML_SERVER_URL in out


def test_diagram_aliases_come_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("mdshelf.core.diagram.PLANTUML_LANGUAGES", frozenset({"puml"}))
    text = "```plantuml\nA -> B\n```\n\n```puml\nC -> D\n```\n"

    out = substitute_diagrams(text)

    assert "```plantuml\nA -> B\n```" in out
    assert out.count("<img ") == 1


def test_code_block_before_diagram_is_untouched() -> None:
    text = "```python\nprint(1)\n```\n\n```puml\nA -> B\n```\n"
    out = substitute_diagrams(text)
    assert out.startswith("```python\nprint(1)\n```")
    assert out.count("<img ") == 1


def test_other_code_blocks_are_untouched() -> None:
    text = "```python\nprint('hi')\n```\n"
    assert substitute_diagrams(text) == text


def test_empty_diagram_block_is_kept() -> None:
    text = "```plantuml\n   \n```\n"
    assert substitute_diagrams(text) == text


def test_every_diagram_block_is_replaced() -> None:
    text = "```puml\nA -> B\n```\n\nmiddle\n\n```uml\nC -> D\n```\n"
    out = substitute_diagrams(text)
    assert out.count("<img ") == 2
    assert "middle" in out


def test_encoding_failure_keeps_code_block() -> None:
    with patch("mdshelf.core.render.diagram_image_html", side_effect=DiagramEncodeError("boom")):
        out = substitute_diagrams(DIAGRAM_DOC)
    assert out == DIAGRAM_DOC


def test_renderer_receives_substituted_markdown() -> None:
    renderer = FakeRenderer()
    page = render_html(DIAGRAM_DOC, renderer=renderer)

    assert len(renderer.calls) == 1
    assert "<img " in renderer.calls[0]
    assert "<div class='fake'>" in page


def test_markdown_it_renderer_satisfies_protocol() -> None:
    assert isinstance(MarkdownItRenderer(), MarkupRendererProtocol)


def test_markdown_it_renderer_keeps_diagram_image() -> None:
    page = render_html(DIAGRAM_DOC)
    assert "<h1>Flow</h1>" in page
    assert '<img src="http://www.plantuml.com/plantuml/png/' in page


def test_markdown_it_renderer_supports_tables_and_strikethrough() -> None:
    html = MarkdownItRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~\n")
    assert "<table>" in html
    assert "<s>gone</s>" in html


def test_markdown_it_renderer_keeps_plain_quotes() -> None:
    html = MarkdownItRenderer().render("\"hi\" -- (c)\n")
    assert "&quot;hi&quot; -- (c)" in html


def test_light_and_dark_themes_differ() -> None:
    light = build_html_page("<p>x</p>")
    dark = build_html_page("<p>x</p>", dark=True)

    assert LIGHT_THEME.background in light
    assert DARK_THEME.background in dark
    assert f"styles/{DARK_THEME.highlight_style}.min.css" in dark
    assert f"styles/{LIGHT_THEME.highlight_style}.min.css" in light


def test_font_size_is_applied() -> None:
    assert "font-size: 18px;" in build_html_page("<p>x</p>", font_size=18)


@pytest.mark.parametrize("size", [0, -4])
def test_non_positive_font_size_is_rejected(size: int) -> None:
    with pytest.raises(ValidationError):
        build_html_page("<p>x</p>", font_size=size)


def test_title_is_escaped() -> None:
    page = build_html_page("", title="<b>&</b>")
    assert "<title>&lt;b&gt;&amp;&lt;/b&gt;</title>" in page


def test_render_document_bundles_outline_and_info(tmp_path: Path) -> None:
    doc = tmp_path / "guide.md"
    doc.write_text("# Guide\n## Install\n", encoding="utf-8")

    rendered = render_document(doc, renderer=FakeRenderer())

    assert rendered.path == str(doc.resolve())
    assert [n.title for n in rendered.outline] == ["Guide"]
    assert rendered.file_info.startswith("Size: ")
    assert "<title>guide.md</title>" in rendered.html


def test_render_document_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        render_document(tmp_path / "missing.md")


def test_font_size_steps() -> None:
    assert next_font_size(14) == 16
    assert previous_font_size(14) == 12
    assert next_font_size(FONT_SIZES[-1]) == FONT_SIZES[-1]
    assert previous_font_size(FONT_SIZES[0]) == FONT_SIZES[0]
    assert next_font_size(15) == 16


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1023, "1023 B"), (1024, "1.0 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5.0 MB")],
)
def test_format_file_size(size: int, expected: str) -> None:
    assert format_file_size(size) == expected


def test_describe_file(tmp_path: Path) -> None:
    doc = tmp_path / "a.md"
    doc.write_bytes(b"x" * 2048)
    info = describe_file(doc)
    assert info.startswith("Size: 2.0 KB | Modified: ")


def test_read_document_reads_utf8(tmp_path: Path) -> None:
    doc = tmp_path / "a.md"
    doc.write_text("héllo", encoding="utf-8")
    assert read_document(doc) == "héllo"


def test_read_document_rejects_directories(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_document(tmp_path)
