"""Render markdown documents to themed HTML pages."""

import html
import re
from dataclasses import dataclass
from pathlib import Path
from string import Template

from loguru import logger
from markdown_it import MarkdownIt

from mdshelf.config import DEFAULT_FONT_SIZE, FONT_SIZES, HIGHLIGHT_JS_CDN
from mdshelf.core.diagram import diagram_image_html, is_diagram_language
from mdshelf.core.files import describe_file, read_document
from mdshelf.core.outline import extract_outline
from mdshelf.exceptions import MdshelfError, ValidationError
from mdshelf.models.document import OutlineNode
from mdshelf.protocols import MarkupRendererProtocol

# Fenced block with an info word on the opening line; closing fences never match as openers.
_FENCED_BLOCK_RE = re.compile(r"```(?P<lang>[^\s`]+)[^\S\n]*\n(?P<body>[\s\S]*?)\n```")


class MarkdownItRenderer:
    """Markdown-to-HTML conversion backed by markdown-it-py."""

    def __init__(self) -> None:
        # Raw HTML must pass through so substituted diagram <img> tags survive.
        self._md = (
            MarkdownIt("commonmark", {"html": True})
            .enable("table")
            .enable("strikethrough")
        )

    def render(self, text: str) -> str:
        return self._md.render(text)


@dataclass(frozen=True)
class Theme:
    name: str
    highlight_style: str
    text: str
    background: str
    border: str
    code_background: str
    code_text: str
    muted: str
    link: str


LIGHT_THEME = Theme(
    name="light",
    highlight_style="github",
    text="#1f2328",
    background="#ffffff",
    border="#d0d7de",
    code_background="#f6f8fa",
    code_text="#1f2328",
    muted="#656d76",
    link="#0969da",
)

DARK_THEME = Theme(
    name="dark",
    highlight_style="github-dark",
    text="#e6edf3",
    background="#0d1117",
    border="#30363d",
    code_background="#161b22",
    code_text="#f0f6fc",
    muted="#7d8590",
    link="#58a6ff",
)

_PAGE_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>${title}</title>
    <link rel="stylesheet" href="${cdn}/styles/${highlight_style}.min.css">
    <script src="${cdn}/highlight.min.js"></script>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Noto Sans', Helvetica, Arial, sans-serif;
            font-size: ${font_size}px;
            line-height: 1.6;
            color: ${text};
            background-color: ${background};
            margin: 0;
            padding: 20px;
        }
        h1, h2, h3, h4, h5, h6 {
            margin-top: 24px;
            margin-bottom: 16px;
            font-weight: 600;
            line-height: 1.25;
            border-bottom: 1px solid ${border};
            padding-bottom: 0.3em;
        }
        h1 { font-size: 2em; }
        h2 { font-size: 1.5em; }
        h3 { font-size: 1.25em; }
        h4 { font-size: 1em; }
        h5 { font-size: 0.875em; }
        h6 { font-size: 0.85em; color: ${muted}; }
        p { margin-bottom: 16px; }
        code {
            background-color: ${code_background};
            color: ${code_text};
            padding: 0.2em 0.4em;
            border-radius: 6px;
            font-size: 85%;
            font-family: 'SFMono-Regular', Consolas, 'Liberation Mono', Menlo, monospace;
        }
        pre {
            background-color: ${code_background};
            border-radius: 6px;
            padding: 16px;
            overflow: auto;
            margin-bottom: 16px;
        }
        pre code { background-color: transparent; padding: 0; border-radius: 0; font-size: inherit; }
        blockquote {
            margin: 0 0 16px 0;
            padding: 0 1em;
            color: ${muted};
            border-left: 0.25em solid ${border};
        }
        table { border-collapse: collapse; border-spacing: 0; margin-bottom: 16px; width: 100%; }
        table th, table td { padding: 6px 13px; border: 1px solid ${border}; }
        table th { background-color: ${code_background}; font-weight: 600; }
        ul, ol { margin-bottom: 16px; }
        img { max-width: 100%; height: auto; }
        a { color: ${link}; text-decoration: none; }
        a:hover { text-decoration: underline; }
        hr { height: 0.25em; padding: 0; margin: 24px 0; background-color: ${border}; border: 0; }
    </style>
</head>
<body>
${content}
<script>hljs.highlightAll();</script>
</body>
</html>
""")


@dataclass(frozen=True)
class RenderedDocument:
    """A document rendered for preview, with its outline and file summary."""

    path: str
    html: str
    outline: list[OutlineNode]
    file_info: str


def substitute_diagrams(text: str) -> str:
    """Replace PlantUML fenced blocks with <img> tags pointing at the render server.

    Blocks that are empty or fail to encode are left exactly as written.
    """

    def replace(match: re.Match[str]) -> str:
        if not is_diagram_language(match.group("lang")):
            return match.group(0)
        source = match.group("body").strip()
        if not source:
            return match.group(0)
        try:
            image = diagram_image_html(source)
        except MdshelfError as e:
            logger.warning("PlantUML encoding failed, keeping code block: {}", e)
            return match.group(0)
        return f"\n\n{image}\n\n"

    return _FENCED_BLOCK_RE.sub(replace, text)


def build_html_page(
    fragment: str,
    *,
    dark: bool = False,
    font_size: int = DEFAULT_FONT_SIZE,
    title: str = "Markdown Preview",
) -> str:
    """Wrap an HTML fragment in the themed page template."""
    if font_size <= 0:
        msg = f"Font size must be positive, got {font_size}"
        raise ValidationError(msg)
    theme = DARK_THEME if dark else LIGHT_THEME
    return _PAGE_TEMPLATE.substitute(
        title=html.escape(title),
        cdn=HIGHLIGHT_JS_CDN,
        highlight_style=theme.highlight_style,
        font_size=font_size,
        text=theme.text,
        background=theme.background,
        border=theme.border,
        code_background=theme.code_background,
        code_text=theme.code_text,
        muted=theme.muted,
        link=theme.link,
        content=fragment,
    )


def render_html(
    text: str,
    *,
    dark: bool = False,
    font_size: int = DEFAULT_FONT_SIZE,
    renderer: MarkupRendererProtocol | None = None,
    title: str = "Markdown Preview",
) -> str:
    """Render markdown text into a complete themed HTML page."""
    renderer = renderer or MarkdownItRenderer()
    fragment = renderer.render(substitute_diagrams(text))
    return build_html_page(fragment, dark=dark, font_size=font_size, title=title)


def render_document(
    path: str | Path,
    *,
    dark: bool = False,
    font_size: int = DEFAULT_FONT_SIZE,
    renderer: MarkupRendererProtocol | None = None,
) -> RenderedDocument:
    """Read a document from disk and render it with its outline."""
    p = Path(path)
    text = read_document(p)
    return RenderedDocument(
        path=str(p.resolve()),
        html=render_html(text, dark=dark, font_size=font_size, renderer=renderer, title=p.name),
        outline=extract_outline(text),
        file_info=describe_file(p),
    )


def next_font_size(current: int) -> int:
    """Step up through FONT_SIZES; unknown sizes snap to the next larger step."""
    for size in FONT_SIZES:
        if size > current:
            return size
    return FONT_SIZES[-1]


def previous_font_size(current: int) -> int:
    for size in reversed(FONT_SIZES):
        if size < current:
            return size
    return FONT_SIZES[0]
