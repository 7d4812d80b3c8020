"""Encode PlantUML source into render-server URLs.

The PlantUML server accepts diagram text that has been deflated and then
base64-encoded with its own alphabet (digits, upper, lower, ``-`` and
``_``, no padding). Nothing here talks to the server; we only build the URL.
"""

import html
import zlib

from mdshelf.config import (
    PLANTUML_END_TAG,
    PLANTUML_LANGUAGES,
    PLANTUML_SERVER_URL,
    PLANTUML_START_TAG,
)
from mdshelf.exceptions import DiagramEncodeError

PLANTUML_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"

_IMAGE_STYLE = (
    "max-width: 100%; height: auto; border: 1px solid #ddd; border-radius: 4px; "
    "padding: 8px; margin: 8px 0; background: white;"
)


def is_diagram_language(language: str | None) -> bool:
    """Check whether a fenced-code info string names a PlantUML block."""
    if not language or not language.strip():
        return False
    return language.strip().lower() in PLANTUML_LANGUAGES


def normalize_diagram_source(source: str) -> str:
    """Wrap source in @startuml/@enduml unless it already carries them."""
    lines = source.split("\n")
    has_start = any(line.strip().lower().startswith(PLANTUML_START_TAG) for line in lines)
    has_end = any(line.strip().lower().startswith(PLANTUML_END_TAG) for line in lines)

    if not has_start:
        lines.insert(0, PLANTUML_START_TAG)
    if not has_end:
        lines.append(PLANTUML_END_TAG)
    return "\n".join(lines)


def _deflate(data: bytes) -> bytes:
    # Raw deflate stream: negative wbits drops the zlib header and checksum.
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    return compressor.compress(data) + compressor.flush()


def encode_plantuml_base64(data: bytes) -> str:
    """Encode bytes with the PlantUML alphabet, 3 bytes to 4 chars, unpadded."""
    out: list[str] = []
    for i in range(0, len(data), 3):
        b1 = data[i]
        b2 = data[i + 1] if i + 1 < len(data) else 0
        b3 = data[i + 2] if i + 2 < len(data) else 0

        out.append(PLANTUML_ALPHABET[b1 >> 2])
        out.append(PLANTUML_ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
        if i + 1 < len(data):
            out.append(PLANTUML_ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)])
        if i + 2 < len(data):
            out.append(PLANTUML_ALPHABET[b3 & 0x3F])
    return "".join(out)


def encode_diagram(source: str) -> str:
    """Turn diagram source into the payload the render server expects.

    Raises:
        DiagramEncodeError: If the source is blank or compression fails.
    """
    if not source or not source.strip():
        msg = "Diagram source is empty"
        raise DiagramEncodeError(msg)

    normalized = normalize_diagram_source(source)
    try:
        compressed = _deflate(normalized.encode("utf-8"))
    except (zlib.error, UnicodeEncodeError) as e:
        msg = f"Failed to compress diagram source: {e}"
        raise DiagramEncodeError(msg) from e
    return encode_plantuml_base64(compressed)


def diagram_url(source: str, base_url: str = PLANTUML_SERVER_URL) -> str:
    """Build the render-server URL for the diagram source."""
    return base_url.rstrip("/") + "/" + encode_diagram(source)


def diagram_image_html(source: str, base_url: str = PLANTUML_SERVER_URL) -> str:
    """Build an <img> element pointing at the rendered diagram."""
    url = html.escape(diagram_url(source, base_url), quote=True)
    return f'<img src="{url}" alt="PlantUML Diagram" style="{_IMAGE_STYLE}" />'
