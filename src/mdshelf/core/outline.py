"""Build a heading outline from markdown text."""

import re
from collections.abc import Iterator

from mdshelf.models.document import OutlineNode

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


def extract_outline(text: str) -> list[OutlineNode]:
    """Turn markdown headings into a forest of OutlineNode trees.

    Each heading is attached to the nearest preceding heading with a smaller
    level, or becomes a root when there is none. Lines inside fenced code
    blocks are not treated specially, so a ``# comment`` in a shell sample
    shows up as a heading.

    Args:
        text: Markdown document text.

    Returns:
        Root-level nodes in document order.
    """
    roots: list[OutlineNode] = []
    stack: list[OutlineNode] = []

    for line in text.split("\n"):
        match = _HEADING_RE.match(line)
        if match is None:
            continue
        title = match.group(2).strip()
        if not title:
            continue
        node = OutlineNode(title=title, level=len(match.group(1)))

        while stack and stack[-1].level >= node.level:
            stack.pop()

        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def iter_outline(forest: list[OutlineNode], depth: int = 0) -> Iterator[tuple[int, OutlineNode]]:
    """Yield (depth, node) pairs in depth-first document order."""
    for node in forest:
        yield depth, node
        yield from iter_outline(node.children, depth + 1)
