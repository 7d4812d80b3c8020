"""Tests for heading outline extraction."""

import pytest

from mdshelf.core.outline import extract_outline, iter_outline
from mdshelf.models.document import OutlineNode


def test_nested_headings_build_a_tree() -> None:
    outline = extract_outline("# A\n## B\n### C\n## D\n# E")

    assert [n.title for n in outline] == ["A", "E"]
    a = outline[0]
    assert [c.title for c in a.children] == ["B", "D"]
    assert [c.title for c in a.children[0].children] == ["C"]
    assert outline[1].children == []


def test_skipped_levels_attach_to_nearest_shallower_heading() -> None:
    outline = extract_outline("## Start\n#### Deep\n### Middle\n# Top")

    assert [n.title for n in outline] == ["Start", "Top"]
    start = outline[0]
    assert [(c.title, c.level) for c in start.children] == [("Deep", 4), ("Middle", 3)]


def test_sibling_of_same_level_pops_stack() -> None:
    outline = extract_outline("### One\n### Two\n### Three")
    assert [n.title for n in outline] == ["One", "Two", "Three"]
    assert all(n.children == [] for n in outline)


def test_titles_are_trimmed() -> None:
    outline = extract_outline("#    Padded title   \n")
    assert outline[0].title == "Padded title"


def test_non_headings_are_ignored() -> None:
    text = "\n".join(
        [
            "#NoSpace",
            "####### seven hashes",
            " # indented",
            "plain text",
            "#",
            "#   ",
        ]
    )
    assert extract_outline(text) == []


def test_empty_text_has_no_outline() -> None:
    assert extract_outline("") == []


def test_headings_inside_code_fences_are_still_picked_up() -> None:
    text = "# Real\n```bash\n# install deps\n```\n"
    assert [n.title for n in extract_outline(text)] == ["Real", "install deps"]


def test_levels_match_hash_count() -> None:
    outline = extract_outline("###### six")
    assert outline[0].level == 6


def test_iter_outline_yields_depth_first() -> None:
    outline = extract_outline("# A\n## B\n### C\n## D\n# E")
    assert [(d, n.title) for d, n in iter_outline(outline)] == [
        (0, "A"),
        (1, "B"),
        (2, "C"),
        (1, "D"),
        (0, "E"),
    ]


def test_to_dict_is_recursive() -> None:
    outline = extract_outline("# A\n## B")
    assert outline[0].to_dict() == {
        "title": "A",
        "level": 1,
        "children": [{"title": "B", "level": 2, "children": []}],
    }


@pytest.mark.parametrize(
    "levels",
    [
        [1, 2, 3, 2, 1],
        [3, 1, 2, 2, 6, 4, 1],
        [6, 5, 4, 3, 2, 1],
        [2, 2, 4, 3, 5, 1, 6],
        [1, 6, 6, 1],
    ],
)
def test_children_are_deeper_and_order_is_preserved(levels: list[int]) -> None:
    text = "\n".join(f"{'#' * level} h{i}" for i, level in enumerate(levels))
    outline = extract_outline(text)

    flattened = [node.title for _, node in iter_outline(outline)]
    assert flattened == [f"h{i}" for i in range(len(levels))]

    def check(node: OutlineNode) -> None:
        for child in node.children:
            assert child.level > node.level
            check(child)

    for root in outline:
        check(root)
