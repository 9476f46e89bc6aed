"""Benchmark fixtures."""

from __future__ import annotations

import pytest

from inkwell import Document, Range, Point, element, normalize, paragraph, text


@pytest.fixture
def large_document() -> Document:
    """A normalized document with 300 blocks, mentions and marks."""
    blocks = []
    for i in range(100):
        blocks.append(element("heading-two", text(f"Section {i}")))
        blocks.append(
            paragraph(
                text(f"Paragraph {i} with "),
                text("bold", bold=True),
                text(" text for "),
                element("mention", text(), username="margie"),
                text(" and friends."),
            )
        )
        blocks.append(
            element(
                "bulleted-list",
                element("list-item", text("first")),
                element("list-item", text("second")),
            )
        )
    doc = normalize(Document(tuple(blocks)))
    middle = (151, 0)
    return Document(doc.children, Range.collapsed(Point(middle, 3)))
