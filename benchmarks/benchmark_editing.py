"""Benchmark editing transforms on a large document.

Run with:
    pytest benchmarks/benchmark_editing.py -v --benchmark-only
"""

import pytest

from inkwell import (
    Document,
    MentionAutocomplete,
    delete_backward,
    from_json,
    insert_break,
    insert_text,
    normalize,
    to_json,
    toggle_block,
)


@pytest.mark.benchmark(group="edit")
def test_benchmark_insert_text(benchmark, large_document: Document) -> None:
    benchmark(insert_text, large_document, "x")


@pytest.mark.benchmark(group="edit")
def test_benchmark_insert_break(benchmark, large_document: Document) -> None:
    benchmark(insert_break, large_document)


@pytest.mark.benchmark(group="edit")
def test_benchmark_delete_backward(benchmark, large_document: Document) -> None:
    benchmark(delete_backward, large_document)


@pytest.mark.benchmark(group="edit")
def test_benchmark_toggle_block(benchmark, large_document: Document) -> None:
    benchmark(toggle_block, large_document, "bulleted-list")


@pytest.mark.benchmark(group="normalize")
def test_benchmark_normalize_valid(benchmark, large_document: Document) -> None:
    """Baseline: a document that needs no fixes."""
    benchmark(normalize, large_document)


@pytest.mark.benchmark(group="mentions")
def test_benchmark_mention_trigger(benchmark, large_document: Document) -> None:
    doc = insert_text(large_document, " @ma")
    engine = MentionAutocomplete()
    benchmark(engine.on_change, doc)


@pytest.mark.benchmark(group="serialize")
def test_benchmark_json_round_trip(benchmark, large_document: Document) -> None:
    benchmark(lambda: from_json(to_json(large_document)))
