"""Unit tests for TextChunker."""

import pytest

from onboard.application.services.text_chunker import TextChunker


def test_short_text_is_a_single_chunk():
    assert TextChunker(chunk_size=100, chunk_overlap=10).split("  A short note.  ") == ["A short note."]


def test_blank_text_yields_no_chunks():
    assert TextChunker().split("   \n\n  ") == []


@pytest.mark.parametrize("overlap", [-1, 100, 150])
def test_invalid_overlap_is_rejected(overlap):
    with pytest.raises(ValueError):
        TextChunker(chunk_size=100, chunk_overlap=overlap)


def test_paragraph_boundaries_are_preferred():
    first = ("alpha " * 100).strip()
    second = ("beta " * 120).strip()

    chunks = TextChunker(chunk_size=1000, chunk_overlap=150).split(f"{first}\n\n{second}")

    assert chunks == [first, second]


def test_windows_respect_size_and_overlap():
    words = [f"word{i}" for i in range(500)]
    chunks = TextChunker(chunk_size=200, chunk_overlap=50).split(" ".join(words))

    assert len(chunks) > 1
    assert all(0 < len(chunk) <= 200 for chunk in chunks)
    # Consecutive windows share context
    for previous, current in zip(chunks, chunks[1:]):
        assert current.split()[0] in previous.split()
    # Nothing is lost
    covered = {word for chunk in chunks for word in chunk.split()}
    assert covered == set(words)


def test_unbroken_text_falls_back_to_characters():
    chunks = TextChunker(chunk_size=1000, chunk_overlap=100).split("x" * 2500)

    assert len(chunks) >= 3
    assert all(0 < len(chunk) <= 1000 for chunk in chunks)
