import math

import pytest

from search_ai.embeddings.chunking import split_text


def test_empty_text_gives_no_chunks():
    assert split_text("") == []


def test_short_text_is_one_chunk():
    assert split_text("hello", chunk_size=1000, overlap=100) == ["hello"]


@pytest.mark.parametrize("length", [101, 1000, 1001, 2500, 10_000])
def test_chunk_count_and_sizes(length):
    text = "x" * length
    chunks = split_text(text, chunk_size=1000, overlap=100)

    assert len(chunks) == math.ceil((length - 100) / 900)
    assert all(len(chunk) <= 1000 for chunk in chunks)
    assert all(len(chunk) == 1000 for chunk in chunks[:-1])


def test_consecutive_chunks_share_the_overlap():
    text = "".join(chr(ord("a") + i % 26) for i in range(2500))
    chunks = split_text(text, chunk_size=1000, overlap=100)

    for previous, current in zip(chunks, chunks[1:]):
        assert previous[-100:] == current[:100]


def test_chunks_reassemble_the_text():
    text = "The quick brown fox jumps over the lazy dog. " * 60
    chunks = split_text(text, chunk_size=200, overlap=20)

    rebuilt = chunks[0] + "".join(chunk[20:] for chunk in chunks[1:])
    assert rebuilt == text


def test_last_window_reaching_the_end_stops_splitting():
    # 1900 = 1000 + 900: the second window ends exactly at the end.
    chunks = split_text("y" * 1900, chunk_size=1000, overlap=100)
    assert [len(chunk) for chunk in chunks] == [1000, 1000]


@pytest.mark.parametrize(
    "chunk_size, overlap",
    [(0, 0), (-5, 0), (100, 100), (100, 150), (100, -1)],
)
def test_invalid_arguments(chunk_size, overlap):
    with pytest.raises(ValueError):
        split_text("text", chunk_size=chunk_size, overlap=overlap)
