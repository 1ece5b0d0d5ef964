"""
Unit tests for the sentence-aware chunker.
"""
import pytest

from src.processing.chunker import Chunk, SourceChunker, chunk_text


class TestSourceChunker:
    """Tests for SourceChunker."""

    def test_empty_text_yields_no_chunks(self):
        assert SourceChunker(max_chars=100).chunk("") == []

    def test_short_text_is_single_chunk(self):
        chunks = SourceChunker(max_chars=100).chunk("Short note.")

        assert chunks == [Chunk(text="Short note.", start_offset=0, weight=11)]

    def test_cuts_after_sentence_terminator_late_in_window(self):
        chunks = SourceChunker(max_chars=20).chunk("One two three. Four five six seven.")

        assert [c.text for c in chunks] == ["One two three.", " Four five six seven", "."]

    def test_ignores_terminator_early_in_window(self):
        # Period at index 2 lies before 0.6 * 20 = 12, so the raw edge wins
        text = "Hi. " + "x" * 30
        chunks = SourceChunker(max_chars=20).chunk(text)

        assert chunks[0].text == text[:20]

    def test_terminator_exactly_at_cut_ratio_is_used(self):
        # 0.6 * 20 = 12: a period at index 12 still counts
        text = "x" * 12 + "." + "y" * 30
        chunks = SourceChunker(max_chars=20).chunk(text)

        assert chunks[0].text == text[:13]
        assert "".join(c.text for c in chunks) == text

    def test_terminator_just_before_cut_ratio_is_ignored(self):
        text = "x" * 11 + "." + "y" * 30
        chunks = SourceChunker(max_chars=20).chunk(text)

        assert chunks[0].text == text[:20]

    def test_cut_ratio_is_relative_to_window_start(self):
        # Second window starts at 20, so its earliest usable period is at 32
        text = "x" * 20 + "y" * 12 + "." + "z" * 30
        chunks = SourceChunker(max_chars=20).chunk(text)

        assert chunks[1].start_offset == 20
        assert chunks[1].text == text[20:33]

    def test_final_window_is_never_pulled_back(self):
        text = "a" * 15 + ". tail"
        chunks = SourceChunker(max_chars=100).chunk(text)

        assert len(chunks) == 1
        assert chunks[0].text == text

    def test_raw_cut_without_terminator(self):
        chunks = SourceChunker(max_chars=12000).chunk("word " * 6000)

        assert [c.weight for c in chunks] == [12000, 12000, 6000]

    @pytest.mark.parametrize(
        "text,max_chars",
        [
            ("The cell is the unit of life. " * 50, 64),
            ("No terminators at all here " * 40, 33),
            ("A.B.C.D.E.F.G.H.I.J.K." * 10, 7),
            ("Line one.\nLine two.\n\nLine three." * 20, 25),
            ("x", 1),
        ],
    )
    def test_round_trip_reproduces_source(self, text, max_chars):
        chunks = SourceChunker(max_chars=max_chars).chunk(text)

        assert "".join(c.text for c in chunks) == text

    def test_offsets_are_contiguous_and_weights_match_length(self):
        text = "Mitochondria produce ATP. " * 40
        chunks = SourceChunker(max_chars=100).chunk(text)

        position = 0
        for chunk in chunks:
            assert chunk.start_offset == position
            assert chunk.weight == len(chunk.text)
            assert 0 < chunk.weight <= 100
            position = chunk.end_offset
        assert position == len(text)

    def test_rejects_non_positive_max_chars(self):
        with pytest.raises(ValueError):
            SourceChunker(max_chars=0)


def test_chunk_text_uses_default_ratio():
    assert [c.text for c in chunk_text("One two three. Four five six seven.", max_chars=20)] == [
        "One two three.",
        " Four five six seven",
        ".",
    ]
