"""
Тесты для постобработки чанков.
"""
from dataclasses import FrozenInstanceError

import pytest

from survey_ingest.contracts import StructuralFlags
from survey_ingest.postprocess import ChunkPostProcessor, is_substantive

NOISE = " ".join(["12345 !!! ---"] * 10)


def prose(words: int, topic: str = "household") -> str:
    """Связный текст о полевом опросе заданной длины в словах."""
    sentence = f"The enumerator records every {topic} answer on the survey form during the field visit."
    tokens = []
    while len(tokens) < words:
        tokens.extend(sentence.split())
    return " ".join(tokens[:words]).rstrip(".") + "."


class TestFiltering:
    """Тесты фильтрации бессодержательных чанков."""

    def test_noise_chunk_removed(self, config, make_chunk):
        """Цифры и пунктуация без букв отбрасываются."""
        noise = make_chunk(NOISE, index=0)
        good = make_chunk(prose(120), index=1)

        result = ChunkPostProcessor(config).postprocess([noise, good])

        assert result == [good]

    def test_only_noise_keeps_best_original(self, config, make_chunk):
        """Все чанки отфильтрованы - остаётся лучший по качеству."""
        noise = make_chunk(NOISE)
        assert noise.word_count >= 25

        result = ChunkPostProcessor(config).postprocess([noise])

        assert result == [noise]

    def test_best_by_quality(self, config, make_chunk):
        weak = make_chunk(NOISE, index=0)
        short = make_chunk("Survey form data field procedure notes.", index=1)

        result = ChunkPostProcessor(config).postprocess([weak, short])

        assert result == [short]

    def test_is_substantive(self, make_chunk):
        assert is_substantive(make_chunk(prose(40)))
        assert not is_substantive(make_chunk(prose(10)))
        assert not is_substantive(make_chunk(NOISE))

    def test_empty_input(self, config):
        assert ChunkPostProcessor(config).postprocess([]) == []


class TestMerging:
    """Тесты слияния мелких чанков."""

    def test_small_chunk_merged_into_previous(self, config, make_chunk):
        first = make_chunk(prose(100), index=0)
        second = make_chunk(prose(30, topic="dwelling"), index=1)

        result = ChunkPostProcessor(config).postprocess([first, second])

        assert len(result) == 1
        merged = result[0]
        assert merged.id == first.id
        assert merged.content == f"{first.content}\n\n{second.content}"
        assert merged.word_count == 130
        assert merged.character_count == len(merged.content)
        assert merged.importance == max(first.importance, second.importance)
        assert "dwelling" in merged.keywords

    def test_merge_drops_overlap_prefix(self, config, make_chunk):
        first = make_chunk(prose(98), index=0)
        overlap = "during the field visit."
        assert first.content.endswith(overlap)
        second = make_chunk(f"{overlap}\n\n{prose(30, topic='dwelling')}", index=1, overlap_chars=len(overlap))

        result = ChunkPostProcessor(config).postprocess([first, second])

        assert len(result) == 1
        assert result[0].content.count(overlap) == first.content.count(overlap) + second.content.count(overlap) - 1

    def test_large_chunks_not_merged(self, config, make_chunk):
        first = make_chunk(prose(80), index=0)
        second = make_chunk(prose(90), index=1)

        result = ChunkPostProcessor(config).postprocess([first, second])

        assert result == [first, second]

    def test_merge_respects_char_bound(self, config, make_chunk):
        """Слияние не выходит за maxChunkSize × 1.3 символов."""
        first = make_chunk(prose(230), index=0)
        assert len(first.content) > config.upper_bound - 200
        second = make_chunk(prose(40), index=1)

        result = ChunkPostProcessor(config).postprocess([first, second])

        assert len(result) == 2

    def test_flags_combined(self, config, make_chunk):
        first = make_chunk(prose(100), index=0)
        second = make_chunk("- " + prose(30) + "\n- Record the answer in table 2.", index=1)

        merged = ChunkPostProcessor(config).postprocess([first, second])[0]

        assert merged.flags & StructuralFlags.HAS_LISTS
        assert merged.flags & StructuralFlags.HAS_NUMBERS

    def test_chunks_are_frozen(self, make_chunk):
        chunk = make_chunk(prose(40))

        with pytest.raises(FrozenInstanceError):
            chunk.content = "changed"
