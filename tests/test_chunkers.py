"""
Тесты для чанкеров.
"""
import re

import pytest

from survey_ingest.chunkers import Chunker, ContentAwareChunker, build_chunker, intelligent_overlap
from survey_ingest.chunkers.units import (
    SENTENCE_BOUNDARY,
    Unit,
    detect_structures,
    is_line_structured,
    paragraph_units,
    split_keeping_breaks,
    split_words,
)
from survey_ingest.contracts import ChunkingConfig, Section, SectionType, StructureKind
from survey_ingest.sections import full_document_section


class TestChunker:
    """Тесты Chunker."""

    def test_long_paragraph_gives_two_chunks_with_overlap(self, config, survey_sentences):
        """Абзац ~2000 символов: два чанка, второй начинается с хвоста первого."""
        text = " ".join(survey_sentences(22))
        assert 2000 <= len(text) <= 2100

        drafts = Chunker(config).chunk([full_document_section(text)], text, "manual.txt")

        assert len(drafts) == 2
        first, second = drafts
        assert 0 < second.overlap_chars <= config.overlap_size
        overlap = second.content[:second.overlap_chars]
        assert first.content.endswith(overlap)
        assert second.content.startswith(overlap + "\n\n")

    def test_chunk_bounds(self, config, survey_sentences):
        """Все чанки не длиннее maxChunkSize × 1.3."""
        paragraphs = [" ".join(survey_sentences(n, start=n)) for n in (3, 8, 14, 2, 20, 5)]
        text = "\n\n".join(paragraphs)

        drafts = Chunker(config).chunk([full_document_section(text)], text, "manual.txt")

        assert len(drafts) > 1
        assert all(len(d.content) <= config.upper_bound for d in drafts)

    def test_every_paragraph_covered(self, config, survey_sentences):
        """Каждое предложение попадает хотя бы в один чанк."""
        sentences = survey_sentences(30)
        text = "\n\n".join(" ".join(sentences[i:i + 3]) for i in range(0, 30, 3))

        drafts = Chunker(config).chunk([full_document_section(text)], text, "manual.txt")

        joined = "\n".join(d.content for d in drafts)
        assert all(sentence in joined for sentence in sentences)

    def test_deterministic_ids(self, config, survey_sentences):
        text = " ".join(survey_sentences(22))
        chunker = Chunker(config)

        first = [d.chunk_id for d in chunker.chunk([full_document_section(text)], text, "manual.txt")]
        second = [d.chunk_id for d in chunker.chunk([full_document_section(text)], text, "manual.txt")]

        assert first == second
        assert first == ["manual.txt-chunk-doc-0", "manual.txt-chunk-doc-1"]

    def test_section_mode(self, config, survey_sentences):
        """Больше одной секции - чанкинг по секциям."""
        sections = [
            Section("Introduction", " ".join(survey_sentences(3)), SectionType.METADATA, "metadata"),
            Section("Methodology", " ".join(survey_sentences(20)), SectionType.METADATA, "metadata"),
        ]
        text = "\n\n".join(s.content for s in sections)

        drafts = Chunker(config).chunk(sections, text, "guide.docx")

        assert drafts[0].chunk_id == "guide.docx-chunk-0-0"
        assert drafts[0].section_title == "Introduction"
        assert drafts[0].structures == [StructureKind.METADATA]
        assert all(d.section_title == "Methodology" for d in drafts[1:])
        assert drafts[1].structures[0] == StructureKind.SECTION
        assert len(drafts) >= 3

    def test_fallback_when_nothing_chunked(self, config):
        """Только мелкие абзацы - один fallback-чанк."""
        text = "Short.\n\nTiny.\n\nSmall."

        drafts = Chunker(config).chunk([full_document_section(text)], text, "odd.txt")

        assert len(drafts) == 1
        assert drafts[0].is_fallback
        assert drafts[0].chunk_id == "odd.txt-chunk-fallback-0"
        assert drafts[0].content == text

    def test_short_tail_merged(self, survey_sentences):
        """Остаток короче minChunkSize дописывается к предыдущему чанку."""
        config = ChunkingConfig(max_chunk_size=1200, overlap_size=0, min_chunk_size=150)
        tail = "Final short note about the field visit. The supervisor signs the completed household form today."
        text = " ".join(survey_sentences(12)) + "\n\n" + tail

        drafts = ContentAwareChunker(config).chunk_document(text, "tail.txt")

        assert len(drafts) == 1
        assert drafts[0].content.endswith("\n\n" + tail)

    def test_document_mode_tracks_structures(self, config):
        text = "=== SURVEY MANUAL FOR FIELD ENUMERATORS ===\n\n- Visit every selected household\n- Record all answers on the form"

        drafts = ContentAwareChunker(config).chunk_document(text, "list.txt")

        assert drafts[0].structures == [StructureKind.METADATA, StructureKind.LIST_ITEM]

    def test_build_chunker(self, config):
        chunker = build_chunker(config)

        assert isinstance(chunker, Chunker)
        assert chunker.config is config


class TestIntelligentOverlap:
    """Тесты intelligent_overlap."""

    def test_short_chunk_returned_whole(self):
        assert intelligent_overlap("Short chunk.", 200) == "Short chunk."

    def test_tail_is_sentence_aligned(self, survey_sentences):
        chunk = " ".join(survey_sentences(10))

        overlap = intelligent_overlap(chunk, 200)

        assert len(overlap) <= 200
        assert chunk.endswith(overlap)
        assert overlap == " ".join(survey_sentences(2, start=9))

    def test_no_suitable_tail(self):
        """Последнее предложение длиннее overlap - пустая строка."""
        chunk = "Intro sentence here. " + "word " * 60

        assert intelligent_overlap(chunk.strip(), 50) == ""

    def test_short_first_sentence_skipped(self):
        """Хвост не начинается с предложения короче 15 символов."""
        chunk = "A long opening sentence for the chunk body text. " * 3 + "Yes. Answers are recorded here."

        overlap = intelligent_overlap(chunk, 40)

        assert overlap == "Answers are recorded here."

    def test_zero_overlap(self):
        assert intelligent_overlap("Anything at all.", 0) == ""


class TestUnits:
    """Тесты единиц накопления."""

    def test_long_paragraph_split_into_sentences(self, survey_sentences):
        text = " ".join(survey_sentences(5))

        units = paragraph_units(text, 200)

        assert len(units) == 5
        assert units[0].separator == "\n\n"
        assert all(u.separator == " " for u in units[1:])

    def test_long_sentence_split_into_words(self):
        pieces = split_words("word " * 100, 50)

        assert all(len(p) <= 50 for p in pieces)
        assert " ".join(pieces) == ("word " * 100).strip()

    def test_min_fragment(self):
        units = paragraph_units("tiny\n\nThis paragraph is longer than thirty characters.", 1200, min_fragment=30)

        assert [u.text for u in units] == ["This paragraph is longer than thirty characters."]

    def test_detect_structures_order(self):
        text = "Q1\tYes\tNo\n1. First item"

        assert detect_structures(text) == [StructureKind.TABLE_ROW, StructureKind.LIST_ITEM]


class TestChunkingConfig:
    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            ChunkingConfig(max_chunk_size=100, overlap_size=10, min_chunk_size=200)
        with pytest.raises(ValueError):
            ChunkingConfig(max_chunk_size=100, overlap_size=100, min_chunk_size=10)

    def test_upper_bound(self, config):
        assert config.upper_bound == 1560


ROW_LINE = re.compile(r"Row \d+: Household \d+\t(?:Male|Female)\t\d+\tEmployed")


def roster_rows(count: int) -> str:
    return "\n".join(
        f"Row {i}: Household {i}\t{'Male' if i % 2 else 'Female'}\t{20 + i % 50}\tEmployed"
        for i in range(1, count + 1)
    )


def filler(length: int) -> str:
    """Предложение ровно заданной длины."""
    body = ("data " * length)[: length - 1].rstrip()
    return body + "." * (length - len(body))


class TestLineStructuredBlocks:
    """Строки листа, списки и таблицы делятся по строкам."""

    def test_rows_keep_lines_and_tabs(self, config):
        """Ни одна строка `Row N:` не разрезана, переводы строк и табы сохранены."""
        drafts = ContentAwareChunker(config).chunk_document(roster_rows(79), "roster.xlsx")

        assert len(drafts) >= 2
        for draft in drafts:
            assert "\n" in draft.content
            assert "\t" in draft.content
            assert len(draft.content) <= config.upper_bound
            for line in draft.content.split("\n"):
                if line.strip():
                    assert ROW_LINE.fullmatch(line), line
        assert StructureKind.TABLE_ROW in drafts[1].structures

    def test_rows_overlap_is_whole_lines(self, config):
        drafts = ContentAwareChunker(config).chunk_document(roster_rows(79), "roster.xlsx")

        first, second = drafts[0], drafts[1]
        assert 0 < second.overlap_chars <= config.overlap_size
        overlap = second.content[:second.overlap_chars]
        assert first.content.endswith(overlap)
        assert overlap.startswith("Row ")
        assert all(ROW_LINE.fullmatch(line) for line in overlap.split("\n"))

    def test_line_units_keep_newline_separator(self):
        rows = roster_rows(10)

        units = paragraph_units(rows, 200)

        assert [u.text for u in units] == rows.split("\n")
        assert units[0].separator == "\n\n"
        assert all(u.separator == "\n" for u in units[1:])

    def test_sentence_split_keeps_line_breaks(self):
        pieces = split_keeping_breaks("First sentence here.\nSecond one here. Third.", SENTENCE_BOUNDARY)

        assert pieces == [("", "First sentence here."), ("\n", "Second one here."), (" ", "Third.")]

    def test_long_line_falls_back_to_words(self):
        text = "\n".join(["Row 1: short\tline\tvalue", "Row 2: " + "word\t" * 60, "Row 3: short\tline\tvalue"])

        units = paragraph_units(text, 100)

        assert all(len(u.text) <= 100 for u in units)
        assert units[0].text == "Row 1: short\tline\tvalue"
        assert units[-1].text == "Row 3: short\tline\tvalue"
        assert units[-1].separator == "\n"

    def test_is_line_structured(self, survey_sentences):
        assert is_line_structured(roster_rows(5))
        assert is_line_structured("- Visit the household\n- Ask for consent\n- Record answers")
        assert not is_line_structured("\n".join(survey_sentences(5)))
        assert not is_line_structured("Row 1: a\tb")

    def test_overlap_of_row_block(self):
        chunk = roster_rows(40)

        overlap = intelligent_overlap(chunk, 200)

        assert overlap
        assert chunk.endswith(overlap)
        assert overlap.split("\n")[0].startswith("Row ")


class TestUpperBound:
    """Предел maxChunkSize × 1.3 при нестандартных размерах."""

    def test_config_rejects_min_that_breaks_bound(self):
        """min + max не укладывается в upper_bound - конфигурация отклоняется."""
        with pytest.raises(ValueError):
            ChunkingConfig(max_chunk_size=1000, overlap_size=100, min_chunk_size=400)

    def test_short_tail_not_merged_past_bound(self):
        """Слияние хвоста не выводит чанк за upper_bound."""
        config = ChunkingConfig(max_chunk_size=1000, overlap_size=200, min_chunk_size=250)
        units = [
            Unit(filler(759) + " " + filler(190)),
            Unit(filler(699) + " " + filler(300)),
            Unit(filler(240)),
        ]

        drafts = ContentAwareChunker(config)._accumulate(units, file_name="bound.txt", section_index="0")

        assert [len(d.content) for d in drafts] == [950, 1192, 240]
        assert all(len(d.content) <= config.upper_bound for d in drafts)

    def test_bounds_with_custom_config(self, survey_sentences):
        config = ChunkingConfig(max_chunk_size=1000, overlap_size=100, min_chunk_size=250)
        paragraphs = [" ".join(survey_sentences(n, start=n)) for n in (2, 10, 1, 10, 3, 12)]
        text = "\n\n".join(paragraphs)

        drafts = ContentAwareChunker(config).chunk_document(text, "custom.txt")

        assert len(drafts) > 1
        assert all(len(d.content) <= config.upper_bound for d in drafts)


class TestSectionOverlap:
    """Overlap между соседними чанками одной секции."""

    def test_adjacent_chunks_share_sentence_tail(self, config, survey_sentences):
        section = Section("Methodology", " ".join(survey_sentences(30)), SectionType.HEADING, "headings")

        drafts = ContentAwareChunker(config).chunk_section(section, "guide.docx", 1)

        assert len(drafts) >= 3
        for previous, current in zip(drafts, drafts[1:]):
            assert 0 < current.overlap_chars <= config.overlap_size
            overlap = current.content[:current.overlap_chars]
            assert previous.content.endswith(overlap)
            assert overlap.startswith("Sentence number")
            assert current.content.startswith(overlap + "\n\n")
        assert all(config.min_chunk_size <= len(d.content) <= config.upper_bound for d in drafts)
