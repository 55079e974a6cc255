"""
Тесты для клинеров.
"""
from survey_ingest.cleaners import (
    CLEANERS,
    build_cleaner,
    get_cleaner_pipeline,
    page_numbers_cleaner,
    simple_cleaner,
    typography_cleaner,
)


class TestSimpleCleaner:
    """Тесты simple_cleaner."""

    def test_removes_extra_whitespace(self):
        """Схлопывает лишние пробелы."""
        result = simple_cleaner("Text   with    extra   spaces")

        assert result == "Text with extra spaces"

    def test_preserves_tabs_between_cells(self):
        """Таб остаётся разделителем ячеек."""
        result = simple_cleaner("Row 1: Q1 \t Yes\t 5")

        assert result == "Row 1: Q1\tYes\t5"

    def test_empty_cell_tabs_not_collapsed(self):
        """Пустая ячейка (два таба подряд) сохраняет позицию колонок."""
        result = simple_cleaner("Row 2: HH7 \t\t North")

        assert result == "Row 2: HH7\t\tNorth"

    def test_limits_blank_lines(self):
        """Не больше двух пустых строк подряд."""
        result = simple_cleaner("First\n\n\n\n\n\nSecond")

        assert result == "First\n\n\nSecond"

    def test_removes_control_chars(self):
        """Удаляет управляющие символы."""
        assert simple_cleaner("A\x00B\x07C") == "ABC"

    def test_keeps_markers(self):
        """Маркеры `=== TITLE ===` не меняются."""
        assert simple_cleaner("  === SHEET: Answers ===  ") == "=== SHEET: Answers ==="

    def test_empty_text(self):
        """Пустой текст возвращает пустую строку."""
        assert simple_cleaner("") == ""
        assert simple_cleaner("   ") == ""


class TestTypographyCleaner:
    """Тесты typography_cleaner."""

    def test_normalizes_line_endings(self):
        assert typography_cleaner("a\r\nb\rc\fd") == "a\nb\nc\nd"

    def test_replaces_smart_punctuation(self):
        text = "\N{LEFT DOUBLE QUOTATION MARK}Yes\N{RIGHT DOUBLE QUOTATION MARK} \N{EM DASH} ok\N{HORIZONTAL ELLIPSIS}"
        assert typography_cleaner(text) == '"Yes" -- ok...'

    def test_replaces_nbsp(self):
        assert typography_cleaner("a\N{NO-BREAK SPACE}b") == "a b"

    def test_keeps_bullets(self):
        """Маркер списка сохраняется."""
        assert typography_cleaner("• item") == "• item"


class TestPageNumbersCleaner:
    """Тесты page_numbers_cleaner."""

    def test_removes_standalone_numbers(self):
        result = page_numbers_cleaner("Intro text\n12\nMore text")

        assert "12" not in result
        assert "Intro text" in result
        assert "More text" in result

    def test_removes_page_x_of_y(self):
        result = page_numbers_cleaner("Body\nPage 3 of 10\nTail")

        assert "Page 3 of 10" not in result

    def test_keeps_numbered_items(self):
        """Нумерованные пункты не трогаются."""
        text = "1. Visit the household\n2. Record answers"
        assert page_numbers_cleaner(text) == text


class TestCleanerRegistry:
    """Тесты реестра клинеров."""

    def test_registry_has_cleaners(self):
        assert set(CLEANERS) == {"typography", "page_numbers", "simple"}

    def test_pipeline_applies_in_order(self):
        cleaner = get_cleaner_pipeline(["typography", "simple"])

        assert cleaner("a\r\n\r\n\r\n\r\n\r\nb   c") == "a\n\n\nb c"

    def test_unknown_cleaner_skipped(self):
        """Неизвестное имя пропускается, пустой список даёт simple."""
        cleaner = get_cleaner_pipeline(["missing"])

        assert cleaner("a   b") == "a b"

    def test_build_cleaner_returns_callable(self):
        cleaner = build_cleaner()
        assert callable(cleaner)
