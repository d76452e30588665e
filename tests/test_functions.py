"""Tests for template pipeline functions."""

from whisper_hub.post_actions.templating import functions


class TestTextFunctions:
    def test_title_keeps_inner_case(self) -> None:
        assert functions.title("hello wide world") == "Hello Wide World"
        assert functions.title("mIxed case") == "MIxed Case"

    def test_trim(self) -> None:
        assert functions.trim("  padded \n") == "padded"

    def test_counts(self) -> None:
        assert functions.word_count("one two  three\nfour") == "4"
        assert functions.char_count("abc") == "3"

    def test_truncate_boundary(self) -> None:
        """Text of exactly the limit is returned unchanged."""
        assert functions.truncate("abcde", 5) == "abcde"
        assert functions.truncate("abcdef", 5) == "abcde..."


class TestSummarize:
    def test_bullets_first_five_lines(self) -> None:
        text = "\n".join(f"line {i}" for i in range(1, 9))
        assert functions.summarize(text) == "\n".join(f"- line {i}" for i in range(1, 6))

    def test_blank_lines_skipped(self) -> None:
        assert functions.summarize("\n\n  first  \n\nsecond\n") == "- first\n- second"

    def test_long_line_clipped(self) -> None:
        assert functions.summarize("x" * 150) == "- " + "x" * 97 + "..."

    def test_deterministic(self) -> None:
        text = "alpha\nbeta\ngamma"
        assert functions.summarize(text) == functions.summarize(text)


class TestExtractActions:
    def test_keyword_lines_become_tasks(self) -> None:
        text = "We will ship on Friday\nNice weather today\nTODO: update the docs"
        assert functions.extract_actions(text) == "- [ ] We will ship on Friday\n- [ ] TODO: update the docs"

    def test_no_actions(self) -> None:
        assert functions.extract_actions("Hello there\nGood morning") == functions.NO_ACTIONS_MESSAGE


class TestFormat:
    def test_short_text_unchanged(self) -> None:
        text = "This is a test sentence that should be wrapped."
        assert functions.format_text(text) == text

    def test_empty(self) -> None:
        assert functions.format_text("") == ""

    def test_long_line_wrapped(self) -> None:
        text = "word " * 50
        lines = functions.format_text(text).split("\n")

        assert len(lines) > 1
        assert all(len(line) <= 80 for line in lines)
        assert " ".join(lines).split() == text.split()

    def test_blank_lines_preserved(self) -> None:
        assert functions.format_text("a\n\nb") == "a\n\nb"
