"""
Unit tests for analysis text formatting.

Tests section parsing, URL extraction and plain-text rendering.
"""
from food_analyzer.services.analysis_formatter import (
    extract_links,
    extract_urls,
    is_section_header,
    parse_sections,
    render_fragments,
    render_sections,
)


class TestSectionHeaders:
    def test_numbered_line(self):
        assert is_section_header("1. Product name")

    def test_keyword_label(self):
        assert is_section_header("Ingredients: oats, sugar")
        assert is_section_header("GOOD: fibre")

    def test_question_form(self):
        assert is_section_header("What is bad about having this food?")
        assert is_section_header("If there is any difference between claim and ingredients")

    def test_plain_line(self):
        assert not is_section_header("Oats provide fibre")
        assert not is_section_header("1.5 grams of salt")


class TestParseSections:
    """Tests for parse_sections()."""

    def test_numbered_sections(self):
        sections = parse_sections("1. Good:\nItem A\n2. Bad:\nItem B")

        assert [(s.title, s.content) for s in sections] == [
            ("Good:", ["Item A"]),
            ("Bad:", ["Item B"]),
        ]

    def test_header_without_content_is_dropped(self):
        sections = parse_sections("1. Empty:\n2. Full:\nsomething")

        assert [s.title for s in sections] == ["Full:"]

    def test_leading_lines_before_first_header_are_dropped(self):
        sections = parse_sections("preamble\n1. Good:\nItem A")

        assert [s.title for s in sections] == ["Good:"]

    def test_no_headers_falls_back_to_single_section(self):
        sections = parse_sections("Oats, sugar\n\n  palm oil  \n")

        assert len(sections) == 1
        assert sections[0].title == "Analysis"
        assert sections[0].content == ["Oats, sugar", "  palm oil  "]

    def test_empty_text(self):
        assert parse_sections("") == []
        assert parse_sections("\n  \n") == []

    def test_mock_health_analysis(self, mock_claude_service):
        sections = parse_sections(mock_claude_service.health_analysis_response)

        assert len(sections) == 3
        assert sections[1].title == "What is good about having this food?"


class TestLinks:
    def test_extract_urls(self):
        text = "See https://a.com/x and http://b.org/y?z=1 for details"

        assert extract_urls(text) == ["https://a.com/x", "http://b.org/y?z=1"]

    def test_fragments_preserve_text(self):
        text = "Oats https://example.com/oats are good"

        fragments = extract_links(text)

        assert [f.kind for f in fragments] == ["text", "link", "text"]
        assert fragments[1].url == "https://example.com/oats"
        assert "".join(f.content for f in fragments) == text

    def test_text_without_links(self):
        fragments = extract_links("no links here")

        assert len(fragments) == 1
        assert fragments[0].kind == "text"

    def test_empty_text(self):
        assert extract_links("") == []

    def test_render_fragments(self):
        assert render_fragments(extract_links("a https://x.com b")) == "a <https://x.com> b"


class TestRenderSections:
    def test_bullets_and_links(self):
        sections = parse_sections("1. Good:\nFibre https://example.com/oats\n2. Bad:\nSugar")

        assert render_sections(sections) == (
            "Good:\n  • Fibre <https://example.com/oats>\n\nBad:\n  • Sugar"
        )
