"""
Turn free-form analysis text into sections, bullet items and link fragments.

The generator's structure is not guaranteed, so every parser here degrades to
returning the text as-is rather than failing.
"""

import re

from food_analyzer.schemas import AnalysisSection, TextFragment

FALLBACK_SECTION_TITLE = "Analysis"

_NUMBERED_RE = re.compile(r"^\d+\.\s")
_NUMBER_PREFIX_RE = re.compile(r"^\d+\.\s*")
_KEYWORD_LABEL_RE = re.compile(
    r"^(good|bad|benefits?|drawbacks?|health|ingredients?|analysis|product|name|type"
    r"|claims?|concerns?|recommendations?|summary):",
    re.IGNORECASE,
)
_QUESTION_RE = re.compile(
    r"^(what.*(good|bad)|if there is any difference|clearly tell)", re.IGNORECASE
)
_URL_RE = re.compile(r"https?://\S+")


def is_section_header(line: str) -> bool:
    return bool(
        _NUMBERED_RE.match(line) or _KEYWORD_LABEL_RE.match(line) or _QUESTION_RE.match(line)
    )


def parse_sections(text: str) -> list[AnalysisSection]:
    """
    Split analysis text into titled sections.

    A header line closes the previous section, which is kept only if it has a
    title and at least one content line. Text with no recognizable header
    becomes a single "Analysis" section holding every non-blank line as written.
    """
    if not text:
        return []

    raw_lines = [line for line in text.split("\n") if line.strip()]
    lines = [line.strip() for line in raw_lines]
    sections: list[AnalysisSection] = []
    current = AnalysisSection(title="")

    for line in lines:
        if is_section_header(line):
            if current.title and current.content:
                sections.append(current)
            current = AnalysisSection(title=_NUMBER_PREFIX_RE.sub("", line, count=1))
        else:
            current.content.append(line)

    if current.title and current.content:
        sections.append(current)

    if not sections and raw_lines:
        sections.append(AnalysisSection(title=FALLBACK_SECTION_TITLE, content=raw_lines))

    return sections


def extract_urls(text: str) -> list[str]:
    return _URL_RE.findall(text or "")


def extract_links(text: str) -> list[TextFragment]:
    """
    Split text into ordered plain-text and link fragments.

    Joining every fragment's content gives back the original text.
    """
    if not text:
        return []

    fragments: list[TextFragment] = []
    last_index = 0

    for match in _URL_RE.finditer(text):
        if match.start() > last_index:
            fragments.append(TextFragment(kind="text", content=text[last_index:match.start()]))
        fragments.append(TextFragment(kind="link", content=match.group(0), url=match.group(0)))
        last_index = match.end()

    if last_index < len(text):
        fragments.append(TextFragment(kind="text", content=text[last_index:]))

    return fragments


def render_fragments(fragments: list[TextFragment]) -> str:
    return "".join(
        f"<{fragment.url}>" if fragment.kind == "link" else fragment.content
        for fragment in fragments
    )


def render_sections(sections: list[AnalysisSection]) -> str:
    """Plain-text rendering with bullet items, used by the CLI."""
    blocks = []
    for section in sections:
        lines = [section.title]
        for item in section.content:
            lines.append(f"  • {render_fragments(extract_links(item))}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
