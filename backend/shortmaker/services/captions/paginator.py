"""
Caption pagination

Groups transcribed words into lines of bounded length and lines into pages
of bounded height. A silence longer than ``max_distance_ms`` between two
consecutive words always ends the current page.
"""

from typing import List, Sequence

from ...models.composition import CaptionLine, CaptionPage, Word


def _line_length_with(line: CaptionLine, word: Word) -> int:
    if not line.words:
        return len(word.text)
    return len(line.text) + 1 + len(word.text)


def paginate(
    words: Sequence[Word],
    line_max_length: int,
    line_count: int,
    max_distance_ms: int,
) -> List[CaptionPage]:
    """
    Split ordered words into caption pages.

    Args:
        words: Transcribed words, ordered and non-overlapping
        line_max_length: Maximum characters per line, separating spaces included.
            A single word longer than this still gets a line of its own.
        line_count: Maximum lines per page
        max_distance_ms: Gap between two words that forces a new page

    Returns:
        Pages in time order; concatenating their words yields ``words``.
    """
    if line_count < 1:
        raise ValueError("line_count must be at least 1")

    pages: List[CaptionPage] = []
    page = CaptionPage()
    line = CaptionLine()
    previous: Word | None = None

    def close_line() -> None:
        nonlocal line
        if line.words:
            page.lines.append(line)
        line = CaptionLine()

    def close_page() -> None:
        nonlocal page
        close_line()
        if page.lines:
            pages.append(page)
        page = CaptionPage()

    for word in words:
        if previous is not None and word.start_ms - previous.end_ms > max_distance_ms:
            close_page()

        if line.words and _line_length_with(line, word) > line_max_length:
            close_line()
            if len(page.lines) >= line_count:
                close_page()

        line.words.append(word)
        previous = word

    close_page()
    return pages
