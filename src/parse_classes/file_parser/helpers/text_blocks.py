"""text_blocks.py
Used to turn a continuous output of text into DocumentPages holding TextBlocks
with synthesized layout attributes.
"""

import re
from typing import Iterable, List, Tuple

from src.config import PROCESSOR_DEFAULTS
from src.models import BlockPosition, DocumentPage, PageDimensions, TextBlock

ALL_CAPS_PATTERN = re.compile(r"^[A-Z][A-Z\s]+$")


def is_heading_like(line: str) -> bool:
    """
    Heuristic used to flag a line as bold: short AND (fully uppercase, all caps
    with spaces, or ending with a colon).
    """
    return len(line) < PROCESSOR_DEFAULTS.BOLD_LINE_MAX_LENGTH and (
        line.isupper()
        or bool(ALL_CAPS_PATTERN.match(line))
        or line.endswith(":")
    )


def build_text_blocks(text: str) -> Tuple[TextBlock, ...]:
    """
    Split the input text on line breaks and turn every non-empty line into a
    `TextBlock`.

    Blocks get a fixed x offset and width, and a vertical offset that grows
    with the index of the source line (blank lines still advance it). The
    block id is derived from the same line index.

    Args:
        text (str): The text to split into blocks.

    Returns:
        Tuple[TextBlock, ...]: One block per non-empty line, in source order.
    """
    blocks = []
    for index, raw_line in enumerate(text.split("\n")):
        line = raw_line.strip()
        if not line:
            continue

        blocks.append(
            TextBlock(
                id=f"block-{index}",
                text=line,
                position=BlockPosition(
                    x=PROCESSOR_DEFAULTS.BLOCK_X,
                    y=PROCESSOR_DEFAULTS.BLOCK_Y + index * PROCESSOR_DEFAULTS.LINE_SPACING,
                    width=PROCESSOR_DEFAULTS.BLOCK_WIDTH,
                    height=PROCESSOR_DEFAULTS.BLOCK_HEIGHT,
                ),
                font_size=PROCESSOR_DEFAULTS.FONT_SIZE,
                font_family=PROCESSOR_DEFAULTS.FONT_FAMILY,
                is_bold=is_heading_like(line),
                is_italic=False,
            )
        )
    return tuple(blocks)


def build_page(page_number: int, text: str) -> DocumentPage:
    """Build a single letter-sized `DocumentPage` for the given text."""
    return DocumentPage(
        page_number=page_number,
        content=text,
        dimensions=PageDimensions(
            width=PROCESSOR_DEFAULTS.PAGE_WIDTH,
            height=PROCESSOR_DEFAULTS.PAGE_HEIGHT,
        ),
        text_blocks=build_text_blocks(text),
    )


def build_pages(page_texts: List[str]) -> Tuple[DocumentPage, ...]:
    """
    Build one `DocumentPage` per entry of ``page_texts``, numbered from 1.
    An empty list still yields a single empty page.
    """
    if not page_texts:
        return (build_page(1, ""),)
    return tuple(build_page(number, text) for number, text in enumerate(page_texts, start=1))


def join_page_text(pages: Iterable[DocumentPage]) -> str:
    """Reconstruct the full extracted text from a list of pages."""
    return "\n".join(page.content for page in sorted(pages, key=lambda p: p.page_number))
