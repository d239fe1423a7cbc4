"""tokenizer.py
Tokenizer shared by index maintenance and content search.
"""

import re
from typing import List

from src.config import PROCESSOR_DEFAULTS

STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "can", "this", "that", "these", "those",
])

NON_WORD_PATTERN = re.compile(r"\W")
PLAIN_WORD_PATTERN = re.compile(r"^\w+$")


def is_stop_word(word: str) -> bool:
    return word in STOP_WORDS


def extract_searchable_words(text: str) -> List[str]:
    """
    Split ``text`` into searchable tokens.

    The text is lowercased, every non-word character becomes whitespace, and
    the result is split on whitespace. Tokens shorter than
    ``MIN_TOKEN_LENGTH`` and stop words are dropped. Duplicates are kept, in
    source order.
    """
    words = NON_WORD_PATTERN.sub(" ", text.lower()).split()
    return [
        word for word in words
        if len(word) >= PROCESSOR_DEFAULTS.MIN_TOKEN_LENGTH and not is_stop_word(word)
    ]


def is_index_searchable(term: str) -> bool:
    """
    Return True if every document whose lowercased text contains ``term`` as a
    substring is guaranteed to hold an indexed token containing ``term``.

    That holds for plain words of at least ``MIN_TOKEN_LENGTH`` characters
    that cannot hide inside a stop word (stop words are never indexed).
    """
    return (
        len(term) >= PROCESSOR_DEFAULTS.MIN_TOKEN_LENGTH
        and bool(PLAIN_WORD_PATTERN.match(term))
        and not any(term in stop_word for stop_word in STOP_WORDS)
    )
