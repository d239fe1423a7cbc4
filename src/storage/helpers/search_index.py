"""search_index.py
Inverted index mapping tokens to the ids of the documents that contain them.
"""

import threading
from typing import Dict, FrozenSet, Iterable, Set

from src.config import PROCESSOR_DEFAULTS


class InvertedIndex:
    """
    Hash map of token -> set of document ids, plus the reverse map of
    document id -> tokens so one document's entries can be dropped without
    scanning the whole vocabulary.

    Every public method holds an internal lock, so each call is atomic with
    respect to the others. Lookups return frozen copies; the internal sets are
    never handed out.

    Substring lookups scan the vocabulary once per fragment; their results are
    cached until the next ``replace`` or ``remove``, or until the cache holds
    ``cache_size`` fragments.
    """

    def __init__(self, cache_size: int = PROCESSOR_DEFAULTS.CONTAINING_CACHE_SIZE):
        self.cache_size = cache_size
        self._postings: Dict[str, Set[str]] = {}
        self._document_tokens: Dict[str, FrozenSet[str]] = {}
        self._containing_cache: Dict[str, FrozenSet[str]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._postings)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._postings

    def replace(self, document_id: str, tokens: Iterable[str]) -> None:
        """Drop every entry of ``document_id`` and index it under ``tokens``."""
        new_tokens = frozenset(tokens)
        with self._lock:
            self._remove_unlocked(document_id)
            for token in new_tokens:
                self._postings.setdefault(token, set()).add(document_id)
            self._document_tokens[document_id] = new_tokens

    def remove(self, document_id: str) -> None:
        """Drop every entry referencing ``document_id``."""
        with self._lock:
            self._remove_unlocked(document_id)

    def lookup(self, token: str) -> FrozenSet[str]:
        """Ids of the documents indexed under exactly ``token``."""
        with self._lock:
            return frozenset(self._postings.get(token, ()))

    def lookup_containing(self, fragment: str) -> FrozenSet[str]:
        """Ids of the documents indexed under any token containing ``fragment``."""
        with self._lock:
            cached = self._containing_cache.get(fragment)
            if cached is not None:
                return cached

            matched: Set[str] = set()
            for token, document_ids in self._postings.items():
                if fragment in token:
                    matched.update(document_ids)
            if len(self._containing_cache) >= self.cache_size:
                self._containing_cache.clear()
            result = self._containing_cache[fragment] = frozenset(matched)
            return result

    def tokens_for(self, document_id: str) -> FrozenSet[str]:
        with self._lock:
            return self._document_tokens.get(document_id, frozenset())

    def _remove_unlocked(self, document_id: str) -> None:
        self._containing_cache.clear()
        for token in self._document_tokens.pop(document_id, ()):
            document_ids = self._postings.get(token)
            if document_ids is None:
                continue
            document_ids.discard(document_id)
            if not document_ids:
                del self._postings[token]
