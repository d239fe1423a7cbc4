"""document_storage.py
Holds DocumentStorage: the in-memory record store, inverted search index,
version history, tags and aggregate analytics for processed documents.
"""

import re
import threading
import time
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from src.exceptions import (
    DocumentConflictError,
    DocumentNotFoundError,
    InvalidQueryError,
    InvalidUpdateError,
    VersionNotFoundError,
)
from src.logging import LoggerFactory
from src.models import (
    DateRange,
    DocumentChange,
    DocumentMetadata,
    DocumentStatus,
    DocumentStructure,
    DocumentVersion,
    ProcessedDocument,
    SearchQuery,
    SearchResult,
    StorageStats,
    StoredDocument,
    utc_now,
)

from src.storage.helpers.search_index import InvertedIndex
from src.storage.helpers.tokenizer import extract_searchable_words, is_index_searchable
from src.storage.helpers.version_diff import diff_sections

logger = LoggerFactory().get_logger(name="document_storage", logger_type="storage")

SORT_KEYS: Dict[str, Callable[[StoredDocument], Any]] = {
    "date": lambda stored: stored.last_modified,
    "name": lambda stored: stored.document.filename,
    "size": lambda stored: stored.document.metadata.size,
}
SORT_ORDERS = ("asc", "desc")

# Fields of ProcessedDocument that update() may replace, with their expected types
UPDATABLE_FIELDS: Dict[str, Tuple[type, ...]] = {
    "filename": (str,),
    "extracted_text": (str,),
    "pages": (tuple, list),
    "metadata": (DocumentMetadata,),
    "structure": (DocumentStructure,),
}

Updates = Union[Dict[str, Any], Callable[[ProcessedDocument], Dict[str, Any]]]


def _unique(tags: Iterable[str]) -> Tuple[str, ...]:
    """Drop duplicate tags, keeping first-seen order."""
    if isinstance(tags, str):
        tags = [tags]
    return tuple(dict.fromkeys(tags))


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocumentStorage:
    """
    In-memory storage and query engine for ``ProcessedDocument`` records.

    Owns the id -> ``StoredDocument`` map and the token -> ids inverted index.
    Neither is ever handed to callers: reads return frozen ``StoredDocument``
    instances, and every mutation builds a new instance and swaps it in.

    Concurrency:
        * Mutations of the same id (update, soft delete, tag changes) are
          serialized by a per-id lock. Locks are created by ``store`` only,
          so unknown ids never allocate one.
        * Each mutation prepares everything that can fail first, then commits
          the record swap and the index swap together under a single state
          lock. Failed mutations leave the store and the index unchanged.
        * Searches and analytics take their snapshot under the same state
          lock, so they never observe a half-applied mutation.

    Create one instance per hosting process (or per test) and pass it to the
    code that needs it.

    Args:
        clock (callable | None): Zero-argument callable returning the current
            timezone-aware datetime. Defaults to ``utc_now``.

    Example
    -------
    >>> storage = DocumentStorage()
    >>> document_id = storage.store(processed_document, tags=["resume"])
    >>> storage.search(SearchQuery(content_search="python")).total_count
    1
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utc_now
        self._documents: Dict[str, StoredDocument] = {}
        self._index = InvertedIndex()
        self._state_lock = threading.RLock()
        self._document_locks: Dict[str, threading.Lock] = {}

    def __len__(self) -> int:
        """Number of active documents."""
        with self._state_lock:
            return sum(1 for stored in self._documents.values() if stored.is_active)

    def __contains__(self, document_id: str) -> bool:
        """True if ``document_id`` is stored and active."""
        with self._state_lock:
            stored = self._documents.get(document_id)
        return stored is not None and stored.is_active

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def store(self, document: ProcessedDocument, tags: Optional[Iterable[str]] = None) -> str:
        """
        Store a newly processed document and index its content and filename.

        Args:
            document (ProcessedDocument): Output of the intake pipeline.
            tags (Iterable[str] | None): Initial tags (duplicates dropped).

        Returns:
            str: The id of the stored document.

        Raises:
            DocumentConflictError: If a document with the same id was ever
                stored, including tombstoned ones.
        """
        tokens = self._document_tokens(document)
        now = self._clock()
        stored = StoredDocument(
            id=document.id,
            document=document,
            created_at=now,
            last_modified=now,
            tags=_unique(tags or ()),
        )

        with self._state_lock:
            if document.id in self._documents:
                logger.warning(f"Rejected store of existing document id='{document.id}'")
                raise DocumentConflictError(document.id)
            self._documents[document.id] = stored
            self._document_locks[document.id] = threading.Lock()
            self._index.replace(document.id, tokens)

        logger.info(
            f"Stored document id='{document.id}' filename='{document.filename}' "
            f"tags={list(stored.tags)}"
        )
        return document.id

    def update(self, document_id: str, updates: Updates) -> StoredDocument:
        """
        Shallow-merge ``updates`` into a stored document.

        A ``DocumentVersion`` snapshot of the pre-update state is appended
        first (version = number of existing versions + 1), then the fields are
        merged, ``last_modified`` is bumped and the document is re-indexed
        from scratch.

        Args:
            document_id (str): Id of an active document.
            updates (dict | callable): ``ProcessedDocument`` field names mapped
                to their new values. ``id`` may not change. A callable receives
                the current ``ProcessedDocument`` under the per-id lock and
                returns that mapping, so updates derived from the current
                state never apply to a stale base.

        Returns:
            StoredDocument: The updated record.

        Raises:
            DocumentNotFoundError: If the id is unknown or tombstoned.
            InvalidUpdateError: If ``updates`` holds unknown fields, values of
                the wrong type, or a different id.
        """
        with self._document_lock(document_id):
            current = self._get_active(document_id)
            if callable(updates):
                updates = updates(current.document)
            new_document = self._merge_updates(current.document, updates)
            tokens = self._document_tokens(new_document)

            now = self._clock()
            version_number = len(current.versions) + 1
            version = DocumentVersion(
                id=f"version-{version_number}",
                document_id=document_id,
                version=version_number,
                uploaded_at=now,
                metadata=current.document.metadata,
                changes=tuple(diff_sections(current.document, new_document)),
                document=current.document,
            )
            updated = replace(
                current,
                document=new_document,
                versions=current.versions + (version,),
                last_modified=now,
            )
            self._commit(updated, tokens=tokens)

        logger.info(
            f"Updated document id='{document_id}' version={version_number} "
            f"fields={sorted(updates)} changes={len(version.changes)}"
        )
        return updated

    def soft_delete(self, document_id: str) -> StoredDocument:
        """
        Tombstone a document: mark it deleted and drop all its index entries.
        The record and its versions are retained for audit.

        Raises:
            DocumentNotFoundError: If the id is unknown or already tombstoned.
        """
        with self._document_lock(document_id):
            current = self._get_active(document_id)
            deleted = replace(
                current,
                status=DocumentStatus.DELETED,
                last_modified=self._clock(),
            )
            self._commit(deleted, remove_from_index=True)

        logger.info(
            f"Deleted document id='{document_id}' filename='{current.document.filename}'"
        )
        return deleted

    def add_tags(self, document_id: str, tags: Iterable[str]) -> bool:
        """
        Add ``tags`` to a document (set union). Tags already present are
        ignored; ``last_modified`` only changes when a tag was added.

        Returns:
            bool: True if the tag set changed.

        Raises:
            DocumentNotFoundError: If the id is unknown or tombstoned.
        """
        with self._document_lock(document_id):
            current = self._get_active(document_id)
            new_tags = tuple(tag for tag in _unique(tags) if tag not in current.tags)
            if not new_tags:
                return False
            self._commit(replace(
                current,
                tags=current.tags + new_tags,
                last_modified=self._clock(),
            ))

        logger.info(f"Tags added to document id='{document_id}': {list(new_tags)}")
        return True

    def remove_tags(self, document_id: str, tags: Iterable[str]) -> bool:
        """
        Remove ``tags`` from a document (set difference). Absent tags are
        ignored; ``last_modified`` only changes when a tag was removed.

        Returns:
            bool: True if the tag set changed.

        Raises:
            DocumentNotFoundError: If the id is unknown or tombstoned.
        """
        with self._document_lock(document_id):
            current = self._get_active(document_id)
            to_remove = set(_unique(tags))
            kept = tuple(tag for tag in current.tags if tag not in to_remove)
            if kept == current.tags:
                return False
            self._commit(replace(current, tags=kept, last_modified=self._clock()))

        logger.info(
            f"Tags removed from document id='{document_id}': {sorted(to_remove)}"
        )
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_document(self, document_id: str) -> Optional[StoredDocument]:
        """Return the stored record for ``document_id`` (active or tombstoned), or None."""
        with self._state_lock:
            stored = self._documents.get(document_id)
        if stored is not None:
            logger.debug(
                f"Document retrieved id='{document_id}' filename='{stored.document.filename}'"
            )
        return stored

    def get_all_documents(self) -> List[StoredDocument]:
        """Return every active stored record."""
        with self._state_lock:
            return [stored for stored in self._documents.values() if stored.is_active]

    def get_document_metadata(self, document_id: str) -> Optional[DocumentMetadata]:
        stored = self.get_document(document_id)
        return stored.document.metadata if stored else None

    def get_versions(self, document_id: str) -> List[DocumentVersion]:
        """
        Return the version history of a document. Works for tombstoned
        documents too.

        Raises:
            DocumentNotFoundError: If the id was never stored.
        """
        stored = self.get_document(document_id)
        if stored is None:
            raise DocumentNotFoundError(document_id)
        return list(stored.versions)

    def get_version(self, document_id: str, version: int) -> DocumentVersion:
        """
        Raises:
            DocumentNotFoundError: If the id was never stored.
            VersionNotFoundError: If the document has no such version.
        """
        versions = self.get_versions(document_id)
        if not 1 <= version <= len(versions):
            raise VersionNotFoundError(document_id, version)
        return versions[version - 1]

    def compare_versions(self, document_id: str, from_version: int, to_version: int) -> List[DocumentChange]:
        """Best-effort section-level changes between two version snapshots."""
        old = self.get_version(document_id, from_version)
        new = self.get_version(document_id, to_version)
        return diff_sections(old.document, new.document)

    def lookup_token(self, token: str) -> frozenset:
        """Read-only copy of the ids indexed under ``token``."""
        return self._index.lookup(token.lower())

    # ------------------------------------------------------------------
    # Search and analytics
    # ------------------------------------------------------------------
    def search(self, query: Optional[SearchQuery] = None) -> SearchResult:
        """
        Return the active documents matching every filter set in ``query``.

        Filters:
            * filename: case-insensitive regex searched in the filename.
            * file_type: exact match on the declared type.
            * tags: documents holding ANY of the tags.
            * content_search: every whitespace-separated lowercase term must
              be a substring of the lowercased extracted text. The inverted
              index narrows the candidates for plain-word terms first.
            * date_range: inclusive range on ``created_at``.

        Without ``sort_by`` the order of the results is unspecified. An empty
        result is not an error.

        Raises:
            InvalidQueryError: On an unknown sort key or order, an invalid
                filename regex, a tag filter given as a bare string, or a date
                range whose start is after its end.
        """
        query = query or SearchQuery()
        start_time = time.perf_counter()

        filename_pattern = self._validate_query(query)
        terms = query.content_search.lower().split() if query.content_search else []

        logger.debug(
            f"Starting document search filename={query.filename!r} content={query.content_search!r} "
            f"tags={query.tags} file_type={query.file_type!r}"
        )

        with self._state_lock:
            results = [stored for stored in self._documents.values() if stored.is_active]
            candidate_ids = self._index_candidates(terms)

        if candidate_ids is not None:
            results = [stored for stored in results if stored.id in candidate_ids]

        if filename_pattern is not None:
            results = [
                stored for stored in results
                if filename_pattern.search(stored.document.filename)
            ]

        if query.file_type:
            results = [
                stored for stored in results
                if stored.document.metadata.type == query.file_type
            ]

        if query.tags:
            wanted_tags = set(query.tags)
            results = [
                stored for stored in results
                if wanted_tags.intersection(stored.tags)
            ]

        if terms:
            results = [
                stored for stored in results
                if all(term in stored.document.extracted_text.lower() for term in terms)
            ]

        if query.date_range is not None:
            range_start = _as_utc(query.date_range.start)
            range_end = _as_utc(query.date_range.end)
            results = [
                stored for stored in results
                if range_start <= stored.created_at <= range_end
            ]

        if query.sort_by:
            results.sort(
                key=SORT_KEYS[query.sort_by],
                reverse=query.sort_order == "desc",
            )

        search_time_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Document search complete results={len(results)} time={search_time_ms:.2f}ms"
        )
        return SearchResult(
            documents=results,
            total_count=len(results),
            search_time_ms=search_time_ms,
        )

    def get_storage_stats(self) -> StorageStats:
        """Aggregate counts and sizes over active documents only."""
        active_documents = self.get_all_documents()

        stats = StorageStats(total_documents=len(active_documents))
        for stored in active_documents:
            metadata = stored.document.metadata
            stats.total_size += metadata.size
            stats.file_types[metadata.type] = stats.file_types.get(metadata.type, 0) + 1
            for tag in stored.tags:
                stats.tags_usage[tag] = stats.tags_usage.get(tag, 0) + 1

        if active_documents:
            stats.average_size = stats.total_size / len(active_documents)
        return stats

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _document_lock(self, document_id: str) -> threading.Lock:
        """
        Per-id mutation lock of a stored document.

        Raises:
            DocumentNotFoundError: If the id was never stored.
        """
        with self._state_lock:
            lock = self._document_locks.get(document_id)
        if lock is None:
            raise DocumentNotFoundError(document_id)
        return lock

    def _get_active(self, document_id: str) -> StoredDocument:
        with self._state_lock:
            stored = self._documents.get(document_id)
        if stored is None:
            raise DocumentNotFoundError(document_id)
        if not stored.is_active:
            raise DocumentNotFoundError(document_id, deleted=True)
        return stored

    def _commit(
        self,
        stored: StoredDocument,
        tokens: Optional[List[str]] = None,
        remove_from_index: bool = False,
    ) -> None:
        """Swap in a new record, and its index entries, as one atomic step."""
        with self._state_lock:
            self._documents[stored.id] = stored
            if remove_from_index:
                self._index.remove(stored.id)
            elif tokens is not None:
                self._index.replace(stored.id, tokens)

    @staticmethod
    def _document_tokens(document: ProcessedDocument) -> List[str]:
        return (
            extract_searchable_words(document.extracted_text)
            + extract_searchable_words(document.filename)
        )

    @staticmethod
    def _merge_updates(document: ProcessedDocument, updates: Dict[str, Any]) -> ProcessedDocument:
        known_fields = {f.name for f in fields(ProcessedDocument)}

        if not isinstance(updates, dict):
            raise InvalidUpdateError(
                document.id, f"Updates must be a dict, got {type(updates).__name__}"
            )

        unknown = sorted(set(updates) - known_fields)
        if unknown:
            raise InvalidUpdateError(document.id, f"Unknown fields: {unknown}")

        if "id" in updates and updates["id"] != document.id:
            raise InvalidUpdateError(document.id, "The id of a stored document cannot change")

        for field_name, expected_types in UPDATABLE_FIELDS.items():
            if field_name in updates and not isinstance(updates[field_name], expected_types):
                expected_names = " or ".join(t.__name__ for t in expected_types)
                raise InvalidUpdateError(
                    document.id,
                    f"Field '{field_name}' must be {expected_names}, "
                    f"got {type(updates[field_name]).__name__}"
                )

        merged = {name: value for name, value in updates.items() if name != "id"}
        return replace(document, **merged)

    def _index_candidates(self, terms: List[str]) -> Optional[frozenset]:
        """
        Ids that can possibly match every index-searchable term, or None if no
        term can use the index. Must be called under the state lock.
        """
        candidate_ids = None
        for term in terms:
            if not is_index_searchable(term):
                continue
            term_ids = self._index.lookup_containing(term)
            candidate_ids = term_ids if candidate_ids is None else candidate_ids & term_ids
        return candidate_ids

    @staticmethod
    def _validate_query(query: SearchQuery) -> Optional[re.Pattern]:
        """Fail fast on unusable query values; returns the compiled filename pattern."""
        if query.sort_by is not None and query.sort_by not in SORT_KEYS:
            raise InvalidQueryError(
                f"Unknown sort_by '{query.sort_by}'. Expected one of {sorted(SORT_KEYS)}",
                field_name="sort_by",
            )
        if query.sort_order not in SORT_ORDERS:
            raise InvalidQueryError(
                f"Unknown sort_order '{query.sort_order}'. Expected one of {list(SORT_ORDERS)}",
                field_name="sort_order",
            )
        if isinstance(query.tags, str):
            raise InvalidQueryError(
                "tags must be a list of tags, not a single string",
                field_name="tags",
            )
        if query.date_range is not None:
            if not isinstance(query.date_range, DateRange):
                raise InvalidQueryError(
                    f"date_range must be a DateRange, got {type(query.date_range).__name__}",
                    field_name="date_range",
                )
            if _as_utc(query.date_range.start) > _as_utc(query.date_range.end):
                raise InvalidQueryError(
                    "date_range start is after its end",
                    field_name="date_range",
                )

        if not query.filename:
            return None
        try:
            return re.compile(query.filename, re.IGNORECASE)
        except re.error as e:
            raise InvalidQueryError(
                f"Invalid filename pattern '{query.filename}': {e}",
                field_name="filename",
            )
