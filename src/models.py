"""models.py
Holds standardized data models used across various functions.
"""
import os
from enum import Enum
from typing import List, Optional, Dict, Tuple, Literal
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.parse_classes.file_parser.helpers.check_file_format import resolve_declared_type

SectionType = Literal[
    "contact",
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "other",
]
ListType = Literal["bullet", "numbered"]
ChangeType = Literal["added", "removed", "modified"]
SortBy = Literal["date", "name", "size"]
SortOrder = Literal["asc", "desc"]


def utc_now() -> datetime:
    """Timezone-aware current time used for every stored timestamp."""
    return datetime.now(timezone.utc)


def _freeze_sequences(instance, *field_names) -> None:
    """Store the named sequence fields of a frozen dataclass as tuples."""
    for name in field_names:
        object.__setattr__(instance, name, tuple(getattr(instance, name)))


# ---------------------------------------------------------------------------
# INTAKE INPUT
# ---------------------------------------------------------------------------
@dataclass
class RawFile:
    """
    A raw uploaded file, exactly as supplied by the upload component.

    Attributes:
        content (bytes): Raw bytes of the file.
        filename (str): Original filename.
        declared_type (str): Declared MIME type (e.g. "application/pdf").
        size (int | None): Declared byte size. Defaults to ``len(content)``.
        last_modified (datetime | None): File-level modification time.
            Defaults to now.
    """
    content: bytes
    filename: str
    declared_type: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.content)
        if self.last_modified is None:
            self.last_modified = utc_now()

    @classmethod
    def from_path(cls, file_path: str, declared_type: Optional[str] = None) -> "RawFile":
        """
        Read a local file into a ``RawFile``. The declared type is resolved from
        the file extension unless given explicitly.

        Raises:
            FileNotFoundError: If nothing exists at ``file_path``.
            UnsupportedFormatError: If the extension maps to no known format.
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        with open(file_path, "rb") as f:
            content = f.read()

        return cls(
            content=content,
            filename=os.path.basename(str(file_path)),
            declared_type=declared_type or resolve_declared_type(str(file_path)),
            size=os.path.getsize(file_path),
            last_modified=datetime.fromtimestamp(os.path.getmtime(file_path), tz=timezone.utc),
        )


# ---------------------------------------------------------------------------
# PAGES AND TEXT BLOCKS
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BlockPosition:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class PageDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class TextBlock:
    """
    A single non-empty line of a page with synthesized layout attributes.

    Attributes:
        id (str): ``block-<line index>``, counting every source line.
        text (str): Stripped line text.
        position (BlockPosition): Synthesized position and size.
        font_size (int): Synthesized font size.
        font_family (str): Synthesized font family.
        is_bold (bool): Heuristic heading-like flag.
        is_italic (bool): Always False; italics are not recoverable.
    """
    id: str
    text: str
    position: BlockPosition
    font_size: int
    font_family: str
    is_bold: bool
    is_italic: bool = False


@dataclass(frozen=True)
class DocumentPage:
    page_number: int
    content: str
    dimensions: PageDimensions
    text_blocks: Tuple[TextBlock, ...] = ()

    def __post_init__(self):
        _freeze_sequences(self, "text_blocks")


@dataclass(frozen=True)
class ParsedText:
    """Output of ``FileParser.parse()``: the full text plus its page breakdown."""
    text: str
    pages: Tuple[DocumentPage, ...] = ()

    def __post_init__(self):
        _freeze_sequences(self, "pages")


# ---------------------------------------------------------------------------
# METADATA
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DocumentMetadata:
    filename: str
    size: int
    type: str
    last_modified: datetime
    page_count: int
    word_count: int
    character_count: int
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None


# ---------------------------------------------------------------------------
# STRUCTURE
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DocumentHeading:
    id: str
    text: str
    level: int
    position: int


@dataclass(frozen=True)
class DocumentParagraph:
    id: str
    text: str
    position: int
    section: Optional[str] = None


@dataclass(frozen=True)
class DocumentList:
    id: str
    type: ListType
    position: int
    items: Tuple[str, ...] = ()
    section: Optional[str] = None

    def __post_init__(self):
        _freeze_sequences(self, "items")


@dataclass(frozen=True)
class DocumentSection:
    """
    A titled region of a document opened by a heading.

    Offsets index into the document's extracted text. ``start_position`` is the
    offset of the heading line and ``end_position`` the offset after the last
    character attributed to the section. Sections of one document never
    overlap and are ordered by offset.

    Attributes:
        id (str): ``section-<n>`` counting from 0.
        title (str): Heading text that opened the section.
        type (SectionType): Keyword-classified section type.
        content (str): Body lines of the section, each followed by a newline.
        start_position (int): Offset of the heading line.
        end_position (int): End offset of the section.
        confidence (float): Fixed heuristic confidence of the classification.
    """
    id: str
    title: str
    type: SectionType
    content: str
    start_position: int
    end_position: int
    confidence: float


@dataclass(frozen=True)
class DocumentStructure:
    sections: Tuple[DocumentSection, ...] = ()
    headings: Tuple[DocumentHeading, ...] = ()
    paragraphs: Tuple[DocumentParagraph, ...] = ()
    lists: Tuple[DocumentList, ...] = ()

    def __post_init__(self):
        _freeze_sequences(self, "sections", "headings", "paragraphs", "lists")


# ---------------------------------------------------------------------------
# PROCESSED DOCUMENT
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ProcessedDocument:
    """
    The typed record produced by the intake pipeline for one uploaded file.

    ``extracted_text`` and ``structure.sections`` are exposed unchanged to
    downstream consumers after intake. The record and everything it holds
    (pages, text blocks, structure) is frozen, with sequences stored as
    tuples, and may be shared between versions. The record is only ever
    replaced as a whole (see ``DocumentStorage.update``).
    """
    id: str
    filename: str
    extracted_text: str
    pages: Tuple[DocumentPage, ...]
    metadata: DocumentMetadata
    structure: DocumentStructure

    def __post_init__(self):
        _freeze_sequences(self, "pages")

    @property
    def content(self) -> str:
        return self.extracted_text


# ---------------------------------------------------------------------------
# STORAGE
# ---------------------------------------------------------------------------
class DocumentStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class DocumentChange:
    type: ChangeType
    section: str
    position: int
    old_content: Optional[str] = None
    new_content: Optional[str] = None


@dataclass(frozen=True)
class DocumentVersion:
    """
    Snapshot of a stored document taken right before an update was applied.

    Attributes:
        id (str): ``version-<n>``.
        document_id (str): Id of the parent document.
        version (int): Version number, starting at 1.
        uploaded_at (datetime): When the snapshot was taken.
        changes (tuple[DocumentChange]): Best-effort section-level changes
            introduced by the update. May be empty.
        metadata (DocumentMetadata): Metadata before the update.
        document (ProcessedDocument | None): Full document before the update.
    """
    id: str
    document_id: str
    version: int
    uploaded_at: datetime
    metadata: DocumentMetadata
    changes: Tuple[DocumentChange, ...] = ()
    document: Optional[ProcessedDocument] = None


@dataclass(frozen=True)
class StoredDocument:
    """
    A ``ProcessedDocument`` as owned by ``DocumentStorage``. Instances are
    never mutated in place; every mutation swaps in a new instance.
    """
    id: str
    document: ProcessedDocument
    created_at: datetime
    last_modified: datetime
    versions: Tuple[DocumentVersion, ...] = ()
    tags: Tuple[str, ...] = ()
    status: DocumentStatus = DocumentStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is DocumentStatus.ACTIVE


# ---------------------------------------------------------------------------
# SEARCH AND ANALYTICS
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime


@dataclass
class SearchQuery:
    """
    Filters for ``DocumentStorage.search``. Every filter is optional and the
    filter categories combine with AND.

    Attributes:
        filename (str | None): Case-insensitive regex searched in the filename.
        file_type (str | None): Exact declared MIME type.
        tags (list[str] | None): Match documents holding ANY of these tags.
        content_search (str | None): Whitespace-separated terms that must ALL
            appear in the lowercased extracted text.
        date_range (DateRange | None): Inclusive range on ``created_at``.
        sort_by (SortBy | None): "date" (last modified), "name" or "size".
        sort_order (SortOrder): "asc" or "desc".
    """
    filename: Optional[str] = None
    file_type: Optional[str] = None
    tags: Optional[List[str]] = None
    content_search: Optional[str] = None
    date_range: Optional[DateRange] = None
    sort_by: Optional[SortBy] = None
    sort_order: SortOrder = "asc"


@dataclass
class SearchResult:
    documents: List[StoredDocument]
    total_count: int
    search_time_ms: float


@dataclass
class StorageStats:
    total_documents: int = 0
    total_size: int = 0
    average_size: float = 0
    file_types: Dict[str, int] = field(default_factory=dict)
    tags_usage: Dict[str, int] = field(default_factory=dict)
