"""exceptions.py
Defines custom exceptions for this project.
"""
from typing import Optional, List, Literal

PipelineStage = Literal["parse", "segment", "store"]


class DocumentPipelineError(Exception):
    """
    Base exception for every failure raised by the document pipeline.

    Attributes:
        stage (str): Pipeline stage that failed ("parse", "segment" or "store").
        identifier (str | None): Filename or document id the failure refers to.
        message (str): Human-readable description of the error.
    """
    stage: PipelineStage = "parse"

    def __init__(self, identifier: Optional[str] = None, message: str = "Pipeline failure"):
        self.identifier = identifier
        self.message = message
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        """Construct the complete error message including stage and identifier."""
        if self.identifier:
            return f"[{self.stage}] {self.identifier}: {self.message}"
        return f"[{self.stage}] {self.message}"


# ------------------------ File Parser Errors ------------------------
class FileParserError(DocumentPipelineError):
    """Base exception for file parser errors."""
    stage = "parse"


class UnsupportedFormatError(FileParserError):
    """Raised when the declared file format has no registered parser."""
    def __init__(
        self,
        declared_type: str,
        supported_formats: List[str],
        filename: Optional[str] = None,
        context: Optional[str] = None
    ):
        self.declared_type = declared_type
        self.supported_formats = list(supported_formats)
        message = (
            f"Format '{declared_type}' is not supported. "
            f"Supported formats: {self.supported_formats}"
        )
        if context:
            message += f" Context: {context}"
        super().__init__(identifier=filename, message=message)


class FileTooLargeError(FileParserError):
    """Raised when a file exceeds the allowed file size."""
    def __init__(self, max_size: int, actual_size: int, filename: Optional[str] = None):
        self.max_size = max_size
        self.actual_size = actual_size
        super().__init__(
            identifier=filename,
            message=f"File size is {actual_size} bytes, which exceeds the max allowed {max_size} bytes."
        )


class FileReadError(FileParserError):
    """Raised when the raw bytes of a file cannot be read or decoded."""
    def __init__(self, filename: str, original_error: str):
        self.original_error = original_error
        super().__init__(
            identifier=filename,
            message=f"Failed to read or decode file. Original error: {original_error}"
        )


# ------------------------ Segmentation Errors ------------------------
class SegmentationError(DocumentPipelineError):
    """Raised when the extracted text cannot be segmented into a structure."""
    stage = "segment"


# ------------------------ Storage Errors ------------------------
class StorageError(DocumentPipelineError):
    """Base exception for DocumentStorage errors."""
    stage = "store"


class DocumentNotFoundError(StorageError):
    """Raised when a document id is unknown, or tombstoned for a mutation."""
    def __init__(self, document_id: str, deleted: bool = False, message: Optional[str] = None):
        self.document_id = document_id
        self.deleted = deleted
        if message is None:
            message = "Document has been deleted" if deleted else "Document not found"
        super().__init__(identifier=document_id, message=message)


class DocumentConflictError(StorageError):
    """Raised when a document is stored with an id that was already used."""
    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(
            identifier=document_id,
            message="A document with this id already exists. Use update() to modify it."
        )


class InvalidQueryError(StorageError):
    """Raised when a search query holds an unrecognized sort or filter value."""
    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(identifier=field_name, message=message)


class InvalidUpdateError(StorageError):
    """Raised when an update holds fields that cannot be merged into a document."""
    def __init__(self, document_id: str, message: str):
        self.document_id = document_id
        super().__init__(identifier=document_id, message=message)


class VersionNotFoundError(DocumentNotFoundError):
    """Raised when a document exists but holds no version with the requested number."""
    def __init__(self, document_id: str, version: int):
        self.version = version
        super().__init__(document_id, message=f"Version {version} not found")
