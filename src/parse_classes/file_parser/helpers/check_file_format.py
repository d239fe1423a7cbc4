"""check_file_format.py
Checks the declared format of a file and confirms that it's supported by the
document processing pipeline.
"""

import os
from typing import Iterable, Optional

from src.exceptions import UnsupportedFormatError

PLAIN_TEXT_TYPE = "text/plain"
MARKDOWN_TYPE = "text/markdown"
PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# File extensions accepted by the upload component, mapped to declared types
EXTENSION_TYPE_MAP = {
    ".txt": PLAIN_TEXT_TYPE,
    ".md": MARKDOWN_TYPE,
    ".pdf": PDF_TYPE,
    ".docx": DOCX_TYPE,
}


def check_file_format(
    declared_type: Optional[str],
    supported_formats: Iterable[str],
    filename: Optional[str] = None,
) -> str:
    """
    Validate and return the normalized (lowercase, parameters dropped) declared
    type of a file.

    A declared type such as ``"text/plain; charset=utf-8"`` is normalized to
    ``"text/plain"`` before matching.

    Raises:
        UnsupportedFormatError: If the declared type is missing or not in
            ``supported_formats``.
    """
    supported = [fmt.lower() for fmt in supported_formats]
    normalized = (declared_type or "").split(";", 1)[0].strip().lower()

    if normalized and normalized in supported:
        return normalized

    raise UnsupportedFormatError(
        declared_type=declared_type or "",
        supported_formats=supported,
        filename=filename,
        context="Failed in check_file_format() call."
    )


def resolve_declared_type(file_path: str) -> str:
    """
    Resolve the declared type of a local file from its extension.
    Matching is case-insensitive and uses the final extension only.

    Raises:
        UnsupportedFormatError: If the extension maps to no known type.
    """
    file_name = os.path.basename(str(file_path)).lower()
    ext = os.path.splitext(file_name)[1]

    declared_type = EXTENSION_TYPE_MAP.get(ext)
    if declared_type is None:
        raise UnsupportedFormatError(
            declared_type=ext,
            supported_formats=list(EXTENSION_TYPE_MAP.keys()),
            filename=os.path.basename(str(file_path)),
            context="Failed in resolve_declared_type() call."
        )
    return declared_type
