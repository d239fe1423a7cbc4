"""config.py
Holds various defaults for different document processing and indexing settings.
"""

from dataclasses import dataclass, field

# --------------------------------------------------------------
# SETUP DEFAULT VALUES
# --------------------------------------------------------------
@dataclass
class ProcessorDefaults:
    """
    Default settings for parameters used across simple_document_indexer repo.
    """
    # ---- FileParser settings ----
    MAX_FILE_SIZE_MB: float = field(
        default = 5.0,
        metadata = {
            "description": "Maximum allowed file size in MB"
    })
    RECOVERY_MIN_RUN: int = field(
        default = 4,
        metadata = {
            "description": "Minimum printable run length kept by best-effort text recovery"
    })

    # ---- Page synthesis settings ----
    PAGE_WIDTH: int = field(
        default = 612,
        metadata = {
            "description": "Synthesized page width (US letter, points)"
    })
    PAGE_HEIGHT: int = field(
        default = 792,
        metadata = {
            "description": "Synthesized page height (US letter, points)"
    })
    BLOCK_X: int = field(
        default = 50,
        metadata = {
            "description": "Left offset of every synthesized text block"
    })
    BLOCK_Y: int = field(
        default = 50,
        metadata = {
            "description": "Top offset of the first synthesized text block"
    })
    BLOCK_WIDTH: int = field(
        default = 500,
        metadata = {
            "description": "Width of every synthesized text block"
    })
    BLOCK_HEIGHT: int = field(
        default = 18,
        metadata = {
            "description": "Height of every synthesized text block"
    })
    LINE_SPACING: int = field(
        default = 20,
        metadata = {
            "description": "Vertical offset added per source line"
    })
    FONT_SIZE: int = field(
        default = 12,
        metadata = {
            "description": "Font size reported for synthesized text blocks"
    })
    FONT_FAMILY: str = field(
        default = "Arial",
        metadata = {
            "description": "Font family reported for synthesized text blocks"
    })
    BOLD_LINE_MAX_LENGTH: int = field(
        default = 50,
        metadata = {
            "description": "Lines at or above this length are never flagged bold"
    })

    # ---- StructureSegmenter settings ----
    HEADING_MAX_LENGTH: int = field(
        default = 100,
        metadata = {
            "description": "Lines at or above this length are never headings"
    })
    SECTION_CONFIDENCE: float = field(
        default = 0.8,
        metadata = {
            "description": "Fixed confidence reported for every detected section"
    })

    # ---- DocumentProcessingFramework settings ----
    MAX_THREADS: int = field(
        default = 3,
        metadata = {
            "description": "Maximum number of threads used to process documents in parallel"
    })

    # ---- DocumentStorage settings ----
    MIN_TOKEN_LENGTH: int = field(
        default = 3,
        metadata = {
            "description": "Shortest token kept by the search tokenizer"
    })
    CONTAINING_CACHE_SIZE: int = field(
        default = 1024,
        metadata = {
            "description": "Substring lookups kept in the index cache before it is cleared"
    })


# Import this where needed
PROCESSOR_DEFAULTS = ProcessorDefaults()
