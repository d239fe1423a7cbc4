"""server.py
Server to launch a FastAPI / Swagger UI instance over the document intake and
storage pipeline.
"""
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.exceptions import (
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentPipelineError,
    FileReadError,
    FileTooLargeError,
    InvalidQueryError,
    InvalidUpdateError,
    SegmentationError,
    UnsupportedFormatError,
)
from src.logging import LoggerFactory
from src.models import DateRange, RawFile, SearchQuery
from src.parse_classes.document_processing_framework import DocumentProcessingFramework
from src.parse_classes.file_parser.helpers.check_file_format import resolve_declared_type
from src.storage.document_storage import DocumentStorage

logger = LoggerFactory().get_logger(name="api_server", logger_type="default")

# Checked in order, so subclasses must come before their parents
ERROR_STATUS_CODES = (
    (UnsupportedFormatError, 415),
    (FileTooLargeError, 413),
    (FileReadError, 422),
    (SegmentationError, 422),
    (DocumentNotFoundError, 404),
    (DocumentConflictError, 409),
    (InvalidQueryError, 400),
    (InvalidUpdateError, 400),
)

GENERIC_CONTENT_TYPES = ("", "application/octet-stream")

router = APIRouter(tags=["Documents"])


# ============================================================================
# REQUEST MODELS
# ============================================================================
class DateRangeInput(BaseModel):
    start: datetime
    end: datetime


class SearchDocumentsRequest(BaseModel):
    """Request to search stored documents. Every filter is optional."""
    filename: Optional[str] = Field(default=None, description="Case-insensitive regex on the filename")
    file_type: Optional[str] = Field(default=None, description="Exact declared MIME type")
    tags: Optional[List[str]] = Field(default=None, description="Match documents with any of these tags")
    content_search: Optional[str] = Field(default=None, description="Terms that must all appear in the text")
    date_range: Optional[DateRangeInput] = Field(default=None, description="Inclusive range on creation time")
    sort_by: Optional[str] = Field(default=None, description="date, name or size")
    sort_order: str = Field(default="asc", description="asc or desc")


class UpdateDocumentRequest(BaseModel):
    """Fields of a stored document that can be edited over the API."""
    filename: Optional[str] = None
    extracted_text: Optional[str] = None


class TagsRequest(BaseModel):
    tags: List[str] = Field(..., description="Tags to add")


# ============================================================================
# DEPENDENCIES AND ERROR HANDLING
# ============================================================================
def get_storage(request: Request) -> DocumentStorage:
    return request.app.state.storage


def get_framework(request: Request) -> DocumentProcessingFramework:
    return request.app.state.framework


async def handle_pipeline_error(request: Request, exc: DocumentPipelineError) -> JSONResponse:
    """Map pipeline errors to HTTP status codes, keeping the failed stage visible."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES if isinstance(exc, error_type)),
        500,
    )
    logger.warning(f"{request.method} {request.url.path} failed with {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "stage": exc.stage,
            "identifier": exc.identifier,
        },
    )


def _require_document(storage: DocumentStorage, document_id: str):
    stored = storage.get_document(document_id)
    if stored is None:
        raise DocumentNotFoundError(document_id)
    return stored


# ============================================================================
# DOCUMENT ENDPOINTS
# ============================================================================
@router.post(
    "/documents",
    status_code=201,
    summary="Upload a document, process it and store the result",
    description="Accepts TXT, MD, PDF or DOCX uploads. Tags are comma-separated.",
)
async def upload_document(
    file: UploadFile = File(...),
    tags: Optional[str] = Form(None),
    storage: DocumentStorage = Depends(get_storage),
    framework: DocumentProcessingFramework = Depends(get_framework),
):
    contents = await file.read()
    filename = file.filename or "unknown"

    declared_type = file.content_type or ""
    if declared_type in GENERIC_CONTENT_TYPES:
        declared_type = resolve_declared_type(filename)

    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else []

    raw_file = RawFile(content=contents, filename=filename, declared_type=declared_type)
    document_id = framework.ingest(raw_file, storage, tags=tag_list)

    logger.info(f"Uploaded document '{filename}' as id='{document_id}'")
    return jsonable_encoder(storage.get_document(document_id))


@router.get("/documents", summary="List active documents")
def list_documents(storage: DocumentStorage = Depends(get_storage)):
    return jsonable_encoder(storage.get_all_documents())


@router.get("/documents/{document_id}", summary="Get a stored document")
def get_document(document_id: str, storage: DocumentStorage = Depends(get_storage)):
    return jsonable_encoder(_require_document(storage, document_id))


@router.patch(
    "/documents/{document_id}",
    summary="Edit a stored document",
    description=(
        "Snapshots the current state as a new version before applying the edit. "
        "A new text is re-segmented and its pages and counts are rebuilt. "
        "Concurrent edits of one document apply one after the other; the last one wins."
    ),
)
def update_document(
    document_id: str,
    body: UpdateDocumentRequest,
    storage: DocumentStorage = Depends(get_storage),
    framework: DocumentProcessingFramework = Depends(get_framework),
):
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise InvalidUpdateError(document_id, "No fields to update")

    if "extracted_text" not in updates:
        return jsonable_encoder(storage.update(document_id, updates))

    text = updates["extracted_text"]

    def rebuild_from_text(current):
        # Runs under the document lock, so the rebuild starts from the latest version
        return {**updates, **framework.reprocess_text(current, text, filename=updates.get("filename"))}

    return jsonable_encoder(storage.update(document_id, rebuild_from_text))


@router.delete("/documents/{document_id}", summary="Soft delete a document")
def delete_document(document_id: str, storage: DocumentStorage = Depends(get_storage)):
    return jsonable_encoder(storage.soft_delete(document_id))


@router.post("/documents/search", summary="Search stored documents")
def search_documents(body: SearchDocumentsRequest, storage: DocumentStorage = Depends(get_storage)):
    date_range = None
    if body.date_range is not None:
        date_range = DateRange(start=body.date_range.start, end=body.date_range.end)

    result = storage.search(SearchQuery(
        filename=body.filename,
        file_type=body.file_type,
        tags=body.tags,
        content_search=body.content_search,
        date_range=date_range,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
    ))
    return jsonable_encoder(result)


@router.post("/documents/{document_id}/tags", summary="Add tags to a document")
def add_tags(document_id: str, body: TagsRequest, storage: DocumentStorage = Depends(get_storage)):
    changed = storage.add_tags(document_id, body.tags)
    return {"changed": changed, "tags": list(storage.get_document(document_id).tags)}


@router.delete("/documents/{document_id}/tags", summary="Remove tags from a document")
def remove_tags(
    document_id: str,
    tags: List[str] = Query(...),
    storage: DocumentStorage = Depends(get_storage),
):
    changed = storage.remove_tags(document_id, tags)
    return {"changed": changed, "tags": list(storage.get_document(document_id).tags)}


@router.get("/documents/{document_id}/versions", summary="List the version history of a document")
def list_versions(document_id: str, storage: DocumentStorage = Depends(get_storage)):
    # Snapshots are only returned by the single-version route
    return jsonable_encoder([
        replace(version, document=None) for version in storage.get_versions(document_id)
    ])


@router.get("/documents/{document_id}/versions/{version}", summary="Get one version snapshot")
def get_version(document_id: str, version: int, storage: DocumentStorage = Depends(get_storage)):
    return jsonable_encoder(storage.get_version(document_id, version))


@router.get("/stats", summary="Aggregate statistics over active documents")
def get_stats(storage: DocumentStorage = Depends(get_storage)):
    return jsonable_encoder(storage.get_storage_stats())


# ============================================================================
# APP
# ============================================================================
def create_app(
    storage: Optional[DocumentStorage] = None,
    framework: Optional[DocumentProcessingFramework] = None,
) -> FastAPI:
    """
    Build the API around one ``DocumentStorage`` and one
    ``DocumentProcessingFramework``, both created here unless injected.
    """
    app = FastAPI(title="Simple Document Indexer API", version="1.0")
    app.state.storage = storage if storage is not None else DocumentStorage()
    app.state.framework = framework if framework is not None else DocumentProcessingFramework()
    app.add_exception_handler(DocumentPipelineError, handle_pipeline_error)
    app.include_router(router)
    return app


app = create_app()
