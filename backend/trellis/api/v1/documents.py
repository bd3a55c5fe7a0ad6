"""Financial and customer-insight document endpoints.

Uploads write the file first and the metadata row second; deletes remove the
file first and the row second. Neither pair is atomic. A failure between the
two steps is logged and reported, and the half-finished state is left as is.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError

from trellis.api import deps
from trellis.core.config import AppSettings
from trellis.core.logging import get_logger
from trellis.models.schemas import (
    ChecklistRow,
    CustomerInsightsDocumentRead,
    FinancialDocumentCreate,
    FinancialDocumentListing,
    FinancialDocumentRead,
    FinancialPeriodRead,
    FinancialsView,
    OkResponse,
    OverallReadinessRead,
    PeriodStatusRead,
    SignedUrlResponse,
)
from trellis.services import financials, loader, periods
from trellis.services.errors import InvalidSignatureError, StorageConflictError, StorageError
from trellis.services.repository import EngagementRepository
from trellis.services.storage import LocalObjectStore

logger = get_logger(__name__)

router = APIRouter()


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _upload_failed(exc: StorageError, **context: Any) -> HTTPException:
    if isinstance(exc, StorageConflictError):
        logger.warning("storage.upload_conflict", error=str(exc), **context)
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A file already exists at that path.")
    return deps.server_error("storage.upload_failed", "We could not upload that file. Please try again.", exc, **context)


# --- Financial documents ---


@router.get(
    "/engagements/{engagement_id}/financials",
    response_model=FinancialsView,
    summary="Period checklist, readiness and uploaded financial documents.",
)
async def get_financials(
    engagement_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
    now: datetime = Depends(deps.get_now),
) -> FinancialsView:
    engagement = await loader.require_engagement(repository, engagement_id)
    loaded, _ = await loader.gather_reads(
        {"documents": repository.list_financial_documents(engagement_id)}, engagement_id
    )
    documents = list(loaded.get("documents") or [])

    period_list = periods.build_financial_periods(now, engagement.financial_year_end)
    statuses = financials.compute_period_statuses(period_list, documents)
    overall = financials.compute_overall_readiness(period_list, statuses)

    checklist = [
        ChecklistRow(
            period=FinancialPeriodRead.model_validate(period),
            summary=PeriodStatusRead.model_validate(statuses[period.key]),
            pnl_satisfied=statuses[period.key].pnl_satisfied,
            balance_sheet_satisfied=statuses[period.key].balance_sheet_satisfied,
        )
        for period in period_list
        if not period.is_legacy
    ]

    return FinancialsView(
        engagement_id=engagement.id,
        company_name=engagement.company_name or "your company",
        financial_year_end=engagement.financial_year_end,
        periods=[FinancialPeriodRead.model_validate(period) for period in period_list],
        checklist=checklist,
        overall=OverallReadinessRead.model_validate(overall),
        documents=[
            FinancialDocumentListing(
                **FinancialDocumentRead.model_validate(doc).model_dump(),
                tags=financials.describe_document(doc),
            )
            for doc in documents
        ],
    )


@router.post(
    "/engagements/{engagement_id}/financials/documents",
    response_model=FinancialDocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register metadata for a file already in storage.",
)
async def register_financial_document(
    request: FinancialDocumentCreate,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> FinancialDocumentRead:
    file_path = (request.file_path or "").strip()
    original_file_name = (request.original_file_name or "").strip()
    if not file_path or not original_file_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="file_path and original_file_name are required",
        )

    try:
        document = await repository.create_financial_document(
            engagement.id,
            doc_type=request.doc_type,
            file_path=file_path,
            original_file_name=original_file_name,
            mime_type=request.mime_type,
            meta=request.meta.model_dump() if request.meta is not None else None,
        )
    except SQLAlchemyError as exc:
        raise deps.server_error(
            "financials.insert_failed", "Failed to save document metadata", exc, engagement_id=engagement.id
        ) from exc

    return FinancialDocumentRead.model_validate(document)


@router.post(
    "/engagements/{engagement_id}/financials/uploads",
    response_model=FinancialDocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a financial statement file for one or more fiscal years.",
)
async def upload_financial_document(
    file: UploadFile = File(...),
    covers_years: list[str] = Form(...),
    includes_pnl: bool = Form(False),
    includes_balance_sheet: bool = Form(False),
    notes: str | None = Form(None),
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
    store: LocalObjectStore = Depends(deps.get_object_store),
    settings: AppSettings = Depends(deps.get_app_settings),
    now: datetime = Depends(deps.get_now),
) -> FinancialDocumentRead:
    file_name = file.filename or "upload"
    try:
        years = deps.validate_upload_years(covers_years)
        plan = financials.plan_upload(
            engagement_id=engagement.id,
            periods=periods.build_financial_periods(now, engagement.financial_year_end),
            file_name=file_name,
            covers_years=years,
            includes_pnl=includes_pnl,
            includes_balance_sheet=includes_balance_sheet,
            notes=notes,
            timestamp_ms=_timestamp_ms(),
        )
    except ValueError as exc:
        raise deps.bad_request(exc) from exc

    bucket = settings.financial_docs_bucket
    data = await file.read()
    try:
        await store.upload(bucket, plan.file_path, data, content_type=file.content_type)
    except StorageError as exc:
        raise _upload_failed(exc, engagement_id=engagement.id, file_path=plan.file_path) from exc

    try:
        document = await repository.create_financial_document(
            engagement.id,
            doc_type=plan.doc_role,
            file_path=plan.file_path,
            original_file_name=file_name,
            mime_type=file.content_type or None,
            meta=plan.meta,
        )
    except SQLAlchemyError as exc:
        # The stored file stays behind without a row.
        logger.warning("financials.orphaned_file", bucket=bucket, file_path=plan.file_path)
        raise deps.server_error(
            "financials.insert_failed", "Failed to save document metadata", exc, engagement_id=engagement.id
        ) from exc

    logger.info(
        "financials.uploaded",
        engagement_id=engagement.id,
        document_id=document.id,
        period_key=plan.period.key,
        doc_role=plan.doc_role,
    )
    return FinancialDocumentRead.model_validate(document)


@router.delete(
    "/financials/documents/{document_id}",
    response_model=OkResponse,
    summary="Remove a financial document and its stored file.",
)
async def delete_financial_document(
    document_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
    store: LocalObjectStore = Depends(deps.get_object_store),
    settings: AppSettings = Depends(deps.get_app_settings),
) -> OkResponse:
    document = await repository.get_financial_document(document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    bucket = settings.financial_docs_bucket
    try:
        await store.remove(bucket, [document.file_path])
    except StorageError as exc:
        raise deps.server_error(
            "financials.storage_delete_failed",
            "Failed to delete file from storage",
            exc,
            document_id=document_id,
        ) from exc

    try:
        await repository.delete_financial_document(document_id)
    except SQLAlchemyError as exc:
        # The file is already gone; the row stays until removed again.
        logger.warning("financials.row_without_file", bucket=bucket, document_id=document_id)
        raise deps.server_error(
            "financials.row_delete_failed", "Failed to delete document metadata", exc, document_id=document_id
        ) from exc

    logger.info("financials.deleted", document_id=document_id, file_path=document.file_path)
    return OkResponse()


@router.get(
    "/financials/documents/{document_id}/download-url",
    response_model=SignedUrlResponse,
    summary="Time-limited link for downloading a financial document.",
)
async def get_financial_download_url(
    document_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
    store: LocalObjectStore = Depends(deps.get_object_store),
    settings: AppSettings = Depends(deps.get_app_settings),
) -> SignedUrlResponse:
    document = await repository.get_financial_document(document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    try:
        signed = store.create_signed_url(
            settings.financial_docs_bucket,
            document.file_path,
            settings.signed_url_ttl_seconds,
            download=document.original_file_name or None,
        )
    except StorageError as exc:
        raise deps.server_error(
            "financials.signed_url_failed", "We could not open that file.", exc, document_id=document_id
        ) from exc

    return SignedUrlResponse(signed_url=signed.url, expires_at=signed.expires_at)


# --- Customer insights ---


@router.post(
    "/engagements/{engagement_id}/customer-insights",
    response_model=CustomerInsightsDocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a customer or market insight document.",
)
async def upload_customer_insight(
    file: UploadFile = File(...),
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
    store: LocalObjectStore = Depends(deps.get_object_store),
    settings: AppSettings = Depends(deps.get_app_settings),
) -> CustomerInsightsDocumentRead:
    file_name = file.filename or "upload"
    file_path = f"{engagement.id}/{_timestamp_ms()}-{file_name}"
    bucket = settings.customer_insights_bucket

    data = await file.read()
    try:
        await store.upload(
            bucket, file_path, data, content_type=file.content_type or "application/octet-stream"
        )
    except StorageError as exc:
        raise _upload_failed(exc, engagement_id=engagement.id, file_path=file_path) from exc

    try:
        document = await repository.create_customer_document(
            engagement.id,
            file_path=file_path,
            original_file_name=file_name,
            mime_type=file.content_type or None,
        )
    except SQLAlchemyError as exc:
        # The stored file stays behind without a row.
        logger.warning("customer_insights.orphaned_file", bucket=bucket, file_path=file_path)
        raise deps.server_error(
            "customer_insights.insert_failed", "Failed to save document metadata", exc, engagement_id=engagement.id
        ) from exc

    return CustomerInsightsDocumentRead.model_validate(document)


@router.get(
    "/engagements/{engagement_id}/customer-insights",
    response_model=list[CustomerInsightsDocumentRead],
)
async def list_customer_insights(
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> list[CustomerInsightsDocumentRead]:
    documents = await repository.list_customer_documents(engagement.id)
    return [CustomerInsightsDocumentRead.model_validate(doc) for doc in documents]


# --- Signed downloads ---


@router.get("/files/{bucket}/{path:path}", response_class=FileResponse, summary="Serve a file for a signed link.")
async def download_file(
    bucket: str,
    path: str,
    expires: int = Query(...),
    signature: str = Query(...),
    download: str | None = Query(None),
    store: LocalObjectStore = Depends(deps.get_object_store),
    settings: AppSettings = Depends(deps.get_app_settings),
) -> FileResponse:
    # Only financial documents are handed out as signed links.
    if bucket != settings.financial_docs_bucket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown bucket")

    try:
        location = store.verify_signed_request(
            bucket, path, expires=expires, signature=signature, download=download
        )
    except InvalidSignatureError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from exc

    if not location.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(location, filename=download)
