"""Engagement endpoints: creation, dashboard, review summary and export."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError

from trellis.api import deps
from trellis.core.logging import get_logger
from trellis.models.schemas import (
    DashboardPhase,
    DashboardView,
    EngagementCreate,
    EngagementCreated,
    EngagementList,
    EngagementRead,
    ReviewInputView,
)
from trellis.services import export, loader, readiness, review
from trellis.services.repository import EngagementRepository

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/engagements",
    response_model=EngagementCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create an engagement for a client company.",
)
async def create_engagement(
    request: EngagementCreate,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> EngagementCreated:
    try:
        values = deps.validate_engagement(request)
    except ValueError as exc:
        raise deps.bad_request(exc) from exc

    try:
        engagement = await repository.create_engagement(**values)
    except SQLAlchemyError as exc:
        raise deps.server_error("engagement.create_failed", "Failed to create engagement", exc) from exc

    logger.info("engagement.created", engagement_id=engagement.id)
    return EngagementCreated(engagement_id=engagement.id)


@router.get("/engagements", response_model=EngagementList, summary="List engagements, newest first.")
async def list_engagements(
    repository: EngagementRepository = Depends(deps.get_repository),
) -> EngagementList:
    try:
        engagements = await repository.list_engagements()
    except SQLAlchemyError as exc:
        raise deps.server_error("engagement.list_failed", "Failed to fetch engagements", exc) from exc

    return EngagementList(engagements=[EngagementRead.model_validate(row) for row in engagements])


@router.get("/engagements/{engagement_id}", response_model=EngagementRead)
async def get_engagement(engagement: Any = Depends(deps.get_engagement_or_404)) -> EngagementRead:
    return EngagementRead.model_validate(engagement)


@router.get(
    "/engagements/{engagement_id}/dashboard",
    response_model=DashboardView,
    summary="Module statuses and phase gating for an engagement.",
)
async def get_dashboard(
    engagement_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> DashboardView:
    aggregate = await loader.load_engagement_aggregate(repository, engagement_id)
    statuses = aggregate.statuses()

    phases = readiness.build_dashboard_phases(
        engagement_id,
        statuses,
        ssk_count=aggregate.ssk_count,
        swot_response_count=aggregate.swot_response_count,
        customer_document_count=aggregate.customer_document_count,
        financial_document_count=aggregate.financial_document_count,
    )

    return DashboardView(
        engagement=EngagementRead.model_validate(aggregate.engagement),
        phases=[DashboardPhase.model_validate(phase) for phase in phases],
        has_review_summary=readiness.has_review_summary(aggregate.ssk_count, statuses.swot),
    )


@router.get(
    "/engagements/{engagement_id}/review",
    response_model=ReviewInputView,
    summary="All SSK and SWOT input flattened into lists.",
)
async def get_review_input(
    engagement_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> ReviewInputView:
    engagement = await loader.require_engagement(repository, engagement_id)
    loaded, _ = await loader.gather_reads(
        {
            "ssk": repository.list_ssk(engagement_id),
            "swot": repository.list_swot(engagement_id),
        },
        engagement_id,
    )

    summary = review.build_review_input(loaded.get("ssk") or [], loaded.get("swot") or [])
    return ReviewInputView(
        engagement=EngagementRead.model_validate(engagement),
        start_items=summary.start_items,
        stop_items=summary.stop_items,
        keep_items=summary.keep_items,
        strengths=summary.strengths,
        weaknesses=summary.weaknesses,
        opportunities=summary.opportunities,
        threats=summary.threats,
    )


@router.get(
    "/engagements/{engagement_id}/ssk-swot-export",
    response_class=Response,
    summary="Download SSK and SWOT input as CSV.",
)
async def export_ssk_swot(
    engagement_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> Response:
    csv_text, filename = await export.export_engagement(repository, engagement_id)
    return Response(
        content=csv_text,
        media_type=export.CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

