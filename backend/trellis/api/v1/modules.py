"""Data-collection module endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError

from trellis.api import deps
from trellis.core.logging import get_logger
from trellis.models.schemas import (
    CreatedResponse,
    OkResponse,
    SskCreate,
    SskRead,
    StrategyBrainstormRead,
    StrategyBrainstormUpsert,
    StrategyIdeationView,
    StrategyItemCreate,
    StrategyItemRead,
    StrategyItemUpdate,
    SwotCreate,
    SwotRead,
    VisionRead,
    VisionUpsert,
)
from trellis.services import loader
from trellis.services.repository import EngagementRepository

logger = get_logger(__name__)

router = APIRouter()


# --- Start / Stop / Keep ---


@router.post(
    "/engagements/{engagement_id}/ssk",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record one participant's Start/Stop/Keep response.",
)
async def create_ssk_response(
    request: SskCreate,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> CreatedResponse:
    try:
        values = deps.validate_ssk(request)
    except ValueError as exc:
        raise deps.bad_request(exc) from exc

    try:
        row = await repository.create_ssk(engagement.id, **values)
    except SQLAlchemyError as exc:
        raise deps.server_error("ssk.insert_failed", "Failed to save response.", exc, engagement_id=engagement.id) from exc

    return CreatedResponse(id=row.id)


@router.get("/engagements/{engagement_id}/ssk", response_model=list[SskRead])
async def list_ssk_responses(
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> list[SskRead]:
    rows = await repository.list_ssk(engagement.id)
    return [SskRead.model_validate(row) for row in rows]


# --- SWOT ---


@router.post(
    "/engagements/{engagement_id}/swot",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record one SWOT submission.",
)
async def create_swot_response(
    request: SwotCreate,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> CreatedResponse:
    try:
        row = await repository.create_swot(engagement.id, **deps.validate_swot(request))
    except SQLAlchemyError as exc:
        raise deps.server_error("swot.insert_failed", "Failed to save SWOT", exc, engagement_id=engagement.id) from exc

    return CreatedResponse(id=row.id)


@router.get("/engagements/{engagement_id}/swot", response_model=list[SwotRead])
async def list_swot_responses(
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> list[SwotRead]:
    rows = await repository.list_swot(engagement.id)
    return [SwotRead.model_validate(row) for row in rows]


# --- Vision & Goals ---


@router.put(
    "/engagements/{engagement_id}/vision",
    response_model=VisionRead,
    summary="Replace the Vision & Goals record.",
)
async def upsert_vision(
    request: VisionUpsert,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> VisionRead:
    try:
        record = await repository.upsert_vision(engagement.id, request.model_dump())
    except SQLAlchemyError as exc:
        raise deps.server_error(
            "vision.upsert_failed", "Failed to save Vision & Goals", exc, engagement_id=engagement.id
        ) from exc

    logger.info("vision.saved", engagement_id=engagement.id)
    return VisionRead.model_validate(record)


@router.get("/engagements/{engagement_id}/vision", response_model=VisionRead | None)
async def get_vision(
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> VisionRead | None:
    record = await repository.get_vision(engagement.id)
    return VisionRead.model_validate(record) if record is not None else None


# --- Strategy ideation ---


@router.put(
    "/engagements/{engagement_id}/strategy-ideation",
    response_model=StrategyBrainstormRead,
    summary="Save the strategy brainstorm notes.",
)
async def upsert_strategy_brainstorm(
    request: StrategyBrainstormUpsert,
    response: Response,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> StrategyBrainstormRead:
    try:
        record, created = await repository.upsert_strategy_brainstorm(engagement.id, request.model_dump())
    except SQLAlchemyError as exc:
        raise deps.server_error(
            "strategy_ideation.upsert_failed",
            "Error saving strategy ideas. Please try again.",
            exc,
            engagement_id=engagement.id,
        ) from exc

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return StrategyBrainstormRead.model_validate(record)


@router.get(
    "/engagements/{engagement_id}/strategy-ideation",
    response_model=StrategyIdeationView,
    summary="Brainstorm notes, strategy items and the current gate status.",
)
async def get_strategy_ideation(
    engagement_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> StrategyIdeationView:
    aggregate = await loader.load_engagement_aggregate(repository, engagement_id)
    loaded, _ = await loader.gather_reads({"items": repository.list_strategy_items(engagement_id)}, engagement_id)

    brainstorm = aggregate.brainstorm
    return StrategyIdeationView(
        status=aggregate.statuses().strategy_ideation,
        brainstorm=StrategyBrainstormRead.model_validate(brainstorm) if brainstorm is not None else None,
        items=[StrategyItemRead.model_validate(item) for item in loaded.get("items") or []],
    )


@router.post(
    "/engagements/{engagement_id}/strategy-ideation/items",
    response_model=StrategyItemRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_strategy_item(
    request: StrategyItemCreate,
    engagement: Any = Depends(deps.get_engagement_or_404),
    repository: EngagementRepository = Depends(deps.get_repository),
) -> StrategyItemRead:
    try:
        values = deps.validate_strategy_item(request)
    except ValueError as exc:
        raise deps.bad_request(exc) from exc

    try:
        item = await repository.create_strategy_item(engagement.id, **values)
    except SQLAlchemyError as exc:
        raise deps.server_error(
            "strategy_item.insert_failed", "Could not create strategy item", exc, engagement_id=engagement.id
        ) from exc

    return StrategyItemRead.model_validate(item)


@router.put("/strategy-ideation/items/{item_id}", response_model=StrategyItemRead)
async def update_strategy_item(
    item_id: str,
    request: StrategyItemUpdate,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> StrategyItemRead:
    try:
        values = deps.validate_strategy_item_update(request)
    except ValueError as exc:
        raise deps.bad_request(exc) from exc

    try:
        item = await repository.update_strategy_item(item_id, values)
    except SQLAlchemyError as exc:
        raise deps.server_error("strategy_item.update_failed", "Could not update strategy item", exc, item_id=item_id) from exc

    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Strategy item not found")
    return StrategyItemRead.model_validate(item)


@router.delete("/strategy-ideation/items/{item_id}", response_model=OkResponse)
async def delete_strategy_item(
    item_id: str,
    repository: EngagementRepository = Depends(deps.get_repository),
) -> OkResponse:
    try:
        await repository.delete_strategy_item(item_id)
    except SQLAlchemyError as exc:
        raise deps.server_error("strategy_item.delete_failed", "Could not delete strategy item", exc, item_id=item_id) from exc

    return OkResponse()
