"""Shared FastAPI dependencies."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from fastapi import Depends, HTTPException, status

from trellis.core.config import AppSettings, get_settings
from trellis.core.db import get_session_factory
from trellis.core.logging import bind_request_context, get_logger
from trellis.models.schemas import (
    EngagementCreate,
    SskCreate,
    StrategyItemCreate,
    StrategyItemUpdate,
    SwotCreate,
)
from trellis.services import loader
from trellis.services.repository import EngagementRepository
from trellis.services.storage import LocalObjectStore, build_object_store

logger = get_logger(__name__)


def get_app_settings() -> AppSettings:
    """Expose application settings as a dependency."""

    return get_settings()


def get_repository() -> EngagementRepository:
    """Provide the row store bound to the shared session factory."""

    return EngagementRepository(get_session_factory())


def get_object_store(settings: AppSettings = Depends(get_app_settings)) -> LocalObjectStore:
    """Provide the object store for uploaded files."""

    return build_object_store(settings)


def get_now() -> datetime:
    """Reference instant for period generation."""

    return datetime.now()


async def get_engagement_or_404(
    engagement_id: str,
    repository: EngagementRepository = Depends(get_repository),
) -> Any:
    """Resolve the engagement path parameter; unknown ids end the request with 404."""

    engagement = await loader.require_engagement(repository, engagement_id)
    bind_request_context(engagement_id=engagement.id)
    return engagement


def server_error(event: str, message: str, exc: Exception, **context: Any) -> HTTPException:
    """Log a store failure and build the generic error returned to the caller."""

    logger.error(event, error=str(exc), error_type=type(exc).__name__, **context)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _required_text(value: str | None, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(message)
    return text


def _optional_text(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def validate_engagement(request: EngagementCreate) -> dict[str, Any]:
    """Check required engagement fields and parse the year end date."""

    company_name = _required_text(request.company_name, "Company name is required")
    leader_name = _required_text(request.leader_name, "Leader name is required")
    raw_year_end = _required_text(request.financial_year_end, "Financial year end is required")
    try:
        financial_year_end = date.fromisoformat(raw_year_end)
    except ValueError as exc:
        raise ValueError("Financial year end must be a date in YYYY-MM-DD form") from exc

    return {
        "company_name": company_name,
        "leader_name": leader_name,
        "financial_year_end": financial_year_end,
        "engagement_name": _optional_text(request.engagement_name),
    }


def validate_ssk(request: SskCreate) -> dict[str, str]:
    participant_name = _required_text(request.participant_name, "participant_name is required.")
    if not any((text or "").strip() for text in (request.start, request.stop, request.keep)):
        raise ValueError("At least one of Start, Stop, or Keep must have content.")

    return {
        "participant_name": participant_name,
        "start_text": request.start or "",
        "stop_text": request.stop or "",
        "keep_text": request.keep or "",
    }


def validate_swot(request: SwotCreate) -> dict[str, Any]:
    return {
        "participant_name": request.participant_name or None,
        "strengths": request.strengths or [],
        "weaknesses": request.weaknesses or [],
        "opportunities": request.opportunities or [],
        "threats": request.threats or [],
    }


def validate_strategy_item(request: StrategyItemCreate) -> dict[str, Any]:
    theme = _required_text(request.theme, "theme and domain are required")
    if request.domain is None:
        raise ValueError("theme and domain are required")

    return {
        "theme": theme,
        "description": request.description,
        "domain": request.domain,
        "source_tags": list(request.source_tags),
    }


def validate_strategy_item_update(request: StrategyItemUpdate) -> dict[str, Any]:
    """Keep only the fields the caller actually sent."""

    values = request.model_dump(exclude_unset=True)
    for name in ("theme", "domain", "source_tags"):
        if name in values and values[name] is None:
            values.pop(name)
    if "theme" in values:
        values["theme"] = _required_text(values["theme"], "theme must not be blank")
    if not values:
        raise ValueError("No valid fields to update")
    return values


def validate_upload_years(raw_years: list[str]) -> list[int]:
    years: list[int] = []
    for raw in raw_years:
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                years.append(int(part))
            except ValueError as exc:
                raise ValueError(f"Invalid financial year: {part}") from exc
    if not years:
        raise ValueError("Select at least one financial year.")
    return years
