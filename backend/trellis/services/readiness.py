"""Module status rules for the engagement dashboard.

Each rule is a pure function of the rows currently stored for a module.
Strategy Ideation is gated on the earlier phases: it unlocks once Vision has
some content and at least one of SSK or SWOT has input.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

ModuleStatus = Literal["not_started", "in_progress", "complete", "available", "not_ready", "coming_soon"]

VISION_FIELDS = ("purpose", "bhag", "playing_rules", "three_year_vision", "annual_goals", "core_kpis")
SWOT_QUADRANTS = ("strengths", "weaknesses", "opportunities", "threats")
FINANCIALS_COMPLETE_AT = 3

STATUS_LABELS: dict[str, str] = {
    "not_started": "Not started",
    "in_progress": "In progress",
    "complete": "Complete",
    "available": "Ready",
    "not_ready": "Not ready yet",
    "coming_soon": "Coming soon",
}


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _is_filled(value: Any) -> bool:
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, str):
        return len(value.strip()) > 0
    return False


def vision_status(vision: Any | None) -> ModuleStatus:
    if vision is None:
        return "not_started"

    filled = sum(1 for name in VISION_FIELDS if _is_filled(_field(vision, name)))
    if filled == 0:
        return "not_started"
    if filled == len(VISION_FIELDS):
        return "complete"
    return "in_progress"


def swot_status(swot_rows: Sequence[Any] | None) -> ModuleStatus:
    if not swot_rows:
        return "not_started"

    totals = dict.fromkeys(SWOT_QUADRANTS, 0)
    for row in swot_rows:
        for quadrant in SWOT_QUADRANTS:
            items = _field(row, quadrant)
            totals[quadrant] += len(items) if isinstance(items, list) else 0

    groups_filled = sum(1 for count in totals.values() if count > 0)
    if groups_filled == 0:
        return "not_started"
    if groups_filled == len(SWOT_QUADRANTS):
        return "complete"
    return "in_progress"


def ssk_status(response_count: int) -> ModuleStatus:
    # Start/Stop/Keep stays open for more responses; it never reports complete.
    return "not_started" if response_count == 0 else "in_progress"


def customer_insights_status(document_count: int) -> ModuleStatus:
    return "not_started" if document_count == 0 else "complete"


def financials_status(document_count: int) -> ModuleStatus:
    """Coarse count-based status; the per-period checklist is separate."""

    if document_count == 0:
        return "not_started"
    if document_count < FINANCIALS_COMPLETE_AT:
        return "in_progress"
    return "complete"


def strategy_ideation_status(
    *,
    brainstorm: Any | None,
    vision: ModuleStatus,
    ssk: ModuleStatus,
    swot: ModuleStatus,
) -> ModuleStatus:
    if brainstorm is not None:
        return "complete"

    vision_ready = vision in ("in_progress", "complete")
    has_inputs = ssk == "in_progress" or swot in ("in_progress", "complete")
    if not (vision_ready and has_inputs):
        return "not_ready"
    return "available"


@dataclass(slots=True)
class ModuleStatuses:
    ssk: ModuleStatus
    swot: ModuleStatus
    vision: ModuleStatus
    customer_insights: ModuleStatus
    financials: ModuleStatus
    strategy_ideation: ModuleStatus


def evaluate_modules(
    *,
    vision: Any | None,
    swot_rows: Sequence[Any] | None,
    ssk_count: int,
    brainstorm: Any | None,
    customer_document_count: int,
    financial_document_count: int,
) -> ModuleStatuses:
    vision_state = vision_status(vision)
    swot_state = swot_status(swot_rows)
    ssk_state = ssk_status(ssk_count)
    return ModuleStatuses(
        ssk=ssk_state,
        swot=swot_state,
        vision=vision_state,
        customer_insights=customer_insights_status(customer_document_count),
        financials=financials_status(financial_document_count),
        strategy_ideation=strategy_ideation_status(
            brainstorm=brainstorm, vision=vision_state, ssk=ssk_state, swot=swot_state
        ),
    )


@dataclass(slots=True)
class ModuleCard:
    key: str
    title: str
    status: ModuleStatus
    count: int | None = None
    href: str | None = None

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    @property
    def enabled(self) -> bool:
        return self.status not in ("not_ready", "coming_soon")


@dataclass(slots=True)
class DashboardPhase:
    title: str
    modules: list[ModuleCard] = field(default_factory=list)


def build_dashboard_phases(
    engagement_id: str,
    statuses: ModuleStatuses,
    *,
    ssk_count: int,
    swot_response_count: int,
    customer_document_count: int,
    financial_document_count: int,
) -> list[DashboardPhase]:
    """Lay out the module cards in phase order."""

    base = f"/engagement/{engagement_id}"
    strategy_href = f"{base}/strategy-ideation" if statuses.strategy_ideation != "not_ready" else None

    return [
        DashboardPhase(
            title="Phase I – Input Gathering",
            modules=[
                ModuleCard("ssk", "Start–Stop–Keep", statuses.ssk, ssk_count, f"{base}/ssk"),
                ModuleCard("swot", "SWOT", statuses.swot, swot_response_count, f"{base}/swot"),
                ModuleCard(
                    "customer_insights",
                    "Customer & Market Insights",
                    statuses.customer_insights,
                    customer_document_count,
                    f"{base}/customer-insights",
                ),
                ModuleCard(
                    "financials",
                    "Financial Documents",
                    statuses.financials,
                    financial_document_count,
                    f"{base}/financials",
                ),
            ],
        ),
        DashboardPhase(
            title="Phase II – Vision & Goal Setting",
            modules=[ModuleCard("vision", "Vision & Goals", statuses.vision, None, f"{base}/vision")],
        ),
        DashboardPhase(
            title="Phase III – Strategy Ideation & Prioritisation",
            modules=[
                ModuleCard("strategy_ideation", "Strategy Ideation", statuses.strategy_ideation, None, strategy_href),
                ModuleCard("prioritisation", "Prioritisation", "coming_soon"),
            ],
        ),
        DashboardPhase(
            title="Phase IV – Building the One-Page Plan",
            modules=[ModuleCard("a3_plan", "A3 Strategic Plan", "coming_soon")],
        ),
    ]


def has_review_summary(ssk_count: int, swot: ModuleStatus) -> bool:
    return ssk_count > 0 or swot != "not_started"

