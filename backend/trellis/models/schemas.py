"""Pydantic schemas for the HTTP surface."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ModuleStatus = Literal["not_started", "in_progress", "complete", "available", "not_ready", "coming_soon"]
PeriodType = Literal["full_year", "ytd", "opening_bs"]
PeriodStatus = Literal["missing", "partial", "complete"]
DocRole = Literal["financial_pack", "pnl", "balance_sheet", "cash_flow", "trial_balance", "other"]
StrategyDomain = Literal["growth_market", "growth_product", "operations", "people", "financials"]
StrategySourceTag = Literal["swot", "ssk", "vision", "customer_insights", "financials", "other"]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Engagements ---


class EngagementCreate(BaseModel):
    company_name: str | None = None
    leader_name: str | None = None
    financial_year_end: str | None = Field(default=None, description="Date in YYYY-MM-DD form.")
    engagement_name: str | None = None


class EngagementRead(ORMModel):
    id: str
    company_name: str
    leader_name: str | None = None
    financial_year_end: date | None = None
    engagement_name: str | None = None
    created_at: datetime


class EngagementCreated(BaseModel):
    engagement_id: str


class EngagementList(BaseModel):
    engagements: list[EngagementRead]


# --- Start / Stop / Keep ---


class SskCreate(BaseModel):
    participant_name: str | None = None
    start: str | None = None
    stop: str | None = None
    keep: str | None = None


class SskRead(ORMModel):
    id: str
    engagement_id: str
    participant_name: str
    start_text: str
    stop_text: str
    keep_text: str
    created_at: datetime


# --- SWOT ---


class SwotCreate(BaseModel):
    participant_name: str | None = None
    strengths: list[str] | None = None
    weaknesses: list[str] | None = None
    opportunities: list[str] | None = None
    threats: list[str] | None = None


class SwotRead(ORMModel):
    id: int
    engagement_id: str
    participant_name: str | None = None
    strengths: list[Any] = Field(default_factory=list)
    weaknesses: list[Any] = Field(default_factory=list)
    opportunities: list[Any] = Field(default_factory=list)
    threats: list[Any] = Field(default_factory=list)
    created_at: datetime


class CreatedResponse(BaseModel):
    id: str | int


# --- Vision & Goals ---


class VisionUpsert(BaseModel):
    purpose: str | None = None
    bhag: str | None = None
    playing_rules: Any | None = None
    three_year_vision: str | None = None
    annual_goals: Any | None = None
    core_kpis: Any | None = None


class VisionRead(ORMModel):
    engagement_id: str
    purpose: str | None = None
    bhag: str | None = None
    playing_rules: Any | None = None
    three_year_vision: str | None = None
    annual_goals: Any | None = None
    core_kpis: Any | None = None


# --- Strategy ideation ---


class DomainNotes(BaseModel):
    """Free-text notes captured for one brainstorm area."""

    notes: str | None = None


class StrategyBrainstormUpsert(BaseModel):
    anchors: DomainNotes = Field(default_factory=DomainNotes)
    growth_market: DomainNotes = Field(default_factory=DomainNotes)
    growth_product: DomainNotes = Field(default_factory=DomainNotes)
    operations: DomainNotes = Field(default_factory=DomainNotes)
    people: DomainNotes = Field(default_factory=DomainNotes)
    finance: DomainNotes = Field(default_factory=DomainNotes)


class StrategyBrainstormRead(StrategyBrainstormUpsert):
    model_config = ConfigDict(from_attributes=True)

    id: str
    engagement_id: str
    updated_at: datetime


class StrategyItemCreate(BaseModel):
    theme: str | None = None
    description: str | None = None
    domain: StrategyDomain | None = None
    source_tags: list[StrategySourceTag] = Field(default_factory=list)


class StrategyItemUpdate(BaseModel):
    theme: str | None = None
    description: str | None = None
    domain: StrategyDomain | None = None
    source_tags: list[StrategySourceTag] | None = None


class StrategyItemRead(ORMModel):
    id: str
    engagement_id: str
    theme: str
    description: str | None = None
    domain: str
    source_tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class StrategyIdeationView(BaseModel):
    status: ModuleStatus
    brainstorm: StrategyBrainstormRead | None = None
    items: list[StrategyItemRead] = Field(default_factory=list)


# --- Financial documents ---


class FinancialDocumentMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    period_key: str | None = None
    period_label: str | None = None
    period_type: PeriodType | None = None
    doc_role: DocRole | None = None
    includes_comparatives: bool | None = None
    notes: str | None = None
    covers_years: list[int] | None = None


class FinancialDocumentCreate(BaseModel):
    doc_type: str | None = None
    file_path: str | None = None
    original_file_name: str | None = None
    mime_type: str | None = None
    meta: FinancialDocumentMeta | None = None


class FinancialDocumentRead(ORMModel):
    id: str
    engagement_id: str
    doc_type: str | None = None
    file_path: str
    original_file_name: str
    mime_type: str | None = None
    uploaded_at: datetime
    meta: dict[str, Any] | None = None


class FinancialDocumentListing(FinancialDocumentRead):
    tags: str


class FinancialPeriodRead(ORMModel):
    key: str
    label: str
    description: str
    type: PeriodType
    order: int
    is_recommended: bool
    end_year: int | None = None


class PeriodStatusRead(ORMModel):
    status: PeriodStatus
    has_pack: bool
    has_pnl: bool
    has_bs: bool
    total_docs: int


class ChecklistRow(BaseModel):
    period: FinancialPeriodRead
    summary: PeriodStatusRead
    pnl_satisfied: bool
    balance_sheet_satisfied: bool


class OverallReadinessRead(ORMModel):
    completed_recommended: int
    total_recommended: int
    label: Literal["Not started", "In progress", "Complete"]


class FinancialsView(BaseModel):
    engagement_id: str
    company_name: str
    financial_year_end: date | None = None
    periods: list[FinancialPeriodRead]
    checklist: list[ChecklistRow]
    overall: OverallReadinessRead
    documents: list[FinancialDocumentListing]


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_at: datetime


# --- Customer insights ---


class CustomerInsightsDocumentRead(ORMModel):
    id: str
    engagement_id: str
    file_path: str
    original_file_name: str
    mime_type: str | None = None
    uploaded_at: datetime


# --- Dashboard / review ---


class ModuleCard(ORMModel):
    key: str
    title: str
    status: ModuleStatus
    status_label: str
    count: int | None = None
    href: str | None = None
    enabled: bool = True


class DashboardPhase(ORMModel):
    title: str
    modules: list[ModuleCard]


class DashboardView(BaseModel):
    engagement: EngagementRead
    phases: list[DashboardPhase]
    has_review_summary: bool


class ReviewInputView(BaseModel):
    engagement: EngagementRead
    start_items: list[str]
    stop_items: list[str]
    keep_items: list[str]
    strengths: list[str]
    weaknesses: list[str]
    opportunities: list[str]
    threats: list[str]


class OkResponse(BaseModel):
    ok: bool = True
