"""SQLAlchemy models for engagements and their module data."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base declarative model."""


class Engagement(Base):
    """One client company's planning workflow."""

    __tablename__ = "engagements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company_name: Mapped[str] = mapped_column(String, nullable=False)
    leader_name: Mapped[str | None] = mapped_column(String, nullable=True)
    financial_year_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    engagement_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class VisionAndGoals(Base):
    """Vision record, at most one per engagement."""

    __tablename__ = "vision_and_goals"

    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), primary_key=True
    )
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    bhag: Mapped[str | None] = mapped_column(Text, nullable=True)
    playing_rules: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    three_year_vision: Mapped[str | None] = mapped_column(Text, nullable=True)
    annual_goals: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    core_kpis: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class SwotResponse(Base):
    """One participant's SWOT submission."""

    __tablename__ = "swot"

    # Autoincrement id doubles as the insertion-order key.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), index=True, nullable=False
    )
    participant_name: Mapped[str | None] = mapped_column(String, nullable=True)
    strengths: Mapped[list[Any]] = mapped_column(JSON, default=list)
    weaknesses: Mapped[list[Any]] = mapped_column(JSON, default=list)
    opportunities: Mapped[list[Any]] = mapped_column(JSON, default=list)
    threats: Mapped[list[Any]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class StartStopKeepResponse(Base):
    """One participant's Start/Stop/Keep submission."""

    __tablename__ = "start_stop_keep_responses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), index=True, nullable=False
    )
    participant_name: Mapped[str] = mapped_column(String, nullable=False)
    start_text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    stop_text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    keep_text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class StrategyIdeation(Base):
    """Brainstorm notes for an engagement, upserted as a whole."""

    __tablename__ = "strategy_ideation"
    __table_args__ = (UniqueConstraint("engagement_id", name="uq_strategy_ideation_engagement"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), nullable=False
    )
    anchors: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    growth_market: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    growth_product: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    operations: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    people: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    finance: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class StrategyIdeationItem(Base):
    """Individually managed strategy theme."""

    __tablename__ = "strategy_ideation_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), index=True, nullable=False
    )
    theme: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    domain: Mapped[str] = mapped_column(String, nullable=False)
    source_tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class FinancialDocument(Base):
    """Uploaded financial statement file and its period metadata."""

    __tablename__ = "financial_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), index=True, nullable=False
    )
    doc_type: Mapped[str | None] = mapped_column(String, nullable=True)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    original_file_name: Mapped[str] = mapped_column(String, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    meta: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class CustomerInsightsDocument(Base):
    """Uploaded customer or market research file."""

    __tablename__ = "customer_insights_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    engagement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("engagements.id", ondelete="CASCADE"), index=True, nullable=False
    )
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    original_file_name: Mapped[str] = mapped_column(String, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
