"""Row store access for engagements and their module tables."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trellis.models.tables import (
    CustomerInsightsDocument,
    Engagement,
    FinancialDocument,
    StartStopKeepResponse,
    StrategyIdeation,
    StrategyIdeationItem,
    SwotResponse,
    VisionAndGoals,
)


class EngagementRepository:
    """Select/insert/update/upsert/delete calls keyed by engagement id.

    Every call runs in its own session and commits on its own; nothing here
    spans more than one write.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # --- engagements ---

    async def create_engagement(
        self,
        *,
        company_name: str,
        leader_name: str,
        financial_year_end: date,
        engagement_name: str | None = None,
    ) -> Engagement:
        engagement = Engagement(
            company_name=company_name,
            leader_name=leader_name,
            financial_year_end=financial_year_end,
            engagement_name=engagement_name,
        )
        return await self._add(engagement)

    async def get_engagement(self, engagement_id: str) -> Engagement | None:
        async with self._session_factory() as session:
            return await session.get(Engagement, engagement_id)

    async def list_engagements(self) -> Sequence[Engagement]:
        stmt = select(Engagement).order_by(Engagement.created_at.desc())
        return await self._all(stmt)

    # --- vision ---

    async def get_vision(self, engagement_id: str) -> VisionAndGoals | None:
        async with self._session_factory() as session:
            return await session.get(VisionAndGoals, engagement_id)

    async def upsert_vision(self, engagement_id: str, values: dict[str, Any]) -> VisionAndGoals:
        """Replace the whole vision row; fields missing from ``values`` become null."""

        async with self._session_factory() as session:
            record = await session.merge(
                VisionAndGoals(
                    engagement_id=engagement_id,
                    purpose=values.get("purpose"),
                    bhag=values.get("bhag"),
                    playing_rules=values.get("playing_rules"),
                    three_year_vision=values.get("three_year_vision"),
                    annual_goals=values.get("annual_goals"),
                    core_kpis=values.get("core_kpis"),
                    updated_at=datetime.now(timezone.utc),
                )
            )
            await session.commit()
            await session.refresh(record)
            return record

    # --- SWOT ---

    async def list_swot(self, engagement_id: str) -> Sequence[SwotResponse]:
        stmt = (
            select(SwotResponse)
            .where(SwotResponse.engagement_id == engagement_id)
            .order_by(SwotResponse.id.asc())
        )
        return await self._all(stmt)

    async def create_swot(
        self,
        engagement_id: str,
        *,
        participant_name: str | None,
        strengths: list[str],
        weaknesses: list[str],
        opportunities: list[str],
        threats: list[str],
    ) -> SwotResponse:
        return await self._add(
            SwotResponse(
                engagement_id=engagement_id,
                participant_name=participant_name,
                strengths=strengths,
                weaknesses=weaknesses,
                opportunities=opportunities,
                threats=threats,
            )
        )

    # --- Start / Stop / Keep ---

    async def list_ssk(self, engagement_id: str) -> Sequence[StartStopKeepResponse]:
        stmt = (
            select(StartStopKeepResponse)
            .where(StartStopKeepResponse.engagement_id == engagement_id)
            .order_by(StartStopKeepResponse.created_at.asc())
        )
        return await self._all(stmt)

    async def count_ssk(self, engagement_id: str) -> int:
        return await self._count(StartStopKeepResponse, engagement_id)

    async def create_ssk(
        self,
        engagement_id: str,
        *,
        participant_name: str,
        start_text: str,
        stop_text: str,
        keep_text: str,
    ) -> StartStopKeepResponse:
        return await self._add(
            StartStopKeepResponse(
                engagement_id=engagement_id,
                participant_name=participant_name,
                start_text=start_text,
                stop_text=stop_text,
                keep_text=keep_text,
            )
        )

    # --- strategy ideation ---

    async def get_strategy_brainstorm(self, engagement_id: str) -> StrategyIdeation | None:
        stmt = select(StrategyIdeation).where(StrategyIdeation.engagement_id == engagement_id)
        async with self._session_factory() as session:
            return await session.scalar(stmt)

    async def upsert_strategy_brainstorm(
        self, engagement_id: str, values: dict[str, Any]
    ) -> tuple[StrategyIdeation, bool]:
        """Insert the brainstorm row if absent, otherwise overwrite it. Returns ``(row, created)``."""

        stmt = select(StrategyIdeation).where(StrategyIdeation.engagement_id == engagement_id)
        async with self._session_factory() as session:
            record = await session.scalar(stmt)
            created = record is None
            if record is None:
                record = StrategyIdeation(engagement_id=engagement_id)
                session.add(record)
            for name, value in values.items():
                setattr(record, name, value)
            record.updated_at = datetime.now(timezone.utc)
            await session.commit()
            await session.refresh(record)
            return record, created

    async def list_strategy_items(self, engagement_id: str) -> Sequence[StrategyIdeationItem]:
        stmt = (
            select(StrategyIdeationItem)
            .where(StrategyIdeationItem.engagement_id == engagement_id)
            .order_by(StrategyIdeationItem.created_at.asc())
        )
        return await self._all(stmt)

    async def create_strategy_item(
        self,
        engagement_id: str,
        *,
        theme: str,
        description: str | None,
        domain: str,
        source_tags: list[str],
    ) -> StrategyIdeationItem:
        return await self._add(
            StrategyIdeationItem(
                engagement_id=engagement_id,
                theme=theme,
                description=description,
                domain=domain,
                source_tags=source_tags,
            )
        )

    async def update_strategy_item(self, item_id: str, values: dict[str, Any]) -> StrategyIdeationItem | None:
        async with self._session_factory() as session:
            item = await session.get(StrategyIdeationItem, item_id)
            if item is None:
                return None
            for name, value in values.items():
                setattr(item, name, value)
            item.updated_at = datetime.now(timezone.utc)
            await session.commit()
            await session.refresh(item)
            return item

    async def delete_strategy_item(self, item_id: str) -> bool:
        return await self._delete(StrategyIdeationItem, item_id)

    # --- financial documents ---

    async def list_financial_documents(self, engagement_id: str) -> Sequence[FinancialDocument]:
        stmt = (
            select(FinancialDocument)
            .where(FinancialDocument.engagement_id == engagement_id)
            .order_by(FinancialDocument.uploaded_at.asc())
        )
        return await self._all(stmt)

    async def count_financial_documents(self, engagement_id: str) -> int:
        return await self._count(FinancialDocument, engagement_id)

    async def get_financial_document(self, document_id: str) -> FinancialDocument | None:
        async with self._session_factory() as session:
            return await session.get(FinancialDocument, document_id)

    async def create_financial_document(
        self,
        engagement_id: str,
        *,
        doc_type: str | None,
        file_path: str,
        original_file_name: str,
        mime_type: str | None,
        meta: dict[str, Any] | None,
    ) -> FinancialDocument:
        return await self._add(
            FinancialDocument(
                engagement_id=engagement_id,
                doc_type=doc_type,
                file_path=file_path,
                original_file_name=original_file_name,
                mime_type=mime_type,
                meta=meta,
            )
        )

    async def delete_financial_document(self, document_id: str) -> bool:
        return await self._delete(FinancialDocument, document_id)

    # --- customer insights ---

    async def list_customer_documents(self, engagement_id: str) -> Sequence[CustomerInsightsDocument]:
        stmt = (
            select(CustomerInsightsDocument)
            .where(CustomerInsightsDocument.engagement_id == engagement_id)
            .order_by(CustomerInsightsDocument.uploaded_at.asc())
        )
        return await self._all(stmt)

    async def count_customer_documents(self, engagement_id: str) -> int:
        return await self._count(CustomerInsightsDocument, engagement_id)

    async def create_customer_document(
        self,
        engagement_id: str,
        *,
        file_path: str,
        original_file_name: str,
        mime_type: str | None,
    ) -> CustomerInsightsDocument:
        return await self._add(
            CustomerInsightsDocument(
                engagement_id=engagement_id,
                file_path=file_path,
                original_file_name=original_file_name,
                mime_type=mime_type,
            )
        )

    # --- helpers ---

    async def _add(self, row):
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def _all(self, stmt) -> list:
        async with self._session_factory() as session:
            results = await session.scalars(stmt)
            return list(results)

    async def _count(self, model, engagement_id: str) -> int:
        stmt = select(func.count()).select_from(model).where(model.engagement_id == engagement_id)
        async with self._session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    async def _delete(self, model, row_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(model).where(model.id == row_id))
            await session.commit()
            return bool(result.rowcount)
