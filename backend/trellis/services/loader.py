"""Engagement aggregate loading for the dashboard and module pages."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from trellis.core.logging import get_logger
from trellis.services.errors import EngagementNotFoundError
from trellis.services.readiness import ModuleStatuses, evaluate_modules

logger = get_logger(__name__)

T = TypeVar("T")


class EngagementReader(Protocol):
    async def get_engagement(self, engagement_id: str) -> Any | None: ...

    async def get_vision(self, engagement_id: str) -> Any | None: ...

    async def list_swot(self, engagement_id: str) -> Sequence[Any]: ...

    async def get_strategy_brainstorm(self, engagement_id: str) -> Any | None: ...

    async def count_ssk(self, engagement_id: str) -> int: ...

    async def count_customer_documents(self, engagement_id: str) -> int: ...

    async def count_financial_documents(self, engagement_id: str) -> int: ...


@dataclass(slots=True)
class EngagementAggregate:
    """Everything the dashboard needs for one engagement, read in one pass."""

    engagement: Any
    vision: Any | None = None
    swot_rows: list[Any] = field(default_factory=list)
    brainstorm: Any | None = None
    ssk_count: int = 0
    customer_document_count: int = 0
    financial_document_count: int = 0
    failed_reads: list[str] = field(default_factory=list)

    @property
    def swot_response_count(self) -> int:
        return len(self.swot_rows)

    def statuses(self) -> ModuleStatuses:
        return evaluate_modules(
            vision=self.vision,
            swot_rows=self.swot_rows,
            ssk_count=self.ssk_count,
            brainstorm=self.brainstorm,
            customer_document_count=self.customer_document_count,
            financial_document_count=self.financial_document_count,
        )


async def require_engagement(reader: EngagementReader, engagement_id: str) -> Any:
    engagement = await reader.get_engagement(engagement_id)
    if engagement is None:
        raise EngagementNotFoundError(engagement_id)
    return engagement


async def gather_reads(reads: dict[str, Awaitable[T]], engagement_id: str) -> tuple[dict[str, T], list[str]]:
    """Run independent reads concurrently; failed reads are logged and left out."""

    names = list(reads)
    results = await asyncio.gather(*reads.values(), return_exceptions=True)

    loaded: dict[str, T] = {}
    failed: list[str] = []
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            logger.warning(
                "loader.read_failed",
                engagement_id=engagement_id,
                read=name,
                error=str(result),
                error_type=type(result).__name__,
            )
            failed.append(name)
            continue
        loaded[name] = result
    return loaded, failed


async def load_engagement_aggregate(reader: EngagementReader, engagement_id: str) -> EngagementAggregate:
    """Load the engagement header, then fan out the module reads.

    A missing engagement raises :class:`EngagementNotFoundError`; any other
    failed read degrades to empty data for that module.
    """

    engagement = await require_engagement(reader, engagement_id)

    loaded, failed = await gather_reads(
        {
            "vision": reader.get_vision(engagement_id),
            "swot": reader.list_swot(engagement_id),
            "strategy_ideation": reader.get_strategy_brainstorm(engagement_id),
            "ssk_count": reader.count_ssk(engagement_id),
            "customer_documents": reader.count_customer_documents(engagement_id),
            "financial_documents": reader.count_financial_documents(engagement_id),
        },
        engagement_id,
    )

    return EngagementAggregate(
        engagement=engagement,
        vision=loaded.get("vision"),
        swot_rows=list(loaded.get("swot") or []),
        brainstorm=loaded.get("strategy_ideation"),
        ssk_count=loaded.get("ssk_count") or 0,
        customer_document_count=loaded.get("customer_documents") or 0,
        financial_document_count=loaded.get("financial_documents") or 0,
        failed_reads=failed,
    )
