"""Financial document classification against fiscal periods."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from trellis.services.periods import FinancialPeriod

PeriodStatus = Literal["missing", "partial", "complete"]
ReadinessLabel = Literal["Not started", "In progress", "Complete"]

DOC_ROLES = ("financial_pack", "pnl", "balance_sheet", "cash_flow", "trial_balance", "other")

_ROLE_LABELS = {
    "financial_pack": "Financial pack",
    "pnl": "P&L",
    "balance_sheet": "Balance Sheet",
    "cash_flow": "Cash flow",
    "trial_balance": "Trial balance",
    "other": "Other",
}
_WHITESPACE = re.compile(r"\s+")


class DocumentLike(Protocol):
    id: Any
    meta: Mapping[str, Any] | None


@dataclass(frozen=True, slots=True)
class PeriodStatusSummary:
    status: PeriodStatus
    has_pack: bool
    has_pnl: bool
    has_bs: bool
    total_docs: int

    @property
    def pnl_satisfied(self) -> bool:
        return self.has_pack or self.has_pnl

    @property
    def balance_sheet_satisfied(self) -> bool:
        return self.has_pack or self.has_bs


@dataclass(frozen=True, slots=True)
class OverallReadiness:
    completed_recommended: int
    total_recommended: int
    label: ReadinessLabel


@dataclass(frozen=True, slots=True)
class UploadPlan:
    """Where a new upload belongs and the metadata stored alongside it."""

    period: FinancialPeriod
    doc_role: str
    file_path: str
    meta: dict[str, Any]


def _meta(doc: DocumentLike) -> Mapping[str, Any]:
    meta = getattr(doc, "meta", None)
    return meta if isinstance(meta, Mapping) else {}


def doc_role_of(doc: DocumentLike) -> str:
    role = _meta(doc).get("doc_role")
    return role if role in DOC_ROLES else "other"


def group_documents_by_period(
    periods: Sequence[FinancialPeriod],
    documents: Iterable[DocumentLike],
) -> dict[str, list[DocumentLike]]:
    """Map each period key to the documents explicitly stored against it."""

    grouped: dict[str, list[DocumentLike]] = {period.key: [] for period in periods}
    for doc in documents:
        key = _meta(doc).get("period_key")
        if key in grouped:
            grouped[key].append(doc)
    return grouped


def documents_covering_years(documents: Iterable[DocumentLike]) -> dict[int, list[DocumentLike]]:
    """Map fiscal end year to the documents that declare they cover it."""

    covering: dict[int, list[DocumentLike]] = {}
    for doc in documents:
        covers = _meta(doc).get("covers_years")
        if not isinstance(covers, list):
            continue
        for year in covers:
            if isinstance(year, bool) or not isinstance(year, int):
                continue
            covering.setdefault(year, []).append(doc)
    return covering


def compute_period_status(
    period: FinancialPeriod,
    docs_for_period: Sequence[DocumentLike],
    docs_covering_year: Mapping[int, Sequence[DocumentLike]],
) -> PeriodStatusSummary:
    """Summarise which statements a period has, counting multi-year files once."""

    combined = list(docs_for_period)
    seen = {doc.id for doc in docs_for_period}

    if period.end_year is not None:
        for doc in docs_covering_year.get(period.end_year, ()):
            if doc.id not in seen:
                combined.append(doc)
                seen.add(doc.id)

    roles = {doc_role_of(doc) for doc in combined}
    has_pack = "financial_pack" in roles
    has_pnl = "pnl" in roles
    has_bs = "balance_sheet" in roles

    if not combined:
        status: PeriodStatus = "missing"
    elif has_pack or (has_pnl and has_bs):
        status = "complete"
    else:
        status = "partial"

    return PeriodStatusSummary(
        status=status,
        has_pack=has_pack,
        has_pnl=has_pnl,
        has_bs=has_bs,
        total_docs=len(combined),
    )


def compute_period_statuses(
    periods: Sequence[FinancialPeriod],
    documents: Sequence[DocumentLike],
) -> dict[str, PeriodStatusSummary]:
    by_period = group_documents_by_period(periods, documents)
    by_year = documents_covering_years(documents)
    return {
        period.key: compute_period_status(period, by_period[period.key], by_year)
        for period in periods
    }


def compute_overall_readiness(
    periods: Sequence[FinancialPeriod],
    statuses: Mapping[str, PeriodStatusSummary],
) -> OverallReadiness:
    """Count P&L and Balance Sheet slots across recommended periods."""

    total = 0
    completed = 0

    for period in periods:
        if not period.is_recommended or period.is_legacy:
            continue
        summary = statuses.get(period.key)
        if summary is None:
            continue

        total += 2
        completed += int(summary.pnl_satisfied) + int(summary.balance_sheet_satisfied)

    if completed == 0:
        label: ReadinessLabel = "Not started"
    elif completed == total:
        label = "Complete"
    else:
        label = "In progress"

    return OverallReadiness(completed_recommended=completed, total_recommended=total, label=label)


def describe_document(doc: DocumentLike) -> str:
    """Short tag line such as ``P&L · FY 2023, FY 2024``."""

    role = doc_role_of(doc)
    if role == "financial_pack":
        statement = "P&L + Balance Sheet"
    else:
        statement = _ROLE_LABELS[role]

    years = [year for year in _meta(doc).get("covers_years") or [] if isinstance(year, int)]
    if years:
        years_tag = ", ".join(f"FY {year}" for year in sorted(years))
    else:
        years_tag = "Years not specified"

    return f"{statement} · {years_tag}"


def doc_role_for_statements(*, includes_pnl: bool, includes_balance_sheet: bool) -> str:
    if not includes_pnl and not includes_balance_sheet:
        raise ValueError("Select at least one of P&L or Balance Sheet.")
    if includes_pnl and includes_balance_sheet:
        return "financial_pack"
    return "pnl" if includes_pnl else "balance_sheet"


def select_primary_period(periods: Sequence[FinancialPeriod], covers_years: Iterable[int]) -> FinancialPeriod:
    """Pick the period an upload is filed under: the most recent year it covers."""

    years = list(covers_years)
    if not years:
        raise ValueError("Select at least one financial year.")

    main_year = max(years)
    candidates = [p for p in periods if p.end_year == main_year and not p.is_legacy]
    if not candidates:
        raise ValueError("We could not match these years to a period. Please double-check your selection.")
    return min(candidates, key=lambda p: p.order)


def safe_file_name(name: str) -> str:
    return _WHITESPACE.sub("-", name)


def plan_upload(
    *,
    engagement_id: str,
    periods: Sequence[FinancialPeriod],
    file_name: str,
    covers_years: Iterable[int],
    includes_pnl: bool,
    includes_balance_sheet: bool,
    notes: str | None,
    timestamp_ms: int,
) -> UploadPlan:
    """Derive role, period, storage path and metadata for a new financial upload."""

    years = sorted(set(covers_years))
    doc_role = doc_role_for_statements(includes_pnl=includes_pnl, includes_balance_sheet=includes_balance_sheet)
    period = select_primary_period(periods, years)

    file_path = f"financials/{engagement_id}/{period.key}/{doc_role}/{timestamp_ms}-{safe_file_name(file_name)}"
    meta = {
        "period_key": period.key,
        "period_label": period.label,
        "period_type": period.type,
        "doc_role": doc_role,
        "includes_comparatives": len(years) > 1,
        "notes": notes or None,
        "covers_years": years,
    }
    return UploadPlan(period=period, doc_role=doc_role, file_path=file_path, meta=meta)
