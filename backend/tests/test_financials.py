from datetime import datetime
from types import SimpleNamespace

import pytest

from trellis.services.financials import (
    compute_overall_readiness,
    compute_period_status,
    compute_period_statuses,
    describe_document,
    doc_role_of,
    documents_covering_years,
    plan_upload,
    select_primary_period,
)
from trellis.services.periods import OPENING_BALANCE_SHEET_KEY, build_financial_periods

PERIODS = build_financial_periods(datetime(2025, 3, 15), "2020-06-30")


def _period(key: str):
    return next(p for p in PERIODS if p.key == key)


def _doc(doc_id: str, **meta):
    return SimpleNamespace(id=doc_id, meta=meta)


def test_pack_stored_against_period_is_complete() -> None:
    pack = _doc("d1", period_key="fy2024_full", doc_role="financial_pack")

    statuses = compute_period_statuses(PERIODS, [pack])
    summary = statuses["fy2024_full"]

    assert summary.status == "complete"
    assert summary.has_pack is True
    assert summary.total_docs == 1
    assert statuses["fy2023_full"].status == "missing"


def test_pnl_covering_several_years_counts_for_each_year() -> None:
    pnl = _doc("d2", period_key="fy2024_full", doc_role="pnl", covers_years=[2023, 2024])

    statuses = compute_period_statuses(PERIODS, [pnl])

    for key in ("fy2024_full", "fy2023_full"):
        summary = statuses[key]
        assert summary.status == "partial"
        assert summary.has_pnl is True
        assert summary.has_bs is False
        assert summary.total_docs == 1
    assert statuses["fy2022_full"].status == "missing"


def test_pnl_and_balance_sheet_together_complete_a_period() -> None:
    docs = [
        _doc("a", period_key="fy2023_full", doc_role="pnl"),
        _doc("b", doc_role="balance_sheet", covers_years=[2023]),
    ]

    summary = compute_period_statuses(PERIODS, docs)["fy2023_full"]

    assert summary.status == "complete"
    assert summary.total_docs == 2


def test_document_matched_both_ways_is_counted_once() -> None:
    doc = _doc("d3", period_key="fy2024_full", doc_role="pnl", covers_years=[2024])
    period = _period("fy2024_full")

    summary = compute_period_status(period, [doc], documents_covering_years([doc]))

    assert summary.total_docs == 1


def test_unknown_role_is_treated_as_other() -> None:
    doc = _doc("d4", period_key="fy2024_full", doc_role="mystery")

    assert doc_role_of(doc) == "other"
    summary = compute_period_statuses(PERIODS, [doc])["fy2024_full"]
    assert summary.status == "partial"
    assert not (summary.has_pack or summary.has_pnl or summary.has_bs)


def test_documents_without_meta_are_ignored_for_matching() -> None:
    doc = SimpleNamespace(id="d5", meta=None)

    statuses = compute_period_statuses(PERIODS, [doc])

    assert all(summary.status == "missing" for summary in statuses.values())


def test_covers_years_ignores_non_integers() -> None:
    doc = _doc("d6", covers_years=["2024", True, 2023])

    assert list(documents_covering_years([doc])) == [2023]


def test_opening_balance_sheet_only_matches_by_period_key() -> None:
    docs = [_doc("d7", doc_role="balance_sheet", covers_years=[2021])]

    statuses = compute_period_statuses(PERIODS, docs)

    assert statuses[OPENING_BALANCE_SHEET_KEY].status == "missing"


def test_overall_readiness_labels() -> None:
    empty = compute_overall_readiness(PERIODS, compute_period_statuses(PERIODS, []))
    assert (empty.completed_recommended, empty.total_recommended, empty.label) == (0, 8, "Not started")

    docs = [
        _doc("p", period_key="fy2024_full", doc_role="financial_pack"),
        _doc("q", period_key="fy2023_full", doc_role="pnl"),
    ]
    partial = compute_overall_readiness(PERIODS, compute_period_statuses(PERIODS, docs))
    assert (partial.completed_recommended, partial.label) == (3, "In progress")

    everything = [_doc(p.key, period_key=p.key, doc_role="financial_pack") for p in PERIODS]
    complete = compute_overall_readiness(PERIODS, compute_period_statuses(PERIODS, everything))
    assert (complete.completed_recommended, complete.total_recommended, complete.label) == (8, 8, "Complete")


def test_overall_readiness_ignores_opening_balance_sheet() -> None:
    docs = [_doc("ob", period_key=OPENING_BALANCE_SHEET_KEY, doc_role="balance_sheet")]

    statuses = compute_period_statuses(PERIODS, docs)
    overall = compute_overall_readiness(PERIODS, statuses)

    assert statuses[OPENING_BALANCE_SHEET_KEY].status == "partial"
    assert (overall.completed_recommended, overall.total_recommended) == (0, 8)

def test_describe_document() -> None:
    assert describe_document(_doc("x", doc_role="financial_pack", covers_years=[2024, 2023])) == (
        "P&L + Balance Sheet · FY 2023, FY 2024"
    )
    assert describe_document(_doc("y", doc_role="pnl")) == "P&L · Years not specified"


def test_plan_upload_files_under_most_recent_year() -> None:
    plan = plan_upload(
        engagement_id="eng-1",
        periods=PERIODS,
        file_name="FY24 pack.pdf",
        covers_years=[2024, 2023, 2024],
        includes_pnl=True,
        includes_balance_sheet=True,
        notes="",
        timestamp_ms=1700000000000,
    )

    assert plan.period.key == "fy2024_full"
    assert plan.doc_role == "financial_pack"
    assert plan.file_path == "financials/eng-1/fy2024_full/financial_pack/1700000000000-FY24-pack.pdf"
    assert plan.meta == {
        "period_key": "fy2024_full",
        "period_label": "FY 2024 (full year)",
        "period_type": "full_year",
        "doc_role": "financial_pack",
        "includes_comparatives": True,
        "notes": None,
        "covers_years": [2023, 2024],
    }


def test_plan_upload_current_year_goes_to_ytd() -> None:
    plan = plan_upload(
        engagement_id="eng-1",
        periods=PERIODS,
        file_name="mgmt.xlsx",
        covers_years=[2025],
        includes_pnl=False,
        includes_balance_sheet=True,
        notes="draft",
        timestamp_ms=1,
    )

    assert plan.period.key == "fy2025_ytd"
    assert plan.doc_role == "balance_sheet"
    assert plan.meta["includes_comparatives"] is False
    assert plan.meta["notes"] == "draft"


def test_plan_upload_requires_a_statement() -> None:
    with pytest.raises(ValueError, match="P&L or Balance Sheet"):
        plan_upload(
            engagement_id="eng-1",
            periods=PERIODS,
            file_name="x.pdf",
            covers_years=[2024],
            includes_pnl=False,
            includes_balance_sheet=False,
            notes=None,
            timestamp_ms=1,
        )


def test_select_primary_period_rejects_unknown_years() -> None:
    with pytest.raises(ValueError, match="could not match"):
        select_primary_period(PERIODS, [2010])
    with pytest.raises(ValueError, match="at least one"):
        select_primary_period(PERIODS, [])
