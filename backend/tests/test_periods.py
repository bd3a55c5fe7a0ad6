from datetime import date, datetime

from trellis.services.periods import (
    OPENING_BALANCE_SHEET_KEY,
    build_financial_periods,
    current_end_year,
    parse_year_end,
)


def _by_type(periods, period_type):
    return [p for p in periods if p.type == period_type]


def test_before_year_end_uses_current_calendar_year() -> None:
    periods = build_financial_periods(datetime(2025, 3, 15), "2020-06-30")

    full_years = _by_type(periods, "full_year")
    assert [p.end_year for p in full_years] == [2024, 2023, 2022]
    assert [p.order for p in full_years] == [1, 2, 3]
    assert [p.key for p in full_years] == ["fy2024_full", "fy2023_full", "fy2022_full"]

    (ytd,) = _by_type(periods, "ytd")
    assert ytd.key == "fy2025_ytd"
    assert ytd.end_year == 2025
    assert ytd.order == 0

    (opening,) = _by_type(periods, "opening_bs")
    assert opening.key == OPENING_BALANCE_SHEET_KEY
    assert opening.end_year is None
    assert opening.order == 4
    assert "2021" in opening.description
    assert all(p.is_recommended for p in periods)


def test_after_year_end_rolls_into_next_fiscal_year() -> None:
    periods = build_financial_periods(datetime(2025, 8, 1), date(2019, 6, 30))

    assert [p.end_year for p in _by_type(periods, "full_year")] == [2025, 2024, 2023]
    assert _by_type(periods, "ytd")[0].key == "fy2026_ytd"
    assert "2022" in _by_type(periods, "opening_bs")[0].description


def test_output_order_and_labels() -> None:
    periods = build_financial_periods(datetime(2025, 3, 15), "2020-06-30")

    assert [p.type for p in periods] == ["full_year", "full_year", "full_year", "ytd", "opening_bs"]
    assert periods[0].label == "FY 2024 (full year)"
    assert periods[0].description == "Financial year ending 30 Jun 2024."
    assert periods[3].label == "FY 2025 (year-to-date)"
    assert periods[3].description == "Current financial year to date (year ending 30 Jun 2025)."
    assert periods[4].description == (
        "Balance Sheet at the start of the first financial year in this series (1 Jun 2021)."
    )


def test_repeated_calls_are_identical() -> None:
    now = datetime(2025, 3, 15, 9, 30)

    first = build_financial_periods(now, "2024-06-30")
    second = build_financial_periods(now, "2024-06-30")

    assert first == second
    assert [p.key for p in first] == [p.key for p in second]


def test_missing_year_end_defaults_to_calendar_year() -> None:
    assert parse_year_end(None) == (12, 31)

    periods = build_financial_periods(datetime(2025, 3, 15), None)
    assert _by_type(periods, "ytd")[0].end_year == 2025
    assert periods[0].description == "Financial year ending 31 Dec 2024."


def test_unparseable_year_end_falls_back_to_june() -> None:
    assert parse_year_end("not-a-date") == (6, 30)
    assert parse_year_end("2024-13-01") == (6, 30)
    assert parse_year_end("2024-09-30") == (9, 30)


def test_year_end_day_itself_counts_as_current_year() -> None:
    assert current_end_year(date(2025, 6, 30), 6, 30) == 2025
    assert current_end_year(datetime(2025, 6, 30, 0, 0), 6, 30) == 2025
    assert current_end_year(datetime(2025, 6, 30, 12, 0), 6, 30) == 2026


def test_leap_day_year_end_in_common_year() -> None:
    # 29 Feb 2025 does not exist and rolls to 1 Mar.
    assert current_end_year(date(2025, 3, 1), 2, 29) == 2025
    assert current_end_year(date(2025, 3, 2), 2, 29) == 2026
