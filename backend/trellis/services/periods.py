"""Fiscal period generation for the financial documents checklist.

Periods are labelled by the calendar year in which the fiscal year *ends*,
so for a 30 June year end, "FY 2026" runs from 1 Jul 2025 to 30 Jun 2026.
Nothing here is stored; periods are rebuilt from ``now`` and the engagement's
year end on every read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal

PeriodType = Literal["full_year", "ytd", "opening_bs"]

OPENING_BALANCE_SHEET_KEY = "opening_balance_sheet"
FULL_YEARS_IN_SERIES = 3

_CALENDAR_YEAR_END = (12, 31)
_UNPARSEABLE_YEAR_END = (6, 30)
_MONTH_NAMES = ("", "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True, slots=True)
class FinancialPeriod:
    key: str
    label: str
    description: str
    type: PeriodType
    order: int
    is_recommended: bool
    end_year: int | None = None

    @property
    def is_legacy(self) -> bool:
        """Opening balance sheet rows are kept for old uploads only."""

        return self.type == "opening_bs"


def month_name(month: int) -> str:
    return _MONTH_NAMES[month]


def parse_year_end(financial_year_end: date | str | None) -> tuple[int, int]:
    """Return the (month, day) of a fiscal year end.

    Only month and day matter. A missing value means a calendar year end; a
    string that does not carry a usable month and day falls back to 30 June.
    """

    if financial_year_end is None:
        return _CALENDAR_YEAR_END
    if isinstance(financial_year_end, date):
        return financial_year_end.month, financial_year_end.day

    parts = financial_year_end.strip().split("-")
    try:
        month, day = int(parts[1]), int(parts[2][:2])
    except (IndexError, ValueError):
        return _UNPARSEABLE_YEAR_END
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return _UNPARSEABLE_YEAR_END
    return month, day


def _year_end_on(year: int, month: int, day: int) -> date:
    # Days past the end of the month roll into the next one (29 Feb -> 1 Mar).
    return date(year, month, 1) + timedelta(days=day - 1)


def current_end_year(now: datetime | date, month: int, day: int) -> int:
    """End year of the fiscal year that contains ``now``."""

    if not isinstance(now, datetime):
        now = datetime.combine(now, time.min)

    fye_this_year = datetime.combine(_year_end_on(now.year, month, day), time.min, tzinfo=now.tzinfo)
    return now.year if now <= fye_this_year else now.year + 1


def build_financial_periods(
    now: datetime | date,
    financial_year_end: date | str | None = None,
) -> list[FinancialPeriod]:
    """Build the last three full years, the current year to date and the opening balance sheet."""

    fye_month, fye_day = parse_year_end(financial_year_end)
    month_label = month_name(fye_month)

    this_end_year = current_end_year(now, fye_month, fye_day)
    last_completed = this_end_year - 1
    full_year_ends = [last_completed - offset for offset in range(FULL_YEARS_IN_SERIES)]

    periods = [
        FinancialPeriod(
            key=f"fy{end_year}_full",
            label=f"FY {end_year} (full year)",
            description=f"Financial year ending {fye_day} {month_label} {end_year}.",
            type="full_year",
            order=index + 1,
            is_recommended=True,
            end_year=end_year,
        )
        for index, end_year in enumerate(full_year_ends)
    ]

    periods.append(
        FinancialPeriod(
            key=f"fy{this_end_year}_ytd",
            label=f"FY {this_end_year} (year-to-date)",
            description=(
                f"Current financial year to date (year ending {fye_day} {month_label} {this_end_year})."
            ),
            type="ytd",
            order=0,
            is_recommended=True,
            end_year=this_end_year,
        )
    )

    opening_year = full_year_ends[-1] - 1
    periods.append(
        FinancialPeriod(
            key=OPENING_BALANCE_SHEET_KEY,
            label="Opening Balance Sheet",
            description=(
                "Balance Sheet at the start of the first financial year in this series "
                f"(1 {month_label} {opening_year})."
            ),
            type="opening_bs",
            order=len(full_year_ends) + 1,
            is_recommended=True,
            end_year=None,
        )
    )

    return periods
