"""Flat SSK/SWOT export for spreadsheets."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import astuple, dataclass, fields
from datetime import datetime
from typing import Any, Literal

from trellis.core.logging import get_logger
from trellis.services.loader import gather_reads, require_engagement

Source = Literal["SSK", "SWOT"]

DEFAULT_EXPORT_NAME = "ssk-swot-export"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

SSK_CATEGORIES = (("start_text", "start"), ("stop_text", "stop"), ("keep_text", "keep"))
SWOT_QUADRANTS = (
    ("strengths", "strength"),
    ("weaknesses", "weakness"),
    ("opportunities", "opportunity"),
    ("threats", "threat"),
)

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+", re.IGNORECASE)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExportRecord:
    company_name: str
    source: Source
    category_or_quadrant: str
    description: str
    participant_name: str
    created_at: str


EXPORT_HEADER = tuple(f.name for f in fields(ExportRecord))


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def build_export_records(
    company_name: str | None,
    ssk_rows: Sequence[Any],
    swot_rows: Sequence[Any],
) -> list[ExportRecord]:
    """One record per non-blank SSK field and per non-blank SWOT item.

    Rows are emitted in the order given; descriptions are kept verbatim.
    """

    company = company_name or ""
    records: list[ExportRecord] = []

    for row in ssk_rows:
        participant = _text(getattr(row, "participant_name", None))
        created = _text(getattr(row, "created_at", None))
        for attr, category in SSK_CATEGORIES:
            text = getattr(row, attr, None)
            if _is_blank(text):
                continue
            records.append(ExportRecord(company, "SSK", category, text, participant, created))

    for row in swot_rows:
        participant = _text(getattr(row, "participant_name", None))
        created = _text(getattr(row, "created_at", None))
        for attr, quadrant in SWOT_QUADRANTS:
            items = getattr(row, attr, None)
            if not isinstance(items, list):
                continue
            for item in items:
                if _is_blank(item):
                    continue
                records.append(ExportRecord(company, "SWOT", quadrant, item, participant, created))

    return records


def quote_csv_field(value: str | None) -> str:
    escaped = (value or "").replace('"', '""')
    return f'"{escaped}"'


def render_csv(records: Iterable[ExportRecord]) -> str:
    """Every field quoted, header included, rows joined with CRLF."""

    lines = [",".join(quote_csv_field(name) for name in EXPORT_HEADER)]
    lines.extend(",".join(quote_csv_field(value) for value in astuple(record)) for record in records)
    return "\r\n".join(lines)


def export_filename(company_name: str | None) -> str:
    slug = _NON_ALPHANUMERIC.sub("-", company_name or DEFAULT_EXPORT_NAME).lower()
    return f"{slug or DEFAULT_EXPORT_NAME}.csv"


async def export_engagement(reader: Any, engagement_id: str) -> tuple[str, str]:
    """Read an engagement's SSK and SWOT rows and render ``(csv_text, filename)``."""

    engagement = await require_engagement(reader, engagement_id)
    loaded, _ = await gather_reads(
        {
            "ssk": reader.list_ssk(engagement_id),
            "swot": reader.list_swot(engagement_id),
        },
        engagement_id,
    )

    records = build_export_records(engagement.company_name, loaded.get("ssk") or [], loaded.get("swot") or [])
    logger.info("export.rendered", engagement_id=engagement_id, records=len(records))
    return render_csv(records), export_filename(engagement.company_name)
