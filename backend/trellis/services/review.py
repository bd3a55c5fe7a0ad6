"""SSK and SWOT input flattened for the review screen."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


def to_string_list(value: Any) -> list[str]:
    """Normalise a stored list or multi-line text into trimmed, non-empty strings."""

    if isinstance(value, list):
        items = ("" if item is None else str(item) for item in value)
        return [item.strip() for item in items if item.strip()]
    if isinstance(value, str):
        return [line.strip() for line in value.split("\n") if line.strip()]
    return []


@dataclass(slots=True)
class ReviewInput:
    start_items: list[str] = field(default_factory=list)
    stop_items: list[str] = field(default_factory=list)
    keep_items: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    opportunities: list[str] = field(default_factory=list)
    threats: list[str] = field(default_factory=list)


def build_review_input(ssk_rows: Sequence[Any], swot_rows: Sequence[Any]) -> ReviewInput:
    review = ReviewInput()

    for row in ssk_rows:
        review.start_items.extend(to_string_list(getattr(row, "start_text", None)))
        review.stop_items.extend(to_string_list(getattr(row, "stop_text", None)))
        review.keep_items.extend(to_string_list(getattr(row, "keep_text", None)))

    for row in swot_rows:
        review.strengths.extend(to_string_list(getattr(row, "strengths", None)))
        review.weaknesses.extend(to_string_list(getattr(row, "weaknesses", None)))
        review.opportunities.extend(to_string_list(getattr(row, "opportunities", None)))
        review.threats.extend(to_string_list(getattr(row, "threats", None)))

    return review
