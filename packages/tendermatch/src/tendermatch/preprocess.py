"""Normalize ITT and response items once per matching run."""

from __future__ import annotations

from collections.abc import Iterable

from tendermatch.normalize import normalize, normalize_item_code
from tendermatch.types import ITTItem, PreparedItem, ResponseItem


def _clean(value: str | None) -> str:
    return value.lower().strip() if value else ""


def prepare_itt_item(item: ITTItem) -> PreparedItem:
    return PreparedItem(
        item=item,
        item_code=normalize_item_code(item.item_code),
        description=normalize(item.description),
        unit=_clean(item.unit),
        section=item.section_id or "",
        qty=item.qty,
    )


def prepare_response_item(item: ResponseItem) -> PreparedItem:
    return PreparedItem(
        item=item,
        item_code=normalize_item_code(item.item_code),
        description=normalize(item.description),
        unit=_clean(item.unit),
        section=_clean(item.section_guess),
        qty=item.qty,
    )


def prepare_itt_items(items: Iterable[ITTItem]) -> list[PreparedItem]:
    """Prepare every ITT item; the result is reused for each response item."""
    return [prepare_itt_item(item) for item in items]
