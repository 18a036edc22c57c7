"""Render order for circles given hover and selection state."""

from __future__ import annotations

from typing import Sequence, TypeVar, Union

from .models import AggregateEntry, ScreenCircle
from .util import locale_sort_key

Orderable = TypeVar("Orderable", bound=Union[str, AggregateEntry, ScreenCircle])


def _key_of(item: Union[str, AggregateEntry, ScreenCircle]) -> str:
    return item if isinstance(item, str) else item.key


def render_rank(key: str, selected_key: str | None, hovered_key: str | None) -> int:
    if hovered_key is not None and key == hovered_key:
        return 2
    if selected_key is not None and key == selected_key:
        return 1
    return 0


def order_for_render(
    entries: Sequence[Orderable],
    selected_key: str | None = None,
    hovered_key: str | None = None,
) -> list[Orderable]:
    """Return entries in paint order; the interacted-with entry paints last.

    Hovered beats selected. Everything else is ordered by key, so repeated
    renders with unchanged state give the same sibling order.
    """

    def sort_key(item: Orderable) -> tuple[int, tuple[str, str]]:
        key = _key_of(item)
        return (render_rank(key, selected_key, hovered_key), locale_sort_key(key))

    return sorted(entries, key=sort_key)
