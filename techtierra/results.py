"""In-memory result storage."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .filters import apply_filter
from .types import Repository


class ResultStore:
    """The canonical fetched list plus the currently displayed (filtered) view."""

    def __init__(self) -> None:
        self._items: List[Repository] = []
        self._displayed: Sequence[Repository] = self._items
        self._filter_text = ""

    @property
    def items(self) -> Sequence[Repository]:
        return self._items

    @property
    def displayed(self) -> Sequence[Repository]:
        return self._displayed

    @property
    def filter_text(self) -> str:
        return self._filter_text

    def clear(self) -> None:
        self._items.clear()
        self._refresh()

    def append_page(self, repos: Iterable[Repository]) -> None:
        self._items.extend(repos)
        self._refresh()

    def set_filter(self, text: str) -> Sequence[Repository]:
        """Filter the canonical list by ``text``.

        Raises :class:`FilterPatternError` for an invalid pattern, leaving the
        previous filter text and displayed list in place.
        """
        displayed = apply_filter(self._items, text)
        self._filter_text = text
        self._displayed = displayed
        return displayed

    def _refresh(self) -> None:
        self._displayed = apply_filter(self._items, self._filter_text)
