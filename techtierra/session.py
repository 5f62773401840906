"""Event-driven search session used by the presentation layer."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .errors import FilterPatternError, MalformedQuery
from .fetcher import FetchState, PageResult, PaginatedFetcher
from .github import NetworkFetcher
from .preferences import PreferenceStore, load_preferences
from .query import DEFAULT_SEARCH_URL, build_query, search_url
from .results import ResultStore
from .terms import parse_terms
from .types import Repository

logger = logging.getLogger(__name__)


class SessionListener:
    """Callbacks a view subscribes to. Every hook defaults to a no-op."""

    def on_results_changed(self, displayed: Sequence[Repository]) -> None:
        pass

    def on_fetch_error(self, message: str) -> None:
        pass

    def on_fetch_state_changed(self, is_fetching: bool) -> None:
        pass

    def on_filter_error(self, message: str) -> None:
        pass


class SearchSession:
    """Turns user events into queries, page fetches and displayed-list updates.

    All methods are expected to be called from a single event sequence.
    """

    def __init__(
        self,
        transport: NetworkFetcher,
        preferences: PreferenceStore,
        *,
        search_url: str = DEFAULT_SEARCH_URL,
        per_page: Optional[int] = None,
        sort: Optional[str] = None,
        listener: Optional[SessionListener] = None,
    ) -> None:
        self.preferences = preferences
        self.search_url = search_url
        self.per_page = per_page
        self.sort = sort
        self.listener = listener or SessionListener()
        self.store = ResultStore()
        self.fetcher = PaginatedFetcher(transport, self.store)
        self._keywords: List[str] = []
        self._users: List[str] = []

    @property
    def keyword_terms(self) -> Sequence[str]:
        return tuple(self._keywords)

    @property
    def user_terms(self) -> Sequence[str]:
        return tuple(self._users)

    @property
    def results(self) -> Sequence[Repository]:
        return tuple(self.store.items)

    @property
    def displayed(self) -> Sequence[Repository]:
        return tuple(self.store.displayed)

    @property
    def state(self) -> FetchState:
        return self.fetcher.state

    @property
    def page(self) -> int:
        return self.fetcher.page

    def has_terms(self) -> bool:
        return bool(self._keywords or self._users)

    def submit(self, text: str) -> Optional[PageResult]:
        """Search for ``text``; empty text falls back to the saved filters alone."""
        if not text or not text.strip():
            return self.refresh_after_search()
        self._keywords, self._users = parse_terms(text)
        self._apply_filter("")
        return self.refresh()

    def cancel(self) -> Optional[PageResult]:
        """Drop the typed text and any active term search."""
        self._apply_filter("")
        if not self.has_terms():
            self._notify_results()
            return None
        return self.refresh_after_search()

    def refresh_after_search(self) -> Optional[PageResult]:
        if not self.has_terms():
            return None
        self._keywords, self._users = [], []
        self._apply_filter("")
        return self.refresh()

    def refresh(self) -> Optional[PageResult]:
        self.store.clear()
        self.fetcher.reset()
        self._notify_results()
        return self._fetch(next_page=False)

    def request_next_page(self) -> Optional[PageResult]:
        """Called by the view when the end of the list comes into sight."""
        return self._fetch(next_page=True)

    def text_changed(self, text: str) -> Sequence[Repository]:
        self._apply_filter(text)
        self._notify_results()
        return self.displayed

    def _apply_filter(self, text: str) -> None:
        try:
            self.store.set_filter(text)
        except FilterPatternError as exc:
            logger.warning("%s", exc)
            self.listener.on_filter_error(str(exc))

    def _url_for(self, page: int) -> str:
        preferences = load_preferences(self.preferences)
        query = build_query(self._keywords, self._users, preferences)
        return search_url(
            query, page, base_url=self.search_url, per_page=self.per_page, sort=self.sort
        )

    def _fetch(self, *, next_page: bool) -> Optional[PageResult]:
        try:
            if next_page:
                request = self.fetcher.begin_next(self._url_for)
            else:
                request = self.fetcher.begin(self._url_for)
        except MalformedQuery as exc:
            logger.warning("%s", exc)
            self.listener.on_fetch_error(str(exc))
            return None
        if request is None:
            return None

        logger.debug("Fetching page %d: %s", request.page, request.url)
        self.listener.on_fetch_state_changed(True)
        try:
            result = self.fetcher.run(request)
        finally:
            self.listener.on_fetch_state_changed(self.fetcher.is_fetching)

        if result is None or result.stale:
            return result
        if result.error is not None:
            self.listener.on_fetch_error(str(result.error))
        elif result.repos:
            self._notify_results()
        return result

    def _notify_results(self) -> None:
        self.listener.on_results_changed(self.displayed)
