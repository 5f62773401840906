"""Incremental page fetching against the repository search endpoint.

The fetcher is a small state machine::

    idle --begin--> fetching --complete(>=1 item)--> idle
                             --complete(0 items)---> exhausted
                             --fail---------------> idle
    any  --reset--> idle (page 1)

Requests are split into :meth:`PaginatedFetcher.begin` and
:meth:`PaginatedFetcher.complete` / :meth:`PaginatedFetcher.fail` so that a
caller running the transport asynchronously can hand the response back later.
Every issued :class:`PageRequest` remembers the page and search generation it
was issued for; a completion that no longer matches is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from .errors import DecodeFailure, TechTierraError
from .github import NetworkFetcher, decode_page
from .results import ResultStore
from .types import Repository

logger = logging.getLogger(__name__)

UrlFactory = Callable[[int], str]


class FetchState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class PaginationState:
    page: int = 1
    fetching: bool = False
    exhausted: bool = False
    generation: int = 0

    @property
    def state(self) -> FetchState:
        if self.fetching:
            return FetchState.FETCHING
        if self.exhausted:
            return FetchState.EXHAUSTED
        return FetchState.IDLE


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int
    generation: int
    url: str


@dataclass(slots=True)
class PageResult:
    """Outcome of one request. ``stale`` results changed nothing."""

    request: PageRequest
    repos: List[Repository] = field(default_factory=list)
    error: Optional[TechTierraError] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale


class PaginatedFetcher:
    def __init__(self, transport: NetworkFetcher, store: ResultStore) -> None:
        self.transport = transport
        self.store = store
        self._pagination = PaginationState()

    @property
    def state(self) -> FetchState:
        return self._pagination.state

    @property
    def page(self) -> int:
        return self._pagination.page

    @property
    def is_fetching(self) -> bool:
        return self._pagination.fetching

    def reset(self) -> None:
        """Return to page 1 and supersede any request still in flight."""
        pagination = self._pagination
        self._pagination = PaginationState(generation=pagination.generation + 1)

    def begin(self, url_for: UrlFactory) -> Optional[PageRequest]:
        """Issue a request for the current page, or ``None`` if the guard drops it.

        ``url_for`` may raise :class:`MalformedQuery`; the state is untouched then.
        """
        if not self._admits():
            return None
        return self._issue(url_for, self._pagination.page)

    def begin_next(self, url_for: UrlFactory) -> Optional[PageRequest]:
        """Advance to the next page and issue a request for it.

        The page only advances when the request is actually issued.
        """
        if not self._admits():
            return None
        return self._issue(url_for, self._pagination.page + 1)

    def complete(self, request: PageRequest, payload: Any) -> PageResult:
        if self._is_stale(request):
            return self._discard(request)
        try:
            repos = decode_page(payload)
        except DecodeFailure as exc:
            logger.warning("Discarding page %d: %s", request.page, exc)
            return self.fail(request, exc)

        self._pagination.fetching = False
        if not repos:
            logger.debug("Page %d returned no items; results exhausted", request.page)
            self._pagination.exhausted = True
        else:
            self.store.append_page(repos)
        return PageResult(request, repos)

    def fail(self, request: PageRequest, error: TechTierraError) -> PageResult:
        if self._is_stale(request):
            return self._discard(request)
        pagination = self._pagination
        pagination.fetching = False
        if pagination.page > 1:
            # the failed page is requested again by the next advance
            pagination.page -= 1
        return PageResult(request, error=error)

    def fetch(self, url_for: UrlFactory) -> Optional[PageResult]:
        """Fetch the current page synchronously."""
        return self.run(self.begin(url_for))

    def fetch_next(self, url_for: UrlFactory) -> Optional[PageResult]:
        """Fetch the page after the current one synchronously."""
        return self.run(self.begin_next(url_for))

    def run(self, request: Optional[PageRequest]) -> Optional[PageResult]:
        if request is None:
            return None
        try:
            payload = self.transport.get_json(request.url)
        except TechTierraError as exc:
            logger.warning("Fetching page %d failed: %s", request.page, exc)
            return self.fail(request, exc)
        except Exception:
            if not self._is_stale(request):
                self._pagination.fetching = False
            raise
        return self.complete(request, payload)

    def _admits(self) -> bool:
        pagination = self._pagination
        if pagination.fetching:
            logger.debug("Fetch already in progress; dropping request")
            return False
        if pagination.exhausted:
            logger.debug("Results exhausted; dropping request")
            return False
        return True

    def _issue(self, url_for: UrlFactory, page: int) -> PageRequest:
        url = url_for(page)
        pagination = self._pagination
        pagination.page = page
        pagination.fetching = True
        return PageRequest(page, pagination.generation, url)

    def _is_stale(self, request: PageRequest) -> bool:
        pagination = self._pagination
        return (
            request.generation != pagination.generation
            or request.page != pagination.page
        )

    def _discard(self, request: PageRequest) -> PageResult:
        logger.info(
            "Discarding stale response for page %d (generation %d)",
            request.page,
            request.generation,
        )
        return PageResult(request, stale=True)
