"""Search query construction."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import requests

from .errors import MalformedQuery
from .types import FilterPreferences, Qualifier, SearchQuery, dedupe_qualifiers

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.github.com/search/repositories"

STARS = "stars"
LANGUAGE = "language"
USER = "user"


def build_query(
    keywords: Sequence[str],
    users: Sequence[str],
    preferences: FilterPreferences,
) -> SearchQuery:
    """Combine parsed terms with saved filters into a :class:`SearchQuery`."""
    preference_qualifiers: List[Qualifier] = []
    if preferences.min_stars > 0:
        preference_qualifiers.append((STARS, str(preferences.min_stars)))
    for language in preferences.languages():
        preference_qualifiers.append((LANGUAGE, language))
    user_qualifiers = [(USER, name) for name in users]

    qualifiers = dedupe_qualifiers(preference_qualifiers, user_qualifiers)
    logger.debug("Built qualifiers %s for keywords %s", qualifiers, list(keywords))
    return SearchQuery(tuple(keywords), tuple(users), qualifiers)


def search_url(
    query: SearchQuery,
    page: int,
    *,
    base_url: str = DEFAULT_SEARCH_URL,
    per_page: Optional[int] = None,
    sort: Optional[str] = None,
) -> str:
    """Return the GET URL for one page of ``query``.

    ``sort`` is only sent when given. An empty query is still a valid request.
    """
    if page < 1:
        raise MalformedQuery(f"Page must be >= 1, got {page}")
    params = {"q": query.build(), "page": page}
    if per_page is not None:
        params["per_page"] = per_page
    if sort:
        params["sort"] = sort
    try:
        prepared = requests.Request("GET", base_url, params=params).prepare()
    except (requests.exceptions.RequestException, ValueError) as exc:
        raise MalformedQuery(f"Cannot build search URL from {base_url!r}: {exc}") from exc
    if not prepared.url:
        raise MalformedQuery(f"Cannot build search URL from {base_url!r}")
    return prepared.url
