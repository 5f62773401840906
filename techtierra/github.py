"""GitHub API utilities."""

from __future__ import annotations

import logging
from typing import Any, List, Protocol

import requests

from .config import DEFAULT_TIMEOUT
from .errors import DecodeFailure, NetworkFailure
from .types import Repository

logger = logging.getLogger(__name__)


class NetworkFetcher(Protocol):
    """Performs one GET against the search endpoint and returns the decoded JSON body."""

    def get_json(self, url: str) -> Any:
        ...


class GitHubSearchClient:
    """Thin client around the GitHub repository search endpoint."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "TechTierra/0.1",
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": user_agent,
            }
        )

    def get_json(self, url: str) -> Any:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkFailure(f"Could not reach GitHub: {exc}") from exc

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as exc:
                raise DecodeFailure("GitHub returned a non-JSON response") from exc
        if response.status_code == 403 and _is_rate_limited(response):
            raise NetworkFailure(
                "GitHub search rate limit exceeded", status_code=response.status_code
            )
        message = _extract_error_message(response)
        raise NetworkFailure(
            f"GitHub API error {response.status_code}: {message}",
            status_code=response.status_code,
        )


def decode_page(payload: Any) -> List[Repository]:
    """Decode a search response body into repositories, in response order."""
    if not isinstance(payload, dict):
        raise DecodeFailure("Search response is not a JSON object")
    items = payload.get("items")
    if not isinstance(items, list):
        raise DecodeFailure("Search response has no 'items' array")
    repos: List[Repository] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object search item: %r", item)
            continue
        repos.append(Repository.from_api(item))
    return repos


def _is_rate_limited(response: requests.Response) -> bool:
    if "rate limit" in response.text.lower():
        return True
    remaining = response.headers.get("X-RateLimit-Remaining")
    return remaining == "0"


def _extract_error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        return payload.get("message", response.text)
    return response.text
