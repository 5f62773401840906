from __future__ import annotations

from typing import Any, List

import pytest

from techtierra.errors import TechTierraError
from techtierra.types import Repository


def make_item(name: str, owner: str = "octo", **extra: Any) -> dict:
    item = {"name": name, "owner": {"login": owner}}
    item.update(extra)
    return item


def make_repo(name: str, owner: str = "octo", description: str | None = None) -> Repository:
    return Repository(name=name, owner_login=owner, description=description)


class FakeTransport:
    """Returns queued payloads (or raises queued errors) and records requested URLs."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.urls: List[str] = []

    def get_json(self, url: str) -> Any:
        self.urls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, TechTierraError):
            raise response
        return response


def page_of(*names: str) -> dict:
    return {"items": [make_item(name) for name in names]}


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
