"""Local re-filtering of fetched repositories."""

from __future__ import annotations

import re
from typing import List, Sequence

from .errors import FilterPatternError
from .types import Repository


def compile_pattern(text: str) -> re.Pattern:
    try:
        return re.compile(text, re.IGNORECASE)
    except re.error as exc:
        raise FilterPatternError(f"Invalid filter pattern {text!r}: {exc}") from exc


def apply_filter(repos: Sequence[Repository], text: str) -> Sequence[Repository]:
    """Return the repositories whose name, owner or description match ``text``.

    Empty ``text`` returns ``repos`` itself. The input is never mutated and the
    relative order of kept entries is preserved.
    """
    if not text:
        return repos
    pattern = compile_pattern(text)
    kept: List[Repository] = []
    for repo in repos:
        fields = (repo.name, repo.owner_login, repo.description or "")
        if any(pattern.search(value) for value in fields):
            kept.append(repo)
    return kept
