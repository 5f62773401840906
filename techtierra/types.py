"""Core dataclasses and typing helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

Qualifier = Tuple[str, str]

KNOWN_LANGUAGES: Tuple[str, ...] = (
    "Swift",
    "Java",
    "Ruby",
    "Go",
    "Python",
    "C",
    "C++",
    "Rust",
    "Kotlin",
    "JavaScript",
    "TypeScript",
)


@dataclass(frozen=True, slots=True)
class Repository:
    """A single repository search hit. Optional fields stay ``None`` when absent."""

    name: str = ""
    owner_login: str = ""
    avatar_url: Optional[str] = None
    owner_type: Optional[str] = None
    stars: Optional[int] = None
    watchers: Optional[int] = None
    forks: Optional[int] = None
    language: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None

    @property
    def identifier(self) -> str:
        if self.owner_login and self.name:
            return f"{self.owner_login}/{self.name}"
        return self.name or self.owner_login

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "Repository":
        owner = item.get("owner")
        if not isinstance(owner, Mapping):
            owner = {}
        return cls(
            name=_text(item.get("name")) or "",
            owner_login=_text(owner.get("login")) or "",
            avatar_url=_text(owner.get("avatar_url")),
            owner_type=_text(owner.get("type")),
            stars=_count(item.get("stargazers_count")),
            watchers=_count(item.get("watchers_count")),
            forks=_count(item.get("forks_count")),
            language=_text(item.get("language")),
            description=_text(item.get("description")),
            url=_text(item.get("html_url")),
        )


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def _count(value: Any) -> Optional[int]:
    # bool is an int subclass; a JSON true is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value < 0:
        return None
    return value


@dataclass(slots=True)
class SearchQuery:
    """Keyword terms, user-scoped terms and raw qualifier pairs for one search."""

    keywords: Sequence[str] = field(default_factory=tuple)
    users: Sequence[str] = field(default_factory=tuple)
    qualifiers: Sequence[Qualifier] = field(default_factory=tuple)

    def build(self) -> str:
        parts: List[str] = []
        for term in self.keywords:
            term = term.strip()
            if term:
                parts.append(term)
        for qualifier, value in self.qualifiers:
            qualifier = qualifier.strip()
            value = value.strip()
            if not qualifier:
                continue
            token = qualifier if not value else f"{qualifier}:{_operator(qualifier)}{value}"
            parts.append(token)
        return " ".join(parts)


# Qualifiers whose stored value is a threshold rather than an exact match.
_THRESHOLD_QUALIFIERS = frozenset({"stars"})


def _operator(qualifier: str) -> str:
    return ">=" if qualifier in _THRESHOLD_QUALIFIERS else ""


@dataclass(slots=True)
class FilterPreferences:
    """Saved search filters. Read once per query-build cycle."""

    min_stars: int = 0
    language_filter_enabled: bool = False
    selected_languages: Tuple[str, ...] = ()

    def languages(self) -> Tuple[str, ...]:
        """Languages that actually constrain the query."""
        if not self.language_filter_enabled:
            return ()
        return self.selected_languages


def dedupe_qualifiers(*groups: Iterable[Qualifier]) -> Tuple[Qualifier, ...]:
    """Flatten several qualifier iterables into a tuple, dropping repeats, preserving order."""
    combined: List[Qualifier] = []
    seen = set()
    for group in groups:
        for qualifier in group:
            if qualifier in seen:
                continue
            seen.add(qualifier)
            combined.append(qualifier)
    return tuple(combined)
