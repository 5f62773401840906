"""Output helpers for CLI rendering."""

from __future__ import annotations

import json
import sys
from typing import Iterable, List, Optional, TextIO

from .types import FilterPreferences, Repository


def render_results(
    results: Iterable[Repository],
    *,
    mode: str = "table",
    stream: Optional[TextIO] = None,
) -> None:
    stream = stream or sys.stdout
    results = list(results)
    if mode == "json":
        json.dump(serialize_results(results), stream, indent=2)
        stream.write("\n")
        return

    if not results:
        stream.write("No repositories found.\n")
        return

    for index, item in enumerate(results, start=1):
        header = f"{index:>3}. {item.identifier}"
        if item.owner_type:
            header += f" ({item.owner_type})"
        stream.write(header + "\n")
        stats = _stats_line(item)
        if stats:
            stream.write(f"     {stats}\n")
        if item.description:
            stream.write(f"     {item.description}\n")
        if item.url:
            stream.write(f"     {item.url}\n")
        stream.write("\n")


def _stats_line(item: Repository) -> str:
    parts: List[str] = []
    for label, value in (
        ("stars", item.stars),
        ("watchers", item.watchers),
        ("forks", item.forks),
    ):
        formatted = format_count(value)
        if formatted:
            parts.append(f"{label} {formatted}")
    if item.language:
        parts.append(item.language)
    return " | ".join(parts)


def format_count(value: Optional[int]) -> str:
    if value is None:
        return ""
    return f"{value:,}"


def _result_to_dict(result: Repository) -> dict:
    return {
        "name": result.name,
        "owner": result.owner_login,
        "owner_type": result.owner_type,
        "avatar_url": result.avatar_url,
        "stars": result.stars,
        "watchers": result.watchers,
        "forks": result.forks,
        "language": result.language,
        "description": result.description,
        "url": result.url,
    }


def serialize_results(results: Iterable[Repository]) -> list[dict]:
    return [_result_to_dict(item) for item in results]


def render_preferences(
    preferences: FilterPreferences, stream: Optional[TextIO] = None
) -> None:
    stream = stream or sys.stdout
    stream.write(f"Minimum stars: {preferences.min_stars}\n")
    state = "on" if preferences.language_filter_enabled else "off"
    stream.write(f"Language filter: {state}\n")
    languages = ", ".join(preferences.selected_languages) or "(none)"
    stream.write(f"Selected languages: {languages}\n")
