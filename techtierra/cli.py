"""Command-line interface for TechTierra."""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from typing import List, Sequence

from .config import load_settings
from .errors import TechTierraError
from .fetcher import FetchState
from .github import GitHubSearchClient
from .preferences import (
    JsonPreferenceStore,
    deselect_languages,
    load_preferences,
    save_preferences,
    select_languages,
)
from .render import render_preferences, render_results
from .session import SearchSession, SessionListener
from .types import KNOWN_LANGUAGES, FilterPreferences, Repository

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


class _ConsoleListener(SessionListener):
    def __init__(self) -> None:
        self.fetch_errors: List[str] = []
        self.filter_errors: List[str] = []

    def on_fetch_error(self, message: str) -> None:
        self.fetch_errors.append(message)
        print(f"Could not fetch repositories: {message}", file=sys.stderr)

    def on_filter_error(self, message: str) -> None:
        self.filter_errors.append(message)
        print(f"Filter ignored: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="techtierra", description="Search GitHub repositories by keyword and user"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_search_parser(subparsers)
    _add_prefs_parser(subparsers)

    return parser


def _add_search_parser(subparsers: argparse._SubParsersAction) -> None:
    search = subparsers.add_parser("search", help="Search repositories")
    search.add_argument(
        "terms",
        nargs="*",
        help="Keywords and user:<name> terms (omit to browse with saved filters only)",
    )
    search.add_argument("--pages", type=int, default=1, help="Number of pages to fetch")
    search.add_argument("--filter", default="", help="Pattern to filter fetched results locally")
    search.add_argument("--sort", help="Sort field, e.g. stars or updated")
    search.add_argument("--per-page", type=int, help="Items per API page")
    search.add_argument("--search-url", help="Override the search endpoint")
    search.add_argument(
        "--open",
        type=int,
        metavar="N",
        help="Open the N-th displayed repository in a browser",
    )
    search.add_argument("--output", choices=["table", "json"], default="table")
    search.set_defaults(func=_handle_search)


def _add_prefs_parser(subparsers: argparse._SubParsersAction) -> None:
    prefs = subparsers.add_parser("prefs", help="Manage saved search filters")
    prefs_sub = prefs.add_subparsers(dest="subcommand", required=True)

    show_cmd = prefs_sub.add_parser("show", help="Show saved filters")
    show_cmd.set_defaults(func=_handle_prefs_show)

    stars_cmd = prefs_sub.add_parser("stars", help="Set the minimum star count")
    stars_cmd.add_argument("count", type=int)
    stars_cmd.set_defaults(func=_handle_prefs_stars)

    toggle_cmd = prefs_sub.add_parser("language-filter", help="Enable or disable language filtering")
    toggle_cmd.add_argument("state", choices=["on", "off"])
    toggle_cmd.set_defaults(func=_handle_prefs_language_filter)

    languages_cmd = prefs_sub.add_parser("languages", help="Manage selected languages")
    languages_sub = languages_cmd.add_subparsers(dest="action", required=True)
    add_cmd = languages_sub.add_parser("add", help="Select languages")
    add_cmd.add_argument("names", nargs="+")
    add_cmd.set_defaults(func=_handle_languages_add)
    remove_cmd = languages_sub.add_parser("remove", help="Deselect languages")
    remove_cmd.add_argument("names", nargs="+")
    remove_cmd.set_defaults(func=_handle_languages_remove)
    list_cmd = languages_sub.add_parser("list", help="List known languages")
    list_cmd.set_defaults(func=_handle_languages_list)

    reset_cmd = prefs_sub.add_parser("reset", help="Restore default filters")
    reset_cmd.set_defaults(func=_handle_prefs_reset)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings()
        level = logging.DEBUG if args.verbose else settings.log_level
        logging.basicConfig(level=level, format=LOG_FORMAT)
        return args.func(args)
    except TechTierraError as exc:
        print(f"Search error: {exc}", file=sys.stderr)
        return 2
    except (RuntimeError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def _handle_search(args: argparse.Namespace) -> int:
    if args.pages < 1:
        raise ValueError("--pages must be at least 1")
    settings = load_settings(search_url=args.search_url, per_page=args.per_page)
    listener = _ConsoleListener()
    session = SearchSession(
        GitHubSearchClient(timeout=settings.timeout),
        JsonPreferenceStore(settings.config_path),
        search_url=settings.search_url,
        per_page=settings.per_page,
        sort=args.sort,
        listener=listener,
    )

    text = " ".join(args.terms)
    if text.strip():
        session.submit(text)
    else:
        session.refresh()
    for _ in range(args.pages - 1):
        if listener.fetch_errors or session.state is FetchState.EXHAUSTED:
            break
        session.request_next_page()

    if args.filter:
        session.text_changed(args.filter)

    displayed = session.displayed
    render_results(displayed, mode=args.output)
    if args.open is not None:
        _open_repository(displayed, args.open)
    return 2 if listener.fetch_errors else 0


def _open_repository(displayed: Sequence[Repository], index: int) -> None:
    if not 1 <= index <= len(displayed):
        raise ValueError(f"No displayed repository at position {index}")
    repo = displayed[index - 1]
    if not repo.url:
        raise RuntimeError("Sorry, no URL exists for this repository")
    webbrowser.open(repo.url)


def _preference_store() -> JsonPreferenceStore:
    return JsonPreferenceStore(load_settings().config_path)


def _handle_prefs_show(args: argparse.Namespace) -> int:
    render_preferences(load_preferences(_preference_store()))
    return 0


def _handle_prefs_stars(args: argparse.Namespace) -> int:
    if args.count < 0:
        raise ValueError("Minimum stars cannot be negative")
    store = _preference_store()
    preferences = load_preferences(store)
    preferences.min_stars = args.count
    save_preferences(store, preferences)
    render_preferences(preferences)
    return 0


def _handle_prefs_language_filter(args: argparse.Namespace) -> int:
    store = _preference_store()
    preferences = load_preferences(store)
    preferences.language_filter_enabled = args.state == "on"
    save_preferences(store, preferences)
    render_preferences(preferences)
    return 0


def _handle_languages_add(args: argparse.Namespace) -> int:
    store = _preference_store()
    preferences = select_languages(load_preferences(store), args.names)
    save_preferences(store, preferences)
    render_preferences(preferences)
    return 0


def _handle_languages_remove(args: argparse.Namespace) -> int:
    store = _preference_store()
    preferences = deselect_languages(load_preferences(store), args.names)
    save_preferences(store, preferences)
    render_preferences(preferences)
    return 0


def _handle_languages_list(_: argparse.Namespace) -> int:
    for language in KNOWN_LANGUAGES:
        print(language)
    return 0


def _handle_prefs_reset(args: argparse.Namespace) -> int:
    store = _preference_store()
    preferences = FilterPreferences()
    save_preferences(store, preferences)
    render_preferences(preferences)
    return 0


if __name__ == "__main__":
    sys.exit(main())
