"""Saved filter preferences."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from .config import default_config_path, read_config, write_config
from .types import KNOWN_LANGUAGES, FilterPreferences

MIN_STARS_KEY = "minStars"
LANGUAGE_FILTER_KEY = "searchByLanguage"
SELECTED_LANGUAGES_KEY = "selectedLanguages"

PREFERENCES_SECTION = "preferences"


class PreferenceStore(Protocol):
    """Scalar and list key-value storage for user preferences."""

    def get_int(self, key: str, default: int) -> int:
        ...

    def get_bool(self, key: str, default: bool) -> bool:
        ...

    def get_string_list(self, key: str, default: Sequence[str]) -> List[str]:
        ...

    def set_int(self, key: str, value: int) -> None:
        ...

    def set_bool(self, key: str, value: bool) -> None:
        ...

    def set_string_list(self, key: str, value: Sequence[str]) -> None:
        ...

    def set_many(self, values: Mapping[str, object]) -> None:
        """Store several already-typed values in one write."""
        ...


class _DictPreferenceStore(ABC):
    """Typed accessors over a plain dict; wrong-typed values fall back to the default."""

    @abstractmethod
    def _load(self) -> Dict[str, object]:
        ...

    @abstractmethod
    def _store(self, values: Mapping[str, object]) -> None:
        ...

    def get_int(self, key: str, default: int) -> int:
        value = self._load().get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value

    def get_bool(self, key: str, default: bool) -> bool:
        value = self._load().get(key)
        return value if isinstance(value, bool) else default

    def get_string_list(self, key: str, default: Sequence[str]) -> List[str]:
        value = self._load().get(key)
        if not isinstance(value, list):
            return list(default)
        return [item for item in value if isinstance(item, str)]

    def set_int(self, key: str, value: int) -> None:
        self._store({key: int(value)})

    def set_bool(self, key: str, value: bool) -> None:
        self._store({key: bool(value)})

    def set_string_list(self, key: str, value: Sequence[str]) -> None:
        self._store({key: list(value)})

    def set_many(self, values: Mapping[str, object]) -> None:
        self._store(values)


class MemoryPreferenceStore(_DictPreferenceStore):
    def __init__(self, values: Optional[Dict[str, object]] = None) -> None:
        self.values: Dict[str, object] = dict(values or {})

    def _load(self) -> Dict[str, object]:
        return self.values

    def _store(self, values: Mapping[str, object]) -> None:
        self.values.update(values)


class JsonPreferenceStore(_DictPreferenceStore):
    """Preferences persisted in the ``preferences`` object of the config file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or default_config_path()

    def _load(self) -> Dict[str, object]:
        section = read_config(self.path).get(PREFERENCES_SECTION)
        return section if isinstance(section, dict) else {}

    def _store(self, values: Mapping[str, object]) -> None:
        data = read_config(self.path)
        section = data.get(PREFERENCES_SECTION)
        if not isinstance(section, dict):
            section = {}
        section.update(values)
        data[PREFERENCES_SECTION] = section
        write_config(self.path, data)


def load_preferences(store: PreferenceStore) -> FilterPreferences:
    min_stars = store.get_int(MIN_STARS_KEY, 0)
    enabled = store.get_bool(LANGUAGE_FILTER_KEY, False)
    languages = store.get_string_list(SELECTED_LANGUAGES_KEY, [])
    return FilterPreferences(
        min_stars=max(min_stars, 0),
        language_filter_enabled=enabled,
        selected_languages=tuple(dict.fromkeys(languages)),
    )


def save_preferences(store: PreferenceStore, preferences: FilterPreferences) -> None:
    store.set_many(
        {
            MIN_STARS_KEY: int(preferences.min_stars),
            LANGUAGE_FILTER_KEY: bool(preferences.language_filter_enabled),
            SELECTED_LANGUAGES_KEY: list(preferences.selected_languages),
        }
    )


def normalize_language(name: str) -> str:
    """Return the canonical spelling of a known language, case-insensitively."""
    wanted = name.strip().lower()
    for language in KNOWN_LANGUAGES:
        if language.lower() == wanted:
            return language
    raise ValueError(
        f"Unknown language {name!r}; choose from {', '.join(KNOWN_LANGUAGES)}"
    )


def select_languages(
    preferences: FilterPreferences, names: Sequence[str]
) -> FilterPreferences:
    selected = list(preferences.selected_languages)
    for name in names:
        language = normalize_language(name)
        if language not in selected:
            selected.append(language)
    return FilterPreferences(
        preferences.min_stars, preferences.language_filter_enabled, tuple(selected)
    )


def deselect_languages(
    preferences: FilterPreferences, names: Sequence[str]
) -> FilterPreferences:
    removed = {normalize_language(name) for name in names}
    selected = tuple(
        language for language in preferences.selected_languages if language not in removed
    )
    return FilterPreferences(
        preferences.min_stars, preferences.language_filter_enabled, selected
    )
