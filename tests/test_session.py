from urllib.parse import parse_qs, urlsplit

import pytest

from conftest import FakeTransport, page_of
from techtierra.errors import NetworkFailure
from techtierra.fetcher import FetchState
from techtierra.preferences import (
    LANGUAGE_FILTER_KEY,
    MIN_STARS_KEY,
    SELECTED_LANGUAGES_KEY,
    MemoryPreferenceStore,
)
from techtierra.session import SearchSession, SessionListener


class RecordingListener(SessionListener):
    def __init__(self):
        self.results = []
        self.fetch_errors = []
        self.states = []
        self.filter_errors = []

    def on_results_changed(self, displayed):
        self.results.append([repo.name for repo in displayed])

    def on_fetch_error(self, message):
        self.fetch_errors.append(message)

    def on_fetch_state_changed(self, is_fetching):
        self.states.append(is_fetching)

    def on_filter_error(self, message):
        self.filter_errors.append(message)


def query_of(url):
    return parse_qs(urlsplit(url).query, keep_blank_values=True)


@pytest.fixture
def listener():
    return RecordingListener()


def make_session(listener, *responses, preferences=None):
    transport = FakeTransport(*responses)
    store = MemoryPreferenceStore(preferences)
    session = SearchSession(transport, store, listener=listener)
    return session, transport, store


def test_refresh_fetches_first_page_with_preferences(listener):
    session, transport, _ = make_session(
        listener,
        page_of("a", "b"),
        preferences={
            MIN_STARS_KEY: 50,
            LANGUAGE_FILTER_KEY: True,
            SELECTED_LANGUAGES_KEY: ["Go", "Rust"],
        },
    )
    session.refresh()

    params = query_of(transport.urls[0])
    assert params["q"] == ["stars:>=50 language:Go language:Rust"]
    assert params["page"] == ["1"]
    assert [r.name for r in session.displayed] == ["a", "b"]
    assert listener.states == [True, False]
    assert listener.results[-1] == ["a", "b"]


def test_submit_parses_terms_and_searches(listener):
    session, transport, _ = make_session(listener, page_of("a"))
    session.submit("swift user:techtierra")

    assert session.keyword_terms == ("swift",)
    assert session.user_terms == ("techtierra",)
    assert query_of(transport.urls[0])["q"] == ["swift user:techtierra"]


def test_submit_replaces_previous_results(listener):
    session, _, _ = make_session(listener, page_of("old"), page_of("new"))
    session.submit("first")
    session.submit("second")
    assert [r.name for r in session.results] == ["new"]
    assert session.keyword_terms == ("second",)


def test_empty_submit_without_terms_does_nothing(listener):
    session, transport, _ = make_session(listener)
    assert session.submit("") is None
    assert transport.urls == []


def test_empty_submit_after_search_reverts_to_preferences(listener):
    session, transport, _ = make_session(listener, page_of("a"), page_of("b"))
    session.submit("swift")
    session.submit("   ")
    assert session.keyword_terms == ()
    assert query_of(transport.urls[1])["q"] == [""]
    assert [r.name for r in session.results] == ["b"]


def test_next_page_advances_eagerly(listener):
    names = [f"repo{i}" for i in range(20)]
    session, transport, _ = make_session(listener, page_of(*names), {"items": []})
    session.refresh()
    session.request_next_page()

    assert query_of(transport.urls[1])["page"] == ["2"]
    assert session.state is FetchState.EXHAUSTED
    assert session.request_next_page() is None
    assert len(session.results) == 20
    assert len(transport.urls) == 2


def test_refresh_after_exhaustion_starts_over(listener):
    session, transport, _ = make_session(
        listener, page_of("a"), {"items": []}, page_of("c")
    )
    session.refresh()
    session.request_next_page()
    session.refresh()
    assert session.page == 1
    assert session.state is FetchState.IDLE
    assert [r.name for r in session.results] == ["c"]


def test_fetch_error_is_reported_and_results_kept(listener):
    session, _, _ = make_session(listener, page_of("a"), NetworkFailure("offline"))
    session.refresh()
    session.request_next_page()

    assert listener.fetch_errors == ["offline"]
    assert [r.name for r in session.results] == ["a"]
    assert session.state is FetchState.IDLE
    assert session.page == 1


def test_malformed_query_is_reported_without_fetching(listener):
    transport = FakeTransport()
    session = SearchSession(
        transport, MemoryPreferenceStore(), search_url="nowhere", listener=listener
    )
    assert session.refresh() is None
    assert len(listener.fetch_errors) == 1
    assert transport.urls == []
    assert session.state is FetchState.IDLE


def test_preferences_are_read_for_every_fetch(listener):
    session, transport, store = make_session(listener, page_of("a"), page_of("b"))
    session.refresh()
    store.set_int(MIN_STARS_KEY, 10)
    session.refresh()
    assert query_of(transport.urls[0])["q"] == [""]
    assert query_of(transport.urls[1])["q"] == ["stars:>=10"]


def test_text_changes_filter_locally(listener):
    session, transport, _ = make_session(
        listener, page_of("alpha-cli", "beta", "gamma-cli")
    )
    session.refresh()
    displayed = session.text_changed("cli")

    assert [r.name for r in displayed] == ["alpha-cli", "gamma-cli"]
    assert listener.results[-1] == ["alpha-cli", "gamma-cli"]
    assert len(transport.urls) == 1


def test_invalid_filter_keeps_displayed_list(listener):
    session, _, _ = make_session(listener, page_of("alpha", "beta"))
    session.refresh()
    session.text_changed("alp")
    session.text_changed("alp(")

    assert [r.name for r in session.displayed] == ["alpha"]
    assert len(listener.filter_errors) == 1


def test_cancel_without_terms_resets_display(listener):
    session, transport, _ = make_session(listener, page_of("alpha", "beta"))
    session.refresh()
    session.text_changed("alpha")
    session.cancel()

    assert [r.name for r in session.displayed] == ["alpha", "beta"]
    assert len(transport.urls) == 1


def test_cancel_with_terms_reverts_to_preference_search(listener):
    session, transport, _ = make_session(listener, page_of("a"), page_of("b"))
    session.submit("swift")
    session.cancel()

    assert session.keyword_terms == ()
    assert len(transport.urls) == 2
    assert [r.name for r in session.displayed] == ["b"]


def test_submit_starts_unfiltered_after_typing(listener):
    session, _, _ = make_session(listener, page_of("swift-nio", "swift-log"))
    session.text_changed("swift user:apple")
    session.submit("swift user:apple")

    assert session.displayed == session.results
    assert [r.name for r in session.displayed] == ["swift-nio", "swift-log"]
    assert session.store.filter_text == ""


def test_reported_results_survive_a_new_search():
    class HoldingListener(SessionListener):
        def __init__(self):
            self.reported = []

        def on_results_changed(self, displayed):
            self.reported.append(displayed)

    listener = HoldingListener()
    session, _, _ = make_session(listener, page_of("a", "b"), page_of("c"))
    session.refresh()
    held = session.displayed
    kept = session.results

    session.submit("other")

    assert [r.name for r in held] == ["a", "b"]
    assert [r.name for r in kept] == ["a", "b"]
    assert [r.name for r in listener.reported[1]] == ["a", "b"]
