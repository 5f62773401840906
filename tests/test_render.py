import io
import json

from techtierra.render import format_count, render_preferences, render_results
from techtierra.types import FilterPreferences, Repository


def test_table_omits_absent_fields():
    stream = io.StringIO()
    render_results([Repository(name="bare", owner_login="me")], stream=stream)
    output = stream.getvalue()
    assert "me/bare" in output
    assert "None" not in output
    assert "stars" not in output


def test_table_formats_counts():
    stream = io.StringIO()
    repo = Repository(
        name="big", owner_login="org", owner_type="Organization", stars=12345, language="Go"
    )
    render_results([repo], stream=stream)
    output = stream.getvalue()
    assert "org/big (Organization)" in output
    assert "stars 12,345 | Go" in output


def test_empty_table_message():
    stream = io.StringIO()
    render_results([], stream=stream)
    assert stream.getvalue() == "No repositories found.\n"


def test_json_output():
    stream = io.StringIO()
    render_results([Repository(name="x", owner_login="y")], mode="json", stream=stream)
    (entry,) = json.loads(stream.getvalue())
    assert entry["name"] == "x"
    assert entry["owner"] == "y"
    assert entry["stars"] is None


def test_format_count():
    assert format_count(None) == ""
    assert format_count(0) == "0"
    assert format_count(1000000) == "1,000,000"


def test_render_preferences():
    stream = io.StringIO()
    render_preferences(FilterPreferences(5, True, ("Go",)), stream=stream)
    assert stream.getvalue() == (
        "Minimum stars: 5\nLanguage filter: on\nSelected languages: Go\n"
    )
