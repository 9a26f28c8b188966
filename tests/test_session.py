from api_navigator.expansion import TreeCommand
from api_navigator.navigator import MatchPosition
from api_navigator.render import build_rows, preview_of, row_label
from api_navigator.session import TreeSession


def visible(session):
  return [row.path for row in build_rows(session)]


def loaded(doc, query=""):
  session = TreeSession()
  session.load(doc)
  session.set_query(query)
  return session


def test_no_document_renders_nothing():
  session = TreeSession()
  session.set_query("a")
  assert build_rows(session) == []
  assert session.position == MatchPosition(0, 0)


def test_default_view_shows_two_levels(sample):
  assert visible(loaded(sample)) == [
    "root",
    "root.user",
    "root.user.name",
    "root.user.age",
    "root.tags",
    "root.tags.[0]",
    "root.tags.[1]",
  ]


def test_search_view_reveals_only_matches(sample):
  session = loaded(sample, "an")
  rows = build_rows(session)
  assert [r.path for r in rows] == ["root", "root.user", "root.user.name", "root.user.age", "root.tags"]
  by_path = {r.path: r for r in rows}
  assert by_path["root.user.name"].matched
  assert by_path["root.user.name"].active
  assert not by_path["root.user"].matched
  assert by_path["root.tags"].open is False
  assert by_path["root.user.age"].open is None
  assert str(session.position) == "1/1"


def test_active_match_moves_with_navigator(nested):
  session = loaded(nested, "a")
  first = session.active_path
  second = session.next_match()
  assert second != first
  assert session.prev_match() == first
  session.set_query("an")
  assert session.position.active_index == 0


def test_collapse_all_then_search_reopens_matches(sample):
  session = loaded(sample)
  session.apply(TreeCommand.COLLAPSE_ALL)
  assert visible(session) == ["root", "root.user", "root.tags"]
  session.set_query("an")
  assert "root.user.name" in visible(session)


def test_user_toggle_wins_over_search(sample):
  session = loaded(sample, "an")
  assert session.toggle("root.user") is False
  assert "root.user.name" not in visible(session)
  assert session.toggle("root.user") is True
  assert "root.user.name" in visible(session)


def test_expand_all_shows_every_node(nested):
  session = loaded(nested)
  session.expand_all()
  assert len(build_rows(session)) == 15


def test_new_document_resets_overrides_and_clamps_cursor(sample):
  session = loaded(sample, "a")
  session.collapse_all()
  session.navigator.active_index = len(session.navigator) - 1
  session.load({"a": 1})
  assert session.expansion.forced_open == frozenset()
  assert session.position == MatchPosition(1, 0)


def test_previews():
  assert preview_of([1, 2]) == "[ 2 items ]"
  assert preview_of([1]) == "[ 1 item ]"
  assert preview_of({}) == "{ 0 properties }"
  assert preview_of({"a": 1}) == "{ 1 property }"
  assert preview_of("Ana") == '"Ana"'
  assert preview_of(None) == "null"


def test_row_label_text(sample):
  rows = build_rows(loaded(sample, "an"))
  assert row_label(rows[2]).plain == 'name: "Ana"'
  assert row_label(rows[1]).plain == "user: { 2 properties }"


def test_refining_query_reopens_manually_collapsed_branch(sample):
  session = loaded(sample, "a")
  assert session.toggle("root.user") is False
  assert "root.user.name" not in visible(session)
  session.set_query("an")
  assert "root.user" not in session.expansion.forced_closed
  assert "root.user.name" in visible(session)


def test_key_matched_container_is_shown_closed(sample):
  session = loaded(sample, "tag")
  by_path = {r.path: r for r in build_rows(session)}
  assert by_path["root.tags"].matched
  assert by_path["root.tags"].active
  assert by_path["root.tags"].open is False
  assert "root.tags.[0]" not in by_path
  assert session.toggle("root.tags") is True
  assert "root.tags.[0]" in visible(session)
