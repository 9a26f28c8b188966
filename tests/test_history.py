import json

import pytest

from api_navigator.history import (
  HISTORY_KEY,
  HeaderRow,
  HistoryEntry,
  HistoryLog,
  canonical_body,
  headers_signature,
  load_history,
  normalize_header_rows,
  request_signature,
  save_history,
)
from api_navigator.store import MemoryStore


def test_header_rows_trimmed_deduped_last_wins():
  rows = [
    {"key": " Accept ", "value": " text/plain "},
    {"key": "", "value": "dropped"},
    {"key": "X-Token", "value": "a"},
    {"key": "accept", "value": "application/json"},
  ]
  assert normalize_header_rows(rows) == [
    HeaderRow("accept", "application/json"),
    HeaderRow("X-Token", "a"),
  ]


def test_headers_signature_sorted_by_folded_key():
  rows = [("X-B", "2"), ("x-a", "1"), ("Accept", "*/*")]
  assert headers_signature(rows) == [("accept", "*/*"), ("x-a", "1"), ("x-b", "2")]


def test_canonical_body_only_for_body_methods():
  assert canonical_body("POST", '{ "a" : 1,\n "b": [1, 2] }') == '{"a":1,"b":[1,2]}'
  assert canonical_body("patch", "  ") == ""
  assert canonical_body("GET", '{"a": 1}') == ""
  assert canonical_body("DELETE", "not json") == ""
  with pytest.raises(ValueError):
    canonical_body("PUT", "{nope")


def test_signature_ignores_formatting_differences():
  a = request_signature(" https://x.test/api ", "post", [("Accept", "json"), ("X-Id", "1")], '{"a":1}')
  b = request_signature("https://x.test/api", "POST", [("x-id", " 1 "), ("ACCEPT", "json")], '{"a":1}')
  assert a == b


def test_signature_keeps_url_verbatim():
  assert request_signature("https://x.test/api", "GET", [], "") != request_signature("https://x.test/api/", "GET", [], "")
  assert request_signature("https://x.test/API", "GET", [], "") != request_signature("https://x.test/api", "GET", [], "")


def test_signature_is_structural_json():
  sig = json.loads(request_signature("https://x.test", "get", [("B", "2"), ("a", "1")], ""))
  assert sig == {"url": "https://x.test", "method": "GET", "headers": [["a", "1"], ["b", "2"]], "body": ""}


def entry(n, ts=0.0):
  return HistoryEntry.create(f"https://x.test/{n}", "GET", timestamp=ts)


def test_resubmitting_promotes_single_entry():
  log = HistoryLog()
  log.record(entry(1), timestamp=1.0)
  log.record(entry(2), timestamp=2.0)
  again = HistoryEntry.create("https://x.test/1", "get", [], "", timestamp=0.0)
  log.record(again, timestamp=3.0)
  assert [e.url for e in log] == ["https://x.test/1", "https://x.test/2"]
  assert log.entries[0].timestamp == 3.0


def test_same_request_twice_yields_one_entry():
  log = HistoryLog()
  log.record(entry(1), timestamp=1.0)
  log.record(entry(1), timestamp=5.0)
  assert len(log) == 1
  assert log.entries[0].timestamp == 5.0


def test_log_capped_at_ten_dropping_oldest():
  log = HistoryLog()
  for n in range(10):
    log.record(entry(n), timestamp=float(n))
  assert len(log) == 10
  log.record(entry(10), timestamp=10.0)
  assert len(log) == 10
  assert log.entries[0].url == "https://x.test/10"
  assert "https://x.test/0" not in [e.url for e in log]


def test_remove_and_clear():
  log = HistoryLog([entry(1), entry(2)])
  assert log.remove(entry(1).signature)
  assert not log.remove(entry(1).signature)
  assert [e.url for e in log] == ["https://x.test/2"]
  log.clear()
  assert len(log) == 0


def test_entry_display_and_summary():
  e = HistoryEntry.create("https://x.test", "post", [], '{"a":1}', timestamp=0.0)
  assert e.display_body == '{\n  "a": 1\n}'
  assert e.summary() == 'POST https://x.test  Body: { "a": 1 }'
  long = HistoryEntry.create("https://x.test", "POST", [], json.dumps({"k": "v" * 200}), timestamp=0.0)
  assert long.summary().endswith("…")
  assert e.form_rows() == [HeaderRow("", "")]


def test_persisted_history_survives_reload():
  store = MemoryStore()
  log = HistoryLog()
  log.record(HistoryEntry.create("https://x.test", "POST", [("Accept", "json")], '{"a":1}'), timestamp=7.0)
  log.record(entry(2), timestamp=8.0)
  save_history(store, log)
  loaded = load_history(store)
  assert [e.signature for e in loaded] == [e.signature for e in log]
  assert loaded.entries[1].headers_rows == (HeaderRow("Accept", "json"),)
  assert loaded.entries[1].timestamp == 7.0


def test_unreadable_history_loads_empty():
  assert len(load_history(MemoryStore({HISTORY_KEY: "{broken"}))) == 0
  assert len(load_history(MemoryStore({HISTORY_KEY: '{"not": "a list"}'}))) == 0
  assert len(load_history(MemoryStore())) == 0
  assert len(load_history(MemoryStore({HISTORY_KEY: '[{"url": "https://x.test", "headersRows": [null]}]'}))) == 0
  assert len(load_history(MemoryStore({HISTORY_KEY: '[{"url": "https://x.test", "headersRows": [7, ["a"]]}]'}))) == 0
  assert len(load_history(MemoryStore({HISTORY_KEY: '[{"url": "https://x.test", "headersRows": 3}]'}))) == 0
