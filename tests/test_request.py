import pytest

from api_navigator.exceptions import RequestValidationError
from api_navigator.history import HeaderRow
from api_navigator.request import RequestDraft, format_header_lines, is_valid_http_url, parse_header_lines, prepare_request


@pytest.mark.parametrize("url", ["", "   ", "example.com", "ftp://example.com/x", "http://"])
def test_invalid_urls_rejected(url):
  with pytest.raises(RequestValidationError):
    prepare_request(RequestDraft(url=url))


def test_valid_urls():
  assert is_valid_http_url("https://jsonplaceholder.typicode.com/users")
  assert is_valid_http_url("http://localhost:8000/a?b=c")


def test_get_request_has_no_body():
  req = prepare_request(RequestDraft(url=" https://x.test/a ", method="get", body='{"ignored": true}'))
  assert req.url == "https://x.test/a"
  assert req.method == "GET"
  assert req.content is None
  assert req.canonical_body == ""
  assert req.headers == {}


def test_body_method_gets_canonical_json_and_content_type():
  req = prepare_request(RequestDraft(url="https://x.test", method="POST", body='{ "a": [1, 2] }'))
  assert req.content == '{"a":[1,2]}'
  assert req.headers == {"Content-Type": "application/json"}


def test_existing_content_type_is_kept():
  draft = RequestDraft(url="https://x.test", method="PUT", headers_rows=[("content-type", "text/json")], body="{}")
  assert prepare_request(draft).headers == {"content-type": "text/json"}


def test_empty_body_is_sent_empty():
  req = prepare_request(RequestDraft(url="https://x.test", method="PATCH", body="  "))
  assert req.content == ""
  assert req.canonical_body == ""


def test_invalid_json_body_is_a_validation_error():
  with pytest.raises(RequestValidationError, match="Invalid JSON body"):
    prepare_request(RequestDraft(url="https://x.test", method="POST", body="{'single': 'quotes'}"))


def test_header_lines_round_trip_through_form():
  rows = parse_header_lines("Accept: application/json\n\nX-Empty\nAuthorization: Bearer a:b")
  assert rows == [
    HeaderRow("Accept", "application/json"),
    HeaderRow("X-Empty", ""),
    HeaderRow("Authorization", "Bearer a:b"),
  ]
  assert format_header_lines(rows) == "Accept: application/json\nX-Empty: \nAuthorization: Bearer a:b"


def test_history_entry_from_request():
  req = prepare_request(RequestDraft(url="https://x.test", method="post", headers_rows=[("A", "1")], body='{"x": 1}'))
  e = req.history_entry(timestamp=1.0)
  assert e.method == "POST"
  assert e.canonical_body == '{"x":1}'
  assert RequestDraft.from_history(e).body == '{\n  "x": 1\n}'
