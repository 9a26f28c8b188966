# request.py
# Turns what the user typed into something that can be sent and recorded.
# Validation happens here, before any network call or history change.
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from .exceptions import RequestValidationError
from .history import HeaderRow, HistoryEntry, RowLike, body_allowed, canonical_body, normalize_header_rows

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
EXAMPLE_URL = "https://jsonplaceholder.typicode.com/users"


@dataclass
class RequestDraft:
  """The request form as typed."""
  url: str = ""
  method: str = "GET"
  headers_rows: List[RowLike] = field(default_factory=list)
  body: str = ""

  @classmethod
  def from_history(cls, entry: HistoryEntry) -> "RequestDraft":
    return cls(entry.url, entry.method, list(entry.form_rows()), entry.display_body)


@dataclass(frozen=True)
class OutgoingRequest:
  url: str
  method: str
  headers_rows: Tuple[HeaderRow, ...]
  headers: Dict[str, str]
  canonical_body: str
  content: Optional[str]

  def history_entry(self, timestamp: float | None = None) -> HistoryEntry:
    return HistoryEntry.create(self.url, self.method, self.headers_rows, self.canonical_body, timestamp)


def is_valid_http_url(url: str) -> bool:
  try:
    parts = urlsplit(url)
  except ValueError:
    return False
  return parts.scheme in ("http", "https") and bool(parts.netloc)


def parse_header_lines(text: str) -> List[HeaderRow]:
  """'Name: value' per line; lines without a colon become a header with an empty value."""
  rows: List[HeaderRow] = []
  for line in text.splitlines():
    if not line.strip():
      continue
    key, _, value = line.partition(":")
    rows.append(HeaderRow(key.strip(), value.strip()))
  return rows


def format_header_lines(rows: Sequence[RowLike]) -> str:
  return "\n".join(f"{r.key}: {r.value}" for r in normalize_header_rows(rows))


def prepare_request(draft: RequestDraft) -> OutgoingRequest:
  url = (draft.url or "").strip()
  method = (draft.method or "GET").upper()
  if not url or not is_valid_http_url(url):
    raise RequestValidationError(f"Invalid URL. Example: {EXAMPLE_URL}")
  if method not in METHODS:
    raise RequestValidationError(f"Unsupported method {method!r}; expected one of {', '.join(METHODS)}")

  try:
    canonical = canonical_body(method, draft.body)
  except json.JSONDecodeError as e:
    raise RequestValidationError(
      f"Invalid JSON body (check quotes, commas, braces): line {e.lineno} column {e.colno}"
    ) from e

  rows = tuple(normalize_header_rows(draft.headers_rows))
  headers = {r.key: r.value for r in rows}
  content: Optional[str] = None
  if body_allowed(method):
    content = canonical
    if not any(k.lower() == "content-type" for k in headers):
      headers["Content-Type"] = "application/json"
  return OutgoingRequest(url, method, rows, headers, canonical, content)
