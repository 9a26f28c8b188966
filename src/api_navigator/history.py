# history.py
# Log of successful requests, newest first, one entry per distinct request.
# Two requests are the same when url, method, normalized headers and
# canonical JSON body agree; re-sending one moves it back to the front.
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from .store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "api-playground-history-v2"
HISTORY_LIMIT = 10
BODY_METHODS = ("POST", "PUT", "PATCH")


class HeaderRow(NamedTuple):
  key: str
  value: str


RowLike = Union[HeaderRow, Tuple[str, str], Dict[str, Any]]


def _as_row(row: RowLike) -> HeaderRow:
  if isinstance(row, dict):
    return HeaderRow(str(row.get("key") or ""), str(row.get("value") or ""))
  if isinstance(row, (tuple, list)) and len(row) == 2:
    key, value = row
    return HeaderRow(str(key or ""), str(value or ""))
  raise ValueError(f"not a header row: {row!r}")


def normalize_header_rows(rows: Iterable[RowLike] | None) -> List[HeaderRow]:
  """Trim, drop empty keys, collapse case-insensitive duplicates onto the last value.

  A collapsed header keeps the position of its first occurrence.
  """
  by_key: Dict[str, HeaderRow] = {}
  for raw in rows or ():
    row = _as_row(raw)
    key, value = row.key.strip(), row.value.strip()
    if not key:
      continue
    by_key[key.lower()] = HeaderRow(key, value)
  return list(by_key.values())


def headers_signature(rows: Iterable[RowLike] | None) -> List[Tuple[str, str]]:
  norm = [(r.key.lower(), r.value) for r in normalize_header_rows(rows)]
  norm.sort(key=lambda kv: kv[0])
  return norm


def body_allowed(method: str) -> bool:
  return method.upper() in BODY_METHODS


def canonical_body(method: str, body: str | None) -> str:
  """Whitespace-free JSON for body methods, "" otherwise.

  Raises ValueError (json.JSONDecodeError) when a body method carries text that
  isn't JSON; callers validate before sending.
  """
  if not body_allowed(method):
    return ""
  trimmed = (body or "").strip()
  if not trimmed:
    return ""
  return json.dumps(json.loads(trimmed), separators=(",", ":"), ensure_ascii=False)


def display_body(canonical: str) -> str:
  if not canonical:
    return ""
  return json.dumps(json.loads(canonical), indent=2, ensure_ascii=False)


def request_signature(url: str, method: str, headers_rows: Iterable[RowLike] | None, body: str) -> str:
  return json.dumps(
    {
      "url": url.strip(),
      "method": method.upper(),
      "headers": headers_signature(headers_rows),
      "body": body,
    },
    separators=(",", ":"),
    ensure_ascii=False,
  )


@dataclass(frozen=True)
class HistoryEntry:
  signature: str
  method: str
  url: str
  headers_rows: Tuple[HeaderRow, ...]
  canonical_body: str
  display_body: str
  timestamp: float = field(compare=False)

  @classmethod
  def create(
    cls,
    url: str,
    method: str,
    headers_rows: Iterable[RowLike] | None = None,
    canonical: str = "",
    timestamp: float | None = None,
  ) -> "HistoryEntry":
    method = method.upper()
    url = url.strip()
    rows = tuple(normalize_header_rows(headers_rows))
    return cls(
      signature=request_signature(url, method, rows, canonical),
      method=method,
      url=url,
      headers_rows=rows,
      canonical_body=canonical,
      display_body=display_body(canonical),
      timestamp=time.time() if timestamp is None else timestamp,
    )

  def summary(self, width: int = 120) -> str:
    line = f"{self.method} {self.url}"
    body = self.display_body.strip()
    if body:
      flat = " ".join(body.split())
      line += f"  Body: {flat[:width]}" + ("…" if len(flat) > width else "")
    return line

  def form_rows(self) -> List[HeaderRow]:
    """Header rows for reloading the request form; never empty."""
    return list(self.headers_rows) or [HeaderRow("", "")]

  def to_dict(self) -> Dict[str, Any]:
    return {
      "method": self.method,
      "url": self.url,
      "headersRows": [{"key": r.key, "value": r.value} for r in self.form_rows()],
      "canonicalBody": self.canonical_body,
      "body": self.display_body,
      "ts": self.timestamp,
    }

  @classmethod
  def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
    """Rebuild from a stored blob. The signature is always recomputed."""
    ts = data.get("ts")
    return cls.create(
      url=str(data.get("url") or ""),
      method=str(data.get("method") or "GET"),
      headers_rows=data.get("headersRows") or (),
      canonical=str(data.get("canonicalBody") or ""),
      timestamp=float(ts) if isinstance(ts, (int, float)) else 0.0,
    )


class HistoryLog:
  """Capped, ordered, signature-unique history. Mutate only through its methods."""

  def __init__(self, entries: Iterable[HistoryEntry] = (), limit: int = HISTORY_LIMIT) -> None:
    self.limit = limit
    self._entries: List[HistoryEntry] = []
    seen = set()
    for e in entries:
      if e.signature in seen:
        continue
      seen.add(e.signature)
      self._entries.append(e)
    del self._entries[limit:]

  @property
  def entries(self) -> Tuple[HistoryEntry, ...]:
    return tuple(self._entries)

  def __iter__(self) -> Iterator[HistoryEntry]:
    return iter(self.entries)

  def __len__(self) -> int:
    return len(self._entries)

  def get(self, signature: str) -> Optional[HistoryEntry]:
    for e in self._entries:
      if e.signature == signature:
        return e
    return None

  def record(self, entry: HistoryEntry, timestamp: float | None = None) -> HistoryEntry:
    """Insert or promote entry to the front with a fresh timestamp."""
    fresh = replace(entry, timestamp=time.time() if timestamp is None else timestamp)
    before = len(self._entries)
    self._entries = [e for e in self._entries if e.signature != entry.signature]
    if len(self._entries) < before:
      logger.debug("history: promoting %s %s", entry.method, entry.url)
    self._entries.insert(0, fresh)
    del self._entries[self.limit:]
    return fresh

  def remove(self, signature: str) -> bool:
    before = len(self._entries)
    self._entries = [e for e in self._entries if e.signature != signature]
    return len(self._entries) < before

  def clear(self) -> None:
    self._entries = []

  def to_blob(self) -> str:
    return json.dumps([e.to_dict() for e in self._entries], ensure_ascii=False)

  @classmethod
  def from_blob(cls, blob: str | None, limit: int = HISTORY_LIMIT) -> "HistoryLog":
    if not blob:
      return cls(limit=limit)
    try:
      items = json.loads(blob)
      if not isinstance(items, list):
        raise ValueError("history blob is not a list")
      entries = [HistoryEntry.from_dict(item) for item in items if isinstance(item, dict)]
    except (ValueError, TypeError) as e:
      logger.warning("discarding unreadable history: %s", e)
      return cls(limit=limit)
    return cls(entries, limit=limit)


def load_history(store: KeyValueStore, limit: int = HISTORY_LIMIT) -> HistoryLog:
  return HistoryLog.from_blob(store.get(HISTORY_KEY), limit=limit)


def save_history(store: KeyValueStore, log: HistoryLog) -> None:
  store.set(HISTORY_KEY, log.to_blob())
