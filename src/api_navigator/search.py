# search.py
# Query search over a JSON document.
# - scalar values match on a case-insensitive substring of their text
# - object keys match when the folded key starts with the folded query
# - every match opens the containers above it
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Set, Tuple

from .paths import ROOT, JSONType, NodeKind, ancestor_paths, child_path, node_kind, scalar_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchIndex:
  """Result of one search: ordered matches, their set, and the paths to auto-open."""
  match_paths: Tuple[str, ...] = ()
  match_set: FrozenSet[str] = field(default_factory=frozenset)
  auto_open_set: FrozenSet[str] = field(default_factory=frozenset)

  @property
  def total(self) -> int:
    return len(self.match_paths)

  def __bool__(self) -> bool:
    return bool(self.match_paths)


EMPTY_INDEX = SearchIndex()


def normalize_query(query: str | None) -> str:
  return (query or "").strip().lower()


def key_matches(key: str, q: str) -> bool:
  # Equality is covered by startswith; keys that merely contain q do not match.
  return bool(q) and str(key).lower().startswith(q)


def value_matches(value: Any, q: str) -> bool:
  return bool(q) and q in scalar_text(value).lower()


class _Collector:
  def __init__(self) -> None:
    self.paths: List[str] = []
    self.seen: Set[str] = set()
    self.auto_open: Set[str] = set()

  def add(self, path: str) -> None:
    if path in self.seen:
      return
    self.seen.add(path)
    self.paths.append(path)
    self.auto_open.update(ancestor_paths(path))


def _walk(value: Any, path: str, q: str, found: _Collector) -> None:
  kind = node_kind(value)
  if kind is NodeKind.OBJECT:
    for k, v in value.items():
      cpath = child_path(path, str(k))
      if key_matches(k, q):
        found.add(cpath)
      _walk(v, cpath, q, found)
  elif kind is NodeKind.ARRAY:
    for i, v in enumerate(value):
      _walk(v, child_path(path, i), q, found)
  elif value_matches(value, q):
    found.add(path)


def build_search_index(data: JSONType, query: str | None) -> SearchIndex:
  q = normalize_query(query)
  if not q:
    return EMPTY_INDEX

  found = _Collector()
  _walk(data, ROOT, q, found)
  index = SearchIndex(tuple(found.paths), frozenset(found.seen), frozenset(found.auto_open))
  logger.debug("search %r: %d matches, %d paths to open", q, index.total, len(index.auto_open_set))
  return index
