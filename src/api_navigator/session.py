# session.py
# One logical owner for everything the response tree needs:
# the document, the live query, its search index, user overrides and the match cursor.
from __future__ import annotations

import logging
from typing import Any, List, Optional

from .expansion import NO_SEARCH, ExpansionState, RevealContext, TreeCommand
from .navigator import MatchNavigator, MatchPosition
from .paths import list_container_paths
from .search import EMPTY_INDEX, SearchIndex, build_search_index, normalize_query

logger = logging.getLogger(__name__)


class TreeSession:
  def __init__(self, query: str = "") -> None:
    self.document: Any = None
    self.has_document = False
    self.query = query
    self.index: SearchIndex = EMPTY_INDEX
    self.expansion = ExpansionState()
    self.navigator = MatchNavigator()
    self._containers: List[str] = []

  # --- document ---
  def load(self, document: Any) -> None:
    """Show a new document. Paths from the previous one mean nothing here, so overrides reset."""
    self.document = document
    self.has_document = True
    self.expansion = ExpansionState()
    self._containers = list_container_paths(document)
    logger.debug("loaded document with %d containers", len(self._containers))
    self._reindex()
    self.navigator.update(self.index.match_paths)

  def clear(self) -> None:
    self.document = None
    self.has_document = False
    self.expansion = ExpansionState()
    self._containers = []
    self.index = EMPTY_INDEX
    self.navigator.reset(())

  # --- query ---
  @property
  def search_active(self) -> bool:
    return bool(normalize_query(self.query))

  def set_query(self, query: str) -> None:
    if query == self.query:
      return
    previous = normalize_query(self.query)
    self.query = query
    self.expansion = self.expansion.on_query_change(previous, normalize_query(query))
    self._reindex()
    self.navigator.reset(self.index.match_paths)

  def _reindex(self) -> None:
    if self.has_document:
      self.index = build_search_index(self.document, self.query)
    else:
      self.index = EMPTY_INDEX

  # --- matches ---
  def next_match(self) -> Optional[str]:
    return self.navigator.next()

  def prev_match(self) -> Optional[str]:
    return self.navigator.prev()

  @property
  def active_path(self) -> Optional[str]:
    if not self.search_active:
      return None
    return self.navigator.active_path

  @property
  def position(self) -> MatchPosition:
    return self.navigator.position

  # --- expansion ---
  @property
  def reveal(self) -> RevealContext:
    if not self.search_active:
      return NO_SEARCH
    return RevealContext(True, self.index.auto_open_set, self.active_path)

  @property
  def container_paths(self) -> List[str]:
    return list(self._containers)

  def is_open(self, path: str) -> bool:
    return self.expansion.is_open(path, self.reveal)

  def is_match(self, path: str) -> bool:
    return path in self.index.match_set

  def toggle(self, path: str) -> bool:
    """Flip path and return its new state."""
    self.expansion = self.expansion.toggled(path, self.reveal)
    return self.is_open(path)

  def apply(self, command: TreeCommand) -> None:
    self.expansion = self.expansion.apply(command, self._containers)

  def expand_all(self) -> None:
    self.apply(TreeCommand.EXPAND_ALL)

  def collapse_all(self) -> None:
    self.apply(TreeCommand.COLLAPSE_ALL)
