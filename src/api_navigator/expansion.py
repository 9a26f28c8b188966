# expansion.py
# Open/closed state of tree containers.
# - explicit user toggles (forced_open / forced_closed) win over computed defaults
# - with a query, only the paths leading to matches are open
# - without one, the first two levels are open
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Iterable

from .paths import ROOT, ancestor_paths, path_depth

logger = logging.getLogger(__name__)

DEFAULT_OPEN_DEPTH = 2


class TreeCommand(str, Enum):
  EXPAND_ALL = "expand_all"
  COLLAPSE_ALL = "collapse_all"


@dataclass(frozen=True)
class RevealContext:
  """What the current search wants open. An inactive context means no query."""
  active: bool = False
  auto_open: FrozenSet[str] = field(default_factory=frozenset)
  active_match: str | None = None

  def reveals(self, path: str) -> bool:
    if path in self.auto_open:
      return True
    if self.active_match is None:
      return False
    return path in ancestor_paths(self.active_match)


NO_SEARCH = RevealContext()


@dataclass(frozen=True)
class ExpansionState:
  """Immutable snapshot of user overrides. Every transition returns a new snapshot."""
  forced_open: FrozenSet[str] = field(default_factory=frozenset)
  forced_closed: FrozenSet[str] = field(default_factory=frozenset)

  def __post_init__(self) -> None:
    both = self.forced_open & self.forced_closed
    if both:
      raise ValueError(f"paths both forced open and closed: {sorted(both)}")

  def is_open(self, path: str, reveal: RevealContext = NO_SEARCH) -> bool:
    if path in self.forced_open:
      return True
    if path in self.forced_closed:
      return False
    if reveal.active:
      return reveal.reveals(path)
    return path_depth(path) < DEFAULT_OPEN_DEPTH

  def toggled(self, path: str, reveal: RevealContext = NO_SEARCH) -> "ExpansionState":
    if self.is_open(path, reveal):
      return ExpansionState(self.forced_open - {path}, self.forced_closed | {path})
    return ExpansionState(self.forced_open | {path}, self.forced_closed - {path})

  def on_query_change(self, previous: str, current: str) -> "ExpansionState":
    """Drop manual collapses whenever a non-empty query is entered, so matches can show."""
    if current and current != previous and self.forced_closed:
      return replace(self, forced_closed=frozenset())
    return self

  def apply(self, command: TreeCommand, container_paths: Iterable[str]) -> "ExpansionState":
    containers = frozenset(container_paths)
    logger.debug("tree command %s over %d containers", command.value, len(containers))
    if command is TreeCommand.EXPAND_ALL:
      return ExpansionState(containers, frozenset())
    if command is TreeCommand.COLLAPSE_ALL:
      # root always stays open
      return ExpansionState(frozenset({ROOT}), containers - {ROOT})
    raise ValueError(f"unknown tree command: {command!r}")

