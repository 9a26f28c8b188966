from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class MatchPosition:
  total: int
  active_index: int

  def __str__(self) -> str:
    if not self.total:
      return "0/0"
    return f"{self.active_index + 1}/{self.total}"


class MatchNavigator:
  """Cyclic cursor over the ordered match paths of the current search."""

  def __init__(self, matches: Sequence[str] = ()) -> None:
    self.matches: Tuple[str, ...] = tuple(matches)
    self.active_index: int = 0

  def reset(self, matches: Sequence[str]) -> None:
    """New query: new list, cursor back to the first match."""
    self.matches = tuple(matches)
    self.active_index = 0

  def update(self, matches: Sequence[str]) -> None:
    """Same query, refreshed list: keep the cursor, clamped into range."""
    self.matches = tuple(matches)
    if not self.matches:
      self.active_index = 0
    elif self.active_index > len(self.matches) - 1:
      self.active_index = len(self.matches) - 1

  def next(self) -> Optional[str]:
    if not self.matches:
      return None
    self.active_index = (self.active_index + 1) % len(self.matches)
    return self.active_path

  def prev(self) -> Optional[str]:
    if not self.matches:
      return None
    self.active_index = (self.active_index - 1 + len(self.matches)) % len(self.matches)
    return self.active_path

  @property
  def active_path(self) -> Optional[str]:
    if not self.matches:
      return None
    return self.matches[self.active_index]

  @property
  def position(self) -> MatchPosition:
    return MatchPosition(len(self.matches), self.active_index)

  def __len__(self) -> int:
    return len(self.matches)
