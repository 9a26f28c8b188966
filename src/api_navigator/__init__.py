"""Explore HTTP JSON responses as a searchable, navigable tree."""
from .expansion import ExpansionState, RevealContext, TreeCommand
from .history import HistoryEntry, HistoryLog, request_signature
from .navigator import MatchNavigator, MatchPosition
from .paths import list_container_paths, path_of
from .search import SearchIndex, build_search_index
from .session import TreeSession

__all__ = [
  "ExpansionState",
  "HistoryEntry",
  "HistoryLog",
  "MatchNavigator",
  "MatchPosition",
  "RevealContext",
  "SearchIndex",
  "TreeCommand",
  "TreeSession",
  "build_search_index",
  "list_container_paths",
  "path_of",
  "request_signature",
]

__version__ = "0.1.0"
