# playground.py
# Request/response flow around the core: validate, send, commit the latest
# outcome, keep history and theme in the injected store.
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from .client import CANCELLED_MESSAGE, FetchOutcome, FetchSuccess, HttpFailure, RequestTracker, fetch
from .config import Settings
from .exceptions import RequestValidationError, StoreError
from .history import HistoryEntry, load_history, save_history
from .request import OutgoingRequest, RequestDraft, prepare_request
from .session import TreeSession
from .store import KeyValueStore, load_theme, other_theme, save_theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseView:
  """What the status area shows for the latest request."""
  loading: bool = False
  status: Optional[int] = None
  elapsed_ms: Optional[int] = None
  error: str = ""
  text: str = ""


class Playground:
  def __init__(self, store: KeyValueStore, settings: Settings | None = None) -> None:
    self.settings = settings or Settings()
    self.store = store
    self.history = load_history(store, self.settings.history_limit)
    self.theme = load_theme(store, self.settings.default_theme)
    self.tree = TreeSession()
    self.tracker = RequestTracker()
    self.response = ResponseView()

  # --- requests ---
  def submit(self, draft: RequestDraft) -> Tuple[int, OutgoingRequest]:
    """Validate draft and open a new request ticket. Invalid drafts never reach the network."""
    try:
      request = prepare_request(draft)
    except RequestValidationError as e:
      # A request already in flight keeps running.
      self.response = ResponseView(loading=self.tracker.loading, error=str(e))
      raise
    ticket = self.tracker.begin()
    self.response = ResponseView(loading=True)
    self.tree.clear()
    return ticket, request

  def complete(self, ticket: int, request: OutgoingRequest, outcome: FetchOutcome) -> bool:
    """Commit outcome if ticket is still the latest request. Only successes reach history."""
    if not self.tracker.finish(ticket):
      return False
    if isinstance(outcome, FetchSuccess):
      text = json.dumps(outcome.document, indent=2, ensure_ascii=False) if outcome.is_json else outcome.text
      self.response = ResponseView(status=outcome.status, elapsed_ms=outcome.elapsed_ms, text=text)
      self.history.record(request.history_entry())
      self._save_history()
      if outcome.is_json:
        self.tree.load(outcome.document)
    elif isinstance(outcome, HttpFailure):
      self.response = ResponseView(status=outcome.status, elapsed_ms=outcome.elapsed_ms, error=outcome.message)
    else:
      self.response = ResponseView(error=outcome.message)
    return True

  def cancelled(self, ticket: int) -> bool:
    if not self.tracker.finish(ticket):
      return False
    self.response = ResponseView(error=CANCELLED_MESSAGE)
    return True

  async def send(self, client: httpx.AsyncClient, draft: RequestDraft) -> Optional[FetchOutcome]:
    """Full round trip. Returns None when the result was superseded by a newer request."""
    ticket, request = self.submit(draft)
    try:
      outcome = await fetch(client, request)
    except asyncio.CancelledError:
      self.cancelled(ticket)
      raise
    return outcome if self.complete(ticket, request, outcome) else None

  def clear_response(self) -> None:
    self.response = ResponseView()
    self.tree.clear()

  # --- history ---
  def replay_draft(self, signature: str) -> Optional[RequestDraft]:
    entry = self.history.get(signature)
    return RequestDraft.from_history(entry) if entry else None

  def remove_history(self, signature: str) -> bool:
    removed = self.history.remove(signature)
    if removed:
      self._save_history()
    return removed

  def clear_history(self) -> None:
    self.history.clear()
    self._save_history()

  @property
  def history_entries(self) -> Tuple[HistoryEntry, ...]:
    return self.history.entries

  def _save_history(self) -> None:
    try:
      save_history(self.store, self.history)
    except StoreError as e:
      logger.warning("history not saved: %s", e)

  # --- theme ---
  def toggle_theme(self) -> str:
    self.theme = other_theme(self.theme)
    try:
      save_theme(self.store, self.theme)
    except StoreError as e:
      logger.warning("theme not saved: %s", e)
    return self.theme
