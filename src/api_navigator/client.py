# client.py
# Sends a prepared request with httpx and classifies what came back.
# Only the most recently issued request may touch displayed state or history.
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from .request import OutgoingRequest

logger = logging.getLogger(__name__)

ERROR_DETAIL_LIMIT = 800
CANCELLED_MESSAGE = "Request cancelled."


@dataclass(frozen=True)
class FetchSuccess:
  status: int
  reason: str
  elapsed_ms: int
  content_type: str
  text: str
  document: Any = None
  is_json: bool = False


@dataclass(frozen=True)
class HttpFailure:
  status: int
  reason: str
  elapsed_ms: int
  message: str


@dataclass(frozen=True)
class TransportFailure:
  message: str
  timed_out: bool = False


FetchOutcome = Union[FetchSuccess, HttpFailure, TransportFailure]


def _is_json_type(content_type: str) -> bool:
  return "application/json" in content_type.lower()


def error_detail(text: str, content_type: str) -> str:
  detail = text
  if _is_json_type(content_type):
    try:
      parsed = json.loads(text)
    except json.JSONDecodeError:
      pass
    else:
      if isinstance(parsed, dict) and (parsed.get("message") or parsed.get("error")):
        detail = str(parsed.get("message") or parsed.get("error"))
      else:
        detail = json.dumps(parsed, indent=2, ensure_ascii=False)
  return detail[:ERROR_DETAIL_LIMIT]


def classify_response(response: httpx.Response, elapsed_ms: int) -> FetchOutcome:
  content_type = response.headers.get("content-type", "")
  text = response.text
  if not response.is_success:
    reason = response.reason_phrase
    return HttpFailure(
      response.status_code,
      reason,
      elapsed_ms,
      f"HTTP {response.status_code} {reason} - {error_detail(text, content_type)}",
    )
  document: Any = None
  is_json = False
  if _is_json_type(content_type):
    try:
      document = json.loads(text)
      is_json = True
    except json.JSONDecodeError:
      logger.debug("response claims JSON but does not parse; showing raw text")
  return FetchSuccess(response.status_code, response.reason_phrase, elapsed_ms, content_type, text, document, is_json)


async def fetch(client: httpx.AsyncClient, request: OutgoingRequest) -> FetchOutcome:
  """Send request. Cancellation propagates to the caller as asyncio.CancelledError."""
  logger.debug("%s %s", request.method, request.url)
  start = time.perf_counter()
  try:
    response = await client.request(
      request.method,
      request.url,
      headers=request.headers,
      content=request.content,
    )
  except httpx.TimeoutException as e:
    return TransportFailure(f"Network error: request timed out ({e.__class__.__name__}).", timed_out=True)
  except httpx.RequestError as e:
    return TransportFailure(f"Network error: server unreachable ({e}).")
  elapsed_ms = round((time.perf_counter() - start) * 1000)
  return classify_response(response, elapsed_ms)


def make_client(timeout: float) -> httpx.AsyncClient:
  return httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True)


class RequestTracker:
  """Hands out increasing tickets; a result may be committed only with the latest one."""

  def __init__(self) -> None:
    self._latest = 0
    self._in_flight: Optional[int] = None

  def begin(self) -> int:
    self._latest += 1
    self._in_flight = self._latest
    return self._latest

  def is_current(self, ticket: int) -> bool:
    return ticket == self._latest

  def finish(self, ticket: int) -> bool:
    """Mark ticket done. False when a newer request superseded it."""
    if not self.is_current(ticket):
      logger.debug("discarding result of superseded request #%d (latest #%d)", ticket, self._latest)
      return False
    self._in_flight = None
    return True

  @property
  def loading(self) -> bool:
    return self._in_flight is not None
