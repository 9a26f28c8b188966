from __future__ import annotations


class ApiNavigatorError(Exception):
  """Base class for errors raised by api_navigator."""


class RequestValidationError(ApiNavigatorError, ValueError):
  """A request was rejected locally, before anything was sent."""


class StoreError(ApiNavigatorError):
  """Persisted state could not be written."""
