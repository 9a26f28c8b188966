# store.py
# Key-value persistence for the playground's small state blobs.
# Values are opaque strings; callers decide what goes in them.
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from .exceptions import StoreError

logger = logging.getLogger(__name__)

THEME_KEY = "api-playground-theme"
THEMES = ("dark", "light")
DEFAULT_THEME = "dark"


class KeyValueStore(Protocol):
  def get(self, key: str) -> Optional[str]: ...

  def set(self, key: str, value: str) -> None: ...


class MemoryStore:
  def __init__(self, initial: Dict[str, str] | None = None) -> None:
    self._data: Dict[str, str] = dict(initial or {})

  def get(self, key: str) -> Optional[str]:
    return self._data.get(key)

  def set(self, key: str, value: str) -> None:
    self._data[key] = value


class JsonFileStore:
  """All keys in one JSON object on disk; rewritten atomically on every set."""

  def __init__(self, path: Path | str) -> None:
    self.path = Path(path)

  def _read(self) -> Dict[str, str]:
    try:
      with open(self.path, "r", encoding="utf-8") as f:
        data = json.load(f)
    except FileNotFoundError:
      return {}
    except (OSError, json.JSONDecodeError) as e:
      logger.warning("ignoring unreadable store %s: %s", self.path, e)
      return {}
    if not isinstance(data, dict):
      logger.warning("ignoring store %s: top level is not an object", self.path)
      return {}
    return {str(k): v for k, v in data.items() if isinstance(v, str)}

  def get(self, key: str) -> Optional[str]:
    return self._read().get(key)

  def set(self, key: str, value: str) -> None:
    data = self._read()
    data[key] = value
    try:
      self.path.parent.mkdir(parents=True, exist_ok=True)
      fd, tmp_path = tempfile.mkstemp(prefix=".store_", suffix=".json", dir=self.path.parent)
    except OSError as e:
      raise StoreError(f"could not write {self.path}: {e}") from e
    try:
      with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
      os.replace(tmp_path, self.path)
    except OSError as e:
      raise StoreError(f"could not write {self.path}: {e}") from e
    finally:
      if os.path.exists(tmp_path):
        os.remove(tmp_path)


def load_theme(store: KeyValueStore, default: str = DEFAULT_THEME) -> str:
  saved = store.get(THEME_KEY)
  return saved if saved in THEMES else default


def save_theme(store: KeyValueStore, theme: str) -> None:
  if theme not in THEMES:
    raise ValueError(f"unknown theme: {theme!r}")
  store.set(THEME_KEY, theme)


def other_theme(theme: str) -> str:
  return "light" if theme == "dark" else "dark"
