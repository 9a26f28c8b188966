from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .history import HISTORY_LIMIT
from .store import DEFAULT_THEME

HOME_ENV = "API_NAVIGATOR_HOME"
TIMEOUT_ENV = "API_NAVIGATOR_TIMEOUT"
DEFAULT_TIMEOUT = 30.0


def _default_data_dir() -> Path:
  return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / "api-navigator"


@dataclass
class Settings:
  data_dir: Path = field(default_factory=_default_data_dir)
  history_limit: int = HISTORY_LIMIT
  timeout: float = DEFAULT_TIMEOUT
  default_theme: str = DEFAULT_THEME

  @property
  def store_path(self) -> Path:
    return self.data_dir / "state.json"

  @classmethod
  def from_env(cls) -> "Settings":
    settings = cls()
    home = os.environ.get(HOME_ENV)
    if home:
      settings.data_dir = Path(home).expanduser()
    timeout = os.environ.get(TIMEOUT_ENV)
    if timeout:
      try:
        settings.timeout = float(timeout)
      except ValueError:
        raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {timeout!r}") from None
    return settings
