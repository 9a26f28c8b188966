from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
  """Route api_navigator logs through Rich on stderr. Safe to call more than once."""
  handler = RichHandler(
    console=console or Console(stderr=True),
    show_path=False,
    rich_tracebacks=True,
  )
  handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
  logger = logging.getLogger("api_navigator")
  for old in list(logger.handlers):
    if isinstance(old, RichHandler):
      logger.removeHandler(old)
  logger.addHandler(handler)
  logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
