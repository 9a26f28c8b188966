# cli.py
# Entry point: the interactive playground, or a headless dump of the
# response tree for a document file, stdin, or a single request.
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.text import Text

from .client import make_client
from .config import Settings
from .exceptions import RequestValidationError
from .expansion import TreeCommand
from .log import setup_logging
from .playground import Playground
from .render import build_rows, row_label
from .request import METHODS, RequestDraft, parse_header_lines
from .store import JsonFileStore, MemoryStore

NO_INPUT = object()


def read_json_from_args_or_stdin(path: str | None, stdin=None) -> Any:
  """Document from --in PATH, else piped stdin. NO_INPUT when stdin is a terminal."""
  if path:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  stdin = stdin or sys.stdin
  if stdin.isatty():
    return NO_INPUT
  return json.load(stdin)


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="api-navigator",
    description="Send HTTP requests and explore JSON responses as a searchable tree.",
  )
  parser.add_argument("--in", dest="inpath", help="JSON file to explore instead of sending a request.")
  parser.add_argument("--url", help="Request URL (sent immediately with --dump, prefilled otherwise).")
  parser.add_argument("-X", "--method", default="GET", type=str.upper, choices=METHODS, help="HTTP method.")
  parser.add_argument("-H", "--header", dest="headers", action="append", default=[], metavar="'NAME: VALUE'",
                      help="Request header; repeatable.")
  parser.add_argument("-d", "--data", default="", help="JSON body for POST/PUT/PATCH.")
  parser.add_argument("-q", "--query", default="", help="Search query for the response tree.")
  group = parser.add_mutually_exclusive_group()
  group.add_argument("--expand-all", action="store_true", help="Open every container.")
  group.add_argument("--collapse-all", action="store_true", help="Close everything below root.")
  parser.add_argument("--next", type=int, default=0, metavar="N", help="Advance the match cursor N times.")
  parser.add_argument("--dump", action="store_true", help="Print the tree instead of starting the UI.")
  parser.add_argument("--timeout", type=float, metavar="SECONDS", help="Request timeout (overrides API_NAVIGATOR_TIMEOUT).")
  parser.add_argument("--no-persist", action="store_true", help="Keep history and theme in memory only.")
  parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
  return parser


def load_settings(args: argparse.Namespace) -> Settings:
  settings = Settings.from_env()
  if args.timeout is not None:
    if args.timeout <= 0:
      raise ValueError(f"--timeout must be positive, got {args.timeout}")
    settings.timeout = args.timeout
  return settings


def make_playground(args: argparse.Namespace, settings: Settings) -> Playground:
  store = MemoryStore() if args.no_persist else JsonFileStore(settings.store_path)
  return Playground(store, settings)


def draft_from_args(args: argparse.Namespace) -> RequestDraft:
  return RequestDraft(
    url=args.url or "",
    method=args.method,
    headers_rows=list(parse_header_lines("\n".join(args.headers))),
    body=args.data,
  )


def apply_tree_args(playground: Playground, args: argparse.Namespace) -> None:
  session = playground.tree
  session.set_query(args.query)
  if args.expand_all:
    session.apply(TreeCommand.EXPAND_ALL)
  elif args.collapse_all:
    session.apply(TreeCommand.COLLAPSE_ALL)
  for _ in range(max(args.next, 0)):
    session.next_match()


def dump(playground: Playground, console: Console) -> None:
  session = playground.tree
  resp = playground.response
  if resp.status is not None:
    console.print(Text(f"Status {resp.status} · {resp.elapsed_ms} ms", style="dim"))
  if not session.has_document:
    console.print(resp.text, markup=False, highlight=False)
    return
  for row in build_rows(session):
    marker = " " if row.open is None else ("-" if row.open else "+")
    console.print(Text.assemble("  " * row.depth, marker, " ", row_label(row)))
  if session.search_active:
    console.print(Text(f"Matches: {session.position}", style="bold"))


async def _fetch_once(playground: Playground, draft: RequestDraft) -> None:
  async with make_client(playground.settings.timeout) as client:
    await playground.send(client, draft)


def main(argv: Optional[Sequence[str]] = None) -> int:
  args = build_parser().parse_args(argv)
  setup_logging(args.verbose)
  try:
    settings = load_settings(args)
  except ValueError as e:
    print(f"Error: {e}", file=sys.stderr)
    return 2
  playground = make_playground(args, settings)
  draft = draft_from_args(args)
  console = Console()

  document: Any = NO_INPUT
  if args.inpath or not args.url:
    try:
      document = read_json_from_args_or_stdin(args.inpath)
    except (OSError, json.JSONDecodeError) as e:
      print(f"Error: could not read JSON input: {e}", file=sys.stderr)
      return 2
  if document is not NO_INPUT:
    playground.tree.load(document)

  if not args.dump:
    from .app import ApiNavigatorApp

    apply_tree_args(playground, args)
    ApiNavigatorApp(playground, draft).run()
    return 0

  if document is NO_INPUT:
    if not args.url:
      print("Error: no --in, --url or piped JSON. Pipe JSON, use --in PATH or --url URL.", file=sys.stderr)
      return 2
    try:
      asyncio.run(_fetch_once(playground, draft))
    except RequestValidationError as e:
      print(f"Error: {e}", file=sys.stderr)
      return 2
  apply_tree_args(playground, args)
  if playground.response.error:
    console.print(Text(playground.response.error, style="bold red"))
    return 1
  dump(playground, console)
  return 0


if __name__ == "__main__":
  sys.exit(main())
