# app.py
# Terminal API playground using Textual + Rich.
# - Request bar: method, URL, headers ("Name: value" per line), JSON body
# - Response tree with live search; F3 / Shift+F3 walk the matches
# - Enter toggles branches; on leaves opens the value viewer
# - History of successful requests (F2): replay, remove, clear
from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.pretty import pretty_repr
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Input, Label, Log, OptionList, Select, Static, TextArea, Tree
from textual.widgets.option_list import Option
from textual.widgets.tree import TreeNode

from .client import fetch, make_client
from .exceptions import RequestValidationError
from .history import HistoryEntry
from .request import METHODS, OutgoingRequest, RequestDraft, format_header_lines, parse_header_lines
from .playground import Playground
from .render import RenderRow, build_rows, row_label

TEXTUAL_THEMES = {"dark": "textual-dark", "light": "textual-light"}


# ---------- Modal screens ----------

class ValueViewer(ModalScreen[None]):
  """Modal screen for showing text content."""
  CSS = """
  ValueViewer { align: center middle; }
  .modal {
    width: 90%;
    height: 80%;
    border: round $accent;
    padding: 1 2;
    background: $panel;
  }
  .title { padding: 0 1; text-style: bold; }
  .viewer { height: 1fr; margin-top: 1; border: round $surface; }
  .buttons { height: auto; padding-top: 1; }
  """

  BINDINGS = [Binding("escape", "close", "Close")]

  def __init__(self, title: str, content: str) -> None:
    super().__init__()
    self._title = title
    self._content = content

  def compose(self) -> ComposeResult:
    yield Container(
      Label(self._title, classes="title"),
      Log(classes="viewer"),
      Horizontal(
        Button("Close (Esc)", id="close", variant="primary"),
        classes="buttons",
      ),
      classes="modal",
    )

  def on_mount(self) -> None:
    log = self.query_one(Log)
    log.write_lines(self._content.splitlines() or [""])
    self.set_focus(log)

  def on_button_pressed(self, event: Button.Pressed) -> None:
    if event.button.id == "close":
      self.dismiss(None)

  def action_close(self) -> None:
    self.dismiss(None)


HistoryChoice = Tuple[str, Optional[str]]


class HistoryScreen(ModalScreen[Optional[HistoryChoice]]):
  """History list: dismisses with ('replay'|'remove', signature), ('clear', None) or None."""
  CSS = """
  HistoryScreen { align: center middle; }
  .modal { width: 80%; height: auto; max-height: 80%; border: round $accent; padding: 1 2; background: $panel; }
  .title { padding: 0 1; text-style: bold; }
  .hint { padding: 0 1; color: $text-muted; }
  """

  BINDINGS = [
    Binding("escape", "cancel", "Cancel"),
    Binding("delete", "remove", "Remove"),
    Binding("ctrl+x", "clear", "Clear all"),
  ]

  def __init__(self, entries: Tuple[HistoryEntry, ...]) -> None:
    super().__init__()
    self._entries = entries

  def compose(self) -> ComposeResult:
    if self._entries:
      body = OptionList(*[Option(e.summary(), id=str(i)) for i, e in enumerate(self._entries)])
    else:
      body = OptionList(Option("No successful requests yet", id="none", disabled=True))
    yield Container(
      Label(f"History ({len(self._entries)})", classes="title"),
      body,
      Label("Enter: replay   Del: remove   Ctrl+X: clear all   Esc: close", classes="hint"),
      classes="modal",
    )

  def on_mount(self) -> None:
    self.set_focus(self.query_one(OptionList))

  def _highlighted(self) -> Optional[HistoryEntry]:
    index = self.query_one(OptionList).highlighted
    if index is None or not self._entries:
      return None
    return self._entries[index]

  def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
    if event.option.id in (None, "none"):
      return
    self.dismiss(("replay", self._entries[int(event.option.id)].signature))

  def action_remove(self) -> None:
    entry = self._highlighted()
    if entry is not None:
      self.dismiss(("remove", entry.signature))

  def action_clear(self) -> None:
    self.dismiss(("clear", None))

  def action_cancel(self) -> None:
    self.dismiss(None)


# ---------- Main App ----------

class ApiNavigatorApp(App):
  TITLE = "API Navigator"
  CSS = """
  #request { height: auto; }
  #method { width: 16; }
  #url { width: 1fr; }
  #extras { height: 7; }
  #headers, #body { width: 1fr; }
  #searchbar { height: auto; }
  #search { width: 1fr; }
  #matches { width: 12; content-align: center middle; height: 3; }
  #status { height: auto; padding: 0 1; }
  #tree { height: 1fr; }
  """

  BINDINGS = [
    Binding("f5", "send", "Send"),
    Binding("escape", "cancel_request", "Cancel"),
    Binding("f2", "history", "History"),
    Binding("f3", "next_match", "Next"),
    Binding("shift+f3", "prev_match", "Prev"),
    Binding("f9", "expand_all", "Expand all"),
    Binding("f10", "collapse_all", "Collapse all"),
    Binding("f4", "view_response", "Raw"),
    Binding("f6", "toggle_theme", "Theme"),
    Binding("f7", "copy_response", "Copy"),
    Binding("f8", "save_response", "Save"),
    Binding("f12", "clear_response", "Clear"),
  ]

  def __init__(self, playground: Playground, draft: RequestDraft | None = None) -> None:
    super().__init__()
    self.playground = playground
    self._initial = draft or RequestDraft()
    self._tree_nodes: Dict[str, TreeNode] = {}
    self._client = None

  def compose(self) -> ComposeResult:
    yield Header()
    with Horizontal(id="request"):
      yield Select([(m, m) for m in METHODS], value=self._initial.method.upper(), allow_blank=False, id="method")
      yield Input(value=self._initial.url, placeholder="https://...", id="url")
      yield Button("Send", id="send", variant="primary")
      yield Button("Cancel", id="cancel", disabled=True)
    with Horizontal(id="extras"):
      yield TextArea(format_header_lines(self._initial.headers_rows), id="headers")
      yield TextArea(self._initial.body, id="body")
    with Horizontal(id="searchbar"):
      yield Input(placeholder="Search keys and values", id="search")
      yield Static("", id="matches")
    yield Static("", id="status")
    yield Tree("root", id="tree")
    yield Footer()

  def on_mount(self) -> None:
    self._client = make_client(self.playground.settings.timeout)
    self.theme = TEXTUAL_THEMES[self.playground.theme]
    self.query_one("#headers", TextArea).border_title = "Headers"
    self.query_one("#body", TextArea).border_title = "Body (JSON)"
    tree = self.query_one(Tree)
    tree.show_root = True
    tree.auto_expand = False
    self._refresh_view()
    self.set_focus(self.query_one("#url", Input))

  async def on_unmount(self) -> None:
    if self._client is not None:
      await self._client.aclose()

  # --- form ---
  def _draft(self) -> RequestDraft:
    return RequestDraft(
      url=self.query_one("#url", Input).value,
      method=str(self.query_one("#method", Select).value),
      headers_rows=list(parse_header_lines(self.query_one("#headers", TextArea).text)),
      body=self.query_one("#body", TextArea).text,
    )

  def _load_draft(self, draft: RequestDraft) -> None:
    self.query_one("#url", Input).value = draft.url
    self.query_one("#method", Select).value = draft.method
    self.query_one("#headers", TextArea).load_text(format_header_lines(draft.headers_rows))
    self.query_one("#body", TextArea).load_text(draft.body)

  # --- rendering ---
  def _refresh_view(self) -> None:
    self._refresh_status()
    self._refresh_tree()

  def _refresh_status(self) -> None:
    pg = self.playground
    resp = pg.response
    parts: List[Text] = []
    if resp.loading:
      parts.append(Text("Loading…", style="italic"))
    if resp.status is not None:
      parts.append(Text(f"Status {resp.status}"))
    if resp.elapsed_ms is not None:
      parts.append(Text(f"{resp.elapsed_ms} ms"))
    if resp.error:
      parts.append(Text(f"Error: {resp.error}", style="bold red"))
    elif resp.text and not pg.tree.has_document:
      parts.append(Text("Non-JSON response (F4 to view)", style="italic"))
    self.query_one("#status", Static).update(Text("  ·  ").join(parts))
    self.query_one("#matches", Static).update(str(pg.tree.position) if pg.tree.search_active else "")
    self.query_one("#cancel", Button).disabled = not resp.loading

  def _refresh_tree(self) -> None:
    tree = self.query_one(Tree)
    rows = build_rows(self.playground.tree)
    tree.clear()
    self._tree_nodes = {}
    if not rows:
      tree.root.set_label("root: (no document)")
      tree.root.data = None
      tree.root.allow_expand = False
      return
    first = rows[0]
    tree.root.set_label(row_label(first))
    tree.root.data = first
    tree.root.allow_expand = first.is_container
    self._tree_nodes[first.path] = tree.root
    parents: List[TreeNode] = [tree.root]
    for row in rows[1:]:
      del parents[row.depth:]
      node = parents[-1].add(row_label(row), data=row, expand=bool(row.open), allow_expand=row.is_container)
      self._tree_nodes[row.path] = node
      parents.append(node)
    if first.open:
      tree.root.expand()
    else:
      tree.root.collapse()
    active = self.playground.tree.active_path
    if active in self._tree_nodes:
      self.call_after_refresh(self._reveal, self._tree_nodes[active])

  def _reveal(self, node: TreeNode) -> None:
    tree = self.query_one(Tree)
    tree.move_cursor(node)
    tree.scroll_to_node(node)

  # --- events ---
  def on_input_changed(self, event: Input.Changed) -> None:
    if event.input.id == "search":
      self.playground.tree.set_query(event.value)
      self._refresh_view()

  def on_input_submitted(self, event: Input.Submitted) -> None:
    if event.input.id == "url":
      self.action_send()
    elif event.input.id == "search":
      self.action_next_match()

  def on_button_pressed(self, event: Button.Pressed) -> None:
    if event.button.id == "send":
      self.action_send()
    elif event.button.id == "cancel":
      self.action_cancel_request()

  def _sync_toggle(self, node: TreeNode, want_open: bool) -> None:
    row: Optional[RenderRow] = node.data
    if row is None or not row.is_container:
      return
    session = self.playground.tree
    if session.is_open(row.path) != want_open:
      session.toggle(row.path)
      self._refresh_tree()
      if row.path in self._tree_nodes:
        self.call_after_refresh(self._reveal, self._tree_nodes[row.path])

  def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
    self._sync_toggle(event.node, True)

  def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:
    self._sync_toggle(event.node, False)

  def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
    row: Optional[RenderRow] = event.node.data
    if row is None:
      return
    if row.is_container:
      event.node.toggle()
    else:
      self.push_screen(ValueViewer(f"Display {row.path}", pretty_repr(row.value)))
      event.stop()

  # --- requests ---
  def action_send(self, draft: RequestDraft | None = None) -> None:
    # Validate first: only a sendable draft may replace the request in flight.
    try:
      ticket, request = self.playground.submit(draft or self._draft())
    except RequestValidationError:
      self._refresh_status()
      return
    self._refresh_view()
    self._send(ticket, request)

  @work(exclusive=True, group="request")
  async def _send(self, ticket: int, request: OutgoingRequest) -> None:
    pg = self.playground
    try:
      outcome = await fetch(self._client, request)
    except asyncio.CancelledError:
      if pg.cancelled(ticket):
        self._refresh_view()
      raise
    if pg.complete(ticket, request, outcome):
      self._refresh_view()

  def action_cancel_request(self) -> None:
    if self.playground.response.loading:
      self.workers.cancel_group(self, "request")

  # --- tree ---
  def action_next_match(self) -> None:
    if self.playground.tree.next_match() is not None:
      self._refresh_view()

  def action_prev_match(self) -> None:
    if self.playground.tree.prev_match() is not None:
      self._refresh_view()

  def action_expand_all(self) -> None:
    self.playground.tree.expand_all()
    self._refresh_tree()

  def action_collapse_all(self) -> None:
    self.playground.tree.collapse_all()
    self._refresh_tree()

  # --- history ---
  def action_history(self) -> None:
    pg = self.playground

    def handle_choice(choice: Optional[HistoryChoice]) -> None:
      if choice is None:
        return
      what, signature = choice
      if what == "replay" and signature:
        draft = pg.replay_draft(signature)
        if draft is not None:
          self._load_draft(draft)
          self.action_send(draft)
      elif what == "remove" and signature:
        pg.remove_history(signature)
        self.action_history()
      elif what == "clear":
        pg.clear_history()
        self.notify("History cleared")

    self.push_screen(HistoryScreen(pg.history_entries), callback=handle_choice)

  # --- response ---
  def action_view_response(self) -> None:
    text = self.playground.response.text
    if text:
      self.push_screen(ValueViewer("Response", text))

  def action_copy_response(self) -> None:
    text = self.playground.response.text
    if not text:
      self.notify("Nothing to copy", severity="warning")
      return
    self.copy_to_clipboard(text)
    self.notify("Response copied")

  def action_save_response(self) -> None:
    pg = self.playground
    if not pg.response.text:
      self.notify("Nothing to save", severity="warning")
      return
    suffix = "json" if pg.tree.has_document else "txt"
    target = Path.cwd() / f"response-{int(time.time())}.{suffix}"
    try:
      target.write_text(pg.response.text, encoding="utf-8")
    except OSError as e:
      self.notify(f"Save failed: {e}", severity="error")
      return
    self.notify(f"Saved {target.name}")

  def action_clear_response(self) -> None:
    self.action_cancel_request()
    self.playground.clear_response()
    self._refresh_view()

  def action_toggle_theme(self) -> None:
    self.theme = TEXTUAL_THEMES[self.playground.toggle_theme()]

