# render.py
# Render instructions for the response tree: one row per visible node,
# already resolved against search and expansion state.
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from rich.text import Text

from .paths import ROOT, NodeKind, iter_children, node_kind, scalar_text
from .session import TreeSession

VALUE_STYLES = {
  NodeKind.STRING: "#4FC3F7",
  NodeKind.NUMBER: "#FFD54F",
  NodeKind.BOOL: "#81C784",
  NodeKind.NULL: "#E57373",
}
KEY_STYLE = "#B39DDB"


@dataclass(frozen=True)
class RenderRow:
  path: str
  label: str
  depth: int
  kind: NodeKind
  open: Optional[bool]  # None for leaves
  matched: bool
  active: bool
  preview: str
  value: Any = None

  @property
  def is_container(self) -> bool:
    return self.kind.is_container


def preview_of(value: Any) -> str:
  kind = node_kind(value)
  if kind is NodeKind.ARRAY:
    n = len(value)
    return f"[ {n} item{'s' if n != 1 else ''} ]"
  if kind is NodeKind.OBJECT:
    n = len(value)
    return f"{{ {n} propert{'ies' if n != 1 else 'y'} }}"
  if kind is NodeKind.STRING:
    return json.dumps(value, ensure_ascii=False)
  return scalar_text(value)


def build_rows(session: TreeSession) -> List[RenderRow]:
  """Depth-first rows for every node the user can currently see."""
  if not session.has_document:
    return []
  rows: List[RenderRow] = []
  active = session.active_path

  def visit(label: str, value: Any, path: str, depth: int) -> None:
    kind = node_kind(value)
    is_open = session.is_open(path) if kind.is_container else None
    rows.append(RenderRow(
      path=path,
      label=label,
      depth=depth,
      kind=kind,
      open=is_open,
      matched=session.is_match(path),
      active=path == active,
      preview=preview_of(value),
      value=None if kind.is_container else value,
    ))
    if is_open:
      for child_label, child_path, child in iter_children(value, path):
        visit(child_label, child, child_path, depth + 1)

  visit(ROOT, session.document, ROOT, 0)
  return rows


def row_label(row: RenderRow) -> Text:
  """Rich label for one row: key, then preview or value. Matches bold, the active one reversed."""
  key_style = "bold white" if row.matched else KEY_STYLE
  value_style = VALUE_STYLES.get(row.kind, "")
  if row.matched and not row.is_container:
    value_style = f"bold {value_style}"
  text = Text.assemble((f"{row.label}:", key_style), " ", (row.preview, value_style))
  if row.active:
    text.stylize("reverse")
  return text
