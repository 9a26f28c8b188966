# paths.py
# Stable textual paths for every value of a JSON document.
# - "root" names the document itself
# - ".{key}" steps into an object field, ".[i]" into an array element
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Iterator, List, Sequence, Tuple, Union

# ---------- Types ----------

JSONPrimitive = Union[str, int, float, bool, None]
JSONType = Union[dict, list, JSONPrimitive]
Step = Union[str, int]

ROOT = "root"


class NodeKind(str, Enum):
  NULL = "null"
  BOOL = "bool"
  NUMBER = "number"
  STRING = "string"
  ARRAY = "array"
  OBJECT = "object"

  @property
  def is_container(self) -> bool:
    return self in (NodeKind.ARRAY, NodeKind.OBJECT)


def node_kind(value: Any) -> NodeKind:
  """Classify a parsed JSON value. Raises TypeError for anything json.loads can't produce."""
  if value is None:
    return NodeKind.NULL
  # bool before number: bool is an int subclass
  if isinstance(value, bool):
    return NodeKind.BOOL
  if isinstance(value, (int, float)):
    return NodeKind.NUMBER
  if isinstance(value, str):
    return NodeKind.STRING
  if isinstance(value, list):
    return NodeKind.ARRAY
  if isinstance(value, dict):
    return NodeKind.OBJECT
  raise TypeError(f"not a JSON value: {type(value).__name__}")


def is_leaf(value: Any) -> bool:
  return not node_kind(value).is_container


def scalar_text(value: JSONPrimitive) -> str:
  """String form of a scalar the way a browser prints it (null, true, 3 rather than 3.0)."""
  kind = node_kind(value)
  if kind is NodeKind.NULL:
    return "null"
  if kind is NodeKind.BOOL:
    return "true" if value else "false"
  if kind is NodeKind.NUMBER:
    if isinstance(value, float):
      if math.isnan(value):
        return "NaN"
      if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
      if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
      return repr(value)
    return str(value)
  if kind is NodeKind.STRING:
    return value  # type: ignore[return-value]
  raise TypeError("containers have no scalar text")


# ---------- Paths ----------

def child_path(parent: str, step: Step) -> str:
  if isinstance(step, int) and not isinstance(step, bool):
    return f"{parent}.[{step}]"
  return f"{parent}.{step}"


def path_of(steps: Sequence[Step], root: str = ROOT) -> str:
  path = root
  for step in steps:
    path = child_path(path, step)
  return path


def path_segments(path: str) -> List[str]:
  segments = path.split(".")
  if segments[0] != ROOT:
    raise ValueError(f"path is not rooted at {ROOT!r}: {path!r}")
  return segments


def path_depth(path: str) -> int:
  return len(path_segments(path)) - 1


def path_prefixes(path: str) -> List[str]:
  """Every prefix of path on '.', from root down to and including path itself."""
  segments = path_segments(path)
  out: List[str] = []
  cur = segments[0]
  out.append(cur)
  for seg in segments[1:]:
    cur = f"{cur}.{seg}"
    out.append(cur)
  return out


def ancestor_paths(path: str) -> List[str]:
  """Strict ancestors of path, root first. Empty for root."""
  return path_prefixes(path)[:-1]


def iter_children(value: JSONType, path: str) -> Iterator[Tuple[str, str, Any]]:
  """Yield (label, child path, child value) in entry order; nothing for leaves."""
  kind = node_kind(value)
  if kind is NodeKind.ARRAY:
    for i, v in enumerate(value):  # type: ignore[arg-type]
      yield f"[{i}]", child_path(path, i), v
  elif kind is NodeKind.OBJECT:
    for k, v in value.items():  # type: ignore[union-attr]
      yield str(k), child_path(path, str(k)), v


def list_container_paths(value: JSONType, path: str = ROOT) -> List[str]:
  """Depth-first paths of every object/array in value, root first."""
  out: List[str] = []
  stack: List[Tuple[str, Any]] = [(path, value)]
  while stack:
    cur_path, cur = stack.pop()
    if is_leaf(cur):
      continue
    out.append(cur_path)
    children = [(p, v) for _, p, v in iter_children(cur, cur_path)]
    stack.extend(reversed(children))
  return out

