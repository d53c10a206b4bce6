"""Rich rendering of ServiceResults, one renderer per operation.

Renderers only draw the payload; the error line and the verbose
telemetry tree are handled by :func:`render_result` for every op.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from acltree.output.console import create_console, get_output, style_for_role

if TYPE_CHECKING:
    from rich.console import Console

    from acltree.services.result import ServiceResult

type Renderer = Callable[["ServiceResult", "Console"], None]

_SLOW_SPAN_MS = 100.0


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* with Rich and return the captured text."""
    console = create_console()
    if not result.ok:
        _error(result, console, verbose=verbose)
    else:
        _RENDERERS.get(result.op, _generic)(result, console)
        if verbose and result.meta and "telemetry" in result.meta:
            console.print()
            console.print(_span_tree(result.meta["telemetry"]))
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """One-line (or one-label-per-line) output for ``--quiet``."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {message}"
    if result.op == "is":
        return str(bool(result.data.get("result"))).lower()
    items = result.data.get("items")
    if isinstance(items, list) and items:
        return "\n".join(_labels(items))
    return f"OK: {result.op}"


def _labels(items: list[Any]) -> list[str]:
    """Depth-first labels of flat or nested ``items``."""
    out: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            out.append(str(item))
            continue
        out.append(str(item.get("label", item.get("id", ""))))
        out.extend(_labels(item.get("children", [])))
    return out


def _label_of(collection: dict[str, Any]) -> str:
    if collection.get("alias"):
        return str(collection["alias"])
    if collection.get("model"):
        return f"{collection['model']}:{collection['foreign_key']}"
    return f"#{collection.get('id')}"


def _ok(console: Console, op: str) -> None:
    console.print(Text.assemble(("OK", "acl.ok"), (f"  {op}", "acl.op")))


def _kv(console: Console, key: str, value: Any) -> None:
    if key in ("id", "parent_id"):
        style = "acl.id"
    elif key in ("alias", "label", "member", "group", "collection"):
        style = "acl.label"
    elif key == "role":
        style = style_for_role(str(value))
    else:
        style = ""
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"))
    console.print(Text.assemble((f"  {key}: ", "acl.key"), (str(value), style)))


def _span_tree(span: dict[str, Any], tree: Tree | None = None) -> Tree:
    duration = float(span.get("duration_ms", 0.0))
    label = Text.assemble(
        (f"{duration:8.2f}ms", "yellow" if duration > _SLOW_SPAN_MS else "dim"),
        f"  {span.get('name', '?')}",
    )
    if span.get("annotations"):
        pairs = ", ".join(f"{k}={v}" for k, v in span["annotations"].items())
        label.append(f"  ({pairs})", style="dim")
    node = tree.add(label) if tree is not None else Tree(label, guide_style="dim")
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


def _error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    err = result.error
    head = Text.assemble(("ERROR", "acl.error"), (f"  {result.op}", "acl.op"))
    if err is None:
        head.append("  Unknown error")
        console.print(head)
        return
    head.append(f" [{err.code}]", style="acl.op")
    head.append(f"  {err.message}")
    console.print(head)
    if verbose:
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}", style="dim"))


# -- collections ------------------------------------------------------


def _created(result: ServiceResult, console: Console) -> None:
    _ok(console, result.op)
    for key in ("id", "role", "alias", "model", "foreign_key"):
        if result.data.get(key) is not None:
            _kv(console, key, result.data[key])


def _show(result: ServiceResult, console: Console) -> None:
    data = result.data
    role = str(data.get("role"))
    console.print(
        Text.assemble(
            (_label_of(data), "acl.label"),
            (f"  ({role} #{data.get('id')})", style_for_role(role)),
        )
    )
    _kv(console, "parents", ", ".join(data.get("parents", [])) or "-")
    _kv(console, "children", ", ".join(data.get("children", [])) or "-")

    nodes = Table(box=None, header_style="bold", padding=(0, 2))
    nodes.add_column("node", style="acl.id")
    nodes.add_column("parent")
    nodes.add_column("position")
    for node in data.get("nodes", []):
        parent = node.get("parent_id")
        nodes.add_row(str(node["id"]), "-" if parent is None else str(parent), str(node["position"]))
    console.print()
    console.print(nodes)


def _tree(result: ServiceResult, console: Console) -> None:
    role = str(result.data.get("role", ""))
    root = Tree(Text(f"{role} collections", style=style_for_role(role)))
    pending = [(root, item) for item in result.data.get("items", [])]
    while pending:
        branch, item = pending.pop(0)
        child = branch.add(Text(str(item["label"]), style="acl.label"))
        pending.extend((child, sub) for sub in item.get("children", []))
    console.print(root)
    console.print()
    console.print(f"{result.data.get('count', 0)} collections")


def _ancestors(result: ServiceResult, console: Console) -> None:
    _ok(console, result.op)
    _kv(console, "collection", result.data.get("collection"))
    for label in result.data.get("items", []):
        console.print(Text(f"  - {label}"))


# -- membership -------------------------------------------------------


def _membership(result: ServiceResult, console: Console) -> None:
    _ok(console, result.op)
    data = result.data
    _kv(console, "member", _label_of(data.get("member", {})))
    _kv(console, "group", _label_of(data.get("group", {})))
    for key in ("positions", "changed"):
        if key in data:
            _kv(console, key, data[key])


def _is(result: ServiceResult, console: Console) -> None:
    data = result.data
    if data.get("result"):
        verdict, relation = Text("yes", style="acl.yes"), "is within"
    else:
        verdict, relation = Text("no", style="acl.no"), "is not within"
    verdict.append(f"  {data.get('member')} {relation} {data.get('group')}", style="")
    console.print(verdict)


def _generic(result: ServiceResult, console: Console) -> None:
    _ok(console, result.op)
    for key, value in result.data.items():
        _kv(console, key, value)


_RENDERERS: dict[str, Renderer] = {
    "create": _created,
    "show": _show,
    "tree": _tree,
    "ancestors": _ancestors,
    "join": _membership,
    "leave": _membership,
    "is": _is,
}
