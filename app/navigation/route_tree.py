# app/navigation/route_tree.py
"""
Readers for route-tree nodes.

Two node shapes are accepted:
  - flat (app/navigation/route_data.py): {"nav": ..., "permission": ..., "children": [...]}
  - SPA router shape: {"staticData": {...}} or {"options": {"staticData": {...}}},
    with "children" as a list or as a {id: node} mapping
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional


def route_static_data(node: Any) -> Mapping[str, Any]:
    if not isinstance(node, Mapping):
        return {}
    options = node.get("options")
    if isinstance(options, Mapping) and isinstance(options.get("staticData"), Mapping):
        return options["staticData"]
    static = node.get("staticData") or node.get("static_data")
    if isinstance(static, Mapping):
        return static
    return node


def route_nav(node: Any) -> Optional[Dict[str, Any]]:
    nav = route_static_data(node).get("nav")
    if not isinstance(nav, Mapping):
        return None
    if not nav.get("section") or not nav.get("label"):
        return None
    return dict(nav)


def route_permission(node: Any) -> Optional[Dict[str, str]]:
    perm = route_static_data(node).get("permission")
    if not isinstance(perm, Mapping) or not perm.get("subject"):
        return None
    return {"action": str(perm.get("action") or ""), "subject": str(perm["subject"])}


def route_hidden(node: Any) -> bool:
    static = route_static_data(node)
    return bool(static.get("hide_from_nav") or static.get("hideFromNav"))


def route_children(node: Any) -> List[Any]:
    """Children as a list; mappings are read by value, anything else means none."""
    if not isinstance(node, Mapping):
        return []
    children = node.get("children")
    if not children:
        return []
    if isinstance(children, (list, tuple)):
        return list(children)
    if isinstance(children, Mapping):
        return list(children.values())
    return []


def join_path(parent: str, node: Any) -> str:
    if not isinstance(node, Mapping):
        return parent or "/"
    full = node.get("fullPath") or node.get("full_path")
    if full:
        return str(full)
    if node.get("index"):
        return parent or "/"
    seg = str(node.get("path") or "").strip("/")
    base = (parent or "").rstrip("/")
    if not seg:
        return base or "/"
    return f"{base}/{seg}"


def as_roots(route_tree: Any) -> List[Any]:
    """A tree may be given as one root node or as a list of top-level nodes."""
    if isinstance(route_tree, (list, tuple)):
        return list(route_tree)
    if isinstance(route_tree, Mapping):
        return [route_tree]
    return []
