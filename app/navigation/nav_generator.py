# app/navigation/nav_generator.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from app.navigation.route_data import ROUTE_DATA, SECTION_ORDER
from app.navigation.route_tree import (
    as_roots,
    join_path,
    route_children,
    route_hidden,
    route_nav,
    route_permission,
)

logger = logging.getLogger(__name__)

DEFAULT_ICON = "Box"

# Path prefixes that never need sidebar entries
TECHNICAL_PREFIXES = ("/dev", "/auth", "/login", "/logout", "/onboarding", "/account")


@dataclass(frozen=True)
class RequiredPermission:
    action: str
    subject: str


@dataclass
class NavItem:
    label: str
    icon: str = DEFAULT_ICON
    to: str = "/"
    order: int = 0
    required_permission: Optional[RequiredPermission] = None


@dataclass
class NavSection:
    title: str
    items: List[NavItem] = field(default_factory=list)


@dataclass
class _ExtractedItem:
    section: str
    item: NavItem


def _extract_nav_items(node: Any, parent_path: str, out: List[_ExtractedItem]) -> None:
    full_path = join_path(parent_path, node)
    nav = route_nav(node)
    if nav:
        perm = route_permission(node)
        out.append(_ExtractedItem(
            section=str(nav["section"]),
            item=NavItem(
                label=str(nav["label"]),
                icon=str(nav.get("icon") or nav.get("iconKey") or DEFAULT_ICON),
                to=full_path,
                order=int(nav.get("order") or 0),
                required_permission=(RequiredPermission(perm["action"], perm["subject"])
                                     if perm else None),
            ),
        ))
    for child in route_children(node):
        _extract_nav_items(child, full_path, out)


def generate_nav_sections(route_tree: Any = None,
                          section_order: Optional[List[str]] = None) -> List[NavSection]:
    """
    Sidebar sections from the route tree.

    Sections follow SECTION_ORDER; unknown sections are appended in discovery
    order. Items are sorted by nav "order" (stable, so ties keep tree order).
    """
    tree = ROUTE_DATA if route_tree is None else route_tree
    order = list(section_order or SECTION_ORDER)

    extracted: List[_ExtractedItem] = []
    for root in as_roots(tree):
        _extract_nav_items(root, "", extracted)

    by_section: Dict[str, List[NavItem]] = {}
    for e in extracted:
        by_section.setdefault(e.section, []).append(e.item)
        if e.section not in order:
            order.append(e.section)

    sections: List[NavSection] = []
    for title in order:
        items = by_section.get(title)
        if not items:
            continue
        sections.append(NavSection(title=title, items=sorted(items, key=lambda i: i.order)))
    return sections


_cached_sections: Optional[List[NavSection]] = None


def get_nav_sections() -> List[NavSection]:
    global _cached_sections
    if _cached_sections is None:
        _cached_sections = generate_nav_sections(ROUTE_DATA)
    return _cached_sections


def is_technical_route(full_path: str) -> bool:
    return any(full_path == p or full_path.startswith(p + "/") for p in TECHNICAL_PREFIXES)


def find_routes_missing_nav(route_tree: Any = None) -> List[str]:
    """Full paths of routes that require a permission but have no nav metadata."""
    tree = ROUTE_DATA if route_tree is None else route_tree
    missing: List[str] = []

    def walk(node: Any, parent_path: str, nav_above: bool) -> None:
        full_path = join_path(parent_path, node)
        has_nav = route_nav(node) is not None
        if (route_permission(node) and not has_nav and not nav_above
                and not route_hidden(node) and not is_technical_route(full_path)):
            missing.append(full_path)
        for child in route_children(node):
            walk(child, full_path, nav_above or has_nav)

    for root in as_roots(tree):
        walk(root, "", False)
    return missing


def filter_sections_for(sections: List[NavSection],
                        can: Callable[[str, str], bool]) -> List[NavSection]:
    """Sidebar view for one user: keep items whose permission passes can(action, subject)."""
    out: List[NavSection] = []
    for s in sections:
        items = [
            i for i in s.items
            if i.required_permission is None
            or can(i.required_permission.action, i.required_permission.subject)
        ]
        if items:
            out.append(NavSection(title=s.title, items=items))
    return out


def log_routes_missing_nav(route_tree: Any = None) -> None:
    for path in find_routes_missing_nav(route_tree):
        logger.warning(
            "Route %r has a permission but no nav metadata; add nav or hide_from_nav", path)
