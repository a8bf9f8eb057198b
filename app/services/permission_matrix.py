# app/services/permission_matrix.py
"""
Roles screen matrix: navigation sections -> rows of toggleable permissions.

Every catalog permission ends up in exactly one MatrixItem: the first nav item
(in section/item order) that resolves it claims it, and whatever no nav item
claims goes to the "Otros Permisos de Sistema" section, one row per subject.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from app.navigation.nav_generator import NavItem, NavSection, generate_nav_sections
from app.services.subject_mapping import (
    AliasScoring,
    SubjectNavKeyMap,
    build_subject_nav_key_map,
    get_nav_key,
)

SYSTEM_SECTION_TITLE = "Otros Permisos de Sistema"
SYSTEM_ITEM_ICON = "Shield"


@dataclass
class MatrixItem:
    label: str
    icon: str
    permission_ids: List[int]
    related_permissions: List[Any]


@dataclass
class MatrixSection:
    title: str
    items: List[MatrixItem]
    permission_ids: List[int]


@dataclass
class MatrixBuild:
    sections: List[MatrixSection]
    used_permission_ids: Set[int] = field(default_factory=set)


@dataclass
class PermissionMatrix:
    sections: List[MatrixSection]
    unmapped_subjects: List[str]


def _subject(p: Any) -> str:
    return str(getattr(p, "subject", "") or "")


def _sort_key(p: Any) -> Tuple[str, str, str, int]:
    s = _subject(p)
    return (s.casefold(), s, str(getattr(p, "action", "") or ""), int(p.id))


def build_permissions_by_subject(all_permissions: Iterable[Any]) -> Dict[str, List[Any]]:
    out: Dict[str, List[Any]] = {}
    for p in all_permissions:
        out.setdefault(_subject(p).lower(), []).append(p)
    return out


def build_nav_key_to_subjects(subject_nav_keys: SubjectNavKeyMap) -> Dict[str, Set[str]]:
    out: Dict[str, Set[str]] = {}
    for subject, nav_keys in subject_nav_keys.items():
        for key in nav_keys:
            out.setdefault(key, set()).add(subject)
    return out


def build_matrix_item(item: NavItem, section_title: str,
                      nav_key_to_subjects: Dict[str, Set[str]],
                      permissions_by_subject: Dict[str, List[Any]],
                      used_permission_ids: Set[int]) -> Tuple[Optional[MatrixItem], Set[int]]:
    """
    One row for `item`, or None when nothing is left to toggle.
    Returns the row and the used-id set including what this row claimed.
    """
    subjects: Set[str] = set()
    if item.required_permission:
        subjects.add(item.required_permission.subject.lower())
    subjects |= nav_key_to_subjects.get(get_nav_key(section_title, item.label), set())

    unique: Dict[int, Any] = {}
    for subject in subjects:
        for p in permissions_by_subject.get(subject, []):
            if p.id not in used_permission_ids:
                unique.setdefault(p.id, p)

    perms = sorted(unique.values(), key=_sort_key)
    if not perms:
        return None, used_permission_ids

    claimed = used_permission_ids | {p.id for p in perms}
    return MatrixItem(
        label=item.label,
        icon=item.icon,
        permission_ids=[p.id for p in perms],
        related_permissions=perms,
    ), claimed


def _system_section(all_permissions: List[Any], used: Set[int]) -> Optional[MatrixSection]:
    leftover = [p for p in all_permissions if p.id not in used]
    if not leftover:
        return None

    grouped: Dict[str, List[Any]] = {}
    for p in leftover:
        grouped.setdefault(_subject(p), []).append(p)

    items = [
        MatrixItem(
            label=f"{subject} (Sistema)",
            icon=SYSTEM_ITEM_ICON,
            permission_ids=[p.id for p in perms],
            related_permissions=perms,
        )
        for subject, perms in grouped.items()
    ]
    return MatrixSection(
        title=SYSTEM_SECTION_TITLE,
        items=items,
        permission_ids=[pid for i in items for pid in i.permission_ids],
    )


def process_nav_sections(nav_sections: List[NavSection], all_permissions: Iterable[Any],
                         subject_nav_keys: SubjectNavKeyMap) -> MatrixBuild:
    catalog = list(all_permissions)
    permissions_by_subject = build_permissions_by_subject(catalog)
    nav_key_to_subjects = build_nav_key_to_subjects(subject_nav_keys)

    used: Set[int] = set()
    sections: List[MatrixSection] = []

    for section in nav_sections:
        items: List[MatrixItem] = []
        for nav_item in section.items:
            row, used = build_matrix_item(
                nav_item, section.title, nav_key_to_subjects, permissions_by_subject, used)
            if row is not None:
                items.append(row)
        if items:
            sections.append(MatrixSection(
                title=section.title,
                items=items,
                permission_ids=[pid for i in items for pid in i.permission_ids],
            ))

    system = _system_section(catalog, used)
    if system is not None:
        sections.append(system)

    # nav-claimed ids only; the System section holds the complement
    return MatrixBuild(sections=sections, used_permission_ids=used)


def get_unmapped_subjects(all_permissions: Iterable[Any], used_permission_ids: Set[int]) -> List[str]:
    """Lowercased subjects with no permission claimed by a nav item (sorted)."""
    subjects: Set[str] = set()
    used_subjects: Set[str] = set()
    for p in all_permissions:
        s = _subject(p).lower()
        subjects.add(s)
        if p.id in used_permission_ids:
            used_subjects.add(s)
    return sorted(subjects - used_subjects)


def build_permission_matrix(route_tree: Any, all_permissions: Iterable[Any],
                            scoring: Optional[AliasScoring] = None,
                            nav_sections: Optional[List[NavSection]] = None) -> PermissionMatrix:
    catalog = list(all_permissions)
    sections = nav_sections if nav_sections is not None else generate_nav_sections(route_tree)
    subject_nav_keys = build_subject_nav_key_map(route_tree, catalog, scoring=scoring)
    build = process_nav_sections(sections, catalog, subject_nav_keys)
    return PermissionMatrix(
        sections=build.sections,
        unmapped_subjects=get_unmapped_subjects(catalog, build.used_permission_ids),
    )
