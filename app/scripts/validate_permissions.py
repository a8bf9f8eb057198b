# app/scripts/validate_permissions.py
"""
CI check: every permission subject used by the route tree (or the API-only
list) must be one the backend knows about.

    python -m app.scripts.validate_permissions [--strict]
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from app.navigation.nav_generator import find_routes_missing_nav
from app.navigation.route_data import API_PERMISSIONS, BACKEND_SUBJECTS, ROUTE_DATA
from app.services.permission_sync import collect_route_subjects


@dataclass
class ValidationReport:
    undefined: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    unused: List[str] = field(default_factory=list)
    missing_nav: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.undefined


def validate(route_tree: Any = None,
             api_permissions: Optional[Iterable[Dict[str, str]]] = None,
             backend_subjects: Optional[Iterable[str]] = None) -> ValidationReport:
    tree = ROUTE_DATA if route_tree is None else route_tree
    api = list(API_PERMISSIONS if api_permissions is None else api_permissions)
    backend = list(BACKEND_SUBJECTS if backend_subjects is None else backend_subjects)

    used = collect_route_subjects(tree) | {p["subject"] for p in api}
    known = set(backend)

    seen = set()
    duplicates = []
    for s in backend:
        if s in seen and s not in duplicates:
            duplicates.append(s)
        seen.add(s)

    return ValidationReport(
        undefined=sorted(used - known),
        duplicates=duplicates,
        unused=sorted(known - used),
        missing_nav=find_routes_missing_nav(tree),
    )


def print_report(report: ValidationReport) -> None:
    if report.undefined:
        print("CRITICAL: permissions used in routes but NOT defined in backend:")
        for s in report.undefined:
            print(f"   - {s}")
    else:
        print("All route permissions are defined in backend")

    if report.duplicates:
        print("\nWARNING: duplicate subjects in backend list:")
        for s in report.duplicates:
            print(f"   - {s}")

    if report.unused:
        print("\nDefined but not used by any route (may be checked per component/API):")
        for s in report.unused:
            print(f"   - {s}")

    if report.missing_nav:
        print("\nRoutes without nav metadata:")
        for p in report.missing_nav:
            print(f"   - {p}")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Validate route permissions against backend subjects.")
    ap.add_argument("--strict", action="store_true",
                    help="Also fail on duplicate backend subjects")
    args = ap.parse_args(argv)

    report = validate()
    print_report(report)

    if not report.ok:
        return 1
    if args.strict and report.duplicates:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
