# app/services/subject_mapping.py
"""
Permission subject -> navigation location mapping.

1. build_subject_nav_key_map walks the route tree and records, for every
   route that has a permission and an active nav context (its own nav or the
   nearest ancestor's), "section::label" under subject.lower().
2. add_inferred_aliases fills in catalog subjects no route declares by
   borrowing the nav keys of the most similar mapped subject.

Scoring constants are heuristics; only their relative order is a contract
(substring > every candidate token matched > some tokens matched > nothing).
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from app.navigation.route_tree import as_roots, route_children, route_nav, route_permission

logger = logging.getLogger(__name__)

NAV_KEY_SEPARATOR = "::"

SubjectNavKeyMap = Dict[str, Set[str]]

# cap on the per-token bonus so token scores stay inside their band
MAX_TOKEN_BONUS = 99

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[_\-]+")


@dataclass(frozen=True)
class AliasScoring:
    substring_base: int = 1000
    full_token_base: int = 500
    partial_min_length: int = 6
    min_score: int = 2

    def __post_init__(self) -> None:
        # full-token scores must stay below substring scores, partial below full-token
        if self.full_token_base <= MAX_TOKEN_BONUS:
            raise ValueError(f"alias full_token_base must be > {MAX_TOKEN_BONUS}")
        if self.substring_base <= self.full_token_base + MAX_TOKEN_BONUS:
            raise ValueError(
                f"alias substring_base must be > full_token_base + {MAX_TOKEN_BONUS}")
        if self.min_score < 1:
            raise ValueError("alias min_score must be >= 1")
        if self.partial_min_length < 0:
            raise ValueError("alias partial_min_length must be >= 0")


DEFAULT_ALIAS_SCORING = AliasScoring()


def alias_scoring_from_settings() -> AliasScoring:
    from app.core.config import settings

    return AliasScoring(
        substring_base=settings.ALIAS_SUBSTRING_BASE,
        full_token_base=settings.ALIAS_FULL_TOKEN_BASE,
        partial_min_length=settings.ALIAS_PARTIAL_MIN_LENGTH,
        min_score=settings.ALIAS_MIN_SCORE,
    )


# -------------------------
# Nav keys
# -------------------------

def get_nav_key(section: str, label: str) -> str:
    return f"{section}{NAV_KEY_SEPARATOR}{label}"


def split_nav_key(nav_key: str) -> Tuple[str, str]:
    section, _, label = nav_key.partition(NAV_KEY_SEPARATOR)
    return section, label


# -------------------------
# Route walk
# -------------------------

def _walk(node: Any, active_nav: Optional[Mapping[str, Any]], mapping: SubjectNavKeyMap,
          display: Dict[str, str]) -> None:
    current_nav = route_nav(node) or active_nav
    perm = route_permission(node)

    if perm and current_nav:
        subject = perm["subject"]
        key = get_nav_key(str(current_nav["section"]), str(current_nav["label"]))
        mapping.setdefault(subject.lower(), set()).add(key)
        display.setdefault(subject.lower(), subject)

    for child in route_children(node):
        _walk(child, current_nav, mapping, display)


def collect_route_nav_keys(route_tree: Any) -> Tuple[SubjectNavKeyMap, Dict[str, str]]:
    """
    Direct mapping only (no aliases), plus lowercased subject -> subject as
    declared on the route (used for tokenizing).
    """
    mapping: SubjectNavKeyMap = {}
    display: Dict[str, str] = {}
    for root in as_roots(route_tree):
        _walk(root, None, mapping, display)
    return mapping, display


def build_subject_nav_key_map(route_tree: Any, all_permissions: Iterable[Any],
                              scoring: Optional[AliasScoring] = None) -> SubjectNavKeyMap:
    mapping, display = collect_route_nav_keys(route_tree)
    return add_inferred_aliases(mapping, all_permissions, scoring=scoring, display=display)


# -------------------------
# Alias inference
# -------------------------

def tokenize_subject(subject: str) -> List[str]:
    """'SupplyRequest' -> ['supply', 'request']; 'inventory_item' -> ['inventory', 'item']."""
    normalized = _CAMEL_BOUNDARY.sub(r"\1 \2", subject or "")
    normalized = _SEPARATORS.sub(" ", normalized).lower()
    return [t for t in normalized.split(" ") if t]


def score_candidate_subject(subject: str, subject_tokens: List[str], candidate: str,
                            candidate_tokens: List[str],
                            scoring: AliasScoring = DEFAULT_ALIAS_SCORING) -> int:
    subject_lower = subject.lower()
    candidate_lower = candidate.lower()

    if candidate_lower and candidate_lower in subject_lower:
        return scoring.substring_base + len(candidate_lower)

    if not candidate_tokens:
        return 0

    match_count = sum(1 for t in candidate_tokens if t in subject_tokens)
    if match_count == len(candidate_tokens):
        return scoring.full_token_base + min(match_count, MAX_TOKEN_BONUS)

    if match_count > 0 and len(candidate_lower) >= scoring.partial_min_length:
        return min(match_count, MAX_TOKEN_BONUS)

    return 0


def find_best_mapped_subject(subject: str, subject_tokens: List[str],
                             candidate_tokens: Mapping[str, List[str]],
                             scoring: AliasScoring = DEFAULT_ALIAS_SCORING) -> Optional[str]:
    """Highest scoring candidate (first one wins ties); None below scoring.min_score."""
    best: Optional[str] = None
    best_score = 0
    for candidate, tokens in candidate_tokens.items():
        score = score_candidate_subject(subject, subject_tokens, candidate, tokens, scoring)
        if score > best_score:
            best, best_score = candidate, score

    if best is None or best_score < scoring.min_score:
        return None
    return best


def add_inferred_aliases(mapping: SubjectNavKeyMap, all_permissions: Iterable[Any],
                         scoring: Optional[AliasScoring] = None,
                         display: Optional[Mapping[str, str]] = None) -> SubjectNavKeyMap:
    """
    Give every catalog subject missing from `mapping` a copy of the nav keys of
    its best lexical match. Mutates and returns `mapping`.
    """
    scoring = scoring or DEFAULT_ALIAS_SCORING
    forms: Dict[str, str] = dict(display or {})

    known: Dict[str, str] = {}
    for p in all_permissions:
        subject = str(getattr(p, "subject", "") or "")
        if subject:
            known.setdefault(subject.lower(), subject)
            forms.setdefault(subject.lower(), subject)

    candidates = {s: tokenize_subject(forms.get(s, s)) for s in list(mapping.keys())}

    for subject_lower, subject in known.items():
        if subject_lower in mapping:
            continue
        best = find_best_mapped_subject(subject, tokenize_subject(subject), candidates, scoring)
        if best is None:
            logger.debug("No nav alias for subject %r", subject)
            continue
        mapping[subject_lower] = set(mapping[best])
        logger.debug("Subject %r borrows nav keys of %r", subject, best)

    return mapping
