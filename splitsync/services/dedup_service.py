"""
Deduplication service for groups and expenses.

Retried creates under flaky connectivity can leave several near-identical
records behind. Matching is deliberately approximate.
"""
import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence
from splitsync.core.numeric import safe
from splitsync.core.utils import normalize_name
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group

logger = logging.getLogger(__name__)

# Participant overlap thresholds
CREATE_THRESHOLD = 0.75
LIST_THRESHOLD = 0.8

EXPENSE_WINDOW = timedelta(minutes=5)


def participant_overlap(first: Iterable[str], second: Iterable[str]) -> float:
    """
    Jaccard overlap (intersection / union) of two participant name sets,
    compared trimmed and case-insensitively. Two empty sets overlap 0.
    """
    set1 = {normalize_name(name) for name in first}
    set2 = {normalize_name(name) for name in second}
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def is_similar_group(
    name: str,
    participants: Iterable[str],
    other: Group,
    threshold: float = LIST_THRESHOLD
) -> bool:
    if normalize_name(name) != normalize_name(other.name):
        return False
    return participant_overlap(participants, other.participant_names) >= threshold


def find_duplicate_group(
    name: str,
    participants: Sequence[str],
    groups: Iterable[Group],
    threshold: float = CREATE_THRESHOLD
) -> Optional[Group]:
    """Existing group that a new group with this name and roster would duplicate."""
    for group in groups:
        if is_similar_group(name, participants, group, threshold):
            return group
    return None


def deduplicate_groups(groups: Sequence[Group], threshold: float = LIST_THRESHOLD) -> List[Group]:
    """
    Collapse groups sharing an id or looking alike, keeping the one with the
    later last_activity. Survivors keep their input order, and running the
    pass again on its own output changes nothing.
    """
    by_recency = sorted(
        enumerate(groups), key=lambda item: item[1].last_activity, reverse=True
    )
    kept_ids = set()
    kept: List[tuple] = []

    for index, group in by_recency:
        if group.id in kept_ids:
            continue
        if any(is_similar_group(group.name, group.participant_names, other, threshold) for _, other in kept):
            continue
        kept_ids.add(group.id)
        kept.append((index, group))

    if len(kept) != len(groups):
        logger.info(f"Deduplicated {len(groups)} groups to {len(kept)} unique groups")
    return [group for _, group in sorted(kept, key=lambda item: item[0])]


def is_duplicate_expense(
    candidate: Expense,
    existing: Expense,
    window: timedelta = EXPENSE_WINDOW
) -> bool:
    """Same group, description and amount, created within the window."""
    if candidate.id == existing.id:
        return False
    if candidate.group_id != existing.group_id:
        return False
    if candidate.description.strip() != existing.description.strip():
        return False
    if abs(safe(candidate.total_amount, "dedup.candidate") - safe(existing.total_amount, "dedup.existing")) >= 0.005:
        return False
    return abs(candidate.date - existing.date) <= window


def find_duplicate_expense(
    candidate: Expense,
    expenses: Iterable[Expense],
    window: timedelta = EXPENSE_WINDOW
) -> Optional[Expense]:
    for existing in expenses:
        if is_duplicate_expense(candidate, existing, window):
            return existing
    return None
