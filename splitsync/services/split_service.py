"""
Split service: resolves how much each participant owes for one expense.
"""
import logging
from typing import Dict, List, Optional
from splitsync.core.numeric import TOLERANCE, round_cents, safe, safe_divide, safe_sum
from splitsync.core.utils import new_id
from splitsync.schemas.expense import Expense, ParticipantSplit, SplitType

logger = logging.getLogger(__name__)


def resolve_split(expense: Expense) -> Dict[str, float]:
    """
    Resolve the owed amount per participant name.

    Equal splits divide the total across participant_names (an empty list
    gives an empty mapping; callers fall back to the group roster).
    Percentage and custom splits read custom_splits. When the entries add up
    to the total, amounts are rounded to cents and the rounding residual is
    pushed onto the first participant so the values sum to total_amount.
    Entries that do not add up are returned unrounded, as encoded. Never raises.
    """
    total = safe(expense.total_amount, "split_service.resolve_split.total")
    raw: Dict[str, float] = {}

    if expense.split_type == SplitType.EQUAL:
        names = expense.participant_names
        if not names:
            return {}
        per_person = safe_divide(total, len(names), "split_service.resolve_split.equal")
        for name in names:
            raw[name] = per_person

    elif expense.split_type == SplitType.PERCENTAGE:
        for split in expense.custom_splits:
            percentage = safe(split.percentage, "split_service.resolve_split.percentage")
            raw[split.participant_name] = safe(
                total * (percentage / 100.0), "split_service.resolve_split.percentage_amount"
            )

    elif expense.split_type == SplitType.CUSTOM:
        for split in expense.custom_splits:
            raw[split.participant_name] = safe(split.amount, "split_service.resolve_split.custom")

    return _correct_residual(raw, total)


def _correct_residual(raw: Dict[str, float], total: float) -> Dict[str, float]:
    if not raw:
        return {}

    if abs(total - sum(raw.values())) > TOLERANCE:
        # Entries violate their precondition; validation reports it elsewhere
        return dict(raw)

    resolved = {name: round_cents(amount) for name, amount in raw.items()}
    residual = round(total - sum(resolved.values()), 2)
    if residual:
        first = next(iter(resolved))
        resolved[first] = round(resolved[first] + residual, 2)
    return resolved


def amount_owed_by(expense: Expense, participant: str) -> float:
    return resolve_split(expense).get(participant, 0.0)


def amount_paid_by(expense: Expense, participant: str) -> float:
    if participant != expense.paid_by:
        return 0.0
    return safe(expense.total_amount, "split_service.amount_paid_by")


def net_amount_for(expense: Expense, participant: str) -> float:
    """What this expense contributes to one participant's balance."""
    return amount_paid_by(expense, participant) - amount_owed_by(expense, participant)


def equal_split_amount(expense: Expense) -> float:
    return safe_divide(expense.total_amount, expense.participant_count, "split_service.equal_split_amount")


def generate_equal_splits(expense: Expense) -> List[ParticipantSplit]:
    """Replace custom_splits with an equal share (amount and percentage) per participant."""
    existing_ids = {s.participant_name: s.participant_id for s in expense.custom_splits}
    expense.custom_splits = []
    if not expense.participant_names:
        return expense.custom_splits

    count = len(expense.participant_names)
    amount = safe_divide(expense.total_amount, count, "split_service.generate_equal_splits.amount")
    percentage = safe_divide(100.0, count, "split_service.generate_equal_splits.percentage")
    for name in expense.participant_names:
        expense.custom_splits.append(ParticipantSplit(
            participant_name=name,
            participant_id=existing_ids.get(name) or new_id(),
            amount=amount,
            percentage=percentage
        ))
    return expense.custom_splits


def update_split_for_participant(
    expense: Expense,
    participant: str,
    amount: Optional[float] = None,
    percentage: Optional[float] = None
) -> Optional[ParticipantSplit]:
    """Set the custom amount and/or percentage of one participant, adding an entry if needed."""
    for split in expense.custom_splits:
        if split.participant_name == participant:
            if amount is not None:
                split.amount = amount
            if percentage is not None:
                split.percentage = percentage
            return split

    if participant not in expense.participant_names:
        return None
    split = ParticipantSplit(
        participant_name=participant,
        amount=amount or 0.0,
        percentage=percentage or 0.0
    )
    expense.custom_splits.append(split)
    return split


def add_participant(expense: Expense, participant: str) -> bool:
    """Include a participant; non-equal splits are reset to equal shares."""
    if not participant or expense.contains(participant):
        return False
    expense.participant_names.append(participant)
    if expense.split_type != SplitType.EQUAL:
        generate_equal_splits(expense)
    return True


def remove_participant(expense: Expense, participant: str) -> bool:
    if not expense.contains(participant):
        return False
    expense.participant_names = [n for n in expense.participant_names if n != participant]
    expense.custom_splits = [s for s in expense.custom_splits if s.participant_name != participant]
    if expense.split_type != SplitType.EQUAL and expense.participant_names:
        generate_equal_splits(expense)
    return True


def expense_validation_errors(expense: Expense) -> List[str]:
    """Human-readable problems that make an expense unsavable."""
    errors = []

    if not expense.description.strip():
        errors.append("Description cannot be empty")
    if not expense.group_id:
        errors.append("Expense must belong to a group")
    if safe(expense.total_amount, "split_service.validate.total") <= 0:
        errors.append("Amount must be greater than 0")
    if not expense.paid_by.strip():
        errors.append("Payer cannot be empty")
    if not expense.participant_names:
        errors.append("Must have at least one participant")

    if expense.split_type == SplitType.PERCENTAGE:
        total_percentage = safe_sum((s.percentage for s in expense.custom_splits), "split_service.validate.percentage")
        if abs(total_percentage - 100.0) >= TOLERANCE:
            errors.append("Percentages must add up to 100%")
    elif expense.split_type == SplitType.CUSTOM:
        total_split = safe_sum((s.amount for s in expense.custom_splits), "split_service.validate.custom")
        if abs(total_split - expense.total_amount) >= TOLERANCE:
            errors.append("Custom split amounts must add up to total amount")

    return errors


def is_valid_expense(expense: Expense) -> bool:
    return not expense_validation_errors(expense)
