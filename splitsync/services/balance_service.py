"""
Balance service: net position of every group participant.

Balances are rebuilt from the full expense list on every call and never
maintained incrementally.
"""
import logging
from typing import Dict, List, Sequence
from splitsync.core.numeric import EPSILON, TOLERANCE, safe, safe_divide, safe_sum
from splitsync.core.utils import new_id
from splitsync.schemas.balance import Balance, GroupSummary, ParticipantBalance
from splitsync.schemas.expense import Expense, ExpenseCategory
from splitsync.schemas.group import Group
from splitsync.services.split_service import resolve_split
from splitsync.services.settlement_service import simplify_debts

logger = logging.getLogger(__name__)


def _seed_accumulators(group: Group) -> Dict[str, ParticipantBalance]:
    accumulators: Dict[str, ParticipantBalance] = {}
    for participant in group.participants:
        if participant.name in accumulators:
            continue
        accumulators[participant.name] = ParticipantBalance(
            participant=participant.name,
            participant_id=participant.id or new_id(),
            currency=group.currency
        )
    return accumulators


def _owed_amounts(expense: Expense, group: Group) -> Dict[str, float]:
    """
    Resolve one expense against the group roster.

    An empty split falls back to an equal split across the whole roster.
    Any gap between the owed amounts and the total, whether from rounding
    or from names outside the roster, is pushed onto the first roster
    participant so balances always net to zero.
    """
    total = safe(expense.total_amount, "balance_service.total_amount")
    roster = group.participant_names

    owed = resolve_split(expense)
    if not owed:
        per_person = safe_divide(total, len(roster), "balance_service.fallback_equal")
        owed = {name: per_person for name in roster}

    owed = {name: amount for name, amount in owed.items() if name in roster}
    diff = total - sum(owed.values())
    if abs(diff) > EPSILON and roster:
        first = roster[0]
        owed[first] = owed.get(first, 0.0) + diff
    return owed


def _accumulate(group: Group, expenses: Sequence[Expense]) -> Dict[str, ParticipantBalance]:
    accumulators = _seed_accumulators(group)
    for expense in expenses:
        payer = accumulators.get(expense.paid_by)
        if payer is None:
            logger.warning(
                f"Skipping expense {expense.id}: payer '{expense.paid_by}' is not in group {group.id}"
            )
            continue
        payer.total_paid += safe(expense.total_amount, "balance_service.total_paid")

        for name, amount in _owed_amounts(expense, group).items():
            accumulators[name].total_owed += amount
    return accumulators


def calculate_net_balances(group: Group, expenses: Sequence[Expense]) -> List[Balance]:
    """
    Net balance per group participant (paid - owed), sorted by descending
    absolute amount. Ties keep roster order.
    """
    if not group.participants:
        return []

    accumulators = _accumulate(group, expenses)
    balances = [
        Balance(
            participant=acc.participant,
            participant_id=acc.participant_id,
            amount=safe(acc.net_balance, "balance_service.net_balance"),
            currency=group.currency
        )
        for acc in accumulators.values()
    ]
    return sorted(balances, key=lambda b: abs(b.amount), reverse=True)


def calculate_participant_balances(group: Group, expenses: Sequence[Expense]) -> List[ParticipantBalance]:
    """Paid / owed breakdown per participant, sorted by name."""
    accumulators = _accumulate(group, expenses)
    return sorted(accumulators.values(), key=lambda acc: acc.participant)


def validate_balances(balances: Sequence[Balance]) -> bool:
    """Balances must sum to approximately zero."""
    total = safe_sum((b.amount for b in balances), "balance_service.validate_balances")
    return abs(total) < TOLERANCE


def recalculate_total_spent(expenses: Sequence[Expense]) -> float:
    return safe_sum((e.total_amount for e in expenses), "balance_service.recalculate_total_spent")


def calculate_group_summary(group: Group, expenses: Sequence[Expense]) -> GroupSummary:
    """Total spent, average per person, expense count and settlement count."""
    if not expenses:
        return GroupSummary()

    total_spent = safe_sum(
        (e.total_amount for e in expenses if safe(e.total_amount, "balance_service.summary") >= 0),
        "balance_service.summary.total_spent"
    )
    average = 0.0
    if group.participant_count > 0 and total_spent > 0:
        average = safe_divide(total_spent, group.participant_count, "balance_service.summary.average_per_person")

    settlements = simplify_debts(calculate_net_balances(group, expenses))
    return GroupSummary(
        total_spent=total_spent,
        average_per_person=average,
        expense_count=len(expenses),
        total_transactions=len(settlements)
    )


def calculate_category_totals(expenses: Sequence[Expense]) -> Dict[ExpenseCategory, float]:
    totals: Dict[ExpenseCategory, float] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0.0) + safe(
            expense.total_amount, "balance_service.category_totals"
        )
    return totals


def analyze_expense_distribution(expenses: Sequence[Expense], participants: Sequence[str]) -> Dict[str, float]:
    """Total owed per participant across expenses, seeded with zero for everyone listed."""
    distribution = {name: 0.0 for name in participants}
    for expense in expenses:
        for name, amount in resolve_split(expense).items():
            distribution[name] = distribution.get(name, 0.0) + amount
    return distribution
