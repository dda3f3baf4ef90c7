"""
Settlement service: turns net balances into a short list of transfers.
"""
import logging
from typing import Dict, List, Sequence, Tuple
from splitsync.core.numeric import TOLERANCE, safe
from splitsync.schemas.balance import Balance, Settlement

logger = logging.getLogger(__name__)


def _partition(balances: Sequence[Balance]) -> Tuple[List[Balance], List[Balance]]:
    """Split unsettled balances into creditors (largest first) and debtors (most negative first)."""
    active = [b for b in balances if not b.is_settled]
    creditors = sorted((b for b in active if b.is_positive), key=lambda b: b.amount, reverse=True)
    debtors = sorted((b for b in active if b.is_negative), key=lambda b: b.amount)
    return creditors, debtors


def _transfer(debtor: Balance, creditor: Balance, amount: float) -> Settlement:
    return Settlement(
        from_participant=debtor.participant,
        from_participant_id=debtor.participant_id,
        to_participant=creditor.participant,
        to_participant_id=creditor.participant_id,
        amount=amount,
        currency=creditor.currency
    )


def _greedy(creditors: List[Balance], debtors: List[Balance]) -> List[Settlement]:
    creditors = [b.model_copy() for b in creditors]
    debtors = [b.model_copy() for b in debtors]
    settlements = []

    while creditors and debtors:
        creditor = creditors[0]
        debtor = debtors[0]

        amount = min(creditor.amount, abs(debtor.amount))
        if amount >= TOLERANCE:
            settlements.append(_transfer(debtor, creditor, amount))

        creditor.amount -= amount
        debtor.amount += amount

        # Both sides may drain in the same step
        if creditor.amount < TOLERANCE:
            creditors.pop(0)
        if debtor.amount > -TOLERANCE:
            debtors.pop(0)

    return settlements


def simplify_debts(balances: Sequence[Balance]) -> List[Settlement]:
    """
    Minimize the number of transfers needed to settle debts.
    Uses a greedy algorithm: the largest creditor is paid by the largest
    debtor until one of them is settled. Not globally optimal for every
    input; at most (unsettled participants - 1) transfers are emitted.
    """
    if not balances:
        return []
    creditors, debtors = _partition(balances)
    return _greedy(creditors, debtors)


def _exact_matches_first(balances: Sequence[Balance]) -> List[Settlement]:
    """Pair debtors and creditors with equal magnitudes, then settle the rest greedily."""
    creditors, debtors = _partition(balances)
    settlements = []

    remaining_debtors = []
    for debtor in debtors:
        match = next(
            (c for c in creditors if abs(c.amount + debtor.amount) < TOLERANCE),
            None
        )
        if match is None:
            remaining_debtors.append(debtor)
            continue
        settlements.append(_transfer(debtor, match, match.amount))
        creditors.remove(match)

    settlements.extend(_greedy(creditors, remaining_debtors))
    return settlements


def optimize_settlements(balances: Sequence[Balance]) -> List[Settlement]:
    """Try both strategies and return the one with fewer transfers (greedy on ties)."""
    greedy = simplify_debts(balances)
    matched = _exact_matches_first(balances)
    if len(matched) < len(greedy):
        logger.debug(f"Exact-match strategy saved {len(greedy) - len(matched)} transfers")
        return matched
    return greedy


def apply_settlements(settlements: Sequence[Settlement], balances: Sequence[Balance]) -> Dict[str, float]:
    """Replay transfers: the debtor's balance rises and the creditor's falls."""
    remaining = {b.participant: safe(b.amount, "settlement_service.apply") for b in balances}
    for settlement in settlements:
        remaining[settlement.from_participant] = remaining.get(settlement.from_participant, 0.0) + settlement.amount
        remaining[settlement.to_participant] = remaining.get(settlement.to_participant, 0.0) - settlement.amount
    return remaining


def validate_settlements(settlements: Sequence[Settlement], balances: Sequence[Balance]) -> bool:
    """True when applying every transfer leaves all balances within a cent of zero."""
    return all(abs(amount) < TOLERANCE for amount in apply_settlements(settlements, balances).values())
