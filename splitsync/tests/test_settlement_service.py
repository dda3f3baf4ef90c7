"""
Tests for settlement generation.
"""
import random
import pytest
from splitsync.schemas.balance import Balance
from splitsync.services.settlement_service import (
    apply_settlements, optimize_settlements, simplify_debts, validate_settlements
)


def balances_of(**amounts):
    return [Balance(participant=name, participant_id=f"ID-{name}", amount=amount) for name, amount in amounts.items()]


def test_no_balances_no_settlements():
    assert simplify_debts([]) == []
    assert simplify_debts(balances_of(A=0.0, B=0.004)) == []


def test_largest_creditor_paid_by_largest_debtor():
    settlements = simplify_debts(balances_of(A=50.0, B=-30.0, C=-20.0, D=0.0))
    assert [(s.from_participant, s.to_participant, s.amount) for s in settlements] == [
        ("B", "A", 30.0),
        ("C", "A", 20.0),
    ]
    assert settlements[0].from_participant_id == "ID-B"
    assert settlements[0].description == "B owes A $30.00"


def test_input_balances_are_not_mutated():
    balances = balances_of(A=10.0, B=-10.0)
    simplify_debts(balances)
    assert balances[0].amount == 10.0
    assert balances[1].amount == -10.0


def test_settlements_clear_all_balances():
    rng = random.Random(7)
    for _ in range(50):
        amounts = [float(rng.randint(-100, 100)) for _ in range(rng.randint(2, 8))]
        amounts.append(-sum(amounts))
        balances = [Balance(participant=f"P{i}", participant_id=str(i), amount=a) for i, a in enumerate(amounts)]

        settlements = simplify_debts(balances)
        assert validate_settlements(settlements, balances)
        unsettled = [b for b in balances if abs(b.amount) >= 0.01]
        assert len(settlements) <= max(len(unsettled) - 1, 0)
        assert all(s.amount >= 0.01 for s in settlements)


def test_optimize_prefers_exact_matches():
    balances = balances_of(A=10.0, B=7.0, C=-7.0, D=-10.0)
    greedy = simplify_debts(balances)
    optimized = optimize_settlements(balances)
    assert len(optimized) <= len(greedy)
    assert validate_settlements(optimized, balances)
    assert {(s.from_participant, s.to_participant) for s in optimized} == {("D", "A"), ("C", "B")}


def test_apply_settlements():
    balances = balances_of(A=20.0, B=-20.0)
    remaining = apply_settlements(simplify_debts(balances), balances)
    assert remaining == {"A": pytest.approx(0.0), "B": pytest.approx(0.0)}
