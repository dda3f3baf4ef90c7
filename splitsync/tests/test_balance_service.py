"""
Tests for balance aggregation and group summaries.
"""
import pytest
from splitsync.schemas.expense import Expense, ExpenseCategory, ParticipantSplit, SplitType
from splitsync.schemas.group import Group, Participant
from splitsync.services.balance_service import (
    analyze_expense_distribution, calculate_category_totals, calculate_group_summary,
    calculate_net_balances, calculate_participant_balances, recalculate_total_spent,
    validate_balances
)
from splitsync.services.settlement_service import simplify_debts


@pytest.fixture
def group():
    return Group(
        id="G1",
        name="Trip",
        participants=[
            Participant(name="A", id="ID-A"),
            Participant(name="B", id="ID-B"),
            Participant(name="C", id="ID-C"),
        ]
    )


def expense(**overrides):
    data = dict(group_id="G1", description="Dinner", total_amount=30.0, paid_by="A",
                participant_names=["A", "B", "C"])
    data.update(overrides)
    return Expense(**data)


def as_dict(balances):
    return {b.participant: b.amount for b in balances}


def test_single_equal_expense(group):
    balances = calculate_net_balances(group, [expense()])
    assert as_dict(balances) == {"A": 20.0, "B": -10.0, "C": -10.0}
    assert [b.participant for b in balances] == ["A", "B", "C"]
    assert balances[0].participant_id == "ID-A"

    settlements = simplify_debts(balances)
    assert [(s.from_participant, s.to_participant, s.amount) for s in settlements] == [
        ("B", "A", 10.0),
        ("C", "A", 10.0),
    ]


def test_balances_are_conserved(group):
    expenses = [
        expense(total_amount=100.0),
        expense(total_amount=47.13, paid_by="B", participant_names=["B", "C"]),
        expense(
            total_amount=60.0, paid_by="C", split_type=SplitType.PERCENTAGE,
            custom_splits=[
                ParticipantSplit(participant_name="A", percentage=50),
                ParticipantSplit(participant_name="B", percentage=25),
                ParticipantSplit(participant_name="C", percentage=25),
            ]
        ),
    ]
    balances = calculate_net_balances(group, expenses)
    assert abs(sum(b.amount for b in balances)) <= 0.01
    assert validate_balances(balances)


def test_sub_cent_gaps_do_not_accumulate():
    pair = Group(id="G1", name="Pair", participants=[Participant(name="A"), Participant(name="B")])
    expenses = [
        expense(
            total_amount=10.0156, split_type=SplitType.CUSTOM, participant_names=["A", "B"],
            custom_splits=[ParticipantSplit(participant_name="B", amount=10.0052)]
        )
        for _ in range(3)
    ]
    balances = calculate_net_balances(pair, expenses)
    assert sum(b.amount for b in balances) == pytest.approx(0.0, abs=1e-9)
    assert validate_balances(balances)


def test_percentages_that_miss_the_total_still_net_to_zero(group):
    expenses = [
        expense(
            total_amount=33.33, paid_by="B", split_type=SplitType.PERCENTAGE,
            custom_splits=[
                ParticipantSplit(participant_name="B", percentage=33.3),
                ParticipantSplit(participant_name="C", percentage=66.6),
            ]
        )
        for _ in range(5)
    ]
    balances = calculate_net_balances(group, expenses)
    assert sum(b.amount for b in balances) == pytest.approx(0.0, abs=1e-9)


def test_empty_split_falls_back_to_roster(group):
    balances = calculate_net_balances(group, [expense(participant_names=[])])
    assert as_dict(balances) == {"A": 20.0, "B": -10.0, "C": -10.0}


def test_unknown_split_names_go_to_first_participant(group):
    balances = calculate_net_balances(group, [expense(participant_names=["B", "Z"])])
    # Z's share is not dropped; it lands on the first roster participant
    assert as_dict(balances) == {"A": 15.0, "B": -15.0, "C": 0.0}
    assert validate_balances(balances)


def test_expense_with_unknown_payer_is_skipped(group):
    balances = calculate_net_balances(group, [expense(paid_by="Z")])
    assert as_dict(balances) == {"A": 0.0, "B": 0.0, "C": 0.0}


def test_nan_amount_is_treated_as_zero(group):
    balances = calculate_net_balances(group, [expense(total_amount=float("nan"))])
    assert all(b.amount == 0.0 for b in balances)


def test_empty_group_has_no_balances():
    assert calculate_net_balances(Group(name="Empty"), [expense()]) == []


def test_participant_balances_sorted_by_name(group):
    details = calculate_participant_balances(group, [expense(paid_by="C")])
    assert [d.participant for d in details] == ["A", "B", "C"]
    assert details[2].total_paid == 30.0
    assert details[2].net_balance == 20.0


def test_summary_of_empty_group_has_zero_average():
    summary = calculate_group_summary(Group(name="Empty"), [])
    assert summary.average_per_person == 0
    assert summary.total_spent == 0
    assert summary.expense_count == 0


def test_summary_without_participants_is_not_nan():
    summary = calculate_group_summary(Group(name="Empty"), [expense()])
    assert summary.average_per_person == 0.0
    assert summary.total_spent == 30.0


def test_summary(group):
    summary = calculate_group_summary(group, [expense(), expense(total_amount=60.0, paid_by="B")])
    assert summary.total_spent == 90.0
    assert summary.average_per_person == 30.0
    assert summary.expense_count == 2
    assert summary.total_transactions == 1


def test_totals_and_distribution():
    expenses = [
        expense(category=ExpenseCategory.FOOD),
        expense(total_amount=12.0, category=ExpenseCategory.FOOD),
        expense(total_amount=float("inf"), category=ExpenseCategory.TRAVEL),
    ]
    assert recalculate_total_spent(expenses) == 42.0
    totals = calculate_category_totals(expenses)
    assert totals[ExpenseCategory.FOOD] == 42.0
    assert totals[ExpenseCategory.TRAVEL] == 0.0

    distribution = analyze_expense_distribution(expenses[:2], ["A", "B", "C", "D"])
    assert distribution == {"A": 14.0, "B": 14.0, "C": 14.0, "D": 0.0}
