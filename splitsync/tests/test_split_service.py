"""
Tests for split resolution and expense validation.
"""
import pytest
from splitsync.schemas.expense import Expense, ParticipantSplit, SplitType
from splitsync.services.split_service import (
    add_participant, amount_owed_by, equal_split_amount, expense_validation_errors, generate_equal_splits,
    is_valid_expense, net_amount_for, remove_participant, resolve_split,
    update_split_for_participant
)


def make_expense(**overrides):
    data = dict(
        group_id="G1",
        description="Dinner",
        total_amount=30.0,
        paid_by="A",
        participant_names=["A", "B", "C"]
    )
    data.update(overrides)
    return Expense(**data)


def test_equal_split_divides_total():
    assert resolve_split(make_expense()) == {"A": 10.0, "B": 10.0, "C": 10.0}


def test_equal_split_residual_lands_on_first_participant():
    owed = resolve_split(make_expense(total_amount=100.0))
    assert owed == {"A": 33.34, "B": 33.33, "C": 33.33}
    assert sum(owed.values()) == pytest.approx(100.0)


def test_equal_split_without_participants_is_empty():
    assert resolve_split(make_expense(participant_names=[])) == {}


def test_percentage_split_sums_to_total():
    expense = make_expense(
        total_amount=100.0,
        split_type=SplitType.PERCENTAGE,
        custom_splits=[
            ParticipantSplit(participant_name="A", percentage=33.33),
            ParticipantSplit(participant_name="B", percentage=33.33),
            ParticipantSplit(participant_name="C", percentage=33.34),
        ]
    )
    owed = resolve_split(expense)
    assert owed == {"A": 33.33, "B": 33.33, "C": 33.34}
    assert round(sum(owed.values()), 2) == 100.00


def test_custom_split_uses_amounts():
    expense = make_expense(
        split_type=SplitType.CUSTOM,
        custom_splits=[
            ParticipantSplit(participant_name="A", amount=5.0),
            ParticipantSplit(participant_name="B", amount=25.0),
        ]
    )
    assert resolve_split(expense) == {"A": 5.0, "B": 25.0}
    assert amount_owed_by(expense, "C") == 0.0


def test_invalid_custom_split_is_returned_uncorrected():
    expense = make_expense(
        split_type=SplitType.CUSTOM,
        custom_splits=[ParticipantSplit(participant_name="A", amount=5.0)]
    )
    assert resolve_split(expense) == {"A": 5.0}
    assert "Custom split amounts must add up to total amount" in expense_validation_errors(expense)


def test_invalid_custom_split_keeps_sub_cent_amounts():
    expense = make_expense(
        total_amount=10.0156,
        split_type=SplitType.CUSTOM,
        custom_splits=[ParticipantSplit(participant_name="B", amount=10.0052)]
    )
    assert resolve_split(expense) == {"B": 10.0052}


def test_nan_total_resolves_to_zeros():
    owed = resolve_split(make_expense(total_amount=float("nan")))
    assert owed == {"A": 0.0, "B": 0.0, "C": 0.0}


def test_net_amount_for_payer():
    expense = make_expense()
    assert net_amount_for(expense, "A") == 20.0
    assert net_amount_for(expense, "B") == -10.0


def test_validation_errors():
    expense = make_expense(description=" ", total_amount=0, paid_by="", participant_names=[])
    errors = expense_validation_errors(expense)
    assert "Description cannot be empty" in errors
    assert "Amount must be greater than 0" in errors
    assert "Payer cannot be empty" in errors
    assert "Must have at least one participant" in errors


def test_percentage_validation():
    expense = make_expense(
        split_type=SplitType.PERCENTAGE,
        custom_splits=[ParticipantSplit(participant_name="A", percentage=50)]
    )
    assert not is_valid_expense(expense)


def test_generate_equal_splits_keeps_ids():
    expense = make_expense(
        split_type=SplitType.CUSTOM,
        custom_splits=[ParticipantSplit(participant_name="A", participant_id="ID-A", amount=30.0)]
    )
    splits = generate_equal_splits(expense)
    assert [s.participant_name for s in splits] == ["A", "B", "C"]
    assert splits[0].participant_id == "ID-A"
    assert all(s.amount == 10.0 for s in splits)


def test_add_and_remove_participant_reset_custom_splits():
    expense = make_expense(
        split_type=SplitType.CUSTOM,
        custom_splits=[ParticipantSplit(participant_name="A", amount=30.0)]
    )
    assert add_participant(expense, "D")
    assert len(expense.custom_splits) == 4
    assert not add_participant(expense, "D")

    assert remove_participant(expense, "A")
    assert [s.participant_name for s in expense.custom_splits] == ["B", "C", "D"]
    assert sum(s.amount for s in expense.custom_splits) == pytest.approx(30.0)


def test_update_split_for_participant():
    expense = make_expense(split_type=SplitType.CUSTOM)
    split = update_split_for_participant(expense, "B", amount=12.0)
    assert split.amount == 12.0
    assert update_split_for_participant(expense, "Z", amount=1.0) is None


def test_equal_split_amount_guards_empty_list():
    assert equal_split_amount(make_expense()) == 10.0
    assert equal_split_amount(make_expense(participant_names=[])) == 0.0
