"""
Pydantic schemas for derived balances and settlements.
"""
from pydantic import BaseModel
from typing import List
from splitsync.core.numeric import TOLERANCE
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group
from splitsync.services.fx_service import format_currency


class Balance(BaseModel):
    """Net position of one participant: positive is owed to them, negative they owe."""
    participant: str
    participant_id: str
    amount: float
    currency: str = "USD"

    @property
    def is_positive(self) -> bool:
        return self.amount > TOLERANCE

    @property
    def is_negative(self) -> bool:
        return self.amount < -TOLERANCE

    @property
    def is_settled(self) -> bool:
        return abs(self.amount) < TOLERANCE

    @property
    def formatted_amount(self) -> str:
        return format_currency(abs(self.amount), self.currency)

    @property
    def signed_formatted_amount(self) -> str:
        sign = "+" if self.is_positive else ("-" if self.is_negative else "")
        return f"{sign}{self.formatted_amount}"

    @property
    def status_description(self) -> str:
        if self.is_settled:
            return "Settled"
        if self.is_positive:
            return "Should receive"
        return "Should pay"


class ParticipantBalance(BaseModel):
    """Paid / owed breakdown for one participant."""
    participant: str
    participant_id: str
    total_paid: float = 0.0
    total_owed: float = 0.0
    currency: str = "USD"

    @property
    def net_balance(self) -> float:
        return self.total_paid - self.total_owed

    @property
    def is_settled(self) -> bool:
        return abs(self.net_balance) < TOLERANCE

    def to_balance(self) -> Balance:
        return Balance(
            participant=self.participant,
            participant_id=self.participant_id,
            amount=self.net_balance,
            currency=self.currency
        )


class Settlement(BaseModel):
    """A suggested transfer from a debtor to a creditor."""
    from_participant: str
    from_participant_id: str
    to_participant: str
    to_participant_id: str
    amount: float
    currency: str = "USD"

    @property
    def formatted_amount(self) -> str:
        return format_currency(self.amount, self.currency)

    @property
    def description(self) -> str:
        return f"{self.from_participant} owes {self.to_participant} {self.formatted_amount}"


class GroupSummary(BaseModel):
    """Headline numbers for a group."""
    total_spent: float = 0.0
    average_per_person: float = 0.0
    expense_count: int = 0
    total_transactions: int = 0


class BalanceRequest(BaseModel):
    """Schema for an on-demand balance calculation."""
    group: Group
    expenses: List[Expense] = []


class BalanceReport(BaseModel):
    """Schema for balance calculation response."""
    balances: List[Balance]
    settlements: List[Settlement]
    summary: GroupSummary
