"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
import enum
from splitsync.core.utils import ensure_utc, new_id, utcnow


class SplitType(str, enum.Enum):
    """Rule governing how an expense's cost is divided."""
    EQUAL = "Equal"
    PERCENTAGE = "Percentage"
    CUSTOM = "Custom"


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    RENT = "Rent"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    OTHER = "Other"


class ParticipantSplit(BaseModel):
    """Per-participant share; only the field of the active split type is authoritative."""
    participant_name: str
    participant_id: str = Field(default_factory=new_id)
    amount: float = 0.0
    percentage: float = 0.0


class Expense(BaseModel):
    """A single cost event attributed to a payer and split among participants."""
    id: str = Field(default_factory=new_id)
    group_id: str  # Owning group, never reassigned
    description: str
    total_amount: float
    paid_by: str
    paid_by_id: str = ""
    split_type: SplitType = SplitType.EQUAL
    date: datetime = Field(default_factory=utcnow)
    category: ExpenseCategory = ExpenseCategory.OTHER
    participant_names: List[str] = []
    custom_splits: List[ParticipantSplit] = []

    @field_validator("date")
    @classmethod
    def utc_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def participant_count(self) -> int:
        return len(self.participant_names)

    def contains(self, participant: str) -> bool:
        return participant in self.participant_names


class ExpenseCreate(BaseModel):
    """Schema for local expense creation."""
    group_id: str
    description: str
    total_amount: float
    paid_by: str
    paid_by_id: Optional[str] = None
    split_type: SplitType = SplitType.EQUAL
    category: ExpenseCategory = ExpenseCategory.OTHER
    participant_names: List[str] = []
    custom_splits: List[ParticipantSplit] = []
