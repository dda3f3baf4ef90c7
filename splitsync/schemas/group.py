"""
Pydantic schemas for Group entity.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Iterable, List, Optional
from datetime import datetime
from splitsync.core.numeric import safe, safe_divide, safe_sum
from splitsync.core.utils import ensure_utc, new_id, utcnow


class Participant(BaseModel):
    """One roster entry; the roster order is display order."""
    name: str
    id: str = Field(default_factory=new_id)


class Group(BaseModel):
    """A named collection of participants sharing expenses."""
    id: str = Field(default_factory=new_id)
    name: str
    participants: List[Participant] = []
    currency: str = "USD"
    total_spent: float = 0.0  # Cached aggregate, recomputable from expenses
    last_activity: datetime = Field(default_factory=utcnow)
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def pair_legacy_participants(cls, data: Any) -> Any:
        """
        Accept legacy records that carry participant names and ids as
        parallel arrays. Ids pair by index; if the lengths disagree every
        name gets a freshly synthesized id.
        """
        if not isinstance(data, dict):
            return data
        participants = data.get("participants")
        if not participants or not all(isinstance(p, str) for p in participants):
            return data

        data = dict(data)
        ids = data.pop("participant_ids", None) or data.pop("participantIDs", None) or []
        if len(ids) != len(participants):
            ids = [new_id() for _ in participants]
        data["participants"] = [
            {"name": name, "id": participant_id}
            for name, participant_id in zip(participants, ids)
        ]
        return data

    @field_validator("total_spent", mode="before")
    @classmethod
    def finite_total(cls, v):
        if v is None:
            return 0.0
        return safe(v, "Group.total_spent")

    @field_validator("last_activity")
    @classmethod
    def utc_last_activity(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    # Derived values

    @property
    def participant_names(self) -> List[str]:
        return [p.name for p in self.participants]

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def average_spent_per_person(self) -> float:
        return safe_divide(self.total_spent, self.participant_count, "Group.average_spent_per_person")

    def contains(self, participant: str) -> bool:
        return participant in self.participant_names

    def participant_id(self, participant: str) -> Optional[str]:
        for entry in self.participants:
            if entry.name == participant:
                return entry.id
        return None

    def participant_name(self, participant_id: str) -> Optional[str]:
        for entry in self.participants:
            if entry.id == participant_id:
                return entry.name
        return None

    # Mutators; each one bumps last_activity

    def touch(self, at: Optional[datetime] = None) -> None:
        self.last_activity = ensure_utc(at) if at else utcnow()

    def add_participant(self, name: str, participant_id: Optional[str] = None,
                        at: Optional[datetime] = None) -> bool:
        """Append a participant; empty or duplicate names are ignored."""
        name = (name or "").strip()
        if not name or self.contains(name):
            return False
        self.participants.append(Participant(name=name, id=participant_id or new_id()))
        self.touch(at)
        return True

    def remove_participant(self, name: str, at: Optional[datetime] = None) -> bool:
        for index, entry in enumerate(self.participants):
            if entry.name == name:
                del self.participants[index]
                self.touch(at)
                return True
        return False

    def rename_participant(self, index: int, new_name: str, at: Optional[datetime] = None) -> bool:
        new_name = (new_name or "").strip()
        if not new_name or index < 0 or index >= len(self.participants):
            return False
        if any(p.name == new_name for i, p in enumerate(self.participants) if i != index):
            return False
        self.participants[index].name = new_name
        self.touch(at)
        return True

    def recalculate_total_spent(self, expenses: Iterable, at: Optional[datetime] = None) -> float:
        """Rebuild the cached total from this group's expenses."""
        self.total_spent = safe_sum(
            (e.total_amount for e in expenses if e.group_id == self.id),
            "Group.recalculate_total_spent"
        )
        self.touch(at)
        return self.total_spent

    def deactivate(self, at: Optional[datetime] = None) -> None:
        self.is_active = False
        self.touch(at)

    def activate(self, at: Optional[datetime] = None) -> None:
        self.is_active = True
        self.touch(at)

    # Validation

    @property
    def validation_errors(self) -> List[str]:
        errors = []
        if not self.name.strip():
            errors.append("Group name cannot be empty")
        if not self.participants:
            errors.append("Group must have at least one participant")
        names = self.participant_names
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            errors.append(f"Duplicate participants found: {', '.join(duplicates)}")
        if self.total_spent < 0:
            errors.append("Total spent cannot be negative")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors


class GroupCreate(BaseModel):
    """Schema for local group creation."""
    name: str
    participants: List[str]
    currency: Optional[str] = None
