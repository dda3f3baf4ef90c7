"""
Shared fixtures: fast settings and an in-memory remote store.
"""
import asyncio
from typing import Dict, List
import pytest
from splitsync.core.config import Settings
from splitsync.core.errors import ErrorKind, SyncError
from splitsync.db.local_store import InMemoryLocalStore
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group
from splitsync.services.sync_service import SyncCoordinator


class FakeRemoteStore:
    """RemoteStore double with scripted failures and fetch concurrency tracking."""

    def __init__(self):
        self.groups: Dict[str, Group] = {}
        self.expenses: Dict[str, Expense] = {}
        self.calls: List[str] = []
        self.fetch_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self._scripted: Dict[str, List[BaseException]] = {}
        self._always: Dict[str, BaseException] = {}

    def fail_next(self, method: str, *errors: BaseException) -> None:
        self._scripted.setdefault(method, []).extend(errors)

    def fail_always(self, method: str, error: BaseException) -> None:
        self._always[method] = error

    def recover(self, method: str) -> None:
        self._always.pop(method, None)
        self._scripted.pop(method, None)

    def _check(self, method: str) -> None:
        self.calls.append(method)
        if method in self._always:
            raise self._always[method]
        scripted = self._scripted.get(method)
        if scripted:
            raise scripted.pop(0)

    async def save_group(self, group: Group) -> Group:
        self._check("save_group")
        self.groups[group.id] = group.model_copy(deep=True)
        return group

    async def fetch_groups(self, active_only: bool = True) -> List[Group]:
        self._check("fetch_groups")
        return [
            g.model_copy(deep=True) for g in self.groups.values()
            if g.is_active or not active_only
        ]

    async def delete_group(self, group_id: str) -> None:
        self._check("delete_group")
        if group_id not in self.groups:
            raise SyncError(ErrorKind.NOT_FOUND)
        del self.groups[group_id]
        self.expenses = {k: e for k, e in self.expenses.items() if e.group_id != group_id}

    async def save_expense(self, expense: Expense) -> Expense:
        self._check("save_expense")
        self.expenses[expense.id] = expense.model_copy(deep=True)
        return expense

    async def fetch_expenses(self, group_id: str) -> List[Expense]:
        self._check("fetch_expenses")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.fetch_delay)
        finally:
            self.in_flight -= 1
        return [e.model_copy(deep=True) for e in self.expenses.values() if e.group_id == group_id]

    async def delete_expense(self, expense_id: str) -> None:
        self._check("delete_expense")
        if expense_id not in self.expenses:
            raise SyncError(ErrorKind.NOT_FOUND)
        del self.expenses[expense_id]


@pytest.fixture
def config():
    """Settings with production limits but no backoff waits."""
    return Settings(
        RETRY_BASE_DELAY_SECONDS=0.0,
        OPERATION_TIMEOUT_SECONDS=5.0,
        SYNC_INTERVAL_SECONDS=0.0
    )


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def make_coordinator(config, remote):
    """Build a coordinator over a fresh in-memory local store."""
    def factory(**kwargs):
        return SyncCoordinator(InMemoryLocalStore(), kwargs.pop("remote_store", remote), config, **kwargs)
    return factory
