"""
Sync service: local-first writes, a FIFO queue of remote mutations, and
last-write-wins reconciliation against the remote store.

All reads and writes of the local cache go through one SyncCoordinator.
Every read-modify-write runs under its lock; remote I/O and retry backoff
run outside it.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Set
from pydantic import ValidationError
from splitsync.core.config import Settings
from splitsync.core.errors import ErrorKind, SyncError
from splitsync.core.numeric import TOLERANCE
from splitsync.core.utils import utcnow
from splitsync.db.local_store import LocalStore
from splitsync.schemas.balance import Balance, GroupSummary, Settlement
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group
from splitsync.schemas.sync import (
    OperationType, PendingOperation, SyncableItem, SyncStatus, SyncStatusResponse
)
from splitsync.services.alert_service import ErrorCenter
from splitsync.services.balance_service import (
    calculate_group_summary, calculate_net_balances, recalculate_total_spent
)
from splitsync.services.dedup_service import (
    deduplicate_groups, find_duplicate_expense, find_duplicate_group
)
from splitsync.services.local_cache import LocalCache
from splitsync.services.notifier import ChangeNotifier, ChangeTopic, InProcessNotifier
from splitsync.services.remote_store import RemoteStore
from splitsync.services.retry_service import ResilientCaller
from splitsync.services.settlement_service import optimize_settlements, simplify_debts
from splitsync.services.split_service import expense_validation_errors

logger = logging.getLogger(__name__)


class MergeResult(NamedTuple):
    records: List[Any]
    statuses: Dict[str, SyncStatus]
    conflicts: List[Any]  # Local records kept over a differing remote copy


def merge_records(local: Iterable[Any], remote: Iterable[Any], timestamp: Callable[[Any], datetime]) -> MergeResult:
    """
    Record-level last-write-wins merge keyed by id.

    A strictly newer remote record replaces the local one (synced). An older
    or equally old remote record that differs leaves the local record in
    place (conflict). Identical records change nothing. Remote records with
    no local counterpart are added (synced). Local order is preserved and
    new remote records are appended.
    """
    merged: Dict[str, Any] = {record.id: record for record in local}
    statuses: Dict[str, SyncStatus] = {}
    conflicts = []

    for remote_record in remote:
        local_record = merged.get(remote_record.id)
        if local_record is None:
            merged[remote_record.id] = remote_record
            statuses[remote_record.id] = SyncStatus.SYNCED
        elif local_record == remote_record:
            continue
        elif timestamp(remote_record) > timestamp(local_record):
            merged[remote_record.id] = remote_record
            statuses[remote_record.id] = SyncStatus.SYNCED
        else:
            statuses[local_record.id] = SyncStatus.CONFLICT
            conflicts.append(local_record)

    return MergeResult(list(merged.values()), statuses, conflicts)


def merge_groups(local: Iterable[Group], remote: Iterable[Group]) -> MergeResult:
    return merge_records(local, remote, lambda g: g.last_activity)


def merge_expenses(local: Iterable[Expense], remote: Iterable[Expense]) -> MergeResult:
    return merge_records(local, remote, lambda e: e.date)


class SyncCoordinator:
    """Single coordinating context for groups, expenses and their sync state."""

    def __init__(
        self,
        local_store: LocalStore,
        remote_store: RemoteStore,
        config: Settings,
        caller: Optional[ResilientCaller] = None,
        notifier: Optional[ChangeNotifier] = None,
        error_center: Optional[ErrorCenter] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.cache = LocalCache(local_store)
        self.remote = remote_store
        self.config = config
        self.caller = caller or ResilientCaller(config)
        self.notifier = notifier or InProcessNotifier()
        self.errors = error_center or ErrorCenter()
        self._clock = clock
        self.is_online = False
        self._lock = asyncio.Lock()
        self._drain_lock = asyncio.Lock()
        self._background: Set[asyncio.Task] = set()

    # Sync status bookkeeping (call with the lock held)

    def _set_statuses(self, statuses: Dict[str, SyncStatus], is_local_only: Optional[bool] = None) -> None:
        if not statuses:
            return
        items = self.cache.load_sync_status()
        now = self._clock()
        for entity_id, status in statuses.items():
            previous = items.get(entity_id)
            local_only = is_local_only
            if local_only is None:
                local_only = previous.is_local_only if previous else False
            if status == SyncStatus.SYNCED:
                local_only = False
            items[entity_id] = SyncableItem(
                id=entity_id, sync_status=status, last_modified=now, is_local_only=local_only
            )
        self.cache.save_sync_status(items)

    def _set_status(self, entity_id: str, status: SyncStatus, is_local_only: Optional[bool] = None) -> None:
        self._set_statuses({entity_id: status}, is_local_only)

    def _forget_statuses(self, entity_ids: Iterable[str]) -> None:
        items = self.cache.load_sync_status()
        for entity_id in entity_ids:
            items.pop(entity_id, None)
        self.cache.save_sync_status(items)

    def sync_status(self, entity_id: str) -> SyncStatus:
        item = self.cache.load_sync_status().get(entity_id)
        return item.sync_status if item else SyncStatus.OFFLINE

    def syncable_item(self, entity_id: str) -> Optional[SyncableItem]:
        return self.cache.load_sync_status().get(entity_id)

    def global_status(self) -> SyncStatus:
        if not self.is_online:
            return SyncStatus.OFFLINE
        if self.cache.load_pending_operations():
            return SyncStatus.SYNCING
        statuses = {item.sync_status for item in self.cache.load_sync_status().values()}
        if SyncStatus.CONFLICT in statuses:
            return SyncStatus.CONFLICT
        if SyncStatus.FAILED in statuses:
            return SyncStatus.FAILED
        return SyncStatus.SYNCED

    def status_report(self) -> SyncStatusResponse:
        return SyncStatusResponse(
            status=self.global_status(),
            is_online=self.is_online,
            pending_operations=len(self.cache.load_pending_operations()),
            last_sync_time=self.cache.load_last_sync_time()
        )

    def last_sync_time(self) -> Optional[datetime]:
        return self.cache.load_last_sync_time()

    def pending_operations(self) -> List[PendingOperation]:
        return self.cache.load_pending_operations()

    def dropped_operations(self) -> List[PendingOperation]:
        return self.cache.load_dropped_operations()

    # Pending operation queue

    def _enqueue(
        self,
        op_type: OperationType,
        entity_id: str,
        payload: Dict[str, Any],
        status: Optional[SyncStatus] = None
    ) -> PendingOperation:
        queue = self.cache.load_pending_operations()
        operation = PendingOperation(type=op_type, entity_id=entity_id, payload=payload, timestamp=self._clock())
        queue.append(operation)
        self.cache.save_pending_operations(queue)
        if status is None:
            self._set_status(entity_id, SyncStatus.SYNCING if self.is_online else SyncStatus.OFFLINE, is_local_only=True)
        return operation

    def _schedule_drain(self) -> None:
        if not self.is_online:
            return
        task = asyncio.create_task(self.drain_queue())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_for_background(self) -> None:
        """Wait until every scheduled background drain has finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    async def queue_operation(self, op_type: OperationType, entity_id: str, payload: Dict[str, Any]) -> PendingOperation:
        """Append a mutation to the queue; when online a drain starts in the background."""
        async with self._lock:
            operation = self._enqueue(op_type, entity_id, payload)
        self._schedule_drain()
        return operation

    def _payload_model(self, operation: PendingOperation):
        model = Group if operation.type.is_group else Expense
        try:
            return model.model_validate(operation.payload)
        except ValidationError as e:
            raise SyncError(ErrorKind.INVALID_DATA, f"Queued {operation.type.value} payload is invalid") from e

    async def _execute(self, operation: PendingOperation) -> None:
        if operation.type == OperationType.DELETE_GROUP:
            await self.remote.delete_group(operation.entity_id)
        elif operation.type == OperationType.DELETE_EXPENSE:
            await self.remote.delete_expense(operation.entity_id)
        elif operation.type.is_group:
            await self.remote.save_group(self._payload_model(operation))
        else:
            await self.remote.save_expense(self._payload_model(operation))

    async def drain_queue(self) -> int:
        """
        Push queued operations FIFO. A failure stops the pass and leaves the
        operation at the head; after MAX_OPERATION_RETRIES failures (or at
        once for invalid data) it is dropped and reported as lost.
        Returns the number of operations confirmed.
        """
        if not self.is_online:
            return 0

        processed = 0
        async with self._drain_lock:
            while self.is_online:
                async with self._lock:
                    queue = self.cache.load_pending_operations()
                    if not queue:
                        break
                    operation = queue[0]
                    self._set_status(operation.entity_id, SyncStatus.SYNCING)

                try:
                    await self.caller.call(lambda: self._execute(operation), name=operation.type.value)
                except SyncError as e:
                    if e.kind == ErrorKind.NOT_FOUND and operation.type.is_delete:
                        logger.info(f"{operation.type.value} {operation.entity_id}: already absent remotely")
                    else:
                        dropped = await self._record_failure(operation, e)
                        if not dropped:
                            break
                        continue

                await self._complete(operation)
                processed += 1

        if processed:
            logger.info(f"Drained {processed} pending operations")
            self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)
        return processed

    async def _complete(self, operation: PendingOperation) -> None:
        async with self._lock:
            queue = [op for op in self.cache.load_pending_operations() if op.id != operation.id]
            self.cache.save_pending_operations(queue)

            if operation.type == OperationType.DELETE_GROUP:
                # Confirmed remotely; now the local copy can go
                groups = [g for g in self.cache.load_groups() if g.id != operation.entity_id]
                expenses = [e for e in self.cache.load_expenses() if e.group_id != operation.entity_id]
                self.cache.save_groups(groups)
                self.cache.save_expenses(expenses)

            still_pending = any(op.entity_id == operation.entity_id for op in queue)
            self._set_status(operation.entity_id, SyncStatus.SYNCING if still_pending else SyncStatus.SYNCED)

        if operation.type == OperationType.DELETE_GROUP:
            self.notifier.publish(ChangeTopic.GROUPS_CHANGED, operation.entity_id)

    async def _record_failure(self, operation: PendingOperation, error: SyncError) -> bool:
        """Count a failed push; returns True when the operation was dropped."""
        async with self._lock:
            queue = self.cache.load_pending_operations()
            current = next((op for op in queue if op.id == operation.id), None)
            if current is None:
                return True

            current.retry_count += 1
            drop = error.kind == ErrorKind.INVALID_DATA or current.retry_count >= self.config.MAX_OPERATION_RETRIES
            if drop:
                queue.remove(current)
                dropped = self.cache.load_dropped_operations()
                dropped.append(current)
                self.cache.save_dropped_operations(dropped[-self.config.MAX_DROPPED_OPERATIONS:])
            self.cache.save_pending_operations(queue)
            self._set_status(operation.entity_id, SyncStatus.FAILED)

        if not drop:
            logger.warning(
                f"{operation.type.value} {operation.entity_id} failed "
                f"({current.retry_count}/{self.config.MAX_OPERATION_RETRIES}): {error.message}"
            )
            return False

        logger.error(
            f"Dropping {operation.type.value} {operation.entity_id} after "
            f"{current.retry_count} failed attempts: {error.message}"
        )
        self.notifier.publish(ChangeTopic.CHANGES_LOST, operation.entity_id)
        kind = ErrorKind.INVALID_DATA if error.kind == ErrorKind.INVALID_DATA else ErrorKind.RETRY_LIMIT_EXCEEDED
        self.errors.report(
            SyncError(kind, f"Unsynced changes lost: {operation.type.value} could not be saved", cause=error),
            title="Unsynced Changes Lost"
        )
        return True

    # Local-first writes

    async def create_group(self, name: str, participants: List[str], currency: Optional[str] = None) -> Group:
        """
        Create a group locally and queue it for the remote store. A group
        looking like an existing active one is returned instead.
        """
        now = self._clock()
        async with self._lock:
            active = [g for g in self.cache.load_groups() if g.is_active]
            existing = find_duplicate_group(
                name, participants, active, threshold=self.config.GROUP_DEDUP_CREATE_THRESHOLD
            )
            if existing is not None:
                logger.warning(f"Found local duplicate group '{existing.name}' ({existing.id})")
                return existing

            group = Group(
                name=(name or "").strip(),
                currency=(currency or self.config.DEFAULT_CURRENCY).upper(),
                last_activity=now
            )
            for participant in participants:
                group.add_participant(participant, at=now)
            errors = group.validation_errors
            if errors:
                raise SyncError.invalid(errors)

            groups = self.cache.load_groups()
            groups.append(group)
            self.cache.save_groups(groups)
            self._enqueue(OperationType.CREATE_GROUP, group.id, group.model_dump(mode="json"))

        self.notifier.publish(ChangeTopic.GROUPS_CHANGED, group.id)
        self._schedule_drain()
        return group

    async def save_group(self, group: Group) -> Group:
        """Insert or replace a group locally and queue the change."""
        errors = group.validation_errors
        if errors:
            raise SyncError.invalid(errors)

        async with self._lock:
            group.touch(self._clock())
            groups = self.cache.load_groups()
            index = next((i for i, g in enumerate(groups) if g.id == group.id), None)
            if index is None:
                groups.append(group)
                op_type = OperationType.CREATE_GROUP
            else:
                groups[index] = group
                op_type = OperationType.UPDATE_GROUP
            self.cache.save_groups(groups)
            self._enqueue(op_type, group.id, group.model_dump(mode="json"))

        self.notifier.publish(ChangeTopic.GROUPS_CHANGED, group.id)
        self._schedule_drain()
        return group

    async def delete_group(self, group_id: str) -> Group:
        """Soft-delete locally; the record is removed once the remote delete is confirmed."""
        async with self._lock:
            groups = self.cache.load_groups()
            group = next((g for g in groups if g.id == group_id), None)
            if group is None:
                raise SyncError(ErrorKind.NOT_FOUND, f"Group {group_id} not found")
            group.deactivate(self._clock())
            self.cache.save_groups(groups)
            self._enqueue(OperationType.DELETE_GROUP, group.id, group.model_dump(mode="json"))

        self.notifier.publish(ChangeTopic.GROUPS_CHANGED, group_id)
        self._schedule_drain()
        return group

    async def save_expense(self, expense: Expense) -> Expense:
        """
        Insert or replace an expense locally, refresh the owning group's
        total and queue both changes. A new expense matching a recent one
        (same group, description and amount within the dedup window) is not
        created; the existing expense is returned.
        """
        errors = expense_validation_errors(expense)
        if errors:
            raise SyncError.invalid(errors)

        window = timedelta(seconds=self.config.EXPENSE_DEDUP_WINDOW_SECONDS)
        async with self._lock:
            groups = self.cache.load_groups()
            group = next((g for g in groups if g.id == expense.group_id), None)
            if group is None:
                raise SyncError(ErrorKind.NOT_FOUND, f"Group {expense.group_id} not found")

            expenses = self.cache.load_expenses()
            index = next((i for i, e in enumerate(expenses) if e.id == expense.id), None)
            if index is None:
                duplicate = find_duplicate_expense(expense, expenses, window)
                if duplicate is not None:
                    logger.warning(f"Expense '{expense.description}' duplicates {duplicate.id}, reusing it")
                    return duplicate
                op_type = OperationType.CREATE_EXPENSE
            elif expenses[index].group_id != expense.group_id:
                raise SyncError(ErrorKind.INVALID_DATA, "An expense cannot move to another group")
            else:
                op_type = OperationType.UPDATE_EXPENSE

            if not expense.paid_by_id:
                expense.paid_by_id = group.participant_id(expense.paid_by) or ""
            if index is None:
                expenses.append(expense)
            else:
                expenses[index] = expense
            self.cache.save_expenses(expenses)

            group.recalculate_total_spent(expenses, at=self._clock())
            self.cache.save_groups(groups)

            self._enqueue(op_type, expense.id, expense.model_dump(mode="json"))
            self._enqueue(OperationType.UPDATE_GROUP, group.id, group.model_dump(mode="json"))

        self.notifier.publish(ChangeTopic.EXPENSES_CHANGED, expense.id)
        self.notifier.publish(ChangeTopic.GROUPS_CHANGED, expense.group_id)
        self._schedule_drain()
        return expense

    async def delete_expense(self, expense_id: str) -> Expense:
        async with self._lock:
            expenses = self.cache.load_expenses()
            expense = next((e for e in expenses if e.id == expense_id), None)
            if expense is None:
                raise SyncError(ErrorKind.NOT_FOUND, f"Expense {expense_id} not found")
            expenses.remove(expense)
            self.cache.save_expenses(expenses)
            self._enqueue(OperationType.DELETE_EXPENSE, expense.id, expense.model_dump(mode="json"))

            groups = self.cache.load_groups()
            group = next((g for g in groups if g.id == expense.group_id), None)
            if group is not None:
                group.recalculate_total_spent(expenses, at=self._clock())
                self.cache.save_groups(groups)
                self._enqueue(OperationType.UPDATE_GROUP, group.id, group.model_dump(mode="json"))

        self.notifier.publish(ChangeTopic.EXPENSES_CHANGED, expense_id)
        self.notifier.publish(ChangeTopic.GROUPS_CHANGED, expense.group_id)
        self._schedule_drain()
        return expense

    async def recalculate_group_totals(self) -> List[Group]:
        """Repair cached totals that drifted from the expense list; returns the groups changed."""
        changed = []
        async with self._lock:
            groups = self.cache.load_groups()
            expenses = self.cache.load_expenses()
            for group in groups:
                total = recalculate_total_spent([e for e in expenses if e.group_id == group.id])
                if abs(group.total_spent - total) > TOLERANCE:
                    group.total_spent = total
                    group.touch(self._clock())
                    changed.append(group)
            if changed:
                self.cache.save_groups(groups)
                for group in changed:
                    self._enqueue(OperationType.UPDATE_GROUP, group.id, group.model_dump(mode="json"))

        for group in changed:
            self.notifier.publish(ChangeTopic.GROUPS_CHANGED, group.id)
        self._schedule_drain()
        return changed

    # Remote reconciliation

    def _queue_conflict_pushes(self, records: List[Any], op_type: OperationType, pending_ids: Set[str]) -> None:
        for record in records:
            if record.id in pending_ids:
                continue
            self._enqueue(op_type, record.id, record.model_dump(mode="json"), status=SyncStatus.CONFLICT)
            pending_ids.add(record.id)

    async def pull_remote_changes(self) -> None:
        """Fetch remote groups and their expenses and merge them into the local cache."""
        remote_groups = await self.caller.call(
            lambda: self.remote.fetch_groups(active_only=True), name="fetch_groups"
        )
        logger.info(f"Fetched {len(remote_groups)} remote groups")

        valid_groups = []
        for group in remote_groups:
            if group.is_valid:
                valid_groups.append(group)
            else:
                logger.warning(f"Skipping invalid remote group '{group.name}' ({group.id})")

        async with self._lock:
            pending_ids = {op.entity_id for op in self.cache.load_pending_operations()}
            result = merge_groups(self.cache.load_groups(), valid_groups)
            self.cache.save_groups(result.records)
            self._set_statuses(result.statuses)
            self._queue_conflict_pushes(result.conflicts, OperationType.UPDATE_GROUP, pending_ids)

        if result.statuses:
            self.notifier.publish(ChangeTopic.GROUPS_CHANGED)

        remote_ids = {g.id for g in valid_groups}
        to_fetch = [g for g in result.records if g.id in remote_ids and g.is_active]
        await self._sync_expenses(to_fetch)

    async def _sync_expenses(self, groups: List[Group]) -> int:
        """Merge remote expenses for each group with at most SYNC_MAX_CONCURRENT_FETCHES fetches in flight."""
        semaphore = asyncio.Semaphore(self.config.SYNC_MAX_CONCURRENT_FETCHES)

        async def sync_group(group: Group) -> bool:
            async with semaphore:
                try:
                    remote_expenses = await self.caller.call(
                        lambda: self.remote.fetch_expenses(group.id), name=f"fetch_expenses[{group.id}]"
                    )
                except SyncError as e:
                    logger.error(f"Failed to sync expenses for group '{group.name}': {e.message}")
                    return False

            remote_expenses = [e for e in remote_expenses if e.group_id == group.id]
            async with self._lock:
                all_expenses = self.cache.load_expenses()
                local = [e for e in all_expenses if e.group_id == group.id]
                others = [e for e in all_expenses if e.group_id != group.id]
                pending_ids = {op.entity_id for op in self.cache.load_pending_operations()}

                result = merge_expenses(local, remote_expenses)
                self.cache.save_expenses(others + result.records)
                self._set_statuses(result.statuses)
                self._queue_conflict_pushes(result.conflicts, OperationType.UPDATE_EXPENSE, pending_ids)

            if result.statuses:
                self.notifier.publish(ChangeTopic.EXPENSES_CHANGED, group.id)
            return True

        results = await asyncio.gather(*(sync_group(group) for group in groups))
        return sum(1 for ok in results if ok)

    async def sync_deletions(self) -> List[str]:
        """
        Delete local groups (and their expenses) that no longer exist
        remotely. Groups with queued operations are kept. Returns the ids removed.
        """
        remote_groups = await self.caller.call(
            lambda: self.remote.fetch_groups(active_only=True), name="fetch_groups"
        )
        remote_ids = {g.id for g in remote_groups}

        async with self._lock:
            pending_ids = {op.entity_id for op in self.cache.load_pending_operations()}
            groups = self.cache.load_groups()
            deleted_ids = {g.id for g in groups if g.id not in remote_ids and g.id not in pending_ids}
            if not deleted_ids:
                return []

            expenses = self.cache.load_expenses()
            removed_expense_ids = [e.id for e in expenses if e.group_id in deleted_ids]
            self.cache.save_groups([g for g in groups if g.id not in deleted_ids])
            self.cache.save_expenses([e for e in expenses if e.group_id not in deleted_ids])
            self._forget_statuses(list(deleted_ids) + removed_expense_ids)

        logger.info(f"Removed {len(deleted_ids)} groups deleted remotely")
        for group_id in deleted_ids:
            self.notifier.publish(ChangeTopic.GROUPS_CHANGED, group_id)
        return sorted(deleted_ids)

    async def run_sync(self, include_deletions: bool = False) -> bool:
        """
        One sync pass: push the queue, then pull remote changes. Errors are
        reported to the error center with this pass bound as the retry action.
        """
        if not self.is_online:
            return False

        self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)
        await self.drain_queue()
        try:
            await self.pull_remote_changes()
            if include_deletions:
                await self.sync_deletions()
        except SyncError as e:
            logger.error(f"Failed to sync remote changes: {e.message}")
            self.errors.report(e, retry=lambda: self.run_sync(include_deletions))
            self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)
            return False

        async with self._lock:
            self.cache.save_last_sync_time(self._clock())
        self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)
        return True

    async def set_online(self, online: bool) -> None:
        """Record connectivity; coming back online starts a sync pass."""
        was_online = self.is_online
        self.is_online = online
        self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)
        if online and not was_online:
            logger.info("Network came back online, starting sync")
            await self.run_sync()

    async def run_periodic(self, interval: Optional[float] = None, max_cycles: Optional[int] = None) -> None:
        """Run sync passes on a timer while online."""
        interval = self.config.SYNC_INTERVAL_SECONDS if interval is None else interval
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            if self.is_online:
                await self.run_sync()
            cycles += 1
            await asyncio.sleep(interval)

    async def clear_local_data(self) -> None:
        async with self._lock:
            self.cache.clear()
        self.notifier.publish(ChangeTopic.GROUPS_CHANGED)
        self.notifier.publish(ChangeTopic.EXPENSES_CHANGED)
        self.notifier.publish(ChangeTopic.SYNC_STATUS_CHANGED)

    # Reads

    def groups(self, active_only: bool = True) -> List[Group]:
        """Local groups, with look-alike duplicates collapsed for display."""
        groups = self.cache.load_groups()
        if active_only:
            groups = [g for g in groups if g.is_active]
        return deduplicate_groups(groups, threshold=self.config.GROUP_DEDUP_LIST_THRESHOLD)

    def group(self, group_id: str) -> Group:
        group = next((g for g in self.cache.load_groups() if g.id == group_id), None)
        if group is None:
            raise SyncError(ErrorKind.NOT_FOUND, f"Group {group_id} not found")
        return group

    def expenses(self, group_id: str) -> List[Expense]:
        expenses = [e for e in self.cache.load_expenses() if e.group_id == group_id]
        return sorted(expenses, key=lambda e: e.date, reverse=True)

    def balances(self, group_id: str) -> List[Balance]:
        return calculate_net_balances(self.group(group_id), self.expenses(group_id))

    def settlements(self, group_id: str, optimize: bool = False) -> List[Settlement]:
        balances = self.balances(group_id)
        return optimize_settlements(balances) if optimize else simplify_debts(balances)

    def summary(self, group_id: str) -> GroupSummary:
        return calculate_group_summary(self.group(group_id), self.expenses(group_id))
