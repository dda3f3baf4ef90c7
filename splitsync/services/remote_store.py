"""
Remote store interface and its HTTP implementation.

All failures leaving this module are SyncError instances; transport errors
and status codes are mapped to the error taxonomy here, at the boundary.
"""
import logging
from typing import Any, List, Optional, Protocol, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError
from splitsync.core.config import Settings
from splitsync.core.errors import ErrorKind, SyncError
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

STATUS_ERROR_KINDS = {
    400: ErrorKind.INVALID_DATA,
    401: ErrorKind.NO_ACCOUNT,
    403: ErrorKind.PERMISSION_FAILURE,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.INVALID_DATA,
    413: ErrorKind.QUOTA_EXCEEDED,
    422: ErrorKind.INVALID_DATA,
    429: ErrorKind.QUOTA_EXCEEDED,
    502: ErrorKind.NETWORK_UNAVAILABLE,
    503: ErrorKind.NETWORK_UNAVAILABLE,
    504: ErrorKind.NETWORK_UNAVAILABLE,
    507: ErrorKind.QUOTA_EXCEEDED,
}


class RemoteStore(Protocol):
    """Source of truth for groups and expenses. Every call may raise SyncError."""

    async def save_group(self, group: Group) -> Group:
        ...

    async def fetch_groups(self, active_only: bool = True) -> List[Group]:
        ...

    async def delete_group(self, group_id: str) -> None:
        ...

    async def save_expense(self, expense: Expense) -> Expense:
        ...

    async def fetch_expenses(self, group_id: str) -> List[Expense]:
        ...

    async def delete_expense(self, expense_id: str) -> None:
        ...


def error_from_response(response: httpx.Response) -> SyncError:
    """Map an HTTP error response to the error taxonomy."""
    kind = STATUS_ERROR_KINDS.get(response.status_code, ErrorKind.UNKNOWN)
    detail = response.text[:200] if response.text else response.reason_phrase
    message = f"Remote store returned {response.status_code}: {detail}"
    if kind == ErrorKind.UNKNOWN:
        return SyncError(kind, message, cause=RuntimeError(message))
    return SyncError(kind, message)


class HttpRemoteStore:
    """RemoteStore over a JSON REST API."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)

    @classmethod
    def from_settings(cls, config: Settings) -> "HttpRemoteStore":
        return cls(
            base_url=config.REMOTE_API_URL,
            token=config.REMOTE_API_TOKEN,
            timeout=config.OPERATION_TIMEOUT_SECONDS
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Remote store timeout on {method} {url}: {e}")
            raise SyncError(ErrorKind.NETWORK_UNAVAILABLE, f"Request timed out: {method} {url}", cause=e) from e
        except httpx.TransportError as e:
            logger.error(f"Remote store unreachable on {method} {url}: {e}")
            raise SyncError(ErrorKind.NETWORK_UNAVAILABLE, cause=e) from e

        if response.is_error:
            logger.error(f"Remote store error on {method} {url}: {response.status_code}")
            raise error_from_response(response)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise SyncError(ErrorKind.INVALID_DATA, "Remote store returned malformed JSON") from e

    @staticmethod
    def _parse(model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Remote {model.__name__} failed validation: {e}")
            raise SyncError(ErrorKind.INVALID_DATA, f"Remote {model.__name__} record is invalid") from e

    def _parse_list(self, model: Type[M], data: Any) -> List[M]:
        if not isinstance(data, list):
            raise SyncError(ErrorKind.INVALID_DATA, f"Expected a list of {model.__name__} records")
        items = []
        for record in data:
            try:
                items.append(model.model_validate(record))
            except ValidationError as e:
                # One corrupted record should not hide the rest
                logger.warning(f"Skipping invalid remote {model.__name__} record: {e.error_count()} errors")
        return items

    async def save_group(self, group: Group) -> Group:
        response = await self._request("PUT", f"/groups/{group.id}", json=group.model_dump(mode="json"))
        return self._parse(Group, self._json(response))

    async def fetch_groups(self, active_only: bool = True) -> List[Group]:
        response = await self._request("GET", "/groups", params={"active_only": str(active_only).lower()})
        return self._parse_list(Group, self._json(response))

    async def delete_group(self, group_id: str) -> None:
        await self._request("DELETE", f"/groups/{group_id}")

    async def save_expense(self, expense: Expense) -> Expense:
        response = await self._request("PUT", f"/expenses/{expense.id}", json=expense.model_dump(mode="json"))
        return self._parse(Expense, self._json(response))

    async def fetch_expenses(self, group_id: str) -> List[Expense]:
        response = await self._request("GET", f"/groups/{group_id}/expenses")
        expenses = self._parse_list(Expense, self._json(response))
        return sorted(expenses, key=lambda e: e.date, reverse=True)

    async def delete_expense(self, expense_id: str) -> None:
        await self._request("DELETE", f"/expenses/{expense_id}")
