"""
Shared dependencies for API routes.
"""
from fastapi import HTTPException, Request, status
from splitsync.core.errors import ErrorKind, SyncError
from splitsync.services.sync_service import SyncCoordinator

ERROR_STATUS_CODES = {
    ErrorKind.NO_ACCOUNT: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NETWORK_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.QUOTA_EXCEEDED: status.HTTP_507_INSUFFICIENT_STORAGE,
    ErrorKind.PERMISSION_FAILURE: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_DATA: status.HTTP_400_BAD_REQUEST,
    ErrorKind.RETRY_LIMIT_EXCEEDED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_coordinator(request: Request) -> SyncCoordinator:
    """Get the sync coordinator built at application startup."""
    return request.app.state.coordinator


def http_error(error: SyncError) -> HTTPException:
    """Translate an engine error into an HTTP error response."""
    return HTTPException(
        status_code=ERROR_STATUS_CODES[error.kind],
        detail=error.user_message
    )
