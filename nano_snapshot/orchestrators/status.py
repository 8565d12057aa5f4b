"""Translation of raw async request status payloads."""

from typing import Optional

from ..errors import ProtocolError
from ..schemas import AsyncJobStatus, RequestState, RequestStatusResponse

# Spellings seen across cluster versions for the unknown-request state
_NOT_FOUND_ALIASES = {"notfound", "not_found", "not found"}


def parse_request_state(raw: Optional[str]) -> RequestState:
    """Map a raw state key to a RequestState.

    A missing state means the cluster no longer tracks the request.

    Raises:
        ProtocolError: If the state is not a known key
    """
    if raw is None or not str(raw).strip():
        return RequestState.NOT_FOUND
    key = str(raw).strip().lower()
    if key in _NOT_FOUND_ALIASES:
        return RequestState.NOT_FOUND
    try:
        return RequestState(key)
    except ValueError as e:
        raise ProtocolError(f"Unknown request state: {raw!r}", cause=e) from e


def translate_status(request_id: str, response: RequestStatusResponse) -> AsyncJobStatus:
    """Build the normalized status for one poll of an async request."""
    return AsyncJobStatus(
        request_id=request_id,
        state=parse_request_state(response.state),
        errors=response.errors,
        message=response.message,
    )
