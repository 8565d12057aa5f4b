"""SolrCloud Collections API client."""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..base import BaseClusterAdminClient
from ..config import ClusterConfig
from ..errors import ClusterOperationFailedError, ProtocolError, TransportError
from ..schemas import AdminResponse, ErrorDetail, RequestStatusResponse, normalize_errors
from .._utils import generate_request_id, generate_snapshot_name, logger, resolve_latest_snapshot


def parse_failure_list(raw: Any) -> Tuple[ErrorDetail, ...]:
    """Parse a failure list in any of the shapes Solr renders named lists.

    Handles JSON objects, flat arrays ([k1, v1, k2, v2]) and arrays of pairs.

    Args:
        raw: The ``failure`` entry of a Collections API response

    Returns:
        Ordered error details

    Raises:
        ProtocolError: If the payload cannot be read as name/value pairs
    """
    if raw is None:
        return ()
    if isinstance(raw, dict):
        return normalize_errors(raw)
    if isinstance(raw, str):
        return (ErrorDetail("failure", raw),)
    if isinstance(raw, list):
        if all(isinstance(item, list) and len(item) == 2 for item in raw):
            return normalize_errors(raw)
        if len(raw) % 2 == 0:
            return normalize_errors(zip(raw[0::2], raw[1::2]))
    raise ProtocolError(f"Unreadable failure list: {raw!r}")


def _error_message(body: Dict[str, Any]) -> Optional[str]:
    """Extract a human-readable error message from a response body."""
    for key in ("error", "exception"):
        detail = body.get(key)
        if isinstance(detail, dict) and detail.get("msg"):
            return str(detail["msg"])
        if isinstance(detail, str) and detail:
            return detail
    return None


class SolrCloudAdminClient(BaseClusterAdminClient):
    """Drive a SolrCloud cluster through its Collections API."""

    def __init__(self, config: ClusterConfig, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize client.

        Args:
            config: Cluster configuration
            http_client: Optional pre-built httpx client; the caller keeps ownership
        """
        self.config = config
        self._base_url = config.base_url.rstrip("/")
        self._admin_url = f"{self._base_url}/admin/collections"
        self._owns_http_client = http_client is None
        if http_client is None:
            auth = httpx.BasicAuth(config.username, config.password) if config.username else None
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(config.request_timeout, connect=config.connect_timeout),
                auth=auth,
                verify=config.verify_ssl,
            )
        self._http = http_client

        # Cache retry decorator to avoid recreation overhead
        self._retry_decorator = self._get_retry_decorator()

    def _get_retry_decorator(self):
        """Get retry decorator for idempotent reads."""
        return retry(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    # Transport

    async def _send(self, method: str, url: str, params: Dict[str, str]) -> httpx.Response:
        return await self._http.request(method, url, params=params)

    async def _request(
        self,
        params: Dict[str, Any],
        *,
        url: Optional[str] = None,
        method: str = "GET",
        idempotent: bool = False,
    ) -> Tuple[int, Dict[str, Any]]:
        """Send a request and decode its JSON body.

        Returns:
            Tuple of HTTP status code and decoded body

        Raises:
            TransportError: If the cluster cannot be reached
            ProtocolError: If the body is not a JSON object
        """
        url = url or self._admin_url
        query = {"wt": "json"}
        query.update({k: str(v) for k, v in params.items() if v is not None})

        send = self._retry_decorator(self._send) if idempotent else self._send
        logger.debug(f"Sending {method} {url} {query}")
        try:
            response = await send(method, url, query)
        except httpx.HTTPError as e:
            raise TransportError(f"Unable to reach cluster at {url}: {e}", cause=e) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Unexpected response from cluster (HTTP {response.status_code}): {response.text[:200]}",
                cause=e,
            ) from e
        if not isinstance(body, dict):
            raise ProtocolError(f"Unexpected response from cluster (HTTP {response.status_code}): {body!r}")

        return response.status_code, body

    def _to_admin_response(self, http_status: int, body: Dict[str, Any]) -> AdminResponse:
        header = body.get("responseHeader") or {}
        if not isinstance(header, dict):
            raise ProtocolError(f"Unreadable response header: {header!r}")
        try:
            status = int(header.get("status", 0))
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"Unreadable response status: {header.get('status')!r}", cause=e) from e
        if status == 0 and http_status >= 400:
            status = http_status
        try:
            return AdminResponse(
                status=status,
                errors=parse_failure_list(body.get("failure")),
                message=_error_message(body),
            )
        except ValidationError as e:
            raise ProtocolError(f"Unreadable admin response: {e}", cause=e) from e

    async def _admin_call(self, params: Dict[str, Any]) -> AdminResponse:
        http_status, body = await self._request(params)
        return self._to_admin_response(http_status, body)

    async def _submit(self, params: Dict[str, Any]) -> str:
        """Issue an admin request in async mode and return its request id."""
        request_id = generate_request_id()
        response = await self._admin_call({**params, "async": request_id})
        if not response.success:
            raise ClusterOperationFailedError(
                response.message or f"Cluster rejected {params['action']} request",
                response.errors,
            )
        logger.debug(f"{params['action']} submitted with request id {request_id}")
        return request_id

    # Snapshot naming

    def _location(self, location: Optional[str]) -> Optional[str]:
        return location or self.config.backup_location

    def _latest_snapshot(self, location: Optional[str]) -> Optional[str]:
        """Find the latest snapshot.<timestamp> entry in a shared location."""
        if not location:
            return None
        path = Path(location[len("file://"):] if location.startswith("file://") else location)
        try:
            names = [entry.name for entry in path.iterdir()]
        except OSError as e:
            logger.warning(f"Unable to list backup location {location}: {e}")
            return None
        return resolve_latest_snapshot(names)

    def _backup_params(self, name: str, location: Optional[str], backup_name: Optional[str]) -> Dict[str, Any]:
        return {
            "action": "BACKUP",
            "collection": name,
            "name": backup_name or generate_snapshot_name(),
            "location": self._location(location),
        }

    def _restore_params(self, name: str, location: Optional[str], backup_name: str) -> Dict[str, Any]:
        return {
            "action": "RESTORE",
            "collection": name,
            "name": backup_name,
            "location": self._location(location),
            "replicationFactor": self.config.replication_factor,
            "maxShardsPerNode": self.config.max_shards_per_node,
        }

    def _missing_snapshot(self, location: Optional[str]) -> Tuple[ErrorDetail, ...]:
        return (ErrorDetail("No snapshot found", self._location(location) or "<default location>"),)

    # Capabilities

    async def collection_exists(self, name: str) -> bool:
        http_status, body = await self._request({"action": "LIST"}, idempotent=True)
        response = self._to_admin_response(http_status, body)
        if not response.success:
            raise ClusterOperationFailedError(
                response.message or "Unable to list collections", response.errors
            )
        collections = body.get("collections") or []
        return name in collections

    async def delete_collection(self, name: str) -> AdminResponse:
        return await self._admin_call({"action": "DELETE", "name": name})

    async def backup_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        return await self._admin_call(self._backup_params(name, location, backup_name))

    async def backup_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        return await self._submit(self._backup_params(name, location, backup_name))

    async def restore_collection(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> AdminResponse:
        backup_name = backup_name or self._latest_snapshot(self._location(location))
        if not backup_name:
            return AdminResponse(status=-1, errors=self._missing_snapshot(location))
        return await self._admin_call(self._restore_params(name, location, backup_name))

    async def restore_collection_async(
        self,
        name: str,
        location: Optional[str] = None,
        backup_name: Optional[str] = None,
    ) -> str:
        backup_name = backup_name or self._latest_snapshot(self._location(location))
        if not backup_name:
            raise ClusterOperationFailedError("No backup to restore", self._missing_snapshot(location))
        return await self._submit(self._restore_params(name, location, backup_name))

    async def optimize_collection(self, name: str) -> AdminResponse:
        http_status, body = await self._request(
            {"optimize": "true"},
            url=f"{self._base_url}/{name}/update",
            method="POST",
        )
        return self._to_admin_response(http_status, body)

    async def query_async_status(self, request_id: str) -> RequestStatusResponse:
        http_status, body = await self._request(
            {"action": "REQUESTSTATUS", "requestid": request_id},
            idempotent=True,
        )
        status = body.get("status")
        if isinstance(status, dict):
            state, message = status.get("state"), status.get("msg")
            state = None if state is None else str(state)
            message = None if message is None else str(message)
        else:
            response = self._to_admin_response(http_status, body)
            if not response.success:
                raise ClusterOperationFailedError(
                    response.message or f"Unable to query status of {request_id}", response.errors
                )
            state, message = None, None
        try:
            return RequestStatusResponse(
                state=state,
                message=message,
                errors=parse_failure_list(body.get("failure")),
            )
        except ValidationError as e:
            raise ProtocolError(f"Unreadable status of {request_id}: {e}", cause=e) from e
