"""
Generic HTTP client for the billing backend.

Executes operations described by a ``BackendOperation`` table: fills the path
template, validates and serializes the body, attaches the bearer credential,
enforces a fixed timeout and validates the response shape. It never
interprets status codes; non-2xx responses surface as ``BackendError``.
"""

import logging
import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx
import pydantic
from pydantic import TypeAdapter

from shared.exceptions import (
    BackendError,
    InvalidResponseError,
    TransportError,
    ValidationError,
)

from .operations import BackendOperation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

_PATH_PARAM = re.compile(r":(\w+)")


class BackendServiceClient:
    """
    Async client for one backend service.

    Safe for concurrent use: the only state is the shared ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str,
        operations: Mapping[str, BackendOperation],
        auth_token: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
        service: str = "billing-backend",
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend root URL
            operations: Operation name -> descriptor
            auth_token: Static bearer credential
            timeout: Per-request timeout in seconds
            http_client: Optional pre-built client (tests inject a mock transport)
            service: Service name reported in errors
        """
        self._base_url = base_url.rstrip("/")
        self._operations = dict(operations)
        self._timeout = timeout
        self._service = service
        self._headers = {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
        }
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._adapters = {
            name: TypeAdapter(op.response) for name, op in self._operations.items()
        }

    @property
    def service(self) -> str:
        return self._service

    def build_path(self, operation: BackendOperation, params: Mapping[str, Any]) -> str:
        """Fill ``:name`` segments of the path template with encoded params."""
        for name in operation.params:
            value = params.get(name)
            if not isinstance(value, str) or not value:
                raise ValidationError(
                    f"Missing or empty path parameter: {name}",
                    code="INVALID_PARAMETER",
                    details={"parameter": name},
                )

        def substitute(match: re.Match) -> str:
            return quote(params[match.group(1)], safe="")

        return _PATH_PARAM.sub(substitute, operation.path)

    def _serialize_payload(
        self,
        operation: BackendOperation,
        payload: Any,
    ) -> Optional[dict[str, Any]]:
        if operation.payload is None:
            return None
        try:
            model = (
                payload
                if isinstance(payload, operation.payload)
                else operation.payload.model_validate(payload)
            )
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid request payload",
                code="INVALID_PAYLOAD",
                details={"errors": e.errors(include_url=False)},
            ) from e
        return model.model_dump(mode="json")

    async def call(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        """
        Execute a named operation.

        Args:
            name: Operation name from the table
            params: Path parameter values
            payload: Request body (model instance or dict) for operations with one

        Returns:
            The validated response body

        Raises:
            ValidationError: Bad parameters or payload (no request is sent)
            TransportError: Connection failure or timeout
            BackendError: Non-2xx response
            InvalidResponseError: 2xx body does not match the response schema
        """
        operation = self._operations.get(name)
        if operation is None:
            raise ValueError(f"Unknown backend operation: {name}")

        path = self.build_path(operation, params or {})
        body = self._serialize_payload(operation, payload)

        try:
            response = await self._http.request(
                operation.method,
                f"{self._base_url}{path}",
                headers=self._headers,
                json=body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{self._service} {name} timed out after {self._timeout}s",
                self._service,
                operation=name,
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"{self._service} {name} request failed: {e}",
                self._service,
                operation=name,
            ) from e

        if not response.is_success:
            raise self._backend_error(name, response)

        try:
            return self._adapters[name].validate_python(response.json())
        except ValueError as e:
            # JSON decode and schema errors
            raise InvalidResponseError(
                f"{self._service} {name} returned an unexpected response",
                self._service,
                operation=name,
            ) from e

    def _backend_error(self, name: str, response: httpx.Response) -> BackendError:
        body: Any = None
        message = ""
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            message = body["message"]
        elif isinstance(body, str):
            message = body
        if not message:
            message = response.reason_phrase or f"HTTP {response.status_code}"

        logger.debug(
            f"{self._service} {name} responded {response.status_code}: {message}"
        )
        return BackendError(
            response.status_code,
            message,
            self._service,
            body=body,
            operation=name,
        )

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        await self._http.aclose()
