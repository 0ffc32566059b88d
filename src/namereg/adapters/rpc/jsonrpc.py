"""
JSON-RPC client adapter - HTTP transport to the naming daemon.

Sends JSON-RPC 1.0 requests over HTTP POST with basic authentication and
translates every failure into a domain exception:

- Connection refused, timeout, TLS, non-JSON body -> RpcTransportError
- Response carrying a JSON-RPC "error" object -> RemoteError (mapped)

The daemon answers application errors with HTTP 500 and a JSON body, so
the body is inspected before the status code.

No retry loops. Callers own their retry policy.
"""

import itertools
import logging
from typing import Any

import httpx

from namereg.domain.exceptions import RpcTransportError

from .errors import map_remote_error

logger = logging.getLogger(__name__)

USER_AGENT = "namereg"


class JsonRpcClient:
    """
    Synchronous JSON-RPC client over httpx.

    Args:
        url: Endpoint URL, e.g. "http://127.0.0.1:8336"
        username: RPC user name
        password: RPC password
        timeout_s: Request timeout in seconds
        transport: Optional httpx transport (tests, custom TLS)
    """

    def __init__(
        self,
        url: str,
        *,
        username: str = "",
        password: str = "",
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_s = timeout_s
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            auth=httpx.BasicAuth(username, password),
            timeout=timeout_s,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def __enter__(self) -> "JsonRpcClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def call(self, method: str, *params: Any) -> Any:
        """
        Execute a remote method with positional parameters.

        Args:
            method: RPC method name, e.g. "name_show"
            *params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            RpcTransportError: On connectivity, HTTP or decoding failure
            RemoteError: If the daemon returned an error object
        """
        payload = {"jsonrpc": "1.0", "id": next(self._ids), "method": method, "params": list(params)}
        logger.debug("RPC call %s (id=%s)", method, payload["id"])

        try:
            response = self._client.post(self._url, json=payload)
        except httpx.TimeoutException as e:
            raise RpcTransportError(
                f"RPC request timed out after {self._timeout_s}s"
            ) from e
        except httpx.ConnectError as e:
            raise RpcTransportError(f"Failed to connect to {self._url}") from e
        except httpx.HTTPError as e:
            raise RpcTransportError(f"HTTP error: {e}") from e

        if response.status_code in (401, 403):
            raise RpcTransportError(
                "RPC authentication failed, check user and password",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RpcTransportError(
                f"HTTP {response.status_code}: response was not valid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise RpcTransportError(
                "Response JSON was not an object", status_code=response.status_code
            )

        error = body.get("error")
        if error is not None:
            if not isinstance(error, dict):
                raise RpcTransportError(f"Malformed RPC error: {error!r}")
            code = error.get("code")
            if not isinstance(code, int) or isinstance(code, bool):
                raise RpcTransportError(f"Malformed RPC error: {error!r}")
            raise map_remote_error(code, str(error.get("message", "")))

        if response.status_code >= 400:
            raise RpcTransportError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        return body.get("result")
