"""HTTP transport for the remote JSON API."""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Union

import httpx

from common.logging_config import get_logger
from sdk.context import CallContext
from sdk.exceptions import DeadlineExceededError, OperationCancelledError, TransportError, raise_for_result

logger = get_logger(__name__)

CREDENTIAL_KEYS = frozenset({'auth', 'password', 'username'})

# how often a pending request checks whether its reply arrived
CANCEL_POLL_SECONDS = 0.05
MAX_PENDING_REQUESTS = 8


class Transport:
    """Issues one request per API call. Does not retry."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: API root, e.g. "https://api.pcloud.com"
            timeout: Per-request timeout in seconds
            client: Preconfigured httpx client (tests pass one with a MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = client if client is not None else httpx.Client(base_url=base_url, timeout=timeout)
        self._pool: Optional[ThreadPoolExecutor] = None
        logger.debug(f"Initialized Transport [base_url={base_url}]")

    def _request_timeout(self, context: Optional[CallContext]) -> float:
        remaining = context.remaining() if context is not None else None
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def call(
        self,
        method: str,
        params: Dict[str, str],
        body: Optional[bytes] = None,
        context: Optional[CallContext] = None,
        raw: bool = False,
        address: Any = None,
    ) -> Union[Dict[str, Any], bytes]:
        """
        Call a remote API method.

        Args:
            method: API method name, e.g. "file_open"
            params: Query parameters
            body: Request content; sent with PUT when given, otherwise GET
            context: Cancellation / deadline context
            raw: Return non-JSON replies as bytes instead of failing
            address: Address reference, attached to raised errors

        Returns:
            Decoded JSON reply, or the reply bytes when raw and not JSON

        Raises:
            APIError: If the reply carries a non-zero result
            TransportError: On network failures or unexpected HTTP status
            OperationCancelledError: If the context is cancelled or times out
        """
        if context is not None:
            context.check(method)

        visible = {k: v for k, v in params.items() if k not in CREDENTIAL_KEYS}
        logger.debug(f"Calling {method} params={visible} body_bytes={len(body) if body is not None else 0}")

        try:
            if context is None:
                response = self._send(method, params, body, self.timeout)
            else:
                response = self._send_cancellable(method, params, body, context, address)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling {method}: {e}")
            raise DeadlineExceededError(f"request timed out: {e}", method=method, address=address) from e
        except httpx.HTTPError as e:
            logger.error(f"Network error calling {method}: {type(e).__name__}: {e}")
            raise TransportError(f"request failed: {e}", method=method, address=address) from e

        if context is not None:
            context.check(method)

        if response.status_code != 200:
            logger.error(f"Unexpected HTTP status from {method}: {response.status_code}")
            raise TransportError(
                f"unexpected HTTP status {response.status_code}", method=method, address=address
            )

        content_type = response.headers.get('content-type', '')
        if raw and 'json' not in content_type:
            return response.content

        try:
            reply = response.json()
        except ValueError as e:
            raise TransportError(f"reply is not valid JSON: {e}", method=method, address=address) from e

        if reply.get('result', 0) != 0:
            logger.warning(f"API error from {method}: result={reply.get('result')} error={reply.get('error')}")
        raise_for_result(method, reply, address)
        return reply

    def _send(self, method: str, params: Dict[str, str], body: Optional[bytes], timeout: float) -> httpx.Response:
        if body is None:
            return self.session.get(f"/{method}", params=params, timeout=timeout)
        return self.session.put(f"/{method}", params=params, content=body, timeout=timeout)

    def _send_cancellable(
        self,
        method: str,
        params: Dict[str, str],
        body: Optional[bytes],
        context: CallContext,
        address: Any,
    ) -> httpx.Response:
        """
        Send on a worker thread and wait for the reply or for cancel().

        A request abandoned on cancel or deadline is left to finish on its
        worker; its reply is dropped.
        """
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=MAX_PENDING_REQUESTS, thread_name_prefix='sdk-transport')
        future = self._pool.submit(self._send, method, params, body, self._request_timeout(context))

        while not future.done():
            context.wait_cancelled(CANCEL_POLL_SECONDS)
            try:
                context.check(method)
            except OperationCancelledError as e:
                future.cancel()
                logger.debug(f"Abandoned in-flight {method}: {e}")
                e.address = address
                raise
        return future.result()

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False)
        self.session.close()

    def __enter__(self) -> 'Transport':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
