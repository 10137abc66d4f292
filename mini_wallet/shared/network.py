"""requests-based HTTP client with timeouts, backoff and a small error taxonomy.

Used for the block-explorer API and the mail providers. JSON-RPC traffic to the
chain goes through web3's own provider instead.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, Exception, float], None]


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 15.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


@dataclass
class RetryConfig:
    """Exponential backoff: ``base_delay * 2**attempt`` capped at ``max_delay``."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    retry_statuses: frozenset[int] = field(
        default_factory=lambda: frozenset({408, 429, 500, 502, 503, 504})
    )

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * 2**attempt, self.max_delay)

    def is_retryable(self, error: Exception) -> bool:
        if isinstance(error, (Timeout, ConnectionError)):
            return True
        if isinstance(error, HTTPError):
            return getattr(error.response, "status_code", None) in self.retry_statuses
        return False


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()
DEFAULT_RETRY_CONFIG = RetryConfig()
# Mail sends are not idempotent, so they get exactly one attempt.
NO_RETRY_CONFIG = RetryConfig(max_retries=0)


def to_network_error(error: Exception, base_url: str, context: str = "") -> NetworkError:
    prefix = f"{context}: " if context else ""

    if isinstance(error, Timeout):
        return NetworkError(
            NetworkErrorType.TIMEOUT,
            f"{prefix}Request timed out: {base_url}",
            original_error=error,
        )
    if isinstance(error, ConnectionError):
        return NetworkError(
            NetworkErrorType.CONNECTION_ERROR,
            f"{prefix}Cannot connect to {base_url}. Check your network connection.",
            original_error=error,
        )
    if isinstance(error, HTTPError):
        status = getattr(error.response, "status_code", None)
        body = getattr(error.response, "text", None)
        return NetworkError(
            NetworkErrorType.HTTP_ERROR,
            f"{prefix}HTTP error {status}: {body or 'Unknown error'}",
            original_error=error,
            status_code=status,
            response_text=body,
        )
    return NetworkError(
        NetworkErrorType.UNKNOWN,
        f"{prefix}Network error: {error}",
        original_error=error,
    )


class NetworkClient:
    def __init__(
        self,
        base_url: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
        on_retry: RetryCallback | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.on_retry = on_retry
        self.session = session or requests.Session()

    def _with_retries(self, call: Callable[[], T], context: str) -> T:
        attempts = self.retry_config.max_retries + 1
        for attempt in range(attempts):
            try:
                return call()
            except Exception as e:
                if attempt + 1 >= attempts or not self.retry_config.is_retryable(e):
                    raise to_network_error(e, self.base_url, context) from e
                delay = self.retry_config.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                    context or "Request",
                    attempt + 1,
                    attempts,
                    delay,
                    e,
                )
                if self.on_retry:
                    self.on_retry(attempt + 1, e, delay)
                time.sleep(delay)
        raise AssertionError("unreachable")

    def _request(self, method: str, endpoint: str, kwargs: dict[str, Any]) -> requests.Response:
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url
        kwargs.setdefault("timeout", self.timeout_config.request_timeout)
        response = getattr(self.session, method)(url, **kwargs)
        response.raise_for_status()
        return response

    def get(self, endpoint: str = "", context: str = "", **kwargs) -> Any:
        """GET and decode a JSON body."""
        return self._with_retries(
            lambda: self._request("get", endpoint, dict(kwargs)).json(), context
        )

    def post(self, endpoint: str = "", context: str = "", **kwargs) -> dict[str, Any]:
        """POST and return the JSON body.

        A non-JSON body comes back as ``{"message": text}`` and an empty one
        as ``{"message": "", "headers": {...}}``.
        """

        def call() -> dict[str, Any]:
            response = self._request("post", endpoint, dict(kwargs))
            if not response.content:
                return {"message": "", "headers": dict(response.headers)}
            try:
                return response.json()
            except ValueError:
                return {"message": response.text}

        return self._with_retries(call, context)
