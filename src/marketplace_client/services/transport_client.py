"""HTTP transport for the marketplace API.

TransportClient attaches the session token to every call, maps failures onto the
client's exception hierarchy, and turns a 401 into a one-shot session teardown
announced through AuthExpiredEvent subscribers.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from json import JSONDecodeError
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from marketplace_client.auth.session_store import SessionStore
from marketplace_client.exceptions import (
    AuthExpiredError,
    DecodeError,
    NetworkError,
    ServerError,
)
from marketplace_client.observability.decorators import traced
from marketplace_client.observability.metrics import record_api_request, record_session_expired

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
LOGIN_PATH = "/login"

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class AuthExpiredEvent:
    """Signal that the session ended and the host should navigate to login.

    Attributes:
        login_path: Entry point the host application should show
        method: HTTP method of the call that was rejected
        path: API path of the call that was rejected
    """

    login_path: str
    method: str
    path: str


AuthExpiredListener = Callable[[AuthExpiredEvent], None]


class TransportClient:
    """HTTP client for the marketplace REST API.

    Each call opens a short-lived httpx.AsyncClient bounded by the deployment
    timeout. No call is retried automatically.
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        login_path: str = LOGIN_PATH,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Base URL of the marketplace API (e.g., "http://127.0.0.1:5000")
            session_store: Store providing the bearer token
            timeout_seconds: Bound applied to every request
            login_path: Login entry point announced when the session expires
        """
        self.base_url = base_url.rstrip("/")
        self.session_store = session_store
        self.timeout_seconds = timeout_seconds
        self.login_path = login_path
        self._listeners: list[AuthExpiredListener] = []

    def subscribe_auth_expired(self, listener: AuthExpiredListener) -> Callable[[], None]:
        """Register a callback for session expiry.

        Args:
            listener: Called with an AuthExpiredEvent after a 401 ends the session

        Returns:
            Callable that removes the subscription
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.session_store.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @traced("transport.request")
    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and decode the JSON response.

        Args:
            method: HTTP method
            path: API path, e.g. "/api/vendors/"
            body: JSON body
            params: Query string parameters
            data: Form fields (multipart when files are given)
            files: Files for a multipart upload

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            AuthExpiredError: On a 401 response (session already cleared)
            ServerError: On any other failure status
            NetworkError: When no response was received
            DecodeError: When a success body is not valid JSON
        """
        method = method.upper()
        url = f"{self.base_url}{path}"
        started = time.monotonic()
        outcome = "success"

        try:
            try:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.request(
                        method,
                        url,
                        json=body,
                        params=params,
                        data=data,
                        files=files,
                        headers=self._headers(),
                    )
            except httpx.TimeoutException as e:
                logger.error(f"{method} {path} timed out after {self.timeout_seconds}s: {e}")
                raise NetworkError(f"Request timed out after {self.timeout_seconds}s") from e
            except httpx.RequestError as e:
                logger.error(f"{method} {path} failed: {e}")
                raise NetworkError(f"Could not reach the marketplace service: {e}") from e

            if response.status_code == 401:
                if self._handle_auth_expired(method, path):
                    raise AuthExpiredError("Session expired, please log in again")
                raise AuthExpiredError(_error_message(response) or "Authentication required")

            if response.status_code >= 400:
                message = _error_message(response)
                logger.error(f"{method} {path} returned {response.status_code}: {message}")
                raise ServerError(response.status_code, message)

            return _decode_body(response, method, path)

        except Exception as e:
            outcome = type(e).__name__
            raise
        finally:
            record_api_request(method, outcome, time.monotonic() - started)

    def _handle_auth_expired(self, method: str, path: str) -> bool:
        """End the active session, if any, and notify subscribers.

        Returns:
            bool: True if a session was active and has now been cleared
        """
        if not self.session_store.is_authenticated():
            logger.warning(f"{method} {path} rejected with 401 without an active session")
            return False

        self.session_store.clear_token()
        record_session_expired()
        logger.warning(f"Session expired on {method} {path}, redirecting to {self.login_path}")

        event = AuthExpiredEvent(login_path=self.login_path, method=method, path=path)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.exception(f"Session expiry listener {listener!r} failed: {e}")
        return True


def _decode_body(response: httpx.Response, method: str, path: str) -> Any:
    if not response.content:
        return None

    try:
        return response.json()
    except (JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        logger.error(f"{method} {path} returned an undecodable body: {e}")
        raise DecodeError(f"Malformed response body from {path}") from e


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except (JSONDecodeError, UnicodeDecodeError, ValueError):
        return None

    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def decode_model(model: type[M], data: Any) -> M:
    """Validate a decoded body against a model.

    Raises:
        DecodeError: If the body does not match the model
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(f"Unexpected {model.__name__} payload: {e}") from e


def decode_list(model: type[M], data: Any, keys: Iterable[str] = ("items", "data")) -> list[M]:
    """Validate a listing body, accepting a bare array or an object wrapping one.

    Args:
        model: Model for each element
        data: Decoded JSON body
        keys: Wrapper keys to look for when the body is an object

    Returns:
        list: Parsed models in server order

    Raises:
        DecodeError: If the body is not a listing or an element does not match
    """
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                data = data[key]
                break

    if not isinstance(data, list):
        raise DecodeError(f"Expected a list of {model.__name__}, got {type(data).__name__}")

    return [decode_model(model, element) for element in data]
