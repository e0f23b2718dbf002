from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests
from requests import Response


class WeatherError(RuntimeError):
    """Base error for every failure the bridge reports."""

    kind = "error"


class ConfigurationError(WeatherError):
    """Raised when the client is missing required configuration."""

    kind = "configuration"


class ValidationError(WeatherError, ValueError):
    """Raised when caller input is rejected before any request is made."""

    kind = "validation"


class TransportError(WeatherError):
    """Raised on connection-level failures."""

    kind = "transport"


class RequestTimeoutError(WeatherError):
    """Raised when a request times out or is cancelled."""

    kind = "timeout"


class ProviderError(WeatherError):
    """Raised when the provider answers with a non-2xx status."""

    kind = "provider"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuotaExceeded(ProviderError):
    """Raised when a provider reports a quota/usage limit issue."""


class FormatError(WeatherError):
    """Raised when a response body cannot be turned into a result."""

    kind = "format"


STATUS_MESSAGES: Dict[int, str] = {
    401: "Invalid API key",
    404: "Location not found",
    429: "API rate limit exceeded",
}

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "weatherbridge/1.0",
    "Accept": "application/json",
}


@dataclass
class RequestConfig:
    timeout: float = 30.0
    # Stored for operators; requests are never retried.
    retries: int = 3
    session_lifetime: float = 5 * 60


def status_message(status_code: int) -> str:
    return STATUS_MESSAGES.get(status_code, f"API request failed with status {status_code}")


class WeatherProvider:
    """Base class that owns the pooled session and HTTP error mapping."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self._time_func = time_func
        self._session_lock = threading.Lock()
        # An injected session is owned by the caller and never rotated.
        self._owns_session = session is None
        self._session = session or self._build_session()
        self._session_born = self._time_func()
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def session(self) -> requests.Session:
        if not self._owns_session:
            return self._session
        with self._session_lock:
            if self._time_func() - self._session_born >= self.request_config.session_lifetime:
                self._session.close()
                self._session = self._build_session()
                self._session_born = self._time_func()
            return self._session

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(DEFAULT_HEADERS)
        return session

    def _handle_response(self, response: Response) -> Response:
        if response.ok:
            return response
        self._log.error("API request failed with status %s: %s", response.status_code, response.text)
        message = status_message(response.status_code)
        if response.status_code == 429:
            raise QuotaExceeded(message, status_code=response.status_code)
        raise ProviderError(message, status_code=response.status_code)

    def _request(
        self,
        method: str,
        url: str,
        *,
        subject: str,
        cancel_event: Optional[threading.Event] = None,
        **kwargs,
    ) -> Response:
        """Issue one request, translating transport failures.

        ``subject`` names what is being fetched, e.g. ``"weather data for Paris"``,
        and ends up in the error messages.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise RequestTimeoutError(f"Request cancelled while fetching {subject}")
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request timeout while fetching %s", subject, exc_info=exc)
            raise RequestTimeoutError(f"Request timeout while fetching {subject}") from exc
        except requests.RequestException as exc:
            self._log.error("HTTP error while fetching %s", subject, exc_info=exc)
            raise TransportError(f"Failed to fetch {subject}") from exc
        return self._handle_response(response)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


__all__ = [
    "ConfigurationError",
    "FormatError",
    "ProviderError",
    "QuotaExceeded",
    "RequestConfig",
    "RequestTimeoutError",
    "TransportError",
    "ValidationError",
    "WeatherError",
    "WeatherProvider",
    "status_message",
]
