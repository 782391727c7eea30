"""
Base Platform Connector - Abstract interface for HTTP-backed platforms.

All connectors MUST implement this interface to ensure:
- Isolation (one platform failing never affects another)
- Replaceability
- Typed output (raw JSON is decoded once, here)
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import aiohttp

from core.exceptions import MalformedDataError
from platform_metrics.types import Platform, PlatformData

from .exceptions import (
    AuthenticationError,
    ConnectorError,
    FetchError,
    ProfileNotFoundError,
    RateLimitError,
)


logger = logging.getLogger(__name__)


class BasePlatformConnector(ABC):
    """
    Abstract base class for network platform connectors.

    Each connector must:
    1. Implement fetch_raw() - Get raw payloads from the platform
    2. Implement decode() - Convert them into a PlatformData variant

    Features:
    - Server-error retry with exponential backoff (no retry on 4xx/429)
    - Status-code to exception mapping
    - Consecutive-failure tracking
    """

    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 1
    RETRY_BACKOFF_BASE = 2.0
    USER_AGENT = "DareScore/1.0"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._session = session
        self._owns_session = session is None

        self._request_count = 0
        self._error_count = 0
        self._consecutive_failures = 0
        self._last_error: Optional[str] = None
        self._last_success: Optional[datetime] = None

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Platform served by this connector."""
        pass

    @abstractmethod
    async def fetch_raw(self, username: str) -> dict[str, Any]:
        """
        Fetch raw payloads from the platform API.

        Args:
            username: Platform username

        Returns:
            Dictionary of raw payloads (profile, activity, ...)

        Raises:
            ConnectorError: On any upstream failure
        """
        pass

    @abstractmethod
    def decode(self, raw: dict[str, Any], username: str) -> PlatformData:
        """
        Decode raw payloads into the typed platform variant.

        Raises:
            MalformedDataError: If the payload shape is unusable
        """
        pass

    async def fetch(self, username: str, candidate_id: Optional[str] = None) -> PlatformData:
        """
        Fetch and decode platform data (main entry point).

        ``candidate_id`` is unused; public profiles are the same for
        every candidate.

        Raises:
            ConnectorError: not found, rate limited, auth failure, outage
            MalformedDataError: unusable payload shape
        """
        try:
            raw = await self._fetch_with_retry(username)
            data = self.decode(raw, username)
        except (ConnectorError, MalformedDataError) as e:
            self._on_error(e)
            raise
        except (KeyError, TypeError, ValueError) as e:
            error = MalformedDataError(
                f"Unexpected {self.platform.value} payload: {e}",
                platform=self.platform.value,
                cause=e,
            )
            self._on_error(error)
            raise error from e

        self._on_success()
        return data

    async def _fetch_with_retry(self, username: str) -> dict[str, Any]:
        """Fetch, retrying only on server errors."""
        last_error: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                return await self.fetch_raw(username)
            except FetchError as e:
                if not e.is_server_error() or attempt + 1 >= self._max_retries:
                    raise
                wait_time = self.RETRY_BACKOFF_BASE ** attempt
                logger.warning(
                    f"[{self.platform.value}] Server error {e.status_code}, "
                    f"retrying in {wait_time}s (attempt {attempt + 1}/{self._max_retries})"
                )
                await asyncio.sleep(wait_time)
                last_error = e

        raise FetchError(
            message=f"Failed after {self._max_retries} attempts",
            platform=self.platform.value,
            original_error=last_error,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self.USER_AGENT,
        }

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[dict[str, Any]] = None,
        username: Optional[str] = None,
    ) -> Any:
        """Make HTTP request with status-code mapping."""
        session = await self._get_session()
        name = self.platform.value

        start_time = time.time()
        try:
            async with session.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json_body,
            ) as response:
                latency_ms = (time.time() - start_time) * 1000
                self._request_count += 1

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        platform=name,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                    )

                if response.status == 401:
                    raise AuthenticationError(
                        f"{name} rejected credentials",
                        platform=name,
                    )

                if response.status == 404 and username is not None:
                    raise ProfileNotFoundError(name, username)

                if response.status >= 400:
                    body = await response.text()
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        platform=name,
                        status_code=response.status,
                        response_body=body[:1000],
                        request_url=url,
                    )

                data = await response.json(content_type=None)
                logger.debug(f"[{name}] {method} {url} completed in {latency_ms:.1f}ms")
                return data

        except aiohttp.ClientError as e:
            raise FetchError(
                message=f"Connection error: {e}",
                platform=name,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise FetchError(
                message=f"Timed out after {self._timeout}s",
                platform=name,
                request_url=url,
                original_error=e,
            )

    def _on_success(self) -> None:
        self._consecutive_failures = 0
        self._last_success = datetime.now(timezone.utc)

    def _on_error(self, error: Exception) -> None:
        self._error_count += 1
        self._consecutive_failures += 1
        self._last_error = str(error)
        logger.warning(f"[{self.platform.value}] Fetch failed: {error}")

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def is_healthy(self) -> bool:
        return self._consecutive_failures == 0

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BasePlatformConnector":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
