"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

import os
import webbrowser
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from unwatched_browser.models import (
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    PLACEHOLDER_SERVER_KEY,
    Entry,
    UserConfig,
)
from unwatched_browser.services import queue_api_service as _queue_api

SERVER_KEY_ENV_VAR = "UNWATCHED_SERVER_KEY"


@runtime_checkable
class QueueApiService(Protocol):
    """Interface for the queue server's HTTP operations."""

    async def fetch_unwatched(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: float,
    ) -> list[Entry]:
        """Fetch every unwatched entry."""
        ...

    async def set_video_watched(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        server_key: str,
        video_id: str,
        timeout_seconds: float,
    ) -> None:
        """Mark one entry watched."""
        ...

    async def insert_channel(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        channel_id: str,
        timeout_seconds: float,
    ) -> None:
        """Register a channel for crawling."""
        ...

    async def fetch_channel_ids(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: float,
    ) -> list[str]:
        """Fetch the ids of all crawled channels."""
        ...


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies the shared key sent with mutation requests."""

    def server_key(self) -> str: ...


@runtime_checkable
class ResourceOpener(Protocol):
    """Opens an external URL (video page) outside the app."""

    def open(self, url: str) -> None: ...


class DefaultQueueApiService:
    """Default adapter that delegates to function-based queue API services."""

    async def fetch_unwatched(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: float,
    ) -> list[Entry]:
        return await _queue_api.fetch_unwatched(
            client=client, base_url=base_url, timeout_seconds=timeout_seconds
        )

    async def set_video_watched(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        server_key: str,
        video_id: str,
        timeout_seconds: float,
    ) -> None:
        await _queue_api.set_video_watched(
            client=client,
            base_url=base_url,
            server_key=server_key,
            video_id=video_id,
            timeout_seconds=timeout_seconds,
        )

    async def insert_channel(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        channel_id: str,
        timeout_seconds: float,
    ) -> None:
        await _queue_api.insert_channel(
            client=client,
            base_url=base_url,
            channel_id=channel_id,
            timeout_seconds=timeout_seconds,
        )

    async def fetch_channel_ids(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: float,
    ) -> list[str]:
        return await _queue_api.fetch_channel_ids(
            client=client, base_url=base_url, timeout_seconds=timeout_seconds
        )


class ConfigCredentialProvider:
    """Reads the server key from the environment, then the config file.

    Falls back to a placeholder key until the server grows real auth.
    """

    def __init__(self, config: UserConfig | None = None, environ: Mapping[str, str] | None = None):
        self._config = config
        self._environ = os.environ if environ is None else environ

    def server_key(self) -> str:
        from_env = self._environ.get(SERVER_KEY_ENV_VAR, "").strip()
        if from_env:
            return from_env
        if self._config is not None and self._config.server_key.strip():
            return self._config.server_key.strip()
        return PLACEHOLDER_SERVER_KEY


class BrowserResourceOpener:
    """Opens URLs in the system web browser."""

    def open(self, url: str) -> None:
        webbrowser.open(url)


@dataclass(slots=True)
class QueueConnection:
    """Where and how to reach the queue server.

    ``client`` is the shared AsyncClient; the app sets it on mount and clears
    it on unmount. ``None`` makes each call use a temporary client.
    """

    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    client: httpx.AsyncClient | None = None


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    queue_api: QueueApiService
    credentials: CredentialProvider
    opener: ResourceOpener


def build_default_app_services(config: UserConfig | None = None) -> AppServices:
    """Build default app services backed by existing function-based modules."""
    return AppServices(
        queue_api=DefaultQueueApiService(),
        credentials=ConfigCredentialProvider(config),
        opener=BrowserResourceOpener(),
    )


def bind_unwatched_fetcher(
    queue_api: QueueApiService, connection: QueueConnection
) -> Callable[[], Awaitable[list[Entry]]]:
    """Return a zero-argument coroutine factory reading the unwatched collection."""

    async def _fetch() -> list[Entry]:
        return await queue_api.fetch_unwatched(
            client=connection.client,
            base_url=connection.base_url,
            timeout_seconds=connection.timeout_seconds,
        )

    return _fetch


__all__ = [
    "SERVER_KEY_ENV_VAR",
    "AppServices",
    "BrowserResourceOpener",
    "ConfigCredentialProvider",
    "CredentialProvider",
    "DefaultQueueApiService",
    "QueueApiService",
    "QueueConnection",
    "ResourceOpener",
    "bind_unwatched_fetcher",
    "build_default_app_services",
]
