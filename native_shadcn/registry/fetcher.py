"""Template fetcher — retrieves registry items and their file content over HTTP.

Items are served at ``{base_url}/{name}.json`` and the listing at
``{base_url}/index.json``. ``fetch_item``/``fetch_index`` raise on failure;
``fetch_template`` retries transient failures with exponential backoff and
reports a definitive failure as None, so one unavailable component never
aborts its siblings.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable

import httpx

from native_shadcn import __version__
from native_shadcn.config import RegistryConfig
from native_shadcn.errors import FetchError, RegistryItemError
from native_shadcn.registry.models import RegistryItem, parse_registry_item
from native_shadcn.registry.store import RegistryStore

logger = logging.getLogger(__name__)

INDEX_PATH = "index.json"

_HEADERS = {
    "Accept": "application/json",
    "User-Agent": f"native-shadcn/{__version__}",
}

_STATUS_MESSAGES = {
    401: "Unauthorized. Check your registry credentials.",
    403: "Forbidden. Access denied to registry.",
}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
    return float(2**attempt)


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _item_path(name: str) -> str:
    return name if _is_url(name) else f"{name}.json"


def _join_url(base_url: str, path: str) -> str:
    if not path:
        return base_url
    if _is_url(path):
        return path
    return f"{base_url}/{path.lstrip('/')}"


def _decode(response: httpx.Response, path: str) -> Any:
    """Check the status of ``response`` and decode its JSON body."""
    status = response.status_code
    if not response.is_success:
        if status == 404:
            message = f"Not found: {path}"
        else:
            message = _STATUS_MESSAGES.get(status, f"Failed to fetch {path}: HTTP {status}")
        raise FetchError(message, status_code=status)

    try:
        return response.json()
    except ValueError as e:
        raise RegistryItemError(f"Failed to parse JSON response for {path}") from e


def first_file_content(item: RegistryItem) -> str | None:
    """Content of the item's first file, or None if the record carries none."""
    if not item.files:
        return None
    return item.files[0].content


# ---------------------------------------------------------------------------
# Synchronous fetcher
# ---------------------------------------------------------------------------


class TemplateFetcher:
    """Blocking registry client built on ``httpx.Client``.

    Parameters
    ----------
    config : RegistryConfig | None
        Registry endpoint settings. Read from the environment when *None*.
    client : httpx.Client | None
        Client to use. When *None* the fetcher creates (and owns) one.
    sleep : callable
        Used to wait between retries.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or RegistryConfig.from_env()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self.config.timeout, headers=_HEADERS, follow_redirects=True
        )
        self._sleep = sleep

    def __enter__(self) -> TemplateFetcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def registry_url(self, path: str = "") -> str:
        return _join_url(self.config.base_url, path)

    def _get_json(self, path: str) -> Any:
        url = self.registry_url(path)
        try:
            response = self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise FetchError(f"Failed to reach registry at {url}: {e}") from e
        return _decode(response, path)

    def fetch_item(self, name: str) -> RegistryItem:
        """Fetch and validate one registry item. Raises on any failure."""
        return parse_registry_item(self._get_json(_item_path(name)))

    def fetch_store(self) -> RegistryStore:
        """Fetch ``index.json`` and load it into a :class:`RegistryStore`."""
        return RegistryStore.from_index(self._get_json(INDEX_PATH))

    def fetch_index(self) -> list[RegistryItem]:
        """Fetch ``index.json`` as a list of items, in registry order."""
        return list(self.fetch_store())

    def fetch_template(self, name: str, max_retries: int | None = None) -> str | None:
        """Return the first file's content for ``name``, or None if unavailable.

        Transport errors and non-success statuses are retried up to
        ``max_retries`` extra times, waiting ``2 ** attempt`` seconds before
        each retry. A malformed record is reported as None without retrying.
        Never raises.
        """
        retries = self.config.max_retries if max_retries is None else max_retries

        for attempt in range(retries + 1):
            try:
                item = self.fetch_item(name)
            except RegistryItemError as e:
                logger.warning("Registry item '%s' is malformed: %s", name, e)
                return None
            except FetchError as e:
                logger.debug("Fetching '%s' failed (attempt %d/%d): %s",
                             name, attempt + 1, retries + 1, e)
                if attempt < retries:
                    self._sleep(backoff_delay(attempt))
                continue

            content = first_file_content(item)
            if content is None:
                logger.warning("Registry item '%s' has no file content", name)
            return content

        logger.error("Failed to fetch '%s' from registry (registry URL: %s)",
                     name, self.config.base_url)
        return None


# ---------------------------------------------------------------------------
# Asynchronous fetcher
# ---------------------------------------------------------------------------


class AsyncTemplateFetcher:
    """Non-blocking counterpart of :class:`TemplateFetcher`.

    Each ``fetch_template`` call is independent; retries wait with
    ``asyncio.sleep`` so only the calling task is suspended.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or RegistryConfig.from_env()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.config.timeout, headers=_HEADERS, follow_redirects=True
        )
        self._sleep = sleep

    async def __aenter__(self) -> AsyncTemplateFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def registry_url(self, path: str = "") -> str:
        return _join_url(self.config.base_url, path)

    async def _get_json(self, path: str) -> Any:
        url = self.registry_url(path)
        try:
            response = await self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise FetchError(f"Failed to reach registry at {url}: {e}") from e
        return _decode(response, path)

    async def fetch_item(self, name: str) -> RegistryItem:
        return parse_registry_item(await self._get_json(_item_path(name)))

    async def fetch_store(self) -> RegistryStore:
        return RegistryStore.from_index(await self._get_json(INDEX_PATH))

    async def fetch_template(self, name: str, max_retries: int | None = None) -> str | None:
        """Async version of :meth:`TemplateFetcher.fetch_template`."""
        retries = self.config.max_retries if max_retries is None else max_retries

        for attempt in range(retries + 1):
            try:
                item = await self.fetch_item(name)
            except RegistryItemError as e:
                logger.warning("Registry item '%s' is malformed: %s", name, e)
                return None
            except FetchError as e:
                logger.debug("Fetching '%s' failed (attempt %d/%d): %s",
                             name, attempt + 1, retries + 1, e)
                if attempt < retries:
                    await self._sleep(backoff_delay(attempt))
                continue

            content = first_file_content(item)
            if content is None:
                logger.warning("Registry item '%s' has no file content", name)
            return content

        logger.error("Failed to fetch '%s' from registry (registry URL: %s)",
                     name, self.config.base_url)
        return None

    async def fetch_templates(self, names: Iterable[str]) -> dict[str, str | None]:
        """Fetch several templates concurrently. Failures map to None."""
        unique = list(dict.fromkeys(names))
        results = await asyncio.gather(*(self.fetch_template(name) for name in unique))
        return dict(zip(unique, results))
