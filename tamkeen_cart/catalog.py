"""Product and package catalogs fetched from the storefront API and cached locally."""

import asyncio
import logging
from typing import Any, Generic, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as ModelValidationError

from .exceptions import NetworkError, PersistenceError
from .models import Package, Product
from .storage import LocalStorage
from .transitions import Notifier, log_notifier

logger = logging.getLogger(__name__)

Record = TypeVar("Record", bound=BaseModel)


class CatalogCache(Generic[Record]):
    """
    Cache-then-network catalog.

    Reads (``snapshot``, ``search``, ``get``) never wait on the network: they
    see the last-known records, hydrated from storage at construction and
    replaced after each successful fetch.
    """

    key: str = ""
    endpoint: str = ""
    record_model: type = Product

    def __init__(
        self,
        storage: LocalStorage,
        base_url: str,
        timeout: float = 30.0,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        min_search_length: int = 2,
        max_suggestions: int = 8,
    ) -> None:
        """
        Initialize the catalog.

        Args:
            storage: Durable key-value storage for the catalog snapshot
            base_url: Storefront API root
            timeout: Request timeout in seconds
            notifier: Callable receiving (level, message) for user-visible messages
            transport: Optional httpx transport (used to stub the endpoint)
            min_search_length: Shortest term for which ``suggest`` returns results
            max_suggestions: Maximum number of suggestions
        """
        self.storage = storage
        self.notifier = notifier or log_notifier
        self.min_search_length = min_search_length
        self.max_suggestions = max_suggestions
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._records: tuple = self._read_snapshot() or ()
        self._fetched = False
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    def _read_snapshot(self) -> Optional[tuple]:
        try:
            data = self.storage.get(self.key)
        except PersistenceError as e:
            logger.error(f"Could not load cached {self.key}: {e}")
            return None
        if data is None:
            return None
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed cached {self.key}")
            return None
        return self._parse(data)

    def _parse(self, data: Any) -> tuple:
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected {self.key} payload: expected a list", url=self.endpoint)

        records = []
        for item in data:
            try:
                records.append(self._build(item))
            except (ModelValidationError, TypeError) as e:
                logger.warning(f"Skipping malformed {self.key} record: {e}")
        return tuple(records)

    def _build(self, item: dict) -> Record:
        return self.record_model.model_validate(item)

    async def _fetch(self) -> tuple:
        logger.info(f"=== FETCH {self.key}: {self.endpoint} ===")
        try:
            response = await self.client.get(self.endpoint)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NetworkError(f"Failed to fetch {self.key}: {e}", url=self.endpoint) from e
        records = self._parse(data)
        logger.info(f"Fetched {len(records)} {self.key}")
        return records

    async def _refresh(self) -> tuple:
        try:
            records = await self._fetch()
        except NetworkError as e:
            logger.warning(f"{e}; using cached {self.key}")
            self.notifier("info", f"Showing saved {self.key}; the store could not be reached")
            return self._records

        if self._closed:
            logger.debug(f"Discarding {self.key} response for closed catalog")
            return self._records

        self._records = records
        self._fetched = True
        try:
            self.storage.set(self.key, [record.model_dump(mode="json") for record in records])
        except PersistenceError as e:
            logger.error(f"Could not save {self.key}: {e}")
        return records

    def start_refresh(self) -> Optional[asyncio.Task]:
        """Begin a background fetch, reusing one already in flight. Returns None once closed."""
        if self._closed:
            return None
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._refresh())
        return self._task

    async def refresh(self) -> tuple:
        """Force a re-fetch. On failure, or after ``aclose``, the last-known records are returned."""
        task = self.start_refresh()
        if task is None:
            logger.debug(f"{self.key} catalog is closed; serving cached records")
            return self._records
        return await asyncio.shield(task)

    async def load(self) -> tuple:
        """Records for this session, fetching only if no fetch has succeeded yet."""
        if self._fetched or self._closed:
            return self._records
        return await self.refresh()

    def snapshot(self) -> tuple:
        return self._records

    def get(self, record_id: int) -> Optional[Record]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def search(self, term: str) -> list[Record]:
        """
        Case-insensitive substring search over name and description.

        Name matches come first, then description-only matches; each group
        keeps catalog order.
        """
        needle = (term or "").strip().lower()
        if not needle:
            return []

        name_matches = []
        description_matches = []
        for record in self._records:
            if needle in record.name.lower():
                name_matches.append(record)
            elif needle in (record.description or "").lower():
                description_matches.append(record)
        return name_matches + description_matches

    def suggest(self, term: str) -> list[Record]:
        """Autocomplete results: nothing until the term reaches ``min_search_length``."""
        if len((term or "").strip()) < self.min_search_length:
            return []
        return self.search(term)[: self.max_suggestions]

    async def aclose(self) -> None:
        """Cancel any in-flight fetch and release the HTTP client."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug(f"Cancelled {self.key} fetch")
        await self.client.aclose()


class ProductCatalogCache(CatalogCache[Product]):
    """The full product catalog (``GET /api/product-all``)."""

    key = "products"
    endpoint = "/api/product-all"
    record_model = Product


class PackageCatalogCache(CatalogCache[Package]):
    """Basket packages (``GET /api/packages``) with image paths resolved against the media URL."""

    key = "packages"
    endpoint = "/api/packages"
    record_model = Package

    def __init__(self, storage: LocalStorage, base_url: str, media_base_url: Optional[str] = None, **kwargs) -> None:
        self.media_base_url = (media_base_url or base_url).rstrip("/")
        super().__init__(storage, base_url, **kwargs)

    def _build(self, item: dict) -> Package:
        package = Package.model_validate(item)
        if package.images and not package.image_url:
            package = package.model_copy(update={"image_url": self.resolve_image(package.images[0].image)})
        return package

    def resolve_image(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.media_base_url}/{path.lstrip('/')}"
