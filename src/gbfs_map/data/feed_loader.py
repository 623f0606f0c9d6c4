"""GBFS discovery and feed loading from URLs or local files."""

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import urljoin, urlparse

from pydantic import BaseModel, ValidationError

from gbfs_map.data.config import MapConfig, get_map_config
from gbfs_map.data.gbfs_client import GBFSClient
from gbfs_map.data.rate_limiter import RateLimiter
from gbfs_map.models.gbfs import DiscoveryFeed, SystemInformation

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Feeds the map loads when the discovery document lists them, in load order
MAP_FEEDS = [
    "system_information",
    "geofencing_zones",
    "station_information",
    "station_status",
    "vehicle_status",
    "free_bike_status",  # GBFS 2.x name of vehicle_status
    "vehicle_types",
    "system_pricing_plans",
]


class GBFSLoadError(Exception):
    """A load attempt failed as a whole (e.g. invalid discovery document)."""


@dataclass
class DiscoverySummary:
    """What a discovery document announces."""

    version: str | None
    last_updated: int | str | None
    feeds: list[DiscoveryFeed]

    @property
    def feed_names(self) -> list[str]:
        return [f.name for f in self.feeds]


@dataclass
class FeedError:
    """A single feed that could not be loaded."""

    feed: str
    error: str


@dataclass
class FeedLoadResult:
    """Outcome of loading several feeds: successes and failures side by side."""

    results: dict[str, Any] = field(default_factory=dict)
    errors: list[FeedError] = field(default_factory=list)

    @property
    def requested(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def loaded(self) -> int:
        return len(self.results)


def feed_data(payload: Any, feed: str) -> dict[str, Any]:
    """The `data` block of a feed payload.

    An absent feed yields an empty dict. A payload that is not shaped like a
    GBFS feed is logged and treated as absent.
    """
    if payload is None:
        return {}
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {feed}: payload has no data object")
        return {}
    return data


def parse_records(model: type[ModelT], records: Any, kind: str) -> list[ModelT]:
    """Validate feed records one by one, skipping (and logging) invalid ones."""
    if not isinstance(records, list):
        logger.warning(f"Ignoring {kind} records: expected a list, got {type(records).__name__}")
        return []
    parsed: list[ModelT] = []
    for index, raw in enumerate(records):
        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping {kind} record {index}: {e.error_count()} validation errors")
    return parsed


def parse_discovery(data: Any) -> DiscoverySummary:
    """Validate a discovery document (GBFS 3.x or 2.x).

    GBFS 3.x lists feeds under data.feeds; 2.x nests them per language
    (data.<lang>.feeds), in which case the first language is used.

    Raises:
        GBFSLoadError: If the document has no feed list.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise GBFSLoadError(f"Discovery file is not valid JSON: {e}") from e

    body = data.get("data") if isinstance(data, dict) else None
    if not isinstance(body, dict):
        raise GBFSLoadError("Invalid GBFS discovery file format")

    raw_feeds = body.get("feeds")
    if raw_feeds is None:
        for language, block in body.items():
            if isinstance(block, dict) and isinstance(block.get("feeds"), list):
                logger.debug(f"Using GBFS 2.x discovery feeds for language '{language}'")
                raw_feeds = block["feeds"]
                break

    if not isinstance(raw_feeds, list):
        raise GBFSLoadError("Invalid GBFS discovery file format")

    return DiscoverySummary(
        version=data.get("version"),
        last_updated=data.get("last_updated"),
        feeds=parse_records(DiscoveryFeed, raw_feeds, "discovery feed"),
    )


def _is_remote(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


class GBFSLoader:
    """Holds one system's discovery document and the feeds loaded from it.

    A loader is bound to a single source: either a discovery URL (feeds are
    fetched over HTTP) or a set of local files (feeds are looked up among
    them). Loading a new discovery document discards previously loaded feeds.
    """

    def __init__(self, config: MapConfig | None = None, rate_limiter: RateLimiter | None = None):
        """Initialize the loader.

        Args:
            config: Map configuration; defaults to the environment config.
            rate_limiter: Limiter shared by all requests of this loader.
        """
        self._config = config or get_map_config()
        self._rate_limiter = rate_limiter or RateLimiter(self._config.min_request_interval_seconds)
        self.discovery: DiscoverySummary | None = None
        self.base_url: str | None = None
        self.feeds: dict[str, Any] = {}
        self._local_files: dict[str, Any] = {}

    @property
    def is_local(self) -> bool:
        return bool(self._local_files)

    def load_discovery(self, data: Any, source: str = "") -> DiscoverySummary:
        """Validate and adopt a discovery document.

        Args:
            data: Parsed JSON (or a JSON string) of gbfs.json.
            source: URL or file name the document came from. Relative feed
                URLs are resolved against it when it is an http(s) URL.

        Returns:
            Summary of the announced feeds.

        Raises:
            GBFSLoadError: If the document is not a valid discovery file.
        """
        summary = parse_discovery(data)

        self.discovery = summary
        self.base_url = source[: source.rfind("/") + 1] if _is_remote(source) else None
        self.feeds = {}
        self._local_files = {}

        logger.info(
            f"GBFS discovery loaded: version {summary.version}, {len(summary.feeds)} feeds"
        )
        return summary

    async def load_from_url(self, url: str) -> DiscoverySummary:
        """Fetch a discovery document over HTTP and adopt it.

        Raises:
            GBFSLoadError: If the document cannot be fetched or is invalid.
        """
        try:
            async with GBFSClient(self._config, self._rate_limiter) as client:
                data = await client.fetch_json(url)
        except Exception as e:
            raise GBFSLoadError(f"Failed to fetch {url}: {e}") from e

        return self.load_discovery(data, url)

    def load_from_files(self, paths: Sequence[Path]) -> DiscoverySummary:
        """Read a set of local GBFS files and adopt the discovery document among them.

        The discovery document is the file named gbfs.json, or else the first
        file whose name contains "gbfs".

        Raises:
            GBFSLoadError: If no discovery file is present or a file is not JSON.
        """
        paths = [Path(p) for p in paths]
        discovery_path = next((p for p in paths if p.name == "gbfs.json"), None)
        if discovery_path is None:
            discovery_path = next((p for p in paths if "gbfs" in p.name), None)
        if discovery_path is None:
            raise GBFSLoadError(
                "No gbfs.json file found in selection. Please include the main discovery file."
            )

        local_files: dict[str, Any] = {}
        for path in paths:
            try:
                local_files[path.name] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise GBFSLoadError(f"Failed to parse {path.name}: {e}") from e

        logger.info(f"Loaded {len(local_files)} local files")
        summary = self.load_discovery(local_files[discovery_path.name], discovery_path.name)
        self._local_files = local_files
        return summary

    def load_from_directory(self, directory: Path) -> DiscoverySummary:
        """Load every *.json file of a directory (see load_from_files)."""
        return self.load_from_files(sorted(Path(directory).glob("*.json")))

    def _find_feed(self, feed_name: str) -> DiscoveryFeed:
        if self.discovery is None:
            raise GBFSLoadError("No GBFS discovery file loaded")
        for feed in self.discovery.feeds:
            if feed.name == feed_name:
                return feed
        raise KeyError(f'Feed "{feed_name}" not found in GBFS discovery file')

    def _local_feed(self, feed: DiscoveryFeed) -> Any:
        candidates = [feed.url, Path(urlparse(feed.url).path).name, f"{feed.name}.json"]
        for name in candidates:
            if name in self._local_files:
                return self._local_files[name]
        raise FileNotFoundError(
            f"Local file not found: {feed.name}. Please select the {feed.url} file."
        )

    async def load_feed(self, feed_name: str, client: GBFSClient | None = None) -> Any:
        """Load one feed announced by the discovery document.

        Args:
            feed_name: Feed name, e.g. "station_information".
            client: Open client to reuse for remote feeds.

        Returns:
            The feed's parsed JSON payload.

        Raises:
            GBFSLoadError: If no discovery document is loaded.
            KeyError: If the feed is not announced.
            FileNotFoundError: If a local feed file is missing.
            httpx.HTTPError: If fetching a remote feed fails.
        """
        feed = self._find_feed(feed_name)

        if self._local_files:
            data = self._local_feed(feed)
        else:
            url = feed.url if _is_remote(feed.url) else urljoin(self.base_url or "", feed.url)
            if client is None:
                async with GBFSClient(self._config, self._rate_limiter) as own_client:
                    data = await own_client.fetch_json(url)
            else:
                data = await client.fetch_json(url)

        self.feeds[feed_name] = data
        return data

    async def load_feeds(self, feed_names: Iterable[str]) -> FeedLoadResult:
        """Load several feeds one after another, collecting failures.

        Returns:
            FeedLoadResult with payloads of loaded feeds and one error per failure.
        """
        result = FeedLoadResult()
        names = list(feed_names)

        async with GBFSClient(self._config, self._rate_limiter) as client:
            for name in names:
                try:
                    result.results[name] = await self.load_feed(name, client)
                except Exception as e:
                    logger.warning(f"Error loading feed {name}: {e}")
                    result.errors.append(FeedError(feed=name, error=str(e)))

        logger.info(f"Loaded {result.loaded} of {result.requested} feeds")
        return result

    def get_feed(self, feed_name: str) -> Any | None:
        """Payload of a loaded feed, or None."""
        return self.feeds.get(feed_name)

    def has_feed(self, feed_name: str) -> bool:
        """True if the discovery document announces the feed."""
        return self.discovery is not None and feed_name in self.discovery.feed_names

    def available_feeds(self) -> list[str]:
        """Names of all announced feeds."""
        return self.discovery.feed_names if self.discovery else []

    def map_feeds(self) -> list[str]:
        """Announced feeds the map uses, in load order."""
        available = set(self.available_feeds())
        return [name for name in MAP_FEEDS if name in available]

    def system_information(self) -> SystemInformation | None:
        """Parsed system_information data, if that feed was loaded."""
        payload = self.get_feed("system_information")
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            return None
        try:
            return SystemInformation.model_validate(payload["data"])
        except ValidationError as e:
            logger.warning(f"Invalid system_information: {e.error_count()} validation errors")
            return None
