import asyncio
import os
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import aiohttp
from tqdm import tqdm

from osrs_icons.config.logger_config import logger
from osrs_icons.ingestion.application.concurrency import limit_concurrency
from osrs_icons.ingestion.domain.models import ProcessResult
from osrs_icons.ingestion.domain.url_hash import hash_url
from osrs_icons.ingestion.infrastructure.cache_store import CacheManifestStore
from osrs_icons.ingestion.infrastructure.image_codec import encode_cursor
from osrs_icons.ingestion.infrastructure.mw_client import DOWNLOAD_RETRIES, MediaWikiClient

CursorEncoder = Callable[[bytes, bool], str]


@dataclass(frozen=True)
class ProcessImagesConfig:
    concurrency: int = 10
    download_retries: int = DOWNLOAD_RETRIES
    encode_workers: int | None = None
    show_progress: bool = True


class ImageProcessor:
    def __init__(
        self,
        mw_client: MediaWikiClient,
        cache_store: CacheManifestStore,
        config: ProcessImagesConfig | None = None,
        encoder: CursorEncoder = encode_cursor,
    ) -> None:
        self.mw_client = mw_client
        self.cache_store = cache_store
        self.config = config or ProcessImagesConfig()
        self._encoder = encoder

    async def process(
        self,
        session: aiohttp.ClientSession,
        url_map: Mapping[str, str],
        use_cache: bool = True,
    ) -> ProcessResult:
        """Download and encode every ``key -> url`` pair into a CSS cursor value.

        With ``use_cache`` the manifest is consulted before downloading and is
        written back once, after every item has settled. Items that fail are
        logged and left out of the result.
        """
        manifest: dict[str, str] = {}
        if use_cache:
            manifest = await asyncio.to_thread(self.cache_store.load)
            logger.info("Cache: loaded {} cached entries.", len(manifest))

        icons: dict[str, str] = {}
        cache_hits = 0
        downloads = 0
        failures = 0
        total = len(url_map)
        loop = asyncio.get_running_loop()
        workers = self.config.encode_workers or os.cpu_count() or 1

        with ThreadPoolExecutor(max_workers=workers) as pool, tqdm(
            total=total,
            desc="Processing images",
            unit="img",
            leave=True,
            disable=not self.config.show_progress,
        ) as progress:

            async def _process(key: str, url: str) -> None:
                nonlocal cache_hits, downloads, failures
                try:
                    url_hash = hash_url(url)
                    cached = manifest.get(url_hash) if use_cache else None
                    if cached:
                        icons[key] = cached
                        cache_hits += 1
                        return

                    try:
                        data = await self.mw_client.download_with_retry(
                            session, url, retries=self.config.download_retries
                        )
                        is_svg = url.lower().endswith(".svg")
                        cursor_value = await loop.run_in_executor(pool, self._encoder, data, is_svg)
                    except Exception as exc:
                        logger.error("Failed to download/process {} with error type {}: {}", key, type(exc).__name__, exc)
                        failures += 1
                        return

                    icons[key] = cursor_value
                    if use_cache:
                        manifest[url_hash] = cursor_value
                    downloads += 1
                    if downloads % 100 == 0:
                        logger.info("Downloaded {} / ~{} new images...", downloads, total - cache_hits)
                finally:
                    progress.update(1)

            await limit_concurrency(
                [lambda key=key, url=url: _process(key, url) for key, url in url_map.items()],
                self.config.concurrency,
            )

        if use_cache:
            await asyncio.to_thread(self.cache_store.save, manifest)
            logger.info("Cache: {} hits, {} new downloads.", cache_hits, downloads)

        return ProcessResult(icons=icons, cache_hits=cache_hits, downloads=downloads, failures=failures)
