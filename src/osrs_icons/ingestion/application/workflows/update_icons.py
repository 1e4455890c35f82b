import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass

import aiohttp

from osrs_icons.config.logger_config import logger
from osrs_icons.config.settings import Settings
from osrs_icons.ingestion.application.workflows.category_crawl import CategoryCrawler
from osrs_icons.ingestion.application.workflows.process_images import ImageProcessor
from osrs_icons.ingestion.domain.collisions import resolve_collisions_with_main_icons
from osrs_icons.ingestion.domain.models import CollisionStats, ProcessResult, UpdateSummary
from osrs_icons.ingestion.domain.rules import build_image_requests, filter_image_files
from osrs_icons.ingestion.infrastructure.codegen_sink import GeneratedModuleWriter
from osrs_icons.ingestion.infrastructure.exports_reader import read_generated_exports
from osrs_icons.ingestion.infrastructure.mw_client import MediaWikiClient

ITEM_IMAGES_CATEGORY = "Category:Item_inventory_images"
ICONS_ROOT_CATEGORY = "Category:Icons"

ICONS_MODULE = "icons.ts"
ICONS_META_MODULE = "meta.ts"
CATEGORY_ICONS_MODULE = "category-icons.ts"
CATEGORY_ICONS_META_MODULE = "category-icons-meta.ts"


@dataclass(frozen=True)
class UpdateWorkflowConfig:
    use_cache: bool = True
    page_size: int = 200
    connector_limit: int = 0
    connector_limit_per_host: int = 10
    connector_ttl_dns_cache: int = 300


class _UpdateWorkflowBase:
    def __init__(
        self,
        mw_client: MediaWikiClient,
        processor: ImageProcessor,
        writer: GeneratedModuleWriter,
        settings: Settings | None = None,
        config: UpdateWorkflowConfig | None = None,
    ) -> None:
        self.mw_client = mw_client
        self.processor = processor
        self.writer = writer
        self.settings = settings or Settings()
        self.config = config or UpdateWorkflowConfig()

    def _open_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=self.config.connector_limit,
            limit_per_host=self.config.connector_limit_per_host,
            ttl_dns_cache=self.config.connector_ttl_dns_cache,
        )
        return aiohttp.ClientSession(
            connector=connector,
            headers={"User-Agent": self.settings.user_agent},
            timeout=aiohttp.ClientTimeout(total=self.settings.http_timeout_seconds),
        )

    async def _generate(
        self,
        icons: Mapping[str, str],
        module_name: str,
        meta_module_name: str,
        array_name: str,
        type_name: str,
    ) -> tuple[list[str], int]:
        logger.info("Generating code...")
        output_path = self.writer.path_for(module_name)
        names = await asyncio.to_thread(self.writer.emit, icons, output_path)

        logger.info("Generating icon metadata...")
        meta_path = self.writer.path_for(meta_module_name)
        await asyncio.to_thread(self.writer.emit_meta, names, meta_path, array_name, type_name)

        output_bytes = output_path.stat().st_size
        logger.info("Generated {} ({:.1f} MB)", output_path, output_bytes / (1024 * 1024))
        logger.info("Generated {} ({} icon names)", meta_path, len(names))
        return names, output_bytes

    @staticmethod
    def _summarize(
        *,
        started: float,
        discovered: int,
        supported: int,
        requested: int,
        resolved: int,
        result: ProcessResult,
        processed: int,
        names: list[str],
        output_bytes: int,
        collisions: CollisionStats | None = None,
    ) -> UpdateSummary:
        collisions = collisions or CollisionStats()
        summary = UpdateSummary(
            discovered_total=discovered,
            supported_total=supported,
            requested_total=requested,
            resolved_total=resolved,
            processed_total=processed,
            cache_hits=result.cache_hits,
            downloads=result.downloads,
            failed_total=result.failures,
            emitted_total=len(names),
            output_bytes=output_bytes,
            elapsed_seconds=round(time.monotonic() - started, 1),
            dropped_total=collisions.dropped,
            renamed_total=collisions.renamed,
        )
        logger.info("Total time: {}s", summary.elapsed_seconds)
        return summary


class UpdateIconsWorkflow(_UpdateWorkflowBase):
    """Regenerates ``icons.ts`` from the flat item inventory image category."""

    async def run(self) -> UpdateSummary:
        started = time.monotonic()
        logger.info("Starting OSRS Icons update...")
        logger.info("Cache: {}", "enabled" if self.config.use_cache else "disabled (--no-cache)")

        async with self._open_session() as session:
            logger.info("Fetching Item Inventory Images...")
            items = await self.mw_client.fetch_category_members(
                session, ITEM_IMAGES_CATEGORY, self.config.page_size, "file"
            )
            logger.info("Found {} items.", len(items))

            requests = build_image_requests(items)
            logger.info("Total image requests prepared: {}", len(requests))

            url_map = await self.mw_client.fetch_image_info(session, requests)
            logger.info("Resolved {} image URLs.", len(url_map))

            logger.info("Downloading and processing images...")
            result = await self.processor.process(session, url_map, self.config.use_cache)
            logger.info("Processed {} images.", len(result.icons))

        names, output_bytes = await self._generate(
            result.icons, ICONS_MODULE, ICONS_META_MODULE, "iconNames", "IconName"
        )
        return self._summarize(
            started=started,
            discovered=len(items),
            supported=len(items),
            requested=len(requests),
            resolved=len(url_map),
            result=result,
            processed=len(result.icons),
            names=names,
            output_bytes=output_bytes,
        )


class UpdateCategoryIconsWorkflow(_UpdateWorkflowBase):
    """Regenerates ``category-icons.ts`` from ``Category:Icons`` and its subcategories."""

    def __init__(self, *args, crawler: CategoryCrawler | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.crawler = crawler or CategoryCrawler(self.mw_client, page_size=self.config.page_size)

    async def run(self) -> UpdateSummary:
        started = time.monotonic()
        logger.info("Starting Category Icons update...")
        logger.info("Cache: {}", "enabled" if self.config.use_cache else "disabled (--no-cache)")

        async with self._open_session() as session:
            logger.info("Crawling {} recursively...", ICONS_ROOT_CATEGORY)
            all_files = await self.crawler.fetch_all_recursively(session, ICONS_ROOT_CATEGORY)
            logger.info("Found {} unique files (before filtering).", len(all_files))

            image_files = filter_image_files(all_files)
            logger.info("{} supported image files after filtering.", len(image_files))

            requests = build_image_requests(image_files.values())
            logger.info("Total image requests prepared: {}", len(requests))

            url_map = await self.mw_client.fetch_image_info(session, requests)
            logger.info("Resolved {} image URLs.", len(url_map))

            logger.info("Downloading and processing images...")
            result = await self.processor.process(session, url_map, self.config.use_cache)
            logger.info("Processed {} images.", len(result.icons))

        logger.info("Resolving collisions with main icon exports...")
        icons = dict(result.icons)
        main_exports = await asyncio.to_thread(read_generated_exports, self.writer.path_for(ICONS_MODULE))
        collisions = resolve_collisions_with_main_icons(icons, main_exports)
        logger.info(
            "Collision resolution: {} dropped (identical), {} renamed.",
            collisions.dropped,
            collisions.renamed,
        )
        logger.info("{} category icons remaining after collision resolution.", len(icons))

        names, output_bytes = await self._generate(
            icons,
            CATEGORY_ICONS_MODULE,
            CATEGORY_ICONS_META_MODULE,
            "categoryIconNames",
            "CategoryIconName",
        )
        return self._summarize(
            started=started,
            discovered=len(all_files),
            supported=len(image_files),
            requested=len(requests),
            resolved=len(url_map),
            result=result,
            processed=len(icons),
            names=names,
            output_bytes=output_bytes,
            collisions=collisions,
        )
