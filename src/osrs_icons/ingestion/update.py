import asyncio

from osrs_icons.config.logger_config import logger
from osrs_icons.config.settings import Settings
from osrs_icons.ingestion.application.workflows.process_images import ImageProcessor, ProcessImagesConfig
from osrs_icons.ingestion.application.workflows.update_icons import (
    CATEGORY_ICONS_MODULE,
    ICONS_MODULE,
    UpdateCategoryIconsWorkflow,
    UpdateIconsWorkflow,
    UpdateWorkflowConfig,
)
from osrs_icons.ingestion.domain.collisions import find_export_collisions
from osrs_icons.ingestion.domain.models import ExportCollision, UpdateSummary
from osrs_icons.ingestion.infrastructure.cache_store import CacheManifestStore
from osrs_icons.ingestion.infrastructure.codegen_sink import GeneratedModuleWriter
from osrs_icons.ingestion.infrastructure.exports_reader import read_generated_exports
from osrs_icons.ingestion.infrastructure.mw_client import MediaWikiClient


def _build_parts(
    settings: Settings,
    show_progress: bool,
) -> tuple[MediaWikiClient, ImageProcessor, GeneratedModuleWriter]:
    mw_client = MediaWikiClient(base_url=settings.wiki_api_url)
    processor = ImageProcessor(
        mw_client=mw_client,
        cache_store=CacheManifestStore(settings.manifest_path),
        config=ProcessImagesConfig(show_progress=show_progress),
    )
    writer = GeneratedModuleWriter(settings.output_dir)
    return mw_client, processor, writer


async def run_update_icons_async(
    *,
    use_cache: bool = True,
    settings: Settings | None = None,
    show_progress: bool = True,
) -> UpdateSummary:
    settings = settings or Settings.from_env()
    mw_client, processor, writer = _build_parts(settings, show_progress)
    workflow = UpdateIconsWorkflow(
        mw_client,
        processor,
        writer,
        settings=settings,
        config=UpdateWorkflowConfig(use_cache=use_cache),
    )
    return await workflow.run()


def run_update_icons(
    *,
    use_cache: bool = True,
    settings: Settings | None = None,
    show_progress: bool = True,
) -> UpdateSummary:
    return asyncio.run(run_update_icons_async(use_cache=use_cache, settings=settings, show_progress=show_progress))


async def run_update_category_icons_async(
    *,
    use_cache: bool = True,
    settings: Settings | None = None,
    show_progress: bool = True,
) -> UpdateSummary:
    settings = settings or Settings.from_env()
    mw_client, processor, writer = _build_parts(settings, show_progress)
    workflow = UpdateCategoryIconsWorkflow(
        mw_client,
        processor,
        writer,
        settings=settings,
        config=UpdateWorkflowConfig(use_cache=use_cache),
    )
    return await workflow.run()


def run_update_category_icons(
    *,
    use_cache: bool = True,
    settings: Settings | None = None,
    show_progress: bool = True,
) -> UpdateSummary:
    return asyncio.run(
        run_update_category_icons_async(use_cache=use_cache, settings=settings, show_progress=show_progress)
    )


def check_collisions(*, settings: Settings | None = None) -> list[ExportCollision]:
    """Report identifiers exported by both the main and the category icon modules."""
    settings = settings or Settings.from_env()
    main_exports = read_generated_exports(settings.output_dir / ICONS_MODULE)
    category_exports = read_generated_exports(settings.output_dir / CATEGORY_ICONS_MODULE)
    collisions = find_export_collisions(main_exports, category_exports)

    logger.info("Main icons: {}", len(main_exports))
    logger.info("Category icons: {}", len(category_exports))
    logger.info("Collisions: {}", len(collisions))
    if not collisions:
        logger.info("No collisions found! Safe to use export * for both.")
        return collisions

    for collision in collisions:
        logger.info("  {} - {}", collision.name, "IDENTICAL" if collision.identical else "DIFFERENT")
    different = sum(1 for collision in collisions if not collision.identical)
    logger.info("Identical collisions: {}", len(collisions) - different)
    logger.info("Different collisions (need resolution): {}", different)
    return collisions
