import aiohttp

from osrs_icons.config.logger_config import logger
from osrs_icons.ingestion.domain.models import WikiItem
from osrs_icons.ingestion.infrastructure.mw_client import MediaWikiClient


class CategoryCrawler:
    def __init__(self, mw_client: MediaWikiClient, page_size: int = 200) -> None:
        self.mw_client = mw_client
        self.page_size = page_size

    async def fetch_all_recursively(
        self,
        session: aiohttp.ClientSession,
        category: str,
        visited: set[str] | None = None,
    ) -> dict[str, WikiItem]:
        """Collect file members of ``category`` and of every nested subcategory.

        ``visited`` holds category titles already crawled in this walk so that
        circular parent/child links terminate. Files reachable through several
        categories keep the entry of the first path that found them.
        """
        if visited is None:
            visited = set()
        if category in visited:
            logger.info("Skipping already-visited category: {}", category)
            return {}
        visited.add(category)

        files: dict[str, WikiItem] = {}
        for item in await self.mw_client.fetch_category_members(session, category, self.page_size, "file"):
            files.setdefault(item.title, item)

        subcategories = await self.mw_client.fetch_category_members(session, category, self.page_size, "subcat")
        logger.info(
            "Found {} subcategories in {}: {}",
            len(subcategories),
            category,
            ", ".join(sub.title for sub in subcategories),
        )

        for subcategory in subcategories:
            child_files = await self.fetch_all_recursively(session, subcategory.title, visited)
            for title, item in child_files.items():
                files.setdefault(title, item)

        return files
