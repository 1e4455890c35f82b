import asyncio
import json
import random
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Literal, TypeVar

import aiohttp
from aiohttp import ClientResponseError, ContentTypeError

from osrs_icons.config.logger_config import logger
from osrs_icons.config.settings import DEFAULT_WIKI_API_URL
from osrs_icons.errors import OsrsIconsError, WikiApiError
from osrs_icons.ingestion.application.concurrency import limit_concurrency
from osrs_icons.ingestion.domain.models import ImageRequest, WikiItem

T = TypeVar("T")

MemberType = Literal["page", "file", "subcat"]

API_RETRIES = 10
DOWNLOAD_RETRIES = 5
IMAGE_INFO_CHUNK_SIZE = 50
IMAGE_INFO_CONCURRENCY = 2

# Failures that end a crawl branch or an image-info chunk without aborting the run.
RECOVERABLE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OsrsIconsError)


def is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


class MediaWikiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_WIKI_API_URL,
        retry_base_seconds: float = 5.0,
        retry_jitter_seconds: float = 5.0,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.base_url = base_url
        self.retry_base_seconds = retry_base_seconds
        self.retry_jitter_seconds = retry_jitter_seconds
        self._rng = rng

    async def fetch_with_retry(
        self,
        session: aiohttp.ClientSession,
        params: dict[str, Any],
        retries: int = API_RETRIES,
    ) -> dict[str, Any]:
        data = await self._request(session, self.base_url, params, retries, self._read_json, "API")
        if not isinstance(data, dict):
            raise WikiApiError(f"Expected a JSON object from {self.base_url}, got {type(data).__name__}")
        if "error" in data:
            raise WikiApiError(f"API error: {data['error']}")
        return data

    async def download_with_retry(
        self,
        session: aiohttp.ClientSession,
        url: str,
        retries: int = DOWNLOAD_RETRIES,
    ) -> bytes:
        return await self._request(session, url, None, retries, self._read_bytes, "download")

    async def fetch_category_members(
        self,
        session: aiohttp.ClientSession,
        category: str,
        limit: int = 200,
        member_type: MemberType = "page",
    ) -> list[WikiItem]:
        """Page through a category listing until the API stops returning a continuation.

        A failing page ends the listing early; whatever was collected so far is returned.
        """
        logger.info("Fetching items from {} (type: {})...", category, member_type)
        items: list[WikiItem] = []
        continue_token: str | None = None

        while True:
            params: dict[str, Any] = {
                "action": "query",
                "list": "categorymembers",
                "cmtitle": category,
                "cmlimit": limit,
                "cmtype": member_type,
                "format": "json",
                "origin": "*",
            }
            if continue_token:
                params["cmcontinue"] = continue_token

            try:
                data = await self.fetch_with_retry(session, params)
            except RECOVERABLE_ERRORS as exc:
                logger.error("Error fetching category members of {}: {}", category, exc)
                break

            members = data.get("query", {}).get("categorymembers", [])
            if members:
                items.extend(WikiItem.from_api(member) for member in members)
                logger.info("Fetched {} items (Total: {})", len(members), len(items))

            continue_token = data.get("continue", {}).get("cmcontinue")
            if not continue_token:
                break

        return items

    async def fetch_image_info(
        self,
        session: aiohttp.ClientSession,
        requests: Sequence[ImageRequest],
        chunk_size: int = IMAGE_INFO_CHUNK_SIZE,
        concurrency: int = IMAGE_INFO_CONCURRENCY,
    ) -> dict[str, str]:
        """Resolve download URLs for file titles, returning ``key -> url``.

        Titles are queried in chunks of ``chunk_size``. Titles the wiki does not
        report image info for are left out of the result.
        """
        logger.info("Fetching image info for {} files...", len(requests))

        keys_by_title: dict[str, list[str]] = {}
        for request in requests:
            keys_by_title.setdefault(request.file_title, []).append(request.key)

        titles = list(keys_by_title)
        chunks = [titles[i : i + chunk_size] for i in range(0, len(titles), chunk_size)]
        url_map: dict[str, str] = {}
        completed = 0

        async def _resolve_chunk(chunk: list[str]) -> None:
            nonlocal completed
            params = {
                "action": "query",
                "titles": "|".join(chunk),
                "prop": "imageinfo",
                "iiprop": "url",
                "format": "json",
                "origin": "*",
            }
            try:
                data = await self.fetch_with_retry(session, params)
                resolved = [(page.get("title", ""), _first_image_url(page)) for page in _iter_pages(data)]
                for title, url in resolved:
                    if not url:
                        continue
                    for key in keys_by_title.get(title, ()):
                        url_map[key] = url
            except RECOVERABLE_ERRORS as exc:
                logger.error("Error fetching image info: {}", exc)

            completed += 1
            if completed % 20 == 0:
                logger.info("Processed {}/{} chunks...", completed, len(chunks))

        await limit_concurrency([lambda chunk=chunk: _resolve_chunk(chunk) for chunk in chunks], concurrency)
        return url_map

    async def _request(
        self,
        session: aiohttp.ClientSession,
        url: str,
        params: dict[str, Any] | None,
        retries: int,
        read: Callable[[aiohttp.ClientResponse], Awaitable[T]],
        label: str,
    ) -> T:
        attempt = 0
        while True:
            async with session.get(url, params=params) as resp:
                if not is_retryable_status(resp.status):
                    if resp.status >= 400:
                        raise ClientResponseError(
                            resp.request_info,
                            resp.history,
                            status=resp.status,
                            message=f"HTTP {resp.status}",
                        )
                    return await read(resp)

                if attempt >= retries:
                    logger.error("Giving up on {} after {} retries (HTTP {})", url, retries, resp.status)
                    raise ClientResponseError(
                        resp.request_info,
                        resp.history,
                        status=resp.status,
                        message="Retries exhausted",
                    )

            wait_time = self._backoff_seconds()
            attempt += 1
            logger.warning(
                "Rate limited (or server error) on {}. Retrying in {}ms... ({}/{})",
                label,
                round(wait_time * 1000),
                attempt,
                retries,
            )
            await asyncio.sleep(wait_time)

    def _backoff_seconds(self) -> float:
        return self.retry_base_seconds + self._rng() * self.retry_jitter_seconds

    @staticmethod
    async def _read_json(resp: aiohttp.ClientResponse) -> Any:
        try:
            return await resp.json(content_type=None)
        except (ContentTypeError, json.JSONDecodeError, ValueError) as exc:
            raise WikiApiError(f"Malformed JSON response: {exc}") from exc

    @staticmethod
    async def _read_bytes(resp: aiohttp.ClientResponse) -> bytes:
        return await resp.read()


def _iter_pages(data: dict[str, Any]) -> list[dict[str, Any]]:
    query = data.get("query", {})
    if not isinstance(query, dict):
        raise WikiApiError(f"Expected 'query' to be an object, got {type(query).__name__}")
    pages = query.get("pages", {})
    if isinstance(pages, dict):
        pages = list(pages.values())
    elif not isinstance(pages, list):
        raise WikiApiError(f"Expected 'pages' to be an object or a list, got {type(pages).__name__}")
    for page in pages:
        if not isinstance(page, dict):
            raise WikiApiError(f"Malformed page entry in imageinfo response: {page!r}")
    return pages


def _first_image_url(page: dict[str, Any]) -> str | None:
    image_info = page.get("imageinfo") or []
    if not isinstance(image_info, list) or not all(isinstance(info, dict) for info in image_info):
        raise WikiApiError(f"Malformed imageinfo for {page.get('title')!r}: {image_info!r}")
    return image_info[0].get("url") if image_info else None
