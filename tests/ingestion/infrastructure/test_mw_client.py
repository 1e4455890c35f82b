import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from aiohttp import ClientResponseError

from osrs_icons.errors import WikiApiError
from osrs_icons.ingestion.domain.models import ImageRequest, WikiItem
from osrs_icons.ingestion.infrastructure.mw_client import MediaWikiClient

SLEEP_TARGET = "osrs_icons.ingestion.infrastructure.mw_client.asyncio.sleep"


class FakeResponse:
    def __init__(self, status=200, json_data=None, body=b""):
        self.status = status
        self._json_data = json_data
        self._body = body
        self.headers = {}
        self.request_info = SimpleNamespace(real_url="http://test.invalid")
        self.history = ()

    async def json(self, **kwargs):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data

    async def read(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, **kwargs):
        if not self._responses:
            raise AssertionError("No more fake responses configured")
        self.calls.append((url, dict(params or {})))
        return self._responses.pop(0)


class ImageInfoSession:
    """Answers imageinfo queries from a ``title -> url`` table, whatever the call order."""

    def __init__(self, urls, failing_titles=(), payload_override=None):
        self.urls = urls
        self.failing_titles = set(failing_titles)
        self.payload_override = payload_override or {}
        self.calls = []

    def get(self, url, params=None, **kwargs):
        titles = params["titles"].split("|")
        self.calls.append(titles)
        if self.failing_titles & set(titles):
            return FakeResponse(status=404)
        for title in titles:
            if title in self.payload_override:
                return FakeResponse(json_data=self.payload_override[title])
        pages = {}
        for index, title in enumerate(titles):
            page = {"title": title}
            if title in self.urls:
                page["imageinfo"] = [{"url": self.urls[title]}]
            pages[str(-1 - index) if title not in self.urls else str(index + 1)] = page
        return FakeResponse(json_data={"query": {"pages": pages}})


def make_client():
    return MediaWikiClient(base_url="http://unit.invalid", rng=lambda: 0.5)


class FetchWithRetryTests(unittest.IsolatedAsyncioTestCase):
    async def test_success_returns_payload(self):
        client = make_client()
        session = FakeSession([FakeResponse(json_data={"ok": True})])

        data = await client.fetch_with_retry(session, {"action": "query"})
        self.assertEqual(data, {"ok": True})
        self.assertEqual(session.calls, [("http://unit.invalid", {"action": "query"})])

    async def test_retries_429_and_5xx_with_jittered_wait(self):
        client = make_client()
        session = FakeSession(
            [
                FakeResponse(status=429),
                FakeResponse(status=503),
                FakeResponse(json_data={"ok": True}),
            ]
        )

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            data = await client.fetch_with_retry(session, {"action": "query"})

        self.assertEqual(data, {"ok": True})
        self.assertEqual(len(session.calls), 3)
        self.assertEqual([call.args[0] for call in sleep_mock.await_args_list], [7.5, 7.5])

    async def test_client_error_is_not_retried(self):
        client = make_client()
        session = FakeSession([FakeResponse(status=404)])

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            with self.assertRaises(ClientResponseError) as ctx:
                await client.fetch_with_retry(session, {"action": "query"})

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(len(session.calls), 1)
        sleep_mock.assert_not_awaited()

    async def test_exhausted_retries_raise(self):
        client = make_client()
        session = FakeSession([FakeResponse(status=500) for _ in range(3)])

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            with self.assertRaises(ClientResponseError) as ctx:
                await client.fetch_with_retry(session, {"action": "query"}, retries=2)

        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(len(session.calls), 3)
        self.assertEqual(sleep_mock.await_count, 2)

    async def test_malformed_json_is_not_retried(self):
        client = make_client()
        session = FakeSession([FakeResponse(json_data=json.JSONDecodeError("bad", "doc", 0))])

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            with self.assertRaises(WikiApiError):
                await client.fetch_with_retry(session, {"action": "query"})
        sleep_mock.assert_not_awaited()

    async def test_api_error_payload_raises(self):
        client = make_client()
        session = FakeSession([FakeResponse(json_data={"error": {"code": "badtitle"}})])

        with self.assertRaises(WikiApiError):
            await client.fetch_with_retry(session, {"action": "query"})

    async def test_backoff_window_is_rerolled_not_scaled(self):
        rolls = iter([0.0, 1.0, 0.25])
        client = MediaWikiClient(base_url="http://unit.invalid", rng=lambda: next(rolls))
        session = FakeSession([FakeResponse(status=500)] * 3 + [FakeResponse(json_data={})])

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            await client.fetch_with_retry(session, {})

        self.assertEqual([call.args[0] for call in sleep_mock.await_args_list], [5.0, 10.0, 6.25])


class DownloadWithRetryTests(unittest.IsolatedAsyncioTestCase):
    async def test_returns_bytes(self):
        client = make_client()
        session = FakeSession([FakeResponse(body=b"\x89PNG")])

        self.assertEqual(await client.download_with_retry(session, "http://img.invalid/a.png"), b"\x89PNG")
        self.assertEqual(session.calls[0][0], "http://img.invalid/a.png")

    async def test_default_ceiling_is_five_retries(self):
        client = make_client()
        session = FakeSession([FakeResponse(status=502) for _ in range(6)])

        with patch(SLEEP_TARGET, new=AsyncMock()) as sleep_mock:
            with self.assertRaises(ClientResponseError):
                await client.download_with_retry(session, "http://img.invalid/a.png")

        self.assertEqual(len(session.calls), 6)
        self.assertEqual(sleep_mock.await_count, 5)


class FetchCategoryMembersTests(unittest.IsolatedAsyncioTestCase):
    async def test_follows_continuation(self):
        client = make_client()
        session = FakeSession(
            [
                FakeResponse(
                    json_data={
                        "query": {"categorymembers": [{"pageid": 1, "ns": 6, "title": "File:A.png"}]},
                        "continue": {"cmcontinue": "file|B", "continue": "-||"},
                    }
                ),
                FakeResponse(
                    json_data={"query": {"categorymembers": [{"pageid": 2, "ns": 6, "title": "File:B.png"}]}}
                ),
            ]
        )

        items = await client.fetch_category_members(session, "Category:Test", 200, "file")

        self.assertEqual(items, [WikiItem(1, 6, "File:A.png"), WikiItem(2, 6, "File:B.png")])
        first_params = session.calls[0][1]
        self.assertEqual(first_params["list"], "categorymembers")
        self.assertEqual(first_params["cmtitle"], "Category:Test")
        self.assertEqual(first_params["cmtype"], "file")
        self.assertEqual(first_params["cmlimit"], 200)
        self.assertNotIn("cmcontinue", first_params)
        self.assertEqual(session.calls[1][1]["cmcontinue"], "file|B")

    async def test_failure_returns_partial_results(self):
        client = make_client()
        session = FakeSession(
            [
                FakeResponse(
                    json_data={
                        "query": {"categorymembers": [{"pageid": 1, "ns": 6, "title": "File:A.png"}]},
                        "continue": {"cmcontinue": "file|B"},
                    }
                ),
                FakeResponse(status=403),
            ]
        )

        items = await client.fetch_category_members(session, "Category:Test", 200, "file")
        self.assertEqual([item.title for item in items], ["File:A.png"])

    async def test_empty_category(self):
        client = make_client()
        session = FakeSession([FakeResponse(json_data={"batchcomplete": ""})])

        self.assertEqual(await client.fetch_category_members(session, "Category:Empty"), [])


class FetchImageInfoTests(unittest.IsolatedAsyncioTestCase):
    async def test_assigns_url_to_every_key_sharing_a_title(self):
        client = make_client()
        session = ImageInfoSession({"File:Coins.png": "http://img.invalid/Coins.png"})
        requests = [
            ImageRequest("File:Coins.png", "Coins"),
            ImageRequest("File:Coins.png", "Coins alias"),
            ImageRequest("File:Missing.png", "Missing"),
        ]

        url_map = await client.fetch_image_info(session, requests)

        self.assertEqual(
            url_map,
            {"Coins": "http://img.invalid/Coins.png", "Coins alias": "http://img.invalid/Coins.png"},
        )
        self.assertEqual(session.calls, [["File:Coins.png", "File:Missing.png"]])

    async def test_titles_are_chunked_by_fifty(self):
        client = make_client()
        titles = [f"File:Icon {i}.png" for i in range(120)]
        session = ImageInfoSession({title: f"http://img.invalid/{i}.png" for i, title in enumerate(titles)})

        url_map = await client.fetch_image_info(
            session, [ImageRequest(title, title[5:-4]) for title in titles]
        )

        self.assertEqual(len(url_map), 120)
        self.assertEqual(sorted(len(chunk) for chunk in session.calls), [20, 50, 50])

    async def test_failed_chunk_is_skipped(self):
        client = make_client()
        titles = [f"File:Icon {i}.png" for i in range(60)]
        session = ImageInfoSession(
            {title: f"http://img.invalid/{i}.png" for i, title in enumerate(titles)},
            failing_titles={"File:Icon 0.png"},
        )

        url_map = await client.fetch_image_info(
            session, [ImageRequest(title, title[5:-4]) for title in titles]
        )

        self.assertEqual(len(url_map), 10)
        self.assertNotIn("Icon 0", url_map)

    async def test_malformed_pages_drop_only_their_chunk(self):
        client = make_client()
        titles = [f"File:Icon {i}.png" for i in range(60)]
        session = ImageInfoSession(
            {title: f"http://img.invalid/{i}.png" for i, title in enumerate(titles)},
            payload_override={"File:Icon 0.png": {"query": {"pages": ["not-a-page"]}}},
        )

        url_map = await client.fetch_image_info(
            session, [ImageRequest(title, title[5:-4]) for title in titles]
        )

        self.assertEqual(len(url_map), 10)
        self.assertNotIn("Icon 0", url_map)

    async def test_malformed_imageinfo_drops_chunk_without_partial_results(self):
        client = make_client()
        session = ImageInfoSession(
            {},
            payload_override={
                "File:A.png": {
                    "query": {
                        "pages": [
                            {"title": "File:A.png", "imageinfo": [{"url": "http://img.invalid/a.png"}]},
                            {"title": "File:B.png", "imageinfo": ["oops"]},
                        ]
                    }
                }
            },
        )

        url_map = await client.fetch_image_info(
            session, [ImageRequest("File:A.png", "A"), ImageRequest("File:B.png", "B")]
        )

        self.assertEqual(url_map, {})


if __name__ == "__main__":
    unittest.main()
