"""Endpoint tests for the aiohttp speed test server."""

import asyncio
import unittest
from unittest import mock

from aiohttp import WSMsgType, test_utils

from client.chunks import ChunkSource
from client.constants import CHUNK_SIZE, MAX_UPLOAD_BYTES
from server.app import create_app
from server.handlers import resource
from server.streams import DownloadStream


class ServerTestCase(unittest.IsolatedAsyncioTestCase):
    """Runs a fresh in-process server for every test."""

    def make_app(self):
        return create_app()

    async def asyncSetUp(self):
        self.client = test_utils.TestClient(test_utils.TestServer(self.make_app()))
        await self.client.start_server()

    async def asyncTearDown(self):
        await self.client.close()


class TestDownloadEndpoint(ServerTestCase):
    async def test_query_size(self):
        resp = await self.client.get("/download", params={"size": "3"})
        self.assertEqual(resp.status, 200)
        self.assertEqual(resp.headers["Content-Length"], str(3 * CHUNK_SIZE))
        body = await resp.read()
        self.assertEqual(len(body), 3 * CHUNK_SIZE)

    async def test_path_size(self):
        resp = await self.client.get("/download/2")
        self.assertEqual(resp.status, 200)
        self.assertEqual(len(await resp.read()), 2 * CHUNK_SIZE)

    async def test_cache_busting_param_ignored(self):
        resp = await self.client.get("/download", params={"size": "1", "nocache": "abc"})
        self.assertEqual(len(await resp.read()), CHUNK_SIZE)

    async def test_no_store_header(self):
        resp = await self.client.get("/download", params={"size": "1"})
        self.assertEqual(resp.headers["Cache-Control"], "no-store")
        await resp.release()

    async def test_zero_rejected(self):
        resp = await self.client.get("/download", params={"size": "0"})
        self.assertEqual(resp.status, 400)
        self.assertEqual(await resp.text(), "400 Bad Request")

    async def test_missing_size_rejected(self):
        resp = await self.client.get("/download")
        self.assertEqual(resp.status, 400)

    async def test_non_numeric_rejected(self):
        for raw in ("abc", "-1", "1.5", ""):
            resp = await self.client.get("/download", params={"size": raw})
            self.assertEqual(resp.status, 400, raw)
            await resp.release()

    async def test_path_zero_rejected(self):
        resp = await self.client.get("/download/0")
        self.assertEqual(resp.status, 400)

    async def test_slow_reader_throttles_producer(self):
        streams = []

        def tracked(*args, **kwargs):
            stream = DownloadStream(*args, **kwargs)
            streams.append(stream)
            return stream

        total = 2000
        with mock.patch("server.handlers.DownloadStream", side_effect=tracked):
            resp = await self.client.get("/download", params={"size": str(total)})
            self.assertEqual(len(await resp.content.readexactly(CHUNK_SIZE)), CHUNK_SIZE)
            await asyncio.sleep(0.5)

            # Only socket and write buffers' worth may run ahead of the reader.
            self.assertEqual(len(streams), 1)
            self.assertGreater(streams[0].remaining_chunks, total // 2)
            resp.close()


class TestInjectedChunkSource(ServerTestCase):
    def make_app(self):
        return create_app(chunks=ChunkSource(1024), upload_limit=MAX_UPLOAD_BYTES)

    async def test_download_uses_injected_chunk_size(self):
        resp = await self.client.get("/download", params={"size": "5"})
        self.assertEqual(len(await resp.read()), 5 * 1024)


class TestUploadEndpoint(ServerTestCase):
    async def test_reports_kilobytes(self):
        resp = await self.client.post("/upload", data=bytes(5000))
        self.assertEqual(resp.status, 200)
        self.assertEqual(await resp.text(), str(5000 >> 10))

    async def test_exactly_at_limit(self):
        resp = await self.client.post("/upload", data=bytes(MAX_UPLOAD_BYTES))
        self.assertEqual(resp.status, 200)
        self.assertEqual(await resp.text(), "1024")

    async def test_empty_body(self):
        resp = await self.client.post("/upload")
        self.assertEqual(resp.status, 200)
        self.assertEqual(await resp.text(), "0")

    async def test_get_not_allowed(self):
        resp = await self.client.get("/upload")
        self.assertEqual(resp.status, 405)
        self.assertEqual(await resp.text(), "405 Method Not Allowed")


class TestUploadLimit(ServerTestCase):
    def make_app(self):
        with self.assertLogs("server.app", level="WARNING"):
            return create_app(upload_limit=1024)

    async def test_under_limit(self):
        resp = await self.client.post("/upload", data=bytes(1024))
        self.assertEqual(resp.status, 200)
        self.assertEqual(await resp.text(), "1")

    async def test_over_limit_rejected(self):
        resp = await self.client.post("/upload", data=bytes(4096))
        self.assertEqual(resp.status, 400)
        self.assertEqual(await resp.text(), "400 Bad Request")


class TestEchoEndpoint(ServerTestCase):
    async def test_ping_pong(self):
        ws = await self.client.ws_connect("/ws")
        for _ in range(3):
            await ws.send_str("ping")
            self.assertEqual(await ws.receive_str(), "pong")
        await ws.close()

    async def test_other_messages_ignored(self):
        ws = await self.client.ws_connect("/ws")
        await ws.send_str("hello")
        await ws.send_bytes(b"ping")
        await ws.send_str("ping")
        msg = await ws.receive()
        self.assertEqual(msg.type, WSMsgType.TEXT)
        self.assertEqual(msg.data, "pong")
        await ws.close()

    async def test_plain_get_rejected(self):
        resp = await self.client.get("/ws")
        self.assertEqual(resp.status, 400)
        self.assertEqual(await resp.text(), "400 Bad Request")


class TestStatusAndRouting(ServerTestCase):
    async def test_status(self):
        resp = await self.client.get("/status")
        self.assertEqual(resp.status, 200)
        data = await resp.json()
        self.assertEqual(data["status"], "OK")
        self.assertIn("speedtesting", data["version"])
        self.assertIn("python", data["version"])
        self.assertIn("allocatedBlocks", data["memoryUsage"])
        if resource is not None:
            self.assertGreater(data["memoryUsage"]["peakRssBytes"], 0)

    async def test_unknown_path(self):
        resp = await self.client.get("/nope")
        self.assertEqual(resp.status, 404)
        self.assertEqual(await resp.text(), "404 Not Found")


class TestCreateApp(unittest.TestCase):
    def test_rejects_non_positive_limit(self):
        with self.assertRaises(ValueError):
            create_app(upload_limit=0)

    def test_rejects_non_positive_high_water_mark(self):
        with self.assertRaises(ValueError):
            create_app(high_water_mark=0)

    def test_default_limit_does_not_warn(self):
        with self.assertNoLogs("server.app", level="WARNING"):
            create_app()


if __name__ == "__main__":
    unittest.main()
