"""Unit tests for client.api -- endpoint URL derivation."""

import unittest

from client.api import ServerAPI, ServerEndpoint


class TestServerEndpoint(unittest.TestCase):
    def test_ws_url_https(self):
        e = ServerEndpoint.from_url("https://speed.test.com:8080")
        self.assertEqual(e.ws_url, "wss://speed.test.com:8080/ws")

    def test_ws_url_http(self):
        e = ServerEndpoint.from_url("http://test.local")
        self.assertEqual(e.ws_url, "ws://test.local/ws")

    def test_download_url(self):
        e = ServerEndpoint.from_url("https://speed.test.com:8080")
        self.assertEqual(e.download_url, "https://speed.test.com:8080/download")

    def test_upload_url(self):
        e = ServerEndpoint.from_url("https://speed.test.com:8080")
        self.assertEqual(e.upload_url, "https://speed.test.com:8080/upload")

    def test_status_url(self):
        e = ServerEndpoint.from_url("http://test.local")
        self.assertEqual(e.status_url, "http://test.local/status")

    def test_trailing_slash(self):
        e = ServerEndpoint.from_url("http://test.local/")
        self.assertEqual(e.download_url, "http://test.local/download")

    def test_base_path_preserved(self):
        e = ServerEndpoint.from_url("https://example.com/speed/")
        self.assertEqual(e.upload_url, "https://example.com/speed/upload")
        self.assertEqual(e.ws_url, "wss://example.com/speed/ws")

    def test_ws_scheme_normalised(self):
        e = ServerEndpoint.from_url("wss://speed.test.com")
        self.assertEqual(e.download_url, "https://speed.test.com/download")
        self.assertEqual(e.ws_url, "wss://speed.test.com/ws")

    def test_rejects_unknown_scheme(self):
        with self.assertRaises(ValueError):
            ServerEndpoint.from_url("ftp://speed.test.com")

    def test_to_dict(self):
        d = ServerEndpoint.from_url("http://test.local:9000").to_dict()
        self.assertEqual(d["hostname"], "test.local")
        self.assertEqual(d["port"], 9000)


class TestServerAPI(unittest.IsolatedAsyncioTestCase):
    async def test_requires_context_manager(self):
        api = ServerAPI(ServerEndpoint.from_url("http://test.local"))
        with self.assertRaises(RuntimeError):
            await api.get_status()


if __name__ == "__main__":
    unittest.main()
