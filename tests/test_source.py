import os
import tempfile
import unittest
from unittest import mock

import requests

from torrent_inspector import source
from torrent_inspector.source import SourceError, is_url, read_source


class ReadSourceTestCase(unittest.TestCase):
    def test_is_url(self):
        self.assertTrue(is_url("http://example.com/a.torrent"))
        self.assertTrue(is_url("https://example.com/a.torrent"))
        self.assertFalse(is_url("httpfile.torrent"))
        self.assertFalse(is_url("/tmp/a.torrent"))

    def test_read_file(self):
        with tempfile.NamedTemporaryFile(suffix=".torrent", delete=False) as fp:
            fp.write(b"d4:infodee")
        self.addCleanup(os.remove, fp.name)
        self.assertEqual(b"d4:infodee", read_source(fp.name))

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as directory:
            with self.assertRaises(SourceError) as ctx:
                read_source(os.path.join(directory, "missing.torrent"))
        self.assertIsInstance(ctx.exception, OSError)

    @mock.patch("torrent_inspector.source.requests.get")
    def test_read_url(self, get):
        get.return_value = mock.Mock(content=b"i1e")
        self.assertEqual(b"i1e", read_source("https://example.com/a.torrent", timeout=3))
        get.assert_called_once_with("https://example.com/a.torrent", timeout=3)

    @mock.patch("torrent_inspector.source.requests.get")
    def test_read_url_uses_default_timeout(self, get):
        get.return_value = mock.Mock(content=b"i1e")
        read_source("http://example.com/a.torrent")
        get.assert_called_once_with("http://example.com/a.torrent", timeout=source.REQUEST_TIMEOUT)

    @mock.patch("torrent_inspector.source.requests.get")
    def test_connection_error(self, get):
        get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(SourceError):
            read_source("http://example.com/a.torrent")

    @mock.patch("torrent_inspector.source.requests.get")
    def test_http_error_status(self, get):
        response = mock.Mock(content=b"not found")
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        get.return_value = response
        with self.assertRaises(SourceError):
            read_source("http://example.com/a.torrent")


if __name__ == '__main__':
    unittest.main()
