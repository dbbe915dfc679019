import contextlib
import hashlib
import io
import unittest
from unittest import mock

from torrent_inspector import cli
from torrent_inspector.source import SourceError

INFO = b"d6:lengthi5e4:name5:a.txt12:piece lengthi16384e6:pieces20:" + hashlib.sha1(b"hello").digest() + b"e"
TORRENT = b"d8:announce21:http://t.example/annc4:info" + INFO + b"e"


def run(argv, data=None, error=None):
    stdout = io.StringIO()
    stderr = io.StringIO()
    with mock.patch("torrent_inspector.cli.read_source", return_value=data, side_effect=error) as read:
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = cli.main(argv)
    return code, stdout.getvalue(), stderr.getvalue(), read


class CliTestCase(unittest.TestCase):
    def test_summary(self):
        code, out, err, read = run(["a.torrent"], TORRENT)
        self.assertEqual(0, code)
        read.assert_called_once_with("a.torrent", timeout=cli.REQUEST_TIMEOUT)
        start = TORRENT.index(INFO)
        self.assertIn("info starts at {} and ends at {}".format(start, start + len(INFO)), out)
        self.assertIn(hashlib.sha1(INFO).hexdigest(), out)
        self.assertIn("         announce: http://t.example/annc", out)
        self.assertNotIn("{", out)

    def test_tree(self):
        code, out, err, _ = run(["--tree", "a.torrent"], TORRENT)
        self.assertEqual(0, code)
        self.assertTrue(out.startswith('{\n  "announce": "http://t.example/annc"\n'))

    def test_tree_is_followed_directly_by_summary(self):
        code, out, err, _ = run(["--tree", "a.torrent"], TORRENT)
        self.assertEqual(0, code)
        self.assertIn("}\n             name: a.txt\n", out)
        self.assertNotIn("\n\n", out)

    def test_max_depth_above_limit_is_rejected(self):
        with self.assertRaises(SystemExit) as ctx:
            run(["--max-depth", "5000", "a.torrent"], TORRENT)
        self.assertEqual(2, ctx.exception.code)

    def test_max_depth_at_limit(self):
        data = b"l" * 450 + b"e" * 450
        code, out, err, _ = run(["--max-depth", "400", "a.torrent"], data)
        self.assertEqual(1, code)
        self.assertTrue(err.startswith("Error: "))

    def test_timeout_option(self):
        _, _, _, read = run(["--timeout", "3", "http://example.com/a.torrent"], TORRENT)
        read.assert_called_once_with("http://example.com/a.torrent", timeout=3)

    def test_not_a_dictionary(self):
        code, out, err, _ = run(["a.torrent"], b"i1e")
        self.assertEqual(1, code)
        self.assertIn("Expected dict but got something else", err)

    def test_decode_error(self):
        code, out, err, _ = run(["a.torrent"], b"iXe")
        self.assertEqual(1, code)
        self.assertTrue(err.startswith("Error: "))

    def test_max_depth(self):
        code, out, err, _ = run(["--max-depth", "1", "a.torrent"], TORRENT)
        self.assertEqual(1, code)
        self.assertIn("Nesting deeper than 1", err)

    def test_missing_info(self):
        code, out, err, _ = run(["a.torrent"], b"d8:announce3:urle")
        self.assertEqual(1, code)
        self.assertIn('Missing "info" dictionary', err)

    def test_source_error(self):
        code, out, err, _ = run(["a.torrent"], error=SourceError("Could not read a.torrent"))
        self.assertEqual(1, code)
        self.assertIn("Error: Could not read a.torrent", err)


if __name__ == '__main__':
    unittest.main()
