import tempfile
import unittest
from pathlib import Path

from tests import _bootstrap  # noqa: F401
from symscan.diag import SourceReadError
from symscan.source import (
    locate,
    read_text_file,
    remove_line_comments,
    remove_string_literals,
    strip_c_comments,
    text_file_line_count,
)


class ReadTests(unittest.TestCase):
    def test_read_normalizes_newlines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a.h"
            path.write_bytes(b"a\r\nb\rc")
            self.assertEqual(read_text_file(path), "a\nb\nc\n")
            self.assertEqual(text_file_line_count(path), 5)

    def test_read_empty_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "empty.h"
            path.write_text("", encoding="utf-8")
            self.assertEqual(read_text_file(path), "")

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SourceReadError) as context:
                read_text_file(Path(tmp) / "missing.h")
        self.assertEqual(context.exception.diagnostic.stage, "read")
        self.assertEqual(context.exception.diagnostic.code, "FileNotFoundError")
        self.assertTrue(context.exception.diagnostic.filename.endswith("missing.h"))


class StripTests(unittest.TestCase):
    def test_strip_c_comments_keeps_lines(self) -> None:
        text = "a /* one\ntwo */ b // c\nd\n"
        self.assertEqual(strip_c_comments(text), "a \n b \nd\n")

    def test_strip_c_comments_keeps_strings(self) -> None:
        text = 'x = "http://a /* b */";\n'
        self.assertEqual(strip_c_comments(text), text)

    def test_strip_c_comments_joins_continuations(self) -> None:
        self.assertEqual(strip_c_comments("#define A 1 + \\\n 2\n"), "#define A 1 +  2\n")

    def test_remove_string_literals(self) -> None:
        self.assertEqual(remove_string_literals('msgbox("a:")\nfoo\n'), "msgbox()\nfoo\n")

    def test_remove_line_comments(self) -> None:
        self.assertEqual(remove_line_comments("a @ b\nc\n", "@"), "a \nc\n")
        self.assertEqual(remove_line_comments("a // b\nc # d\n", ("//", "#")), "a \nc \n")

    def test_locate(self) -> None:
        self.assertEqual(locate("one\ntwo three\n", "three"), (2, 5))
        self.assertEqual(locate("one\n", "nope")[1], 0)


if __name__ == "__main__":
    unittest.main()
