import unittest

from tests import _bootstrap  # noqa: F401
from symscan.options import SourceOptions, normalize_options, split_define


class SourceOptionsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = SourceOptions()
        self.assertEqual(options.root, ".")
        self.assertEqual(options.encoding, "utf-8")
        self.assertEqual(options.defines, ())
        self.assertEqual(options.diag_format, "human")

    def test_invalid_diag_format(self) -> None:
        with self.assertRaises(ValueError):
            SourceOptions(diag_format="xml")  # type: ignore[arg-type]

    def test_invalid_define(self) -> None:
        with self.assertRaises(ValueError):
            SourceOptions(defines=("1BAD=2",))

    def test_split_define(self) -> None:
        self.assertEqual(split_define("A=0x10"), ("A", "0x10"))
        self.assertEqual(split_define("A"), ("A", "1"))

    def test_normalize_options(self) -> None:
        normalized = normalize_options(None)
        self.assertEqual(normalized, SourceOptions())
        options = SourceOptions(root="project")
        self.assertIs(normalize_options(options), options)


if __name__ == "__main__":
    unittest.main()
