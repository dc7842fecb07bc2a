import unittest

from tests import _bootstrap  # noqa: F401
from symscan.lexer import lex_initializers
from symscan.structs import InitValue, parse_top_level_objects, read_c_structs, render_tokens


class RenderTests(unittest.TestCase):
    def _render(self, source: str) -> str:
        return render_tokens(lex_initializers(source)[:-1])

    def test_spacing(self) -> None:
        self.assertEqual(self._render("FLAG_A|FLAG_B"), "FLAG_A | FLAG_B")
        self.assertEqual(self._render("- 1"), "-1")
        self.assertEqual(self._render("A - 1"), "A - 1")
        self.assertEqual(self._render("& gBar"), "&gBar")
        self.assertEqual(self._render('INCBIN_U32( "a.bin" )'), 'INCBIN_U32("a.bin")')
        self.assertEqual(self._render("(a , b)"), "(a, b)")


class ParseTests(unittest.TestCase):
    def test_nested_values(self) -> None:
        objects = parse_top_level_objects(lex_initializers("gFoo = { {1, 2}, .b = {.c = 3} };"))
        first, second = objects["gFoo"]
        self.assertEqual(first.text, "{1, 2}")
        self.assertEqual(first.items, (InitValue("1"), InitValue("2")))
        self.assertEqual(second.member, "b")
        self.assertEqual(second.text, "{.c = 3}")

    def test_skips_function_bodies_and_declarations(self) -> None:
        source = (
            "struct Foo { int a; };\n"
            "void Init(void) { sState = { 0 }; }\n"
            "static int sCount = 5;\n"
            "const struct Foo gFoo = { .a = 1 };\n"
        )
        objects = parse_top_level_objects(lex_initializers(source))
        self.assertEqual(list(objects), ["gFoo"])


class ReadStructsTests(unittest.TestCase):
    def test_designated_initializers(self) -> None:
        self.assertEqual(
            read_c_structs("Foo = { .a = 1, .b = 2 };"),
            {"Foo": {"a": "1", "b": "2"}},
        )

    def test_positional_initializers_use_member_map(self) -> None:
        self.assertEqual(
            read_c_structs("Foo = {1, 2};", member_map={0: "a", 1: "b"}),
            {"Foo": {"a": "1", "b": "2"}},
        )

    def test_unmapped_positional_values_are_dropped(self) -> None:
        self.assertEqual(read_c_structs("Foo = {1, 2};", member_map={1: "b"}), {"Foo": {"b": "2"}})

    def test_designated_value_overrides_positional(self) -> None:
        self.assertEqual(
            read_c_structs("Foo = {1, .a = 5};", member_map={0: "a"}),
            {"Foo": {"a": "5"}},
        )

    def test_label_filter_and_order(self) -> None:
        source = (
            "const struct Item gB = { .price = 200 };\n"
            "const struct Item gA = { .price = 100 };\n"
        )
        self.assertEqual(list(read_c_structs(source)), ["gB", "gA"])
        self.assertEqual(read_c_structs(source, "gA"), {"gA": {"price": "100"}})

    def test_literal_text(self) -> None:
        source = (
            "const struct Trainer gTrainer = {\n"
            "    .pos = { 1, 2 },\n"
            '    .name = _("RED"),\n'
            "    .flags = FLAG_A | FLAG_B,\n"
            "    .party = &sParty,\n"
            "    .delta = -1,\n"
            "};\n"
        )
        self.assertEqual(
            read_c_structs(source),
            {
                "gTrainer": {
                    "pos": "{1, 2}",
                    "name": '_("RED")',
                    "flags": "FLAG_A | FLAG_B",
                    "party": "&sParty",
                    "delta": "-1",
                }
            },
        )

    def test_array_of_structs(self) -> None:
        source = "static const struct Foo sFoos[NUM_FOOS] = { {1}, {2} };"
        self.assertEqual(read_c_structs(source, member_map={0: "first"}), {"sFoos": {"first": "{1}"}})

    def test_index_designators(self) -> None:
        self.assertEqual(
            read_c_structs("gTable = { [0] = 5, [ITEM_B] = 6 };"),
            {"gTable": {"0": "5", "ITEM_B": "6"}},
        )

    def test_chained_member_designators(self) -> None:
        self.assertEqual(
            read_c_structs("const struct B gPos = { .pos.x = 3, .y = 4 };"),
            {"gPos": {"pos.x": "3", "y": "4"}},
        )

    def test_member_index_designators(self) -> None:
        self.assertEqual(
            read_c_structs("gFoo = { .arr[1] = 3, [ITEM_A].count = 2 };"),
            {"gFoo": {"arr[1]": "3", "ITEM_A.count": "2"}},
        )

    def test_nested_list_keeps_designators(self) -> None:
        self.assertEqual(
            read_c_structs("gFoo = { .a = { [0] = 1, .b.c = 2 } };"),
            {"gFoo": {"a": "{[0] = 1, .b.c = 2}"}},
        )

    def test_bad_object_does_not_hide_others(self) -> None:
        source = (
            "const struct A gFirst = { .x = 1 };\n"
            "const struct A gBad = { .x = , .y = 4 };\n"
            "const struct A gLast = { .x = 2 };\n"
        )
        with self.assertLogs("symscan.structs", level="ERROR") as logs:
            result = read_c_structs(source, filename="data.h")
        self.assertEqual(result, {"gFirst": {"x": "1"}, "gLast": {"x": "2"}})
        self.assertEqual(len(logs.output), 1)
        self.assertIn("Expected initializer value", logs.output[0])

    def test_empty_initializer(self) -> None:
        self.assertEqual(read_c_structs("gFoo = {};"), {"gFoo": {}})

    def test_lexer_error_is_logged(self) -> None:
        with self.assertLogs("symscan.structs", level="ERROR") as logs:
            self.assertEqual(read_c_structs('gFoo = { .name = "abc };', filename="data.h"), {})
        self.assertIn("data.h", logs.output[0])

    def test_unterminated_initializer_is_logged(self) -> None:
        with self.assertLogs("symscan.structs", level="ERROR"):
            self.assertEqual(read_c_structs("gFoo = { .a = 1 "), {})


if __name__ == "__main__":
    unittest.main()
