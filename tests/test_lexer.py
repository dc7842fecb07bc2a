import unittest

from tests import _bootstrap  # noqa: F401
from symscan.lexer import Lexer, LexerError, TokenKind, lex_initializers, translate_source


class TranslateTests(unittest.TestCase):
    def test_translate_splice(self) -> None:
        self.assertEqual(translate_source("a\\\n b"), "a b")

    def test_translate_newlines(self) -> None:
        self.assertEqual(translate_source("a\r\nb\rc"), "a\nb\nc")


class LexerTokenTests(unittest.TestCase):
    def test_basic_tokens(self) -> None:
        tokens = lex_initializers("Foo = { .a = 0x1, .b = \"x\" };")
        self.assertEqual(
            [t.kind for t in tokens],
            [
                TokenKind.IDENT,
                TokenKind.PUNCTUATOR,
                TokenKind.PUNCTUATOR,
                TokenKind.PUNCTUATOR,
                TokenKind.IDENT,
                TokenKind.PUNCTUATOR,
                TokenKind.NUMBER,
                TokenKind.PUNCTUATOR,
                TokenKind.PUNCTUATOR,
                TokenKind.IDENT,
                TokenKind.PUNCTUATOR,
                TokenKind.STRING_LITERAL,
                TokenKind.PUNCTUATOR,
                TokenKind.PUNCTUATOR,
                TokenKind.EOF,
            ],
        )
        self.assertEqual(tokens[6].lexeme, "0x1")
        self.assertEqual(tokens[11].lexeme, '"x"')
        self.assertIsNone(tokens[-1].lexeme)

    def test_comments_and_directives_are_skipped(self) -> None:
        source = '#include "global.h"\n  #define X 1\n/* a\n b */ int // tail\nx;'
        tokens = lex_initializers(source)
        self.assertEqual([t.lexeme for t in tokens], ["int", "x", ";", None])
        self.assertEqual((tokens[0].line, tokens[0].column), (4, 7))

    def test_hash_inside_line_is_a_character_error(self) -> None:
        with self.assertRaises(LexerError):
            lex_initializers("a # b")

    def test_char_constant_and_escapes(self) -> None:
        tokens = lex_initializers("'\\'' \"a\\\"b\"")
        self.assertEqual(tokens[0].kind, TokenKind.CHAR_CONST)
        self.assertEqual(tokens[0].lexeme, "'\\''")
        self.assertEqual(tokens[1].lexeme, '"a\\"b"')

    def test_numbers_keep_suffixes(self) -> None:
        tokens = lex_initializers("10u 1.5f 0xFFUL")
        self.assertEqual([t.lexeme for t in tokens[:-1]], ["10u", "1.5f", "0xFFUL"])

    def test_longest_punctuator_wins(self) -> None:
        tokens = lex_initializers("a<<=1")
        self.assertEqual(tokens[1].lexeme, "<<=")

    def test_unterminated_string(self) -> None:
        with self.assertRaises(LexerError):
            lex_initializers('"abc\n"')

    def test_unterminated_comment(self) -> None:
        with self.assertRaises(LexerError):
            Lexer("/* never closed").tokenize()


if __name__ == "__main__":
    unittest.main()
