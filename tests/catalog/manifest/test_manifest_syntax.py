import pytest

from catalog.manifest.syntax import (
    EOF,
    IDENT,
    NUMBER,
    OP,
    STRING,
    ArrayExpr,
    Call,
    Concat,
    DictExpr,
    Literal,
    Member,
    Name,
    Opaque,
    RangeExpr,
    parse_program,
    tokenize,
)
from core.errors import ManifestParseError


def kinds_and_values(source):
    return [(token.kind, token.value) for token in tokenize(source)]


class TestTokenize:
    def test_comments_and_directives_are_skipped(self):
        source = """
        // line comment
        /* block
           comment */
        #if swift(>=5.9)
        name
        #endif
        """
        assert kinds_and_values(source) == [(IDENT, "name"), (EOF, "")]

    def test_string_escapes(self):
        tokens = tokenize(r'"a\"b\n\u{41}\(value)"')
        assert tokens[0].kind == STRING
        assert tokens[0].value == 'a"b\nA\\(value)'

    def test_multiline_string_is_dedented(self):
        source = 'x = """\n    first\n      second\n    """'
        assert tokenize(source)[2].value == "first\n  second"

    def test_operators(self):
        assert kinds_and_values('"1"..<"2" ... += ->') == [
            (STRING, "1"),
            (OP, "..<"),
            (STRING, "2"),
            (OP, "..."),
            (OP, "+="),
            (OP, "->"),
            (EOF, ""),
        ]

    def test_negative_numbers_only_in_prefix_position(self):
        assert kinds_and_values("(-1)") == [(OP, "("), (NUMBER, "-1"), (OP, ")"), (EOF, "")]
        assert kinds_and_values("x -1") == [(IDENT, "x"), (OP, "-"), (NUMBER, "1"), (EOF, "")]

    def test_backtick_identifier(self):
        assert kinds_and_values("`default`") == [(IDENT, "default"), (EOF, "")]

    def test_unterminated_comment(self):
        with pytest.raises(ManifestParseError):
            tokenize("/* never closed")

    def test_closure_shorthand_arguments_are_identifiers(self):
        assert kinds_and_values("$0.name") == [(IDENT, "$0"), (OP, "."), (IDENT, "name"), (EOF, "")]

    def test_unknown_characters_become_operators(self):
        assert kinds_and_values(r"\.name ^ ~") == [
            (OP, "\\"),
            (OP, "."),
            (IDENT, "name"),
            (OP, "^"),
            (OP, "~"),
            (EOF, ""),
        ]

    def test_invalid_unicode_escape(self):
        for source in (r'"\u{zz}"', r'"\u{110000}"'):
            with pytest.raises(ManifestParseError) as exc_info:
                tokenize(source)
            assert "unicode escape" in exc_info.value.reason


class TestParseProgram:
    def test_bindings(self):
        program = parse_program(
            """
            import PackageDescription
            let names = ["a", "b"] + extra
            var flags: [String: Bool] = ["debug": true]
            let range = "1.0.0"..<"2.0.0"
            """
        )

        assert program.bindings["names"] == Concat(
            ArrayExpr([Literal("a"), Literal("b")]), Name("extra")
        )
        assert program.bindings["flags"] == DictExpr([(Literal("debug"), Literal(True))])
        assert program.bindings["range"] == RangeExpr(Literal("1.0.0"), Literal("2.0.0"), closed=False)
        assert program.errors == []

    def test_calls_and_members(self):
        program = parse_program('let p = Package(name: "x", platforms: [.macOS(.v12)])')
        call = program.bindings["p"]

        assert isinstance(call, Call)
        assert call.name == "Package"
        assert call.arg("name") == Literal("x")
        platform = call.arg("platforms").items[0]
        assert platform.name == "macOS"
        assert platform.positional() == [Member(None, "v12")]

    def test_call_requires_parenthesis_on_same_line(self):
        program = parse_program("let a = b\n(c)")
        assert program.bindings["a"] == Name("b")

    def test_closures_are_opaque(self):
        program = parse_program('let p = Plugin(name: "x") { value in value + 1 }')
        closure = program.bindings["p"].positional()[0]
        assert isinstance(closure, Opaque)
        assert closure.text == "{ value in value + 1 }"

    def test_mutations(self):
        program = parse_program(
            """
            package.targets += [.target(name: "A")]
            package.platforms = [.macOS(.v13)]
            package.dependencies.append(contentsOf: deps)
            package.products.append(.library(name: "L", targets: ["A"]))
            """
        )

        assert [(m.target, m.attribute, m.op) for m in program.mutations] == [
            ("package", "targets", "+="),
            ("package", "platforms", "="),
            ("package", "dependencies", "+="),
            ("package", "products", "+="),
        ]
        assert program.mutations[2].value == Name("deps")
        assert isinstance(program.mutations[3].value, ArrayExpr)

    def test_unreadable_statement_is_recorded_and_skipped(self):
        program = parse_program('let broken = [\nlet ok = "fine"')
        assert program.bindings["ok"] == Literal("fine")
        assert program.errors
