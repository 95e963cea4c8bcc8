# src/catalog/manifest/syntax.py
"""
Tokenizer and expression parser for the subset of Swift found in
Package.swift files.

Only expressions are understood. Statements other than `let`/`var`
bindings and `package.<field>` mutations are skipped token by token.
"""

import re
import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.errors import ManifestParseError
from core.logging.logger import get_logger

logger = get_logger(__name__)


# --------------------
# Tokens
# --------------------

IDENT = "ident"
STRING = "string"
NUMBER = "number"
OP = "op"
EOF = "eof"

_IDENT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_NUMBER_RE = re.compile(r"-?\d[\d_]*(?:\.\d[\d_]*)?")
_OPERATORS = ("..<", "...", "+=", "->", "==", "!=", "&&", "||")
_DIRECTIVES = ("#if", "#elseif", "#else", "#endif", "#warning", "#error")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", '"': '"', "'": "'", "\\": "\\"}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    pos: int


def _line_of(source: str, pos: int) -> int:
    return source.count("\n", 0, pos) + 1


def _read_string(source: str, pos: int) -> Tuple[str, int]:
    """Single-line string literal starting at the opening quote."""
    chars = []
    i = pos + 1
    while i < len(source):
        ch = source[i]
        if ch == '"':
            return "".join(chars), i + 1
        if ch == "\n":
            break
        if ch == "\\":
            nxt = source[i + 1:i + 2]
            if nxt in _ESCAPES:
                chars.append(_ESCAPES[nxt])
                i += 2
                continue
            if nxt == "u" and source[i + 2:i + 3] == "{":
                end = source.find("}", i + 3)
                if end == -1:
                    break
                try:
                    chars.append(chr(int(source[i + 3:end], 16)))
                except (ValueError, OverflowError):
                    raise ManifestParseError(
                        f"Invalid unicode escape on line {_line_of(source, i)}"
                    )
                i = end + 1
                continue
            if nxt == "(":
                # interpolation is kept verbatim
                depth = 0
                start = i
                i += 1
                while i < len(source):
                    if source[i] == "(":
                        depth += 1
                    elif source[i] == ")":
                        depth -= 1
                        if depth == 0:
                            break
                    i += 1
                chars.append(source[start:i + 1])
                i += 1
                continue
        chars.append(ch)
        i += 1
    raise ManifestParseError(f"Unterminated string literal on line {_line_of(source, pos)}")


def _read_multiline_string(source: str, pos: int) -> Tuple[str, int]:
    end = source.find('"""', pos + 3)
    if end == -1:
        raise ManifestParseError(
            f"Unterminated multi-line string literal on line {_line_of(source, pos)}"
        )
    body = source[pos + 3:end]
    if body.startswith("\n"):
        body = body[1:]
    # closing delimiter indentation is not part of the content
    body = re.sub(r"\n[ \t]*$", "", body)
    return textwrap.dedent(body), end + 3


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    length = len(source)

    while pos < length:
        ch = source[pos]

        if ch.isspace():
            pos += 1
            continue

        if source.startswith("//", pos):
            end = source.find("\n", pos)
            pos = length if end == -1 else end
            continue

        if source.startswith("/*", pos):
            end = source.find("*/", pos + 2)
            if end == -1:
                raise ManifestParseError(f"Unterminated comment on line {_line_of(source, pos)}")
            pos = end + 2
            continue

        if ch == "#":
            directive = next((d for d in _DIRECTIVES if source.startswith(d, pos)), None)
            if directive is not None:
                # every conditional-compilation branch is read
                end = source.find("\n", pos)
                pos = length if end == -1 else end
                continue

        if source.startswith('"""', pos):
            value, pos_after = _read_multiline_string(source, pos)
            tokens.append(Token(STRING, value, pos))
            pos = pos_after
            continue

        if ch == '"':
            value, pos_after = _read_string(source, pos)
            tokens.append(Token(STRING, value, pos))
            pos = pos_after
            continue

        if ch == "`":
            end = source.find("`", pos + 1)
            if end == -1:
                raise ManifestParseError(f"Unterminated identifier on line {_line_of(source, pos)}")
            tokens.append(Token(IDENT, source[pos + 1:end], pos))
            pos = end + 1
            continue

        match = _IDENT_RE.match(source, pos)
        if match:
            tokens.append(Token(IDENT, match.group(), pos))
            pos = match.end()
            continue

        match = _NUMBER_RE.match(source, pos)
        if match and (ch != "-" or _is_prefix_position(tokens)):
            tokens.append(Token(NUMBER, match.group().replace("_", ""), pos))
            pos = match.end()
            continue

        operator = next((op for op in _OPERATORS if source.startswith(op, pos)), None)
        if operator is not None:
            tokens.append(Token(OP, operator, pos))
            pos += len(operator)
            continue

        # key paths, custom operators and the like are left to the parser
        tokens.append(Token(OP, ch, pos))
        pos += 1

    tokens.append(Token(EOF, "", length))
    return tokens


def _is_prefix_position(tokens: List[Token]) -> bool:
    # "-1" is a literal after an operator or opening bracket, a subtraction otherwise
    if not tokens:
        return True
    last = tokens[-1]
    return last.kind == OP and last.value not in (")", "]")


# --------------------
# Expression tree
# --------------------

@dataclass
class Literal:
    value: Any


@dataclass
class Name:
    ident: str


@dataclass
class Member:
    """`.v10_15` (base None) or `SwiftVersion.v5`"""

    base: Optional[Any]
    name: str


@dataclass
class Argument:
    label: Optional[str]
    value: Any


@dataclass
class Call:
    callee: Any
    args: List[Argument] = field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        if isinstance(self.callee, Name):
            return self.callee.ident
        if isinstance(self.callee, Member):
            return self.callee.name
        return None

    def arg(self, label: str) -> Optional[Any]:
        for argument in self.args:
            if argument.label == label:
                return argument.value
        return None

    def positional(self) -> List[Any]:
        return [argument.value for argument in self.args if argument.label is None]


@dataclass
class ArrayExpr:
    items: List[Any]


@dataclass
class DictExpr:
    pairs: List[Tuple[Any, Any]]


@dataclass
class RangeExpr:
    lower: Any
    upper: Any
    closed: bool


@dataclass
class Concat:
    left: Any
    right: Any


@dataclass
class Opaque:
    """Closures and other constructs the manifest reader does not evaluate."""

    text: str


# --------------------
# Parser
# --------------------

@dataclass
class Mutation:
    target: str
    attribute: str
    op: str
    value: Any


@dataclass
class Program:
    bindings: Dict[str, Any]
    mutations: List[Mutation]
    errors: List[str] = field(default_factory=list)


class ExpressionParser:
    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0

    # ---- token helpers ----

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != EOF:
            self.pos += 1
        return token

    def check(self, kind: str, value: Optional[str] = None) -> bool:
        token = self.current
        return token.kind == kind and (value is None or token.value == value)

    def accept(self, kind: str, value: Optional[str] = None) -> Optional[Token]:
        if self.check(kind, value):
            return self.advance()
        return None

    def expect(self, kind: str, value: Optional[str] = None) -> Token:
        token = self.accept(kind, value)
        if token is None:
            found = self.current.value or "end of file"
            wanted = value or kind
            raise ManifestParseError(
                f"Expected {wanted!r} but found {found!r} on line "
                f"{_line_of(self.source, self.current.pos)}"
            )
        return token

    # ---- statements ----

    def parse_program(self) -> Program:
        bindings: Dict[str, Any] = {}
        mutations: List[Mutation] = []
        errors: List[str] = []

        while not self.check(EOF):
            start = self.pos
            try:
                self._statement(bindings, mutations)
            except ManifestParseError as e:
                logger.debug(f"Skipping unreadable statement: {e.reason}")
                errors.append(e.reason)
                self.pos = start + 1
                continue
            if self.pos == start:
                self.advance()

        return Program(bindings=bindings, mutations=mutations, errors=errors)

    def _statement(self, bindings: Dict[str, Any], mutations: List[Mutation]) -> None:
        token = self.current

        if token.kind == IDENT and token.value == "import":
            self.advance()
            self.expect(IDENT)
            while self.accept(OP, "."):
                self.expect(IDENT)
            return

        if token.kind == IDENT and token.value in ("let", "var"):
            self.advance()
            name = self.expect(IDENT).value
            if self.accept(OP, ":"):
                self._skip_type()
            self.expect(OP, "=")
            bindings[name] = self.parse_expression()
            return

        if token.kind == IDENT and self.peek().value == "." and self.peek(2).kind == IDENT:
            target = self.advance().value
            self.advance()
            attribute = self.advance().value

            if self.accept(OP, "+="):
                mutations.append(Mutation(target, attribute, "+=", self.parse_expression()))
                return
            if self.check(OP, "="):
                self.advance()
                mutations.append(Mutation(target, attribute, "=", self.parse_expression()))
                return
            if self.check(OP, ".") and self.peek().value == "append":
                self.advance()
                self.advance()
                self.expect(OP, "(")
                contents = self.accept(IDENT, "contentsOf")
                if contents:
                    self.expect(OP, ":")
                value = self.parse_expression()
                self.expect(OP, ")")
                if not contents:
                    value = ArrayExpr([value])
                mutations.append(Mutation(target, attribute, "+=", value))
                return

        self.advance()

    def _skip_type(self) -> None:
        depth = 0
        while not self.check(EOF):
            token = self.current
            if token.kind == OP and token.value in "([<":
                depth += 1
            elif token.kind == OP and token.value in ")]>":
                depth -= 1
            elif depth == 0 and token.kind == OP and token.value == "=":
                return
            self.advance()

    # ---- expressions ----

    def parse_expression(self) -> Any:
        left = self._additive()
        if self.check(OP, "..<") or self.check(OP, "..."):
            closed = self.advance().value == "..."
            return RangeExpr(left, self._additive(), closed)
        return left

    def _additive(self) -> Any:
        node = self._postfix()
        while self.accept(OP, "+"):
            node = Concat(node, self._postfix())
        return node

    def _postfix(self) -> Any:
        node = self._primary()
        while True:
            if self.check(OP, "(") and self._same_line_as_previous():
                self.advance()
                node = Call(node, self._arguments(")"))
            elif self.check(OP, ".") and self.peek().kind == IDENT:
                self.advance()
                node = Member(node, self.advance().value)
            elif self.check(OP, "{") and isinstance(node, (Call, Member, Name)):
                node = Call(node, [Argument(None, self._closure())])
            elif self.check(OP, "!") or self.check(OP, "?"):
                self.advance()
            else:
                return node

    def _same_line_as_previous(self) -> bool:
        previous = self.tokens[self.pos - 1]
        return "\n" not in self.source[previous.pos:self.current.pos]

    def _primary(self) -> Any:
        token = self.current

        if token.kind == STRING:
            self.advance()
            return Literal(token.value)

        if token.kind == NUMBER:
            self.advance()
            return Literal(float(token.value) if "." in token.value else int(token.value))

        if token.kind == IDENT:
            self.advance()
            if token.value == "true":
                return Literal(True)
            if token.value == "false":
                return Literal(False)
            if token.value == "nil":
                return Literal(None)
            return Name(token.value)

        if self.accept(OP, "."):
            return Member(None, self.expect(IDENT).value)

        if self.accept(OP, "#"):
            return Name("#" + self.expect(IDENT).value)

        if self.accept(OP, "["):
            return self._collection()

        if self.accept(OP, "("):
            node = self.parse_expression()
            self.expect(OP, ")")
            return node

        if self.check(OP, "{"):
            return self._closure()

        found = token.value or "end of file"
        raise ManifestParseError(
            f"Unexpected {found!r} on line {_line_of(self.source, token.pos)}"
        )

    def _arguments(self, closing: str) -> List[Argument]:
        args: List[Argument] = []
        while not self.accept(OP, closing):
            label = None
            if self.current.kind == IDENT and self.peek().kind == OP and self.peek().value == ":":
                label = self.advance().value
                self.advance()
            args.append(Argument(label, self.parse_expression()))
            if not self.accept(OP, ","):
                self.expect(OP, closing)
                break
        return args

    def _collection(self) -> Any:
        if self.accept(OP, "]"):
            return ArrayExpr([])
        if self.accept(OP, ":"):
            self.expect(OP, "]")
            return DictExpr([])

        first = self.parse_expression()
        if self.accept(OP, ":"):
            pairs = [(first, self.parse_expression())]
            while self.accept(OP, ","):
                if self.check(OP, "]"):
                    break
                key = self.parse_expression()
                self.expect(OP, ":")
                pairs.append((key, self.parse_expression()))
            self.expect(OP, "]")
            return DictExpr(pairs)

        items = [first]
        while self.accept(OP, ","):
            if self.check(OP, "]"):
                break
            items.append(self.parse_expression())
        self.expect(OP, "]")
        return ArrayExpr(items)

    def _closure(self) -> Opaque:
        start = self.expect(OP, "{")
        depth = 1
        while depth and not self.check(EOF):
            token = self.advance()
            if token.kind == OP and token.value == "{":
                depth += 1
            elif token.kind == OP and token.value == "}":
                depth -= 1
        if depth:
            raise ManifestParseError(f"Unterminated closure on line {_line_of(self.source, start.pos)}")
        return Opaque(self.source[start.pos:self.tokens[self.pos - 1].pos + 1])


def parse_program(source: str) -> Program:
    return ExpressionParser(source).parse_program()
