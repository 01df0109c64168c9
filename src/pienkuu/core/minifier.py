"""
Source minification for Lua scripts.

The minifier works on the token stream: comments and whitespace are
dropped, string literals are kept byte-for-byte, and a single space is
inserted only where two neighbouring tokens would otherwise fuse.
Lexical errors, unbalanced blocks and any other syntax error are
reported as MinifyError with the offending line.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..models.composition_models import MinifyError

logger = logging.getLogger(__name__)


class Minifier(Protocol):
    """Text transform applied to files selected by minify filters."""

    def minify(self, text: str) -> str:
        ...


@dataclass
class Token:
    kind: str  # name, keyword, number, string, symbol
    text: str
    line: int


KEYWORDS = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for",
        "function", "goto", "if", "in", "local", "nil", "not", "or",
        "repeat", "return", "then", "true", "until", "while",
    }
)

BLOCK_OPENERS = frozenset({"function", "if", "do", "repeat"})

BLOCK_CLOSERS = frozenset({"end", "else", "elseif", "until"})

BINARY_OPERATORS = frozenset(
    {
        "or", "and", "<", ">", "<=", ">=", "~=", "==", "|", "~", "&", "<<",
        ">>", "..", "+", "-", "*", "/", "//", "%", "^",
    }
)

UNARY_OPERATORS = frozenset({"not", "#", "-", "~"})

BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}

# Longest operators first so the alternation is greedy
SYMBOLS = sorted(
    [
        "...", "..", "==", "~=", "<=", ">=", "<<", ">>", "//", "::",
        "+", "-", "*", "/", "%", "^", "#", "&", "~", "|", "<", ">", "=",
        "(", ")", "{", "}", "[", "]", ";", ":", ",", ".",
    ],
    key=len,
    reverse=True,
)

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
NUMBER_PATTERN = re.compile(
    r"0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?"
    r"|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
)
LONG_BRACKET_PATTERN = re.compile(r"\[(=*)\[")
SYMBOL_PATTERN = re.compile("|".join(re.escape(symbol) for symbol in SYMBOLS))
WORD_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_")

# Character pairs that would lex differently when written together
FUSING_PAIRS = frozenset(
    {
        "--", "..", "==", "~=", "<=", ">=", "<<", ">>", "//", "::",
        "[[", "[=",
    }
)


class LuaMinifier:
    """Whitespace and comment stripping minifier for Lua source."""

    def minify(self, text: str) -> str:
        tokens = tokenize(text)
        check_balance(tokens)
        check_syntax(tokens)
        minified = join_tokens(tokens)
        logger.debug(f"Minified {len(text)} -> {len(minified)} characters")
        return minified


def tokenize(source: str) -> List[Token]:
    """Split Lua source into tokens, discarding whitespace and comments."""
    tokens: List[Token] = []
    pos = 0
    line = 1
    length = len(source)

    # A leading shebang line is not Lua syntax
    if source.startswith("#"):
        end = source.find("\n")
        pos = length if end == -1 else end

    while pos < length:
        char = source[pos]

        if char == "\n":
            line += 1
            pos += 1
            continue

        if char.isspace():
            pos += 1
            continue

        if source.startswith("--", pos):
            pos, line = _skip_comment(source, pos, line)
            continue

        if char in "\"'":
            end = _scan_short_string(source, pos, line)
            text = source[pos:end]
            tokens.append(Token("string", text, line))
            line += text.count("\n")
            pos = end
            continue

        long_match = LONG_BRACKET_PATTERN.match(source, pos)
        if long_match:
            end = _scan_long_bracket(source, pos, long_match.group(1), line)
            text = source[pos:end]
            tokens.append(Token("string", text, line))
            line += text.count("\n")
            pos = end
            continue

        number_match = NUMBER_PATTERN.match(source, pos)
        if number_match and (char.isdigit() or char == "."):
            end = number_match.end()
            if end < length and source[end] in WORD_CHARS:
                raise MinifyError(
                    f"Malformed number near '{source[pos:end + 1]}' on line {line}",
                    line=line,
                )
            tokens.append(Token("number", number_match.group(), line))
            pos = end
            continue

        name_match = NAME_PATTERN.match(source, pos)
        if name_match:
            word = name_match.group()
            kind = "keyword" if word in KEYWORDS else "name"
            tokens.append(Token(kind, word, line))
            pos = name_match.end()
            continue

        symbol_match = SYMBOL_PATTERN.match(source, pos)
        if symbol_match:
            tokens.append(Token("symbol", symbol_match.group(), line))
            pos = symbol_match.end()
            continue

        raise MinifyError(f"Unexpected character '{char}' on line {line}", line=line)

    return tokens


def _skip_comment(source: str, pos: int, line: int) -> tuple[int, int]:
    long_match = LONG_BRACKET_PATTERN.match(source, pos + 2)
    if long_match:
        end = _scan_long_bracket(source, pos + 2, long_match.group(1), line)
        return end, line + source.count("\n", pos, end)

    end = source.find("\n", pos)
    return (len(source) if end == -1 else end), line


def _scan_short_string(source: str, pos: int, line: int) -> int:
    quote = source[pos]
    index = pos + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            # Escaped character, an escaped newline included
            index += 2
            continue
        if char == quote:
            return index + 1
        if char == "\n":
            break
        index += 1
    raise MinifyError(f"Unfinished string on line {line}", line=line)


def _scan_long_bracket(source: str, pos: int, level: str, line: int) -> int:
    closing = f"]{level}]"
    end = source.find(closing, pos)
    if end == -1:
        raise MinifyError(f"Unfinished long string or comment on line {line}", line=line)
    return end + len(closing)


def check_balance(tokens: List[Token]) -> None:
    """Verify brackets and block keywords nest correctly."""
    stack: List[Token] = []

    for token in tokens:
        if token.kind == "symbol" and token.text in "([{":
            stack.append(token)
        elif token.kind == "symbol" and token.text in BRACKET_PAIRS:
            _pop_expected(stack, token, {BRACKET_PAIRS[token.text]})
        elif token.kind == "keyword" and token.text in BLOCK_OPENERS:
            stack.append(token)
        elif token.kind == "keyword" and token.text == "end":
            _pop_expected(stack, token, {"function", "if", "do"})
        elif token.kind == "keyword" and token.text == "until":
            _pop_expected(stack, token, {"repeat"})

    if stack:
        unclosed = stack[-1]
        raise MinifyError(
            f"'{unclosed.text}' on line {unclosed.line} is never closed",
            line=unclosed.line,
        )


def _pop_expected(stack: List[Token], token: Token, expected: set[str]) -> None:
    if not stack or stack[-1].text not in expected:
        raise MinifyError(
            f"Unexpected '{token.text}' on line {token.line}", line=token.line
        )
    stack.pop()


def join_tokens(tokens: List[Token]) -> str:
    """Concatenate tokens with the minimum whitespace that keeps them apart."""
    parts: List[str] = []
    previous: Optional[Token] = None

    for token in tokens:
        if previous is not None and _needs_space(previous, token):
            parts.append(" ")
        parts.append(token.text)
        previous = token

    return "".join(parts)


def _needs_space(left: Token, right: Token) -> bool:
    last, first = left.text[-1], right.text[0]
    if last in WORD_CHARS and first in WORD_CHARS:
        return True
    if left.kind == "number" and first == ".":
        return True
    return last + first in FUSING_PAIRS


def check_syntax(tokens: List[Token]) -> None:
    """Verify ``tokens`` form a valid Lua chunk."""
    SyntaxChecker(tokens).check()


class SyntaxChecker:
    """
    Recursive descent recognizer for the Lua 5.4 grammar.

    Nothing is built; the checker only walks the token stream and raises
    MinifyError at the first token that cannot continue a valid chunk.
    Operator precedence does not affect validity, so expressions are read
    as a flat sequence of operands and operators.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def check(self) -> None:
        self.block()
        if self.peek() is not None:
            self.fail("'<eof>' expected")

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at(self, text: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return (
            token is not None
            and token.kind in ("keyword", "symbol")
            and token.text == text
        )

    def at_kind(self, kind: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token is not None and token.kind == kind

    def accept(self, text: str) -> bool:
        if self.at(text):
            self.pos += 1
            return True
        return False

    def expect(self, text: str) -> None:
        if not self.accept(text):
            self.fail(f"'{text}' expected")

    def expect_name(self) -> None:
        if not self.at_kind("name"):
            self.fail("name expected")
        self.pos += 1

    def fail(self, reason: str) -> None:
        token = self.peek()
        if token is None:
            line = self.tokens[-1].line if self.tokens else 1
            raise MinifyError(f"{reason} near <eof> on line {line}", line=line)
        raise MinifyError(
            f"{reason} near '{token.text}' on line {token.line}", line=token.line
        )

    # Statements

    def block_follows(self) -> bool:
        token = self.peek()
        return token is None or (token.kind == "keyword" and token.text in BLOCK_CLOSERS)

    def block(self) -> None:
        while not self.block_follows():
            if self.at("return"):
                self.return_statement()
                return
            self.statement()

    def return_statement(self) -> None:
        self.expect("return")
        if not self.block_follows() and not self.at(";"):
            self.expression_list()
        self.accept(";")
        if not self.block_follows():
            self.fail("end of block expected")

    def statement(self) -> None:
        if self.accept(";") or self.accept("break"):
            return
        if self.accept("::"):
            self.expect_name()
            self.expect("::")
        elif self.accept("goto"):
            self.expect_name()
        elif self.accept("do"):
            self.block()
            self.expect("end")
        elif self.accept("while"):
            self.expression()
            self.expect("do")
            self.block()
            self.expect("end")
        elif self.accept("repeat"):
            self.block()
            self.expect("until")
            self.expression()
        elif self.at("if"):
            self.if_statement()
        elif self.at("for"):
            self.for_statement()
        elif self.accept("function"):
            self.function_name()
            self.function_body()
        elif self.at("local"):
            self.local_statement()
        else:
            self.expression_statement()

    def if_statement(self) -> None:
        self.expect("if")
        self.expression()
        self.expect("then")
        self.block()
        while self.accept("elseif"):
            self.expression()
            self.expect("then")
            self.block()
        if self.accept("else"):
            self.block()
        self.expect("end")

    def for_statement(self) -> None:
        self.expect("for")
        self.expect_name()
        if self.accept("="):
            self.expression()
            self.expect(",")
            self.expression()
            if self.accept(","):
                self.expression()
        else:
            while self.accept(","):
                self.expect_name()
            self.expect("in")
            self.expression_list()
        self.expect("do")
        self.block()
        self.expect("end")

    def local_statement(self) -> None:
        self.expect("local")
        if self.accept("function"):
            self.expect_name()
            self.function_body()
            return

        while True:
            self.expect_name()
            # Attributes such as <const> and <close>
            if self.accept("<"):
                self.expect_name()
                self.expect(">")
            if not self.accept(","):
                break
        if self.accept("="):
            self.expression_list()

    def expression_statement(self) -> None:
        kind = self.suffixed_expression()
        if self.at("=") or self.at(","):
            if kind != "variable":
                self.fail("syntax error")
            while self.accept(","):
                if self.suffixed_expression() != "variable":
                    self.fail("syntax error")
            self.expect("=")
            self.expression_list()
        elif kind != "call":
            self.fail("syntax error")

    def function_name(self) -> None:
        self.expect_name()
        while self.accept("."):
            self.expect_name()
        if self.accept(":"):
            self.expect_name()

    def function_body(self) -> None:
        self.expect("(")
        if not self.at(")"):
            while not self.accept("..."):
                self.expect_name()
                if not self.accept(","):
                    break
        self.expect(")")
        self.block()
        self.expect("end")

    # Expressions

    def expression_list(self) -> None:
        self.expression()
        while self.accept(","):
            self.expression()

    def expression(self) -> None:
        self.skip_unary_operators()
        self.simple_expression()
        while self.at_operator(BINARY_OPERATORS):
            self.pos += 1
            self.skip_unary_operators()
            self.simple_expression()

    def at_operator(self, operators: frozenset) -> bool:
        token = self.peek()
        return (
            token is not None
            and token.kind in ("keyword", "symbol")
            and token.text in operators
        )

    def skip_unary_operators(self) -> None:
        while self.at_operator(UNARY_OPERATORS):
            self.pos += 1

    def simple_expression(self) -> None:
        token = self.peek()
        if token is not None and (
            token.kind in ("number", "string")
            or (token.kind == "keyword" and token.text in ("nil", "true", "false"))
            or (token.kind == "symbol" and token.text == "...")
        ):
            self.pos += 1
        elif self.accept("function"):
            self.function_body()
        elif self.at("{"):
            self.table_constructor()
        else:
            self.suffixed_expression()

    def suffixed_expression(self) -> str:
        """Read a prefix expression; returns 'variable', 'call' or 'parenthesized'."""
        if self.accept("("):
            self.expression()
            self.expect(")")
            kind = "parenthesized"
        else:
            if not self.at_kind("name"):
                self.fail("unexpected symbol")
            self.pos += 1
            kind = "variable"

        while True:
            if self.accept("."):
                self.expect_name()
                kind = "variable"
            elif self.accept("["):
                self.expression()
                self.expect("]")
                kind = "variable"
            elif self.accept(":"):
                self.expect_name()
                self.call_arguments()
                kind = "call"
            elif self.at("(") or self.at("{") or self.at_kind("string"):
                self.call_arguments()
                kind = "call"
            else:
                return kind

    def call_arguments(self) -> None:
        if self.at_kind("string"):
            self.pos += 1
        elif self.at("{"):
            self.table_constructor()
        else:
            self.expect("(")
            if not self.at(")"):
                self.expression_list()
            self.expect(")")

    def table_constructor(self) -> None:
        self.expect("{")
        while not self.at("}"):
            if self.accept("["):
                self.expression()
                self.expect("]")
                self.expect("=")
            elif self.at_kind("name") and self.at("=", offset=1):
                self.pos += 2
            self.expression()
            if not (self.accept(",") or self.accept(";")):
                break
        self.expect("}")
