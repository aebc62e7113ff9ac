"""Parser for the host s-expression language.

    expr := SYMBOL | $N | "(" "lam" expr ")" | "(" expr expr* ")"

``(f a b)`` is curried application, ``((f a) b)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .ast import App, Expr, Lam, Prim, Var
from .lexer import Token, tokenize

_LAMBDA_KEYWORDS = {"lam", "lambda", "λ"}


def line_column(source: str, pos: int) -> tuple[int, int]:
    """1-based line and column of ``pos`` in ``source``."""
    line = source.count("\n", 0, pos) + 1
    column = pos - (source.rfind("\n", 0, pos) + 1) + 1
    return line, column


class ParseError(SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return format_parse_error(self.message, self.start, self.end, self.expected, self.found, self.line, self.column)


def format_parse_error(
    message: str,
    start: int,
    end: int,
    expected: tuple[str, ...],
    found: str | None,
    line: int | None,
    column: int | None,
) -> str:
    if line is not None:
        where = f"line {line}, column {column}"
    else:
        where = f"span [{start}, {end})"
    expected_text = ""
    if expected:
        expected_text = f"; expected {' or '.join(expected)}"
    found_text = ""
    if found is not None:
        found_text = f"; found {found}"
    return f"s-expression error: {message} at {where}{expected_text}{found_text}"


@dataclass
class _Parser:
    tokens: list[Token]
    source: str = ""
    index: int = 0

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expr()
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text})"
        else:
            found = token.kind
        line, column = line_column(self.source, token.pos)
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found, line=line, column=column)

    def _parse_expr(self) -> Expr:
        tok = self._peek()
        if tok.kind == "SYMBOL":
            self._advance()
            return Prim(symbol=tok.text)
        if tok.kind == "VAR":
            self._advance()
            return Var(index=int(tok.text))
        if tok.kind == "LPAREN":
            return self._parse_form()
        self._error(tok, expected=("SYMBOL", "VAR", "LPAREN"))
        raise AssertionError("unreachable")

    def _parse_form(self) -> Expr:
        open_tok = self._expect("LPAREN")
        head = self._peek()
        if head.kind == "RPAREN":
            self._error(head, message="Empty application")

        if head.kind == "SYMBOL" and head.text in _LAMBDA_KEYWORDS:
            self._advance()
            if self._peek().kind == "RPAREN":
                self._error(message="Lambda needs a body", expected=("SYMBOL", "VAR", "LPAREN"))
            body = self._parse_expr()
            if self._peek().kind != "RPAREN":
                self._error(message="A lam form takes exactly one body", expected=("RPAREN",))
            self._advance()
            return Lam(body=body)

        expr = self._parse_expr()
        while self._peek().kind != "RPAREN":
            if self._peek().kind == "EOF":
                line, column = line_column(self.source, open_tok.pos)
                self._error(message=f"Unclosed '(' opened at line {line}, column {column}", expected=("RPAREN",))
            expr = App(func=expr, arg=self._parse_expr())
        self._advance()
        return expr


def parse(source: str) -> Expr:
    try:
        tokens = tokenize(source)
    except SyntaxError as err:
        raise ParseError(str(err), 0, len(source)) from err
    parser = _Parser(tokens=tokens, source=source)
    try:
        return parser.parse_expression_only()
    except RecursionError as err:
        raise ParseError("Expression nested too deeply", 0, len(source), line=1, column=1) from err
