"""Tokenization for the host s-expression language."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
}


def _is_symbol_char(ch: str) -> bool:
    return not ch.isspace() and ch not in _SINGLE_TOKENS


def _scan_while(source: str, start: int, predicate) -> tuple[str, int]:
    i = start
    while i < len(source) and predicate(source[i]):
        i += 1
    return source[start:i], i


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch.isspace():
            i += 1
            continue

        if ch == ";":
            while i < len(source) and source[i] not in {"\n", "\r"}:
                i += 1
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if ch == "$":
            digits, end = _scan_while(source, i + 1, lambda c: c in "0123456789")
            if not digits or (end < len(source) and _is_symbol_char(source[end])):
                raise SyntaxError(f"Invalid variable {source[i:end + 1]!r} at index {i}")
            tokens.append(Token("VAR", digits, i, end))
            i = end
            continue

        text, end = _scan_while(source, i, _is_symbol_char)
        tokens.append(Token("SYMBOL", text, i, end))
        i = end

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
