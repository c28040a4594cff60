"""PHP array codec.

Reads configuration files of the form::

    <?php

    return [
        'name' => 'app',
        'debug' => false,
        'hosts' => ['a', 'b'],
    ];

The file is parsed, never executed. Supported values are single- and
double-quoted strings, integers (decimal and hex), floats, true/false/null,
and short ``[...]`` or long ``array(...)`` arrays. Arrays whose keys are
exactly 0..n-1 in order decode to lists; all other arrays decode to dicts
with string keys.
"""

import math
import re
from typing import Any

from ..exceptions import ConfigEncodingError
from ..exceptions import LoaderError
from .base import Codec

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<comment>//[^\n]*|\#[^\n]*|/\*.*?\*/)
    | (?P<open><\?php)
    | (?P<close>\?>)
    | (?P<arrow>=>)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | (?P<number>-?(?:0[xX][0-9a-fA-F]+|\d+\.\d*(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?|\d+(?:[eE][-+]?\d+)?))
    | (?P<name>[A-Za-z_\\][\w\\]*)
    | (?P<punct>[\[\](),;])
    """,
    re.VERBOSE | re.DOTALL,
)
_DECLARE_RE = re.compile(r"declare\s*\([^)]*\)\s*;", re.IGNORECASE)
_DOUBLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "v": "\v", "f": "\f", "0": "\0", "e": "\x1b"}

Token = tuple[str, str, int]


class PhpCodec(Codec):
    name = "PHP"
    extensions = ("php",)

    def decode(self, text: str, source: str = "<string>") -> Any:
        tokens = _tokenize(_DECLARE_RE.sub("", text), source)
        return self._container(_Parser(tokens, source).parse())

    def encode(self, data: Any) -> str:
        return "<?php\n\nreturn " + _export(data, 0) + ";\n"


def _tokenize(text: str, source: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise LoaderError(source, f"unexpected character {text[pos]!r} at offset {pos}", "PHP")
        kind = match.lastgroup or ""
        if kind not in ("ws", "comment"):
            tokens.append((kind, match.group(), pos))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list of a ``return <array>;`` file."""

    def __init__(self, tokens: list[Token], source: str):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    def parse(self) -> Any:
        if self._peek_kind() == "open":
            self.pos += 1
        keyword = self._next()
        if keyword[0] != "name" or keyword[1].lower() != "return":
            self._fail("configuration must return an array", keyword)
        value = self._value()
        if self._peek_value() == ";":
            self.pos += 1
        if self._peek_kind() == "close":
            self.pos += 1
        if self.pos < len(self.tokens):
            self._fail("unexpected trailing content", self.tokens[self.pos])
        return value

    def _value(self) -> Any:
        kind, text, offset = token = self._next()
        if kind == "string":
            return _unquote(text)
        if kind == "number":
            return _number(text)
        if kind == "punct" and text == "[":
            return self._array("]")
        if kind == "name":
            lowered = text.lower().lstrip("\\")
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            if lowered == "null":
                return None
            if lowered == "array" and self._peek_value() == "(":
                self.pos += 1
                return self._array(")")
        self._fail(f"unsupported expression {text!r}", token)

    def _array(self, closer: str) -> Any:
        entries: dict[Any, Any] = {}
        next_index = 0
        while self._peek_value() != closer:
            value = self._value()
            if self._peek_kind() == "arrow":
                self.pos += 1
                key = _array_key(value)
                if not isinstance(key, (int, str)):
                    self._fail("array keys must be strings or integers", self.tokens[self.pos - 1])
                value = self._value()
            else:
                key = next_index
            entries[key] = value
            if isinstance(key, int) and key >= next_index:
                next_index = key + 1
            if self._peek_value() == ",":
                self.pos += 1
            elif self._peek_value() != closer:
                self._fail(f"expected ',' or '{closer}'", self._next())
        self.pos += 1

        if list(entries) == list(range(len(entries))):
            return list(entries.values())
        return {str(key): value for key, value in entries.items()}

    def _next(self) -> Token:
        if self.pos >= len(self.tokens):
            raise LoaderError(self.source, "unexpected end of file", "PHP")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _peek_kind(self) -> str | None:
        return self.tokens[self.pos][0] if self.pos < len(self.tokens) else None

    def _peek_value(self) -> str | None:
        return self.tokens[self.pos][1] if self.pos < len(self.tokens) else None

    def _fail(self, message: str, token: Token) -> None:
        raise LoaderError(self.source, f"{message} at offset {token[2]}", "PHP")


def _array_key(value: Any) -> Any:
    """Normalize a key the way PHP does: bools and integral strings become ints."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"-?[1-9]\d*|0", value):
        return int(value)
    if isinstance(value, float):
        return int(value)
    if value is None:
        return ""
    return value


def _unquote(text: str) -> str:
    body = text[1:-1]
    if text[0] == "'":
        return re.sub(r"\\([\\'])", r"\1", body)

    def replace(match: re.Match) -> str:
        char = match.group(1)
        if char in _DOUBLE_ESCAPES:
            return _DOUBLE_ESCAPES[char]
        if char in '\\"$':
            return char
        return match.group(0)

    return re.sub(r"\\(.)", replace, body)


def _number(text: str) -> int | float:
    unsigned = text.lstrip("-")
    sign = -1 if text.startswith("-") else 1
    if unsigned[:2].lower() == "0x":
        return sign * int(unsigned, 16)
    if any(c in unsigned for c in ".eE"):
        return float(text)
    return int(text)


def _export(value: Any, depth: int) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ConfigEncodingError("PHP", f"cannot represent {value!r}")
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if isinstance(value, (list, dict)):
        if not value:
            return "[]"
        indent = "    " * (depth + 1)
        if isinstance(value, list):
            lines = [f"{indent}{_export(item, depth + 1)}," for item in value]
        else:
            lines = [f"{indent}{_export(str(k), 0)} => {_export(v, depth + 1)}," for k, v in value.items()]
        return "[\n" + "\n".join(lines) + "\n" + "    " * depth + "]"
    raise ConfigEncodingError("PHP", f"unsupported value of type {type(value).__name__}")
