from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RE = re.compile(
    r"""
    0[xX][0-9a-fA-F_]+
    | 0[bB][01_]+
    | 0[oO][0-7_]+
    | (?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?
    """,
    re.VERBOSE,
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_TERMINATORS = ("\r\n", "\n", "\r", "\u2028", "\u2029")

_KEYWORD_VALUES: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "NaN": math.nan,
    "Infinity": math.inf,
}

_CLOSERS = {"{": "}", "[": "]", "(": ")"}

# Each nesting level uses several interpreter frames; this must fit the default recursion limit.
_MAX_DEPTH = 128


class JSLiteralError(ValueError):
    """Raised when text cannot be read as a JavaScript object literal."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at position {position}")
        self.position = position


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.n = len(text)
        self.depth = 0

    # -- low level ---------------------------------------------------------

    def error(self, message: str) -> JSLiteralError:
        return JSLiteralError(message, self.pos)

    def peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < self.n else ""

    def startswith(self, token: str) -> bool:
        return self.text.startswith(token, self.pos)

    def skip_ws(self) -> None:
        while self.pos < self.n:
            ch = self.text[self.pos]
            if ch.isspace() or ch == "\ufeff":
                self.pos += 1
            elif self.startswith("//"):
                end = self.text.find("\n", self.pos)
                self.pos = self.n if end == -1 else end + 1
            elif self.startswith("/*"):
                end = self.text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("unterminated comment")
                self.pos = end + 2
            else:
                return

    def expect(self, ch: str) -> None:
        self.skip_ws()
        if self.peek() != ch:
            raise self.error(f"expected {ch!r}")
        self.pos += 1

    def read_identifier(self) -> str:
        start = self.pos
        if not _is_ident_start(self.peek()):
            raise self.error("expected identifier")
        while self.pos < self.n and _is_ident_part(self.text[self.pos]):
            self.pos += 1
        return self.text[start : self.pos]

    # -- values ------------------------------------------------------------

    def parse_document(self) -> Any:
        self.skip_ws()
        value = self.parse_value()
        self.skip_ws()
        while self.peek() == ";":
            self.pos += 1
            self.skip_ws()
        if self.pos != self.n:
            raise self.error("unexpected trailing content")
        return value

    def parse_value(self) -> Any:
        self.skip_ws()
        ch = self.peek()
        if not ch:
            raise self.error("unexpected end of input")

        if ch == "{":
            return self.nested(self.parse_object)
        if ch == "[":
            return self.nested(self.parse_array)
        if ch in "\"'":
            return self.parse_string(ch)
        if ch == "`":
            return self.parse_template()
        if ch == "(":
            return self.nested(self.parse_parenthesized)
        if ch.isdigit() or ch in "+-.":
            return self.parse_number()
        if _is_ident_start(ch):
            return self.parse_word()

        raise self.error(f"unexpected character {ch!r}")

    def nested(self, fn: Any) -> Any:
        self.depth += 1
        if self.depth > _MAX_DEPTH:
            raise self.error("nesting too deep")
        try:
            return fn()
        finally:
            self.depth -= 1

    def parse_object(self) -> dict[str, Any]:
        self.pos += 1
        out: dict[str, Any] = {}

        while True:
            self.skip_ws()
            ch = self.peek()
            if ch == "}":
                self.pos += 1
                return out
            if not ch:
                raise self.error("unterminated object")

            key = self.parse_key()
            self.skip_ws()
            nxt = self.peek()

            if nxt == ":":
                self.pos += 1
                out[key] = self.parse_value()
            elif nxt == "(":
                # Method shorthand: name(args) { body }
                self.skip_balanced()
                self.skip_ws()
                if self.peek() != "{":
                    raise self.error("expected method body")
                self.skip_balanced()
                out[key] = None
            elif nxt in ",}":
                # Shorthand property refers to a variable we cannot resolve.
                out[key] = None
            elif key in ("get", "set", "async") and (_is_ident_start(nxt) or nxt in "\"'["):
                name = self.parse_key()
                self.skip_ws()
                self.skip_balanced()
                self.skip_ws()
                self.skip_balanced()
                out[name] = None
            else:
                raise self.error("expected ':' after object key")

            self.skip_ws()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch != "}":
                raise self.error("expected ',' or '}' in object")

    def parse_key(self) -> str:
        ch = self.peek()
        if not ch:
            raise self.error("expected object key")
        if ch in "\"'":
            return self.parse_string(ch)
        if ch == "[":
            # Computed key: only literal expressions are meaningful.
            self.pos += 1
            value = self.parse_value()
            self.expect("]")
            return str(value)
        if ch.isdigit() or ch == ".":
            value = self.parse_number()
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)
        if _is_ident_start(ch):
            return self.read_identifier()
        raise self.error("expected object key")

    def parse_array(self) -> list[Any]:
        self.pos += 1
        out: list[Any] = []

        while True:
            self.skip_ws()
            ch = self.peek()
            if ch == "]":
                self.pos += 1
                return out
            if not ch:
                raise self.error("unterminated array")
            if ch == ",":
                # Elision: [a,,b] has a hole.
                self.pos += 1
                out.append(None)
                continue

            out.append(self.parse_value())

            self.skip_ws()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch != "]":
                raise self.error("expected ',' or ']' in array")

    def parse_string(self, quote: str) -> str:
        self.pos += 1
        chunks: list[str] = []
        start = self.pos

        while True:
            if self.pos >= self.n:
                raise self.error("unterminated string")
            ch = self.text[self.pos]
            if ch == quote:
                chunks.append(self.text[start : self.pos])
                self.pos += 1
                return "".join(chunks)
            if ch in "\n\r":
                raise self.error("newline in string")
            if ch == "\\":
                chunks.append(self.text[start : self.pos])
                self.pos += 1
                chunks.append(self.read_escape())
                start = self.pos
                continue
            self.pos += 1

    def parse_template(self) -> str:
        self.pos += 1
        chunks: list[str] = []
        start = self.pos

        while True:
            if self.pos >= self.n:
                raise self.error("unterminated template literal")
            ch = self.text[self.pos]
            if ch == "`":
                chunks.append(self.text[start : self.pos])
                self.pos += 1
                return "".join(chunks)
            if self.startswith("${"):
                raise self.error("template interpolation is not supported")
            if ch == "\\":
                chunks.append(self.text[start : self.pos])
                self.pos += 1
                chunks.append(self.read_escape())
                start = self.pos
                continue
            self.pos += 1

    def read_escape(self) -> str:
        if self.pos >= self.n:
            raise self.error("unterminated escape")

        for term in _LINE_TERMINATORS:
            if self.startswith(term):
                self.pos += len(term)
                return ""

        ch = self.text[self.pos]
        self.pos += 1

        if ch in _SIMPLE_ESCAPES and not (ch == "0" and self.peek().isdigit()):
            return _SIMPLE_ESCAPES[ch]
        if ch == "x":
            return chr(self.read_hex(2))
        if ch == "u":
            if self.peek() == "{":
                end = self.text.find("}", self.pos)
                if end == -1:
                    raise self.error("unterminated unicode escape")
                digits = self.text[self.pos + 1 : end]
                self.pos = end + 1
                try:
                    return chr(int(digits, 16))
                except ValueError as e:
                    raise self.error("invalid unicode escape") from e
            code = self.read_hex(4)
            # Join surrogate pairs written as two escapes.
            if 0xD800 <= code <= 0xDBFF and self.startswith("\\u"):
                save = self.pos
                self.pos += 2
                try:
                    low = self.read_hex(4)
                except JSLiteralError:
                    self.pos = save
                    return chr(code)
                if 0xDC00 <= low <= 0xDFFF:
                    return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
                self.pos = save
            return chr(code)
        return ch

    def read_hex(self, count: int) -> int:
        digits = self.text[self.pos : self.pos + count]
        if len(digits) != count:
            raise self.error("truncated hex escape")
        try:
            value = int(digits, 16)
        except ValueError as e:
            raise self.error("invalid hex escape") from e
        self.pos += count
        return value

    def parse_number(self) -> int | float:
        sign = 1
        ch = self.peek()
        if ch in "+-":
            sign = -1 if ch == "-" else 1
            self.pos += 1
            self.skip_ws()
            if _is_ident_start(self.peek()):
                word = self.read_identifier()
                if word == "Infinity":
                    return sign * math.inf
                if word == "NaN":
                    return math.nan
                raise self.error("expected number")

        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            raise self.error("expected number")
        self.pos = match.end()

        raw = match.group(0).replace("_", "")
        lowered = raw.lower()
        if lowered.startswith("0x"):
            return sign * int(raw[2:], 16)
        if lowered.startswith("0b"):
            return sign * int(raw[2:], 2)
        if lowered.startswith("0o"):
            return sign * int(raw[2:], 8)

        # BigInt suffix.
        if self.peek() == "n":
            self.pos += 1
            return sign * int(raw)

        if "." in raw or "e" in lowered:
            return sign * float(raw)
        return sign * int(raw)

    def parse_parenthesized(self) -> Any:
        start = self.pos
        self.skip_balanced()
        self.skip_ws()
        if self.startswith("=>"):
            self.pos += 2
            self.skip_arrow_body()
            return None

        self.pos = start + 1
        value = self.parse_value()
        self.expect(")")
        return value

    def parse_word(self) -> Any:
        start = self.pos
        word = self.read_identifier()

        if word in _KEYWORD_VALUES:
            return _KEYWORD_VALUES[word]

        if word == "function":
            self.skip_function()
            return None

        if word == "async":
            self.skip_ws()
            if self.startswith("function"):
                self.read_identifier()
                self.skip_function()
                return None
            if self.peek() == "(" or _is_ident_start(self.peek()):
                return self.nested(self.parse_value)

        if word == "new":
            self.skip_ws()
            self.skip_reference()
            return None

        self.pos = start
        self.skip_reference()
        return None

    # -- skipping non-data constructs --------------------------------------

    def skip_function(self) -> None:
        self.skip_ws()
        if self.peek() == "*":
            self.pos += 1
            self.skip_ws()
        if _is_ident_start(self.peek()):
            self.read_identifier()
            self.skip_ws()
        if self.peek() != "(":
            raise self.error("expected function parameters")
        self.skip_balanced()
        self.skip_ws()
        if self.peek() != "{":
            raise self.error("expected function body")
        self.skip_balanced()

    def skip_reference(self) -> None:
        """Skip an identifier chain such as `a.b[0](x)` or a single-parameter arrow."""
        self.read_identifier()
        while True:
            self.skip_ws()
            ch = self.peek()
            if not ch:
                return
            if ch == "." and _is_ident_start(self.peek(1)):
                self.pos += 1
                self.read_identifier()
            elif ch == "?" and self.peek(1) == ".":
                self.pos += 2
                if _is_ident_start(self.peek()):
                    self.read_identifier()
            elif ch in "[(":
                self.skip_balanced()
            elif self.startswith("=>"):
                self.pos += 2
                self.skip_arrow_body()
                return
            else:
                return

    def skip_arrow_body(self) -> None:
        self.skip_ws()
        if self.peek() == "{":
            self.skip_balanced()
            return
        self.skip_expression()

    def skip_expression(self) -> None:
        """Skip forward to the next top-level ',', '}', ']' or ')'."""
        while self.pos < self.n:
            self.skip_ws()
            ch = self.peek()
            if not ch or ch in ",}])":
                return
            if ch in "{[(":
                self.skip_balanced()
            elif ch in "\"'":
                self.parse_string(ch)
            elif ch == "`":
                self.skip_template_raw()
            else:
                self.pos += 1

    def skip_balanced(self) -> None:
        """Skip a bracketed region starting at the current opener, honoring strings."""
        opener = self.peek()
        if opener not in _CLOSERS:
            raise self.error("expected opening bracket")

        stack = [_CLOSERS[opener]]
        self.pos += 1

        while stack:
            if self.pos >= self.n:
                raise self.error("unbalanced brackets")
            if self.startswith("//") or self.startswith("/*"):
                self.skip_ws()
                continue
            ch = self.text[self.pos]
            if ch in "\"'":
                self.parse_string(ch)
                continue
            if ch == "`":
                self.skip_template_raw()
                continue
            if ch in _CLOSERS:
                stack.append(_CLOSERS[ch])
            elif ch == stack[-1]:
                stack.pop()
            elif ch in ")]}":
                raise self.error("mismatched bracket")
            self.pos += 1

    def skip_template_raw(self) -> None:
        self.pos += 1
        while self.pos < self.n:
            ch = self.text[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            if ch == "`":
                self.pos += 1
                return
            if self.startswith("${"):
                self.pos += 1
                self.skip_balanced()
                continue
            self.pos += 1
        raise self.error("unterminated template literal")


def parse_js_literal(text: str) -> Any:
    """
    Parse a JavaScript object-literal expression into plain Python values.

    Objects become dicts, arrays lists, and `undefined` None. Functions, arrow
    functions, constructor calls and bare references are skipped and read as None.
    Raises JSLiteralError when the text is not a readable literal.
    """
    return _Parser(text or "").parse_document()
