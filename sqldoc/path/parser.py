"""
Address Parser - hand-written scanner for addressing expressions

Parses the JSONPath-like subset:
- users                     collection only
- users.alice / users[0]    collection + row key
- users[0].address.city     collection + row key + sub-path
- users[*].name             wildcard row key
- users["first name"]       quoted member
- $.users[0]                optional root marker

Not supported: deep scan (..), filters ([?()]), slices and unions.
"""

import re
from typing import List, Optional

from sqldoc.core.errors import InvalidAddress
from sqldoc.path.ast_nodes import Address, Index, Member, Segment, Wildcard

# Row key reserved for scalar values written to a bare collection
SCALAR_ROW_KEY = "__"


class PathCompiler:
    """
    Scanner/compiler for addressing expressions

    Grammar:
        ADDRESS  := ['$'] FIRST OP*
        FIRST    := ident | '.' ident | BRACKET      (after '$' the dot is required)
        OP       := '.' ident | '.' digits | '.*' | BRACKET
        BRACKET  := '[' ( '*' | digits | "string" | 'string' ) ']'
    """

    BARE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|\*")
    DOT = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*|[0-9]+|\*)")
    BRACKET = re.compile(
        r"""\[\s*(?:(\*)|([0-9]+)|"((?:[^"\\]|\\.)*)"|'((?:[^'\\]|\\.)*)')\s*\]""",
        re.DOTALL,
    )
    ESCAPE = re.compile(r"\\(.)", re.DOTALL)

    def __init__(self, expression: str):
        self.expression = expression.strip() if isinstance(expression, str) else expression
        self.pos = 0

    def compile(self) -> Address:
        """
        Compile the expression into an Address

        Raises:
            InvalidAddress: If the expression is empty, malformed, or does not
                start with a plain member access
        """
        if not isinstance(self.expression, str):
            raise InvalidAddress(f"Address must be a string, got {type(self.expression).__name__}")

        segments = self.parse()

        if not segments:
            raise InvalidAddress(f"Address must have one or more operations ({self.expression!r})")

        first = segments[0]
        if not isinstance(first, Member):
            raise InvalidAddress(
                f"Address must start with a member access naming the collection ({self.expression!r})"
            )

        row_key: Optional[str] = None
        wildcard_row = False
        if len(segments) > 1:
            second = segments[1]
            if isinstance(second, Wildcard):
                wildcard_row = True
            else:
                row_key = str(second.key)
                if row_key == SCALAR_ROW_KEY:
                    raise InvalidAddress(
                        f"Row key {SCALAR_ROW_KEY!r} is reserved ({self.expression!r})"
                    )

        return Address(
            collection=first.name,
            row_key=row_key,
            sub_path=tuple(segments[2:]),
            wildcard_row=wildcard_row,
        )

    def parse(self) -> List[Segment]:
        """Scan the expression into a flat list of segments"""
        text = self.expression
        segments: List[Segment] = []

        if text.startswith("$"):
            self.pos = 1
            if self.pos < len(text) and text[self.pos] not in ".[":
                self._error("expected '.' or '[' after '$'")
        elif text:
            # Bare leading member: users[0] is shorthand for $.users[0]
            match = self.BARE.match(text)
            if match:
                segments.append(self._bare_segment(match.group(0)))
                self.pos = match.end()
            elif not text.startswith("["):
                self._error("expected a member name")

        while self.pos < len(text):
            segments.append(self._next_segment())

        return segments

    def _next_segment(self) -> Segment:
        text = self.expression

        if text.startswith("..", self.pos):
            self._error("deep scan '..' is not supported")

        if text[self.pos] == ".":
            match = self.DOT.match(text, self.pos)
            if not match:
                self._error("expected a member name, index or '*' after '.'")
            self.pos = match.end()
            token = match.group(1)
            if token.isdigit():
                return self._number_segment(token)
            return self._bare_segment(token)

        if text[self.pos] == "[":
            match = self.BRACKET.match(text, self.pos)
            if not match:
                self._error("unsupported bracket expression (filters, slices and unions are not supported)")
            self.pos = match.end()
            star, number, double_quoted, single_quoted = match.groups()
            if star is not None:
                return Wildcard()
            if number is not None:
                return self._number_segment(number)
            quoted = double_quoted if double_quoted is not None else single_quoted
            return Member(self._unescape(quoted))

        self._error(f"unexpected character {text[self.pos]!r}")

    def _number_segment(self, token: str) -> Segment:
        # "01" is not the index 1; keep it as a distinct member key
        if len(token) > 1 and token.startswith("0"):
            return Member(token)
        return Index(int(token))

    def _bare_segment(self, token: str) -> Segment:
        if token == "*":
            return Wildcard()
        return Member(token)

    def _unescape(self, text: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            char = match.group(1)
            if char not in ('"', "'", "\\"):
                self._error(f"invalid escape '\\{char}'")
            return char

        return self.ESCAPE.sub(replace, text)

    def _error(self, message: str):
        raise InvalidAddress(f"Invalid address {self.expression!r} at position {self.pos}: {message}")


def compile_address(expression: str) -> Address:
    """
    Compile an addressing expression

    Args:
        expression: Expression such as "users[0].address.city"

    Returns:
        Address with collection, row key and sub-path

    Raises:
        InvalidAddress: If the expression cannot be compiled
    """
    return PathCompiler(expression).compile()
