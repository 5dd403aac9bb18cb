"""
Path Codec - canonical string encoding of segment sequences

Canonical form:
    member matching [A-Za-z_][A-Za-z0-9_]*  -> .name
    any other member                        -> ["escaped name"]
    index                                   -> [n]

The leading separator is dropped, so ["address", "city"] encodes to
"address.city" and ["tags", 0] to "tags[0]". Inside a quoted member only
backslash and double quote are escaped, which keeps decoding lossless.
"""

import re
from typing import Iterable, List, Union

from sqldoc.core.errors import MalformedPath
from sqldoc.path.ast_nodes import Index, Member, PathKey, Wildcard


class PathCodec:
    """
    Stateless encoder/decoder for canonical paths

    The grammar is compiled once on the class and shared read-only by every
    instance; use the module-level helpers for the common case.
    """

    IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

    # One token: .ident | ident | [digits] | ["escaped"]
    TOKEN = re.compile(
        r'(\.)?([A-Za-z_][A-Za-z0-9_]*)'
        r'|\[(?:([0-9]+)|"((?:[^"\\]|\\.)*)")\]',
        re.DOTALL,
    )

    ESCAPE = re.compile(r"\\(.)", re.DOTALL)

    def encode_key(self, key: Union[PathKey, Member, Index]) -> str:
        """Encode a single key, always with its leading separator"""
        if isinstance(key, (Member, Index)):
            key = key.key
        if isinstance(key, Wildcard):
            raise MalformedPath("Wildcard segments have no canonical encoding")
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise MalformedPath(f"Unsupported path key: {key!r}")

        if isinstance(key, int):
            if key < 0:
                raise MalformedPath(f"Negative index in path: {key}")
            return f"[{key}]"

        if self.IDENTIFIER.fullmatch(key):
            return f".{key}"

        escaped = key.replace("\\", "\\\\").replace('"', '\\"')
        return f'["{escaped}"]'

    def encode(self, keys: Iterable[Union[PathKey, Member, Index]]) -> str:
        """
        Encode a key sequence into its canonical path string

        Examples:
            ["address", "city"]   -> "address.city"
            ["tags", 0]           -> "tags[0]"
            ["a.b", 'q"']         -> '["a.b"]["q\\""]'
            []                    -> ""
        """
        encoded = "".join(self.encode_key(key) for key in keys)
        if encoded.startswith("."):
            encoded = encoded[1:]
        return encoded

    def decode(self, path: str) -> List[PathKey]:
        """
        Decode a canonical path string into keys

        A single leading separator is tolerated so that a path remainder
        such as ".city" (left after stripping a prefix) decodes cleanly.

        Raises:
            MalformedPath: On unterminated brackets, stray characters or
                escapes other than \\" and \\\\
        """
        keys: List[PathKey] = []
        pos = 0

        while pos < len(path):
            match = self.TOKEN.match(path, pos)
            if not match:
                raise MalformedPath(f"Malformed path {path!r} at position {pos}")

            dot, ident, number, quoted = match.groups()
            if ident is not None:
                # Identifiers after the first token must be introduced by a dot
                if pos > 0 and not dot:
                    raise MalformedPath(f"Missing separator in path {path!r} at position {pos}")
                keys.append(ident)
            elif number is not None:
                keys.append(int(number))
            else:
                keys.append(self._unescape(quoted, path))

            pos = match.end()

        return keys

    def _unescape(self, text: str, path: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            char = match.group(1)
            if char not in ('"', "\\"):
                raise MalformedPath(f"Invalid escape '\\{char}' in path {path!r}")
            return char

        return self.ESCAPE.sub(replace, text)


_codec = PathCodec()


def encode_path(keys: Iterable[Union[PathKey, Member, Index]]) -> str:
    """Encode keys into a canonical path using the shared codec"""
    return _codec.encode(keys)


def decode_path(path: str) -> List[PathKey]:
    """Decode a canonical path using the shared codec"""
    return _codec.decode(path)
