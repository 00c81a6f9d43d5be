#!/usr/bin/env python3
"""
Tokens Module
Typed token records and the forward-only cursor the grammar reads from.

A token source (see readers.export_tokenizer) yields Token objects. The
reconstruction functions never touch the source directly: they request
tokens from a TokenCursor by name and kind. A request produces a
RequestResult carrying either the typed value or the UnexpectedToken error,
so optional records can be probed without exceptions while mandatory
records simply unwrap the result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple, Union

from .errors import UnexpectedToken


class TokenKind(Enum):
    """Value kinds a token can carry"""
    MARKER = "marker"
    UINT = "uint"
    FLOAT = "float"
    VECTOR2 = "vector2"
    VECTOR3 = "vector3"
    VECTOR4 = "vector4"
    BONE_INFO = "bone-info"
    BONE_WEIGHT = "bone-weight"
    TRI = "tri"
    UV_SET = "uv-set"
    INT_FLOAT = "int-float"
    UINT_STRING = "uint-string"
    UINT_STRING_X3 = "uint-string-x3"
    RAW = "raw"


@dataclass(frozen=True)
class BoneInfo:
    """Bone declaration: `BONE 1 0 "j_spine"`"""
    index: int
    parent: int
    name: str


@dataclass(frozen=True)
class BoneWeight:
    """Vertex skin weight: `BONE 3 0.25`"""
    index: int
    weight: float


@dataclass(frozen=True)
class Tri:
    """Face header: `TRI 0 2 0 0` (object index, material index)"""
    object_index: int
    material_index: int


@dataclass(frozen=True)
class UVSet:
    """Per-corner UV layers: `UV 1 0.5 0.25`"""
    uvs: Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class UIntString:
    """Indexed name: `PART 0 "tag_origin"`"""
    index: int
    name: str


@dataclass(frozen=True)
class UIntStringX3:
    """Material declaration: `MATERIAL 0 "mtl_body" "Lambert" "body_c.tga"`"""
    index: int
    name: str
    shader: str
    image: str


@dataclass(frozen=True)
class Token:
    """Single named, typed token

    Attributes:
        name: Token name as written in the source (e.g., "OFFSET")
        kind: Value kind
        value: Typed value (int, float, tuple, or one of the records above)
        line: Source line number, if the source knows it
    """
    name: str
    kind: TokenKind
    value: Any = None
    line: Optional[int] = None


@dataclass
class RequestResult:
    """Outcome of a token request: the typed value or the parse error"""
    value: Any = None
    error: Optional[UnexpectedToken] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        """Return the value, raising the carried error on failure"""
        if self.error is not None:
            raise self.error
        return self.value


Names = Union[str, Sequence[str]]


def _as_names(names: Names) -> Tuple[str, ...]:
    if isinstance(names, str):
        return (names,)
    return tuple(names)


class TokenCursor:
    """Forward-only cursor over a token sequence

    Holds at most one token of lookahead; consumed tokens are never revisited.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._lookahead: Optional[Token] = None
        self._exhausted = False
        self.consumed = 0

    def peek(self) -> Optional[Token]:
        """Return the next token without consuming it (None at end)"""
        if self._lookahead is None and not self._exhausted:
            self._lookahead = next(self._tokens, None)
            if self._lookahead is None:
                self._exhausted = True
        return self._lookahead

    def next(self) -> Token:
        """Consume and return the next token of any name or kind

        Raises:
            UnexpectedToken: If the stream is exhausted
        """
        token = self.peek()
        if token is None:
            raise UnexpectedToken((), None, None)
        self._lookahead = None
        self.consumed += 1
        return token

    def try_request(self, names: Names, kind: TokenKind) -> RequestResult:
        """Consume the next token only if it matches one of names and kind

        A mismatching token is left in place so the caller may branch on it.
        """
        names = _as_names(names)
        token = self.peek()
        if token is None or token.name not in names or token.kind != kind:
            return RequestResult(error=UnexpectedToken(names, kind, token))
        self.next()
        return RequestResult(value=token.value)

    def request(self, names: Names, kind: TokenKind):
        """Consume the next token, which must match one of names and kind"""
        return self.try_request(names, kind).unwrap()

    def skip(self, count: int):
        """Consume count tokens regardless of name or kind"""
        for _ in range(count):
            self.next()

    def at_end(self) -> bool:
        return self.peek() is None


def read_header(cursor: TokenCursor, marker: str) -> int:
    """Read the `MODEL`/`ANIMATION` marker and the `VERSION` token

    The version is returned but not checked; the grammar that follows
    decides whether the data is usable.
    """
    cursor.request(marker, TokenKind.MARKER)
    return cursor.request("VERSION", TokenKind.UINT)
