#!/usr/bin/env python3
"""
Export Tokenizer Module
Pure Python tokenizer for the text `*_export` format (XMODEL_EXPORT, XANIM_EXPORT).

Each non-empty line holds one token: a name followed by arguments separated
by whitespace and/or commas. Strings are double-quoted. Lines starting with
`//` are comments.

    BONE 1 0 "j_mainroot"
    OFFSET 0.000000, 0.000000, 40.240600
"""

import re
from typing import Iterable, Iterator, List, Tuple

from core.errors import UnexpectedToken
from core.tokens import (
    BoneInfo, BoneWeight, Token, TokenKind, Tri, UIntString, UIntStringX3, UVSet
)

# (is_string, text) pairs
Args = List[Tuple[bool, str]]

_ARG_PATTERN = re.compile(r'"([^"]*)"|([^\s,]+)')

UINT_NAMES = {
    'VERSION', 'NUMBONES', 'NUMCOSMETICBONES', 'NUMVERTS', 'NUMVERTS32',
    'VERT', 'VERT32', 'BONES', 'NUMFACES', 'NUMOBJECTS', 'NUMMATERIALS',
    'NUMPARTS', 'FRAMERATE', 'NUMFRAMES', 'NUMTRACKS', 'NUMKEYS',
}
VECTOR2_NAMES = {'COEFFS', 'GLOW', 'BLINN'}
VECTOR3_NAMES = {'OFFSET', 'SCALE', 'X', 'Y', 'Z', 'NORMAL'}
VECTOR4_NAMES = {
    'COLOR', 'TRANSPARENCY', 'AMBIENTCOLOR', 'INCANDESCENCE',
    'SPECULARCOLOR', 'REFLECTIVECOLOR',
}
FLOAT_NAMES = {'PHONG'}
INT_FLOAT_NAMES = {'REFRACTIVE', 'REFLECTIVE'}
TRI_NAMES = {'TRI', 'TRI16'}


def split_line(line: str) -> Tuple[str, Args]:
    """Split a line into its token name and arguments"""
    parts = line.split(None, 1)
    name = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    args = []
    for quoted, bare in _ARG_PATTERN.findall(rest):
        if bare:
            args.append((False, bare))
        else:
            args.append((True, quoted))
    return name, args


def _ints(args: Args) -> List[int]:
    return [int(text) for _, text in args]


def _floats(args: Args) -> Tuple[float, ...]:
    return tuple(float(text) for _, text in args)


def _vector(args: Args, size: int) -> Tuple[float, ...]:
    if len(args) != size:
        raise ValueError(f"expected {size} components, got {len(args)}")
    return _floats(args)


def _uint(args: Args) -> int:
    if len(args) != 1:
        raise ValueError(f"expected 1 value, got {len(args)}")
    value = int(args[0][1])
    if value < 0:
        raise ValueError(f"expected an unsigned value, got {value}")
    return value


def _uv_set(args: Args) -> UVSet:
    count = int(args[0][1])
    values = _floats(args[1:])
    if len(values) != count * 2:
        raise ValueError(f"expected {count} UV pairs, got {len(values)} values")
    return UVSet(uvs=tuple((values[i], values[i + 1]) for i in range(0, len(values), 2)))


def classify(name: str, args: Args):
    """Pick the token kind for a name and its arguments, and parse the value

    Returns:
        tuple: (TokenKind, value)

    Raises:
        ValueError: If the arguments do not fit the kind
    """
    if not args:
        return TokenKind.MARKER, None

    if name in UINT_NAMES:
        return TokenKind.UINT, _uint(args)
    if name in VECTOR3_NAMES:
        return TokenKind.VECTOR3, _vector(args, 3)
    if name in VECTOR4_NAMES:
        return TokenKind.VECTOR4, _vector(args, 4)
    if name in VECTOR2_NAMES:
        return TokenKind.VECTOR2, _vector(args, 2)
    if name in FLOAT_NAMES:
        return TokenKind.FLOAT, _vector(args, 1)[0]
    if name in INT_FLOAT_NAMES:
        return TokenKind.INT_FLOAT, (int(args[0][1]), float(args[1][1]))
    if name in TRI_NAMES:
        indices = _ints(args)
        return TokenKind.TRI, Tri(object_index=indices[0], material_index=indices[1])
    if name == 'UV':
        return TokenKind.UV_SET, _uv_set(args)

    # Same name, different record depending on the argument count
    if name == 'BONE':
        if len(args) == 1:
            return TokenKind.UINT, _uint(args)
        if len(args) == 2:
            return TokenKind.BONE_WEIGHT, BoneWeight(index=int(args[0][1]), weight=float(args[1][1]))
        index, parent = _ints(args[:2])
        return TokenKind.BONE_INFO, BoneInfo(index=index, parent=parent, name=args[2][1])
    if name in ('PART', 'FRAME') and len(args) == 1:
        return TokenKind.UINT, _uint(args)
    if name in ('PART', 'OBJECT') and len(args) == 2:
        return TokenKind.UINT_STRING, UIntString(index=int(args[0][1]), name=args[1][1])
    if name == 'MATERIAL' and len(args) == 4:
        return TokenKind.UINT_STRING_X3, UIntStringX3(
            index=int(args[0][1]), name=args[1][1], shader=args[2][1], image=args[3][1]
        )

    return TokenKind.RAW, tuple(text for _, text in args)


def tokenize_export(lines: Iterable[str]) -> Iterator[Token]:
    """Yield tokens from the lines of an export file

    Args:
        lines: Text lines (e.g., an open file)

    Yields:
        Token: One per non-comment, non-empty line

    Raises:
        UnexpectedToken: If a line's arguments cannot be parsed for its name
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('//'):
            continue

        name, args = split_line(line)
        try:
            kind, value = classify(name, args)
        except (ValueError, IndexError) as e:
            bad = Token(name, TokenKind.RAW, tuple(text for _, text in args), line_number)
            raise UnexpectedToken((name,), None, bad, detail=str(e)) from None

        yield Token(name=name, kind=kind, value=value, line=line_number)

