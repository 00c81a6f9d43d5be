#!/usr/bin/env python3
"""
Core Module
Token grammar, transform math, and format-agnostic scene data structures.
"""

from .errors import (
    ReconstructionError,
    UnexpectedToken,
    StructuralMismatch,
    OutOfRange,
    MissingDependency,
)
from .scene_data import (
    SceneModel,
    Bone,
    Mesh,
    Vertex,
    Face,
    Weight,
    Material,
    SimpleMaterial,
    Animation,
    AnimationFrame,
    PartTransform,
)
from .tokens import Token, TokenKind, TokenCursor, RequestResult, read_header
from .transforms import UNIT_SCALE

__all__ = [
    'ReconstructionError',
    'UnexpectedToken',
    'StructuralMismatch',
    'OutOfRange',
    'MissingDependency',
    'SceneModel',
    'Bone',
    'Mesh',
    'Vertex',
    'Face',
    'Weight',
    'Material',
    'SimpleMaterial',
    'Animation',
    'AnimationFrame',
    'PartTransform',
    'Token',
    'TokenKind',
    'TokenCursor',
    'RequestResult',
    'read_header',
    'UNIT_SCALE',
]
