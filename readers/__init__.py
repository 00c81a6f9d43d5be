#!/usr/bin/env python3
"""
Readers Module
Export file readers (XMODEL_EXPORT models, XANIM_EXPORT animations)
"""

from pathlib import Path

from .base_reader import BaseReader
from .xmodel_reader import XModelReader
from .xanim_reader import XAnimReader

# Supported file extensions
MODEL_EXTENSIONS = {'.xmodel_export'}
ANIM_EXTENSIONS = {'.xanim_export'}
SUPPORTED_EXTENSIONS = MODEL_EXTENSIONS | ANIM_EXTENSIONS


def create_reader(input_file, progress_callback=None, skeleton=None):
    """Factory function to create appropriate reader based on file extension

    Args:
        input_file: Path to input export file
        progress_callback: Optional progress callback passed to the reader
        skeleton: SceneModel supplying bones (animations only)

    Returns:
        BaseReader: XModelReader or XAnimReader instance

    Raises:
        ValueError: If file extension is not supported
    """
    ext = Path(input_file).suffix.lower()

    if ext in MODEL_EXTENSIONS:
        return XModelReader(input_file, progress_callback)
    elif ext in ANIM_EXTENSIONS:
        return XAnimReader(input_file, skeleton, progress_callback)
    else:
        raise ValueError(
            f"Unsupported file format: {ext}\n"
            f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )


def get_file_type(input_file):
    """Get the file type string for a given file

    Args:
        input_file: Path to input export file

    Returns:
        str: 'model', 'animation', or 'unknown'
    """
    ext = Path(input_file).suffix.lower()
    if ext in MODEL_EXTENSIONS:
        return 'model'
    elif ext in ANIM_EXTENSIONS:
        return 'animation'
    return 'unknown'


def is_supported_format(input_file):
    """Check if a file has a supported format

    Args:
        input_file: Path to input export file

    Returns:
        bool: True if format is supported
    """
    return Path(input_file).suffix.lower() in SUPPORTED_EXTENSIONS


__all__ = [
    'BaseReader',
    'XModelReader',
    'XAnimReader',
    'create_reader',
    'get_file_type',
    'is_supported_format',
    'MODEL_EXTENSIONS',
    'ANIM_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
