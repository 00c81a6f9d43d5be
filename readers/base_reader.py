#!/usr/bin/env python3
"""
Base Reader Module
Abstract interface for reading export files into scene data
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from core.tokens import TokenCursor
from .export_tokenizer import tokenize_export


class BaseReader(ABC):
    """Abstract base class for export file readers

    Provides a consistent interface for the model and animation readers.
    Subclasses implement read_from_cursor(); read() handles the file.
    """

    def __init__(self, file_path, progress_callback=None):
        """Initialize reader with file path

        Args:
            file_path: Path to the export file
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
        self.file_path = Path(file_path)
        self.progress_callback = progress_callback

    def log(self, message):
        """Send progress/status message

        Args:
            message: Message to log
        """
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'XMODEL_EXPORT')"""
        pass

    @abstractmethod
    def read_from_cursor(self, cursor: TokenCursor) -> Any:
        """Reconstruct scene data from a token cursor

        Args:
            cursor: Cursor positioned at the file header

        Returns:
            SceneModel or Animation
        """
        pass

    def read(self) -> Any:
        """Open the file, tokenize it, and reconstruct its contents

        The file handle is released on every exit path, including errors.

        Raises:
            ReconstructionError: If the token stream does not fit the grammar
            OSError: If the file cannot be read
        """
        with open(self.file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
            cursor = TokenCursor(tokenize_export(f))
            return self.read_from_cursor(cursor)
