#!/usr/bin/env python3
"""
Base Exporter Module
Abstract base class ensuring consistent interface across all exporters

Exporters receive a SceneModel or Animation, never a reader, so they stay
independent of the export file format.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.scene_data import Animation, SceneModel


class BaseExporter(ABC):
    """Abstract base class for all format exporters

    Provides consistent interface and common utilities for all exporters.

    Key principles:
    - Single Responsibility: Each exporter handles ONE format
    - Consistent Interface: All exporters implement the same methods
    - Shared Utilities: Common functionality (logging, path validation) provided here
    """

    def __init__(self, progress_callback=None):
        """Initialize exporter

        Args:
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
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
    def export(self, scene_model: 'SceneModel', output_path, name):
        """Export a reconstructed model

        Args:
            scene_model: SceneModel with bones, meshes, and materials
            output_path: Output directory path (Path object or string)
            name: Base name for created files

        Returns:
            dict: Export results with format-specific keys
                  Should include at least:
                  - 'success': bool
                  - 'files': list of created file paths
                  - 'message': str status message
        """
        pass

    @abstractmethod
    def export_animation(self, animation: 'Animation', skeleton: 'SceneModel', output_path, name):
        """Export an animation against the skeleton it was read with

        Args:
            animation: Animation with per-frame part transforms
            skeleton: SceneModel whose bones the parts were matched to
            output_path: Output directory path
            name: Base name for created files

        Returns:
            dict: Export results, same keys as export()
        """
        pass

    @abstractmethod
    def get_format_name(self):
        """Return human-readable format name

        Returns:
            str: Format name (e.g., "USD")
        """
        pass

    @abstractmethod
    def get_file_extension(self):
        """Return primary file extension for this format

        Returns:
            str: File extension without dot (e.g., "usdc")
        """
        pass

    def validate_output_path(self, output_path):
        """Validate and create output directory if needed

        Args:
            output_path: Directory path to validate

        Returns:
            Path: Validated Path object

        Raises:
            ValueError: If path is invalid
        """
        path = Path(output_path)

        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValueError(f"Cannot create output directory {path}: {e}")

        if not path.is_dir():
            raise ValueError(f"Output path is not a directory: {path}")

        return path

    def get_export_summary(self, result):
        """Generate human-readable summary of export results

        Args:
            result: Export result dict from export() method

        Returns:
            str: Formatted summary text
        """
        lines = []
        status = "✓" if result.get('success') else "✗"
        lines.append(f"{status} {self.get_format_name()} Export")

        files = result.get('files', [])
        if files:
            lines.append(f"  Files created: {len(files)}")
            for file_path in files:
                lines.append(f"    - {Path(file_path).name}")

        if 'message' in result:
            lines.append(f"  {result['message']}")

        return "\n".join(lines)
