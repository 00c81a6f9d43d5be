#!/usr/bin/env python3
"""
Export Converter - Main Orchestrator Module
Coordinates reading XMODEL_EXPORT / XANIM_EXPORT files and exporting them

Each file is converted on its own: a file that fails to parse is reported
and skipped, and never affects the other files of a batch.
"""

import time
from pathlib import Path

from core.errors import ReconstructionError
from readers import XAnimReader, XModelReader, get_file_type, is_supported_format


class XExportConverter:
    """Export file converter (orchestrator/facade)

    This class coordinates the conversion process:
    1. Read the skeleton ONCE when animations are converted
    2. Read each model/animation file into scene data
    3. Hand the scene data to the exporter

    Input formats supported:
    - XMODEL_EXPORT (.xmodel_export)
    - XANIM_EXPORT (.xanim_export), with a skeleton from a model file
    """

    def __init__(self, progress_callback=None, exporter=None, ascii=False):
        """Initialize converter

        Args:
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
            exporter: BaseExporter to write results with (default: USDExporter)
            ascii: Write .usda instead of .usdc when using the default exporter
        """
        self.progress_callback = progress_callback
        self.ascii = ascii
        self._exporter = exporter
        self._skeletons = {}

    def log(self, message):
        """Send progress updates to callback"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    @property
    def exporter(self):
        # Lazy so reading works without USD installed
        if self._exporter is None:
            from exporters.usd_exporter import USDExporter
            self._exporter = USDExporter(self.progress_callback, ascii=self.ascii)
        return self._exporter

    def read_model(self, input_file, skeleton_only=False):
        """Read a model file into a SceneModel

        Raises:
            ReconstructionError: If the file does not fit the grammar
            OSError: If the file cannot be read
        """
        reader = XModelReader(input_file, self.progress_callback, skeleton_only=skeleton_only)
        return reader.read()

    def load_skeleton(self, skeleton_file):
        """Read (once) the skeleton of a model file for animation conversion"""
        key = str(Path(skeleton_file).resolve())
        if key not in self._skeletons:
            self.log(f"Loading skeleton: {Path(skeleton_file).name}")
            self._skeletons[key] = self.read_model(skeleton_file, skeleton_only=True)
        return self._skeletons[key]

    def read_animation(self, input_file, skeleton):
        """Read an animation file against a skeleton

        Raises:
            MissingDependency: If skeleton is None or has no bones
        """
        reader = XAnimReader(input_file, skeleton, self.progress_callback)
        return reader.read()

    def convert_model(self, input_file, output_dir=None):
        """Convert one model file

        Args:
            input_file: Path to .xmodel_export file
            output_dir: Output directory (default: beside the input)

        Returns:
            dict: Results with keys 'success', 'message', 'files',
                  plus the exporter's keys on success
        """
        input_path = Path(input_file)
        try:
            scene_model = self.read_model(input_path)
        except (ReconstructionError, OSError) as e:
            self.log(f"✗ {input_path.name}: {e}")
            return {'success': False, 'message': str(e), 'files': []}

        target = Path(output_dir) if output_dir else input_path.parent
        return self.exporter.export(scene_model, target, input_path.stem)

    def convert_animation(self, input_file, skeleton_file=None, output_dir=None):
        """Convert one animation file

        Args:
            input_file: Path to .xanim_export file
            skeleton_file: Model file providing the skeleton
            output_dir: Output directory (default: beside the input)

        Returns:
            dict: Results with keys 'success', 'message', 'files'
        """
        input_path = Path(input_file)
        try:
            skeleton = self.load_skeleton(skeleton_file) if skeleton_file else None
            animation = self.read_animation(input_path, skeleton)
        except (ReconstructionError, OSError) as e:
            self.log(f"✗ {input_path.name}: {e}")
            return {'success': False, 'message': str(e), 'files': []}

        target = Path(output_dir) if output_dir else input_path.parent
        return self.exporter.export_animation(animation, skeleton, target, input_path.stem)

    def convert_batch(self, input_files, output_dir=None, skeleton_file=None):
        """Convert every supported file, continuing past failures

        Args:
            input_files: Paths to convert; unsupported extensions are skipped
            output_dir: Output directory (default: beside each input)
            skeleton_file: Model file providing the skeleton for animations

        Returns:
            dict: Results with keys:
                - 'success': True if at least one file converted
                - 'processed': Number of supported files attempted
                - 'converted': Number of files converted
                - 'failed': Names of files that failed
                - 'results': Per-file result dicts keyed by path
                - 'message': Summary message
        """
        results = {}
        failed = []

        self.log(f"{'='*60}")
        self.log("XConverter - XMODEL/XANIM to USD")
        self.log(f"{'='*60}")

        for input_file in input_files:
            if not is_supported_format(input_file):
                continue

            name = Path(input_file).name
            self.log(f"Processing: {name}...")
            start = time.perf_counter()

            if get_file_type(input_file) == 'model':
                result = self.convert_model(input_file, output_dir)
            else:
                result = self.convert_animation(input_file, skeleton_file, output_dir)

            results[str(input_file)] = result
            if result.get('success'):
                self.log(self.exporter.get_export_summary(result))
                self.log(f"Processed: {name} in {time.perf_counter() - start:.3f} seconds.")
            else:
                failed.append(name)

        converted = len(results) - len(failed)
        if not results:
            message = "No valid files provided"
        else:
            message = f"Converted {converted} of {len(results)} file(s)"

        self.log(f"\n{message}")
        if failed:
            self.log(f"Failed: {', '.join(failed)}")
        self.log(f"{'='*60}")

        return {
            'success': converted > 0,
            'processed': len(results),
            'converted': converted,
            'failed': failed,
            'results': results,
            'message': message
        }
