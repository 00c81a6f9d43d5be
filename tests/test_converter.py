"""
Tests for the conversion orchestrator and the command line entry point.
"""

from pathlib import Path

import pytest

import xconv
from exporters.base_exporter import BaseExporter
from xexport_converter import XExportConverter


class RecordingExporter(BaseExporter):
    """Exporter that records what it was asked to write."""

    def __init__(self):
        super().__init__()
        self.models = []
        self.animations = []

    def get_format_name(self):
        return "Recording"

    def get_file_extension(self):
        return "rec"

    def export(self, scene_model, output_path, name):
        self.models.append((scene_model, Path(output_path), name))
        return {'success': True, 'files': [], 'message': "recorded"}

    def export_animation(self, animation, skeleton, output_path, name):
        self.animations.append((animation, skeleton, Path(output_path), name))
        return {'success': True, 'files': [], 'message': "recorded"}


@pytest.fixture
def exporter():
    return RecordingExporter()


@pytest.fixture
def converter(exporter):
    return XExportConverter(exporter=exporter)


@pytest.fixture
def broken_file(tmp_path):
    path = tmp_path / "broken.xmodel_export"
    path.write_text("MODEL\nVERSION 6\nNUMBONES 1\n", encoding="utf-8")
    return path


class TestConvertModel:
    """Tests for single model conversion."""

    def test_exports_model(self, converter, exporter, model_file):
        result = converter.convert_model(model_file)

        assert result['success']
        model, output_path, name = exporter.models[0]
        assert model.bone_count == 2
        assert output_path == model_file.parent
        assert name == "sample"

    def test_output_dir(self, converter, exporter, model_file, tmp_path):
        converter.convert_model(model_file, tmp_path / "out")
        assert exporter.models[0][1] == tmp_path / "out"

    def test_failure_is_reported(self, converter, exporter, broken_file):
        result = converter.convert_model(broken_file)

        assert not result['success']
        assert "end of stream" in result['message']
        assert exporter.models == []


class TestConvertAnimation:
    """Tests for animation conversion against a model skeleton."""

    def test_exports_animation(self, converter, exporter, anim_file, model_file):
        result = converter.convert_animation(anim_file, model_file)

        assert result['success']
        animation, skeleton, _, name = exporter.animations[0]
        assert animation.frame_count == 2
        assert skeleton.bone_count == 2
        assert skeleton.meshes == []
        assert name == "sample"

    def test_without_skeleton(self, converter, exporter, anim_file):
        result = converter.convert_animation(anim_file)

        assert not result['success']
        assert "skeleton" in result['message']
        assert exporter.animations == []

    def test_skeleton_read_once(self, converter, anim_file, model_file):
        converter.convert_animation(anim_file, model_file)
        first = converter.load_skeleton(model_file)
        converter.convert_animation(anim_file, model_file)
        assert converter.load_skeleton(model_file) is first

    def test_bad_skeleton_file(self, converter, anim_file, broken_file):
        result = converter.convert_animation(anim_file, broken_file)
        assert not result['success']


class TestConvertBatch:
    """Tests for batches that continue past failures."""

    def test_failure_does_not_stop_batch(self, converter, exporter, model_file,
                                         broken_file, anim_file):
        results = converter.convert_batch(
            [broken_file, model_file, anim_file], skeleton_file=model_file
        )

        assert results['success']
        assert results['processed'] == 3
        assert results['converted'] == 2
        assert results['failed'] == ["broken.xmodel_export"]
        assert len(exporter.models) == 1
        assert len(exporter.animations) == 1

    def test_unsupported_files_ignored(self, converter, model_file, tmp_path):
        other = tmp_path / "notes.txt"
        other.write_text("MODEL", encoding="utf-8")

        results = converter.convert_batch([other, model_file])
        assert results['processed'] == 1
        assert str(other) not in results['results']

    def test_nothing_to_convert(self, converter):
        results = converter.convert_batch(["a.txt"])
        assert not results['success']
        assert results['message'] == "No valid files provided"

    def test_all_failed(self, converter, broken_file):
        results = converter.convert_batch([broken_file])
        assert not results['success']
        assert results['converted'] == 0

    def test_progress_messages(self, exporter, model_file):
        messages = []
        converter = XExportConverter(progress_callback=messages.append, exporter=exporter)
        converter.convert_batch([model_file])

        assert any("Processing: sample.xmodel_export" in m for m in messages)
        assert any("Converted 1 of 1" in m for m in messages)

    def test_export_summary_logged(self, exporter, model_file, broken_file):
        """Each successful export is reported with the exporter's summary."""
        messages = []
        converter = XExportConverter(progress_callback=messages.append, exporter=exporter)
        converter.convert_batch([broken_file, model_file])

        summaries = [m for m in messages if "Recording Export" in m]
        assert summaries == ["✓ Recording Export\n  recorded"]


class TestExportSummary:
    """Tests for the exporter's result summary."""

    def test_lists_created_files(self, exporter, tmp_path):
        result = {'success': True, 'files': [str(tmp_path / "walk.usdc")], 'message': "done"}
        summary = exporter.get_export_summary(result)
        assert summary.splitlines() == [
            "✓ Recording Export",
            "  Files created: 1",
            "    - walk.usdc",
            "  done",
        ]

    def test_failure(self, exporter):
        summary = exporter.get_export_summary({'success': False, 'message': "Export failed: x"})
        assert summary.splitlines()[0] == "✗ Recording Export"


class TestCommandLine:
    """Tests for the xconv entry point."""

    def test_no_supported_inputs(self, capsys):
        assert xconv.main(["readme.txt"]) == 1
        assert "No valid files" in capsys.readouterr().err

    def test_all_failed_exit_code(self, broken_file, monkeypatch, exporter):
        monkeypatch.setattr(
            xconv, "XExportConverter",
            lambda ascii=False: XExportConverter(exporter=exporter, ascii=ascii)
        )
        assert xconv.main([str(broken_file)]) == 1

    def test_success_exit_code(self, model_file, monkeypatch, exporter):
        monkeypatch.setattr(
            xconv, "XExportConverter",
            lambda ascii=False: XExportConverter(exporter=exporter, ascii=ascii)
        )
        assert xconv.main([str(model_file), "--format", "usda"]) == 0
        assert len(exporter.models) == 1

    def test_format_choices(self):
        args = xconv.build_parser().parse_args(["a.xmodel_export", "--format", "usda"])
        assert args.format == "usda"
        assert args.skeleton is None
