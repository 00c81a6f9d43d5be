"""
Tests for the USD exporter.

Pose conversion runs without USD; stage writing needs the pxr package and is
skipped when it is not installed.
"""

import pytest

from core.scene_data import Animation, SceneModel
from exporters.usd_exporter import pose_to_local
from readers import XAnimReader, XModelReader

S = 0.5 ** 0.5


def make_animation(part_bones, parts):
    animation = Animation(part_names=[f"part{i}" for i in range(len(part_bones))],
                          part_bones=list(part_bones))
    frame = animation.add_frame(0)
    for offset, rotation in parts:
        animation.append_part(frame, offset, rotation)
    return animation


class TestPoseToLocal:
    """Tests for converting world-space part poses to joint-local poses."""

    def test_unanimated_bones_keep_bind_pose(self, skeleton):
        animation = make_animation([None], [((9.0, 9.0, 9.0), (0.0, 0.0, 0.0, 1.0))])
        pose = pose_to_local(skeleton.bones, animation, animation.frames[0])

        for bone, (position, rotation) in zip(skeleton.bones, pose):
            assert position == pytest.approx(bone.local_position)
            assert rotation == pytest.approx(bone.local_rotation)

    def test_child_relative_to_animated_parent(self, skeleton):
        """Moving the root carries the unanimated child with it."""
        animation = make_animation([0], [((0.0, 0.0, 5.0), (0.0, 0.0, 0.0, 1.0))])
        root, child = pose_to_local(skeleton.bones, animation, animation.frames[0])

        assert root[0] == pytest.approx((0.0, 0.0, 5.0))
        assert child[0] == pytest.approx((25.4, 0.0, -5.0))

    def test_animated_child(self, skeleton):
        animation = make_animation(
            [0, 1],
            [((0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0)),
             ((0.0, 10.0, 0.0), (0.0, 0.0, S, S))]
        )
        _, child = pose_to_local(skeleton.bones, animation, animation.frames[0])

        assert child[0] == pytest.approx((0.0, 10.0, 0.0))
        assert child[1] == pytest.approx((0.0, 0.0, S, S))


@pytest.fixture
def usd():
    return pytest.importorskip("pxr")


@pytest.fixture
def usd_exporter(usd):
    from exporters.usd_exporter import USDExporter
    return USDExporter(ascii=True)


class TestUSDExport:
    """Tests for writing models and animations to USD stages."""

    def test_model_stage(self, usd, usd_exporter, model_file, tmp_path):
        from pxr import Usd, UsdGeom, UsdSkel

        model = XModelReader(model_file).read()
        result = usd_exporter.export(model, tmp_path / "out", "sample")

        assert result['success'], result['message']
        assert result['usd_file'].endswith("sample.usda")
        assert result['mesh_count'] == 1

        stage = Usd.Stage.Open(result['usd_file'])
        skeleton = UsdSkel.Skeleton(stage.GetPrimAtPath("/Root/Skeleton"))
        assert list(skeleton.GetJointsAttr().Get()) == ["tag_origin", "tag_origin/j_spine"]

        mesh = UsdGeom.Mesh(stage.GetPrimAtPath("/Root/mtl_body"))
        assert len(mesh.GetPointsAttr().Get()) == 3
        assert list(mesh.GetFaceVertexIndicesAttr().Get()) == [2, 1, 0]
        assert UsdGeom.GetStageUpAxis(stage) == UsdGeom.Tokens.z

    def test_empty_mesh_skipped(self, usd, usd_exporter, tmp_path):
        from core.scene_data import Material, Mesh

        model = SceneModel()
        model.add_bone("root", -1, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0),
                       (0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0))
        model.add_material(Material(name="unused"))
        model.add_mesh(Mesh(material_index=0))

        result = usd_exporter.export(model, tmp_path, "empty")
        assert result['success']
        assert result['mesh_count'] == 0

    def test_animation_stage(self, usd, usd_exporter, model_file, anim_file, tmp_path):
        from pxr import Usd, UsdSkel

        skeleton = XModelReader(model_file, skeleton_only=True).read()
        animation = XAnimReader(anim_file, skeleton).read()
        result = usd_exporter.export_animation(animation, skeleton, tmp_path, "walk")

        assert result['success'], result['message']
        assert result['frame_count'] == 2

        stage = Usd.Stage.Open(result['usd_file'])
        assert stage.GetStartTimeCode() == 0
        assert stage.GetEndTimeCode() == 1
        assert stage.GetTimeCodesPerSecond() == 30

        skel_anim = UsdSkel.Animation(stage.GetPrimAtPath("/Root/Skeleton/Animation"))
        translations = skel_anim.GetTranslationsAttr()
        assert translations.GetTimeSamples() == [0.0, 1.0]
        assert len(translations.Get(1.0)) == 2

    def test_binary_extension(self, usd):
        from exporters.usd_exporter import USDExporter
        assert USDExporter().get_file_extension() == "usdc"
