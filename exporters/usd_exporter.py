#!/usr/bin/env python3
"""
USD Exporter Module
Exports a SceneModel as a UsdSkel skinned mesh and an Animation as a
UsdSkel animation (.usdc binary or .usda text)
"""

from typing import List, Tuple

from .base_exporter import BaseExporter
from core.scene_data import Animation, AnimationFrame, Bone, Mesh, SceneModel
from core.transforms import decompose_local


def pose_to_local(bones: List[Bone], animation: Animation,
                  frame: AnimationFrame) -> List[Tuple[tuple, tuple]]:
    """Joint-space (position, rotation) of every bone at one frame

    Parts carry world-space transforms. Bones no part drives keep their bind
    pose; every bone is then expressed relative to its parent's world pose.
    """
    world = [(bone.world_position, bone.world_rotation) for bone in bones]
    for slot, bone_index in enumerate(animation.part_bones):
        if bone_index is not None:
            part = frame.parts[slot]
            world[bone_index] = (part.offset, part.rotation)

    local = []
    for i, bone in enumerate(bones):
        position, rotation = world[i]
        if bone.is_root:
            local.append((position, rotation))
        else:
            parent_position, parent_rotation = world[bone.parent_index]
            local.append(decompose_local(position, rotation, parent_position, parent_rotation))
    return local


class USDExporter(BaseExporter):
    """USD exporter for skinned models and skeletal animation

    Writes:
    - UsdSkel.Root at /Root with a UsdSkel.Skeleton (bind = world, rest = local)
    - One UsdGeom.Mesh per non-empty mesh with normals, UVs, vertex colors,
      and joint indices/weights
    - UsdSkel.Animation with one time sample per frame for animations

    Positions are in centimeters and the stage is Z-up, matching the source.
    """

    def __init__(self, progress_callback=None, ascii=False):
        super().__init__(progress_callback)
        self.ascii = ascii

        # Lazy import USD - only import when actually creating exporter instance
        try:
            from pxr import Usd, UsdGeom, UsdSkel, Gf, Vt, Sdf
            self.Usd = Usd
            self.UsdGeom = UsdGeom
            self.UsdSkel = UsdSkel
            self.Gf = Gf
            self.Vt = Vt
            self.Sdf = Sdf
        except ImportError as e:
            raise ImportError(
                f"USD Python library (pxr) not found: {e}\n"
                "Install with: pip install usd-core"
            )

    def get_format_name(self):
        return "USD"

    def get_file_extension(self):
        return "usda" if self.ascii else "usdc"

    def export(self, scene_model: SceneModel, output_path, name):
        """Export a model to USD

        Args:
            scene_model: Reconstructed model
            output_path: Output directory path
            name: Base file name

        Returns:
            dict: Export results with keys:
                - 'success': bool
                - 'usd_file': Path to created USD file
                - 'mesh_count': Number of meshes written
                - 'message': Status message
                - 'files': Created files
        """
        try:
            output_dir = self.validate_output_path(output_path)
            usd_file = output_dir / f"{name}.{self.get_file_extension()}"

            self.log(f"Creating USD stage: {usd_file}")
            stage = self._create_stage(usd_file)
            skeleton = self._define_skeleton(stage, scene_model.bones)

            mesh_count = 0
            used_names = {"Skeleton"}
            for mesh in scene_model.meshes:
                material_name = scene_model.materials[mesh.material_index].name
                if not mesh.faces:
                    self.log(f"Skipping mesh without faces: {material_name}")
                    continue

                prim_name = self._unique_name(self._sanitize_name(material_name), used_names)
                usd_path = f"/Root/{prim_name}"
                self.log(f"Exporting mesh: {material_name} -> {usd_path} "
                         f"({len(mesh.vertices)} vertices, {len(mesh.faces)} faces)")
                self._export_mesh(stage, usd_path, mesh, material_name, skeleton)
                mesh_count += 1

            stage.Save()
            self.log(f"\n✓ USD file saved: {usd_file}")

            return {
                'success': True,
                'usd_file': str(usd_file),
                'mesh_count': mesh_count,
                'message': f"Exported {len(scene_model.bones)} bones, {mesh_count} meshes",
                'files': [str(usd_file)]
            }

        except Exception as e:
            self.log(f"ERROR: {str(e)}")
            import traceback
            self.log(traceback.format_exc())
            return {
                'success': False,
                'message': f"Export failed: {str(e)}",
                'files': []
            }

    def export_animation(self, animation: Animation, skeleton: SceneModel, output_path, name):
        """Export an animation to USD

        The skeleton is written alongside so the file can be previewed on its
        own; only frames are time-sampled.

        Returns:
            dict: Export results with keys 'success', 'usd_file',
                  'frame_count', 'message', 'files'
        """
        try:
            output_dir = self.validate_output_path(output_path)
            usd_file = output_dir / f"{name}.{self.get_file_extension()}"

            self.log(f"Creating USD stage: {usd_file}")
            stage = self._create_stage(usd_file)
            usd_skeleton = self._define_skeleton(stage, skeleton.bones)

            if animation.frames:
                first = animation.frames[0].frame
                last = animation.frames[-1].frame
                stage.SetStartTimeCode(first)
                stage.SetEndTimeCode(last)
            stage.SetTimeCodesPerSecond(animation.frame_rate)
            stage.SetFramesPerSecond(animation.frame_rate)
            self.log(f"Stage setup: {animation.frame_count} frames @ {animation.frame_rate} fps")

            self._export_skel_animation(stage, usd_skeleton, animation, skeleton)

            stage.Save()
            self.log(f"\n✓ USD file saved: {usd_file}")

            return {
                'success': True,
                'usd_file': str(usd_file),
                'frame_count': animation.frame_count,
                'message': f"Exported {animation.frame_count} frames for {animation.part_count} parts",
                'files': [str(usd_file)]
            }

        except Exception as e:
            self.log(f"ERROR: {str(e)}")
            import traceback
            self.log(traceback.format_exc())
            return {
                'success': False,
                'message': f"Export failed: {str(e)}",
                'files': []
            }

    def _create_stage(self, usd_file):
        stage = self.Usd.Stage.CreateNew(str(usd_file))
        self.UsdGeom.SetStageUpAxis(stage, self.UsdGeom.Tokens.z)
        self.UsdGeom.SetStageMetersPerUnit(stage, self.UsdGeom.LinearUnits.centimeters)

        root = self.UsdSkel.Root.Define(stage, "/Root")
        stage.SetDefaultPrim(root.GetPrim())
        return stage

    def _make_matrix(self, position, rotation, scale=(1.0, 1.0, 1.0)):
        """Build a Gf.Matrix4d from position, (x, y, z, w) rotation, and scale"""
        x, y, z, w = rotation
        rotate = self.Gf.Matrix4d(1.0)
        rotate.SetRotateOnly(self.Gf.Quatd(w, x, y, z))
        rotate.SetTranslateOnly(self.Gf.Vec3d(*position))

        scaling = self.Gf.Matrix4d(1.0)
        scaling.SetScale(self.Gf.Vec3d(*scale))

        # Row-vector convention: scale first, then rotate and translate
        return scaling * rotate

    def _define_skeleton(self, stage, bones: List[Bone]):
        skeleton = self.UsdSkel.Skeleton.Define(stage, "/Root/Skeleton")
        skeleton.CreateJointsAttr(self.Vt.TokenArray(self._joint_paths(bones)))
        skeleton.CreateBindTransformsAttr(self.Vt.Matrix4dArray([
            self._make_matrix(bone.world_position, bone.world_rotation) for bone in bones
        ]))
        skeleton.CreateRestTransformsAttr(self.Vt.Matrix4dArray([
            self._make_matrix(bone.local_position, bone.local_rotation, bone.scale) for bone in bones
        ]))
        self.log(f"Exporting skeleton: {len(bones)} joints")
        return skeleton

    def _export_mesh(self, stage, usd_path, mesh: Mesh, material_name, skeleton):
        """Write one mesh with its skin binding"""
        Gf, Vt = self.Gf, self.Vt
        usd_mesh = self.UsdGeom.Mesh.Define(stage, usd_path)

        usd_mesh.GetPointsAttr().Set(Vt.Vec3fArray([Gf.Vec3f(*v.position) for v in mesh.vertices]))
        usd_mesh.GetFaceVertexCountsAttr().Set(Vt.IntArray([3] * len(mesh.faces)))
        usd_mesh.GetFaceVertexIndicesAttr().Set(
            Vt.IntArray([i for face in mesh.faces for i in face.indices])
        )
        usd_mesh.GetNormalsAttr().Set(Vt.Vec3fArray([Gf.Vec3f(*v.normal) for v in mesh.vertices]))
        usd_mesh.SetNormalsInterpolation(self.UsdGeom.Tokens.vertex)
        usd_mesh.GetPrim().SetCustomDataByKey("material", material_name)

        primvars = self.UsdGeom.PrimvarsAPI(usd_mesh)
        st = primvars.CreatePrimvar("st", self.Sdf.ValueTypeNames.TexCoord2fArray,
                                    self.UsdGeom.Tokens.vertex)
        st.Set(Vt.Vec2fArray([Gf.Vec2f(*v.uv) for v in mesh.vertices]))

        usd_mesh.CreateDisplayColorPrimvar(self.UsdGeom.Tokens.vertex).Set(Vt.Vec3fArray([
            Gf.Vec3f(v.color[0] / 255.0, v.color[1] / 255.0, v.color[2] / 255.0)
            for v in mesh.vertices
        ]))
        usd_mesh.CreateDisplayOpacityPrimvar(self.UsdGeom.Tokens.vertex).Set(
            Vt.FloatArray([v.color[3] / 255.0 for v in mesh.vertices])
        )

        # Pad every vertex to the same influence count
        influences = max((len(v.weights) for v in mesh.vertices), default=0) or 1
        joint_indices = []
        joint_weights = []
        for vertex in mesh.vertices:
            for slot in range(influences):
                if slot < len(vertex.weights):
                    joint_indices.append(vertex.weights[slot].bone_index)
                    joint_weights.append(vertex.weights[slot].weight)
                else:
                    joint_indices.append(0)
                    joint_weights.append(0.0)

        binding = self.UsdSkel.BindingAPI.Apply(usd_mesh.GetPrim())
        binding.CreateSkeletonRel().SetTargets([skeleton.GetPath()])
        binding.CreateJointIndicesPrimvar(False, influences).Set(Vt.IntArray(joint_indices))
        binding.CreateJointWeightsPrimvar(False, influences).Set(Vt.FloatArray(joint_weights))
        binding.CreateGeomBindTransformAttr(Gf.Matrix4d(1.0))

    def _export_skel_animation(self, stage, usd_skeleton, animation: Animation, skeleton: SceneModel):
        """Write a UsdSkel.Animation driving every joint, one sample per frame"""
        Gf, Vt = self.Gf, self.Vt
        bones = skeleton.bones
        skel_anim = self.UsdSkel.Animation.Define(stage, "/Root/Skeleton/Animation")
        skel_anim.CreateJointsAttr(Vt.TokenArray(self._joint_paths(bones)))

        translations = skel_anim.CreateTranslationsAttr()
        rotations = skel_anim.CreateRotationsAttr()
        skel_anim.CreateScalesAttr().Set(Vt.Vec3hArray([Gf.Vec3h(*bone.scale) for bone in bones]))

        for frame in animation.frames:
            pose = pose_to_local(bones, animation, frame)
            time = float(frame.frame)
            translations.Set(Vt.Vec3fArray([Gf.Vec3f(*p) for p, _ in pose]), time)
            rotations.Set(Vt.QuatfArray([Gf.Quatf(r[3], r[0], r[1], r[2]) for _, r in pose]), time)

        binding = self.UsdSkel.BindingAPI.Apply(usd_skeleton.GetPrim())
        binding.CreateAnimationSourceRel().SetTargets([skel_anim.GetPath()])

    def _joint_paths(self, bones: List[Bone]) -> List[str]:
        """UsdSkel joint paths ("root/spine/neck"), unique per bone"""
        paths = []
        used = set()
        for bone in bones:
            name = self._sanitize_name(bone.name)
            prefix = paths[bone.parent_index] + "/" if not bone.is_root else ""
            path = self._unique_name(prefix + name, used)
            paths.append(path)
        return paths

    def _unique_name(self, name, used):
        candidate = name
        suffix = 1
        while candidate in used:
            candidate = f"{name}_{suffix}"
            suffix += 1
        used.add(candidate)
        return candidate

    def _sanitize_name(self, name):
        """Sanitize name for USD prim paths and joint tokens

        Args:
            name: Original name

        Returns:
            str: Sanitized name safe for USD paths
        """
        sanitized = name.replace(' ', '_').replace('-', '_')
        sanitized = ''.join(c for c in sanitized if c.isalnum() or c == '_')
        if sanitized and sanitized[0].isdigit():
            sanitized = '_' + sanitized
        return sanitized or 'unnamed'
