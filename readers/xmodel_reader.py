#!/usr/bin/env python3
"""
XModel Reader Module
Reads XMODEL_EXPORT token streams into a SceneModel.
"""

from core.geometry import read_geometry
from core.scene_data import SceneModel
from core.skeleton import read_skeleton
from core.tokens import TokenCursor, read_header

from .base_reader import BaseReader


class XModelReader(BaseReader):
    """Model reader: skeleton, then welded per-material meshes

    With skeleton_only=True the reader stops after the bones, which is all an
    animation conversion needs.
    """

    def __init__(self, file_path, progress_callback=None, skeleton_only=False):
        super().__init__(file_path, progress_callback)
        self.skeleton_only = skeleton_only

    def get_format_name(self):
        return "XMODEL_EXPORT"

    def read_from_cursor(self, cursor: TokenCursor) -> SceneModel:
        model = SceneModel()
        model.version = read_header(cursor, "MODEL")

        for bone in read_skeleton(cursor):
            model.add_bone(
                bone.name,
                bone.parent_index,
                bone.world_position,
                bone.world_rotation,
                bone.local_position,
                bone.local_rotation,
                bone.scale
            )
        self.log(f"  Bones: {model.bone_count}")

        if self.skeleton_only:
            return model

        meshes, materials = read_geometry(cursor, model.bone_count)
        for material in materials:
            model.add_material(material)
        for mesh in meshes:
            model.add_mesh(mesh)

        vertex_count = sum(len(m.vertices) for m in model.meshes)
        face_count = sum(len(m.faces) for m in model.meshes)
        self.log(f"  Materials: {len(model.materials)}")
        self.log(f"  Meshes: {len(model.meshes)} ({vertex_count} vertices, {face_count} faces)")

        return model
