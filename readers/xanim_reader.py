#!/usr/bin/env python3
"""
XAnim Reader Module
Reads XANIM_EXPORT token streams into an Animation keyed to a skeleton.
"""

from typing import Optional

from core.animation import read_animation
from core.errors import MissingDependency
from core.scene_data import Animation, SceneModel
from core.tokens import TokenCursor, read_header

from .base_reader import BaseReader


class XAnimReader(BaseReader):
    """Animation reader

    Needs the skeleton of a previously read model; parts are matched to its
    bones by case-insensitive name.
    """

    def __init__(self, file_path, skeleton: Optional[SceneModel], progress_callback=None):
        super().__init__(file_path, progress_callback)
        self.skeleton = skeleton

    def get_format_name(self):
        return "XANIM_EXPORT"

    def read_from_cursor(self, cursor: TokenCursor) -> Animation:
        # Checked before touching the stream so a missing skeleton fails fast
        if self.skeleton is None or self.skeleton.bone_count == 0:
            raise MissingDependency(
                f"{self.file_path.name}: animation requires a skeleton (use --skeleton)"
            )

        version = read_header(cursor, "ANIMATION")
        animation = read_animation(cursor, self.skeleton)
        animation.version = version

        self.log(f"  Parts: {animation.part_count} @ {animation.frame_rate} fps")
        self.log(f"  Frames: {animation.frame_count}")

        unmapped = animation.unmapped_parts()
        if unmapped:
            self.log(f"  Parts without a matching bone: {', '.join(unmapped)}")

        return animation
