"""Payload members exchanged between steps."""

from .members import (
    FloatsPayload,
    Grid,
    Member,
    MemberKind,
    byte_map_member,
    color_map_member,
    floats_member,
    grid_member,
    image_size,
    line_collection_member,
)

__all__ = [
    "FloatsPayload",
    "Grid",
    "Member",
    "MemberKind",
    "byte_map_member",
    "color_map_member",
    "floats_member",
    "grid_member",
    "image_size",
    "line_collection_member",
]
