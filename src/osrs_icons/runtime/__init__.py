"""Helpers for consuming generated cursor values."""

from osrs_icons.runtime.data_url import to_data_url
from osrs_icons.runtime.flip import CursorFlipper, mirror_png_data_url
from osrs_icons.runtime.packs import PACK_DEFINITIONS, PackDefinition, PackInfo, load_packs
from osrs_icons.runtime.styles import (
    CURSOR_STATES,
    ElementTarget,
    StyleDocument,
    animate_cursor,
    apply_cursors,
)

__all__ = [
    "animate_cursor",
    "apply_cursors",
    "CURSOR_STATES",
    "CursorFlipper",
    "ElementTarget",
    "load_packs",
    "mirror_png_data_url",
    "PACK_DEFINITIONS",
    "PackDefinition",
    "PackInfo",
    "StyleDocument",
    "to_data_url",
]
