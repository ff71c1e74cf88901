"""
OverlayLib - Text overlays

Overlay items, their gesture editing state and the compositor that bakes
them into a raster.
"""

from RT_Libs.OverlayLib.overlay_items import OverlayEditState, OverlayGesture, OverlayItem
from RT_Libs.OverlayLib.overlay_compositor import bake_overlays, resolve_font

__all__ = [
    "OverlayEditState",
    "OverlayGesture",
    "OverlayItem",
    "bake_overlays",
    "resolve_font",
]
