"""
Text overlay items and their two-phase editing state.

An ``OverlayItem`` is a committed, immutable value. While the user drags,
pinches or twists an item, the live change is held separately as an
``OverlayGesture`` delta; ``OverlayEditState`` shows ``committed + delta``
until the gesture ends, then merges the delta into a new committed item.
Only committed items are ever baked into the image.

Example:
    >>> state = OverlayEditState()
    >>> item = state.add_item(OverlayItem(text="Hi", position=(120, 80)))
    >>> state.begin_gesture(item.item_id)
    >>> state.update_gesture(OverlayGesture(translation=(10, 0), scale_factor=1.5))
    >>> state.end_gesture()
"""

from dataclasses import dataclass, field, replace
import logging
from typing import List, Optional, Tuple
import uuid

from RT_Libs.constants import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_OVERLAY_COLOR,
    DEFAULT_OVERLAY_TEXT,
)
from RT_Libs.ImageEditingLib.image_models import RgbaColor

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

MIN_OVERLAY_SCALE = 0.01


def _new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class OverlayGesture:
    """Live gesture delta.

    Attributes:
        translation: Offset (dx, dy) in image pixels
        scale_factor: Multiplier applied to the committed scale
        rotation_delta: Degrees added to the committed rotation
    """
    translation: Point = (0.0, 0.0)
    scale_factor: float = 1.0
    rotation_delta: float = 0.0


@dataclass(frozen=True)
class OverlayItem:
    """A text overlay positioned in image pixel space.

    Attributes:
        text: Text to draw; empty text is not rendered
        font_name: Font family or file name
        font_size: Font size in points (before ``scale``)
        color: RGBA color tuple (0-255)
        position: Center of the text in image pixels
        scale: Uniform scale
        rotation: Degrees, clockwise on screen
        item_id: Stable identifier used by the edit state
    """
    text: str = DEFAULT_OVERLAY_TEXT
    font_name: str = DEFAULT_FONT_NAME
    font_size: float = DEFAULT_FONT_SIZE
    color: RgbaColor = DEFAULT_OVERLAY_COLOR
    position: Point = (0.0, 0.0)
    scale: float = 1.0
    rotation: float = 0.0
    item_id: str = field(default_factory=_new_item_id)

    def __post_init__(self):
        if len(self.color) != 4:
            raise ValueError(f"color must be an RGBA tuple, got {self.color}")
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive, got {self.font_size}")
        object.__setattr__(self, "position", (float(self.position[0]), float(self.position[1])))
        object.__setattr__(self, "scale", max(MIN_OVERLAY_SCALE, float(self.scale)))

    def applying(self, gesture: OverlayGesture) -> "OverlayItem":
        """Return this item with a gesture delta merged in."""
        dx, dy = gesture.translation
        return replace(
            self,
            position=(self.position[0] + dx, self.position[1] + dy),
            scale=self.scale * gesture.scale_factor,
            rotation=self.rotation + gesture.rotation_delta,
        )


class OverlayEditState:
    """Ordered overlay items plus at most one live gesture."""

    def __init__(self, items: Optional[List[OverlayItem]] = None):
        self._items: List[OverlayItem] = list(items or [])
        self._active_id: Optional[str] = None
        self._gesture: Optional[OverlayGesture] = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @property
    def committed_items(self) -> Tuple[OverlayItem, ...]:
        return tuple(self._items)

    @property
    def active_item_id(self) -> Optional[str]:
        return self._active_id

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.item_id == item_id:
                return index
        raise KeyError(f"No overlay item with id: {item_id}")

    def get_item(self, item_id: str) -> OverlayItem:
        return self._items[self._index_of(item_id)]

    def add_item(self, item: Optional[OverlayItem] = None) -> OverlayItem:
        """Append an item on top of the others."""
        item = item or OverlayItem()
        self._items.append(item)
        logger.debug(f"Added overlay item {item.item_id}")
        return item

    def update_item(self, item_id: str, **changes) -> OverlayItem:
        """Replace fields of a committed item (text, font, color, ...)."""
        index = self._index_of(item_id)
        updated = replace(self._items[index], **changes)
        self._items[index] = updated
        return updated

    def remove_item(self, item_id: str) -> OverlayItem:
        index = self._index_of(item_id)
        if self._active_id == item_id:
            self.cancel_gesture()
        return self._items.pop(index)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def begin_gesture(self, item_id: str) -> None:
        """
        Start a gesture on an item.

        Raises:
            KeyError: If the item does not exist
            RuntimeError: If another gesture is already live
        """
        self._index_of(item_id)
        if self._active_id is not None:
            raise RuntimeError(f"Gesture already in progress on item {self._active_id}")
        self._active_id = item_id
        self._gesture = OverlayGesture()

    def update_gesture(self, gesture: OverlayGesture) -> None:
        """Replace the live delta (deltas are relative to the committed item)."""
        if self._active_id is None:
            raise RuntimeError("No gesture in progress")
        self._gesture = gesture

    def end_gesture(self) -> Optional[OverlayItem]:
        """Merge the live delta into the committed item and return it."""
        if self._active_id is None:
            return None
        index = self._index_of(self._active_id)
        merged = self._items[index].applying(self._gesture or OverlayGesture())
        self._items[index] = merged
        self._active_id = None
        self._gesture = None
        return merged

    def cancel_gesture(self) -> None:
        """Drop the live delta, leaving the committed item unchanged."""
        self._active_id = None
        self._gesture = None

    def displayed_items(self) -> Tuple[OverlayItem, ...]:
        """Items as they should appear on screen, live delta included."""
        if self._active_id is None or self._gesture is None:
            return self.committed_items
        return tuple(
            item.applying(self._gesture) if item.item_id == self._active_id else item
            for item in self._items
        )
