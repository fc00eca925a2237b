"""Pointer-driven resize and drag sessions for a single entity.

A session belongs to one entity and is owned by the pointer that started it.
Events from any other pointer are ignored, so a second finger cannot take over
a gesture in progress. Sessions never write to the store: they only compute
provisional geometry that the commit pipeline later validates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from .boundary import BoundaryModel, RectBoundary, clamp_into_rect
from .config import EditorConfig
from .entities import Placeable
from .geometry import Point, Rect

logger = logging.getLogger(__name__)

TOP_LEFT = "top-left"
TOP_RIGHT = "top-right"
BOTTOM_LEFT = "bottom-left"
BOTTOM_RIGHT = "bottom-right"
RADIUS = "radius"

CORNER_HANDLES: Tuple[str, ...] = (TOP_LEFT, TOP_RIGHT, BOTTOM_LEFT, BOTTOM_RIGHT)
RADIUS_HANDLES: Tuple[str, ...] = (RADIUS,)

IDLE = "idle"
ACTIVE = "active"


def handles_for(shape: str) -> Tuple[str, ...]:
    """Legal resize handles: one radius handle for circles, four corners otherwise."""

    return RADIUS_HANDLES if shape == "round" else CORNER_HANDLES


class PointerCapture(Protocol):
    def capture(self, pointer_id: int) -> None: ...

    def release(self, pointer_id: int) -> None: ...


class NullPointerCapture:
    def capture(self, pointer_id: int) -> None:
        return None

    def release(self, pointer_id: int) -> None:
        return None


@dataclass(frozen=True)
class GeometrySnapshot:
    """Entity geometry frozen at the start of a gesture."""

    x: float
    y: float
    width: float
    height: float
    shape: str
    min_size: float
    locked: bool = False

    @classmethod
    def of(cls, entity: Placeable, config: Optional[EditorConfig] = None) -> "GeometrySnapshot":
        return cls(
            x=entity.x,
            y=entity.y,
            width=entity.width,
            height=entity.height,
            shape=entity.shape,
            min_size=entity.min_size(config),
            locked=entity.locked,
        )

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


class _PointerSession:
    def __init__(self, entity_id: str, capture: Optional[PointerCapture] = None):
        self.entity_id = entity_id
        self.capture = capture or NullPointerCapture()
        self.pointer_id: Optional[int] = None
        self.snapshot: Optional[GeometrySnapshot] = None

    @property
    def state(self) -> str:
        return ACTIVE if self.pointer_id is not None else IDLE

    @property
    def is_active(self) -> bool:
        return self.pointer_id is not None

    def owns(self, pointer_id: int) -> bool:
        return self.pointer_id is not None and self.pointer_id == pointer_id

    def _activate(self, pointer_id: int, snapshot: GeometrySnapshot) -> None:
        self.pointer_id = pointer_id
        self.snapshot = snapshot
        self.capture.capture(pointer_id)

    def _deactivate(self) -> None:
        pointer_id = self.pointer_id
        self.pointer_id = None
        self.snapshot = None
        if pointer_id is not None:
            self.capture.release(pointer_id)


class EntityResizeSession(_PointerSession):
    """``idle -> active(handle) -> idle`` resize state machine."""

    def __init__(
        self,
        entity_id: str,
        *,
        boundary: Optional[BoundaryModel] = None,
        capture: Optional[PointerCapture] = None,
    ):
        super().__init__(entity_id, capture)
        self.boundary = boundary
        self.handle: Optional[str] = None
        self.current: Optional[Rect] = None

    def begin(self, pointer_id: int, handle: str, snapshot: GeometrySnapshot) -> bool:
        if self.is_active:
            logger.debug("resize %s: pointer %s ignored, owned by %s", self.entity_id, pointer_id, self.pointer_id)
            return False
        if snapshot.locked:
            return False
        if handle not in handles_for(snapshot.shape):
            logger.debug("resize %s: handle %r not valid for %s shape", self.entity_id, handle, snapshot.shape)
            return False
        self._activate(pointer_id, snapshot)
        self.handle = handle
        self.current = snapshot.rect
        logger.debug("resize %s: begin pointer=%s handle=%s", self.entity_id, pointer_id, handle)
        return True

    def update(self, pointer_id: int, dx: float, dy: float) -> Optional[Rect]:
        """Apply the cumulative pointer delta since ``begin``."""

        if not self.owns(pointer_id) or self.snapshot is None:
            return None
        snap = self.snapshot
        if self.handle == RADIUS:
            rect = self._resize_round(snap, dy)
        else:
            rect = self._resize_corner(snap, self.handle or BOTTOM_RIGHT, dx, dy)
        self.current = self._clamp_live(snap, rect)
        return self.current

    def end(self, pointer_id: int) -> Optional[Rect]:
        """Finish the gesture and return the final provisional geometry."""

        if not self.owns(pointer_id):
            return None
        final = self.current
        logger.debug("resize %s: end pointer=%s -> %s", self.entity_id, pointer_id, final)
        self._reset()
        return final

    def cancel(self, pointer_id: int) -> bool:
        if not self.owns(pointer_id):
            return False
        logger.debug("resize %s: cancelled by pointer %s", self.entity_id, pointer_id)
        self._reset()
        return True

    def abort(self) -> None:
        if self.is_active:
            logger.debug("resize %s: aborted", self.entity_id)
        self._reset()

    def _reset(self) -> None:
        self._deactivate()
        self.handle = None
        self.current = None

    @staticmethod
    def _resize_corner(snap: GeometrySnapshot, handle: str, dx: float, dy: float) -> Rect:
        min_size = snap.min_size
        x, y = snap.x, snap.y
        if handle in (TOP_RIGHT, BOTTOM_RIGHT):
            width = max(min_size, snap.width + dx)
        else:
            width = max(min_size, snap.width - dx)
            x = snap.x + (snap.width - width)
        if handle in (BOTTOM_LEFT, BOTTOM_RIGHT):
            height = max(min_size, snap.height + dy)
        else:
            height = max(min_size, snap.height - dy)
            y = snap.y + (snap.height - height)
        return Rect(x, y, width, height)

    @staticmethod
    def _resize_round(snap: GeometrySnapshot, dy: float) -> Rect:
        center = snap.rect.center
        diameter = max(snap.min_size, 2 * (snap.width / 2 + dy))
        return Rect(center.x - diameter / 2, center.y - diameter / 2, diameter, diameter)

    def _clamp_live(self, snap: GeometrySnapshot, rect: Rect) -> Rect:
        constraint = self.boundary.constraint if self.boundary is not None else None
        if not isinstance(constraint, RectBoundary):
            return rect
        limits = constraint.rect
        if snap.shape == "round":
            diameter = min(rect.width, limits.width, limits.height)
            center = rect.center
            rect = Rect(center.x - diameter / 2, center.y - diameter / 2, diameter, diameter)
        else:
            rect = Rect(rect.x, rect.y, min(rect.width, limits.width), min(rect.height, limits.height))
        pos = clamp_into_rect(limits, (rect.x, rect.y), (rect.width, rect.height))
        return Rect(pos.x, pos.y, rect.width, rect.height)


class DragSession(_PointerSession):
    """Moves an entity provisionally; the commit pipeline decides where it lands."""

    def __init__(self, entity_id: str, *, capture: Optional[PointerCapture] = None):
        super().__init__(entity_id, capture)
        self.current: Optional[Point] = None

    @property
    def origin(self) -> Optional[Point]:
        return Point(self.snapshot.x, self.snapshot.y) if self.snapshot is not None else None

    def begin(self, pointer_id: int, snapshot: GeometrySnapshot) -> bool:
        if self.is_active or snapshot.locked:
            return False
        self._activate(pointer_id, snapshot)
        self.current = Point(snapshot.x, snapshot.y)
        logger.debug("drag %s: begin pointer=%s at %s", self.entity_id, pointer_id, self.current)
        return True

    def update(self, pointer_id: int, dx: float, dy: float) -> Optional[Point]:
        if not self.owns(pointer_id) or self.snapshot is None:
            return None
        self.current = Point(self.snapshot.x + dx, self.snapshot.y + dy)
        return self.current

    def end(self, pointer_id: int) -> Optional[Point]:
        if not self.owns(pointer_id):
            return None
        proposed = self.current
        self._reset()
        return proposed

    def cancel(self, pointer_id: int) -> bool:
        if not self.owns(pointer_id):
            return False
        self._reset()
        return True

    def abort(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._deactivate()
        self.current = None