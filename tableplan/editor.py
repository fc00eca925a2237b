"""Renderer-agnostic editing facade.

The host forwards raw pointer events in screen coordinates and re-reads the
store (or :meth:`LayoutEditor.live_geometry` during a gesture) to render.
Every mutating entry point checks the edit mode first and returns ``False`` or
``None`` instead of raising when the call is not allowed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .boundary import BoundaryConstraint, BoundaryModel
from .commit import CommitResult, LastValidPositionCache, PlacementCommitPipeline
from .config import EditorConfig, get_editor_config
from .entities import SHAPES, CanvasObject, Table, calculate_table_size, object_preset_size
from .geometry import Point, PointLike, Rect, as_point, round_half_up
from .selection import Selection, SelectionCoordinator
from .sessions import DragSession, EntityResizeSession, GeometrySnapshot, PointerCapture, handles_for
from .store import Entity, EntityStore

logger = logging.getLogger(__name__)

ScreenToCanvas = Callable[[PointLike], Point]


@dataclass(frozen=True)
class Capabilities:
    can_drag: bool
    can_resize: bool
    handles: Tuple[str, ...]


NO_CAPABILITIES = Capabilities(False, False, ())


class LayoutEditor:
    def __init__(
        self,
        store: Optional[EntityStore] = None,
        boundary: Optional[Union[BoundaryModel, BoundaryConstraint]] = None,
        *,
        mode: str = "edit",
        transform: Optional[ScreenToCanvas] = None,
        capture: Optional[PointerCapture] = None,
        config: Optional[EditorConfig] = None,
    ):
        self.config = config or get_editor_config()
        self.store = store if store is not None else EntityStore()
        if isinstance(boundary, BoundaryModel):
            self.boundary = boundary
        else:
            self.boundary = BoundaryModel(boundary, config=self.config)
        self.selection = SelectionCoordinator(mode)
        self.cache = LastValidPositionCache()
        self.pipeline = PlacementCommitPipeline(self.store, self.boundary, self.cache, self.config)
        self.transform: ScreenToCanvas = transform or as_point
        self.capture = capture

        self._resize_sessions: Dict[str, EntityResizeSession] = {}
        self._drag_sessions: Dict[str, DragSession] = {}
        self._gesture_origins: Dict[str, Point] = {}

        self.boundary.subscribe(self._on_boundary_change)
        self.selection.on_selection_change(self._on_selection_change)
        self.selection.on_mode_change(self._on_mode_change)
        if self.boundary.is_polygonal:
            self.pipeline.seed(self.store.placeables())

    # -- state queries -----------------------------------------------------

    @property
    def mode(self) -> str:
        return self.selection.mode

    @property
    def is_editing(self) -> bool:
        return self.selection.is_editing

    @property
    def selected(self) -> Optional[Selection]:
        return self.selection.selection

    def to_canvas(self, screen_point: PointLike) -> Point:
        return self.transform(screen_point)

    def capabilities(self, entity_id: str) -> Capabilities:
        """What the host may offer for ``entity_id`` right now."""

        entity = self.store.find(entity_id)
        if entity is None:
            return NO_CAPABILITIES
        can_drag = self.is_editing and not entity.locked and not self.boundary.is_authoring
        can_resize = (
            can_drag
            and self.selection.is_selected(entity_id)
            and self.selection.is_resize_armed(entity_id)
        )
        handles = handles_for(entity.shape) if can_resize else ()
        return Capabilities(can_drag=can_drag, can_resize=can_resize, handles=handles)

    def live_geometry(self, entity_id: str) -> Optional[Rect]:
        """Provisional geometry during a gesture, committed geometry otherwise."""

        entity = self.store.find(entity_id)
        if entity is None:
            return None
        resize = self._resize_sessions.get(entity_id)
        if resize is not None and resize.is_active and resize.current is not None:
            return resize.current
        drag = self._drag_sessions.get(entity_id)
        if drag is not None and drag.is_active and drag.current is not None:
            return Rect(drag.current.x, drag.current.y, entity.width, entity.height)
        return entity.rect

    def is_gesture_active(self, entity_id: str) -> bool:
        resize = self._resize_sessions.get(entity_id)
        drag = self._drag_sessions.get(entity_id)
        return bool((resize and resize.is_active) or (drag and drag.is_active))

    # -- selection and mode ------------------------------------------------

    def click_table(self, table_id: str) -> bool:
        return self._click_entity("table", table_id)

    def click_object(self, object_id: str) -> bool:
        return self._click_entity("object", object_id)

    def _click_entity(self, kind: str, entity_id: str) -> bool:
        entity = self.store.find(entity_id)
        if entity is None or entity.kind != kind or self.boundary.is_authoring:
            return False
        self.selection.toggle(kind, entity_id)
        return True

    def click_canvas(self, screen_point: PointLike) -> bool:
        """Click on empty canvas: feeds boundary authoring or clears selection.

        Returns ``True`` when the click committed a new boundary.
        """

        point = self.to_canvas(screen_point)
        authoring = self.boundary.authoring if self.is_editing else None
        if authoring == "rect":
            self.selection.clear()
            return self.boundary.click(point)
        if authoring == "poly":
            return self.boundary.click(point)
        self.selection.clear()
        return False

    def pointer_move(self, screen_point: PointLike) -> None:
        if self.is_editing and self.boundary.is_authoring:
            self.boundary.move(self.to_canvas(screen_point))

    def set_mode(self, mode: str) -> None:
        self.selection.set_mode(mode)

    def toggle_resize_mode(self) -> bool:
        sel = self.selection.selection
        entity = self.store.find(sel.id) if sel is not None else None
        if entity is None:
            return False
        armed = self.selection.toggle_resize_armed(locked=entity.locked)
        if not armed:
            self._abort_sessions(entity.id, drags=False)
        return armed

    # -- resize ------------------------------------------------------------

    def begin_resize(self, entity_id: str, pointer_id: int, handle: str, screen_point: PointLike) -> bool:
        entity = self.store.find(entity_id)
        if entity is None or not self.capabilities(entity_id).can_resize:
            return False
        drag = self._drag_sessions.get(entity_id)
        if drag is not None and drag.is_active:
            return False
        session = self._resize_sessions.get(entity_id)
        if session is None:
            session = EntityResizeSession(entity_id, boundary=self.boundary, capture=self.capture)
            self._resize_sessions[entity_id] = session
        if not session.begin(pointer_id, handle, GeometrySnapshot.of(entity, self.config)):
            return False
        self._gesture_origins[entity_id] = self.to_canvas(screen_point)
        return True

    def resize_move(self, entity_id: str, pointer_id: int, screen_point: PointLike) -> Optional[Rect]:
        session = self._resize_sessions.get(entity_id)
        if session is None or not session.owns(pointer_id):
            return None
        dx, dy = self._delta(entity_id, screen_point)
        return session.update(pointer_id, dx, dy)

    def end_resize(self, entity_id: str, pointer_id: int) -> Optional[CommitResult]:
        session = self._resize_sessions.get(entity_id)
        if session is None:
            return None
        final = session.end(pointer_id)
        if final is None:
            return None
        self._gesture_origins.pop(entity_id, None)
        return self.pipeline.commit_resize(entity_id, final)

    def cancel_resize(self, entity_id: str, pointer_id: int) -> bool:
        session = self._resize_sessions.get(entity_id)
        if session is None or not session.cancel(pointer_id):
            return False
        self._gesture_origins.pop(entity_id, None)
        return True

    # -- drag --------------------------------------------------------------

    def begin_drag(self, entity_id: str, pointer_id: int, screen_point: PointLike) -> bool:
        entity = self.store.find(entity_id)
        if entity is None or not self.capabilities(entity_id).can_drag:
            return False
        resize = self._resize_sessions.get(entity_id)
        if resize is not None and resize.is_active:
            return False
        session = self._drag_sessions.get(entity_id)
        if session is None:
            session = DragSession(entity_id, capture=self.capture)
            self._drag_sessions[entity_id] = session
        if not session.begin(pointer_id, GeometrySnapshot.of(entity, self.config)):
            return False
        self._gesture_origins[entity_id] = self.to_canvas(screen_point)
        return True

    def drag_move(self, entity_id: str, pointer_id: int, screen_point: PointLike) -> Optional[Point]:
        session = self._drag_sessions.get(entity_id)
        if session is None or not session.owns(pointer_id):
            return None
        dx, dy = self._delta(entity_id, screen_point)
        return session.update(pointer_id, dx, dy)

    def end_drag(self, entity_id: str, pointer_id: int) -> Optional[CommitResult]:
        session = self._drag_sessions.get(entity_id)
        if session is None or not session.owns(pointer_id):
            return None
        origin = session.origin
        proposed = session.end(pointer_id)
        self._gesture_origins.pop(entity_id, None)
        if proposed is None:
            return None
        return self.pipeline.commit_drag(entity_id, proposed, origin=origin)

    def cancel_drag(self, entity_id: str, pointer_id: int) -> bool:
        session = self._drag_sessions.get(entity_id)
        if session is None or not session.cancel(pointer_id):
            return False
        self._gesture_origins.pop(entity_id, None)
        return True

    def commit_drag_position(self, entity_id: str, x: float, y: float) -> Optional[CommitResult]:
        """Commit a drag the host tracked itself, given its final canvas position."""

        entity = self.store.find(entity_id)
        if entity is None or not self.capabilities(entity_id).can_drag or self.is_gesture_active(entity_id):
            return None
        return self.pipeline.commit_drag(entity_id, (x, y), origin=entity.position)

    def _delta(self, entity_id: str, screen_point: PointLike) -> Tuple[float, float]:
        origin = self._gesture_origins.get(entity_id)
        current = self.to_canvas(screen_point)
        if origin is None:
            return 0.0, 0.0
        return current.x - origin.x, current.y - origin.y

    # -- boundary ----------------------------------------------------------

    def start_rect_authoring(self) -> bool:
        if not self.is_editing:
            return False
        self._abort_all_sessions()
        self.boundary.start_rect_authoring()
        return True

    def start_polygon_authoring(self) -> bool:
        if not self.is_editing:
            return False
        self._abort_all_sessions()
        self.boundary.start_polygon_authoring()
        return True

    def finish_polygon(self) -> bool:
        if not self.is_editing:
            return False
        return self.boundary.finish_polygon()

    def cancel_authoring(self) -> None:
        self.boundary.cancel_authoring()

    def set_boundary(self, constraint: BoundaryConstraint) -> bool:
        if not self.is_editing:
            return False
        self.boundary.cancel_authoring()
        self.boundary.set_constraint(constraint)
        return True

    def clear_boundary(self) -> bool:
        if not self.is_editing:
            return False
        self.boundary.clear()
        return True

    def enforce_boundary(self) -> List[CommitResult]:
        """Run every unlocked entity through the commit pipeline where it stands.

        Locked objects keep their geometry and show up in
        ``pipeline.violations()`` if they lie outside the boundary.
        """

        if not self.is_editing:
            return []
        entities = [entity for entity in self.store.placeables() if not entity.locked]
        return [self.pipeline.enforce(entity.id) for entity in entities]

    # -- entity lifecycle --------------------------------------------------

    def add_table(
        self,
        shape: str = "square",
        capacity: int = 4,
        *,
        number: Optional[Union[int, str]] = None,
        position: PointLike = (50.0, 50.0),
        entity_id: Optional[str] = None,
        size_scale: float = 1.0,
    ) -> Optional[Table]:
        if not self.is_editing:
            return None
        width, height = calculate_table_size(shape, capacity, self.config, scale=size_scale)
        pos = self._initial_position(position, (width, height))
        table = Table(
            id=entity_id or str(uuid.uuid4()),
            shape=shape,
            x=pos.x,
            y=pos.y,
            width=width,
            height=height,
            number=self.store.next_table_number() if number is None else number,
            capacity=capacity,
        )
        self.store.add_table(table)
        self.pipeline.enforce(table.id)
        return self.store.get(table.id)  # type: ignore[return-value]

    def add_object(
        self,
        shape: str = "square",
        preset: str = "m",
        *,
        position: PointLike = (50.0, 50.0),
        entity_id: Optional[str] = None,
        locked: bool = True,
    ) -> Optional[CanvasObject]:
        if not self.is_editing:
            return None
        size = object_preset_size(preset, self.config)
        pos = self._initial_position(position, (size, size))
        obj = CanvasObject(
            id=entity_id or str(uuid.uuid4()),
            shape=shape,
            x=pos.x,
            y=pos.y,
            width=size,
            height=size,
            locked=locked,
        )
        self.store.add_object(obj)
        self.pipeline.enforce(obj.id)
        return self.store.get(obj.id)  # type: ignore[return-value]

    def edit_table(
        self,
        table_id: str,
        shape: Optional[str] = None,
        capacity: Optional[int] = None,
        size_scale: float = 1.0,
        *,
        number: Optional[Union[int, str]] = None,
    ) -> Optional[CommitResult]:
        """Change a table's shape, capacity or label and recompute its footprint.

        The new size is written through the commit pipeline, which floors it
        at the minimum size, keeps round tables square and clamps the
        position into a rectangular boundary.
        """

        entity = self.store.find(table_id)
        if not self.is_editing or not isinstance(entity, Table):
            return None
        shape = entity.shape if shape is None else shape
        if shape not in SHAPES:
            raise ValueError(f'shape must be {"|".join(SHAPES)} (got {shape!r})')
        capacity = entity.capacity if capacity is None else capacity
        width, height = calculate_table_size(shape, capacity, self.config, scale=size_scale)

        self._abort_sessions(table_id)
        changes: Dict[str, object] = {"shape": shape, "capacity": capacity}
        if number is not None:
            changes["number"] = number
        self.store.update_table(table_id, **changes)
        logger.info("table %s: %s for %d, footprint %gx%g", table_id, shape, capacity, width, height)
        return self.pipeline.commit_resize(table_id, Rect(entity.x, entity.y, width, height))

    def _initial_position(self, position: PointLike, size: Tuple[float, float]) -> Point:
        """Where a new entity lands.

        The requested spot is kept unless a polygon boundary rejects it; then
        the polygon's vertex centroid is tried as the top-left corner, then as
        the centre of the entity. Rect boundaries are handled by the clamp.
        """

        requested = as_point(position)
        if not self.boundary.is_polygonal or self.boundary.fits(requested, size):
            return requested
        vertices = np.array([tuple(p) for p in self.boundary.outline()], dtype=float)
        cx, cy = vertices.mean(axis=0)
        width, height = size
        candidates = (
            Point(round_half_up(cx), round_half_up(cy)),
            Point(round_half_up(cx - width / 2), round_half_up(cy - height / 2)),
        )
        for candidate in candidates:
            if self.boundary.fits(candidate, size):
                return candidate
        logger.warning("no placement inside the polygon boundary for a %gx%g entity", width, height)
        return requested

    def delete_entity(self, entity_id: str) -> Optional[Entity]:
        if not self.is_editing or entity_id not in self.store:
            return None
        self._abort_sessions(entity_id)
        self._resize_sessions.pop(entity_id, None)
        self._drag_sessions.pop(entity_id, None)
        removed = self.store.delete(entity_id)
        self.cache.forget(entity_id)
        self.selection.forget(entity_id)
        return removed

    def delete_selected(self) -> Optional[Entity]:
        sel = self.selection.selection
        if sel is None:
            return None
        return self.delete_entity(sel.id)

    def set_object_locked(self, object_id: str, locked: bool) -> bool:
        entity = self.store.find(object_id)
        if not self.is_editing or not isinstance(entity, CanvasObject):
            return False
        if locked:
            self._abort_sessions(object_id)
            if self.selection.is_resize_armed(object_id):
                self.selection.disarm()
        self.store.set_locked(object_id, locked)
        return True

    # -- listeners ---------------------------------------------------------

    def _abort_sessions(self, entity_id: str, drags: bool = True) -> None:
        aborted = False
        resize = self._resize_sessions.get(entity_id)
        if resize is not None and resize.is_active:
            resize.abort()
            aborted = True
        drag = self._drag_sessions.get(entity_id)
        if drags and drag is not None and drag.is_active:
            drag.abort()
            aborted = True
        if aborted:
            self._gesture_origins.pop(entity_id, None)

    def _abort_all_sessions(self) -> None:
        for entity_id in set(self._resize_sessions) | set(self._drag_sessions):
            self._abort_sessions(entity_id)

    def _on_selection_change(self, previous: Optional[Selection], current: Optional[Selection]) -> None:
        if previous is not None:
            self._abort_sessions(previous.id, drags=False)

    def _on_mode_change(self, previous: str, current: str) -> None:
        if current != "edit":
            self._abort_all_sessions()
            self.boundary.cancel_authoring()

    def _on_boundary_change(self, previous: BoundaryConstraint, current: BoundaryConstraint) -> None:
        self.cache.clear()
        if self.boundary.is_polygonal:
            self.pipeline.seed(self.store.placeables())
