"""Placement boundaries and their interactive authoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .config import EditorConfig, get_editor_config
from .geometry import Point, PointLike, Rect, as_point, clamp, normalize_rect, points_in_polygon, rect_corners

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoBoundary:
    kind: str = field(default="none", init=False)


@dataclass(frozen=True)
class RectBoundary:
    rect: Rect
    kind: str = field(default="rect", init=False)


@dataclass(frozen=True)
class PolygonBoundary:
    points: Tuple[Point, ...]
    kind: str = field(default="poly", init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(as_point(p) for p in self.points))

    @property
    def is_degenerate(self) -> bool:
        return len(self.points) < 3


BoundaryConstraint = Union[NoBoundary, RectBoundary, PolygonBoundary]

NO_BOUNDARY = NoBoundary()

BoundaryListener = Callable[[BoundaryConstraint, BoundaryConstraint], None]


def constraint_fits(
    constraint: BoundaryConstraint,
    position: PointLike,
    size: Tuple[float, float],
    *,
    eps: Optional[float] = None,
) -> bool:
    """Containment predicate for an entity rectangle at ``position``.

    Rectangles are enforced by clamping, never by rejection, so they always
    fit here. Polygons with fewer than three points constrain nothing.
    """

    if not isinstance(constraint, PolygonBoundary) or constraint.is_degenerate:
        return True
    pos = as_point(position)
    corners = rect_corners(Rect(pos.x, pos.y, size[0], size[1]))
    if eps is None:
        eps = get_editor_config().polygon_epsilon
    return bool(points_in_polygon(corners, constraint.points, eps=eps).all())


def clamp_into_rect(rect: Rect, position: PointLike, size: Tuple[float, float]) -> Point:
    pos = as_point(position)
    width, height = size
    return Point(
        clamp(pos.x, rect.x, rect.x + rect.width - width),
        clamp(pos.y, rect.y, rect.y + rect.height - height),
    )


class BoundaryModel:
    """Active placement constraint plus the drag-to-draw / click-to-add drafts."""

    def __init__(self, constraint: Optional[BoundaryConstraint] = None, config: Optional[EditorConfig] = None):
        self.config = config or get_editor_config()
        self._constraint: BoundaryConstraint = constraint or NO_BOUNDARY
        self.authoring: Optional[str] = None
        self._rect_start: Optional[Point] = None
        self.draft_rect: Optional[Rect] = None
        self.draft_points: List[Point] = []
        self.hover: Optional[Point] = None
        self._listeners: List[BoundaryListener] = []

    @property
    def constraint(self) -> BoundaryConstraint:
        return self._constraint

    @property
    def kind(self) -> str:
        return self._constraint.kind

    @property
    def is_authoring(self) -> bool:
        return self.authoring is not None

    @property
    def is_polygonal(self) -> bool:
        c = self._constraint
        return isinstance(c, PolygonBoundary) and not c.is_degenerate

    @property
    def can_finish_polygon(self) -> bool:
        return self.authoring == "poly" and len(self.draft_points) >= 3

    def subscribe(self, listener: BoundaryListener) -> None:
        self._listeners.append(listener)

    def set_constraint(self, constraint: BoundaryConstraint) -> None:
        old = self._constraint
        self._constraint = constraint
        logger.info("boundary: %s -> %s", old.kind, constraint.kind)
        for listener in list(self._listeners):
            listener(old, constraint)

    def clear(self) -> None:
        self._reset_draft()
        self.authoring = None
        self.set_constraint(NO_BOUNDARY)

    # -- authoring ---------------------------------------------------------

    def start_rect_authoring(self) -> None:
        self._reset_draft()
        self.authoring = "rect"

    def start_polygon_authoring(self) -> None:
        self._reset_draft()
        self.authoring = "poly"

    def cancel_authoring(self) -> None:
        if self.authoring:
            logger.debug("boundary authoring cancelled (%s)", self.authoring)
        self._reset_draft()
        self.authoring = None

    def click(self, point: PointLike) -> bool:
        """Feed a canvas click to the active draft.

        Returns ``True`` when the click committed a new constraint.
        """

        p = as_point(point)
        if self.authoring == "rect":
            if self._rect_start is None:
                self._rect_start = p
                self.draft_rect = Rect(p.x, p.y, 0.0, 0.0)
                return False
            draft = normalize_rect(self._rect_start, p)
            self._reset_draft()
            min_side = self.config.min_boundary_rect
            if draft.width >= min_side and draft.height >= min_side:
                self.authoring = None
                self.set_constraint(RectBoundary(draft))
                return True
            logger.debug("boundary rect draft too small (%.1f x %.1f), discarded", draft.width, draft.height)
            return False
        if self.authoring == "poly":
            self.draft_points.append(p)
            return False
        return False

    def move(self, point: PointLike) -> None:
        p = as_point(point)
        self.hover = p
        if self.authoring == "rect" and self._rect_start is not None:
            self.draft_rect = normalize_rect(self._rect_start, p)

    def finish_polygon(self) -> bool:
        if not self.can_finish_polygon:
            return False
        points = tuple(self.draft_points)
        self._reset_draft()
        self.authoring = None
        self.set_constraint(PolygonBoundary(points))
        return True

    def preview_outline(self) -> List[Point]:
        """Outline of the in-progress draft for the host to draw."""

        if self.authoring == "rect" and self.draft_rect is not None:
            return rect_corners(self.draft_rect)
        if self.authoring == "poly":
            outline = list(self.draft_points)
            if self.hover is not None and outline:
                outline.append(self.hover)
            return outline
        return []

    def _reset_draft(self) -> None:
        self._rect_start = None
        self.draft_rect = None
        self.draft_points = []
        self.hover = None

    # -- containment -------------------------------------------------------

    def fits(self, position: PointLike, size: Tuple[float, float]) -> bool:
        return constraint_fits(self._constraint, position, size, eps=self.config.polygon_epsilon)

    def clamp_position(self, position: PointLike, size: Tuple[float, float]) -> Point:
        if isinstance(self._constraint, RectBoundary):
            return clamp_into_rect(self._constraint.rect, position, size)
        return as_point(position)

    def outline(self) -> Sequence[Point]:
        c = self._constraint
        if isinstance(c, RectBoundary):
            return rect_corners(c.rect)
        if isinstance(c, PolygonBoundary):
            return c.points
        return ()
