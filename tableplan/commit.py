"""Final placement authority: clamp, validate, commit or revert."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .boundary import BoundaryModel
from .config import EditorConfig, get_editor_config
from .entities import Placeable
from .geometry import Point, PointLike, Rect, as_point
from .logging_utils import debug_log_call
from .store import EntityStore

logger = logging.getLogger(__name__)

COMMITTED = "committed"
CLAMPED = "clamped"
REVERTED = "reverted"


@dataclass(frozen=True)
class CommitResult:
    entity_id: str
    x: float
    y: float
    width: float
    height: float
    outcome: str

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def reverted(self) -> bool:
        return self.outcome == REVERTED


class LastValidPositionCache:
    """Rollback targets for entities whose drag leaves a polygon boundary.

    Only the commit pipeline writes here; entries always satisfied the
    boundary that was active when they were stored.
    """

    def __init__(self) -> None:
        self._positions: Dict[str, Point] = {}

    def get(self, entity_id: str) -> Optional[Point]:
        return self._positions.get(entity_id)

    def remember(self, entity_id: str, position: PointLike) -> None:
        self._positions[entity_id] = as_point(position)

    def forget(self, entity_id: str) -> None:
        self._positions.pop(entity_id, None)

    def clear(self) -> None:
        self._positions.clear()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def items(self):
        return self._positions.items()


class PlacementCommitPipeline:
    def __init__(
        self,
        store: EntityStore,
        boundary: BoundaryModel,
        cache: Optional[LastValidPositionCache] = None,
        config: Optional[EditorConfig] = None,
    ):
        self.store = store
        self.boundary = boundary
        self.cache = cache if cache is not None else LastValidPositionCache()
        self.config = config or get_editor_config()

    @debug_log_call(logger, method=True)
    def commit_drag(
        self,
        entity_id: str,
        proposed: PointLike,
        origin: Optional[PointLike] = None,
    ) -> CommitResult:
        """Settle a completed drag of ``entity_id`` at ``proposed``.

        ``origin`` is the pre-gesture position, used as the rollback target
        when nothing is cached for the entity.
        """

        entity = self.store.get(entity_id)
        size = (entity.width, entity.height)
        requested = as_point(proposed)
        position = self.boundary.clamp_position(requested, size)
        outcome = CLAMPED if position != requested else COMMITTED

        if self.boundary.is_polygonal and not self.boundary.fits(position, size):
            fallback = self.cache.get(entity_id)
            if fallback is None:
                fallback = as_point(origin) if origin is not None else entity.position
            logger.info(
                "commit %s: (%.1f, %.1f) leaves polygon boundary, reverting to (%.1f, %.1f)",
                entity_id,
                position.x,
                position.y,
                fallback.x,
                fallback.y,
            )
            position = fallback
            outcome = REVERTED
        else:
            self.cache.remember(entity_id, position)

        updated = self.store.replace_geometry(entity_id, position.x, position.y)
        return CommitResult(entity_id, updated.x, updated.y, updated.width, updated.height, outcome)

    @debug_log_call(logger, method=True)
    def commit_resize(self, entity_id: str, geometry: Rect) -> CommitResult:
        """Write the final geometry of a resize session.

        Polygon boundaries are not enforced for resizes; the cache is only
        refreshed when the new footprint still fits.
        """

        entity = self.store.get(entity_id)
        width, height = self._normalized_size(entity, geometry.width, geometry.height)
        requested = Point(geometry.x, geometry.y)
        position = self.boundary.clamp_position(requested, (width, height))
        outcome = CLAMPED if position != requested else COMMITTED

        if self.boundary.fits(position, (width, height)):
            self.cache.remember(entity_id, position)

        updated = self.store.replace_geometry(entity_id, position.x, position.y, width, height)
        return CommitResult(entity_id, updated.x, updated.y, updated.width, updated.height, outcome)

    def enforce(self, entity_id: str) -> CommitResult:
        """Re-settle an entity where it stands, e.g. after a boundary change."""

        entity = self.store.get(entity_id)
        return self.commit_drag(entity_id, entity.position, origin=entity.position)

    def seed(self, entities: Iterable[Placeable]) -> int:
        """Cache current positions of entities that satisfy the boundary.

        Entities that already have an entry keep it.
        """

        seeded = 0
        for entity in entities:
            if entity.id in self.cache:
                continue
            if self.boundary.fits(entity.position, entity.size):
                self.cache.remember(entity.id, entity.position)
                seeded += 1
        logger.debug("seeded %d last-valid positions", seeded)
        return seeded

    def violations(self) -> Iterator[Placeable]:
        """Entities whose committed footprint is outside the active boundary."""

        for entity in self.store.placeables():
            size = entity.size
            if self.boundary.clamp_position(entity.position, size) != entity.position:
                yield entity
            elif not self.boundary.fits(entity.position, size):
                yield entity

    def _normalized_size(self, entity: Placeable, width: float, height: float) -> Tuple[float, float]:
        min_size = entity.min_size(self.config)
        width = max(min_size, width)
        height = max(min_size, height)
        if entity.is_round:
            height = width
        return width, height
