"""Authoritative collections of tables and canvas objects."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Union

from .entities import CanvasObject, Placeable, Table
from .errors import DuplicateEntityError, UnknownEntityError

logger = logging.getLogger(__name__)

Entity = Union[Table, CanvasObject]

_GEOMETRY_FIELDS = ("x", "y", "width", "height")


class EntityStore:
    """Owns the table and object collections.

    Geometry changes replace the whole entity record, so callers holding an
    old instance keep a consistent snapshot.
    """

    def __init__(self, tables: Optional[List[Table]] = None, objects: Optional[List[CanvasObject]] = None):
        self._tables: Dict[str, Table] = {}
        self._objects: Dict[str, CanvasObject] = {}
        for table in tables or []:
            self.add_table(table)
        for obj in objects or []:
            self.add_object(obj)

    @property
    def tables(self) -> List[Table]:
        return list(self._tables.values())

    @property
    def objects(self) -> List[CanvasObject]:
        return list(self._objects.values())

    def placeables(self) -> Iterator[Placeable]:
        yield from self._tables.values()
        yield from self._objects.values()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._tables or entity_id in self._objects

    def __len__(self) -> int:
        return len(self._tables) + len(self._objects)

    def _ensure_new(self, entity_id: str) -> None:
        if entity_id in self:
            raise DuplicateEntityError(f'entity id "{entity_id}" already exists')

    def add_table(self, table: Table) -> Table:
        self._ensure_new(table.id)
        self._tables[table.id] = table
        return table

    def add_object(self, obj: CanvasObject) -> CanvasObject:
        self._ensure_new(obj.id)
        self._objects[obj.id] = obj
        return obj

    def find(self, entity_id: str) -> Optional[Entity]:
        return self._tables.get(entity_id) or self._objects.get(entity_id)

    def get(self, entity_id: str) -> Entity:
        entity = self.find(entity_id)
        if entity is None:
            raise UnknownEntityError(entity_id)
        return entity

    def delete(self, entity_id: str) -> Entity:
        if entity_id in self._tables:
            return self._tables.pop(entity_id)
        if entity_id in self._objects:
            return self._objects.pop(entity_id)
        raise UnknownEntityError(entity_id)

    def _put(self, entity: Entity) -> Entity:
        if isinstance(entity, Table):
            self._tables[entity.id] = entity
        else:
            self._objects[entity.id] = entity
        return entity

    def replace_geometry(
        self,
        entity_id: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> Entity:
        entity = self.get(entity_id)
        updated = replace(
            entity,
            x=float(x),
            y=float(y),
            width=float(entity.width if width is None else width),
            height=float(entity.height if height is None else height),
        )
        return self._put(updated)

    def update_table(self, table_id: str, **changes: Any) -> Table:
        """Replace descriptive fields of a table (shape, capacity, number, ...).

        Position and size are left to :meth:`replace_geometry`.
        """

        if table_id not in self._tables:
            raise UnknownEntityError(table_id)
        geometry = sorted(set(changes) & set(_GEOMETRY_FIELDS))
        if geometry:
            raise ValueError(f"update_table cannot change geometry fields: {', '.join(geometry)}")
        updated = replace(self._tables[table_id], **changes)
        self._tables[table_id] = updated
        return updated

    def set_locked(self, object_id: str, locked: bool) -> CanvasObject:
        if object_id not in self._objects:
            raise UnknownEntityError(object_id)
        updated = replace(self._objects[object_id], locked=bool(locked))
        self._objects[object_id] = updated
        logger.debug("object %s locked=%s", object_id, updated.locked)
        return updated

    # -- queries used by the host UI --------------------------------------

    def next_table_number(self) -> int:
        numbers = []
        for table in self._tables.values():
            try:
                numbers.append(int(table.number))
            except (TypeError, ValueError):
                continue
        return max([0] + numbers) + 1

    def filtered_tables(self, status: Optional[str] = None, min_capacity: Optional[int] = None) -> List[Table]:
        result = []
        for table in self._tables.values():
            if status is not None and status != "all" and table.status != status:
                continue
            if min_capacity is not None and table.capacity < min_capacity:
                continue
            result.append(table)
        return result

    def status_counts(self) -> Dict[str, int]:
        counts = {"free": 0, "occupied": 0, "reserved": 0}
        for table in self._tables.values():
            counts[table.status] = counts.get(table.status, 0) + 1
        return counts
