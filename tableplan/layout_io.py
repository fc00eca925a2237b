"""Reading and writing floor-plan layouts as JSON documents.

The document shape follows the front-end payloads::

    {
      "tables":  [{"id", "number", "shape", "capacity", "x", "y", "width",
                   "height", "status", "reservationId"?, "combinedWith"?}],
      "objects": [{"id", "shape", "x", "y", "width", "height", "locked"}],
      "limits":  {"kind": "none"}
               | {"kind": "rect", "rect": {"x", "y", "width", "height"}}
               | {"kind": "poly", "points": [{"x", "y"}, ...]}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .boundary import NO_BOUNDARY, BoundaryConstraint, PolygonBoundary, RectBoundary
from .entities import SHAPES, TABLE_STATUSES, CanvasObject, Table
from .errors import DuplicateEntityError, LayoutFormatError
from .geometry import Rect
from .store import EntityStore


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise LayoutFormatError(f'{where}: missing "{key}"')
    return data[key]


def _number(data: Mapping[str, Any], key: str, where: str) -> float:
    value = _require(data, key, where)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutFormatError(f'{where}: "{key}" must be a number (got {value!r})')
    return float(value)


def _shape(data: Mapping[str, Any], where: str) -> str:
    shape = _require(data, "shape", where)
    if shape not in SHAPES:
        raise LayoutFormatError(f'{where}: shape must be {"|".join(SHAPES)} (got {shape!r})')
    return shape


def _entry(data: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise LayoutFormatError(f"{where}: expected an object (got {type(data).__name__})")
    return data


def _entries(data: Mapping[str, Any], key: str) -> List[Any]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise LayoutFormatError(f'"{key}" must be a list (got {type(items).__name__})')
    return items


def _capacity(data: Mapping[str, Any], where: str) -> int:
    value = data.get("capacity", 4)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise LayoutFormatError(f'{where}: "capacity" must be a positive integer (got {value!r})')
    return value


def _parse_table(raw: Any, index: int) -> Table:
    where = f"tables[{index}]"
    data = _entry(raw, where)
    status = data.get("status", "free")
    if status not in TABLE_STATUSES:
        raise LayoutFormatError(f'{where}: status must be {"|".join(TABLE_STATUSES)} (got {status!r})')
    return Table(
        id=str(_require(data, "id", where)),
        shape=_shape(data, where),
        x=_number(data, "x", where),
        y=_number(data, "y", where),
        width=_number(data, "width", where),
        height=_number(data, "height", where),
        number=data.get("number", 0),
        capacity=_capacity(data, where),
        status=status,
        reservation_id=data.get("reservationId"),
        combined_with=list(data.get("combinedWith") or []),
    )


def _parse_object(raw: Any, index: int) -> CanvasObject:
    where = f"objects[{index}]"
    data = _entry(raw, where)
    return CanvasObject(
        id=str(_require(data, "id", where)),
        shape=_shape(data, where),
        x=_number(data, "x", where),
        y=_number(data, "y", where),
        width=_number(data, "width", where),
        height=_number(data, "height", where),
        locked=bool(data.get("locked", True)),
    )


def parse_limits(raw: Optional[Any]) -> BoundaryConstraint:
    if not raw:
        return NO_BOUNDARY
    data = _entry(raw, "limits")
    kind = data.get("kind", "none")
    if kind == "none":
        return NO_BOUNDARY
    if kind == "rect":
        rect = _entry(_require(data, "rect", "limits"), "limits.rect")
        return RectBoundary(
            Rect(
                _number(rect, "x", "limits.rect"),
                _number(rect, "y", "limits.rect"),
                _number(rect, "width", "limits.rect"),
                _number(rect, "height", "limits.rect"),
            )
        )
    if kind == "poly":
        points = _require(data, "points", "limits")
        if not isinstance(points, list):
            raise LayoutFormatError(f'limits: "points" must be a list (got {type(points).__name__})')
        coords = []
        for i, raw_point in enumerate(points):
            where = f"limits.points[{i}]"
            p = _entry(raw_point, where)
            coords.append((_number(p, "x", where), _number(p, "y", where)))
        return PolygonBoundary(tuple(coords))
    raise LayoutFormatError(f'limits: kind must be none|rect|poly (got {kind!r})')


def load_layout(data: Mapping[str, Any]) -> Tuple[EntityStore, BoundaryConstraint]:
    tables = [_parse_table(item, i) for i, item in enumerate(_entries(data, "tables"))]
    objects = [_parse_object(item, i) for i, item in enumerate(_entries(data, "objects"))]
    try:
        store = EntityStore(tables, objects)
    except DuplicateEntityError as exc:
        raise LayoutFormatError(str(exc)) from exc
    return store, parse_limits(data.get("limits"))


def load_layout_file(path: Union[str, Path]) -> Tuple[EntityStore, BoundaryConstraint]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise LayoutFormatError(f"{path}: not UTF-8 text ({exc.reason})") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LayoutFormatError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise LayoutFormatError(f"{path}: top-level value must be an object")
    return load_layout(data)


def dump_limits(constraint: BoundaryConstraint) -> Dict[str, Any]:
    if isinstance(constraint, RectBoundary):
        r = constraint.rect
        return {"kind": "rect", "rect": {"x": r.x, "y": r.y, "width": r.width, "height": r.height}}
    if isinstance(constraint, PolygonBoundary):
        return {"kind": "poly", "points": [{"x": p.x, "y": p.y} for p in constraint.points]}
    return {"kind": "none"}


def dump_layout(store: EntityStore, constraint: BoundaryConstraint = NO_BOUNDARY) -> Dict[str, Any]:
    tables: List[Dict[str, Any]] = []
    for t in store.tables:
        item: Dict[str, Any] = {
            "id": t.id,
            "number": t.number,
            "shape": t.shape,
            "capacity": t.capacity,
            "x": t.x,
            "y": t.y,
            "width": t.width,
            "height": t.height,
            "status": t.status,
        }
        if t.reservation_id is not None:
            item["reservationId"] = t.reservation_id
        if t.combined_with:
            item["combinedWith"] = list(t.combined_with)
        tables.append(item)
    objects = [
        {"id": o.id, "shape": o.shape, "x": o.x, "y": o.y, "width": o.width, "height": o.height, "locked": o.locked}
        for o in store.objects
    ]
    return {"tables": tables, "objects": objects, "limits": dump_limits(constraint)}


def write_layout_file(path: Union[str, Path], store: EntityStore, constraint: BoundaryConstraint = NO_BOUNDARY) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(dump_layout(store, constraint), indent=2) + "\n", encoding="utf-8")
