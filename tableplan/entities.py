"""Placeable entities: tables and fixed canvas objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple, Union

from .config import EditorConfig, get_editor_config
from .geometry import Point, Rect, round_half_up

SHAPES = ("round", "square")
TABLE_STATUSES = ("free", "occupied", "reserved")


@dataclass
class Placeable:
    """Geometry shared by every entity on the floor plan."""

    kind: ClassVar[str] = "placeable"

    id: str
    shape: str
    x: float
    y: float
    width: float
    height: float

    @property
    def locked(self) -> bool:
        return False

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Tuple[float, float]:
        return self.width, self.height

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def is_round(self) -> bool:
        return self.shape == "round"

    def min_size(self, config: Optional[EditorConfig] = None) -> float:
        cfg = config or get_editor_config()
        return cfg.min_size_for(self.kind)


@dataclass
class Table(Placeable):
    kind: ClassVar[str] = "table"

    number: Union[int, str] = 0
    capacity: int = 4
    status: str = "free"
    reservation_id: Optional[str] = None
    combined_with: List[str] = field(default_factory=list)


@dataclass
class CanvasObject(Placeable):
    kind: ClassVar[str] = "object"

    locked: bool = True  # type: ignore[assignment]


def calculate_table_size(
    shape: str, capacity: int, config: Optional[EditorConfig] = None, *, scale: float = 1.0
) -> Tuple[float, float]:
    """Footprint for a table seating ``capacity`` guests.

    ``scale`` enlarges or shrinks the default footprint; the result is rounded
    to whole canvas units. Minimum sizes are applied by the commit pipeline.
    """

    if scale <= 0:
        raise ValueError(f"table size scale must be positive (got {scale!r})")
    cfg = config or get_editor_config()
    size = cfg.table_base_size + (capacity - 1) * cfg.table_size_per_person
    if shape == "round":
        size = min(size, cfg.table_max_round_radius) * 2
    scaled = round_half_up(size * scale)
    return scaled, scaled


def object_preset_size(preset: str, config: Optional[EditorConfig] = None) -> float:
    cfg = config or get_editor_config()
    try:
        return cfg.object_size_presets[preset]
    except KeyError:
        raise ValueError(
            f'unknown object size preset "{preset}" (expected one of {", ".join(cfg.object_size_presets)})'
        ) from None


def nearest_object_preset(
    width: float, height: float, config: Optional[EditorConfig] = None
) -> str:
    """Map an object's current footprint back to the smallest preset that holds it."""

    cfg = config or get_editor_config()
    ordered = sorted(cfg.object_size_presets.items(), key=lambda item: item[1])
    largest = max(width, height)
    for name, size in ordered:
        if largest <= size:
            return name
    return ordered[-1][0]
