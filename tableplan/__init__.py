from .config import EditorConfig, get_editor_config, set_editor_config
from .errors import DuplicateEntityError, LayoutError, LayoutFormatError, UnknownEntityError
from .geometry import (
    Point,
    Rect,
    ViewportTransform,
    as_point,
    clamp,
    round_half_up,
    normalize_rect,
    point_in_polygon,
    points_in_polygon,
    rect_corners,
)
from .entities import (
    CanvasObject,
    Placeable,
    Table,
    calculate_table_size,
    nearest_object_preset,
    object_preset_size,
)
from .boundary import (
    NO_BOUNDARY,
    BoundaryConstraint,
    BoundaryModel,
    NoBoundary,
    PolygonBoundary,
    RectBoundary,
    constraint_fits,
)
from .store import EntityStore
from .selection import Selection, SelectionCoordinator
from .sessions import (
    CORNER_HANDLES,
    RADIUS_HANDLES,
    DragSession,
    EntityResizeSession,
    GeometrySnapshot,
    NullPointerCapture,
    PointerCapture,
    handles_for,
)
from .commit import CommitResult, LastValidPositionCache, PlacementCommitPipeline
from .editor import Capabilities, LayoutEditor
from .layout_io import dump_layout, load_layout, load_layout_file, write_layout_file

__all__ = [
    'EditorConfig',
    'get_editor_config',
    'set_editor_config',
    'LayoutError',
    'UnknownEntityError',
    'DuplicateEntityError',
    'LayoutFormatError',
    'Point',
    'Rect',
    'ViewportTransform',
    'as_point',
    'clamp',
    'round_half_up',
    'normalize_rect',
    'point_in_polygon',
    'points_in_polygon',
    'rect_corners',
    'Placeable',
    'Table',
    'CanvasObject',
    'calculate_table_size',
    'object_preset_size',
    'nearest_object_preset',
    'BoundaryConstraint',
    'NoBoundary',
    'RectBoundary',
    'PolygonBoundary',
    'NO_BOUNDARY',
    'BoundaryModel',
    'constraint_fits',
    'EntityStore',
    'Selection',
    'SelectionCoordinator',
    'CORNER_HANDLES',
    'RADIUS_HANDLES',
    'handles_for',
    'PointerCapture',
    'NullPointerCapture',
    'GeometrySnapshot',
    'EntityResizeSession',
    'DragSession',
    'CommitResult',
    'LastValidPositionCache',
    'PlacementCommitPipeline',
    'Capabilities',
    'LayoutEditor',
    'load_layout',
    'load_layout_file',
    'dump_layout',
    'write_layout_file',
]
