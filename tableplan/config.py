"""Configuration helpers for the layout engine."""

from __future__ import annotations

import copy
import sys
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class EditorConfig:
    """Tunable constants shared by sessions, boundaries and the commit pipeline."""

    table_min_size: float = 60.0
    object_min_size: float = 40.0
    min_boundary_rect: float = 40.0
    polygon_epsilon: float = sys.float_info.epsilon
    object_size_presets: Dict[str, float] = field(
        default_factory=lambda: {"s": 80.0, "m": 120.0, "l": 170.0}
    )
    table_base_size: float = 80.0
    table_size_per_person: float = 15.0
    table_max_round_radius: float = 150.0

    def min_size_for(self, kind: str) -> float:
        if kind == "table":
            return self.table_min_size
        return self.object_min_size


_EDITOR_CONFIG = EditorConfig()


def get_editor_config() -> EditorConfig:
    return copy.deepcopy(_EDITOR_CONFIG)


def set_editor_config(config: EditorConfig) -> None:
    global _EDITOR_CONFIG
    _EDITOR_CONFIG = copy.deepcopy(config)
