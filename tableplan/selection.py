"""Selection, edit/view mode and resize arming."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

MODES = ("edit", "view")


@dataclass(frozen=True)
class Selection:
    kind: str  # "table" or "object"
    id: str


SelectionListener = Callable[[Optional[Selection], Optional[Selection]], None]
ModeListener = Callable[[str, str], None]


class SelectionCoordinator:
    """Single discriminated selection plus the edit-mode gate.

    A table and an object can never be selected together because both live in
    the same ``selection`` slot.
    """

    def __init__(self, mode: str = "edit"):
        if mode not in MODES:
            raise ValueError(f'mode must be one of {"|".join(MODES)} (got {mode!r})')
        self._mode = mode
        self._selection: Optional[Selection] = None
        self._resize_armed: Optional[str] = None
        self.controls_visible = mode == "edit"
        self._selection_listeners: List[SelectionListener] = []
        self._mode_listeners: List[ModeListener] = []

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_editing(self) -> bool:
        return self._mode == "edit"

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def selected_table_id(self) -> Optional[str]:
        sel = self._selection
        return sel.id if sel is not None and sel.kind == "table" else None

    @property
    def selected_object_id(self) -> Optional[str]:
        sel = self._selection
        return sel.id if sel is not None and sel.kind == "object" else None

    def on_selection_change(self, listener: SelectionListener) -> None:
        self._selection_listeners.append(listener)

    def on_mode_change(self, listener: ModeListener) -> None:
        self._mode_listeners.append(listener)

    def _set_selection(self, selection: Optional[Selection]) -> None:
        previous = self._selection
        if previous == selection:
            return
        self._selection = selection
        self._resize_armed = None
        logger.debug("selection: %s -> %s", previous, selection)
        for listener in list(self._selection_listeners):
            listener(previous, selection)

    def select_table(self, table_id: str) -> None:
        self._set_selection(Selection("table", table_id))

    def select_object(self, object_id: str) -> None:
        self._set_selection(Selection("object", object_id))

    def toggle(self, kind: str, entity_id: str) -> None:
        """Click semantics: clicking the selected entity again deselects it."""

        if self._selection == Selection(kind, entity_id):
            self._set_selection(None)
        else:
            self._set_selection(Selection(kind, entity_id))

    def clear(self) -> None:
        self._set_selection(None)

    def is_selected(self, entity_id: str) -> bool:
        return self._selection is not None and self._selection.id == entity_id

    def forget(self, entity_id: str) -> None:
        """Drop the selection if it points at a deleted entity."""

        if self.is_selected(entity_id):
            self._set_selection(None)

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f'mode must be one of {"|".join(MODES)} (got {mode!r})')
        previous = self._mode
        if previous == mode:
            return
        self._mode = mode
        self.controls_visible = mode == "edit"
        if mode != "edit":
            self._resize_armed = None
        logger.info("mode: %s -> %s", previous, mode)
        for listener in list(self._mode_listeners):
            listener(previous, mode)

    # -- resize arming -----------------------------------------------------

    def is_resize_armed(self, entity_id: str) -> bool:
        return self._resize_armed is not None and self._resize_armed == entity_id

    def toggle_resize_armed(self, locked: bool = False) -> bool:
        """Arm or disarm resize handles on the selected entity.

        Returns the new armed state; arming is refused outside edit mode, with
        nothing selected, or when the entity is locked.
        """

        sel = self._selection
        if self._resize_armed is not None:
            self._resize_armed = None
            return False
        if not self.is_editing or sel is None or locked:
            return False
        self._resize_armed = sel.id
        return True

    def disarm(self) -> None:
        self._resize_armed = None
