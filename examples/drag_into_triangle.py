"""Example: drag an object out of a triangular floor plan and watch it revert."""

import logging

from tableplan import CanvasObject, EntityStore, LayoutEditor, PolygonBoundary

logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")


def main() -> None:
    store = EntityStore(
        objects=[CanvasObject(id="plant", shape="round", x=120, y=50, width=40, height=40, locked=False)],
    )
    editor = LayoutEditor(store, PolygonBoundary(((0, 0), (300, 0), (150, 300))))

    editor.begin_drag("plant", 1, (140, 70))
    editor.drag_move("plant", 1, (30, 30))
    print(f"Live position: {editor.live_geometry('plant')}")

    result = editor.end_drag("plant", 1)
    print(f"Outcome: {result.outcome}, committed at {result.position}")


if __name__ == "__main__":
    main()
