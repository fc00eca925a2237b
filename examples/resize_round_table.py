"""Example: resize a round table inside a rectangular boundary."""

from tableplan import LayoutEditor, Rect, RectBoundary
from tableplan.layout_io import dump_layout
from tableplan.sessions import RADIUS


def main() -> None:
    editor = LayoutEditor(boundary=RectBoundary(Rect(0, 0, 400, 240)))
    table = editor.add_table("round", capacity=2, position=(100, 20), entity_id="t1")
    print(f"Added {table.id}: {table.rect}")

    editor.click_table("t1")
    editor.toggle_resize_mode()
    print(f"Handles: {editor.capabilities('t1').handles}")

    editor.begin_resize("t1", 1, RADIUS, (195, 115))
    for y in (125, 165, 230):
        print(f"  pointer at y={y}: {editor.resize_move('t1', 1, (195, y))}")
    result = editor.end_resize("t1", 1)
    print(f"Committed: {result}")
    print(dump_layout(editor.store, editor.boundary.constraint))


if __name__ == "__main__":
    main()
