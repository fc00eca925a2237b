import logging

import pytest

from tableplan import (
    CanvasObject,
    EntityStore,
    LayoutEditor,
    Point,
    PolygonBoundary,
    Rect,
    RectBoundary,
    Table,
    ViewportTransform,
)
from tableplan.sessions import BOTTOM_RIGHT, RADIUS, TOP_LEFT

TRIANGLE = PolygonBoundary(((0, 0), (300, 0), (150, 300)))


class RecordingCapture:
    def __init__(self):
        self.events = []

    def capture(self, pointer_id):
        self.events.append(('capture', pointer_id))

    def release(self, pointer_id):
        self.events.append(('release', pointer_id))


def make_editor(constraint=None, **kwargs):
    store = EntityStore(
        tables=[
            Table(id='A', shape='square', x=10, y=10, width=100, height=100, number=1),
            Table(id='R', shape='round', x=120, y=60, width=60, height=60, number=2),
        ],
        objects=[
            CanvasObject(id='B', shape='square', x=120, y=50, width=40, height=40, locked=False),
            CanvasObject(id='L', shape='square', x=130, y=20, width=40, height=40, locked=True),
        ],
    )
    return LayoutEditor(store, constraint, **kwargs)


def arm(editor, entity_id):
    if editor.store.get(entity_id).kind == 'table':
        editor.click_table(entity_id)
    else:
        editor.click_object(entity_id)
    assert editor.toggle_resize_mode() is True


def test_drag_clamped_into_rect_boundary():
    editor = make_editor(RectBoundary(Rect(0, 0, 300, 300)))

    assert editor.begin_drag('A', 1, (10, 10))
    editor.drag_move('A', 1, (350, 10))
    assert editor.live_geometry('A') == Rect(350, 10, 100, 100)
    result = editor.end_drag('A', 1)

    assert result.position == Point(200, 10)
    assert editor.store.get('A').position == Point(200, 10)


def test_drag_out_of_triangle_reverts_object_to_last_valid_position():
    editor = make_editor(TRIANGLE)
    assert editor.cache.get('B') == Point(120, 50)

    editor.begin_drag('B', 1, (0, 0))
    editor.drag_move('B', 1, (-110, -40))
    result = editor.end_drag('B', 1)

    assert result.reverted
    assert editor.store.get('B').position == Point(120, 50)


def test_table_partially_leaving_polygon_returns_to_pre_drag_position():
    editor = make_editor(TRIANGLE)

    assert editor.commit_drag_position('R', 200, 200).reverted
    assert editor.store.get('R').position == Point(120, 60)


def test_drag_cancel_commits_nothing():
    capture = RecordingCapture()
    editor = make_editor(capture=capture)
    editor.begin_drag('A', 9, (0, 0))
    editor.drag_move('A', 9, (80, 80))

    assert editor.cancel_drag('A', 9)

    assert editor.store.get('A').position == Point(10, 10)
    assert capture.events == [('capture', 9), ('release', 9)]


def test_drag_uses_screen_to_canvas_transform():
    editor = make_editor(transform=ViewportTransform(scale=2.0, offset_x=50, offset_y=50))
    editor.begin_drag('A', 1, (100, 100))
    editor.drag_move('A', 1, (160, 140))

    result = editor.end_drag('A', 1)

    assert result.position == Point(40, 30)


def test_locked_object_cannot_be_dragged_or_resized():
    editor = make_editor()
    editor.click_object('L')

    assert editor.toggle_resize_mode() is False
    assert editor.begin_resize('L', 1, BOTTOM_RIGHT, (170, 60)) is False
    assert editor.begin_drag('L', 1, (130, 20)) is False
    assert editor.commit_drag_position('L', 0, 0) is None
    assert editor.store.get('L').rect == Rect(130, 20, 40, 40)
    assert editor.capabilities('L').handles == ()


def test_unlock_transition_enables_resize():
    editor = make_editor()
    editor.click_object('L')
    assert editor.set_object_locked('L', False)

    assert editor.toggle_resize_mode() is True
    assert editor.capabilities('L').can_resize


def test_resize_requires_selection_and_arming():
    editor = make_editor()
    assert editor.begin_resize('A', 1, BOTTOM_RIGHT, (110, 110)) is False

    editor.click_table('A')
    assert editor.begin_resize('A', 1, BOTTOM_RIGHT, (110, 110)) is False

    editor.toggle_resize_mode()
    caps = editor.capabilities('A')
    assert caps.can_resize and len(caps.handles) == 4
    assert editor.begin_resize('A', 1, BOTTOM_RIGHT, (110, 110)) is True


def test_resize_commits_on_pointer_up():
    editor = make_editor(RectBoundary(Rect(0, 0, 300, 300)))
    arm(editor, 'A')

    editor.begin_resize('A', 1, BOTTOM_RIGHT, (110, 110))
    live = editor.resize_move('A', 1, (510, 150))
    assert live == Rect(0, 10, 300, 140)
    assert editor.live_geometry('A') == live
    assert editor.store.get('A').width == 100

    result = editor.end_resize('A', 1)

    assert result.position == Point(0, 10)
    assert editor.store.get('A').rect == Rect(0, 10, 300, 140)


def test_second_pointer_is_ignored_during_resize():
    editor = make_editor()
    arm(editor, 'A')
    editor.begin_resize('A', 1, TOP_LEFT, (10, 10))

    assert editor.begin_resize('A', 2, BOTTOM_RIGHT, (110, 110)) is False
    assert editor.resize_move('A', 2, (500, 500)) is None
    assert editor.end_resize('A', 2) is None

    editor.resize_move('A', 1, (0, 0))
    result = editor.end_resize('A', 1)
    assert result.x == 0 and result.width == 110


def test_round_resize_through_editor_preserves_center():
    editor = make_editor()
    arm(editor, 'R')
    assert editor.capabilities('R').handles == (RADIUS,)

    editor.begin_resize('R', 1, RADIUS, (150, 125))
    editor.resize_move('R', 1, (150, 145))
    editor.end_resize('R', 1)

    entity = editor.store.get('R')
    assert entity.width == entity.height == 100
    assert abs(entity.x + entity.width / 2 - 150) < 1
    assert abs(entity.y + entity.height / 2 - 90) < 1


def test_deselection_aborts_resize_and_releases_capture():
    capture = RecordingCapture()
    editor = make_editor(capture=capture)
    arm(editor, 'A')
    editor.begin_resize('A', 5, BOTTOM_RIGHT, (110, 110))
    editor.resize_move('A', 5, (200, 200))

    editor.click_canvas((900, 900))

    assert editor.selected is None
    assert not editor.is_gesture_active('A')
    assert capture.events == [('capture', 5), ('release', 5)]
    assert editor.store.get('A').rect == Rect(10, 10, 100, 100)
    assert editor.capabilities('A').can_resize is False


def test_view_mode_blocks_mutations_but_keeps_selection():
    editor = make_editor()
    arm(editor, 'A')
    editor.begin_resize('A', 1, BOTTOM_RIGHT, (110, 110))

    editor.set_mode('view')

    assert editor.selected.id == 'A'
    assert not editor.is_gesture_active('A')
    assert editor.selection.controls_visible is False
    assert editor.begin_drag('A', 1, (10, 10)) is False
    assert editor.add_table() is None
    assert editor.delete_selected() is None
    assert editor.start_rect_authoring() is False
    assert editor.enforce_boundary() == []


def test_clicking_object_clears_table_selection():
    editor = make_editor()
    editor.click_table('A')
    editor.click_object('B')

    assert editor.selection.selected_table_id is None
    assert editor.selection.selected_object_id == 'B'


def test_rect_authoring_via_canvas_clicks_deselects_and_commits():
    editor = make_editor()
    editor.click_table('A')
    assert editor.start_rect_authoring()

    editor.click_canvas((0, 0))
    assert editor.selected is None
    assert editor.click_table('A') is False
    editor.pointer_move((200, 150))
    assert editor.boundary.draft_rect == Rect(0, 0, 200, 150)
    assert editor.click_canvas((400, 400)) is True

    assert editor.boundary.constraint == RectBoundary(Rect(0, 0, 400, 400))


def test_leaving_edit_mode_cancels_rect_draft():
    editor = make_editor(TRIANGLE)
    editor.start_rect_authoring()
    editor.click_canvas((0, 0))

    editor.set_mode('view')

    assert not editor.boundary.is_authoring
    assert editor.boundary.draft_rect is None
    assert editor.click_canvas((0, 0)) is False
    assert editor.click_canvas((200, 200)) is False
    assert editor.boundary.constraint == TRIANGLE
    assert editor.cache.get('B') == Point(120, 50)


def test_view_mode_cannot_finish_a_shared_polygon_draft():
    editor = make_editor(mode='view')
    editor.boundary.start_polygon_authoring()
    for point in [(0, 0), (300, 0), (150, 300)]:
        editor.boundary.click(point)

    assert editor.click_canvas((10, 10)) is False
    assert editor.boundary.draft_points == [Point(0, 0), Point(300, 0), Point(150, 300)]
    assert editor.finish_polygon() is False
    assert editor.boundary.kind == 'none'


def test_polygon_authoring_seeds_cache_for_fitting_entities():
    editor = make_editor()
    editor.start_polygon_authoring()
    for point in [(0, 0), (300, 0), (150, 300)]:
        editor.click_canvas(point)

    assert editor.finish_polygon()

    assert editor.boundary.is_polygonal
    assert editor.cache.get('B') == Point(120, 50)
    assert 'A' not in editor.cache


def test_clearing_boundary_drops_draft_and_cache():
    editor = make_editor(TRIANGLE)
    editor.start_polygon_authoring()
    editor.click_canvas((1, 1))

    assert editor.clear_boundary()

    assert editor.boundary.kind == 'none'
    assert editor.boundary.draft_points == []
    assert len(editor.cache) == 0


def test_enforce_boundary_clamps_existing_layout():
    editor = make_editor()
    editor.set_boundary(RectBoundary(Rect(0, 0, 150, 150)))

    results = editor.enforce_boundary()

    assert {r.entity_id for r in results} == {'A', 'R', 'B'}
    assert editor.store.get('B').position == Point(110, 50)
    assert editor.store.get('L').position == Point(130, 20)
    assert [e.id for e in editor.pipeline.violations()] == ['L']


def test_add_and_delete_entities():
    editor = make_editor()
    table = editor.add_table('round', capacity=2, entity_id='new')
    assert table.number == 3
    assert (table.width, table.height) == (190, 190)

    obj = editor.add_object('square', 's', position=(5, 5))
    assert obj.locked is True and obj.width == 80

    editor.click_table('new')
    removed = editor.delete_selected()
    assert removed.id == 'new'
    assert editor.selected is None
    assert 'new' not in editor.store


def test_unknown_ids_are_no_ops():
    editor = make_editor()
    assert editor.begin_drag('nope', 1, (0, 0)) is False
    assert editor.end_drag('nope', 1) is None
    assert editor.click_table('nope') is False
    assert editor.click_table('B') is False
    assert editor.live_geometry('nope') is None
    assert editor.delete_entity('nope') is None
    assert editor.capabilities('nope').can_drag is False


SQUARE_ROOM = PolygonBoundary(((500, 500), (900, 500), (900, 900), (500, 900)))


def test_new_table_moves_to_polygon_centroid_when_default_spot_is_outside():
    editor = LayoutEditor(boundary=SQUARE_ROOM)

    table = editor.add_table()

    assert table.position == Point(700, 700)
    assert list(editor.pipeline.violations()) == []
    assert editor.cache.get(table.id) == Point(700, 700)


def test_new_entities_centre_on_centroid_when_corner_placement_overflows():
    editor = LayoutEditor(boundary=TRIANGLE)

    table = editor.add_table(entity_id='t')
    obj = editor.add_object('square', 's', entity_id='o')

    assert table.position == Point(88, 38)
    assert obj.position == Point(110, 60)
    assert list(editor.pipeline.violations()) == []


def test_new_table_keeps_requested_spot_inside_polygon():
    editor = LayoutEditor(boundary=TRIANGLE)

    table = editor.add_table(capacity=1, position=(120, 20))

    assert table.position == Point(120, 20)


def test_new_table_too_large_for_polygon_is_reported(caplog):
    editor = LayoutEditor(boundary=PolygonBoundary(((0, 0), (30, 0), (15, 30))))

    with caplog.at_level(logging.WARNING, logger='tableplan.editor'):
        table = editor.add_table()

    assert table.position == Point(50, 50)
    assert [e.id for e in editor.pipeline.violations()] == [table.id]
    assert 'no placement inside the polygon boundary' in caplog.text


@pytest.mark.parametrize(
    'kwargs, expected',
    [
        ({'size_scale': 1.3}, ('square', 163)),
        ({'shape': 'round', 'capacity': 2}, ('round', 190)),
        ({'capacity': 1, 'size_scale': 0.7}, ('square', 60)),
    ],
)
def test_edit_table_recomputes_footprint(kwargs, expected):
    editor = make_editor()

    result = editor.edit_table('A', **kwargs)

    table = editor.store.get('A')
    assert (table.shape, table.width) == expected
    assert table.height == table.width
    assert table.position == Point(10, 10)
    assert result.width == expected[1]


def test_edit_table_updates_label_and_clamps_into_rect_boundary():
    editor = make_editor(RectBoundary(Rect(0, 0, 300, 300)))

    result = editor.edit_table('R', capacity=6, number='VIP')

    table = editor.store.get('R')
    assert table.number == 'VIP'
    assert table.capacity == 6
    assert result.position == Point(0, 0)
    assert table.rect == Rect(0, 0, 300, 300)


def test_edit_table_aborts_running_resize():
    capture = RecordingCapture()
    editor = make_editor(capture=capture)
    arm(editor, 'A')
    editor.begin_resize('A', 3, BOTTOM_RIGHT, (110, 110))

    editor.edit_table('A', capacity=2)

    assert not editor.is_gesture_active('A')
    assert capture.events == [('capture', 3), ('release', 3)]
    assert editor.store.get('A').width == 95


def test_edit_table_refusals():
    editor = make_editor()
    assert editor.edit_table('B') is None
    assert editor.edit_table('nope') is None
    with pytest.raises(ValueError):
        editor.edit_table('A', shape='hex')
    with pytest.raises(ValueError):
        editor.edit_table('A', size_scale=0)

    editor.set_mode('view')
    assert editor.edit_table('A', capacity=8) is None
    assert editor.store.get('A').capacity == 4
