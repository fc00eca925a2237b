import json

import pytest

from tableplan import (
    LayoutFormatError,
    Point,
    PolygonBoundary,
    Rect,
    RectBoundary,
    dump_layout,
    load_layout,
    load_layout_file,
    write_layout_file,
)
from tableplan.boundary import NO_BOUNDARY


LAYOUT = {
    "tables": [
        {
            "id": "t1",
            "number": 1,
            "shape": "round",
            "capacity": 4,
            "x": 100,
            "y": 100,
            "width": 125,
            "height": 125,
            "status": "reserved",
            "reservationId": "r-42",
        },
        {"id": "t2", "number": "Bar", "shape": "square", "capacity": 6, "x": 300, "y": 80, "width": 155, "height": 155},
    ],
    "objects": [{"id": "wall", "shape": "square", "x": 0, "y": 0, "width": 170, "height": 40, "locked": True}],
    "limits": {"kind": "poly", "points": [{"x": 0, "y": 0}, {"x": 600, "y": 0}, {"x": 300, "y": 500}]},
}


def test_load_layout_builds_store_and_boundary():
    store, constraint = load_layout(LAYOUT)

    t1 = store.get('t1')
    assert t1.status == 'reserved'
    assert t1.reservation_id == 'r-42'
    assert store.get('t2').status == 'free'
    assert store.get('t2').number == 'Bar'
    assert store.get('wall').locked is True
    assert isinstance(constraint, PolygonBoundary)
    assert constraint.points[2] == Point(300, 500)


def test_rect_and_missing_limits():
    _, constraint = load_layout({"limits": {"kind": "rect", "rect": {"x": 0, "y": 0, "width": 300, "height": 200}}})
    assert constraint == RectBoundary(Rect(0, 0, 300, 200))

    store, constraint = load_layout({})
    assert len(store) == 0
    assert constraint is NO_BOUNDARY


def test_dump_layout_uses_document_keys():
    store, constraint = load_layout(LAYOUT)

    data = dump_layout(store, constraint)

    assert data["tables"][0]["reservationId"] == "r-42"
    assert "reservationId" not in data["tables"][1]
    assert "combinedWith" not in data["tables"][1]
    assert data["limits"]["kind"] == "poly"
    assert data["limits"]["points"][1] == {"x": 600.0, "y": 0.0}
    assert dump_layout(store)["limits"] == {"kind": "none"}


def test_write_then_load_file(tmp_path):
    store, constraint = load_layout(LAYOUT)
    path = tmp_path / "nested" / "layout.json"

    write_layout_file(path, store, constraint)

    text = path.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    loaded_store, loaded_constraint = load_layout_file(path)
    assert [t.id for t in loaded_store.tables] == ['t1', 't2']
    assert loaded_constraint == constraint


@pytest.mark.parametrize(
    'data, message',
    [
        ({"tables": [{"shape": "round", "x": 0, "y": 0, "width": 80, "height": 80}]}, 'tables[0]: missing "id"'),
        ({"tables": [{"id": "a", "shape": "hex", "x": 0, "y": 0, "width": 80, "height": 80}]}, 'shape must be'),
        ({"objects": [{"id": "o", "shape": "round", "x": "0", "y": 0, "width": 80, "height": 80}]}, '"x" must be a number'),
        (
            {"tables": [{"id": "a", "shape": "round", "x": 0, "y": 0, "width": 80, "height": 80, "status": "dirty"}]},
            'status must be',
        ),
        ({"limits": {"kind": "circle"}}, 'kind must be none|rect|poly'),
        ({"limits": {"kind": "rect"}}, 'limits: missing "rect"'),
        ({"tables": [42]}, 'tables[0]: expected an object (got int)'),
        ({"objects": {"id": "o"}}, '"objects" must be a list'),
        (
            {"tables": [{"id": "a", "shape": "round", "x": 0, "y": 0, "width": 80, "height": 80, "capacity": "four"}]},
            '"capacity" must be a positive integer',
        ),
        (
            {
                "tables": [{"id": "a", "shape": "round", "x": 0, "y": 0, "width": 80, "height": 80}],
                "objects": [{"id": "a", "shape": "square", "x": 0, "y": 0, "width": 40, "height": 40}],
            },
            'entity id "a" already exists',
        ),
        ({"limits": {"kind": "poly", "points": [[0, 0]]}}, 'limits.points[0]: expected an object'),
        ({"limits": "rect"}, 'limits: expected an object'),
    ],
)
def test_invalid_documents_raise_format_errors(data, message):
    with pytest.raises(LayoutFormatError) as exc:
        load_layout(data)
    assert message in str(exc.value)


def test_invalid_json_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LayoutFormatError, match="invalid JSON"):
        load_layout_file(path)

    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(LayoutFormatError, match="must be an object"):
        load_layout_file(path)

    path.write_bytes(b'{"tables": "\xff\xfe"}')
    with pytest.raises(LayoutFormatError, match="not UTF-8"):
        load_layout_file(path)
