from collections import namedtuple
from itertools import permutations

from campusconnect.grouping import cross_tab, flatten, group_by, group_nested

Row = namedtuple("Row", ["day", "subject", "student", "roll", "status"])

RECORDS = [
    Row("2024-03-02", "Maths", "Bilal", 2, "present"),
    Row("2024-03-02", "Maths", "Asha", 1, "absent"),
    Row("2024-03-02", "Science", "Asha", 1, "present"),
    Row("2024-03-01", "Maths", "Asha", 1, None),
]


def test_group_by_keeps_first_seen_order():
    grouped = group_by(RECORDS, lambda r: r.day)
    assert list(grouped) == ["2024-03-02", "2024-03-01"]
    assert [r.student for r in grouped["2024-03-02"]] == ["Bilal", "Asha", "Asha"]


def test_group_by_empty_input():
    assert group_by([], lambda r: r.day) == {}


def test_group_nested_buckets_do_not_depend_on_input_order():
    expected = {
        (day, subject): set(bucket)
        for day, subjects in group_nested(RECORDS, lambda r: r.day, lambda r: r.subject).items()
        for subject, bucket in subjects.items()
    }
    for order in permutations(RECORDS):
        nested = group_nested(order, lambda r: r.day, lambda r: r.subject)
        buckets = {
            (day, subject): set(bucket)
            for day, subjects in nested.items()
            for subject, bucket in subjects.items()
        }
        assert buckets == expected, f"Buckets changed for input order {order}"


def test_group_nested_and_flatten_are_stable():
    nested = group_nested(RECORDS, lambda r: r.day, lambda r: r.subject)
    assert list(nested["2024-03-02"]) == ["Maths", "Science"]

    flat = flatten(nested)
    assert sorted(flat) == sorted(RECORDS)
    # Regrouping the flattened output reproduces the same structure
    assert group_nested(flat, lambda r: r.day, lambda r: r.subject) == nested


def test_cross_tab_fills_missing_cells_with_sentinel():
    day = [r for r in RECORDS if r.day == "2024-03-02"]
    table = cross_tab(
        day,
        row_key=lambda r: r.student,
        column_key=lambda r: r.subject,
        value=lambda r: r.status,
        sentinel="Not Marked",
        row_sort=lambda r: r.roll,
    )
    assert table.rows == ["Asha", "Bilal"]
    assert table.columns == ["Maths", "Science"]
    assert table.get("Bilal", "Science") == "Not Marked"
    assert table.get("Asha", "Science") == "present"


def test_cross_tab_none_value_becomes_sentinel():
    table = cross_tab(
        RECORDS[3:],
        row_key=lambda r: r.student,
        column_key=lambda r: r.subject,
        value=lambda r: r.status,
        sentinel="Not Marked",
    )
    assert table.cells == {"Asha": {"Maths": "Not Marked"}}


def test_cross_tab_later_record_wins_for_duplicate_cell():
    records = [
        Row("2024-03-02", "Maths", "Asha", 1, "absent"),
        Row("2024-03-02", "Maths", "Asha", 1, "present"),
    ]
    table = cross_tab(
        records,
        row_key=lambda r: r.student,
        column_key=lambda r: r.subject,
        value=lambda r: r.status,
        sentinel="—",
    )
    assert table.get("Asha", "Maths") == "present"


def test_cross_tab_column_sort():
    table = cross_tab(
        RECORDS,
        row_key=lambda r: r.student,
        column_key=lambda r: r.subject,
        value=lambda r: r.status,
        sentinel="—",
        column_sort=lambda s: s,
    )
    assert table.columns == ["Maths", "Science"]
    assert table.row_records["Asha"].day == "2024-03-02"
