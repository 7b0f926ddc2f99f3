import pytest

from motionmatch.record import Record, Records


def test_new_records_have_requested_length_and_empty_values():
    records = Records(4)
    assert len(records) == 4
    assert all(r.value is None for r in records)


def test_push_keeps_length_and_puts_newest_first():
    records = Records(3)
    records.push("a", 0.1)
    records.push("b", 0.2)
    assert len(records) == 3
    assert records[0] == Record("b", 0.2)
    assert records[1] == Record("a", 0.1)
    assert records[2].value is None


def test_oldest_record_falls_off():
    records = Records(2)
    for value in ("a", "b", "c"):
        records.push(value, 0.5)
    assert [r.value for r in records] == ["c", "b"]


def test_resize_resets_when_length_changes():
    records = Records(2)
    records.push("a", 0.1)
    records.resize(5)
    assert len(records) == 5
    assert all(r.value is None for r in records)


def test_resize_to_same_length_keeps_contents():
    records = Records(2)
    records.push("a", 0.1)
    records.resize(2)
    assert records[0].value == "a"


def test_push_into_empty_records_grows_to_one():
    records = Records(0)
    records.push("x", 0.3)
    records.push("y", 0.3)
    assert [r.value for r in records] == ["y"]


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        Records(-1)


def test_index_out_of_range():
    records = Records(1)
    records.push("a", 0.1)
    assert records[0] == Record("a", 0.1)
    with pytest.raises(IndexError):
        _ = records[1]