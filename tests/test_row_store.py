import pytest

from product_intake.errors import IntakeError, RowIndexError
from product_intake.models import Row
from product_intake.row_store import RowStore


def test_append_and_set_field_replace_the_sequence():
	store = RowStore([Row.blank()])
	before = store.rows
	store.append(Row(barcode="111"))
	store.set_field(0, "barcode", "000")
	assert [r.barcode for r in store] == ["000", "111"]
	# earlier snapshot untouched
	assert before == (Row.blank(),)
	assert before is not store.rows


def test_set_field_out_of_range_leaves_rows_alone():
	store = RowStore([Row(barcode="a"), Row(barcode="b")])
	snapshot = store.rows
	for bad in (2, -1, 99):
		with pytest.raises(RowIndexError) as info:
			store.set_field(bad, "barcode", "zzz")
		assert isinstance(info.value, IndexError)
		assert isinstance(info.value, IntakeError)
	assert store.rows == snapshot


def test_set_field_rejects_unknown_field():
	store = RowStore([Row.blank()])
	with pytest.raises(ValueError):
		store.set_field(0, "price", "1.00")


def test_reset_and_replace_all():
	store = RowStore()
	assert len(store) == 0
	store.replace_all([Row(barcode="1"), Row(barcode="2"), Row(barcode="3")])
	assert len(store) == 3 and store[2].barcode == "3"
	store.reset()
	assert store.rows == (Row.blank(),)


def test_row_wire_mapping_keeps_extra_columns():
	row = Row.from_wire({" barcode ": "42", "frontImage": "", "Notes ": "dented", "images": "http://img"})
	assert row.barcode == "42"
	assert row.front_image is None
	assert row.back_image is None
	assert row.images == "http://img"
	assert row.extra == {"Notes": "dented"}
	assert row.to_wire() == {"Notes": "dented", "barcode": "42", "frontImage": None, "backImage": None, "images": "http://img"}


def test_row_from_wire_stringifies_numeric_cells():
	row = Row.from_wire({"barcode": 4006381333931, "frontImage": 0, "backImage": "", "images": None, "Qty": 3})
	assert row.barcode == "4006381333931"
	assert row.front_image == "0"
	assert row.back_image is None
	assert row.images is None
	assert row.extra == {"Qty": 3}


def test_to_wire_puts_modelled_fields_before_extra_columns():
	row = Row(barcode="1", extra={"Shelf": "B2", "Aisle": "4"})
	assert list(row.to_wire()) == ["barcode", "frontImage", "backImage", "images", "Shelf", "Aisle"]
