from product_intake.storage import FOLDER_NAME_KEY, LocalStorage


def test_missing_file_reads_empty(tmp_path):
	s = LocalStorage(str(tmp_path / "nested" / "storage.json"))
	assert s.get_item(FOLDER_NAME_KEY) is None


def test_set_get_remove(tmp_path):
	path = tmp_path / "nested" / "storage.json"
	s = LocalStorage(str(path))
	s.set_item(FOLDER_NAME_KEY, "shelf-A")
	s.set_item("other", "x")
	assert path.exists()
	assert LocalStorage(str(path)).get_item(FOLDER_NAME_KEY) == "shelf-A"
	s.remove_item(FOLDER_NAME_KEY)
	assert s.get_item(FOLDER_NAME_KEY) is None
	assert s.get_item("other") == "x"


def test_empty_file_reads_empty(tmp_path):
	path = tmp_path / "storage.json"
	path.write_text("")
	assert LocalStorage(str(path)).get_item(FOLDER_NAME_KEY) is None


def test_corrupt_file_reads_empty_and_can_be_rewritten(tmp_path):
	path = tmp_path / "storage.json"
	path.write_text("{not json")
	s = LocalStorage(str(path))
	assert s.get_item(FOLDER_NAME_KEY) is None
	s.set_item(FOLDER_NAME_KEY, "shelf-A")
	assert s.get_item(FOLDER_NAME_KEY) == "shelf-A"
