import os
from typing import Any, Dict, Iterable, List

import pandas as pd

from .models import Row

SHEET_NAME = "Sheet1"
EMPTY_COLUMNS = ["frontImage", "backImage", "images", "Image", "Barcode"]


def export_records(rows: Iterable[Row]) -> List[Dict[str, Any]]:
	"""Flatten rows for the sheet.

	Every wire column except `barcode` and `image` is kept (extra remote columns in
	the order they arrived), then `Image` and `Barcode` are appended last.
	"""
	records: List[Dict[str, Any]] = []
	for r in rows:
		wire = r.to_wire()
		picked = wire.pop("image", None)
		wire.pop("barcode", None)
		rec: Dict[str, Any] = {k: ("" if v is None else v) for k, v in wire.items()}
		rec["Image"] = r.images or picked or ""
		rec["Barcode"] = r.barcode or ""
		records.append(rec)
	return records


def export_rows(rows: Iterable[Row], path: str) -> str:
	records = export_records(rows)
	df = pd.DataFrame.from_records(records)
	if df.empty:
		df = pd.DataFrame(columns=EMPTY_COLUMNS)
	parent = os.path.dirname(os.path.abspath(path))
	os.makedirs(parent, exist_ok=True)
	df.to_excel(path, index=False, sheet_name=SHEET_NAME, engine="openpyxl")
	return path
