from typing import List, Optional, Sequence

from .compression import strip_data_uri_prefix
from .models import Row, base64_size_kb

HEADERS_APPEND = ["Barcode", "Image", "Update", "Front Image", "Back Image"]
HEADERS_FETCH = ["Barcode", "Front Image", "Back Image", "Images", "Update"]


def describe_image(value: Optional[str]) -> str:
	"""Short summary of an image cell, e.g. 'jpeg 12.3KB'."""
	if not value:
		return ""
	kind = "image"
	if value.startswith("data:image/"):
		kind = value[len("data:image/"):].split(";", 1)[0]
	elif value.startswith("http://") or value.startswith("https://"):
		return value
	return f"{kind} {base64_size_kb(strip_data_uri_prefix(value)):.1f}KB"


def _cell_for(header: str, r: Row) -> str:
	if header == "Barcode":
		return r.barcode or "Scan"
	if header == "Front Image":
		return "View Front Image" if r.front_image else ""
	if header == "Back Image":
		return "View Back Image" if r.back_image else ""
	if header == "Images":
		return "View Image" if r.images else "Scan"
	if header == "Image":
		return "Scan Image"
	if header == "Update":
		return "Update"
	return ""


def build_table(rows: Sequence[Row], headers: Sequence[str], extra_columns: Sequence[str] = ()) -> str:
	"""Return a plain-text table: row number, `headers`, then any remote-only columns."""
	head = ["#"] + list(headers) + list(extra_columns)
	body: List[List[str]] = []
	for i, r in enumerate(rows, start=1):
		cells = [_cell_for(h, r) for h in headers]
		cells += ["" if r.extra.get(c) is None else str(r.extra.get(c)) for c in extra_columns]
		body.append([str(i)] + cells)

	widths = [max(len(line[c]) for line in [head] + body) for c in range(len(head))]

	def fmt(cells: List[str]) -> str:
		return " | ".join(cell.ljust(widths[c]) for c, cell in enumerate(cells)).rstrip()

	lines = [fmt(head), "-+-".join("-" * w for w in widths)]
	lines.extend(fmt(line) for line in body)
	return "\n".join(lines)
