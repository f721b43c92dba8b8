from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .errors import RowIndexError

DATA_URI_PREFIX = "data:image/jpeg;base64,"

# Row attribute -> wire/column name
FIELD_NAMES: Dict[str, str] = {
	"barcode": "barcode",
	"front_image": "frontImage",
	"back_image": "backImage",
	"images": "images",
}
WIRE_TO_FIELD = {v: k for k, v in FIELD_NAMES.items()}


@dataclass(frozen=True)
class Row:
	barcode: Optional[str] = ""
	front_image: Optional[str] = ""
	back_image: Optional[str] = ""
	images: Optional[str] = ""
	extra: Dict[str, Any] = field(default_factory=dict)  # columns returned by the remote we don't model

	@classmethod
	def blank(cls) -> "Row":
		return cls()

	def with_field(self, name: str, value: Optional[str]) -> "Row":
		if name not in FIELD_NAMES:
			raise ValueError(f"Unknown row field: {name}")
		return replace(self, **{name: value})

	@classmethod
	def from_wire(cls, item: Dict[str, Any]) -> "Row":
		"""Build a row from a fetched item, trimming keys and keeping unknown columns."""
		trimmed = {str(k).strip(): v for k, v in (item or {}).items()}
		values: Dict[str, Optional[str]] = {}
		for wire, name in WIRE_TO_FIELD.items():
			value = trimmed.pop(wire, None)
			# sheet backends hand numeric cells back as numbers
			values[name] = None if value is None or value == "" else str(value)
		return cls(extra=trimmed, **values)

	def to_wire(self) -> Dict[str, Any]:
		"""Modelled fields first, then the extra columns in the order the remote sent them."""
		out: Dict[str, Any] = {wire: getattr(self, name) for name, wire in FIELD_NAMES.items()}
		for key, value in self.extra.items():
			out.setdefault(key, value)
		return out


@dataclass(frozen=True)
class CompressedImage:
	base64: str
	width: int
	quality: float

	@property
	def size_kb(self) -> float:
		return base64_size_kb(self.base64)

	@property
	def data_uri(self) -> str:
		return f"{DATA_URI_PREFIX}{self.base64}"


def base64_size_kb(b64: str) -> float:
	"""Decoded byte size of a base64 payload, in kilobytes."""
	padding = 2 if b64.endswith("==") else 1 if b64.endswith("=") else 0
	return (len(b64) * 0.75 - padding) / 1024


def check_index(index: int, length: int) -> None:
	if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < length:
		raise RowIndexError(f"Row index {index} is out of range ({length} rows).")
