from typing import Iterable, Iterator, Optional, Tuple

from .models import Row, check_index


class RowStore:
	"""Ordered rows shown in the table. Every write swaps in a new tuple."""

	def __init__(self, rows: Optional[Iterable[Row]] = None):
		self._rows: Tuple[Row, ...] = tuple(rows or ())

	@property
	def rows(self) -> Tuple[Row, ...]:
		return self._rows

	def __len__(self) -> int:
		return len(self._rows)

	def __getitem__(self, index: int) -> Row:
		return self._rows[index]

	def __iter__(self) -> Iterator[Row]:
		return iter(self._rows)

	def append(self, row: Row) -> None:
		self._rows = self._rows + (row,)

	def set_field(self, index: int, name: str, value: Optional[str]) -> None:
		check_index(index, len(self._rows))
		updated = self._rows[index].with_field(name, value)
		self._rows = self._rows[:index] + (updated,) + self._rows[index + 1:]

	def replace_all(self, rows: Iterable[Row]) -> None:
		self._rows = tuple(rows)

	def reset(self) -> None:
		self._rows = (Row.blank(),)
