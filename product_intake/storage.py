import json
import logging
import os
from typing import Dict, Optional

FOLDER_NAME_KEY = "folderName"
DEFAULT_STORAGE_PATH = os.path.join(os.path.expanduser("~"), ".product_intake", "storage.json")

log = logging.getLogger("product_intake.storage")


class LocalStorage:
	"""Small string key-value store persisted as one JSON file."""

	def __init__(self, path: str = DEFAULT_STORAGE_PATH):
		self.path = path

	def _read(self) -> Dict[str, str]:
		if not os.path.exists(self.path):
			return {}
		with open(self.path, "r", encoding="utf-8") as f:
			raw = f.read().strip()
		if not raw:
			return {}
		try:
			data = json.loads(raw)
		except ValueError as e:
			log.warning("Ignoring unreadable storage file %s: %s", self.path, e)
			return {}
		return data if isinstance(data, dict) else {}

	def _write(self, data: Dict[str, str]) -> None:
		parent = os.path.dirname(os.path.abspath(self.path))
		os.makedirs(parent, exist_ok=True)
		with open(self.path, "w", encoding="utf-8") as f:
			json.dump(data, f, indent=2)

	def get_item(self, key: str) -> Optional[str]:
		value = self._read().get(key)
		return None if value is None else str(value)

	def set_item(self, key: str, value: str) -> None:
		data = self._read()
		data[key] = value
		self._write(data)

	def remove_item(self, key: str) -> None:
		data = self._read()
		if data.pop(key, None) is not None:
			self._write(data)
