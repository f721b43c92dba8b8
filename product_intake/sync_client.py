import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .compression import strip_data_uri_prefix
from .errors import MalformedResponse, NetworkError, PreconditionFailed
from .models import Row

log = logging.getLogger("product_intake.sync")

DEFAULT_ENDPOINT = "https://b09f8zu7hj.execute-api.us-east-1.amazonaws.com/default/notfoundproductslist"
DEFAULT_TIMEOUT = 30.0


@dataclass
class FetchedTable:
	headers: List[str]
	rows: List[Row] = field(default_factory=list)


def build_update_payload(row: Row, row_index: int, folder_name: str) -> Dict[str, str]:
	return {
		"folderName": folder_name,
		"row": str(row_index + 1),
		"barcode": row.barcode or "",
		"frontImage": strip_data_uri_prefix(row.front_image),
		"backImage": strip_data_uri_prefix(row.back_image),
	}


class SyncClient:
	def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
		self.endpoint = endpoint.rstrip("/")
		self.timeout = timeout
		self.session = session or requests.Session()
		self.session.headers.update({"Accept": "application/json"})

	def _send(self, method: str, **kwargs) -> requests.Response:
		try:
			r = self.session.request(method, self.endpoint, timeout=self.timeout, **kwargs)
		except requests.RequestException as e:
			raise NetworkError(f"Network request failed: {e}") from e
		if not 200 <= r.status_code < 300:
			raise NetworkError(f"HTTP error! status: {r.status_code}", status_code=r.status_code)
		return r

	@staticmethod
	def _json(r: requests.Response) -> Any:
		try:
			return r.json()
		except ValueError as e:
			raise MalformedResponse("Response body is not valid JSON.") from e

	def update(self, row: Row, row_index: int, folder_name: Optional[str]) -> Dict[str, Any]:
		"""POST one row to the collection endpoint and return the decoded ack."""
		if not folder_name:
			raise PreconditionFailed("Folder name not set.")
		body = build_update_payload(row, row_index, folder_name)
		log.info(
			"Updating row: %s barcode: %s frontImage size: %s backImage size: %s",
			body["row"], body["barcode"], len(body["frontImage"]), len(body["backImage"]),
		)
		r = self._send("POST", json=body)
		ack = self._json(r)
		log.info("Update response: %s", ack)
		return ack

	def fetch_table(self, folder_name: Optional[str]) -> FetchedTable:
		if not folder_name:
			raise PreconditionFailed("Folder name not found. Please set a folder name first.")
		r = self._send("GET", params={"folderName": folder_name})
		payload = self._json(r)
		if not isinstance(payload, dict) or payload.get("data") is None or payload.get("headers") is None:
			raise MalformedResponse("Invalid API response format.")
		items = payload["data"]
		if not isinstance(items, list):
			raise MalformedResponse("Invalid API response format.")
		# rows are identified by position, so one bad item invalidates the whole table
		if not all(isinstance(item, dict) for item in items):
			raise MalformedResponse("Invalid API response format.")
		rows = [Row.from_wire(item) for item in items]
		return FetchedTable(headers=list(payload["headers"]), rows=rows)
