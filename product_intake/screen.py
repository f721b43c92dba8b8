"""Intake screen controller.

Holds the row table plus the single active flow (scan, capture or barcode edit)
and exposes one method per user action. Handlers never raise on expected
failures: they alert through the notifier and leave the rows as they were.
"""
import base64
import binascii
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .compression import Codec, compress
from .errors import IntakeError, PermissionDenied, PreconditionFailed, ValidationError
from .exporter import export_rows
from .image_discovery import resolve_image
from .models import WIRE_TO_FIELD, Row, check_index
from .notify import ConsoleNotifier, Notifier
from .row_store import RowStore
from .storage import FOLDER_NAME_KEY, LocalStorage
from .sync_client import SyncClient
from .table_view import HEADERS_APPEND, HEADERS_FETCH

log = logging.getLogger("product_intake.screen")

DEFAULT_CACHE_DIR = os.path.join(tempfile.gettempdir(), "product_intake")
TEMP_IMAGE_NAME = "tempImage.jpg"
EXPORT_NAME = "data.xlsx"

IMAGE_SIDES = {"front": "front_image", "back": "back_image"}


class Variant(str, Enum):
	APPEND = "append"  # starts blank, adds a blank row after each upload
	FETCH = "fetch"    # loads existing rows from the remote on mount


class Mode(str, Enum):
	IDLE = "idle"
	SCANNING = "scanning"
	IMAGE_CAPTURING = "image_capturing"
	EDITING_BARCODE = "editing_barcode"


@dataclass(frozen=True)
class FlowState:
	mode: Mode = Mode.IDLE
	index: Optional[int] = None
	draft: str = ""


IDLE = FlowState()


class IntakeScreen:
	def __init__(
		self,
		variant: Variant,
		sync_client: SyncClient,
		storage: LocalStorage,
		notifier: Optional[Notifier] = None,
		codec: Optional[Codec] = None,
		cache_dir: Optional[str] = None,
		media_permission: Optional[Callable[[], bool]] = None,
		share: Optional[Callable[[str], None]] = None,
	):
		self.variant = Variant(variant)
		self.sync_client = sync_client
		self.storage = storage
		self.notifier = notifier or ConsoleNotifier()
		self.codec = codec
		self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
		self._request_media_permission = media_permission or (lambda: True)
		self.share = share

		self.state: FlowState = IDLE
		self.folder_name: Optional[str] = None
		self.has_media_permission: Optional[bool] = None
		self.remote_headers: List[str] = []
		if self.variant is Variant.APPEND:
			self.store = RowStore([Row.blank()])
		else:
			self.store = RowStore()

	# ---- read side ----

	@property
	def rows(self):
		return self.store.rows

	@property
	def headers(self) -> List[str]:
		return list(HEADERS_APPEND if self.variant is Variant.APPEND else HEADERS_FETCH)

	@property
	def extra_columns(self) -> List[str]:
		"""Remote columns the row model does not cover, in the remote's order."""
		known = set(WIRE_TO_FIELD) | {"image"}
		columns: List[str] = []
		for header in self.remote_headers:
			name = str(header).strip()
			if name and name not in known and name not in columns:
				columns.append(name)
		return columns

	def image_at(self, index: int, field: str) -> Optional[str]:
		check_index(index, len(self.store))
		return getattr(self.store[index], field)

	# ---- lifecycle ----

	def mount(self) -> None:
		self.folder_name = self.storage.get_item(FOLDER_NAME_KEY)
		if self.variant is Variant.FETCH:
			self.load()

	def load(self) -> bool:
		"""Replace the rows with the remote table plus one blank row."""
		folder = self.storage.get_item(FOLDER_NAME_KEY)
		if not folder:
			self._alert("Error", "Folder name not found. Please set a folder name first.")
			return False
		self.folder_name = folder
		self.has_media_permission = bool(self._request_media_permission())
		try:
			table = self.sync_client.fetch_table(folder)
		except IntakeError as e:
			log.error("Error fetching data from API: %s", e)
			self._alert("Error", f"Failed to fetch data: {e.message}")
			return False
		self.remote_headers = table.headers
		self.store.replace_all(list(table.rows) + [Row.blank()])
		return True

	def refresh(self) -> None:
		if self.variant is Variant.APPEND:
			self.store.reset()
		else:
			self.load()

	# ---- scan / capture flow ----

	def _enter(self, mode: Mode, index: int, draft: str = "") -> bool:
		try:
			if self.state.mode is not Mode.IDLE:
				raise PreconditionFailed("Finish or close the current scan first.")
			check_index(index, len(self.store))
		except IntakeError as e:
			self._report(e)
			return False
		self.state = FlowState(mode=mode, index=index, draft=draft)
		return True

	def start_scanning(self, index: int) -> bool:
		return self._enter(Mode.SCANNING, index)

	def start_image_capture(self, index: int) -> bool:
		return self._enter(Mode.IMAGE_CAPTURING, index)

	def close_scanner(self) -> None:
		if self.state.mode is Mode.SCANNING:
			self.state = IDLE

	def close_image_capture(self) -> None:
		if self.state.mode is Mode.IMAGE_CAPTURING:
			self.state = IDLE

	def on_barcode_scanned(self, value: str) -> bool:
		if self.state.mode is not Mode.SCANNING:
			return False
		try:
			self.store.set_field(self.state.index, "barcode", value)
		except IntakeError as e:
			self._report(e)
			return False
		self.state = IDLE
		self._alert("Barcode scanned", f"Data: {value}")
		return True

	def on_picture_taken(self, picture_base64: str, side: str) -> bool:
		"""Compress a captured picture into the front or back image of the active row."""
		if self.state.mode not in (Mode.SCANNING, Mode.IMAGE_CAPTURING):
			self._report(PreconditionFailed("No row is waiting for a picture."))
			return False
		field = IMAGE_SIDES.get(side)
		if field is None:
			self._report(ValidationError(f"Unknown image side '{side}'."))
			return False
		index = self.state.index
		try:
			temp_path = self._write_temp_image(picture_base64)
			compressed = compress(temp_path, codec=self.codec)
		except (IntakeError, OSError, binascii.Error) as e:
			log.error("Error compressing scanned picture: %s", e)
			self._alert("Error", "Failed to compress scanned image.")
			return False
		try:
			self.store.set_field(index, field, compressed.data_uri)
		except IntakeError as e:
			self._report(e)
			return False
		self.state = IDLE
		return True

	def _write_temp_image(self, picture_base64: str) -> str:
		os.makedirs(self.cache_dir, exist_ok=True)
		path = os.path.join(self.cache_dir, TEMP_IMAGE_NAME)
		with open(path, "wb") as f:
			f.write(base64.b64decode(picture_base64, validate=True))
		return path

	def pick_image(self, index: int, path: str) -> bool:
		if self.has_media_permission is None:
			self.has_media_permission = bool(self._request_media_permission())
		if not self.has_media_permission:
			self._report(PermissionDenied("Please grant media library access."))
			return False
		try:
			check_index(index, len(self.store))
			compressed = compress(resolve_image(path), codec=self.codec)
		except IntakeError as e:
			self._report(e)
			return False
		except (OSError, ValueError) as e:
			log.error("Error picking image: %s", e)
			self._alert("Error", "Failed to pick image.")
			return False
		self.store.set_field(index, "images", compressed.data_uri)
		return True

	# ---- barcode edit flow ----

	def edit_barcode(self, index: int) -> bool:
		current = self.store[index].barcode if 0 <= index < len(self.store) else None
		return self._enter(Mode.EDITING_BARCODE, index, draft=current or "")

	def set_draft(self, value: str) -> None:
		if self.state.mode is Mode.EDITING_BARCODE:
			self.state = FlowState(mode=Mode.EDITING_BARCODE, index=self.state.index, draft=value)

	def cancel_barcode_edit(self) -> None:
		if self.state.mode is Mode.EDITING_BARCODE:
			self.state = IDLE

	def confirm_barcode_edit(self) -> bool:
		if self.state.mode is not Mode.EDITING_BARCODE:
			self._alert("Error", "No barcode selected for updating.")
			return False
		draft = self.state.draft
		if not draft.strip():
			self._report(ValidationError("Barcode cannot be empty."))
			return False
		index = self.state.index
		try:
			self.store.set_field(index, "barcode", draft)
		except IntakeError as e:
			self._report(e)
			return False
		self.state = IDLE
		self.update(index)
		return True

	# ---- remote sync ----

	def _folder_for_update(self) -> Optional[str]:
		if self.variant is Variant.APPEND or not self.folder_name:
			self.folder_name = self.storage.get_item(FOLDER_NAME_KEY)
		return self.folder_name

	def update(self, index: int) -> bool:
		"""Send one row to the remote collection; one request, no retry."""
		try:
			check_index(index, len(self.store))
		except IntakeError as e:
			self._report(e)
			return False
		folder = self._folder_for_update()
		if not folder:
			self._alert("Error", "Folder name not set.")
			return False
		try:
			self.sync_client.update(self.store[index], index, folder)
		except IntakeError as e:
			log.error("Error updating data: %s", e)
			self._alert("Error", f"Failed to update data: {e.message}")
			return False
		self._alert("Success", "Data updated successfully.")
		if self.variant is Variant.APPEND:
			self.store.append(Row.blank())
		return True

	# ---- export ----

	def download(self, path: Optional[str] = None) -> Optional[str]:
		target = path or os.path.join(self.cache_dir, EXPORT_NAME)
		try:
			export_rows(self.store.rows, target)
		except (OSError, ValueError) as e:
			log.error("Error saving file: %s", e)
			self._alert("Error", f"Failed to save file: {e}")
			return None
		if self.share is None:
			self._alert("Error", "Sharing is not available on this device")
		else:
			self.share(target)
		return target

	# ---- alerts ----

	def _alert(self, title: str, message: str) -> None:
		self.notifier.alert(title, message)

	def _report(self, err: IntakeError) -> None:
		log.error("%s: %s", type(err).__name__, err.message)
		self._alert(err.title, err.message)
