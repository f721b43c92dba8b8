import base64
import io
import random
from typing import Any, List, Optional, Tuple

import pytest
from PIL import Image

from product_intake.notify import Notifier
from product_intake.screen import IntakeScreen, Variant
from product_intake.storage import FOLDER_NAME_KEY, LocalStorage
from product_intake.sync_client import SyncClient


class RecordingNotifier(Notifier):
	def __init__(self):
		self.alerts: List[Tuple[str, str]] = []

	def alert(self, title: str, message: str) -> None:
		self.alerts.append((title, message))

	@property
	def titles(self) -> List[str]:
		return [t for t, _m in self.alerts]


class FakeResponse:
	def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
		self.status_code = status_code
		self._payload = payload
		self.text = text

	def json(self):
		if self.text is not None:
			raise ValueError("No JSON object could be decoded")
		return self._payload


class FakeSession:
	"""Stands in for requests.Session: records calls, replays queued responses."""

	def __init__(self, *responses):
		self.headers = {}
		self.calls: List[dict] = []
		self.responses = list(responses)

	def queue(self, response) -> None:
		self.responses.append(response)

	def request(self, method, url, timeout=None, **kwargs):
		self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
		resp = self.responses.pop(0) if self.responses else FakeResponse(200, {"status": "ok"})
		if isinstance(resp, Exception):
			raise resp
		return resp


def make_image(width: int = 1200, height: int = 900, noisy: bool = True, mode: str = "RGB") -> Image.Image:
	if not noisy:
		return Image.new(mode, (width, height), color=(200, 30, 30) if mode == "RGB" else (200, 30, 30, 128))
	rnd = random.Random(42)
	channels = len(mode)
	data = rnd.randbytes(width * height * channels)
	return Image.frombytes(mode, (width, height), data)


def jpeg_base64(img: Image.Image, quality: int = 90) -> str:
	buf = io.BytesIO()
	img.convert("RGB").save(buf, format="JPEG", quality=quality)
	return base64.b64encode(buf.getvalue()).decode("ascii")


def tiny_codec(source, width, quality):
	return "QUJD"


@pytest.fixture
def notifier():
	return RecordingNotifier()


@pytest.fixture
def session():
	return FakeSession()


@pytest.fixture
def client(session):
	return SyncClient(endpoint="https://example.test/default/notfoundproductslist", timeout=5, session=session)


@pytest.fixture
def storage(tmp_path):
	s = LocalStorage(str(tmp_path / "storage.json"))
	s.set_item(FOLDER_NAME_KEY, "shelf-A")
	return s


@pytest.fixture
def make_screen(client, storage, notifier, tmp_path):
	def _make(variant=Variant.APPEND, **kwargs):
		kwargs.setdefault("cache_dir", str(tmp_path / "cache"))
		return IntakeScreen(variant, client, storage, notifier=notifier, **kwargs)
	return _make
