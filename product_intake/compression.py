import base64
import io
import logging
from typing import Callable, Optional, Union

from PIL import Image

from .errors import CompressionError
from .models import DATA_URI_PREFIX, CompressedImage, base64_size_kb

log = logging.getLogger("product_intake.compression")

MAX_SIZE_KB = 50
MAX_ATTEMPTS = 10
START_WIDTH = 800
START_QUALITY = 0.5
MIN_WIDTH = 100
MIN_QUALITY = 0.1

ImageSource = Union[str, bytes, Image.Image]
Codec = Callable[[ImageSource, int, float], str]


def _open(source: ImageSource) -> Image.Image:
	if isinstance(source, Image.Image):
		return source
	if isinstance(source, (bytes, bytearray)):
		return Image.open(io.BytesIO(source))
	return Image.open(source)


def pillow_codec(source: ImageSource, width: int, quality: float) -> str:
	"""Resize `source` to `width` (aspect kept) and return it as base64 JPEG."""
	img = _open(source)
	w, h = img.size
	height = max(1, round(h * width / float(w)))
	resized = img.resize((width, height), Image.LANCZOS)
	if resized.mode != "RGB":
		resized = resized.convert("RGB")
	buf = io.BytesIO()
	resized.save(buf, format="JPEG", quality=max(1, int(round(quality * 100))))
	return base64.b64encode(buf.getvalue()).decode("ascii")


def compress(source: ImageSource, codec: Optional[Codec] = None) -> CompressedImage:
	"""Shrink an image until its JPEG encoding fits MAX_SIZE_KB.

	Each attempt halves the width (floor 100) and drops quality by 0.1 (floor 0.1).
	The budget is soft: after MAX_ATTEMPTS the last, smallest, result is returned.
	"""
	encode = codec or pillow_codec
	width = START_WIDTH
	quality = START_QUALITY
	result: Optional[CompressedImage] = None

	for _attempt in range(MAX_ATTEMPTS):
		try:
			b64 = encode(source, width, quality)
		except CompressionError:
			raise
		except (OSError, ValueError) as e:
			log.error("Error compressing image: %s", e)
			raise CompressionError(f"Could not compress image: {e}") from e
		result = CompressedImage(base64=b64, width=width, quality=quality)
		size_kb = base64_size_kb(b64)
		if size_kb <= MAX_SIZE_KB:
			log.info("Compressed under %sKB at width=%s, quality=%s, size=%.2fKB", MAX_SIZE_KB, width, quality, size_kb)
			return result
		width = max(MIN_WIDTH, width // 2)
		quality = max(MIN_QUALITY, round(quality - 0.1, 1))

	log.warning("Could not get under %sKB after %s attempts, returning smallest.", MAX_SIZE_KB, MAX_ATTEMPTS)
	return result  # type: ignore[return-value]


def to_data_uri(b64: str) -> str:
	return f"{DATA_URI_PREFIX}{b64}"


def strip_data_uri_prefix(value: Optional[str]) -> str:
	"""Return the payload after the first comma, or the value itself."""
	if not value:
		return ""
	_head, sep, payload = value.partition(",")
	return payload if sep else value
