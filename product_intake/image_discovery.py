import base64
import os

SUPPORTED_EXT = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"}


def resolve_image(src_path: str) -> str:
	"""Return the absolute path of a supported image file.

	- Raises FileNotFoundError when nothing exists at `src_path`.
	- Raises ValueError for directories, hidden/metadata files and unsupported extensions.
	"""
	abspath = os.path.abspath(os.path.expanduser(src_path))
	if not os.path.exists(abspath):
		raise FileNotFoundError(f"Image not found: {abspath}")
	if not os.path.isfile(abspath):
		raise ValueError(f"Not an image file: {abspath}")

	name = os.path.basename(abspath)
	# Skip macOS resource fork files (._filename) and hidden files
	if name.startswith("._") or name.startswith("."):
		raise ValueError(f"Not an image file: {abspath}")

	_root, ext = os.path.splitext(name)
	if ext.lower() not in SUPPORTED_EXT:
		raise ValueError(f"Unsupported image type '{ext}': {abspath}")
	return abspath


def read_as_base64(src_path: str) -> str:
	"""Read an image the way a camera hands over a picture: base64 text."""
	with open(resolve_image(src_path), "rb") as f:
		return base64.b64encode(f.read()).decode("ascii")
