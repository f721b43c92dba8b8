import argparse
import logging
import os
import shlex
from typing import List, Optional

from dotenv import load_dotenv

from .image_discovery import read_as_base64
from .screen import DEFAULT_CACHE_DIR, IntakeScreen, Mode, Variant
from .storage import DEFAULT_STORAGE_PATH, FOLDER_NAME_KEY, LocalStorage
from .sync_client import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, SyncClient
from .table_view import build_table, describe_image

VIEW_FIELDS = {"front": "front_image", "back": "back_image", "images": "images"}

HELP_TEXT = """Commands (row numbers start at 1):
  show                     print the table
  scan N [VALUE]           scan a barcode into row N (prompts for VALUE)
  front N PATH             capture PATH as the front image of row N
  back N PATH              capture PATH as the back image of row N
  pick N PATH              pick PATH from the library into the Images column of row N
  edit N [VALUE]           edit the barcode of row N and upload the row
  update N                 upload row N
  view N front|back|images describe an image cell
  refresh                  reset (append variant) or re-fetch (fetch variant)
  download [PATH]          export the table to .xlsx
  folder NAME              set the folder name used for uploads
  help                     show this text
  quit                     exit"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
	p = argparse.ArgumentParser(description="Scan barcodes, capture product photos and upload rows to the collection endpoint")
	p.add_argument("--variant", choices=[v.value for v in Variant], help="Screen variant: append (start blank) or fetch (load existing rows)")
	p.add_argument("--endpoint", help="Collection endpoint URL (overrides INTAKE_ENDPOINT)")
	p.add_argument("--folder", help="Folder name to store before the screen mounts")
	p.add_argument("--storage", help="Path of the local key-value store (overrides INTAKE_STORAGE_PATH)")
	p.add_argument("--cache-dir", help="Directory for temporary pictures and exports (overrides INTAKE_CACHE_DIR)")
	p.add_argument("--timeout", type=float, help=f"HTTP timeout in seconds (default: {DEFAULT_TIMEOUT:g})")
	p.add_argument("--no-prompt", action="store_true", help="Fail if the folder name is missing instead of prompting")
	p.add_argument("--verbose", "-v", action="store_true", help="Log compression and upload details")
	return p.parse_args(argv)


def _load_env_chain() -> None:
	load_dotenv()
	if os.path.exists(".env.local"):
		load_dotenv(dotenv_path=".env.local", override=True)
	elif os.path.exists("env.local"):
		load_dotenv(dotenv_path="env.local", override=True)


def prompt_if_empty(prompt_text: str) -> str:
	while True:
		val = (input(prompt_text) or "").strip()
		if val:
			return val
		print("A value is required. Please try again.")


def _share(path: str) -> None:
	print(f"Saved spreadsheet to {path}")


def build_screen(args: argparse.Namespace) -> IntakeScreen:
	_load_env_chain()
	endpoint = args.endpoint or os.environ.get("INTAKE_ENDPOINT", "").strip() or DEFAULT_ENDPOINT
	timeout = args.timeout or float(os.environ.get("INTAKE_TIMEOUT", "").strip() or DEFAULT_TIMEOUT)
	storage_path = args.storage or os.environ.get("INTAKE_STORAGE_PATH", "").strip() or DEFAULT_STORAGE_PATH
	cache_dir = args.cache_dir or os.environ.get("INTAKE_CACHE_DIR", "").strip() or DEFAULT_CACHE_DIR
	variant = args.variant or os.environ.get("INTAKE_VARIANT", "").strip() or Variant.APPEND.value
	try:
		variant = Variant(variant)
	except ValueError:
		raise SystemExit(f"Unknown variant '{variant}'; expected one of: append, fetch")

	storage = LocalStorage(storage_path)
	if args.folder:
		storage.set_item(FOLDER_NAME_KEY, args.folder.strip())
	if not storage.get_item(FOLDER_NAME_KEY):
		if args.no_prompt:
			raise SystemExit("Missing folder name; pass --folder or run without --no-prompt")
		print("Folder name not found. Please enter it now.")
		storage.set_item(FOLDER_NAME_KEY, prompt_if_empty("Folder name: "))

	client = SyncClient(endpoint=endpoint, timeout=timeout)
	return IntakeScreen(variant, client, storage, cache_dir=cache_dir, share=_share)


def _row_index(token: str) -> int:
	return int(token) - 1


def _ask(prompt_text: str) -> str:
	"""Sub-prompt inside a flow; end of input counts as an empty answer."""
	try:
		return input(prompt_text)
	except EOFError:
		print()
		return ""


def _show(screen: IntakeScreen) -> None:
	print(build_table(screen.rows, screen.headers, screen.extra_columns))


def run_command(screen: IntakeScreen, line: str) -> bool:
	"""Execute one prompt line. Returns False when the loop should stop."""
	try:
		parts = shlex.split(line)
	except ValueError as e:
		print(f"Could not parse command: {e}")
		return True
	if not parts:
		return True
	cmd, rest = parts[0].lower(), parts[1:]

	if cmd in ("quit", "exit", "q"):
		return False
	if cmd == "help":
		print(HELP_TEXT)
		return True
	if cmd == "show":
		_show(screen)
		return True
	if cmd == "refresh":
		screen.refresh()
		_show(screen)
		return True
	if cmd == "download":
		screen.download(rest[0] if rest else None)
		return True
	if cmd == "folder":
		if not rest:
			print("Usage: folder NAME")
			return True
		screen.storage.set_item(FOLDER_NAME_KEY, " ".join(rest))
		screen.folder_name = None
		return True

	if not rest:
		print(f"Usage: {cmd} N ...  (see 'help')")
		return True
	try:
		index = _row_index(rest[0])
	except ValueError:
		print(f"Row number must be an integer, got '{rest[0]}'")
		return True
	args = rest[1:]

	if cmd == "scan":
		if screen.start_scanning(index):
			value = args[0] if args else _ask("Barcode (empty to close scanner): ").strip()
			if value:
				screen.on_barcode_scanned(value)
			else:
				screen.close_scanner()
	elif cmd in ("front", "back"):
		if not args:
			print(f"Usage: {cmd} N PATH")
		elif screen.start_image_capture(index):
			try:
				picture = read_as_base64(args[0])
			except (OSError, ValueError) as e:
				print(f"Could not read picture: {e}")
				picture = None
			if picture is not None:
				screen.on_picture_taken(picture, cmd)
			if screen.state.mode is Mode.IMAGE_CAPTURING:
				screen.close_image_capture()
	elif cmd == "pick":
		if not args:
			print("Usage: pick N PATH")
		else:
			screen.pick_image(index, args[0])
	elif cmd == "edit":
		if screen.edit_barcode(index):
			print(f"Current barcode: {screen.state.draft or '(none)'}")
			value = args[0] if args else _ask("New barcode (empty to cancel): ")
			if value == "":
				screen.cancel_barcode_edit()
			else:
				screen.set_draft(value)
				if not screen.confirm_barcode_edit():
					screen.cancel_barcode_edit()
	elif cmd == "update":
		screen.update(index)
	elif cmd == "view":
		field = VIEW_FIELDS.get(args[0] if args else "")
		if field is None:
			print("Usage: view N front|back|images")
		elif 0 <= index < len(screen.rows):
			print(describe_image(screen.image_at(index, field)) or "(empty)")
		else:
			print(f"Row {rest[0]} does not exist.")
	else:
		print(f"Unknown command '{cmd}'. Type 'help' for the list of commands.")
	return True


def main(argv: Optional[List[str]] = None) -> None:
	args = parse_args(argv)
	logging.basicConfig(
		level=logging.INFO if args.verbose else logging.WARNING,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	screen = build_screen(args)
	screen.mount()
	print("Products Image")
	_show(screen)
	print("Type 'help' for commands.")
	while True:
		try:
			line = input("intake> ")
		except EOFError:
			break
		if not run_command(screen, line):
			break


if __name__ == "__main__":
	main()
