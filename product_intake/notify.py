class Notifier:
	"""Blocking user-facing alerts."""

	def alert(self, title: str, message: str) -> None:
		raise NotImplementedError


class ConsoleNotifier(Notifier):
	def alert(self, title: str, message: str) -> None:
		print(f"{title}: {message}")
