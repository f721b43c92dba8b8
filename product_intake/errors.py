class IntakeError(Exception):
	"""Base for failures that are reported to the user as an alert."""

	title = "Error"

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class PermissionDenied(IntakeError):
	title = "Permission required"


class PreconditionFailed(IntakeError):
	pass


class ValidationError(IntakeError):
	title = "Validation Error"


class CompressionError(IntakeError):
	pass


class NetworkError(IntakeError):
	def __init__(self, message: str, status_code=None):
		super().__init__(message)
		self.status_code = status_code


class MalformedResponse(IntakeError):
	pass


class RowIndexError(IntakeError, IndexError):
	pass
