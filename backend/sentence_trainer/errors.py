from __future__ import annotations


class TrainerError(Exception):
	"""Base class for errors raised by the trainer core."""


class GenerationError(TrainerError):
	"""A gateway call failed: transport error, bad payload or off-schema response."""

	def __init__(self, operation: str, message: str) -> None:
		super().__init__(f"{operation} generation failed: {message}")
		self.operation = operation
		self.message = message


class ValidationError(TrainerError):
	"""An action was rejected locally before any request was issued."""
