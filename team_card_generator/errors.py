"""
Exception types for card generation.
"""


class TeamCardError(Exception):
	"""Base error for the card generator."""


class InvalidColorFormat(TeamCardError, ValueError):
	"""Color string is not '#' followed by six hex digits."""


class TemplateNotLoaded(TeamCardError):
	"""No base template is available; nothing can be generated."""


class OverlayFetchFailed(TeamCardError):
	"""Static map image could not be fetched."""

	def __init__(self, message: str, timed_out: bool = False) -> None:
		super().__init__(message)
		self.timed_out = timed_out


class RecordGenerationFailed(TeamCardError):
	"""A single record could not be turned into a document."""


class RenderError(TeamCardError):
	"""Rasterizer rejected a document."""
