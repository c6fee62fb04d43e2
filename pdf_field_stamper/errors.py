"""
Error types raised by placement and rendering.
"""


class ValidationError(ValueError):
	"""Malformed field payload, field record or render request."""


class DecodeError(ValueError):
	"""Bitmap payload that no supported codec can decode."""


class GeometryPrecondition(AssertionError):
	"""Zero or negative dimension passed to a geometry helper."""
