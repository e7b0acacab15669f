"""
Exception types raised by the diploma pipeline and delivery transports.
"""


class DiplomaError(Exception):
	"""Base class for all cert_mailer failures."""


class InputError(DiplomaError, ValueError):
	"""Recipient name or address is empty or invalid."""


class AssetError(DiplomaError):
	"""A static asset exists but cannot be read or decoded."""


class RenderingError(DiplomaError):
	"""Text measurement or layer rendering failed."""


class SerializationError(DiplomaError):
	"""The PDF document could not be written completely."""


class DeliveryError(DiplomaError):
	"""The mail transport rejected or failed to send a message."""
