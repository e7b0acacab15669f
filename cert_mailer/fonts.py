"""
Typeface loading and text measurement.
"""

# Standard Library
import io
import logging
import pathlib

# PIP3 modules
import PIL.ImageFont

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.errors


log = logging.getLogger(__name__)

AssetError = cm.errors.AssetError
RenderingError = cm.errors.RenderingError


class Typeface:
	"""
	A TrueType face that can be instantiated at any size.

	Built once per generation call. When no font file is available the
	face falls back to Pillow's bundled default, which may lack some
	accented glyphs.
	"""

	def __init__(self, font_bytes: bytes | None, source: str) -> None:
		self.font_bytes = font_bytes
		self.source = source
		self._fonts: dict[int, PIL.ImageFont.FreeTypeFont | PIL.ImageFont.ImageFont] = {}

	@property
	def degraded(self) -> bool:
		return self.font_bytes is None

	def font(self, size: int) -> PIL.ImageFont.FreeTypeFont | PIL.ImageFont.ImageFont:
		if size not in self._fonts:
			try:
				if self.font_bytes is None:
					font = PIL.ImageFont.load_default(size=size)
				else:
					font = PIL.ImageFont.truetype(io.BytesIO(self.font_bytes), size=size)
			except OSError as err:
				raise RenderingError(f"Cannot decode typeface {self.source} at size {size}: {err}") from err
			self._fonts[size] = font
		return self._fonts[size]

	def measure(self, text: str, size: int) -> float:
		"""
		Measure the advance width of text without drawing it.

		Args:
			text: Text to measure.
			size: Font size in pixels.

		Returns:
			Width in pixels.
		"""
		return self.font(size).getlength(text)

	def __repr__(self) -> str:
		return f"Typeface({self.source!r}, degraded={self.degraded})"


#============================================
def load_typeface(path: pathlib.Path) -> Typeface:
	"""
	Load the diploma typeface, substituting the default face if missing.

	Args:
		path: TrueType or OpenType font file.

	Returns:
		Typeface.
	"""
	path = pathlib.Path(path)
	if not path.exists():
		log.warning(
			"Font file %s not found; using the default face, accented names may render incorrectly",
			path,
		)
		return Typeface(None, "default")

	try:
		font_bytes = path.read_bytes()
	except OSError as err:
		raise AssetError(f"Cannot read font file {path}: {err}") from err

	typeface = Typeface(font_bytes, str(path))
	# decode once up front so a corrupt file fails before any drawing
	typeface.font(cm.config.MIN_FONT_SIZE)
	return typeface
