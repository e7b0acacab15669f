"""
The diploma generation pipeline.

name -> layout -> fitted text -> text layer -> composite -> PDF bytes
"""

# Standard Library
import asyncio
import dataclasses
import logging
import unicodedata

# PIP3 modules
import PIL.Image

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.document
import cert_mailer.errors
import cert_mailer.fitting
import cert_mailer.fonts
import cert_mailer.layout
import cert_mailer.render


log = logging.getLogger(__name__)

DiplomaConfig = cm.config.DiplomaConfig
FittedText = cm.fitting.FittedText
ResolvedLayout = cm.layout.ResolvedLayout
Typeface = cm.fonts.Typeface
InputError = cm.errors.InputError


@dataclasses.dataclass(frozen=True)
class RenderResult:
	name: str
	layout: ResolvedLayout
	fitted: FittedText
	composite: PIL.Image.Image
	png_bytes: bytes


#============================================
def normalize_name(name: object) -> str:
	"""
	Trim and NFC-normalize a recipient name.

	Args:
		name: Raw name value.

	Returns:
		Normalized name.
	"""
	if name is None:
		raise InputError("A recipient name is required")
	text = unicodedata.normalize("NFC", str(name).strip())
	if not text:
		raise InputError("A recipient name is required")
	return text


class DiplomaGenerator:
	"""
	Renders diplomas for one immutable configuration.

	The generator keeps no per-call state: every call loads the assets,
	renders and serializes from scratch.
	"""

	def __init__(self, config: DiplomaConfig | None = None) -> None:
		self.config = config or DiplomaConfig()

	def load_typeface(self) -> Typeface:
		return cm.fonts.load_typeface(self.config.font_path)

	def load_background(self) -> PIL.Image.Image:
		return cm.render.load_background(self.config)

	def resolve(self, background: PIL.Image.Image) -> ResolvedLayout:
		return cm.layout.resolve_layout(self.config.layout, background.width, background.height)

	def fit(self, name: str, resolved: ResolvedLayout, typeface: Typeface) -> FittedText:
		fitter = cm.fitting.build_fitter(self.config, typeface, resolved.pixels_per_point)
		return fitter.fit_text(name, resolved.max_text_width_px)

	def draw(
		self,
		name: str,
		background: PIL.Image.Image,
		resolved: ResolvedLayout,
		fitted: FittedText,
		typeface: Typeface,
	) -> tuple[PIL.Image.Image, bytes]:
		layer = cm.render.render_text_layer(name, fitted, resolved, typeface, self.config.ink_color)
		composite = cm.render.composite_layers(background, layer)
		return (composite, cm.render.encode_png(composite))

	def wrap(self, name: str, png_bytes: bytes) -> bytes:
		title = f"{cm.config.DOCUMENT_TITLE} - {name}"
		return cm.document.wrap_document(png_bytes, self.config.layout, title)

	def render_composite(self, name: object) -> RenderResult:
		"""
		Run every stage up to the flattened composite.

		Args:
			name: Raw recipient name.

		Returns:
			RenderResult.
		"""
		clean_name = normalize_name(name)
		background = self.load_background()
		resolved = self.resolve(background)
		typeface = self.load_typeface()
		fitted = self.fit(clean_name, resolved, typeface)
		composite, png_bytes = self.draw(clean_name, background, resolved, fitted, typeface)
		return RenderResult(clean_name, resolved, fitted, composite, png_bytes)

	def render_document(self, name: object) -> bytes:
		"""
		Generate the diploma PDF synchronously.

		Args:
			name: Raw recipient name.

		Returns:
			PDF bytes.
		"""
		result = self.render_composite(name)
		data = self.wrap(result.name, result.png_bytes)
		log.info("Diploma for %r: size %d, %d bytes", result.name, result.fitted.font_size, len(data))
		return data

	async def generate_document(self, name: object) -> bytes:
		"""
		Generate the diploma PDF without blocking the event loop.

		Stages run in order; each blocking stage runs in a worker thread.

		Args:
			name: Raw recipient name.

		Returns:
			PDF bytes.
		"""
		clean_name = normalize_name(name)
		background = await asyncio.to_thread(self.load_background)
		resolved = self.resolve(background)
		typeface = await asyncio.to_thread(self.load_typeface)
		fitted = await asyncio.to_thread(self.fit, clean_name, resolved, typeface)
		_composite, png_bytes = await asyncio.to_thread(
			self.draw, clean_name, background, resolved, fitted, typeface
		)
		data = await asyncio.to_thread(self.wrap, clean_name, png_bytes)
		log.info("Diploma for %r: size %d, %d bytes", clean_name, fitted.font_size, len(data))
		return data
