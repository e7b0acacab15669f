"""
Background loading, text layer rendering and compositing.
"""

# Standard Library
import io
import logging
import math
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.errors
import cert_mailer.fitting
import cert_mailer.fonts
import cert_mailer.layout


log = logging.getLogger(__name__)

DiplomaConfig = cm.config.DiplomaConfig
FittedText = cm.fitting.FittedText
Typeface = cm.fonts.Typeface
ResolvedLayout = cm.layout.ResolvedLayout

AssetError = cm.errors.AssetError
RenderingError = cm.errors.RenderingError


#============================================
def parse_hex_color(value: str) -> tuple[int, int, int]:
	"""
	Parse a hex color string into RGB bytes.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (r, g, b) in 0-255 range.
	"""
	if not cm.config.is_hex_color(value):
		raise ValueError(f"Expected a color like #AABBCC, got {value!r}")
	red = int(value[1:3], 16)
	green = int(value[3:5], 16)
	blue = int(value[5:7], 16)
	return (red, green, blue)


#============================================
def build_fallback_canvas(config: DiplomaConfig) -> PIL.Image.Image:
	"""
	Create the blank canvas used when the background is missing.
	"""
	red, green, blue = parse_hex_color(config.fallback_canvas_color)
	return PIL.Image.new("RGBA", config.fallback_canvas_size, (red, green, blue, 255))


#============================================
def load_background(config: DiplomaConfig) -> PIL.Image.Image:
	"""
	Load the background raster as RGBA.

	A missing file is replaced by a blank canvas; a file that exists but
	cannot be decoded is an error.

	Args:
		config: Diploma configuration.

	Returns:
		RGBA image.
	"""
	path = pathlib.Path(config.background_path)
	if not path.exists():
		width, height = config.fallback_canvas_size
		log.warning("Background %s not found; using a blank %dx%d canvas", path, width, height)
		return build_fallback_canvas(config)

	try:
		with PIL.Image.open(path) as image:
			image.load()
			background = image.convert("RGBA")
	except (OSError, PIL.Image.DecompressionBombError) as err:
		raise AssetError(f"Cannot decode background {path}: {err}") from err

	if background.width <= 0 or background.height <= 0:
		raise AssetError(f"Background {path} has no pixels")
	log.debug("Background %s: %dx%d px", path, background.width, background.height)
	return background


#============================================
def draw_justified_run(
	layer: PIL.Image.Image,
	name: str,
	font,
	fill: tuple[int, int, int, int],
	center: tuple[int, int],
	target_width: float,
) -> None:
	"""
	Draw a text run stretched or compressed to a target advance width.

	The run is drawn from its baseline origin into a strip covering both
	the advance box and any ink that overhangs it. The strip is scaled so
	that box spans target_width, and the scaled ink is centered on the
	anchor, so it stays inside a band of target_width around it.

	Args:
		layer: Transparent RGBA layer to draw on.
		name: Text to draw.
		font: Pillow font.
		fill: RGBA ink.
		center: Anchor (x, y) for the middle of the run.
		target_width: Advance width in pixels after scaling.
	"""
	advance = font.getlength(name)
	ink_left, ink_top, ink_right, ink_bottom = font.getbbox(name, anchor="ls")
	span_left = min(0.0, ink_left)
	span_right = max(advance, ink_right)
	span = span_right - span_left
	if advance <= 0.0 or ink_right <= ink_left or ink_bottom <= ink_top:
		PIL.ImageDraw.Draw(layer).text(center, name, font=font, fill=fill, anchor="mm")
		return

	origin_x = -int(math.floor(span_left))
	strip_width = int(math.ceil(span_right)) + origin_x
	strip_height = int(ink_bottom - ink_top)
	strip = PIL.Image.new("RGBA", (strip_width, strip_height), fill[:3] + (0,))
	PIL.ImageDraw.Draw(strip).text((origin_x, -ink_top), name, font=font, fill=fill, anchor="ls")

	scale = target_width / span
	scaled_width = max(1, int(round(strip_width * scale)))
	strip = strip.resize((scaled_width, strip_height), PIL.Image.Resampling.LANCZOS)

	# ink middle in scaled strip coordinates
	ink_middle = (origin_x + (ink_left + ink_right) / 2.0) * scale
	x = int(round(center[0] - ink_middle))
	# keep the vertical placement of a plain anchor="mm" draw
	middle_top = font.getbbox(name, anchor="mm")[1]
	y = int(center[1] + middle_top)
	# the layer is empty here so a plain paste keeps the strip alpha intact
	layer.paste(strip, (x, y))


#============================================
def render_text_layer(
	name: str,
	fitted: FittedText,
	resolved: ResolvedLayout,
	typeface: Typeface,
	ink_color: str,
) -> PIL.Image.Image:
	"""
	Render the name alone on a transparent layer the size of the background.

	Args:
		name: Normalized recipient name.
		fitted: Fitting result.
		resolved: Resolved layout.
		typeface: Typeface to draw with.
		ink_color: Hex ink color.

	Returns:
		RGBA layer.
	"""
	size = (resolved.image_width_px, resolved.image_height_px)
	red, green, blue = parse_hex_color(ink_color)
	# transparent ink so antialiased edges keep the ink hue
	layer = PIL.Image.new("RGBA", size, (red, green, blue, 0))
	fill = (red, green, blue, 255)
	center = (resolved.center_x_px, resolved.name_y_px)

	try:
		font = typeface.font(fitted.pixel_size)
		if fitted.target_width is not None:
			draw_justified_run(layer, name, font, fill, center, fitted.target_width)
		else:
			PIL.ImageDraw.Draw(layer).text(center, name, font=font, fill=fill, anchor="mm")
	except (OSError, ValueError) as err:
		raise RenderingError(f"Cannot render name {name!r}: {err}") from err
	return layer


#============================================
def composite_layers(background: PIL.Image.Image, layer: PIL.Image.Image) -> PIL.Image.Image:
	"""
	Flatten the text layer onto the background.

	Args:
		background: RGBA background.
		layer: RGBA text layer of the same size.

	Returns:
		RGB composite at the background size.
	"""
	if background.size != layer.size:
		raise RenderingError(
			f"Text layer {layer.size} does not match background {background.size}"
		)
	combined = PIL.Image.alpha_composite(background.convert("RGBA"), layer)
	return combined.convert("RGB")


#============================================
def encode_png(image: PIL.Image.Image) -> bytes:
	"""
	Encode an image as PNG bytes.

	Args:
		image: Image to encode.

	Returns:
		PNG bytes.
	"""
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()
