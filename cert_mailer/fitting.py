"""
Text fitting strategies for the name line.

Font sizes are expressed in points and widths in background pixels; the
fitter converts between them with the raster's pixels-per-point scale.
"""

# Standard Library
import dataclasses
import logging

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.fonts


log = logging.getLogger(__name__)

FitStrategy = cm.config.FitStrategy
DiplomaConfig = cm.config.DiplomaConfig
Typeface = cm.fonts.Typeface


@dataclasses.dataclass(frozen=True)
class FittedText:
	strategy: FitStrategy
	font_size: int
	pixel_size: int
	text_width: float
	max_width: float
	target_width: float | None = None
	clamped: bool = False

	@property
	def rendered_width(self) -> float:
		"""Width in pixels the name occupies once drawn."""
		if self.target_width is not None:
			return self.target_width
		return self.text_width


class TextFitter:
	"""
	Chooses a font size (and optionally a forced width) for a name.
	"""

	strategy: FitStrategy

	def __init__(self, typeface: Typeface, pixels_per_point: float = 1.0) -> None:
		if pixels_per_point <= 0.0:
			raise ValueError("pixels_per_point must be positive")
		self.typeface = typeface
		self.pixels_per_point = pixels_per_point

	def pixel_size(self, font_size: int) -> int:
		return max(1, int(round(font_size * self.pixels_per_point)))

	def measure(self, name: str, font_size: int) -> float:
		return self.typeface.measure(name, self.pixel_size(font_size))

	def fit_text(self, name: str, max_width: float) -> FittedText:
		raise NotImplementedError


class IterativeShrinkFitter(TextFitter):
	"""
	Steps the font size down until the measured name fits.

	At the floor size the font stops shrinking; a name that still overflows
	is compressed horizontally to the budget instead of drawn illegibly small.
	"""

	strategy = FitStrategy.ITERATIVE_SHRINK

	def __init__(
		self,
		typeface: Typeface,
		default_size: int,
		min_size: int,
		step: int,
		pixels_per_point: float = 1.0,
	) -> None:
		super().__init__(typeface, pixels_per_point)
		self.default_size = default_size
		self.min_size = min_size
		self.step = step

	def fit_text(self, name: str, max_width: float) -> FittedText:
		font_size = self.default_size
		text_width = self.measure(name, font_size)
		while text_width > max_width and font_size > self.min_size:
			font_size = max(self.min_size, font_size - self.step)
			text_width = self.measure(name, font_size)

		clamped = text_width > max_width
		target_width = None
		if clamped:
			# floor reached, compress the run horizontally instead
			target_width = max_width
			log.warning(
				"Name %r is %.1fpx wide at the minimum size %d; compressing to the %.1fpx budget",
				name,
				text_width,
				font_size,
				max_width,
			)
		log.debug("Fitted %r at size %d (%.1fpx of %.1fpx)", name, font_size, text_width, max_width)
		return FittedText(
			strategy=self.strategy,
			font_size=font_size,
			pixel_size=self.pixel_size(font_size),
			text_width=text_width,
			max_width=max_width,
			target_width=target_width,
			clamped=clamped,
		)


class ForcedJustificationFitter(TextFitter):
	"""
	Picks a size from the name length and stretches the run to the full width.
	"""

	strategy = FitStrategy.FORCED_JUSTIFICATION

	def __init__(
		self,
		typeface: Typeface,
		size_bands: tuple[tuple[int | None, int], ...],
		pixels_per_point: float = 1.0,
	) -> None:
		super().__init__(typeface, pixels_per_point)
		if not size_bands:
			raise ValueError("At least one length band is required")
		self.size_bands = size_bands

	def size_for_length(self, length: int) -> int:
		"""
		Look up the base font size for a name length.

		Args:
			length: Number of characters.

		Returns:
			Font size in points.
		"""
		for max_chars, font_size in self.size_bands:
			if max_chars is None or length <= max_chars:
				return font_size
		return self.size_bands[-1][1]

	def fit_text(self, name: str, max_width: float) -> FittedText:
		font_size = self.size_for_length(len(name))
		text_width = self.measure(name, font_size)
		log.debug(
			"Justified %r at size %d from %.1fpx to %.1fpx",
			name,
			font_size,
			text_width,
			max_width,
		)
		return FittedText(
			strategy=self.strategy,
			font_size=font_size,
			pixel_size=self.pixel_size(font_size),
			text_width=text_width,
			max_width=max_width,
			target_width=max_width,
		)


#============================================
def build_fitter(
	config: DiplomaConfig,
	typeface: Typeface,
	pixels_per_point: float = 1.0,
) -> TextFitter:
	"""
	Build the text fitter selected by the configuration.

	Args:
		config: Diploma configuration.
		typeface: Loaded typeface used for measurement.
		pixels_per_point: Raster pixels per PDF point.

	Returns:
		TextFitter instance.
	"""
	strategy = FitStrategy(config.fit_strategy)
	if strategy is FitStrategy.FORCED_JUSTIFICATION:
		return ForcedJustificationFitter(typeface, config.length_size_bands, pixels_per_point)
	return IterativeShrinkFitter(
		typeface,
		config.default_font_size,
		config.min_font_size,
		config.font_size_step,
		pixels_per_point,
	)
