"""
Shared configuration, constants and unit conversion.
"""

# Standard Library
import dataclasses
import enum
import math
import pathlib
import re


POINTS_PER_MM = 2.83465

PAGE_WIDTH_MM = 279.4
PAGE_HEIGHT_MM = 215.9
TOP_MARGIN_MM = 20.0
NAME_OFFSET_MM = 70.0
SIDE_MARGIN_TOTAL_MM = 30.0

ASSETS_DIR = pathlib.Path(__file__).resolve().parent.parent / "assets"
DEFAULT_BACKGROUND_PATH = ASSETS_DIR / "cert.png"
DEFAULT_FONT_PATH = ASSETS_DIR / "fonts" / "NotoSerif-Regular.ttf"

# approx 300 dpi for landscape letter
FALLBACK_CANVAS_WIDTH = 2794
FALLBACK_CANVAS_HEIGHT = 2159
FALLBACK_CANVAS_COLOR = "#FFFFFF"

INK_COLOR = "#131A6D"
DEFAULT_FONT_SIZE = 72
MIN_FONT_SIZE = 32
FONT_SIZE_STEP = 2
# (max characters, font size); None is the open-ended last band
LENGTH_SIZE_BANDS = (
	(12, 72),
	(20, 60),
	(30, 48),
	(45, 40),
	(None, 32),
)

DOCUMENT_TITLE = "Diploma"

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

# event wording when EVENT_TITLE and friends are unset
DEFAULT_SUBJECT_TITLE = "Evento"
DEFAULT_BODY_TITLE = "nuestro evento"
DEFAULT_SUBTITLE = "Diploma"
DEFAULT_ORGANIZATION = "Organización"


class FitStrategy(str, enum.Enum):
	ITERATIVE_SHRINK = "iterative-shrink"
	FORCED_JUSTIFICATION = "forced-justification"


@dataclasses.dataclass(frozen=True)
class LayoutSpec:
	page_width_mm: float = PAGE_WIDTH_MM
	page_height_mm: float = PAGE_HEIGHT_MM
	top_margin_mm: float = TOP_MARGIN_MM
	name_offset_mm: float = NAME_OFFSET_MM
	side_margin_total_mm: float = SIDE_MARGIN_TOTAL_MM

	def __post_init__(self) -> None:
		if self.page_width_mm <= 0.0 or self.page_height_mm <= 0.0:
			raise ValueError("Page dimensions must be positive")
		if self.max_text_width_mm <= 0.0:
			raise ValueError(
				f"Side margin {self.side_margin_total_mm}mm leaves no room on a "
				f"{self.page_width_mm}mm page"
			)
		if not 0.0 <= self.name_y_mm <= self.page_height_mm:
			raise ValueError(
				f"Name line at {self.name_y_mm}mm is outside a "
				f"{self.page_height_mm}mm page"
			)

	@property
	def name_y_mm(self) -> float:
		return self.top_margin_mm + self.name_offset_mm

	@property
	def max_text_width_mm(self) -> float:
		return self.page_width_mm - self.side_margin_total_mm

	@property
	def left_margin_mm(self) -> float:
		return (self.page_width_mm - self.max_text_width_mm) / 2.0


@dataclasses.dataclass(frozen=True)
class DiplomaConfig:
	layout: LayoutSpec = dataclasses.field(default_factory=LayoutSpec)
	background_path: pathlib.Path = DEFAULT_BACKGROUND_PATH
	font_path: pathlib.Path = DEFAULT_FONT_PATH
	ink_color: str = INK_COLOR
	default_font_size: int = DEFAULT_FONT_SIZE
	min_font_size: int = MIN_FONT_SIZE
	font_size_step: int = FONT_SIZE_STEP
	fit_strategy: FitStrategy = FitStrategy.ITERATIVE_SHRINK
	length_size_bands: tuple[tuple[int | None, int], ...] = LENGTH_SIZE_BANDS
	fallback_canvas_size: tuple[int, int] = (FALLBACK_CANVAS_WIDTH, FALLBACK_CANVAS_HEIGHT)
	fallback_canvas_color: str = FALLBACK_CANVAS_COLOR

	def __post_init__(self) -> None:
		if self.min_font_size <= 0 or self.default_font_size < self.min_font_size:
			raise ValueError(
				f"Font sizes must satisfy 0 < min ({self.min_font_size}) "
				f"<= default ({self.default_font_size})"
			)
		if self.font_size_step <= 0:
			raise ValueError("Font size step must be positive")
		width, height = self.fallback_canvas_size
		if width <= 0 or height <= 0:
			raise ValueError("Fallback canvas size must be positive")
		for label, color in (("Ink", self.ink_color), ("Fallback canvas", self.fallback_canvas_color)):
			if not is_hex_color(color):
				raise ValueError(f"{label} color must look like #AABBCC, got {color!r}")


@dataclasses.dataclass(frozen=True)
class EventDetails:
	title: str | None = None
	subtitle: str = DEFAULT_SUBTITLE
	organization: str = DEFAULT_ORGANIZATION

	@property
	def subject_title(self) -> str:
		return self.title or DEFAULT_SUBJECT_TITLE

	@property
	def body_title(self) -> str:
		return self.title or DEFAULT_BODY_TITLE


#============================================
def is_hex_color(value) -> bool:
	"""
	Check for a "#RRGGBB" color string.
	"""
	return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimeters to PDF points.

	Args:
		value: Millimeters value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_MM


#============================================
def mm_to_pixels(value: float, total_mm: float, total_px: int) -> int:
	"""
	Convert millimeters to pixels on a raster spanning total_mm.

	Halves round up so results match the layout tables.

	Args:
		value: Millimeters value.
		total_mm: Physical extent of the raster in millimeters.
		total_px: Pixel extent of the raster.

	Returns:
		Pixel value.
	"""
	return int(math.floor(value / total_mm * total_px + 0.5))
