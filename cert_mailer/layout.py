"""
Layout resolution in point and pixel space.
"""

# Standard Library
import dataclasses

# local repo modules
import cert_mailer as cm
import cert_mailer.config


LayoutSpec = cm.config.LayoutSpec

FALLBACK_CANVAS_WIDTH = cm.config.FALLBACK_CANVAS_WIDTH
FALLBACK_CANVAS_HEIGHT = cm.config.FALLBACK_CANVAS_HEIGHT


@dataclasses.dataclass(frozen=True)
class ResolvedLayout:
	page_width_pt: float
	page_height_pt: float
	left_margin_pt: float
	max_text_width_pt: float
	name_y_pt: float
	image_width_px: int
	image_height_px: int
	left_margin_px: int
	max_text_width_px: int
	center_x_px: int
	name_y_px: int

	@property
	def pixels_per_point(self) -> float:
		return self.image_width_px / self.page_width_pt


#============================================
def resolve_layout(
	layout: LayoutSpec,
	image_width_px: int | None,
	image_height_px: int | None,
) -> ResolvedLayout:
	"""
	Resolve the name anchor and width budget for a background raster.

	Vertical positions are measured from the top of the page in both
	spaces. Unknown or non-positive raster dimensions fall back to the
	default canvas size so the ratios stay valid.

	Args:
		layout: Physical page layout.
		image_width_px: Background width in pixels.
		image_height_px: Background height in pixels.

	Returns:
		ResolvedLayout.
	"""
	if not image_width_px or not image_height_px or image_width_px <= 0 or image_height_px <= 0:
		image_width_px = FALLBACK_CANVAS_WIDTH
		image_height_px = FALLBACK_CANVAS_HEIGHT

	width_mm = layout.page_width_mm
	height_mm = layout.page_height_mm

	left_margin_px = cm.config.mm_to_pixels(layout.left_margin_mm, width_mm, image_width_px)
	max_text_width_px = cm.config.mm_to_pixels(layout.max_text_width_mm, width_mm, image_width_px)
	name_y_px = cm.config.mm_to_pixels(layout.name_y_mm, height_mm, image_height_px)

	return ResolvedLayout(
		page_width_pt=cm.config.mm_to_points(width_mm),
		page_height_pt=cm.config.mm_to_points(height_mm),
		left_margin_pt=cm.config.mm_to_points(layout.left_margin_mm),
		max_text_width_pt=cm.config.mm_to_points(layout.max_text_width_mm),
		name_y_pt=cm.config.mm_to_points(layout.name_y_mm),
		image_width_px=image_width_px,
		image_height_px=image_height_px,
		left_margin_px=left_margin_px,
		max_text_width_px=max_text_width_px,
		center_x_px=image_width_px // 2,
		name_y_px=name_y_px,
	)
