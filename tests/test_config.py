import dataclasses

import pytest

import cert_mailer.config


#============================================
def test_mm_to_points_uses_fixed_ratio() -> None:
	"""
	Check the millimeter to point ratio and the letter page size.
	"""
	assert cert_mailer.config.mm_to_points(1.0) == pytest.approx(2.83465)
	assert cert_mailer.config.mm_to_points(279.4) == pytest.approx(792.0, abs=0.01)
	assert cert_mailer.config.mm_to_points(215.9) == pytest.approx(612.0, abs=0.01)


#============================================
def test_mm_to_pixels_rounds_half_up() -> None:
	"""
	Check pixel conversion against the raster extent.
	"""
	assert cert_mailer.config.mm_to_pixels(279.4, 279.4, 2794) == 2794
	assert cert_mailer.config.mm_to_pixels(90.0, 215.9, 2159) == 900
	# 0.5 px exactly rounds up
	assert cert_mailer.config.mm_to_pixels(1.0, 4.0, 2) == 1
	assert cert_mailer.config.mm_to_pixels(0.0, 279.4, 2794) == 0


#============================================
def test_layout_spec_derived_values() -> None:
	"""
	Check the name line and width budget of the default layout.
	"""
	layout = cert_mailer.config.LayoutSpec()
	assert layout.name_y_mm == pytest.approx(90.0)
	assert layout.max_text_width_mm == pytest.approx(249.4)
	assert layout.left_margin_mm == pytest.approx(15.0)


#============================================
def test_layout_spec_rejects_impossible_layouts() -> None:
	"""
	Margins wider than the page or a name line below it are errors.
	"""
	with pytest.raises(ValueError):
		cert_mailer.config.LayoutSpec(side_margin_total_mm=279.4)
	with pytest.raises(ValueError):
		cert_mailer.config.LayoutSpec(top_margin_mm=200.0, name_offset_mm=20.0)
	with pytest.raises(ValueError):
		cert_mailer.config.LayoutSpec(page_width_mm=0.0)


#============================================
def test_diploma_config_is_immutable_and_validated() -> None:
	"""
	Config values are frozen and font sizes must be ordered.
	"""
	config = cert_mailer.config.DiplomaConfig()
	assert config.fit_strategy is cert_mailer.config.FitStrategy.ITERATIVE_SHRINK
	assert config.ink_color == "#131A6D"
	with pytest.raises(dataclasses.FrozenInstanceError):
		config.ink_color = "#000000"
	with pytest.raises(ValueError):
		cert_mailer.config.DiplomaConfig(default_font_size=20, min_font_size=32)
	with pytest.raises(ValueError):
		cert_mailer.config.DiplomaConfig(font_size_step=0)


#============================================
@pytest.mark.parametrize(
	"field",
	["ink_color", "fallback_canvas_color"],
)
@pytest.mark.parametrize(
	"value",
	["131A6D", "#131A6", "#13 A6D", "navy", ""],
)
def test_diploma_config_rejects_malformed_colors(field: str, value: str) -> None:
	"""
	Colors must be written as #RRGGBB.
	"""
	with pytest.raises(ValueError):
		cert_mailer.config.DiplomaConfig(**{field: value})


#============================================
def test_event_details_defaults() -> None:
	"""
	An unset event title reads differently in the subject and the body.
	"""
	event = cert_mailer.config.EventDetails()
	assert event.title is None
	assert event.subject_title == "Evento"
	assert event.body_title == "nuestro evento"
	named = cert_mailer.config.EventDetails(title="Congreso")
	assert named.subject_title == "Congreso"
	assert named.body_title == "Congreso"


#============================================
def test_fit_strategy_values() -> None:
	"""
	Strategies are selectable by their string names.
	"""
	assert cert_mailer.config.FitStrategy("iterative-shrink") is cert_mailer.config.FitStrategy.ITERATIVE_SHRINK
	assert cert_mailer.config.FitStrategy("forced-justification") is cert_mailer.config.FitStrategy.FORCED_JUSTIFICATION
