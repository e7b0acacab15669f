import asyncio
import io
import logging
import pathlib
import unicodedata

import PIL.Image
import PIL.ImageChops
import pypdf
import pytest

import cert_mailer.config
import cert_mailer.errors
import cert_mailer.pipeline


FitStrategy = cert_mailer.config.FitStrategy


#============================================
def ink_bbox(result: cert_mailer.pipeline.RenderResult, background_path: pathlib.Path) -> tuple[int, int, int, int]:
	"""
	Bounding box of pixels that differ from the background.
	"""
	with PIL.Image.open(background_path) as background:
		difference = PIL.ImageChops.difference(result.composite, background.convert("RGB"))
	bbox = difference.getbbox()
	assert bbox is not None
	return bbox


#============================================
def test_normalize_name() -> None:
	"""
	Names are trimmed and composed.
	"""
	assert cert_mailer.pipeline.normalize_name("  Ana  ") == "Ana"
	assert cert_mailer.pipeline.normalize_name("José") == "José"
	for value in ("", "   ", "\t\n", None):
		with pytest.raises(cert_mailer.errors.InputError):
			cert_mailer.pipeline.normalize_name(value)


#============================================
def test_generate_document_single_page(diploma_config) -> None:
	"""
	A valid name produces one landscape letter page.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	data = asyncio.run(generator.generate_document("Ana"))
	assert data
	reader = pypdf.PdfReader(io.BytesIO(data))
	assert len(reader.pages) == 1
	page = reader.pages[0]
	assert float(page.mediabox.width) == pytest.approx(792.0, abs=0.01)
	assert float(page.mediabox.height) == pytest.approx(612.0, abs=0.01)


#============================================
def test_blank_name_fails_before_rendering(diploma_config, monkeypatch) -> None:
	"""
	Whitespace names are input errors and no asset is touched.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)

	def fail_load() -> None:
		raise AssertionError("background loaded for an invalid name")

	monkeypatch.setattr(generator, "load_background", fail_load)
	with pytest.raises(cert_mailer.errors.InputError):
		asyncio.run(generator.generate_document("   "))
	with pytest.raises(cert_mailer.errors.InputError):
		generator.render_document("")


#============================================
def test_sync_and_async_outputs_match(diploma_config) -> None:
	"""
	Both entry points run the same stages.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	assert generator.render_document("Ana") == asyncio.run(generator.generate_document("Ana"))


#============================================
def test_generation_is_idempotent(diploma_config) -> None:
	"""
	Repeated calls produce byte-identical composites and documents.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	first = generator.render_composite("José Á. Núñez-O'Brien")
	second = generator.render_composite("José Á. Núñez-O'Brien")
	assert first.png_bytes == second.png_bytes
	assert generator.render_document("Ana") == generator.render_document("Ana")


#============================================
def test_nfc_equivalent_names_render_identically(diploma_config) -> None:
	"""
	Decomposed and precomposed diacritics give the same pixels.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	composed = "José Núñez"
	decomposed = unicodedata.normalize("NFD", composed)
	assert composed != decomposed
	assert generator.render_composite(composed).png_bytes == generator.render_composite(decomposed).png_bytes


#============================================
def test_single_character_uses_default_size(diploma_config) -> None:
	"""
	A one letter name fits at the default size.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	result = generator.render_composite("A")
	assert result.fitted.font_size == diploma_config.default_font_size
	assert not result.fitted.clamped


#============================================
@pytest.mark.parametrize("strategy", list(FitStrategy))
def test_long_names_never_leave_the_width_band(background_path, font_path, strategy) -> None:
	"""
	A 100+ character name stays inside the width budget.
	"""
	config = cert_mailer.config.DiplomaConfig(
		background_path=background_path,
		font_path=font_path,
		fit_strategy=strategy,
	)
	generator = cert_mailer.pipeline.DiplomaGenerator(config)
	name = "Maximiliano Alejandro de la Santísima Trinidad " * 3
	assert len(name.strip()) > 100
	result = generator.render_composite(name)
	left, _top, right, _bottom = ink_bbox(result, background_path)
	assert result.fitted.rendered_width <= result.layout.max_text_width_px
	assert left >= result.layout.left_margin_px - 2
	assert right <= result.layout.left_margin_px + result.layout.max_text_width_px + 2


#============================================
def test_mixed_diacritics_fit(diploma_config, background_path) -> None:
	"""
	Accents and punctuation render inside the band and on the name line.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)
	result = generator.render_composite("José Á. Núñez-O'Brien")
	assert result.name == "José Á. Núñez-O'Brien"
	assert result.fitted.text_width <= result.layout.max_text_width_px
	left, top, right, bottom = ink_bbox(result, background_path)
	assert right - left <= result.layout.max_text_width_px + 2
	assert top < result.layout.name_y_px < bottom


#============================================
def test_missing_background_still_produces_document(tmp_path, font_path, caplog) -> None:
	"""
	Without a background the default blank canvas is used.
	"""
	config = cert_mailer.config.DiplomaConfig(
		background_path=tmp_path / "absent.png",
		font_path=font_path,
	)
	generator = cert_mailer.pipeline.DiplomaGenerator(config)
	with caplog.at_level(logging.WARNING):
		result = generator.render_composite("Ana")
		data = generator.render_document("Ana")
	assert result.composite.size == (2794, 2159)
	assert len(pypdf.PdfReader(io.BytesIO(data)).pages) == 1
	assert any(record.name == "cert_mailer.render" for record in caplog.records)


#============================================
def test_missing_font_is_degraded_not_fatal(background_path, tmp_path, caplog) -> None:
	"""
	Without the typeface the diploma is still produced, with one warning.
	"""
	config = cert_mailer.config.DiplomaConfig(
		background_path=background_path,
		font_path=tmp_path / "absent.ttf",
	)
	generator = cert_mailer.pipeline.DiplomaGenerator(config)
	with caplog.at_level(logging.WARNING, logger="cert_mailer.fonts"):
		data = asyncio.run(generator.generate_document("Ana"))
	assert len(pypdf.PdfReader(io.BytesIO(data)).pages) == 1
	font_warnings = [record for record in caplog.records if record.name == "cert_mailer.fonts"]
	assert len(font_warnings) == 1


#============================================
def test_concurrent_calls_are_independent(diploma_config) -> None:
	"""
	Concurrent generations each return their own complete document.
	"""
	generator = cert_mailer.pipeline.DiplomaGenerator(diploma_config)

	async def generate_all() -> list[bytes]:
		return await asyncio.gather(
			generator.generate_document("Ana"),
			generator.generate_document("Beatriz"),
			generator.generate_document("Ana"),
		)

	first, other, again = asyncio.run(generate_all())
	assert first == again
	assert first != other
	for data in (first, other):
		assert len(pypdf.PdfReader(io.BytesIO(data)).pages) == 1
