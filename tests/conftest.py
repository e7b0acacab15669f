"""
Pytest configuration for local imports and shared diploma fixtures.
"""

# Standard Library
import os
import pathlib
import sys

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# PIP3 modules
import PIL.Image
import pytest
import reportlab

# local repo modules
import cert_mailer.config


# half of the 300 dpi default canvas keeps tests fast
TEST_CANVAS_SIZE = (1397, 1080)
BACKGROUND_COLOR = (250, 246, 236)


#============================================
@pytest.fixture
def font_path() -> pathlib.Path:
	"""
	Bitstream Vera ships with reportlab and covers accented Latin.
	"""
	path = pathlib.Path(reportlab.__file__).parent / "fonts" / "Vera.ttf"
	assert path.exists()
	return path


#============================================
@pytest.fixture
def background_path(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	Write a plain background PNG at half the default resolution.
	"""
	path = tmp_path / "cert.png"
	PIL.Image.new("RGB", TEST_CANVAS_SIZE, BACKGROUND_COLOR).save(path, format="PNG")
	return path


#============================================
@pytest.fixture
def diploma_config(
	background_path: pathlib.Path,
	font_path: pathlib.Path,
) -> cert_mailer.config.DiplomaConfig:
	"""
	Default diploma config pointed at test assets.
	"""
	return cert_mailer.config.DiplomaConfig(
		background_path=background_path,
		font_path=font_path,
	)
