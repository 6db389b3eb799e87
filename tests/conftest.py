"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# local repo modules
import team_card_generator.config  # noqa: E402
import team_card_generator.errors  # noqa: E402
import team_card_generator.template  # noqa: E402


#============================================
def make_png_bytes(width: int = 4, height: int = 4) -> bytes:
	"""
	Build a small solid PNG.
	"""
	image = PIL.Image.new("RGB", (width, height), (200, 220, 240))
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
	return make_png_bytes()


@pytest.fixture
def ok_fetcher(png_bytes: bytes):
	calls = []

	def fetch(lat, lng, zoom, width, height, api_key, timeout):
		calls.append((lat, lng, zoom, width, height, api_key, timeout))
		return png_bytes

	fetch.calls = calls
	return fetch


@pytest.fixture
def timeout_fetcher():
	def fetch(lat, lng, zoom, width, height, api_key, timeout):
		raise team_card_generator.errors.OverlayFetchFailed("map request timed out", timed_out=True)

	return fetch


@pytest.fixture
def overlay_config() -> team_card_generator.config.OverlayConfig:
	return team_card_generator.config.OverlayConfig(api_key="test-key")


@pytest.fixture
def template() -> team_card_generator.template.Template:
	return team_card_generator.template.load_template(team_card_generator.config.DEFAULT_TEMPLATE_PATH)
